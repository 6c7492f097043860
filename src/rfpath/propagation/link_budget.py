"""
VHF/UHF Link Budget Calculator

Point-to-point link budget for a terrestrial path, in both directions:
- Free space path loss
- Effective radiated power (transmitter power, antenna gain, feeder loss)
- Received power, link margin against receiver sensitivity
- Fade margin against the SNR required by the modulation scheme

Power is carried in dBm and gain in dBi throughout; helpers convert from
watts and dBd.
"""

import math
from dataclasses import dataclass
from enum import Enum
from typing import Tuple
import logging

from ..common.constants import DIPOLE_GAIN_DBI, FSPL_CONSTANT_KM_MHZ, LINK_QUALITY_THRESHOLDS
from ..common.exceptions import InvalidInputError, DegenerateGeometryError

logger = logging.getLogger(__name__)


def watts_to_dbm(watts: float) -> float:
    """Convert watts to dBm."""
    if not watts > 0:
        raise InvalidInputError(f"Power must be positive to express in dBm, got {watts} W")
    return 10 * math.log10(watts * 1000)


def dbm_to_watts(dbm: float) -> float:
    """Convert dBm to watts."""
    return 10 ** (dbm / 10) / 1000


def dbd_to_dbi(dbd: float) -> float:
    """Convert gain relative to a dipole into gain relative to isotropic."""
    return dbd + DIPOLE_GAIN_DBI


def dbi_to_dbd(dbi: float) -> float:
    """Convert gain relative to isotropic into gain relative to a dipole."""
    return dbi - DIPOLE_GAIN_DBI


def free_space_path_loss(distance_km: float, frequency_mhz: float) -> float:
    """
    Free Space Path Loss

    FSPL(dB) = 20*log10(d) + 20*log10(f) + 32.45, d in km and f in MHz

    Raises:
        DegenerateGeometryError: distance is zero or negative
        InvalidInputError: frequency is zero or negative
    """
    if not (math.isfinite(frequency_mhz) and frequency_mhz > 0):
        raise InvalidInputError(f"Frequency must be positive, got {frequency_mhz}")
    if not (math.isfinite(distance_km) and distance_km > 0):
        raise DegenerateGeometryError(f"FSPL undefined for distance {distance_km} km")

    return 20 * math.log10(distance_km) + 20 * math.log10(frequency_mhz) + FSPL_CONSTANT_KM_MHZ


def effective_radiated_power(tx_power_dbm: float, antenna_gain_dbi: float, cable_loss_db: float) -> float:
    """ERP in dBm."""
    return tx_power_dbm + antenna_gain_dbi - cable_loss_db


def received_power(erp_dbm: float, fspl_db: float, rx_antenna_gain_dbi: float, rx_cable_loss_db: float) -> float:
    """Power at the receiver input in dBm."""
    return erp_dbm - fspl_db + rx_antenna_gain_dbi - rx_cable_loss_db


def link_margin(received_power_dbm: float, rx_sensitivity_dbm: float) -> float:
    """Received power in excess of receiver sensitivity (dB)."""
    return received_power_dbm - rx_sensitivity_dbm


def fade_margin(link_margin_db: float, required_snr_db: float) -> float:
    """Link margin in excess of the SNR the modulation needs (dB)."""
    return link_margin_db - required_snr_db


@dataclass(frozen=True)
class ModulationProfile:
    """Receiver sensitivity and required SNR for a modulation scheme."""
    sensitivity_dbm: float
    required_snr_db: float

    @classmethod
    def custom(cls, sensitivity_dbm: float, required_snr_db: float) -> 'ModulationProfile':
        """User-supplied profile for modulations without a preset."""
        if not (math.isfinite(sensitivity_dbm) and math.isfinite(required_snr_db)):
            raise InvalidInputError("Custom modulation values must be finite")
        return cls(sensitivity_dbm=sensitivity_dbm, required_snr_db=required_snr_db)


class Modulation(Enum):
    """Common VHF/UHF modulation presets."""
    FM_25KHZ = "FM 25kHz"
    FM_12_5KHZ = "FM 12.5kHz"
    DMR = "DMR"
    P25 = "P25"
    DSTAR = "D-STAR"
    SSB = "SSB"
    CW = "CW"
    LORA_SF7 = "LoRa SF7"
    LORA_SF12 = "LoRa SF12"
    CUSTOM = "Custom"

    @property
    def profile(self) -> ModulationProfile:
        """Preset profile; CUSTOM has none and must use ModulationProfile.custom()."""
        if self is Modulation.CUSTOM:
            raise InvalidInputError("Custom modulation needs explicit sensitivity and SNR")
        return MODULATION_PROFILES[self]

    @classmethod
    def from_name(cls, name: str) -> 'Modulation':
        """Look up a modulation by display name or enum name, case-insensitive."""
        key = name.strip().lower()
        for modulation in cls:
            if key in (modulation.value.lower(), modulation.name.lower()):
                return modulation
        raise InvalidInputError(f"Unknown modulation: {name!r}")


MODULATION_PROFILES = {
    Modulation.FM_25KHZ: ModulationProfile(sensitivity_dbm=-116.0, required_snr_db=12.0),
    Modulation.FM_12_5KHZ: ModulationProfile(sensitivity_dbm=-119.0, required_snr_db=12.0),
    Modulation.DMR: ModulationProfile(sensitivity_dbm=-120.0, required_snr_db=8.0),
    Modulation.P25: ModulationProfile(sensitivity_dbm=-119.0, required_snr_db=8.0),
    Modulation.DSTAR: ModulationProfile(sensitivity_dbm=-118.0, required_snr_db=10.0),
    Modulation.SSB: ModulationProfile(sensitivity_dbm=-125.0, required_snr_db=10.0),
    Modulation.CW: ModulationProfile(sensitivity_dbm=-130.0, required_snr_db=6.0),
    Modulation.LORA_SF7: ModulationProfile(sensitivity_dbm=-123.0, required_snr_db=-7.5),
    Modulation.LORA_SF12: ModulationProfile(sensitivity_dbm=-137.0, required_snr_db=-20.0),
}


class LinkQuality(Enum):
    """Qualitative link quality from fade margin."""
    EXCELLENT = "excellent"
    GOOD = "good"
    MARGINAL = "marginal"
    POOR = "poor"
    FAILED = "failed"


def classify_link_quality(fade_margin_db: float) -> LinkQuality:
    """
    Classify a link by fade margin

    >= 20 dB excellent, >= 10 good, >= 0 marginal, >= -6 poor, else failed.
    """
    if fade_margin_db >= LINK_QUALITY_THRESHOLDS['excellent']:
        return LinkQuality.EXCELLENT
    elif fade_margin_db >= LINK_QUALITY_THRESHOLDS['good']:
        return LinkQuality.GOOD
    elif fade_margin_db >= LINK_QUALITY_THRESHOLDS['marginal']:
        return LinkQuality.MARGINAL
    elif fade_margin_db >= LINK_QUALITY_THRESHOLDS['poor']:
        return LinkQuality.POOR
    else:
        return LinkQuality.FAILED


@dataclass(frozen=True)
class StationConfig:
    """RF parameters of one end of the link."""
    tx_power_dbm: float
    antenna_gain_dbi: float = 0.0
    cable_loss_db: float = 0.0
    rx_sensitivity_dbm: float = MODULATION_PROFILES[Modulation.FM_25KHZ].sensitivity_dbm

    @classmethod
    def from_watts(
        cls,
        tx_power_watts: float,
        antenna_gain: float = 0.0,
        cable_loss_db: float = 0.0,
        gain_in_dbd: bool = False,
        rx_sensitivity_dbm: float = MODULATION_PROFILES[Modulation.FM_25KHZ].sensitivity_dbm,
    ) -> 'StationConfig':
        """Build a station from transmitter watts and dBi (or dBd) antenna gain."""
        gain_dbi = dbd_to_dbi(antenna_gain) if gain_in_dbd else antenna_gain
        return cls(
            tx_power_dbm=watts_to_dbm(tx_power_watts),
            antenna_gain_dbi=gain_dbi,
            cable_loss_db=cable_loss_db,
            rx_sensitivity_dbm=rx_sensitivity_dbm,
        )

    @property
    def erp_dbm(self) -> float:
        return effective_radiated_power(self.tx_power_dbm, self.antenna_gain_dbi, self.cable_loss_db)


@dataclass(frozen=True)
class LinkDirection:
    """Power budget for one direction of the link."""
    erp_dbm: float
    erp_watts: float
    received_power_dbm: float
    received_power_watts: float

    def to_dict(self) -> dict:
        return {
            'erp_dbm': self.erp_dbm,
            'erp_watts': self.erp_watts,
            'received_power_dbm': self.received_power_dbm,
            'received_power_watts': self.received_power_watts,
        }


@dataclass(frozen=True)
class LinkBudgetResult:
    """Link budget in both directions."""
    a_to_b: LinkDirection
    b_to_a: LinkDirection
    fspl_db: float

    def to_dict(self) -> dict:
        return {
            'a_to_b': self.a_to_b.to_dict(),
            'b_to_a': self.b_to_a.to_dict(),
            'fspl_db': self.fspl_db,
        }


@dataclass(frozen=True)
class LinkAssessment:
    """Margins and quality rating for one direction."""
    link_margin: float
    fade_margin: float
    quality: LinkQuality

    def to_dict(self) -> dict:
        return {
            'link_margin': self.link_margin,
            'fade_margin': self.fade_margin,
            'quality': self.quality.value,
        }


def _direction(tx: StationConfig, rx: StationConfig, fspl_db: float) -> LinkDirection:
    erp = tx.erp_dbm
    rx_power = received_power(erp, fspl_db, rx.antenna_gain_dbi, rx.cable_loss_db)
    return LinkDirection(
        erp_dbm=erp,
        erp_watts=dbm_to_watts(erp),
        received_power_dbm=rx_power,
        received_power_watts=dbm_to_watts(rx_power),
    )


def link_budget(station_a: StationConfig, station_b: StationConfig, fspl_db: float) -> LinkBudgetResult:
    """
    Calculate the link budget for both directions

    Args:
        station_a: Point A parameters
        station_b: Point B parameters
        fspl_db: Free space path loss between A and B

    Returns:
        LinkBudgetResult with A->B and B->A
    """
    result = LinkBudgetResult(
        a_to_b=_direction(station_a, station_b, fspl_db),
        b_to_a=_direction(station_b, station_a, fspl_db),
        fspl_db=fspl_db,
    )
    logger.debug(
        "Link budget: A->B %.1f dBm, B->A %.1f dBm (FSPL %.1f dB)",
        result.a_to_b.received_power_dbm, result.b_to_a.received_power_dbm, fspl_db
    )
    return result


def assess_link(
    budget: LinkBudgetResult,
    station_a: StationConfig,
    station_b: StationConfig,
    profile: ModulationProfile,
) -> Tuple[LinkAssessment, LinkAssessment]:
    """
    Link and fade margins for both directions

    Each direction is judged against the sensitivity of its receiving
    station and the SNR required by the modulation.

    Returns:
        (A->B assessment, B->A assessment)
    """
    assessments = []
    for direction, receiver in ((budget.a_to_b, station_b), (budget.b_to_a, station_a)):
        margin = link_margin(direction.received_power_dbm, receiver.rx_sensitivity_dbm)
        fade = fade_margin(margin, profile.required_snr_db)
        assessments.append(LinkAssessment(
            link_margin=margin,
            fade_margin=fade,
            quality=classify_link_quality(fade),
        ))
    return assessments[0], assessments[1]
