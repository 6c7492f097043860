"""
Fresnel Zone Engine

First Fresnel zone envelope and terrain clearance along a path.

The first Fresnel zone radius at a point d1 from one end and d2 from the
other is

    r = sqrt(lambda * d1 * d2 / (d1 + d2))

It is zero at both antennas and largest at the midpoint. Keeping at least
60% of this radius free of terrain is the usual planning rule; a path can
have clear line of sight and still fail it, so both results are reported.
"""

import logging
import math
from dataclasses import dataclass
from typing import Sequence, Tuple

import numpy as np

from ..common.constants import SPEED_OF_LIGHT_M_MHZ, KM_TO_M, FRESNEL_CLEARANCE_THRESHOLD
from ..common.exceptions import InvalidInputError, DegenerateGeometryError
from .line_of_sight import validate_profile

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FresnelZone:
    """First Fresnel zone envelope and clearance metrics for one path."""
    upper: Tuple[float, ...]  # sightline + radius (m)
    lower: Tuple[float, ...]  # sightline - radius (m)
    radius: float  # largest radius along the path (m)
    clearance_percentages: Tuple[float, ...]  # inf where the radius is zero
    min_clearance: float  # percent, over interior samples
    min_clearance_distance: float  # km
    min_clearance_meters: float  # sightline minus terrain at the minimum (m)
    clearance_threshold: float = FRESNEL_CLEARANCE_THRESHOLD

    @property
    def is_clear(self) -> bool:
        """True when the minimum clearance meets the threshold."""
        return self.min_clearance >= self.clearance_threshold

    @property
    def status(self) -> str:
        return clearance_status(self.min_clearance)

    def to_dict(self) -> dict:
        return {
            'upper': list(self.upper),
            'lower': list(self.lower),
            'radius': self.radius,
            'clearance_percentages': list(self.clearance_percentages),
            'min_clearance': self.min_clearance,
            'min_clearance_distance': self.min_clearance_distance,
            'min_clearance_meters': self.min_clearance_meters,
            'is_clear': self.is_clear,
            'status': self.status,
        }


def wavelength(frequency_mhz: float) -> float:
    """
    Wavelength in meters

    Args:
        frequency_mhz: Frequency in MHz (> 0)
    """
    if not (math.isfinite(frequency_mhz) and frequency_mhz > 0):
        raise InvalidInputError(f"Frequency must be positive, got {frequency_mhz}")
    return SPEED_OF_LIGHT_M_MHZ / frequency_mhz


def fresnel_radius(d1: float, d2: float, frequency_mhz: float, zone: int = 1) -> float:
    """
    Calculate Fresnel zone radius at a given point

    Args:
        d1: Distance from transmitter to point (km)
        d2: Distance from point to receiver (km)
        frequency_mhz: Frequency in MHz
        zone: Fresnel zone number (1 = first zone)

    Returns:
        Zone radius in meters
    """
    if zone < 1:
        raise InvalidInputError(f"Fresnel zone number must be >= 1, got {zone}")
    if d1 < 0 or d2 < 0:
        raise InvalidInputError(f"Distances must be >= 0, got d1={d1}, d2={d2}")
    if d1 + d2 == 0:
        raise DegenerateGeometryError("Fresnel radius undefined for a zero-length path")

    d1m = d1 * KM_TO_M
    d2m = d2 * KM_TO_M
    return math.sqrt(zone * wavelength(frequency_mhz) * d1m * d2m / (d1m + d2m))


def compute_fresnel_zone(
    distances: Sequence[float],
    elevations: Sequence[float],
    los_line: Sequence[float],
    frequency_mhz: float,
    clearance_threshold: float = FRESNEL_CLEARANCE_THRESHOLD,
) -> FresnelZone:
    """
    Calculate Fresnel zone boundaries and clearance along the path

    Args:
        distances: Distance of each sample from the start (km)
        elevations: Terrain elevation of each sample (m)
        los_line: Sightline altitude of each sample (m)
        frequency_mhz: Frequency in MHz
        clearance_threshold: Required clearance percentage for is_clear

    Returns:
        FresnelZone
    """
    d, e = validate_profile(distances, elevations)
    los = np.asarray(los_line, dtype=float)
    if len(los) != len(d):
        raise InvalidInputError(
            f"Sightline and profile differ in length: {len(los)} vs {len(d)}"
        )

    total_distance = d[-1]
    if total_distance <= 0:
        raise DegenerateGeometryError("Fresnel zone undefined for a zero-length path")

    lam = wavelength(frequency_mhz)
    d1m = d * KM_TO_M
    d2m = (total_distance - d) * KM_TO_M
    # Clip rounding noise at the far end
    d2m = np.maximum(d2m, 0.0)
    radii = np.sqrt(lam * d1m * d2m / (d1m + d2m))

    clearance_m = los - e
    percentages = np.full(len(d), np.inf)
    interior = np.zeros(len(d), dtype=bool)
    interior[1:-1] = radii[1:-1] > 0
    percentages[interior] = 100.0 * clearance_m[interior] / radii[interior]

    if np.any(interior):
        candidates = np.where(interior, percentages, np.inf)
        idx = int(np.argmin(candidates))
        min_clearance = float(percentages[idx])
        min_distance = float(d[idx])
        min_meters = float(clearance_m[idx])
    else:
        # No interior sample: nothing can intrude
        min_clearance = math.inf
        min_distance = float(d[0])
        min_meters = float(np.min(clearance_m))

    logger.debug(
        "Fresnel zone at %.3f MHz: radius=%.2f m, min clearance=%.1f%%",
        frequency_mhz, float(np.max(radii)), min_clearance
    )

    return FresnelZone(
        upper=tuple(float(x) for x in los + radii),
        lower=tuple(float(x) for x in los - radii),
        radius=float(np.max(radii)),
        clearance_percentages=tuple(float(x) for x in percentages),
        min_clearance=min_clearance,
        min_clearance_distance=min_distance,
        min_clearance_meters=min_meters,
        clearance_threshold=clearance_threshold,
    )


def clearance_status(clearance_percent: float) -> str:
    """
    Qualitative rating of a Fresnel zone clearance percentage

    Returns:
        'excellent' (>= 100), 'good' (>= 60), 'marginal' (>= 20),
        'poor' (>= 0) or 'obstructed'
    """
    if clearance_percent >= 100:
        return 'excellent'
    elif clearance_percent >= FRESNEL_CLEARANCE_THRESHOLD:
        return 'good'
    elif clearance_percent >= 20:
        return 'marginal'
    elif clearance_percent >= 0:
        return 'poor'
    else:
        return 'obstructed'
