"""
Knife-Edge Diffraction Engine

Detects terrain near or above the sightline and estimates the extra path
loss it causes, using the single knife-edge approximation of ITU-R P.526:

    v = h * sqrt(2 * (d1 + d2) / (lambda * d1 * d2))
    J(v) = 6.9 + 20 * log10(sqrt((v - 0.1)^2 + 1) + v - 0.1)    for v > -0.78

Two margins are used on purpose. Terrain up to 5 m below the sightline is
examined as a candidate, catching near-grazing geometry, but only
candidates with v > -0.78 are kept as obstacles.

Several obstacles are combined with a simplified Bullington-style rule:
the obstacle with the largest v contributes its full loss and each further
obstacle (in descending v) contributes half as much weight as the one
before. This is an engineering approximation, not a rigorous multi-edge
method such as Deygout or Epstein-Peterson.
"""

import logging
import math
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

import numpy as np

from ..common.constants import (
    KM_TO_M,
    RAD_TO_DEG,
    DIFFRACTION_CANDIDATE_MARGIN_M,
    DIFFRACTION_V_CUTOFF,
    SECONDARY_OBSTACLE_DECAY,
)
from ..common.exceptions import InvalidInputError, DegenerateGeometryError
from .fresnel import wavelength
from .line_of_sight import validate_profile

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Obstacle:
    """Terrain point that diffracts the signal."""
    index: int  # sample index along the path
    distance: float  # km from the start
    height: float  # terrain minus sightline (m), negative below the line
    terrain_height: float  # m
    los_height: float  # m
    diffraction_loss: float  # dB, >= 0
    fresnel_parameter: float  # v

    def to_dict(self) -> dict:
        return {
            'index': self.index,
            'distance': self.distance,
            'height': self.height,
            'terrain_height': self.terrain_height,
            'los_height': self.los_height,
            'diffraction_loss': self.diffraction_loss,
            'fresnel_parameter': self.fresnel_parameter,
        }


@dataclass(frozen=True)
class DiffractionResult:
    """Obstacles found on one path and their combined loss."""
    obstacles: Tuple[Obstacle, ...]
    main_obstacle: Optional[Obstacle]
    total_loss: float  # dB

    def to_dict(self) -> dict:
        return {
            'obstacles': [o.to_dict() for o in self.obstacles],
            'main_obstacle': self.main_obstacle.to_dict() if self.main_obstacle else None,
            'total_loss': self.total_loss,
        }


def fresnel_parameter(h: float, d1: float, d2: float, wavelength_m: float) -> float:
    """
    Calculate the Fresnel-Kirchhoff diffraction parameter (v)

    Args:
        h: Obstacle height above the sightline (m), negative below it
        d1: Distance from transmitter to obstacle (km)
        d2: Distance from obstacle to receiver (km)
        wavelength_m: Wavelength in meters

    Returns:
        Fresnel-Kirchhoff parameter (dimensionless)
    """
    if d1 <= 0 or d2 <= 0:
        raise DegenerateGeometryError(
            f"Diffraction parameter needs an obstacle between the ends, got d1={d1}, d2={d2}"
        )
    if wavelength_m <= 0:
        raise InvalidInputError(f"Wavelength must be positive, got {wavelength_m}")

    d1m = d1 * KM_TO_M
    d2m = d2 * KM_TO_M
    return h * math.sqrt((2 * (d1m + d2m)) / (wavelength_m * d1m * d2m))


def diffraction_loss(v: float) -> float:
    """
    Knife-edge diffraction loss (ITU-R P.526 approximation)

    Args:
        v: Fresnel-Kirchhoff diffraction parameter

    Returns:
        Loss in dB, 0 for v <= -0.78 and never negative
    """
    if v <= DIFFRACTION_V_CUTOFF:
        return 0.0

    term = math.sqrt((v - 0.1) ** 2 + 1) + v - 0.1
    loss = 6.9 + 20 * math.log10(term)
    return max(0.0, loss)


def detect_obstacles(
    distances: Sequence[float],
    elevations: Sequence[float],
    los_line: Sequence[float],
    frequency_mhz: float,
) -> List[Obstacle]:
    """
    Find terrain points along the path that cause diffraction

    Args:
        distances: Distance of each sample from the start (km)
        elevations: Terrain elevation of each sample (m)
        los_line: Sightline altitude of each sample (m)
        frequency_mhz: Frequency in MHz

    Returns:
        Obstacles in path order
    """
    d, e = validate_profile(distances, elevations)
    los = np.asarray(los_line, dtype=float)
    if len(los) != len(d):
        raise InvalidInputError(
            f"Sightline and profile differ in length: {len(los)} vs {len(d)}"
        )

    wavelength_m = wavelength(frequency_mhz)
    total_distance = d[-1]
    obstacles = []

    for i in range(1, len(d) - 1):
        height_above_los = e[i] - los[i]
        if height_above_los <= -DIFFRACTION_CANDIDATE_MARGIN_M:
            continue

        d1 = d[i]
        d2 = total_distance - d1
        if d1 <= 0 or d2 <= 0:
            # Repeated sample on top of an antenna
            continue

        v = fresnel_parameter(height_above_los, d1, d2, wavelength_m)
        if v > DIFFRACTION_V_CUTOFF:
            obstacles.append(Obstacle(
                index=i,
                distance=float(d1),
                height=float(height_above_los),
                terrain_height=float(e[i]),
                los_height=float(los[i]),
                diffraction_loss=diffraction_loss(v),
                fresnel_parameter=float(v),
            ))

    logger.debug("Detected %d diffracting obstacles at %.3f MHz", len(obstacles), frequency_mhz)
    return obstacles


def find_main_obstacle(obstacles: Sequence[Obstacle]) -> Optional[Obstacle]:
    """Obstacle with the highest Fresnel parameter, or None."""
    if not obstacles:
        return None
    return max(obstacles, key=lambda o: o.fresnel_parameter)


def multiple_obstacle_loss(obstacles: Sequence[Obstacle]) -> float:
    """
    Combined diffraction loss for several obstacles

    The largest-v obstacle counts fully; the k-th further obstacle is
    weighted by 0.5 ** k.

    Returns:
        Total diffraction loss in dB
    """
    if not obstacles:
        return 0.0

    ranked = sorted(obstacles, key=lambda o: o.fresnel_parameter, reverse=True)
    total = ranked[0].diffraction_loss
    for rank, obstacle in enumerate(ranked[1:], start=1):
        total += obstacle.diffraction_loss * SECONDARY_OBSTACLE_DECAY ** rank
    return total


def clearance_angle(h: float, d: float) -> float:
    """
    Angle subtended by an obstacle seen from the transmitter

    Args:
        h: Obstacle height above the sightline (m)
        d: Distance to obstacle (km)

    Returns:
        Angle in degrees, positive when the obstacle is above the sightline
    """
    if d <= 0:
        raise DegenerateGeometryError(f"Clearance angle needs a positive distance, got {d}")
    return math.atan(h / (d * KM_TO_M)) * RAD_TO_DEG


def analyze_diffraction(
    distances: Sequence[float],
    elevations: Sequence[float],
    los_line: Sequence[float],
    frequency_mhz: float,
) -> DiffractionResult:
    """Detect obstacles and combine their losses for one path."""
    obstacles = detect_obstacles(distances, elevations, los_line, frequency_mhz)
    return DiffractionResult(
        obstacles=tuple(obstacles),
        main_obstacle=find_main_obstacle(obstacles),
        total_loss=multiple_obstacle_loss(obstacles),
    )
