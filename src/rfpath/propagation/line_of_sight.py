"""
Line-of-Sight Engine

Builds the curvature-corrected sightline between two antennas over a
terrain profile and decides whether the terrain obstructs it.

The sightline at sample i is the straight line between the two antenna
tips, lowered by the parabolic Earth-bulge term

    drop = d1 * d2 / (2 * R_eff)

with d1, d2 the distances to each end (km) and R_eff = 6371 * K km the
effective Earth radius for the atmospheric refraction factor K.
"""

import logging
import math
from dataclasses import dataclass
from typing import Optional, Sequence, Tuple

import numpy as np

from ..common.constants import LOS_CLEARANCE_TOLERANCE_M
from ..common.exceptions import InvalidInputError
from .atmosphere import effective_earth_radius_km

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LosProfile:
    """Curvature-corrected sightline and obstruction verdict."""
    los_line: Tuple[float, ...]  # sightline altitude per sample (m)
    is_blocked: bool
    block_distance: Optional[float]  # km, first obstructing interior sample
    max_obstacle: float  # m, deepest terrain intrusion over the path
    start_elev: float  # m, terrain + antenna at the start
    end_elev: float  # m, terrain + antenna at the end
    k_factor: float

    def clearances(self, elevations: Sequence[float]) -> np.ndarray:
        """Sightline minus terrain at every sample (m)."""
        return np.asarray(self.los_line) - np.asarray(elevations, dtype=float)

    def to_dict(self) -> dict:
        return {
            'los_line': list(self.los_line),
            'is_blocked': self.is_blocked,
            'block_distance': self.block_distance,
            'max_obstacle': self.max_obstacle,
            'start_elev': self.start_elev,
            'end_elev': self.end_elev,
            'k_factor': self.k_factor,
        }


def validate_profile(distances: Sequence[float], elevations: Sequence[float]) -> Tuple[np.ndarray, np.ndarray]:
    """
    Check a distance/elevation profile and return it as float arrays.

    Raises:
        InvalidInputError: Mismatched lengths, fewer than two samples,
            non-finite values, or distances that do not start at 0 and
            never decrease.
    """
    d = np.asarray(distances, dtype=float)
    e = np.asarray(elevations, dtype=float)

    if d.ndim != 1 or e.ndim != 1:
        raise InvalidInputError("Distances and elevations must be one-dimensional")
    if len(d) != len(e):
        raise InvalidInputError(
            f"Distances and elevations differ in length: {len(d)} vs {len(e)}"
        )
    if len(d) < 2:
        raise InvalidInputError(f"Profile needs at least 2 samples, got {len(d)}")
    if not (np.all(np.isfinite(d)) and np.all(np.isfinite(e))):
        raise InvalidInputError("Profile contains non-finite values")
    if d[0] != 0:
        raise InvalidInputError(f"First distance must be 0, got {d[0]}")
    if np.any(np.diff(d) < 0):
        raise InvalidInputError("Distances must be non-decreasing")

    return d, e


def validate_heights(height1: float, height2: float) -> None:
    """Raise InvalidInputError unless both antenna heights are finite and >= 0"""
    for height in (height1, height2):
        if not (math.isfinite(height) and height >= 0):
            raise InvalidInputError(
                f"Antenna heights must be finite and >= 0, got {height1}, {height2}"
            )


def compute_line_of_sight(
    distances: Sequence[float],
    elevations: Sequence[float],
    height1: float,
    height2: float,
    k_factor: float,
) -> LosProfile:
    """
    Calculate the sightline with Earth curvature and check for obstructions.

    Only interior samples can block the path; a two-sample profile is never
    blocked. block_distance is the first interior sample below the
    sightline, while max_obstacle is the deepest intrusion anywhere along
    the path.

    Args:
        distances: Distance of each sample from the start (km)
        elevations: Terrain elevation of each sample (m)
        height1: Antenna height above ground at the start (m)
        height2: Antenna height above ground at the end (m)
        k_factor: Atmospheric refraction factor, 1.0 to 5.0

    Returns:
        LosProfile
    """
    d, e = validate_profile(distances, elevations)
    validate_heights(height1, height2)

    earth_radius = effective_earth_radius_km(k_factor)

    n = len(d)
    total_distance = d[-1]
    start_elev = float(e[0] + height1)
    end_elev = float(e[-1] + height2)

    fraction = np.arange(n) / (n - 1)
    straight_line = start_elev + (end_elev - start_elev) * fraction

    d1 = d
    d2 = total_distance - d1
    curvature_offset = (d1 * d2) / (2 * earth_radius)

    los_line = straight_line - curvature_offset

    # Obstruction check on interior samples only
    clearance = los_line[1:-1] - e[1:-1]
    blocking = clearance < -LOS_CLEARANCE_TOLERANCE_M
    is_blocked = bool(np.any(blocking))

    block_distance = None
    max_obstacle = 0.0
    if is_blocked:
        first = int(np.argmax(blocking)) + 1
        block_distance = float(d[first])
        max_obstacle = float(np.max(-clearance[blocking]))

    logger.debug(
        "LOS over %.3f km: blocked=%s max_obstacle=%.1f m (k=%.3f)",
        total_distance, is_blocked, max_obstacle, k_factor
    )

    return LosProfile(
        los_line=tuple(float(x) for x in los_line),
        is_blocked=is_blocked,
        block_distance=block_distance,
        max_obstacle=max_obstacle,
        start_elev=start_elev,
        end_elev=end_elev,
        k_factor=k_factor,
    )
