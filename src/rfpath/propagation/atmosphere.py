"""
Atmospheric refraction (K-factor) presets for line-of-sight calculations.

The K-factor scales the true Earth radius to approximate how tropospheric
refraction bends radio paths back toward the ground. K = 4/3 is the
standard atmosphere; larger values flatten the apparent Earth.
"""

from enum import Enum

from ..common.constants import EARTH_RADIUS_KM, STANDARD_K_FACTOR, MIN_K_FACTOR, MAX_K_FACTOR
from ..common.exceptions import InvalidInputError


class Climate(Enum):
    """Climate categories for K-factor selection."""
    TEMPERATE = "temperate"
    TROPICAL = "tropical"
    DESERT = "desert"
    ARCTIC = "arctic"


class Condition(Enum):
    """Weather conditions for K-factor selection."""
    CLEAR = "clear"
    NORMAL = "normal"
    INVERSION = "inversion"
    DUCTING = "ducting"


def validate_k_factor(k_factor: float) -> float:
    """Return k_factor if it lies in the supported range, else raise InvalidInputError."""
    if not MIN_K_FACTOR <= k_factor <= MAX_K_FACTOR:
        raise InvalidInputError(
            f"K-factor must be in [{MIN_K_FACTOR}, {MAX_K_FACTOR}], got {k_factor}"
        )
    return k_factor


def effective_earth_radius_km(k_factor: float) -> float:
    """Effective Earth radius in km for the given K-factor."""
    return EARTH_RADIUS_KM * validate_k_factor(k_factor)


def recommended_k_factor(climate: Climate, condition: Condition) -> float:
    """
    Recommended K-factor for a climate and weather condition.

    Args:
        climate: Climate type
        condition: Weather condition

    Returns:
        K-factor value
    """
    if condition in (Condition.CLEAR, Condition.NORMAL):
        return STANDARD_K_FACTOR

    if condition == Condition.INVERSION:
        # Strong inversions are common in hot climates
        if climate in (Climate.TROPICAL, Climate.DESERT):
            return 1.5
        return 1.4

    if condition == Condition.DUCTING:
        return MAX_K_FACTOR

    return STANDARD_K_FACTOR


def k_factor_description(k_factor: float) -> str:
    """Describe the refraction regime a K-factor represents."""
    if k_factor < 1.2:
        return "Subrefractive - Signal bends away from Earth (shorter range)"
    elif k_factor < 1.35:
        return "Standard atmosphere - Normal refraction conditions"
    elif k_factor < 1.6:
        return "Superrefractive - Enhanced propagation (longer range)"
    else:
        return "Ducting - Extreme range extension possible"
