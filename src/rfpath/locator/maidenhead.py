"""
Maidenhead Grid Locator Codec

Converts between geographic coordinates and Maidenhead grid locators,
the coordinate encoding used by amateur radio operators.

Locator structure (e.g. "KN41bo34"):
- Field: 2 letters A-R, 20° longitude x 10° latitude
- Square: 2 digits, 2° x 1°
- Subsquare: 2 letters a-x, 5' x 2.5'
- Extended square: 2 digits, 30" x 15"

Each pair is longitude first, then latitude. Decoding returns the center
of the smallest cell the locator resolves, so encoding is lossy: only
cell centers survive encode(decode(g)) unchanged.
"""

import math
import re
from typing import Optional, Tuple

from ..common.geodesy import GeoPoint, validate_point
from ..common.exceptions import InvalidInputError

# (longitude, latitude) cell size in degrees for each pair
CELL_SIZES = (
    (20.0, 10.0),          # field
    (2.0, 1.0),            # square
    (2.0 / 24, 1.0 / 24),  # subsquare
    (2.0 / 240, 1.0 / 240),  # extended square
)

# Number of divisions per pair, matching the alphabet of each pair
DIVISIONS = (18, 10, 24, 10)

VALID_LENGTHS = (2, 4, 6, 8)
VALID_PRECISIONS = (4, 6, 8)

_LOCATOR_PATTERN = re.compile(r'^[A-R]{2}(?:[0-9]{2}(?:[A-X]{2}(?:[0-9]{2})?)?)?$')


def _normalize(locator: str) -> str:
    if not isinstance(locator, str):
        raise InvalidInputError(f"Grid locator must be a string, got {type(locator).__name__}")
    return locator.strip().upper()


def validate(locator: str) -> bool:
    """
    Validate a Maidenhead grid locator string

    Case-insensitive; surrounding whitespace is ignored.

    Args:
        locator: Grid locator string

    Returns:
        True if the locator has 2, 4, 6 or 8 characters with valid pairs
    """
    if not isinstance(locator, str):
        return False
    normalized = locator.strip().upper()
    if len(normalized) not in VALID_LENGTHS:
        return False
    return _LOCATOR_PATTERN.match(normalized) is not None


def canonicalize(locator: str) -> Optional[str]:
    """
    Format a locator in standard case: uppercase field and square,
    lowercase subsquare, digits for the extended square

    Args:
        locator: Grid locator string, any case

    Returns:
        Canonical locator, or None if invalid
    """
    if not validate(locator):
        return None

    normalized = locator.strip().upper()
    canonical = normalized[:4]
    if len(normalized) >= 6:
        canonical += normalized[4:6].lower()
    if len(normalized) == 8:
        canonical += normalized[6:8]
    return canonical


def _pair_value(char: str) -> int:
    if char.isdigit():
        return int(char)
    return ord(char) - ord('A')


def cell_bounds(locator: str) -> Tuple[float, float, float, float]:
    """
    Geographic rectangle covered by a locator

    Args:
        locator: Grid locator string

    Returns:
        (south, west, north, east) in degrees

    Raises:
        InvalidInputError: Malformed locator
    """
    normalized = _normalize(locator)
    if not validate(normalized):
        raise InvalidInputError(f"Invalid grid locator: {locator!r}")

    west = -180.0
    south = -90.0
    lon_size = lat_size = 0.0
    for pair in range(len(normalized) // 2):
        lon_size, lat_size = CELL_SIZES[pair]
        west += _pair_value(normalized[2 * pair]) * lon_size
        south += _pair_value(normalized[2 * pair + 1]) * lat_size

    return south, west, south + lat_size, west + lon_size


def decode(locator: str) -> GeoPoint:
    """
    Convert a grid locator to the center of its cell

    Args:
        locator: Grid locator string (2, 4, 6 or 8 characters)

    Returns:
        Center point of the smallest resolved cell

    Raises:
        InvalidInputError: Malformed locator
    """
    south, west, north, east = cell_bounds(locator)
    return GeoPoint(latitude=(south + north) / 2, longitude=(west + east) / 2)


def encode(point: GeoPoint, precision: int = 6) -> str:
    """
    Convert a point to a grid locator

    Args:
        point: Position to encode
        precision: Number of characters (4, 6 or 8)

    Returns:
        Canonical grid locator, e.g. "KN41bo34"

    Raises:
        InvalidInputError: Bad precision or out-of-range coordinates
    """
    if precision not in VALID_PRECISIONS:
        raise InvalidInputError(f"Precision must be one of {VALID_PRECISIONS}, got {precision}")
    validate_point(point)

    # Shift to positive ranges; the north pole and antimeridian fold into the last cell
    lon = min(point.longitude + 180.0, math.nextafter(360.0, 0.0))
    lat = min(point.latitude + 90.0, math.nextafter(180.0, 0.0))

    chars = []
    for pair in range(precision // 2):
        lon_size, lat_size = CELL_SIZES[pair]
        lon_index = max(0, min(int(lon // lon_size), DIVISIONS[pair] - 1))
        lat_index = max(0, min(int(lat // lat_size), DIVISIONS[pair] - 1))
        lon = max(lon - lon_index * lon_size, 0.0)
        lat = max(lat - lat_index * lat_size, 0.0)

        if pair == 0:
            chars.append(chr(ord('A') + lon_index) + chr(ord('A') + lat_index))
        elif pair == 2:
            chars.append(chr(ord('a') + lon_index) + chr(ord('a') + lat_index))
        else:
            chars.append(f"{lon_index}{lat_index}")

    return ''.join(chars)
