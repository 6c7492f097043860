"""
Geodesy Utilities

This module provides great-circle distance and bearing calculations,
path sampling between two points, and related helpers used to build
terrain profiles for line-of-sight analysis.
"""

import math
from dataclasses import dataclass
from typing import List, Sequence

import numpy as np

from .constants import EARTH_RADIUS_KM, DEG_TO_RAD, RAD_TO_DEG, DEFAULT_PATH_SAMPLES
from .exceptions import InvalidInputError


COMPASS_POINTS = (
    'N', 'NNE', 'NE', 'ENE',
    'E', 'ESE', 'SE', 'SSE',
    'S', 'SSW', 'SW', 'WSW',
    'W', 'WNW', 'NW', 'NNW',
)


@dataclass(frozen=True)
class GeoPoint:
    """Geographic position in decimal degrees"""

    latitude: float
    longitude: float

    def to_dict(self) -> dict:
        return {'latitude': self.latitude, 'longitude': self.longitude}


def validate_point(point: GeoPoint) -> GeoPoint:
    """
    Check that a point has finite, in-range coordinates

    Args:
        point: Point to check

    Returns:
        The same point

    Raises:
        InvalidInputError: Non-finite latitude/longitude or out of range
    """
    lat, lon = point.latitude, point.longitude
    if not (math.isfinite(lat) and math.isfinite(lon)):
        raise InvalidInputError(f"Non-finite coordinates: ({lat}, {lon})")
    if not -90.0 <= lat <= 90.0:
        raise InvalidInputError(f"Latitude out of range [-90, 90]: {lat}")
    if not -180.0 <= lon <= 180.0:
        raise InvalidInputError(f"Longitude out of range [-180, 180]: {lon}")
    return point


def great_circle_distance(a: GeoPoint, b: GeoPoint) -> float:
    """
    Calculate great circle distance between two points using Haversine formula

    Args:
        a: First point
        b: Second point

    Returns:
        Distance in kilometers
    """
    lat1_rad = a.latitude * DEG_TO_RAD
    lat2_rad = b.latitude * DEG_TO_RAD
    dlat = (b.latitude - a.latitude) * DEG_TO_RAD
    dlon = (b.longitude - a.longitude) * DEG_TO_RAD

    h = (np.sin(dlat / 2)**2 +
         np.cos(lat1_rad) * np.cos(lat2_rad) * np.sin(dlon / 2)**2)
    c = 2 * np.arctan2(np.sqrt(h), np.sqrt(1 - h))

    return float(EARTH_RADIUS_KM * c)


def bearing(a: GeoPoint, b: GeoPoint) -> float:
    """
    Initial great-circle bearing from a toward b

    The bearing changes along a great circle, so bearing(b, a) is in
    general not bearing(a, b) + 180.

    Args:
        a: Start point
        b: Destination point

    Returns:
        Bearing in degrees, 0 = North, 90 = East, range [0, 360)
    """
    lat1_rad = a.latitude * DEG_TO_RAD
    lat2_rad = b.latitude * DEG_TO_RAD
    dlon = (b.longitude - a.longitude) * DEG_TO_RAD

    y = np.sin(dlon) * np.cos(lat2_rad)
    x = (np.cos(lat1_rad) * np.sin(lat2_rad) -
         np.sin(lat1_rad) * np.cos(lat2_rad) * np.cos(dlon))

    theta = float(np.arctan2(y, x) * RAD_TO_DEG)
    return (theta + 360.0) % 360.0


def reverse_bearing(a: GeoPoint, b: GeoPoint) -> float:
    """Initial bearing from b back toward a (degrees, [0, 360))"""
    return bearing(b, a)


def sample_path(a: GeoPoint, b: GeoPoint, n: int = DEFAULT_PATH_SAMPLES) -> List[GeoPoint]:
    """
    Generate n + 1 points between a and b

    Latitude and longitude are interpolated linearly and independently,
    not along the great circle. This is a good approximation for short and
    medium paths; on continental distances the samples drift off the
    geodesic. Longitude steps along the shorter way round, so a path
    crossing the antimeridian stays short and every sample longitude is
    wrapped back into [-180, 180].

    Args:
        a: Start point (returned as element 0)
        b: End point (returned as element n)
        n: Number of intervals (>= 1)

    Returns:
        List of n + 1 points
    """
    if n < 1:
        raise InvalidInputError(f"Path sample count must be >= 1, got {n}")

    dlon = ((b.longitude - a.longitude + 540) % 360) - 180

    points = [a]
    for i in range(1, n):
        fraction = i / n
        lat = a.latitude + (b.latitude - a.latitude) * fraction
        lon = normalize_longitude(a.longitude + dlon * fraction)
        points.append(GeoPoint(lat, lon))
    points.append(b)

    return points


def path_distances(points: Sequence[GeoPoint]) -> np.ndarray:
    """
    Great-circle distance from the first point to every point

    Args:
        points: Ordered path samples

    Returns:
        Distances in kilometers (first element is 0)
    """
    if len(points) == 0:
        return np.zeros(0)
    start = points[0]
    return np.array([great_circle_distance(start, p) for p in points])


def elevation_angle(elev_a: float, elev_b: float, horizontal_distance_m: float) -> float:
    """
    Elevation angle from A toward B

    Args:
        elev_a: Height of A (meters)
        elev_b: Height of B (meters)
        horizontal_distance_m: Ground distance between A and B (meters)

    Returns:
        Angle in degrees, positive when B is above A
    """
    return float(np.arctan2(elev_b - elev_a, horizontal_distance_m) * RAD_TO_DEG)


def compass_direction(bearing_deg: float) -> str:
    """
    Convert bearing (0-360°) to a 16-point compass direction

    Args:
        bearing_deg: Bearing in degrees

    Returns:
        Compass direction (N, NNE, NE, ...)
    """
    # Half-way bearings round up (11.25 -> NNE)
    index = int(math.floor(bearing_deg / 22.5 + 0.5)) % 16
    return COMPASS_POINTS[index]


def normalize_longitude(lon: float) -> float:
    """
    Normalize longitude to [-180, 180] range

    Args:
        lon: Longitude (degrees)

    Returns:
        Normalized longitude (degrees)
    """
    while lon > 180:
        lon -= 360
    while lon < -180:
        lon += 360
    return lon
