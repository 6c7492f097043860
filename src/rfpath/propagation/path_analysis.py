"""
Path Analysis Pipeline

Ties the engines together for one pair of stations:

    sample path -> elevation lookup -> line of sight
        -> (with a frequency) FSPL, Fresnel zone, knife-edge diffraction

Without a frequency the result is a BasicPathResult (geometry and line of
sight only). With one it is an RfAnalyzedPathResult wrapping the basic
result plus the RF metrics. The elevation lookup is the only await in the
pipeline; everything after it is a pure calculation.

Example:
    analyzer = PathAnalyzer(OpenElevationClient())

    a = Station("Hilltop", GeoPoint(47.60, -122.33), antenna_height_m=15)
    b = Station("Valley", GeoPoint(47.45, -122.10), antenna_height_m=10)

    result = await analyzer.analyze(a, b, frequency_mhz=145.5)
    print(result.los.is_blocked, result.fresnel_zone.min_clearance)
"""

import asyncio
from dataclasses import dataclass
from itertools import combinations
from typing import List, Optional, Sequence, Tuple, Union

from ..common.config import RFPathConfig
from ..common.exceptions import DegenerateGeometryError, InvalidInputError, ProviderFailure
from ..common.geodesy import (
    GeoPoint,
    great_circle_distance,
    bearing,
    reverse_bearing,
    sample_path,
    path_distances,
    validate_point,
)
from ..common.logging_config import ServiceLogger
from ..terrain.elevation import ElevationProvider
from .diffraction import DiffractionResult, analyze_diffraction
from .fresnel import FresnelZone, compute_fresnel_zone
from .line_of_sight import LosProfile, compute_line_of_sight, validate_heights
from .link_budget import (
    LinkAssessment,
    LinkBudgetResult,
    ModulationProfile,
    StationConfig,
    assess_link,
    free_space_path_loss,
    link_budget,
)


@dataclass(frozen=True)
class Station:
    """Named antenna site."""
    name: str
    point: GeoPoint
    antenna_height_m: float = 0.0


@dataclass(frozen=True)
class BasicPathResult:
    """Geometry, terrain profile and line of sight for one path."""
    name1: str
    name2: str
    distance: float  # km
    bearing: float  # degrees, from station 1
    reverse_bearing: float  # degrees, from station 2
    path_points: Tuple[GeoPoint, ...]
    distances: Tuple[float, ...]  # km from station 1
    elevations: Tuple[float, ...]  # m
    height1: float  # antenna height (m)
    height2: float
    los: LosProfile

    def to_dict(self) -> dict:
        return {
            'name1': self.name1,
            'name2': self.name2,
            'distance': self.distance,
            'bearing': self.bearing,
            'reverse_bearing': self.reverse_bearing,
            'path_points': [p.to_dict() for p in self.path_points],
            'distances': list(self.distances),
            'elevations': list(self.elevations),
            'height1': self.height1,
            'height2': self.height2,
            'los': self.los.to_dict(),
        }


@dataclass(frozen=True)
class RfAnalyzedPathResult:
    """Basic path result plus RF metrics at one frequency."""
    path: BasicPathResult
    frequency_mhz: float
    fspl_db: float
    fresnel_zone: FresnelZone
    diffraction: DiffractionResult
    k_factor: float

    @property
    def los(self) -> LosProfile:
        return self.path.los

    @property
    def distance(self) -> float:
        return self.path.distance

    @property
    def total_path_loss_db(self) -> float:
        """Free space loss plus combined diffraction loss."""
        return self.fspl_db + self.diffraction.total_loss

    def to_dict(self) -> dict:
        result = self.path.to_dict()
        result.update({
            'frequency_mhz': self.frequency_mhz,
            'fspl_db': self.fspl_db,
            'fresnel_zone': self.fresnel_zone.to_dict(),
            'diffraction': self.diffraction.to_dict(),
            'k_factor': self.k_factor,
            'total_path_loss_db': self.total_path_loss_db,
        })
        return result


PathResult = Union[BasicPathResult, RfAnalyzedPathResult]


@dataclass(frozen=True)
class SegmentDistance:
    """Distance between consecutive stations of a route."""
    from_name: str
    to_name: str
    distance: float  # km


def segment_distances(stations: Sequence[Station]) -> List[SegmentDistance]:
    """Great-circle distance of each consecutive pair of stations."""
    return [
        SegmentDistance(a.name, b.name, great_circle_distance(a.point, b.point))
        for a, b in zip(stations, stations[1:])
    ]


def _check_endpoints(station_a: Station, station_b: Station) -> float:
    validate_point(station_a.point)
    validate_point(station_b.point)
    validate_heights(station_a.antenna_height_m, station_b.antenna_height_m)
    distance = great_circle_distance(station_a.point, station_b.point)
    if distance <= 0:
        raise DegenerateGeometryError(
            f"Stations {station_a.name!r} and {station_b.name!r} are at the same position"
        )
    return distance


def analyze_profile(
    station_a: Station,
    station_b: Station,
    path_points: Sequence[GeoPoint],
    elevations: Sequence[float],
    k_factor: float,
    frequency_mhz: Optional[float] = None,
    clearance_threshold: float = None,
) -> PathResult:
    """
    Analyze a path whose terrain profile is already known

    Args:
        station_a: Start station
        station_b: End station
        path_points: Sampled points from station_a to station_b
        elevations: Terrain elevation of each point (m)
        k_factor: Atmospheric refraction factor
        frequency_mhz: Operating frequency; None for geometry only
        clearance_threshold: Fresnel clearance percentage for is_clear

    Returns:
        BasicPathResult, or RfAnalyzedPathResult when a frequency is given
    """
    distance = _check_endpoints(station_a, station_b)
    if len(path_points) != len(elevations):
        raise InvalidInputError(
            f"Path points and elevations differ in length: {len(path_points)} vs {len(elevations)}"
        )

    distances = path_distances(path_points)
    los = compute_line_of_sight(
        distances,
        elevations,
        station_a.antenna_height_m,
        station_b.antenna_height_m,
        k_factor,
    )

    basic = BasicPathResult(
        name1=station_a.name,
        name2=station_b.name,
        distance=distance,
        bearing=bearing(station_a.point, station_b.point),
        reverse_bearing=reverse_bearing(station_a.point, station_b.point),
        path_points=tuple(path_points),
        distances=tuple(float(x) for x in distances),
        elevations=tuple(float(x) for x in elevations),
        height1=station_a.antenna_height_m,
        height2=station_b.antenna_height_m,
        los=los,
    )

    if frequency_mhz is None:
        return basic

    fresnel_kwargs = {}
    if clearance_threshold is not None:
        fresnel_kwargs['clearance_threshold'] = clearance_threshold

    return RfAnalyzedPathResult(
        path=basic,
        frequency_mhz=frequency_mhz,
        fspl_db=free_space_path_loss(distance, frequency_mhz),
        fresnel_zone=compute_fresnel_zone(
            distances, elevations, los.los_line, frequency_mhz, **fresnel_kwargs
        ),
        diffraction=analyze_diffraction(distances, elevations, los.los_line, frequency_mhz),
        k_factor=k_factor,
    )


def evaluate_link(
    result: RfAnalyzedPathResult,
    station_a: StationConfig,
    station_b: StationConfig,
    profile: ModulationProfile,
    include_diffraction: bool = False,
) -> Tuple[LinkBudgetResult, Tuple[LinkAssessment, LinkAssessment]]:
    """
    Link budget and margins for an analyzed path

    Args:
        result: RF-analyzed path
        station_a: RF parameters of the path's first station
        station_b: RF parameters of the path's second station
        profile: Modulation sensitivity/SNR profile
        include_diffraction: Add the diffraction loss to the free space loss

    Returns:
        (budget, (A->B assessment, B->A assessment))
    """
    loss = result.total_path_loss_db if include_diffraction else result.fspl_db
    budget = link_budget(station_a, station_b, loss)
    return budget, assess_link(budget, station_a, station_b, profile)


class PathAnalyzer:
    """
    Runs the full analysis pipeline against an elevation provider
    """

    def __init__(self, provider: ElevationProvider, config: RFPathConfig = None):
        """
        Initialize path analyzer

        Args:
            provider: Elevation data source
            config: Configuration (sample count, K-factor, default frequency)
        """
        self.provider = provider
        self.config = (config or RFPathConfig()).validate()
        self.logger = ServiceLogger("rfpath", "path_analysis")

    async def analyze(
        self,
        station_a: Station,
        station_b: Station,
        frequency_mhz: Optional[float] = None,
    ) -> PathResult:
        """
        Sample the path, fetch its terrain and analyze it

        Args:
            station_a: Start station
            station_b: End station
            frequency_mhz: Operating frequency; defaults to the configured one

        Returns:
            BasicPathResult or RfAnalyzedPathResult
        """
        analysis = self.config.analysis
        if frequency_mhz is None:
            frequency_mhz = analysis.default_frequency_mhz

        # Reject bad geometry before spending a provider call on it
        _check_endpoints(station_a, station_b)

        points = sample_path(station_a.point, station_b.point, analysis.path_samples)
        logger = self.logger.bind(stations=f"{station_a.name} -> {station_b.name}")

        try:
            elevations = await self.provider.get_elevations(points)
        except ProviderFailure:
            logger.error("Elevation lookup failed", exc_info=True)
            raise

        if len(elevations) != len(points):
            logger.error(
                "Elevation count mismatch",
                extra={'requested': len(points), 'received': len(elevations)}
            )
            raise ProviderFailure(
                f"Elevation provider returned {len(elevations)} values for {len(points)} points"
            )

        result = analyze_profile(
            station_a,
            station_b,
            points,
            elevations,
            analysis.k_factor,
            frequency_mhz=frequency_mhz,
            clearance_threshold=analysis.fresnel_clearance_threshold,
        )

        logger.info(
            "Path analyzed",
            extra={
                'distance_km': round(result.distance, 3),
                'blocked': result.los.is_blocked,
                'frequency_mhz': frequency_mhz,
            }
        )
        return result

    async def analyze_all(
        self,
        stations: Sequence[Station],
        frequency_mhz: Optional[float] = None,
    ) -> List[Tuple[Station, Station, PathResult]]:
        """
        Analyze every pair of stations concurrently

        Args:
            stations: Stations to pair up
            frequency_mhz: Operating frequency for every pair

        Returns:
            (station_a, station_b, result) for each pair, in combination order

        Raises:
            The first error from any pair. The remaining pair tasks are
            cancelled and awaited before it propagates.
        """
        pairs = list(combinations(stations, 2))
        tasks = [
            asyncio.ensure_future(self.analyze(a, b, frequency_mhz))
            for a, b in pairs
        ]
        try:
            results = await asyncio.gather(*tasks)
        except BaseException:
            for task in tasks:
                task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)
            raise
        return [(a, b, result) for (a, b), result in zip(pairs, results)]
