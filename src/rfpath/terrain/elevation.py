"""
Terrain Elevation Providers

Defines the contract the analysis pipeline needs from an elevation
source (an ordered list of points in, an index-aligned list of elevations
in meters out) and an aiohttp client for the public Open-Elevation API.

Failures are never papered over: any transport, status or parsing error
is logged and raised as ProviderFailure. Retrying is left to the caller.
"""

import asyncio
import math
from abc import ABC, abstractmethod
from typing import List, Sequence

import aiohttp

from ..common.config import ElevationConfig
from ..common.exceptions import ProviderFailure
from ..common.geodesy import GeoPoint
from ..common.logging_config import ServiceLogger


class ElevationProvider(ABC):
    """Batched point -> elevation lookup."""

    @abstractmethod
    async def get_elevations(self, points: Sequence[GeoPoint]) -> List[float]:
        """
        Look up terrain elevation for each point

        Args:
            points: Ordered points

        Returns:
            Elevations in meters, same length and order as points

        Raises:
            ProviderFailure: Lookup failed or returned unusable data
        """


class OpenElevationClient(ElevationProvider):
    """
    Client for the Open-Elevation lookup API

    Request body: {"locations": [{"latitude": ..., "longitude": ...}, ...]}
    Response body: {"results": [{"latitude": ..., "longitude": ..., "elevation": ...}]}
    """

    def __init__(
        self,
        api_url: str = None,
        timeout_sec: float = None,
        batch_size: int = None,
        config: ElevationConfig = None
    ):
        """
        Initialize Open-Elevation client

        Args:
            api_url: Lookup endpoint
            timeout_sec: Total timeout per request (seconds)
            batch_size: Maximum points per request
            config: Elevation configuration supplying unset values
        """
        config = config or ElevationConfig()

        self.api_url = api_url or config.api_url
        self.timeout_sec = timeout_sec or config.timeout_sec
        self.batch_size = batch_size or config.batch_size

        self.logger = ServiceLogger("rfpath", "elevation")

    def _batches(self, points: Sequence[GeoPoint]) -> List[Sequence[GeoPoint]]:
        return [points[i:i + self.batch_size] for i in range(0, len(points), self.batch_size)]

    async def get_elevations(self, points: Sequence[GeoPoint]) -> List[float]:
        """
        Fetch elevations from Open-Elevation

        Args:
            points: Ordered points

        Returns:
            Elevations in meters, index-aligned with points
        """
        points = list(points)
        if not points:
            return []

        elevations: List[float] = []
        timeout = aiohttp.ClientTimeout(total=self.timeout_sec)

        try:
            async with aiohttp.ClientSession(timeout=timeout) as session:
                for batch in self._batches(points):
                    elevations.extend(await self._fetch_batch(session, batch))

        except asyncio.TimeoutError as e:
            self.logger.error("Timeout fetching elevation data")
            raise ProviderFailure(
                f"Elevation lookup timed out after {self.timeout_sec}s"
            ) from e
        except aiohttp.ClientError as e:
            self.logger.error(f"HTTP error fetching elevation data: {e}", exc_info=True)
            raise ProviderFailure(f"Elevation lookup failed: {e}") from e

        if len(elevations) != len(points):
            self.logger.error(
                "Elevation count mismatch",
                extra={'requested': len(points), 'received': len(elevations)}
            )
            raise ProviderFailure(
                f"Elevation provider returned {len(elevations)} values for {len(points)} points"
            )

        self.logger.debug(
            f"Fetched {len(elevations)} elevations",
            extra={'points': len(points)}
        )
        return elevations

    async def _fetch_batch(self, session: aiohttp.ClientSession, batch: Sequence[GeoPoint]) -> List[float]:
        payload = {'locations': [p.to_dict() for p in batch]}

        async with session.post(self.api_url, json=payload) as response:
            if response.status != 200:
                self.logger.error(
                    f"HTTP {response.status} from elevation API",
                    extra={'status_code': response.status}
                )
                raise ProviderFailure(
                    f"Elevation API returned HTTP {response.status}",
                    status_code=response.status
                )

            try:
                data = await response.json()
            except (ValueError, aiohttp.ContentTypeError) as e:
                self.logger.error(f"Malformed elevation response: {e}", exc_info=True)
                raise ProviderFailure(f"Malformed elevation response: {e}") from e

        return self._parse_results(data, len(batch))

    def _parse_results(self, data, expected: int) -> List[float]:
        try:
            results = data['results']
            elevations = [float(r['elevation']) for r in results]
        except (KeyError, TypeError, ValueError) as e:
            self.logger.error(f"Error parsing elevation data: {e}", exc_info=True)
            raise ProviderFailure(f"Malformed elevation response: {e}") from e

        if len(elevations) != expected:
            raise ProviderFailure(
                f"Elevation provider returned {len(elevations)} values for {expected} points"
            )
        if not all(math.isfinite(x) for x in elevations):
            raise ProviderFailure("Elevation provider returned non-finite values")

        return elevations
