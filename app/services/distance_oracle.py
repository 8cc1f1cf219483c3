"""
Distance oracle backed by an OSRM server.

Measures road distance, duration and path between two coordinates.
Expected failures (no route, transport error, malformed answer) are
returned as a failed ``Measurement``; nothing is raised to callers.
"""
import logging
from dataclasses import dataclass
from typing import Optional, Protocol

import httpx

from app.core.config import get_settings
from app.core.exceptions import IntegrationFailure
from app.services.geo import Coordinate
from app.services.http import ServiceClient

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Measurement:
    """Outcome of a single oracle query."""
    success: bool
    distance_km: Optional[float] = None
    duration_hours: Optional[float] = None
    geometry: Optional[str] = None
    message: Optional[str] = None

    @classmethod
    def failed(cls, message: str) -> "Measurement":
        return cls(success=False, message=message)


class DistanceOracle(Protocol):
    """Anything able to measure the road leg between two coordinates."""

    async def measure(self, origin: Coordinate, destination: Coordinate) -> Measurement:
        ...


class OsrmDistanceOracle(ServiceClient):
    """
    OSRM ``route`` service client.

    API Documentation:
    http://project-osrm.org/docs/v5.24.0/api/#route-service
    """

    service_name = "OSRM"

    def __init__(
        self,
        base_url: Optional[str] = None,
        profile: Optional[str] = None,
        timeout: Optional[float] = None,
        client: Optional[httpx.AsyncClient] = None,
    ):
        config = get_settings()
        super().__init__(base_url or config.osrm_base_url, timeout=timeout, client=client)
        self.profile = profile or config.osrm_profile

    async def measure(self, origin: Coordinate, destination: Coordinate) -> Measurement:
        # OSRM expects lon,lat order
        coordinates = (
            f"{origin.longitude},{origin.latitude};"
            f"{destination.longitude},{destination.latitude}"
        )
        params = {"overview": "full", "steps": "false", "geometries": "polyline"}

        try:
            data = await self._get_json(f"/route/v1/{self.profile}/{coordinates}", params=params)
        except IntegrationFailure as e:
            logger.warning(f"Distance oracle unavailable: {e}")
            return Measurement.failed(str(e))

        if not isinstance(data, dict) or data.get("code") != "Ok" or not data.get("routes"):
            code = data.get("code") if isinstance(data, dict) else None
            return Measurement.failed(f"OSRM found no route (code={code})")

        route = data["routes"][0]
        try:
            return Measurement(
                success=True,
                distance_km=round(float(route["distance"]) / 1000.0, 2),
                duration_hours=round(float(route["duration"]) / 3600.0, 2),
                geometry=route.get("geometry"),
            )
        except (KeyError, TypeError, ValueError) as e:
            return Measurement.failed(f"Failed to parse OSRM response: {e}")
