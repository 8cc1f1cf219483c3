"""
Route queries and administration.
"""
import logging
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import NotFoundError
from app.models.route import Route, Segment
from app.schemas.route import RemeasureResponse
from app.services.distance_oracle import DistanceOracle
from app.services.geo import Coordinate
from app.services.vehicles import VehicleRegistry

logger = logging.getLogger(__name__)


class RouteQueries:
    """Read access to committed routes plus delete and remeasure."""

    def __init__(self, session: AsyncSession, oracle: DistanceOracle):
        self.session = session
        self.oracle = oracle
        self.vehicles = VehicleRegistry(session)

    async def list_routes(self, skip: int = 0, limit: int = 100) -> tuple[list[Route], int]:
        count_result = await self.session.execute(select(func.count(Route.id)))
        total = count_result.scalar_one()

        result = await self.session.execute(
            select(Route).order_by(Route.created_at.desc()).offset(skip).limit(limit)
        )
        return list(result.scalars().all()), total

    async def get(self, route_id: UUID) -> Route:
        result = await self.session.execute(select(Route).where(Route.id == route_id))
        route = result.scalar_one_or_none()
        if route is None:
            raise NotFoundError(f"Route {route_id} not found")
        return route

    async def get_by_request(self, request_id: int) -> Route:
        result = await self.session.execute(select(Route).where(Route.request_id == request_id))
        route = result.scalar_one_or_none()
        if route is None:
            raise NotFoundError(f"No route for request {request_id}")
        return route

    async def list_segments(self, route_id: UUID) -> list[Segment]:
        route = await self.get(route_id)
        return route.get_segments_ordered()

    async def delete(self, route_id: UUID) -> None:
        """Delete a route and its segments, freeing vehicles still held."""
        route = await self.get(route_id)
        for segment in route.segments:
            if segment.status.holds_vehicle:
                await self.vehicles.release(segment.vehicle_id)
        await self.session.delete(route)
        await self.session.commit()
        logger.info(f"Deleted route {route_id} (request {route.request_id})")

    async def remeasure(self, route_id: UUID) -> RemeasureResponse:
        """
        Ask the distance oracle again for every segment.

        Segments whose measurement fails keep their previous values and
        are listed in ``failures``.
        """
        route = await self.get(route_id)
        segments = route.get_segments_ordered()
        updated = 0
        failures = []

        for segment in segments:
            if None in (
                segment.origin_latitude, segment.origin_longitude,
                segment.destination_latitude, segment.destination_longitude,
            ):
                failures.append(f"Segment {segment.sequence_number}: missing coordinates")
                continue

            measurement = await self.oracle.measure(
                Coordinate(segment.origin_latitude, segment.origin_longitude),
                Coordinate(segment.destination_latitude, segment.destination_longitude),
            )
            if not measurement.success or measurement.distance_km is None:
                failures.append(f"Segment {segment.sequence_number}: {measurement.message}")
                continue
            if (
                measurement.distance_km == 0.0
                and segment.starts_at_warehouse
                and segment.ends_at_warehouse
                and segment.origin_warehouse_id != segment.destination_warehouse_id
            ):
                failures.append(f"Segment {segment.sequence_number}: measured 0 km")
                continue

            segment.distance_km = measurement.distance_km
            segment.duration_hours = measurement.duration_hours or 0.0
            updated += 1

        await self.session.commit()
        if failures:
            logger.warning(f"Remeasure of route {route_id}: {len(failures)} segment(s) failed")
        logger.info(f"Remeasured route {route_id}: {updated}/{len(segments)} segment(s) updated")

        return RemeasureResponse(
            route_id=route.id,
            segment_count=len(segments),
            updated_segments=updated,
            total_distance_km=round(sum(s.distance_km for s in segments), 2),
            total_duration_hours=round(sum(s.duration_hours for s in segments), 2),
            failures=failures,
        )
