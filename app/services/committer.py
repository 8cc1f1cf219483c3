"""
Route commit: turning a chosen variant or stored option into a Route.

All three entry points (commit a fresh variant, confirm a stored option,
select an option for an existing route) share one materialization:
legs become ordered segments with scheduled timestamps, sibling options
are dropped, and the local transaction commits before the request
service hears about it.
"""
import logging
from datetime import datetime, time, timedelta
from typing import Optional, Sequence
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import get_settings
from app.core.exceptions import (
    IntegrationFailure,
    NotFoundError,
    StateError,
    ValidationError,
)
from app.models.enums import RequestState, SegmentStatus
from app.models.route import Route, Segment
from app.schemas.route_option import LegSchema, TentativeRoute
from app.services.geo import WarehouseInfo
from app.services.options import OptionStore
from app.services.request_service import RequestServiceClient
from app.services.vehicles import VehicleRegistry
from app.services.warehouses import WarehouseDirectory

logger = logging.getLogger(__name__)


def first_departure(request_created_at: datetime) -> datetime:
    """Midnight of the day after the request was created."""
    return datetime.combine(request_created_at.date() + timedelta(days=1), time.min)


def schedule(
    legs: Sequence[LegSchema],
    first_start: datetime,
    dwell_buffer_hours: float,
) -> list[tuple[datetime, datetime]]:
    """
    Scheduled (start, end) for each leg.

    A leg lasts its duration truncated to whole minutes. The next leg
    departs right away after a raw point, or ``dwell_buffer_hours`` later
    after a warehouse stop.
    """
    slots = []
    cursor = first_start
    for leg in legs:
        start = cursor
        end = start + timedelta(minutes=int(leg.duration_hours * 60))
        slots.append((start, end))
        cursor = end
        if leg.destination_warehouse_id is not None:
            cursor += timedelta(hours=dwell_buffer_hours)
    return slots


class RouteCommitter:
    """Materializes routes from tentative variants and stored options."""

    def __init__(
        self,
        session: AsyncSession,
        directory: WarehouseDirectory,
        requests: RequestServiceClient,
        dwell_buffer_hours: Optional[float] = None,
    ):
        self.session = session
        self.directory = directory
        self.requests = requests
        self.options = OptionStore(session)
        self.vehicles = VehicleRegistry(session)
        self.dwell_buffer_hours = (
            dwell_buffer_hours
            if dwell_buffer_hours is not None
            else get_settings().dwell_buffer_hours
        )

    # =========================================================================
    # Entry points
    # =========================================================================

    async def commit_variant(self, request_id: int, variant: TentativeRoute) -> Route:
        """Commit a freshly built variant directly (no stored option)."""
        if not variant.success or not variant.legs:
            raise ValidationError("Only a successful variant with legs can be committed")
        route = await self._create_route(request_id, variant.legs)
        await self.requests.notify_route_attached(request_id, route.id)
        return route

    async def confirm_option(self, option_id: UUID) -> Route:
        """
        Create the route of a request from one of its stored options.

        Raises:
            NotFoundError: If the option does not exist
            ValidationError: If the option is empty or the request already has a route
        """
        option = await self.options.get(option_id)
        legs = self.options.legs_of(option)
        if not legs:
            raise ValidationError(f"Route option {option_id} has no legs")

        route = await self._create_route(option.request_id, legs, selected_option_id=option.id)
        await self.requests.notify_route_attached(route.request_id, route.id)
        await self.requests.notify_request_state(route.request_id, RequestState.PROGRAMMED)
        return route

    async def select_option(self, route_id: UUID, option_id: UUID) -> Route:
        """
        Replace the segments of an existing route with a stored option.

        Raises:
            NotFoundError: If the route or option does not exist
            StateError: If the option belongs to another route or a segment already started
        """
        route = await self._get_route(route_id)
        option = await self.options.get(option_id)
        if option.route_id != route.id:
            raise StateError(f"Route option {option_id} does not belong to route {route_id}")
        if any(s.is_started for s in route.segments):
            raise StateError(f"Route {route_id} already has started segments")

        legs = self.options.legs_of(option)
        if not legs:
            raise ValidationError(f"Route option {option_id} has no legs")

        for segment in route.segments:
            if segment.status.holds_vehicle:
                await self.vehicles.release(segment.vehicle_id)
        route.segments.clear()
        await self.session.flush()

        route.segments.extend(await self._build_segments(route.request_id, legs))
        route.selected_option_id = option.id
        await self.options.delete_for_request(route.request_id)
        await self.session.commit()

        logger.info(f"Route {route.id} now follows option {option.option_index} ({len(legs)} segments)")
        await self.requests.notify_route_attached(route.request_id, route.id)
        return route

    # =========================================================================
    # Materialization
    # =========================================================================

    async def _get_route(self, route_id: UUID) -> Route:
        result = await self.session.execute(select(Route).where(Route.id == route_id))
        route = result.scalar_one_or_none()
        if route is None:
            raise NotFoundError(f"Route {route_id} not found")
        return route

    async def _create_route(
        self,
        request_id: int,
        legs: Sequence[LegSchema],
        selected_option_id: Optional[UUID] = None,
    ) -> Route:
        existing = await self.session.execute(
            select(Route.id).where(Route.request_id == request_id)
        )
        if existing.scalar_one_or_none() is not None:
            raise ValidationError(f"Request {request_id} already has a route")

        route = Route(request_id=request_id, selected_option_id=selected_option_id)
        route.segments = await self._build_segments(request_id, legs)
        self.session.add(route)

        try:
            await self.session.flush()
        except IntegrityError as e:
            # Lost a race with a concurrent commit for the same request
            await self.session.rollback()
            raise ValidationError(f"Request {request_id} already has a route") from e

        await self.options.delete_for_request(request_id)
        await self.session.commit()
        logger.info(f"Created route {route.id} for request {request_id} with {len(legs)} segments")
        return route

    async def _request_created_at(self, request_id: int) -> datetime:
        try:
            request = await self.requests.get_request(request_id)
        except IntegrationFailure as e:
            logger.warning(f"Creation date of request {request_id} unavailable, using now: {e}")
            return datetime.now()
        if request.created_at is None:
            logger.warning(f"Request {request_id} has no creation date, using now")
            return datetime.now()
        created_at = request.created_at
        if created_at.tzinfo is not None:
            created_at = created_at.astimezone().replace(tzinfo=None)
        return created_at

    async def _build_segments(self, request_id: int, legs: Sequence[LegSchema]) -> list[Segment]:
        ordered = sorted(legs, key=lambda leg: leg.sequence_number)
        warehouse_ids = {
            w for leg in ordered
            for w in (leg.origin_warehouse_id, leg.destination_warehouse_id)
            if w is not None
        }
        resolved = await self.directory.get_many(sorted(warehouse_ids))

        first_start = first_departure(await self._request_created_at(request_id))
        slots = schedule(ordered, first_start, self.dwell_buffer_hours)

        segments = []
        for number, (leg, (start, end)) in enumerate(zip(ordered, slots), start=1):
            origin = _resolve_endpoint(
                leg, "origin", leg.origin_warehouse_id, resolved,
                leg.origin_latitude, leg.origin_longitude, leg.origin_name,
            )
            destination = _resolve_endpoint(
                leg, "destination", leg.destination_warehouse_id, resolved,
                leg.destination_latitude, leg.destination_longitude, leg.destination_name,
            )
            segments.append(Segment(
                sequence_number=number,
                origin_warehouse_id=leg.origin_warehouse_id,
                origin_name=origin[2],
                origin_latitude=origin[0],
                origin_longitude=origin[1],
                destination_warehouse_id=leg.destination_warehouse_id,
                destination_name=destination[2],
                destination_latitude=destination[0],
                destination_longitude=destination[1],
                distance_km=leg.distance_km,
                duration_hours=leg.duration_hours,
                status=SegmentStatus.CREATED,
                auto_generated=True,
                scheduled_start=start,
                scheduled_end=end,
            ))
        return segments


def _resolve_endpoint(
    leg: LegSchema,
    side: str,
    warehouse_id: Optional[int],
    resolved: dict[int, WarehouseInfo],
    latitude: Optional[float],
    longitude: Optional[float],
    name: Optional[str],
) -> tuple[Optional[float], Optional[float], Optional[str]]:
    """
    Coordinates and name of one leg endpoint.

    Warehouse endpoints take the directory's current data. When the
    directory cannot resolve one, the coordinates recorded at planning
    time are kept (logged); a warehouse-to-warehouse leg with neither
    aborts the commit.
    """
    if warehouse_id is None:
        if latitude is None or longitude is None:
            logger.warning(f"Leg {leg.sequence_number} has no {side} coordinates")
        return latitude, longitude, name

    info = resolved.get(warehouse_id)
    if info is not None:
        return info.latitude, info.longitude, info.name or name

    if latitude is not None and longitude is not None:
        logger.warning(
            f"Warehouse {warehouse_id} unresolved for leg {leg.sequence_number}, "
            f"keeping planned coordinates"
        )
        return latitude, longitude, name

    if leg.is_mandatory:
        raise IntegrationFailure(
            f"Warehouse {warehouse_id} of leg {leg.sequence_number} could not be resolved"
        )
    logger.warning(f"Warehouse {warehouse_id} unresolved for leg {leg.sequence_number}")
    return None, None, name
