"""
Segment lifecycle: assign -> start -> finish.

Which event is legal in which state comes from an injected, read-only
transition table. Every transition writes the segment and the vehicle in
one transaction and commits before the request service is notified.
"""
import logging
from datetime import datetime
from decimal import Decimal
from types import MappingProxyType
from typing import Callable, Mapping, Optional
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import CapacityError, NotFoundError, StateError
from app.models.enums import CargoState, RequestState, SegmentEvent, SegmentStatus
from app.models.route import Route, Segment
from app.services.costing import RouteCostService, previous_segment
from app.services.request_service import RequestServiceClient
from app.services.vehicles import VehicleRegistry

logger = logging.getLogger(__name__)

TransitionTable = Mapping[tuple[SegmentStatus, SegmentEvent], SegmentStatus]

DEFAULT_TRANSITIONS: TransitionTable = MappingProxyType({
    (SegmentStatus.CREATED, SegmentEvent.ASSIGN): SegmentStatus.ASSIGNED,
    # Reassignment is allowed until the segment starts
    (SegmentStatus.ASSIGNED, SegmentEvent.ASSIGN): SegmentStatus.ASSIGNED,
    (SegmentStatus.ASSIGNED, SegmentEvent.START): SegmentStatus.STARTED,
    (SegmentStatus.STARTED, SegmentEvent.FINISH): SegmentStatus.FINISHED,
})

_REFUSALS = {
    (SegmentStatus.CREATED, SegmentEvent.START): "has no vehicle assigned",
    (SegmentStatus.STARTED, SegmentEvent.START): "was already started",
    (SegmentStatus.FINISHED, SegmentEvent.START): "was already started",
    (SegmentStatus.CREATED, SegmentEvent.FINISH): "was not started",
    (SegmentStatus.ASSIGNED, SegmentEvent.FINISH): "was not started",
    (SegmentStatus.FINISHED, SegmentEvent.FINISH): "was already finished",
    (SegmentStatus.STARTED, SegmentEvent.ASSIGN): "already started",
    (SegmentStatus.FINISHED, SegmentEvent.ASSIGN): "already finished",
}


def to_local_naive(ts: datetime) -> datetime:
    """Segment timestamps are stored as local wall-clock time."""
    if ts.tzinfo is None:
        return ts
    return ts.astimezone().replace(tzinfo=None)


def real_hours(route: Route) -> float:
    """Sum of the real durations of all finished segments, in hours."""
    seconds = sum(
        (s.actual_end - s.actual_start).total_seconds()
        for s in route.segments
        if s.actual_start is not None and s.actual_end is not None
    )
    return round(seconds / 3600, 2)


class SegmentLifecycle:
    """
    Drives segments through their states.

    Assignment fails closed: a cargo whose weight or volume cannot be
    read blocks it. Notifications after a commit are best-effort.
    """

    def __init__(
        self,
        session: AsyncSession,
        requests: RequestServiceClient,
        costs: RouteCostService,
        transitions: Optional[TransitionTable] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self.session = session
        self.requests = requests
        self.costs = costs
        self.vehicles = VehicleRegistry(session)
        self.transitions = MappingProxyType(dict(
            transitions if transitions is not None else DEFAULT_TRANSITIONS
        ))
        self.clock = clock or datetime.now

    def next_status(self, segment: Segment, event: SegmentEvent) -> SegmentStatus:
        """
        Target state of ``event`` from the segment's current state.

        Raises:
            StateError: If the table has no such transition
        """
        target = self.transitions.get((segment.status, event))
        if target is None:
            reason = _REFUSALS.get(
                (segment.status, event),
                f"cannot {event.value.lower()} from {segment.status.value}",
            )
            raise StateError(f"Segment {segment.sequence_number} {reason}")
        return target

    # =========================================================================
    # Loading
    # =========================================================================

    async def _load(
        self,
        segment_id: UUID,
        route_id: Optional[UUID] = None,
    ) -> tuple[Route, Segment]:
        """
        Lock the segment's route, then read the route and all of its
        segments fresh under that lock.

        Instances already in the session are overwritten with the locked
        rows, so the state checks never run on values read before the lock.
        """
        await self.session.flush()
        result = await self.session.execute(
            select(Segment.route_id).where(Segment.id == segment_id)
        )
        owner_id = result.scalar_one_or_none()
        if owner_id is None or (route_id is not None and owner_id != route_id):
            where = f" on route {route_id}" if route_id is not None else ""
            raise NotFoundError(f"Segment {segment_id} not found{where}")

        result = await self.session.execute(
            select(Route)
            .where(Route.id == owner_id)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        route = result.scalar_one()

        result = await self.session.execute(
            select(Segment)
            .where(Segment.route_id == owner_id)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        segments = {s.id: s for s in result.scalars().all()}
        return route, segments[segment_id]

    def _timestamp(self, ts: Optional[datetime]) -> datetime:
        return to_local_naive(ts) if ts is not None else self.clock()

    # =========================================================================
    # Transitions
    # =========================================================================

    async def assign_vehicle(
        self,
        segment_id: UUID,
        vehicle_id: Optional[UUID] = None,
        license_plate: Optional[str] = None,
    ) -> Segment:
        """
        Bind a vehicle to a segment that has not started.

        Raises:
            NotFoundError: If the segment or vehicle does not exist
            StateError: If the segment started or the vehicle is inactive/unavailable
            CapacityError: If the cargo exceeds the vehicle's weight or volume
            IntegrationFailure: If the cargo measures cannot be read
        """
        route, segment = await self._load(segment_id)
        target = self.next_status(segment, SegmentEvent.ASSIGN)
        vehicle = await self.vehicles.lock(vehicle_id=vehicle_id, license_plate=license_plate)

        if segment.vehicle_id == vehicle.id:
            return segment
        self.vehicles.ensure_assignable(vehicle)

        cargo = await self.requests.get_cargo_for_request(route.request_id)
        if not vehicle.fits(cargo.weight, cargo.volume):
            raise CapacityError(
                f"Cargo ({cargo.weight} kg, {cargo.volume} m3) exceeds vehicle "
                f"{vehicle.license_plate} ({vehicle.max_weight} kg, {vehicle.max_volume} m3)"
            )

        self.vehicles.bind(vehicle)
        previous_vehicle = segment.vehicle_id
        if previous_vehicle is not None:
            await self.vehicles.release(previous_vehicle)

        segment.vehicle_id = vehicle.id
        segment.status = target
        await self.costs.refresh_approximate(route, segment, vehicle=vehicle)
        await self.session.commit()

        logger.info(
            f"Vehicle {vehicle.license_plate} assigned to segment {segment.sequence_number} "
            f"of route {route.id}"
        )
        return segment

    async def start(
        self,
        route_id: UUID,
        segment_id: UUID,
        ts: Optional[datetime] = None,
    ) -> Segment:
        """
        Record the real start of a segment.

        Raises:
            NotFoundError: If the segment is not on the route
            StateError: If unassigned, already started, or out of sequence
        """
        route, segment = await self._load(segment_id, route_id)
        target = self.next_status(segment, SegmentEvent.START)
        started_at = self._timestamp(ts)

        previous = previous_segment(route.segments, segment)
        if previous is not None:
            if previous.actual_end is None:
                raise StateError(
                    f"Segment {segment.sequence_number} cannot start before "
                    f"segment {previous.sequence_number} finishes"
                )
            if started_at < previous.actual_end:
                raise StateError(
                    f"Start {started_at} precedes the end of segment "
                    f"{previous.sequence_number} ({previous.actual_end})"
                )

        segment.actual_start = started_at
        segment.status = target

        if previous is not None:
            # Dwell nights at the previous stop are known now
            await self.costs.refresh_actual(route, previous)

        await self.session.commit()
        logger.info(f"Segment {segment.sequence_number} of route {route.id} started at {started_at}")

        if previous is None:
            await self.requests.notify_request_state(route.request_id, RequestState.IN_TRANSIT)
            await self.requests.notify_cargo_state(route.request_id, CargoState.IN_TRANSIT)
        elif segment.starts_at_warehouse:
            await self.requests.notify_cargo_state(route.request_id, CargoState.IN_TRANSIT)
        return segment

    async def finish(
        self,
        route_id: UUID,
        segment_id: UUID,
        ts: Optional[datetime] = None,
    ) -> Segment:
        """
        Record the real end of a segment and release its vehicle.

        Raises:
            NotFoundError: If the segment is not on the route
            StateError: If not started, already finished, or ending before its start
        """
        route, segment = await self._load(segment_id, route_id)
        target = self.next_status(segment, SegmentEvent.FINISH)
        finished_at = self._timestamp(ts)
        if finished_at < segment.actual_start:
            raise StateError(
                f"End {finished_at} precedes the start of segment "
                f"{segment.sequence_number} ({segment.actual_start})"
            )

        segment.actual_end = finished_at
        segment.status = target
        vehicle = await self.vehicles.release(segment.vehicle_id)

        tariffs = await self.costs.tariffs.current()
        await self.costs.refresh_actual(route, segment, vehicle=vehicle, tariffs=tariffs)

        completed = route.all_finished()
        final_cost: Optional[Decimal] = None
        if completed:
            final_cost = self.costs.final_cost(route, tariffs)

        await self.session.commit()
        logger.info(f"Segment {segment.sequence_number} of route {route.id} finished at {finished_at}")

        if completed:
            hours = real_hours(route)
            logger.info(f"Route {route.id} completed: cost={final_cost}, hours={hours}")
            await self.requests.notify_cargo_state(route.request_id, CargoState.DELIVERED)
            await self.requests.notify_completion(route.request_id, final_cost, hours)
            await self.requests.notify_request_state(route.request_id, RequestState.COMPLETED)
        elif segment.ends_at_warehouse:
            await self.requests.notify_cargo_state(route.request_id, CargoState.IN_WAREHOUSE)
        return segment
