"""Tests for route materialization from variants and stored options."""
from datetime import datetime
from uuid import uuid4

import pytest
from sqlalchemy import select

from app.core.exceptions import NotFoundError, StateError, ValidationError
from app.models.enums import RequestState, SegmentStatus
from app.models.route import Route, Segment
from app.models.route_option import RouteOption
from app.schemas.route_option import TentativeRoute
from app.services.committer import first_departure, schedule
from app.services.options import OptionStore
from tests.unit.conftest import (
    BUENOS_AIRES,
    CORDOBA,
    REQUEST_CREATED,
    ROSARIO,
    THREE_LEGS,
    leg,
    variant,
)


class TestSchedule:

    def test_first_departure_is_next_midnight(self):
        assert first_departure(datetime(2025, 1, 1, 23, 59)) == datetime(2025, 1, 2, 0, 0)

    def test_buffer_after_warehouse_only(self):
        slots = schedule(THREE_LEGS.legs, datetime(2025, 1, 2), dwell_buffer_hours=24)
        assert slots == [
            (datetime(2025, 1, 2, 0, 0), datetime(2025, 1, 2, 4, 0)),
            (datetime(2025, 1, 3, 4, 0), datetime(2025, 1, 3, 9, 0)),
            (datetime(2025, 1, 4, 9, 0), datetime(2025, 1, 4, 9, 30)),
        ]

    def test_raw_destination_departs_immediately(self):
        legs = [leg(1, None, None, 10.0, 0.5), leg(2, None, None, 5.0, 0.25)]
        slots = schedule(legs, datetime(2025, 1, 2), dwell_buffer_hours=24)
        assert slots[1][0] == datetime(2025, 1, 2, 0, 30)

    def test_duration_truncated_to_minutes(self):
        slots = schedule([leg(1, None, None, 1.0, 0.999)], datetime(2025, 1, 2), 24)
        assert slots[0][1] == datetime(2025, 1, 2, 0, 59)


class TestCommitVariant:

    async def test_creates_ordered_segments(self, committed_route, db_session):
        route = await committed_route()

        segments = (await db_session.execute(
            select(Segment).where(Segment.route_id == route.id).order_by(Segment.sequence_number)
        )).scalars().all()
        assert [s.sequence_number for s in segments] == [1, 2, 3]
        assert all(s.status == SegmentStatus.CREATED for s in segments)
        assert all(s.auto_generated for s in segments)
        assert all(s.vehicle_id is None for s in segments)
        assert segments[0].scheduled_start == datetime(2025, 1, 2, 0, 0)
        assert segments[2].scheduled_end == datetime(2025, 1, 4, 9, 30)
        assert segments[0].origin_name == "Buenos Aires"
        assert segments[2].destination_warehouse_id is None

    async def test_notifies_route_attached(self, committer, request_service):
        request_service.add_request(7, created_at=REQUEST_CREATED)

        route = await committer.commit_variant(7, THREE_LEGS)

        assert request_service.writes == [("attach_route", 7, route.id)]

    async def test_second_route_for_request_rejected(self, committed_route, committer):
        await committed_route()

        with pytest.raises(ValidationError, match="already has a route"):
            await committer.commit_variant(7, THREE_LEGS)

    async def test_failed_variant_rejected(self, committer):
        with pytest.raises(ValidationError):
            await committer.commit_variant(7, TentativeRoute.failed("No route"))

    async def test_notification_failure_keeps_route(self, committer, request_service, db_session):
        request_service.add_request(7, created_at=REQUEST_CREATED)
        request_service.fail_writes = True

        route = await committer.commit_variant(7, THREE_LEGS)

        stored = (await db_session.execute(
            select(Route.id).where(Route.request_id == 7)
        )).scalar_one()
        assert stored == route.id

    async def test_unknown_request_date_falls_back_to_now(self, committer, db_session):
        before = datetime.now()
        route = await committer.commit_variant(8, THREE_LEGS)

        first = route.get_segments_ordered()[0]
        assert first.scheduled_start.date() > before.date()

    async def test_unresolved_warehouse_keeps_planned_coordinates(
        self, committer, directory, request_service,
    ):
        request_service.add_request(7, created_at=REQUEST_CREATED)
        del directory.warehouses[ROSARIO.id]

        route = await committer.commit_variant(7, THREE_LEGS)

        second = route.get_segments_ordered()[1]
        assert second.origin_latitude == ROSARIO.latitude
        assert second.origin_name == "Rosario"


class TestConfirmOption:

    async def _store(self, db_session, request_id=7, route_id=None):
        direct = variant(leg(1, BUENOS_AIRES, CORDOBA, 700.0, 8.0))
        return await OptionStore(db_session).save_batch(
            request_id, [THREE_LEGS, direct], route_id=route_id,
        )

    async def test_confirm_creates_route_and_drops_siblings(
        self, committer, request_service, db_session,
    ):
        request_service.add_request(7, created_at=REQUEST_CREATED)
        options = await self._store(db_session)
        await db_session.commit()

        route = await committer.confirm_option(options[1].id)

        assert route.selected_option_id == options[1].id
        assert [s.distance_km for s in route.segments] == [700.0]
        remaining = (await db_session.execute(select(RouteOption))).scalars().all()
        assert remaining == []
        assert request_service.writes == [
            ("attach_route", 7, route.id),
            ("request_state", 7, RequestState.PROGRAMMED),
        ]

    async def test_unknown_option(self, committer):
        with pytest.raises(NotFoundError):
            await committer.confirm_option(uuid4())


class TestSelectOption:

    async def test_replaces_segments(self, committed_route, committer, db_session, add_vehicle):
        route = await committed_route()
        vehicle = await add_vehicle()
        first = route.get_segments_ordered()[0]
        first.vehicle_id = vehicle.id
        first.status = SegmentStatus.ASSIGNED
        vehicle.available = False
        await db_session.commit()

        options = await OptionStore(db_session).save_batch(
            7, [variant(leg(1, BUENOS_AIRES, CORDOBA, 700.0, 8.0))], route_id=route.id,
        )
        await db_session.commit()

        updated = await committer.select_option(route.id, options[0].id)

        assert [s.distance_km for s in updated.segments] == [700.0]
        assert updated.selected_option_id == options[0].id
        assert vehicle.available is True
        count = len((await db_session.execute(
            select(Segment.id).where(Segment.route_id == route.id)
        )).all())
        assert count == 1

    async def test_option_of_other_route_rejected(self, committed_route, committer, db_session):
        route = await committed_route()
        options = await OptionStore(db_session).save_batch(7, [THREE_LEGS], route_id=uuid4())
        await db_session.commit()

        with pytest.raises(StateError):
            await committer.select_option(route.id, options[0].id)

    async def test_started_route_rejected(self, committed_route, committer, db_session):
        route = await committed_route()
        route.get_segments_ordered()[0].actual_start = datetime(2025, 1, 2)
        options = await OptionStore(db_session).save_batch(7, [THREE_LEGS], route_id=route.id)
        await db_session.commit()

        with pytest.raises(StateError, match="started"):
            await committer.select_option(route.id, options[0].id)
