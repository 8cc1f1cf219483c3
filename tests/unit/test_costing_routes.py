"""Tests for route costing and route administration on a real session."""
from dataclasses import replace
from datetime import datetime
from decimal import Decimal
from uuid import uuid4

import pytest
from sqlalchemy import select

from app.core.exceptions import NotFoundError
from app.models.enums import SegmentStatus
from app.models.route import Route, Segment
from app.services.routes import RouteQueries
from app.services.warehouses import Tariffs
from tests.unit.conftest import BUENOS_AIRES, CORDOBA, ROSARIO


@pytest.fixture
def queries(db_session, oracle):
    return RouteQueries(db_session, oracle)


class TestComputeRouteCosts:

    async def test_two_scheduled_nights_in_warehouse(
        self, committed_route, cost_service, directory, db_session,
    ):
        directory.warehouses[ROSARIO.id] = replace(ROSARIO, daily_dwell_cost=Decimal("100"))
        route = await committed_route()
        first, second, _ = route.get_segments_ordered()
        first.scheduled_end = datetime(2025, 1, 1, 10, 0)
        second.scheduled_start = datetime(2025, 1, 3, 8, 0)
        await db_session.commit()

        breakdown = await cost_service.compute_route_costs(route.id)

        line = breakdown.segments[0]
        assert line.dwell_nights == 2
        assert line.dwell_cost == Decimal("200.00")
        assert first.approximate_cost == Decimal("200.00")

    async def test_totals_include_management_fee(
        self, committed_route, cost_service, tariffs, add_vehicle, db_session,
    ):
        tariffs.tariffs = Tariffs(
            fuel_price_per_liter=Decimal("1.00"), management_fee=Decimal("50"),
        )
        route = await committed_route()
        vehicle = await add_vehicle(cost_per_km="1.00", fuel=0.5)
        for segment in route.segments:
            segment.vehicle_id = vehicle.id
        await db_session.commit()

        breakdown = await cost_service.compute_route_costs(route.id)

        # 720 km at 1.00 + 0.5 l/km at 1.00, one night each in Rosario and Cordoba
        assert [line.total for line in breakdown.segments] == [
            Decimal("540.00"), Decimal("680.00"), Decimal("30.00"),
        ]
        assert breakdown.management_fee_total == Decimal("150.00")
        assert breakdown.total_cost == Decimal("1400.00")

    async def test_last_segment_never_dwells(self, committed_route, cost_service):
        route = await committed_route()

        breakdown = await cost_service.compute_route_costs(route.id)

        assert breakdown.segments[-1].dwell_nights == 0

    async def test_unknown_route(self, cost_service):
        with pytest.raises(NotFoundError):
            await cost_service.compute_route_costs(uuid4())

    async def test_directory_down_costs_no_dwell(
        self, committed_route, cost_service, directory,
    ):
        route = await committed_route()
        directory.unavailable = True

        breakdown = await cost_service.compute_route_costs(route.id)

        assert breakdown.segments[0].dwell_nights == 1
        assert breakdown.segments[0].dwell_cost == Decimal("0.00")


class TestRouteQueries:

    async def test_list_and_lookup(self, committed_route, queries):
        first = await committed_route(request_id=7)
        await committed_route(request_id=8)

        routes, total = await queries.list_routes()
        assert total == 2
        assert {r.request_id for r in routes} == {7, 8}

        assert (await queries.get_by_request(7)).id == first.id
        segments = await queries.list_segments(first.id)
        assert [s.sequence_number for s in segments] == [1, 2, 3]

    async def test_paging(self, committed_route, queries):
        await committed_route(request_id=7)
        await committed_route(request_id=8)

        routes, total = await queries.list_routes(skip=1, limit=1)
        assert total == 2
        assert len(routes) == 1

    async def test_missing_route(self, queries):
        with pytest.raises(NotFoundError):
            await queries.get(uuid4())
        with pytest.raises(NotFoundError):
            await queries.get_by_request(404)

    async def test_delete_releases_vehicles(
        self, committed_route, queries, add_vehicle, db_session,
    ):
        route = await committed_route()
        vehicle = await add_vehicle()
        first = route.get_segments_ordered()[0]
        first.vehicle_id = vehicle.id
        first.status = SegmentStatus.ASSIGNED
        vehicle.available = False
        await db_session.commit()

        await queries.delete(route.id)

        assert vehicle.available is True
        assert (await db_session.execute(select(Route.id))).all() == []
        assert (await db_session.execute(select(Segment.id))).all() == []


class TestRemeasure:

    async def test_updates_every_segment(self, committed_route, queries, oracle):
        route = await committed_route()
        oracle.set(BUENOS_AIRES.coordinate, ROSARIO.coordinate, 310.0, 4.2)

        result = await queries.remeasure(route.id)

        assert result.updated_segments == 3
        assert result.failures == []
        # remaining legs fall back to the 10 km default answer
        assert result.total_distance_km == 330.0
        assert route.get_segments_ordered()[0].duration_hours == 4.2

    async def test_failed_leg_keeps_previous_values(self, committed_route, queries, oracle):
        route = await committed_route()
        oracle.fail(ROSARIO.coordinate, CORDOBA.coordinate, "NoRoute")

        result = await queries.remeasure(route.id)

        assert result.updated_segments == 2
        assert result.failures == ["Segment 2: NoRoute"]
        assert route.get_segments_ordered()[1].distance_km == 400.0

    async def test_zero_km_between_warehouses_rejected(self, committed_route, queries, oracle):
        route = await committed_route()
        oracle.set(BUENOS_AIRES.coordinate, ROSARIO.coordinate, 0.0, 0.0)

        result = await queries.remeasure(route.id)

        assert result.failures == ["Segment 1: measured 0 km"]
        assert route.get_segments_ordered()[0].distance_km == 300.0
