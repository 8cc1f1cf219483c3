"""Fixtures for service tests running on the in-memory database."""
from datetime import datetime
from decimal import Decimal
from typing import Optional

import pytest

from app.models.vehicle import Vehicle
from app.schemas.route_option import LegSchema, TentativeRoute
from app.services.committer import RouteCommitter
from app.services.costing import RouteCostService
from app.services.geo import WarehouseInfo
from app.services.lifecycle import SegmentLifecycle
from tests.conftest import FakeDirectory

BUENOS_AIRES = WarehouseInfo(1, -34.6, -58.4, "Buenos Aires", Decimal("100"))
ROSARIO = WarehouseInfo(2, -32.9, -60.6, "Rosario", Decimal("90"))
CORDOBA = WarehouseInfo(3, -31.4, -64.2, "Cordoba", Decimal("80"))

REQUEST_CREATED = datetime(2025, 1, 1, 9, 30)


def leg(
    sequence: int,
    origin: Optional[WarehouseInfo],
    destination: Optional[WarehouseInfo],
    km: float,
    hours: float,
) -> LegSchema:
    """Leg between two warehouses; ``None`` stands for a raw point at (0, 0)."""
    return LegSchema(
        sequence_number=sequence,
        origin_warehouse_id=origin.id if origin else None,
        origin_name=origin.name if origin else "Origin point",
        origin_latitude=origin.latitude if origin else 0.0,
        origin_longitude=origin.longitude if origin else 0.0,
        destination_warehouse_id=destination.id if destination else None,
        destination_name=destination.name if destination else "Destination point",
        destination_latitude=destination.latitude if destination else 0.0,
        destination_longitude=destination.longitude if destination else 0.0,
        distance_km=km,
        duration_hours=hours,
    )


def variant(*legs: LegSchema) -> TentativeRoute:
    stops = []
    for item in legs:
        for warehouse_id in (item.origin_warehouse_id, item.destination_warehouse_id):
            if warehouse_id is not None and (not stops or stops[-1] != warehouse_id):
                stops.append(warehouse_id)
    return TentativeRoute(
        success=True,
        warehouse_ids=stops,
        legs=list(legs),
        total_distance_km=sum(item.distance_km for item in legs),
        total_duration_hours=sum(item.duration_hours for item in legs),
    )


THREE_LEGS = variant(
    leg(1, BUENOS_AIRES, ROSARIO, 300.0, 4.0),
    leg(2, ROSARIO, CORDOBA, 400.0, 5.0),
    leg(3, CORDOBA, None, 20.0, 0.5),
)


@pytest.fixture
def directory() -> FakeDirectory:
    return FakeDirectory([BUENOS_AIRES, ROSARIO, CORDOBA])


@pytest.fixture
def committer(db_session, directory, request_service) -> RouteCommitter:
    return RouteCommitter(db_session, directory, request_service, dwell_buffer_hours=24)


@pytest.fixture
def cost_service(db_session, directory, tariffs) -> RouteCostService:
    return RouteCostService(db_session, directory, tariffs)


@pytest.fixture
def lifecycle(db_session, request_service, cost_service) -> SegmentLifecycle:
    return SegmentLifecycle(db_session, request_service, cost_service)


@pytest.fixture
def add_vehicle(db_session):
    async def _add(
        plate: str = "AB123CD",
        max_weight: str = "3000",
        max_volume: str = "40",
        cost_per_km: str = "0",
        fuel: float = 0.0,
        active: bool = True,
    ) -> Vehicle:
        vehicle = Vehicle(
            license_plate=plate,
            max_weight=Decimal(max_weight),
            max_volume=Decimal(max_volume),
            cost_per_km=Decimal(cost_per_km),
            avg_fuel_consumption=fuel,
            available=True,
            active=active,
        )
        db_session.add(vehicle)
        await db_session.commit()
        return vehicle

    return _add


@pytest.fixture
def committed_route(committer, request_service):
    """Commit ``THREE_LEGS`` (or the given variant) for request 7."""
    async def _commit(route_variant: TentativeRoute = THREE_LEGS, request_id: int = 7):
        if request_id not in request_service.requests:
            request_service.add_request(
                request_id, cargo_id=request_id * 10, created_at=REQUEST_CREATED,
                weight="1000", volume="20",
            )
        route = await committer.commit_variant(request_id, route_variant)
        request_service.writes.clear()
        return route

    return _commit
