"""API test fixtures -- helpers for configuring mock session returns."""
from datetime import datetime
from decimal import Decimal
from unittest.mock import MagicMock
from uuid import uuid4

from app.models.enums import SegmentStatus


def make_mock_result(scalar_value=None, scalars_list=None, scalar=None):
    """Create a mock SQLAlchemy Result object."""
    result = MagicMock()
    result.scalar_one_or_none = MagicMock(return_value=scalar_value)
    result.scalar_one = MagicMock(return_value=scalar if scalar is not None else scalar_value)

    scalars_mock = MagicMock()
    scalars_mock.all = MagicMock(return_value=scalars_list or [])
    scalars_mock.unique = MagicMock(return_value=scalars_mock)
    result.scalars = MagicMock(return_value=scalars_mock)
    result.all = MagicMock(return_value=[(item.id,) for item in scalars_list or []])
    result.rowcount = len(scalars_list) if scalars_list else (1 if scalar_value else 0)

    return result


def make_mock_vehicle(vehicle_id=None, license_plate="AB123CD", available=True, active=True):
    """Create a mock Vehicle ORM object."""
    vehicle = MagicMock()
    vehicle.id = vehicle_id or uuid4()
    vehicle.license_plate = license_plate
    vehicle.brand = "Iveco"
    vehicle.model = "Stralis"
    vehicle.carrier_name = "Transportes Sur"
    vehicle.max_weight = Decimal("3000.00")
    vehicle.max_volume = Decimal("40.00")
    vehicle.base_cost = Decimal("1000.00")
    vehicle.cost_per_km = Decimal("1.50")
    vehicle.avg_fuel_consumption = 0.3
    vehicle.available = available
    vehicle.active = active
    vehicle.created_at = datetime.now()
    vehicle.updated_at = datetime.now()
    return vehicle


def make_mock_segment(segment_id=None, route_id=None, sequence_number=1, status="CREATED"):
    """Create a mock Segment ORM object."""
    segment = MagicMock()
    segment.id = segment_id or uuid4()
    segment.route_id = route_id or uuid4()
    segment.sequence_number = sequence_number
    segment.status = SegmentStatus(status)
    segment.origin_warehouse_id = 1
    segment.origin_name = "Buenos Aires"
    segment.origin_latitude = -34.6
    segment.origin_longitude = -58.4
    segment.destination_warehouse_id = 2
    segment.destination_name = "Rosario"
    segment.destination_latitude = -32.9
    segment.destination_longitude = -60.6
    segment.distance_km = 300.0
    segment.duration_hours = 3.5
    segment.vehicle_id = None
    segment.auto_generated = True
    segment.scheduled_start = datetime(2025, 1, 2)
    segment.scheduled_end = datetime(2025, 1, 2, 3, 30)
    segment.actual_start = None
    segment.actual_end = None
    segment.approximate_cost = None
    segment.actual_cost = None
    segment.created_at = datetime.now()
    segment.updated_at = datetime.now()
    return segment


def make_mock_route(route_id=None, request_id=7, segment_count=1):
    """Create a mock Route ORM object with its segments."""
    route = MagicMock()
    route.id = route_id or uuid4()
    route.request_id = request_id
    route.selected_option_id = None
    route.created_at = datetime.now()
    route.updated_at = datetime.now()
    route.segments = [
        make_mock_segment(route_id=route.id, sequence_number=n)
        for n in range(1, segment_count + 1)
    ]
    route.get_segments_ordered = MagicMock(return_value=route.segments)
    return route


def make_mock_option(option_id=None, request_id=7, option_index=1, route_id=None):
    """Create a mock RouteOption ORM object with one warehouse leg."""
    option = MagicMock()
    option.id = option_id or uuid4()
    option.request_id = request_id
    option.route_id = route_id
    option.option_index = option_index
    option.total_distance_km = 300.0
    option.total_duration_hours = 3.5
    option.warehouse_ids = [1, 2]
    option.warehouse_names = ["Buenos Aires", "Rosario"]
    option.legs = [{
        "sequence_number": 1,
        "origin_warehouse_id": 1,
        "origin_name": "Buenos Aires",
        "destination_warehouse_id": 2,
        "destination_name": "Rosario",
        "distance_km": 300.0,
        "duration_hours": 3.5,
    }]
    option.geometry = None
    option.created_at = datetime.now()
    option.updated_at = datetime.now()
    return option
