"""Tests for waypoint types and straight-line geometry."""
import pytest

from app.services.geo import (
    Coordinate,
    RawPoint,
    WarehouseInfo,
    WarehouseStop,
    distance_to_segment_km,
    haversine_distance,
    nearest_warehouse,
    warehouse_chain,
)


class TestHaversine:

    def test_same_point_is_zero(self):
        assert haversine_distance(-34.6, -58.4, -34.6, -58.4) == 0.0

    def test_one_degree_latitude(self):
        assert haversine_distance(0, 0, 1, 0) == pytest.approx(111.19, abs=0.01)

    def test_symmetric(self):
        a = haversine_distance(-34.6, -58.4, -31.4, -64.2)
        b = haversine_distance(-31.4, -64.2, -34.6, -58.4)
        assert a == pytest.approx(b)


class TestNearestWarehouse:

    def test_picks_closest(self):
        warehouses = [
            WarehouseInfo(1, -34.6, -58.4),
            WarehouseInfo(2, -31.4, -64.2),
        ]
        assert nearest_warehouse(Coordinate(-31.0, -64.0), warehouses).id == 2

    def test_first_wins_ties(self):
        warehouses = [WarehouseInfo(5, 1.0, 0.0), WarehouseInfo(6, -1.0, 0.0)]
        assert nearest_warehouse(Coordinate(0.0, 0.0), warehouses).id == 5

    def test_empty(self):
        assert nearest_warehouse(Coordinate(0.0, 0.0), []) is None


class TestDistanceToSegment:

    def test_point_on_segment(self):
        d = distance_to_segment_km(Coordinate(0.0, 0.5), Coordinate(0.0, 0.0), Coordinate(0.0, 1.0))
        assert d == pytest.approx(0.0, abs=1e-9)

    def test_perpendicular_offset(self):
        d = distance_to_segment_km(Coordinate(0.1, 0.5), Coordinate(0.0, 0.0), Coordinate(0.0, 1.0))
        assert d == pytest.approx(11.132, abs=0.01)

    def test_beyond_end_measures_to_endpoint(self):
        d = distance_to_segment_km(Coordinate(0.0, 2.0), Coordinate(0.0, 0.0), Coordinate(0.0, 1.0))
        assert d == pytest.approx(111.32, abs=0.05)

    def test_degenerate_segment_measures_to_start(self):
        d = distance_to_segment_km(Coordinate(1.0, 0.0), Coordinate(0.0, 0.0), Coordinate(0.0, 0.0))
        assert d == pytest.approx(111.32, abs=0.01)


class TestWaypoints:

    def test_warehouse_chain(self):
        assert warehouse_chain(1, 2, [3]) == [
            WarehouseStop(1), WarehouseStop(3), WarehouseStop(2),
        ]

    def test_direct_chain(self):
        assert warehouse_chain(1, 2) == [WarehouseStop(1), WarehouseStop(2)]

    def test_raw_point_coordinate(self):
        assert RawPoint(1.5, 2.5).coordinate == Coordinate(1.5, 2.5)
