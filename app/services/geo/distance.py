"""
Straight-line distance helpers.

These never replace the distance oracle for measuring legs; they only
rank warehouses (nearest to a point, nearest to the origin-destination
line) before the oracle is queried.
"""
from math import atan2, cos, radians, sin, sqrt
from typing import Iterable, Optional

from app.services.geo.waypoints import Coordinate, WarehouseInfo

EARTH_RADIUS_KM = 6371.0
KM_PER_DEGREE_LAT = 111.32


def haversine_distance(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """
    Calculate the great-circle distance between two points in kilometers.

    Uses the Haversine formula.
    """
    lat1_rad = radians(lat1)
    lat2_rad = radians(lat2)
    delta_lat = radians(lat2 - lat1)
    delta_lon = radians(lon2 - lon1)

    a = sin(delta_lat / 2) ** 2 + cos(lat1_rad) * cos(lat2_rad) * sin(delta_lon / 2) ** 2
    c = 2 * atan2(sqrt(a), sqrt(1 - a))

    return EARTH_RADIUS_KM * c


def nearest_warehouse(
    point: Coordinate,
    warehouses: Iterable[WarehouseInfo],
) -> Optional[WarehouseInfo]:
    """Warehouse closest to ``point`` by great-circle distance (first wins ties)."""
    best: Optional[WarehouseInfo] = None
    best_distance = float("inf")
    for warehouse in warehouses:
        d = haversine_distance(
            point.latitude, point.longitude,
            warehouse.latitude, warehouse.longitude,
        )
        if d < best_distance:
            best, best_distance = warehouse, d
    return best


def distance_to_segment_km(point: Coordinate, start: Coordinate, end: Coordinate) -> float:
    """
    Perpendicular distance from ``point`` to the segment ``start``-``end``.

    Uses a locally flat (equirectangular) projection scaled at the mean
    latitude of the three points. The projection parameter is clamped to
    [0, 1] so points beyond either end measure to that end; a degenerate
    segment measures to ``start``.
    """
    mean_lat = radians((start.latitude + end.latitude + point.latitude) / 3.0)
    km_per_deg_lon = KM_PER_DEGREE_LAT * cos(mean_lat)

    def project(c: Coordinate) -> tuple[float, float]:
        return c.longitude * km_per_deg_lon, c.latitude * KM_PER_DEGREE_LAT

    ax, ay = project(start)
    bx, by = project(end)
    px, py = project(point)

    dx, dy = bx - ax, by - ay
    length_sq = dx * dx + dy * dy
    t = 0.0 if length_sq == 0 else ((px - ax) * dx + (py - ay) * dy) / length_sq
    t = max(0.0, min(1.0, t))

    cx, cy = ax + t * dx, ay + t * dy
    return sqrt((px - cx) ** 2 + (py - cy) ** 2)
