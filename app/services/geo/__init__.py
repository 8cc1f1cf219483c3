"""Waypoint types and straight-line geometry for route planning."""

from app.services.geo.distance import (
    distance_to_segment_km,
    haversine_distance,
    nearest_warehouse,
)
from app.services.geo.waypoints import (
    DESTINATION_POINT_NAME,
    ORIGIN_POINT_NAME,
    Coordinate,
    RawPoint,
    WarehouseInfo,
    WarehouseStop,
    Waypoint,
    warehouse_chain,
)

__all__ = [
    "DESTINATION_POINT_NAME",
    "ORIGIN_POINT_NAME",
    "Coordinate",
    "RawPoint",
    "WarehouseInfo",
    "WarehouseStop",
    "Waypoint",
    "warehouse_chain",
    "distance_to_segment_km",
    "haversine_distance",
    "nearest_warehouse",
]
