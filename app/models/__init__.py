"""
ORM models: vehicles, routes with their segments, and stored route options.
"""

# Enums
from app.models.enums import (
    SegmentStatus,
    SegmentEvent,
    RequestState,
    CargoState,
)

# Base
from app.models.base import BaseModel

# Domain Models
from app.models.vehicle import Vehicle
from app.models.route import Route, Segment
from app.models.route_option import RouteOption

__all__ = [
    # Enums
    "SegmentStatus",
    "SegmentEvent",
    "RequestState",
    "CargoState",
    # Base
    "BaseModel",
    # Domain Models
    "Vehicle",
    "Route",
    "Segment",
    "RouteOption",
]
