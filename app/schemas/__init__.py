"""
Pydantic schemas for API request/response validation.
"""

from app.schemas.base import BaseSchema, ErrorResponse, IDSchema
from app.schemas.vehicle import (
    VehicleCreate,
    VehicleStatusUpdate,
    VehicleCarrierUpdate,
    VehicleResponse,
    VehicleListResponse,
)
from app.schemas.route_option import (
    LegSchema,
    TentativeRoute,
    RoutePreviewRequest,
    RoutePreviewResponse,
    RouteOptionResponse,
    RouteOptionListResponse,
)
from app.schemas.route import (
    SegmentResponse,
    RouteResponse,
    RouteListResponse,
    SegmentListResponse,
    SegmentEventRequest,
    AssignVehicleRequest,
    RemeasureResponse,
)
from app.schemas.cost import SegmentCostLine, RouteCostBreakdown

__all__ = [
    # Base
    "BaseSchema",
    "ErrorResponse",
    "IDSchema",
    # Vehicle
    "VehicleCreate",
    "VehicleStatusUpdate",
    "VehicleCarrierUpdate",
    "VehicleResponse",
    "VehicleListResponse",
    # Options
    "LegSchema",
    "TentativeRoute",
    "RoutePreviewRequest",
    "RoutePreviewResponse",
    "RouteOptionResponse",
    "RouteOptionListResponse",
    # Route
    "SegmentResponse",
    "RouteResponse",
    "RouteListResponse",
    "SegmentListResponse",
    "SegmentEventRequest",
    "AssignVehicleRequest",
    "RemeasureResponse",
    # Cost
    "SegmentCostLine",
    "RouteCostBreakdown",
]
