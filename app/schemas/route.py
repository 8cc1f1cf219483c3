"""
Route and Segment Pydantic schemas.
"""
from datetime import datetime
from decimal import Decimal
from typing import Optional
from uuid import UUID

from pydantic import Field, model_validator

from app.models.enums import SegmentStatus
from app.schemas.base import BaseSchema, IDSchema


class SegmentResponse(IDSchema):
    """Schema for segment response."""
    route_id: UUID
    sequence_number: int
    status: SegmentStatus

    origin_warehouse_id: Optional[int] = None
    origin_name: Optional[str] = None
    origin_latitude: Optional[float] = None
    origin_longitude: Optional[float] = None
    destination_warehouse_id: Optional[int] = None
    destination_name: Optional[str] = None
    destination_latitude: Optional[float] = None
    destination_longitude: Optional[float] = None

    distance_km: float
    duration_hours: float

    vehicle_id: Optional[UUID] = None
    auto_generated: bool

    scheduled_start: Optional[datetime] = None
    scheduled_end: Optional[datetime] = None
    actual_start: Optional[datetime] = None
    actual_end: Optional[datetime] = None

    approximate_cost: Optional[Decimal] = None
    actual_cost: Optional[Decimal] = None


class RouteResponse(IDSchema):
    """Schema for route response with its ordered segments."""
    request_id: int
    selected_option_id: Optional[UUID] = None
    created_at: datetime
    segments: list[SegmentResponse] = Field(default_factory=list)


class RouteListResponse(BaseSchema):
    """Schema for list of routes."""
    items: list[RouteResponse]
    total: int


class SegmentListResponse(BaseSchema):
    items: list[SegmentResponse]
    total: int


# =============================================================================
# Commands
# =============================================================================


class SegmentEventRequest(BaseSchema):
    """Start/finish body; the timestamp defaults to now."""
    timestamp: Optional[datetime] = None


class AssignVehicleRequest(BaseSchema):
    """Vehicle reference, by id or by plate."""
    vehicle_id: Optional[UUID] = None
    license_plate: Optional[str] = Field(None, min_length=1, max_length=20)

    @model_validator(mode="after")
    def exactly_one_reference(self) -> "AssignVehicleRequest":
        if (self.vehicle_id is None) == (self.license_plate is None):
            raise ValueError("Provide exactly one of vehicle_id or license_plate")
        return self


class RemeasureResponse(BaseSchema):
    """Result of re-querying the distance oracle for every segment."""
    route_id: UUID
    segment_count: int
    updated_segments: int
    total_distance_km: float
    total_duration_hours: float
    failures: list[str] = Field(default_factory=list)
