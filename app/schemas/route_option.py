"""
Schemas for tentative routes and persisted route options.
"""
from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import Field, computed_field

from app.schemas.base import BaseSchema, IDSchema


class LegSchema(BaseSchema):
    """
    One measured leg of a tentative route.

    This is also the serialized form stored in ``route_options.legs``; a
    null warehouse id marks a raw coordinate endpoint.
    """
    sequence_number: int = Field(..., ge=1)

    origin_warehouse_id: Optional[int] = None
    origin_name: Optional[str] = None
    origin_latitude: Optional[float] = None
    origin_longitude: Optional[float] = None

    destination_warehouse_id: Optional[int] = None
    destination_name: Optional[str] = None
    destination_latitude: Optional[float] = None
    destination_longitude: Optional[float] = None

    distance_km: float = Field(..., ge=0)
    duration_hours: float = Field(..., ge=0)
    geometry: Optional[str] = None

    @property
    def is_mandatory(self) -> bool:
        """Both endpoints are warehouses."""
        return (
            self.origin_warehouse_id is not None
            and self.destination_warehouse_id is not None
        )

    def summary(self) -> str:
        origin = self.origin_name or "Origin"
        destination = self.destination_name or "Destination"
        return (
            f"Leg {self.sequence_number}: {origin} -> {destination} "
            f"({self.distance_km:.2f} km, {self.duration_hours:.2f} h)"
        )


class TentativeRoute(BaseSchema):
    """A fully measured candidate route, or the reason it could not be built."""
    success: bool
    message: Optional[str] = None
    warehouse_ids: list[int] = Field(default_factory=list)
    warehouse_names: list[str] = Field(default_factory=list)
    legs: list[LegSchema] = Field(default_factory=list)
    total_distance_km: float = 0.0
    total_duration_hours: float = 0.0
    geometry: Optional[str] = None

    @classmethod
    def failed(cls, message: str) -> "TentativeRoute":
        return cls(success=False, message=message)


# =============================================================================
# Preview
# =============================================================================


class RoutePreviewRequest(BaseSchema):
    """Warehouse-only preview; nothing is persisted."""
    origin_warehouse_id: int
    destination_warehouse_id: int
    intermediate_warehouse_ids: list[int] = Field(default_factory=list)
    include_variants: bool = Field(
        default=True,
        description="Also try single-stop detours through nearby warehouses",
    )


class RoutePreviewResponse(BaseSchema):
    success: bool
    message: Optional[str] = None
    best: Optional[TentativeRoute] = None
    variants: list[TentativeRoute] = Field(default_factory=list)


# =============================================================================
# Persisted Options
# =============================================================================


class RouteOptionResponse(IDSchema):
    """Stored option (path geometry omitted)."""
    request_id: int
    route_id: Optional[UUID] = None
    option_index: int
    total_distance_km: float
    total_duration_hours: float
    warehouse_ids: list[int] = Field(default_factory=list)
    warehouse_names: list[str] = Field(default_factory=list)
    legs: list[LegSchema] = Field(default_factory=list)
    created_at: datetime

    @computed_field
    @property
    def summary(self) -> str:
        return (
            f"Option {self.option_index}: {self.total_distance_km:.2f} km, "
            f"{self.total_duration_hours:.2f} h, {len(self.legs)} legs"
        )

    @computed_field
    @property
    def leg_summaries(self) -> list[str]:
        return [leg.summary() for leg in self.legs]


class RouteOptionListResponse(BaseSchema):
    items: list[RouteOptionResponse]
    total: int
