"""
Vehicle Pydantic schemas.
"""
from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import Field

from app.schemas.base import BaseSchema, IDSchema


class VehicleBase(BaseSchema):
    """Base vehicle schema."""
    license_plate: str = Field(..., min_length=1, max_length=20)
    max_weight: Decimal = Field(..., gt=0, description="Max weight in kg")
    max_volume: Decimal = Field(..., gt=0, description="Max volume in m³")


class VehicleCreate(VehicleBase):
    """Schema for registering a new vehicle."""
    brand: Optional[str] = Field(None, max_length=100)
    model: Optional[str] = Field(None, max_length=100)
    carrier_name: Optional[str] = Field(None, max_length=200)

    base_cost: Optional[Decimal] = Field(None, ge=0)
    cost_per_km: Decimal = Field(default=Decimal("0"), ge=0)
    avg_fuel_consumption: float = Field(
        default=0.0,
        ge=0,
        description="Liters of fuel per km",
    )
    active: bool = True


class VehicleStatusUpdate(BaseSchema):
    """Only the active flag is writable; availability follows segments."""
    active: bool


class VehicleCarrierUpdate(BaseSchema):
    carrier_name: str = Field(..., min_length=1, max_length=200)


class VehicleResponse(VehicleBase, IDSchema):
    """Schema for vehicle response."""
    brand: Optional[str] = None
    model: Optional[str] = None
    carrier_name: Optional[str] = None
    base_cost: Optional[Decimal] = None
    cost_per_km: Decimal
    avg_fuel_consumption: float
    available: bool
    active: bool
    created_at: datetime


class VehicleListResponse(BaseSchema):
    """Schema for list of vehicles."""
    items: list[VehicleResponse]
    total: int
