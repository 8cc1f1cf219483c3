"""
Vehicle model for the route planner.

A vehicle is bound to at most one unfinished segment at a time; the
``available`` flag is flipped only by segment assignment and release.
"""
from decimal import Decimal
from typing import Optional

from sqlalchemy import Boolean, Float, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column

from app.models.base import BaseModel


class Vehicle(BaseModel):
    """
    Truck registered with a carrier.

    Cost Properties:
    ----------------
    - cost_per_km: Variable cost charged per kilometer driven
    - avg_fuel_consumption: Liters of fuel per kilometer
      Used in: fuel_cost = avg_fuel_consumption × distance × fuel_price
    """
    __tablename__ = "vehicles"

    # =========================================================================
    # Basic Identification
    # =========================================================================
    license_plate: Mapped[str] = mapped_column(
        String(20),
        unique=True,
        nullable=False,
        index=True,
    )

    brand: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    model: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)

    carrier_name: Mapped[Optional[str]] = mapped_column(
        String(200),
        nullable=True,
        comment="Carrier operating the truck",
    )

    # =========================================================================
    # Capacity
    # =========================================================================
    max_weight: Mapped[Decimal] = mapped_column(
        Numeric(10, 2),
        nullable=False,
        comment="Maximum cargo weight in kg",
    )

    max_volume: Mapped[Decimal] = mapped_column(
        Numeric(10, 2),
        nullable=False,
        comment="Maximum cargo volume in m³",
    )

    # =========================================================================
    # Cost Properties
    # =========================================================================
    base_cost: Mapped[Optional[Decimal]] = mapped_column(
        Numeric(12, 2),
        nullable=True,
    )

    cost_per_km: Mapped[Decimal] = mapped_column(
        Numeric(10, 2),
        nullable=False,
        default=Decimal("0"),
    )

    avg_fuel_consumption: Mapped[float] = mapped_column(
        Float,
        nullable=False,
        default=0.0,
        comment="Liters per km",
    )

    # =========================================================================
    # Status
    # =========================================================================
    available: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=True,
    )

    active: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=True,
    )

    # =========================================================================
    # Helper Methods
    # =========================================================================

    @property
    def is_assignable(self) -> bool:
        """Can be bound to a new segment."""
        return self.available and self.active

    def fits(self, weight: Decimal, volume: Decimal) -> bool:
        """Check whether a load is within both capacity limits."""
        return weight <= self.max_weight and volume <= self.max_volume

    def __repr__(self) -> str:
        return f"<Vehicle({self.license_plate}, available={self.available})>"
