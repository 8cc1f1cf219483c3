"""
Route and Segment models.

A Route is the committed itinerary for one transport request; its Segments
are the ordered legs, created together with the route and deleted with it.
"""
from datetime import datetime
from decimal import Decimal
from typing import Optional
from uuid import UUID

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    DateTime,
    Enum,
    Float,
    ForeignKey,
    Integer,
    Numeric,
    String,
    UniqueConstraint,
    Uuid,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.models.base import BaseModel
from app.models.enums import SegmentStatus


class Route(BaseModel):
    """
    Committed itinerary for a single request.

    The request keeps its own pointer to the route id in the request
    service; this side only stores the request id.
    """
    __tablename__ = "routes"
    __repr_attrs__ = ("id", "request_id")

    request_id: Mapped[int] = mapped_column(
        Integer,
        unique=True,
        nullable=False,
        index=True,
    )

    # No FK: options are deleted once one of them is committed
    selected_option_id: Mapped[Optional[UUID]] = mapped_column(
        Uuid(as_uuid=True),
        nullable=True,
    )

    # =========================================================================
    # Relationships
    # =========================================================================
    segments: Mapped[list["Segment"]] = relationship(
        "Segment",
        back_populates="route",
        order_by="Segment.sequence_number",
        lazy="selectin",
        cascade="all, delete-orphan",
    )

    # =========================================================================
    # Helper Methods
    # =========================================================================

    def get_segments_ordered(self) -> list["Segment"]:
        """Get segments in sequence order."""
        return sorted(self.segments, key=lambda s: s.sequence_number)

    def all_finished(self) -> bool:
        return bool(self.segments) and all(s.is_finished for s in self.segments)


class Segment(BaseModel):
    """
    One directed leg of a route.

    An endpoint is either a warehouse (``*_warehouse_id`` set) or a raw
    coordinate (id null, coordinates only).
    """
    __tablename__ = "segments"
    __table_args__ = (
        UniqueConstraint("route_id", "sequence_number", name="uq_segments_route_sequence"),
        CheckConstraint(
            "actual_end IS NULL OR actual_start IS NULL OR actual_end >= actual_start",
            name="real_order",
        ),
    )

    route_id: Mapped[UUID] = mapped_column(
        ForeignKey("routes.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    sequence_number: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        comment="Order within the route (1-based)",
    )

    # =========================================================================
    # Endpoints
    # =========================================================================
    origin_warehouse_id: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    origin_name: Mapped[Optional[str]] = mapped_column(String(200), nullable=True)
    origin_latitude: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    origin_longitude: Mapped[Optional[float]] = mapped_column(Float, nullable=True)

    destination_warehouse_id: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    destination_name: Mapped[Optional[str]] = mapped_column(String(200), nullable=True)
    destination_latitude: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    destination_longitude: Mapped[Optional[float]] = mapped_column(Float, nullable=True)

    # =========================================================================
    # Measurement
    # =========================================================================
    distance_km: Mapped[float] = mapped_column(
        Float,
        nullable=False,
        default=0.0,
    )

    duration_hours: Mapped[float] = mapped_column(
        Float,
        nullable=False,
        default=0.0,
    )

    # =========================================================================
    # Execution
    # =========================================================================
    status: Mapped[SegmentStatus] = mapped_column(
        Enum(SegmentStatus, name="segment_status"),
        nullable=False,
        default=SegmentStatus.CREATED,
    )

    vehicle_id: Mapped[Optional[UUID]] = mapped_column(
        ForeignKey("vehicles.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )

    auto_generated: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=False,
    )

    # Local wall-clock times, stored without zone
    scheduled_start: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)
    scheduled_end: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)
    actual_start: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)
    actual_end: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)

    # =========================================================================
    # Cost
    # =========================================================================
    approximate_cost: Mapped[Optional[Decimal]] = mapped_column(
        Numeric(12, 2),
        nullable=True,
        comment="Estimate from scheduled timestamps",
    )

    actual_cost: Mapped[Optional[Decimal]] = mapped_column(
        Numeric(12, 2),
        nullable=True,
        comment="Cost from real timestamps",
    )

    # =========================================================================
    # Relationships
    # =========================================================================
    route: Mapped["Route"] = relationship(
        "Route",
        back_populates="segments",
    )

    # =========================================================================
    # Helper Methods
    # =========================================================================

    @property
    def is_started(self) -> bool:
        return self.actual_start is not None

    @property
    def is_finished(self) -> bool:
        return self.actual_end is not None

    @property
    def ends_at_warehouse(self) -> bool:
        return self.destination_warehouse_id is not None

    @property
    def starts_at_warehouse(self) -> bool:
        return self.origin_warehouse_id is not None

    def __repr__(self) -> str:
        return (
            f"<Segment(#{self.sequence_number} "
            f"{self.origin_warehouse_id}->{self.destination_warehouse_id}, "
            f"status={self.status})>"
        )
