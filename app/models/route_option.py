"""
RouteOption model: a persisted, not-yet-committed candidate routing.
"""
from typing import Any, Optional
from uuid import UUID

from sqlalchemy import JSON, Float, Integer, Text, UniqueConstraint, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from app.models.base import BaseModel


class RouteOption(BaseModel):
    """
    One candidate of a generation batch.

    Options carry everything needed to materialize a route on their own
    (the leg payload is readable without joins) and are deleted in bulk
    once one of them is committed.
    """
    __tablename__ = "route_options"
    __repr_attrs__ = ("request_id", "option_index")
    __table_args__ = (
        UniqueConstraint("request_id", "option_index", name="uq_route_options_request_index"),
    )

    request_id: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        index=True,
    )

    # Set when the batch was generated for a request that already has a route
    route_id: Mapped[Optional[UUID]] = mapped_column(
        Uuid(as_uuid=True),
        nullable=True,
        index=True,
    )

    option_index: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        comment="Position within the batch (1-based)",
    )

    total_distance_km: Mapped[float] = mapped_column(Float, nullable=False)
    total_duration_hours: Mapped[float] = mapped_column(Float, nullable=False)

    # =========================================================================
    # Serialized Payload
    # =========================================================================
    warehouse_ids: Mapped[list[int]] = mapped_column(JSON, nullable=False, default=list)
    warehouse_names: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    legs: Mapped[list[dict[str, Any]]] = mapped_column(JSON, nullable=False, default=list)

    geometry: Mapped[Optional[str]] = mapped_column(
        Text,
        nullable=True,
        comment="Per-leg encoded polylines joined with '|'",
    )
