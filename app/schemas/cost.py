"""
Cost breakdown schemas.
"""
from decimal import Decimal
from uuid import UUID

from app.schemas.base import BaseSchema


class SegmentCostLine(BaseSchema):
    segment_id: UUID
    sequence_number: int
    distance_km: float
    km_cost: Decimal
    fuel_cost: Decimal
    dwell_nights: int
    dwell_cost: Decimal
    total: Decimal


class RouteCostBreakdown(BaseSchema):
    """Approximate cost of a whole route, management fee included."""
    route_id: UUID
    segment_count: int
    fuel_price_per_liter: Decimal
    management_fee_total: Decimal
    total_cost: Decimal
    segments: list[SegmentCostLine]
