"""
Segment cost model.

Formula:
    cost = cost_per_km × distance
         + fuel_consumption × distance × fuel_price_per_liter
         + dwell_nights × daily_dwell_cost

Every monetary amount is rounded to cents (half-up) as soon as it is
produced, and again at each aggregation step.
"""
from dataclasses import dataclass
from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable, Optional, Union

CENT = Decimal("0.01")

Number = Union[Decimal, float, int]


def to_money(value: Number) -> Decimal:
    """Round to cents, half-up."""
    return _decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)


def _decimal(value: Optional[Number]) -> Decimal:
    if value is None:
        return Decimal("0")
    if isinstance(value, Decimal):
        return value
    # str() keeps the printed float value instead of its binary expansion
    return Decimal(str(value))


@dataclass(frozen=True)
class SegmentCost:
    """Cost of one segment split by component."""
    distance_km: float
    km_cost: Decimal
    fuel_cost: Decimal
    dwell_nights: int
    dwell_cost: Decimal
    total: Decimal


class CostModel:
    """Pure cost arithmetic; callers choose which timestamps apply."""

    @staticmethod
    def dwell_nights(this_end: Optional[datetime], next_start: Optional[datetime]) -> int:
        """
        Calendar nights between the end of a segment and the next start.

        Only the dates count (10:00 on the 1st to 08:00 on the 3rd is two
        nights). Missing timestamps or a next start on an earlier date give 0.
        """
        if this_end is None or next_start is None:
            return 0
        return max(0, (next_start.date() - this_end.date()).days)

    def segment_cost(
        self,
        *,
        distance_km: float,
        cost_per_km: Optional[Number] = None,
        fuel_consumption: Optional[Number] = None,
        fuel_price_per_liter: Optional[Number] = None,
        dwell_nights: int = 0,
        daily_dwell_cost: Optional[Number] = None,
    ) -> SegmentCost:
        distance = _decimal(distance_km)
        nights = max(0, dwell_nights)

        km_cost = to_money(_decimal(cost_per_km) * distance)
        fuel_cost = to_money(
            _decimal(fuel_consumption) * distance * _decimal(fuel_price_per_liter)
        )
        dwell_cost = to_money(nights * _decimal(daily_dwell_cost))

        return SegmentCost(
            distance_km=distance_km,
            km_cost=km_cost,
            fuel_cost=fuel_cost,
            dwell_nights=nights,
            dwell_cost=dwell_cost,
            total=to_money(km_cost + fuel_cost + dwell_cost),
        )

    @staticmethod
    def management_total(management_fee: Number, segment_count: int) -> Decimal:
        return to_money(_decimal(management_fee) * segment_count)

    def route_total(
        self,
        segment_totals: Iterable[Number],
        management_fee: Number,
        segment_count: int,
    ) -> Decimal:
        """Sum of segment costs plus the management fee for each segment."""
        subtotal = to_money(sum((_decimal(t) for t in segment_totals), Decimal("0")))
        return to_money(subtotal + self.management_total(management_fee, segment_count))
