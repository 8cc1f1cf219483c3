"""
Route cost computation.

Gathers the inputs of ``CostModel`` (vehicle rates, tariffs, warehouse
dwell cost, neighbouring segment timestamps) and writes the results back
to segments.
"""
import logging
from decimal import Decimal
from typing import Optional, Sequence
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import IntegrationFailure, NotFoundError, ValidationError
from app.models.route import Route, Segment
from app.models.vehicle import Vehicle
from app.schemas.cost import RouteCostBreakdown, SegmentCostLine
from app.services.cost_model import CostModel, SegmentCost
from app.services.warehouses import Tariffs, TariffSource, WarehouseDirectory

logger = logging.getLogger(__name__)


def next_segment(segments: Sequence[Segment], segment: Segment) -> Optional[Segment]:
    """Segment following ``segment`` by sequence number, if any."""
    for candidate in segments:
        if candidate.sequence_number == segment.sequence_number + 1:
            return candidate
    return None


def previous_segment(segments: Sequence[Segment], segment: Segment) -> Optional[Segment]:
    for candidate in segments:
        if candidate.sequence_number == segment.sequence_number - 1:
            return candidate
    return None


class RouteCostService:
    """
    Approximate and real segment costs.

    - Approximate: dwell from scheduled end to the next scheduled start.
    - Real: dwell from real end to the next real start; no dwell while the
      next segment has not started.
    The last segment of a route never accrues dwell.
    """

    def __init__(
        self,
        session: AsyncSession,
        directory: WarehouseDirectory,
        tariffs: TariffSource,
        model: Optional[CostModel] = None,
    ):
        self.session = session
        self.directory = directory
        self.tariffs = tariffs
        self.model = model or CostModel()

    async def _vehicle(self, vehicle_id: Optional[UUID]) -> Optional[Vehicle]:
        if vehicle_id is None:
            return None
        return await self.session.get(Vehicle, vehicle_id)

    async def _dwell_rate(self, warehouse_id: int) -> Decimal:
        try:
            info = await self.directory.get(warehouse_id)
        except IntegrationFailure as e:
            logger.warning(f"Dwell cost of warehouse {warehouse_id} unavailable, using 0: {e}")
            return Decimal("0")
        return info.daily_dwell_cost if info is not None else Decimal("0")

    async def cost_segment(
        self,
        segments: Sequence[Segment],
        segment: Segment,
        *,
        actual: bool,
        tariffs: Tariffs,
        vehicle: Optional[Vehicle] = None,
    ) -> SegmentCost:
        following = next_segment(segments, segment)
        nights = 0
        if segment.ends_at_warehouse and following is not None:
            if actual:
                nights = self.model.dwell_nights(segment.actual_end, following.actual_start)
            else:
                nights = self.model.dwell_nights(segment.scheduled_end, following.scheduled_start)

        daily_rate = (
            await self._dwell_rate(segment.destination_warehouse_id) if nights else Decimal("0")
        )
        if vehicle is None:
            vehicle = await self._vehicle(segment.vehicle_id)

        return self.model.segment_cost(
            distance_km=segment.distance_km,
            cost_per_km=vehicle.cost_per_km if vehicle else None,
            fuel_consumption=vehicle.avg_fuel_consumption if vehicle else None,
            fuel_price_per_liter=tariffs.fuel_price_per_liter,
            dwell_nights=nights,
            daily_dwell_cost=daily_rate,
        )

    async def refresh_approximate(
        self,
        route: Route,
        segment: Segment,
        vehicle: Optional[Vehicle] = None,
        tariffs: Optional[Tariffs] = None,
    ) -> Decimal:
        tariffs = tariffs or await self.tariffs.current()
        cost = await self.cost_segment(
            route.segments, segment, actual=False, tariffs=tariffs, vehicle=vehicle,
        )
        segment.approximate_cost = cost.total
        return cost.total

    async def refresh_actual(
        self,
        route: Route,
        segment: Segment,
        vehicle: Optional[Vehicle] = None,
        tariffs: Optional[Tariffs] = None,
    ) -> Decimal:
        tariffs = tariffs or await self.tariffs.current()
        cost = await self.cost_segment(
            route.segments, segment, actual=True, tariffs=tariffs, vehicle=vehicle,
        )
        segment.actual_cost = cost.total
        return cost.total

    def final_cost(self, route: Route, tariffs: Tariffs) -> Decimal:
        """Real cost (approximate where no real cost exists) plus management fees."""
        totals = [
            s.actual_cost if s.actual_cost is not None else (s.approximate_cost or Decimal("0"))
            for s in route.segments
        ]
        return self.model.route_total(totals, tariffs.management_fee, len(route.segments))

    async def compute_route_costs(self, route_id: UUID) -> RouteCostBreakdown:
        """
        Recompute and store the approximate cost of every segment.

        Raises:
            NotFoundError: If the route does not exist
            ValidationError: If the route has no segments
        """
        result = await self.session.execute(select(Route).where(Route.id == route_id))
        route = result.scalar_one_or_none()
        if route is None:
            raise NotFoundError(f"Route {route_id} not found")
        segments = route.get_segments_ordered()
        if not segments:
            raise ValidationError(f"Route {route_id} has no segments to cost")

        tariffs = await self.tariffs.current()
        lines = []
        for segment in segments:
            cost = await self.cost_segment(segments, segment, actual=False, tariffs=tariffs)
            segment.approximate_cost = cost.total
            lines.append(SegmentCostLine(
                segment_id=segment.id,
                sequence_number=segment.sequence_number,
                distance_km=segment.distance_km,
                km_cost=cost.km_cost,
                fuel_cost=cost.fuel_cost,
                dwell_nights=cost.dwell_nights,
                dwell_cost=cost.dwell_cost,
                total=cost.total,
            ))

        await self.session.commit()

        management_total = self.model.management_total(tariffs.management_fee, len(segments))
        total = self.model.route_total(
            [line.total for line in lines], tariffs.management_fee, len(segments),
        )
        logger.info(f"Route {route_id} costed at {total} over {len(segments)} segment(s)")
        return RouteCostBreakdown(
            route_id=route.id,
            segment_count=len(segments),
            fuel_price_per_liter=tariffs.fuel_price_per_liter,
            management_fee_total=management_total,
            total_cost=total,
            segments=lines,
        )
