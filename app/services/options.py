"""
Persistence of tentative route options.
"""
import logging
from typing import Optional, Sequence
from uuid import UUID

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import NotFoundError
from app.models.route_option import RouteOption
from app.schemas.route_option import LegSchema, TentativeRoute

logger = logging.getLogger(__name__)


class OptionStore:
    """
    Stores each generated variant as a numbered option.

    Options of one batch are numbered 1..n. A new batch for the same
    request replaces the previous one, so indices never collide.
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    async def save_batch(
        self,
        request_id: int,
        variants: Sequence[TentativeRoute],
        route_id: Optional[UUID] = None,
    ) -> list[RouteOption]:
        """Persist successful ``variants`` in order; failed ones are skipped."""
        await self.delete_for_request(request_id)

        options = []
        for variant in variants:
            if not variant.success:
                continue
            options.append(RouteOption(
                request_id=request_id,
                route_id=route_id,
                option_index=len(options) + 1,
                total_distance_km=variant.total_distance_km,
                total_duration_hours=variant.total_duration_hours,
                warehouse_ids=list(variant.warehouse_ids),
                warehouse_names=list(variant.warehouse_names),
                legs=[leg.model_dump(mode="json") for leg in variant.legs],
                geometry=variant.geometry,
            ))

        self.session.add_all(options)
        await self.session.flush()
        logger.info(f"Stored {len(options)} option(s) for request {request_id}")
        return options

    async def list_for_request(self, request_id: int) -> list[RouteOption]:
        result = await self.session.execute(
            select(RouteOption)
            .where(RouteOption.request_id == request_id)
            .order_by(RouteOption.option_index)
        )
        return list(result.scalars().all())

    async def list_for_route(self, route_id: UUID) -> list[RouteOption]:
        result = await self.session.execute(
            select(RouteOption)
            .where(RouteOption.route_id == route_id)
            .order_by(RouteOption.option_index)
        )
        return list(result.scalars().all())

    async def get(self, option_id: UUID) -> RouteOption:
        result = await self.session.execute(
            select(RouteOption).where(RouteOption.id == option_id)
        )
        option = result.scalar_one_or_none()
        if option is None:
            raise NotFoundError(f"Route option {option_id} not found")
        return option

    async def delete_for_request(self, request_id: int) -> int:
        """Remove every option of a request. Safe to call repeatedly."""
        result = await self.session.execute(
            delete(RouteOption).where(RouteOption.request_id == request_id)
        )
        await self.session.flush()
        if result.rowcount:
            logger.info(f"Deleted {result.rowcount} option(s) of request {request_id}")
        return result.rowcount or 0

    @staticmethod
    def legs_of(option: RouteOption) -> list[LegSchema]:
        """Rehydrate the ordered legs stored on an option."""
        legs = [LegSchema.model_validate(item) for item in option.legs or []]
        return sorted(legs, key=lambda leg: leg.sequence_number)
