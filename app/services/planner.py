"""
Route planning entry point.

Turns a transport request into a stored batch of options: the raw pickup
and delivery coordinates are snapped to their nearest warehouses, the
direct chain and single-stop detours are measured, and every successful
variant is kept as a numbered option.
"""
import logging
from typing import Optional
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import OracleFailure, StateError, ValidationError
from app.models.route import Route
from app.models.route_option import RouteOption
from app.schemas.route_option import RoutePreviewResponse, TentativeRoute
from app.services.geo import Coordinate, nearest_warehouse
from app.services.options import OptionStore
from app.services.request_service import RequestServiceClient
from app.services.variants import CandidateSelector, raw_endpoints
from app.services.warehouses import WarehouseDirectory

logger = logging.getLogger(__name__)


def _failure_reasons(variants: list[TentativeRoute]) -> str:
    return "; ".join(v.message or "unknown error" for v in variants if not v.success)


class RoutePlanner:
    """Generates and previews route options."""

    def __init__(
        self,
        session: AsyncSession,
        selector: CandidateSelector,
        directory: WarehouseDirectory,
        requests: RequestServiceClient,
    ):
        self.session = session
        self.selector = selector
        self.directory = directory
        self.requests = requests
        self.options = OptionStore(session)

    async def generate_options(self, request_id: int) -> list[RouteOption]:
        """
        Build and store a fresh batch of options for a request.

        If the request already has a route, the batch is tied to it so one
        option can later replace its segments.

        Raises:
            ValidationError: If the request lacks coordinates or both ends
                snap to the same warehouse
            StateError: If no warehouse is known
            OracleFailure: If no variant could be measured
            IntegrationFailure: If the request or warehouse listing is unavailable
        """
        request = await self.requests.get_request(request_id)
        if not request.has_endpoints:
            raise ValidationError(f"Request {request_id} has no origin/destination coordinates")

        result = await self.session.execute(
            select(Route.id).where(Route.request_id == request_id)
        )
        route_id = result.scalar_one_or_none()

        warehouses = await self.directory.list_all()
        if not warehouses:
            raise StateError("No warehouses available to plan a route")

        origin = Coordinate(request.origin_latitude, request.origin_longitude)
        destination = Coordinate(request.destination_latitude, request.destination_longitude)
        origin_warehouse = nearest_warehouse(origin, warehouses)
        destination_warehouse = nearest_warehouse(destination, warehouses)
        if origin_warehouse.id == destination_warehouse.id:
            raise ValidationError(
                f"Origin and destination of request {request_id} both map to "
                f"warehouse {origin_warehouse.id}"
            )

        raw_origin, raw_destination = raw_endpoints(origin, destination)
        variants = await self.selector.build_variants(
            origin_warehouse.id,
            destination_warehouse.id,
            raw_origin=raw_origin,
            raw_destination=raw_destination,
            warehouses=warehouses,
        )
        successful = self.selector.successful(variants)
        if not successful:
            raise OracleFailure(
                f"No route could be measured for request {request_id}: {_failure_reasons(variants)}"
            )

        options = await self.options.save_batch(request_id, successful, route_id=route_id)
        await self.session.commit()
        logger.info(
            f"Generated {len(options)} option(s) for request {request_id} "
            f"({origin_warehouse.id} -> {destination_warehouse.id})"
        )
        return options

    async def list_options(
        self,
        request_id: Optional[int] = None,
        route_id: Optional[UUID] = None,
    ) -> list[RouteOption]:
        if route_id is not None:
            return await self.options.list_for_route(route_id)
        return await self.options.list_for_request(request_id)

    async def preview(
        self,
        origin_warehouse_id: int,
        destination_warehouse_id: int,
        intermediate_ids: Optional[list[int]] = None,
        include_variants: bool = True,
    ) -> RoutePreviewResponse:
        """
        Measure warehouse-only variants without storing anything.

        Raises:
            ValidationError: If origin and destination are the same warehouse
        """
        if origin_warehouse_id == destination_warehouse_id:
            raise ValidationError("Origin and destination warehouses must differ")

        variants = await self.selector.build_variants(
            origin_warehouse_id,
            destination_warehouse_id,
            intermediate_ids=intermediate_ids,
            include_alternatives=include_variants,
        )
        best = self.selector.select_best(variants)
        if best is None:
            return RoutePreviewResponse(
                success=False,
                message=_failure_reasons(variants),
                variants=variants,
            )
        return RoutePreviewResponse(
            success=True,
            message=f"{len(self.selector.successful(variants))} variant(s) measured",
            best=best,
            variants=variants,
        )
