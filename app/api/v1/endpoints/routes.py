"""
Route API endpoints.
"""
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query

from app.core.dependencies import (
    get_cost_service,
    get_route_committer,
    get_route_planner,
    get_route_queries,
    get_segment_lifecycle,
)
from app.schemas.cost import RouteCostBreakdown
from app.schemas.route import (
    RemeasureResponse,
    RouteListResponse,
    RouteResponse,
    SegmentEventRequest,
    SegmentListResponse,
    SegmentResponse,
)
from app.schemas.route_option import (
    RouteOptionListResponse,
    RouteOptionResponse,
    RoutePreviewRequest,
    RoutePreviewResponse,
)
from app.services.committer import RouteCommitter
from app.services.costing import RouteCostService
from app.services.lifecycle import SegmentLifecycle
from app.services.planner import RoutePlanner
from app.services.routes import RouteQueries

router = APIRouter()


@router.get("", response_model=RouteListResponse)
async def list_routes(
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=1000),
    queries: RouteQueries = Depends(get_route_queries),
):
    """List committed routes, newest first."""
    routes, total = await queries.list_routes(skip=skip, limit=limit)
    return RouteListResponse(
        items=[RouteResponse.model_validate(r) for r in routes],
        total=total,
    )


@router.post("/preview", response_model=RoutePreviewResponse)
async def preview_route(
    data: RoutePreviewRequest,
    planner: RoutePlanner = Depends(get_route_planner),
):
    """
    Measure a warehouse-to-warehouse route without storing it.

    With explicit intermediates exactly that chain is measured; otherwise
    the direct route plus (if requested) single-stop detours.
    """
    return await planner.preview(
        data.origin_warehouse_id,
        data.destination_warehouse_id,
        intermediate_ids=data.intermediate_warehouse_ids,
        include_variants=data.include_variants,
    )


@router.post("/options/{option_id}/confirm", response_model=RouteResponse, status_code=201)
async def confirm_option(
    option_id: UUID,
    committer: RouteCommitter = Depends(get_route_committer),
):
    """
    Commit a stored option as the route of its request.

    The other options of the request are deleted and the request is
    marked as programmed.
    """
    route = await committer.confirm_option(option_id)
    return RouteResponse.model_validate(route)


@router.get("/by-request/{request_id}", response_model=RouteResponse)
async def get_route_by_request(
    request_id: int,
    queries: RouteQueries = Depends(get_route_queries),
):
    """Get the route committed for a transport request."""
    route = await queries.get_by_request(request_id)
    return RouteResponse.model_validate(route)


@router.get("/{route_id}", response_model=RouteResponse)
async def get_route(
    route_id: UUID,
    queries: RouteQueries = Depends(get_route_queries),
):
    """Get a route with its ordered segments."""
    route = await queries.get(route_id)
    return RouteResponse.model_validate(route)


@router.delete("/{route_id}", status_code=204)
async def delete_route(
    route_id: UUID,
    queries: RouteQueries = Depends(get_route_queries),
):
    """Delete a route and its segments; held vehicles become available."""
    await queries.delete(route_id)


# =============================================================================
# Options of an existing route
# =============================================================================


@router.get("/{route_id}/options", response_model=RouteOptionListResponse)
async def list_route_options(
    route_id: UUID,
    planner: RoutePlanner = Depends(get_route_planner),
):
    """Options generated for the request after its route was committed."""
    options = await planner.list_options(route_id=route_id)
    return RouteOptionListResponse(
        items=[RouteOptionResponse.model_validate(o) for o in options],
        total=len(options),
    )


@router.post("/{route_id}/options/{option_id}/select", response_model=RouteResponse)
async def select_option(
    route_id: UUID,
    option_id: UUID,
    committer: RouteCommitter = Depends(get_route_committer),
):
    """Replace the segments of a route that has not started with an option."""
    route = await committer.select_option(route_id, option_id)
    return RouteResponse.model_validate(route)


# =============================================================================
# Segments
# =============================================================================


@router.get("/{route_id}/segments", response_model=SegmentListResponse)
async def list_segments(
    route_id: UUID,
    queries: RouteQueries = Depends(get_route_queries),
):
    segments = await queries.list_segments(route_id)
    return SegmentListResponse(
        items=[SegmentResponse.model_validate(s) for s in segments],
        total=len(segments),
    )


@router.post("/{route_id}/segments/{segment_id}/start", response_model=SegmentResponse)
async def start_segment(
    route_id: UUID,
    segment_id: UUID,
    data: Optional[SegmentEventRequest] = None,
    lifecycle: SegmentLifecycle = Depends(get_segment_lifecycle),
):
    """
    Record the real start of a segment (now, unless a timestamp is given).

    The previous segment must have finished.
    """
    segment = await lifecycle.start(route_id, segment_id, data.timestamp if data else None)
    return SegmentResponse.model_validate(segment)


@router.post("/{route_id}/segments/{segment_id}/finish", response_model=SegmentResponse)
async def finish_segment(
    route_id: UUID,
    segment_id: UUID,
    data: Optional[SegmentEventRequest] = None,
    lifecycle: SegmentLifecycle = Depends(get_segment_lifecycle),
):
    """Record the real end of a segment and release its vehicle."""
    segment = await lifecycle.finish(route_id, segment_id, data.timestamp if data else None)
    return SegmentResponse.model_validate(segment)


# =============================================================================
# Cost & measurement
# =============================================================================


@router.post("/{route_id}/costs", response_model=RouteCostBreakdown)
async def compute_route_costs(
    route_id: UUID,
    costs: RouteCostService = Depends(get_cost_service),
):
    """Recompute the approximate cost of every segment of a route."""
    return await costs.compute_route_costs(route_id)


@router.post("/{route_id}/remeasure", response_model=RemeasureResponse)
async def remeasure_route(
    route_id: UUID,
    queries: RouteQueries = Depends(get_route_queries),
):
    """Query the distance oracle again for each segment."""
    return await queries.remeasure(route_id)
