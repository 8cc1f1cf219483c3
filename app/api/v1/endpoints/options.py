"""
Route option API endpoints (per transport request).
"""
from fastapi import APIRouter, Depends

from app.core.dependencies import get_route_planner
from app.schemas.route_option import RouteOptionListResponse, RouteOptionResponse
from app.services.planner import RoutePlanner

router = APIRouter()


@router.post(
    "/{request_id}/options",
    response_model=RouteOptionListResponse,
    status_code=201,
)
async def generate_options(
    request_id: int,
    planner: RoutePlanner = Depends(get_route_planner),
):
    """
    Generate route options for a transport request.

    Pickup and delivery are snapped to their nearest warehouses, then the
    direct route and up to three single-stop detours are measured. Every
    successful variant is stored as a numbered option, replacing any
    earlier batch.
    """
    options = await planner.generate_options(request_id)
    return RouteOptionListResponse(
        items=[RouteOptionResponse.model_validate(o) for o in options],
        total=len(options),
    )


@router.get("/{request_id}/options", response_model=RouteOptionListResponse)
async def list_options(
    request_id: int,
    planner: RoutePlanner = Depends(get_route_planner),
):
    """List the stored options of a request, by option number."""
    options = await planner.list_options(request_id=request_id)
    return RouteOptionListResponse(
        items=[RouteOptionResponse.model_validate(o) for o in options],
        total=len(options),
    )
