"""
Segment API endpoints.
"""
from uuid import UUID

from fastapi import APIRouter, Depends

from app.core.dependencies import get_segment_lifecycle
from app.schemas.route import AssignVehicleRequest, SegmentResponse
from app.services.lifecycle import SegmentLifecycle

router = APIRouter()


@router.post("/{segment_id}/assign", response_model=SegmentResponse)
async def assign_vehicle(
    segment_id: UUID,
    data: AssignVehicleRequest,
    lifecycle: SegmentLifecycle = Depends(get_segment_lifecycle),
):
    """
    Assign a vehicle to a segment, by id or license plate.

    Refused with 409 when the cargo does not fit or the vehicle is taken.
    """
    segment = await lifecycle.assign_vehicle(
        segment_id,
        vehicle_id=data.vehicle_id,
        license_plate=data.license_plate,
    )
    return SegmentResponse.model_validate(segment)
