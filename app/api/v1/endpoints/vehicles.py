"""
Vehicle API endpoints.
"""
from typing import Optional

from fastapi import APIRouter, Depends

from app.core.dependencies import get_vehicle_registry
from app.schemas.vehicle import (
    VehicleCarrierUpdate,
    VehicleCreate,
    VehicleListResponse,
    VehicleResponse,
    VehicleStatusUpdate,
)
from app.services.vehicles import VehicleRegistry

router = APIRouter()


@router.get("", response_model=VehicleListResponse)
async def list_vehicles(
    available: Optional[bool] = None,
    registry: VehicleRegistry = Depends(get_vehicle_registry),
):
    """
    List all vehicles, ordered by plate.

    - **available**: Only vehicles that are (or are not) free for assignment
    """
    vehicles = await registry.list_vehicles(available=available)
    return VehicleListResponse(
        items=[VehicleResponse.model_validate(v) for v in vehicles],
        total=len(vehicles),
    )


@router.get("/{license_plate}", response_model=VehicleResponse)
async def get_vehicle(
    license_plate: str,
    registry: VehicleRegistry = Depends(get_vehicle_registry),
):
    """Get a specific vehicle by license plate."""
    vehicle = await registry.get_by_plate(license_plate)
    return VehicleResponse.model_validate(vehicle)


@router.post("", response_model=VehicleResponse, status_code=201)
async def create_vehicle(
    data: VehicleCreate,
    registry: VehicleRegistry = Depends(get_vehicle_registry),
):
    """Register a new vehicle. It starts out available."""
    vehicle = await registry.create(data)
    return VehicleResponse.model_validate(vehicle)


@router.patch("/{license_plate}/status", response_model=VehicleResponse)
async def update_vehicle_status(
    license_plate: str,
    data: VehicleStatusUpdate,
    registry: VehicleRegistry = Depends(get_vehicle_registry),
):
    """
    Activate or deactivate a vehicle.

    Availability is not writable here: it follows segment assignment.
    """
    vehicle = await registry.set_active(license_plate, data.active)
    return VehicleResponse.model_validate(vehicle)


@router.patch("/{license_plate}/carrier", response_model=VehicleResponse)
async def assign_carrier(
    license_plate: str,
    data: VehicleCarrierUpdate,
    registry: VehicleRegistry = Depends(get_vehicle_registry),
):
    """Set the carrier operating a vehicle."""
    vehicle = await registry.assign_carrier(license_plate, data.carrier_name)
    return VehicleResponse.model_validate(vehicle)


@router.delete("/{license_plate}", status_code=204)
async def delete_vehicle(
    license_plate: str,
    registry: VehicleRegistry = Depends(get_vehicle_registry),
):
    """Delete a vehicle that is not bound to an unfinished segment."""
    await registry.delete(license_plate)
