"""
Vehicle registry.

Availability is only ever changed through ``bind``/``release``, which the
segment lifecycle calls inside its own transaction.
"""
import logging
from typing import Optional
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import NotFoundError, StateError, ValidationError
from app.models.enums import SegmentStatus
from app.models.route import Segment
from app.models.vehicle import Vehicle
from app.schemas.vehicle import VehicleCreate

logger = logging.getLogger(__name__)


class VehicleRegistry:
    """Lookup and maintenance of the vehicle fleet."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def list_vehicles(self, available: Optional[bool] = None) -> list[Vehicle]:
        query = select(Vehicle).order_by(Vehicle.license_plate)
        if available is not None:
            query = query.where(Vehicle.available == available)
        result = await self.session.execute(query)
        return list(result.scalars().all())

    async def get(self, vehicle_id: UUID) -> Vehicle:
        result = await self.session.execute(select(Vehicle).where(Vehicle.id == vehicle_id))
        vehicle = result.scalar_one_or_none()
        if vehicle is None:
            raise NotFoundError(f"Vehicle {vehicle_id} not found")
        return vehicle

    async def get_by_plate(self, license_plate: str) -> Vehicle:
        result = await self.session.execute(
            select(Vehicle).where(Vehicle.license_plate == license_plate)
        )
        vehicle = result.scalar_one_or_none()
        if vehicle is None:
            raise NotFoundError(f"Vehicle {license_plate} not found")
        return vehicle

    async def lock(
        self,
        vehicle_id: Optional[UUID] = None,
        license_plate: Optional[str] = None,
    ) -> Vehicle:
        """
        Load a vehicle row FOR UPDATE, by id or by plate.

        Raises:
            NotFoundError: If no such vehicle exists
        """
        query = (
            select(Vehicle)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        if vehicle_id is not None:
            query = query.where(Vehicle.id == vehicle_id)
        elif license_plate is not None:
            query = query.where(Vehicle.license_plate == license_plate)
        else:
            raise ValidationError("A vehicle id or license plate is required")

        result = await self.session.execute(query)
        vehicle = result.scalar_one_or_none()
        if vehicle is None:
            raise NotFoundError(f"Vehicle {vehicle_id or license_plate} not found")
        return vehicle

    async def create(self, data: VehicleCreate) -> Vehicle:
        existing = await self.session.execute(
            select(Vehicle.id).where(Vehicle.license_plate == data.license_plate)
        )
        if existing.scalar_one_or_none() is not None:
            raise ValidationError(f"Vehicle {data.license_plate} already registered")

        vehicle = Vehicle(**data.model_dump(), available=True)
        self.session.add(vehicle)
        try:
            await self.session.flush()
        except IntegrityError as e:
            raise ValidationError(f"Vehicle {data.license_plate} already registered") from e
        logger.info(f"Registered vehicle {vehicle.license_plate}")
        return vehicle

    async def set_active(self, license_plate: str, active: bool) -> Vehicle:
        vehicle = await self.get_by_plate(license_plate)
        vehicle.active = active
        await self.session.flush()
        return vehicle

    async def assign_carrier(self, license_plate: str, carrier_name: str) -> Vehicle:
        vehicle = await self.get_by_plate(license_plate)
        vehicle.carrier_name = carrier_name
        await self.session.flush()
        return vehicle

    async def count_active_bindings(self, vehicle_id: UUID) -> int:
        """Segments currently holding the vehicle (assigned or started)."""
        result = await self.session.execute(
            select(func.count(Segment.id)).where(
                Segment.vehicle_id == vehicle_id,
                Segment.status.in_([SegmentStatus.ASSIGNED, SegmentStatus.STARTED]),
            )
        )
        return result.scalar_one()

    async def delete(self, license_plate: str) -> None:
        vehicle = await self.get_by_plate(license_plate)
        if await self.count_active_bindings(vehicle.id):
            raise StateError(f"Vehicle {license_plate} is bound to an unfinished segment")
        await self.session.delete(vehicle)
        await self.session.flush()
        logger.info(f"Deleted vehicle {license_plate}")

    # =========================================================================
    # Binding (called by the segment lifecycle)
    # =========================================================================

    @staticmethod
    def ensure_assignable(vehicle: Vehicle) -> None:
        """
        Raises:
            StateError: If the vehicle is inactive or already taken
        """
        if vehicle.is_assignable:
            return
        if not vehicle.active:
            raise StateError(f"Vehicle {vehicle.license_plate} is inactive")
        raise StateError(f"Vehicle {vehicle.license_plate} is not available")

    @classmethod
    def bind(cls, vehicle: Vehicle) -> None:
        """Mark a locked vehicle as taken by a segment."""
        cls.ensure_assignable(vehicle)
        vehicle.available = False

    async def release(self, vehicle_id: Optional[UUID]) -> Optional[Vehicle]:
        """Make a vehicle available again; unknown ids are logged and ignored."""
        if vehicle_id is None:
            return None
        vehicle = await self.session.get(Vehicle, vehicle_id)
        if vehicle is None:
            logger.warning(f"Cannot release unknown vehicle {vehicle_id}")
            return None
        vehicle.available = True
        return vehicle
