"""
Waypoint types used when building route variants.

A waypoint is either a warehouse (identified by id, coordinates looked up
in the warehouse directory) or a raw coordinate such as the pickup or
delivery address of a request.
"""
from dataclasses import dataclass
from decimal import Decimal
from typing import Optional, Union

ORIGIN_POINT_NAME = "Origin point"
DESTINATION_POINT_NAME = "Destination point"


@dataclass(frozen=True)
class Coordinate:
    """A latitude/longitude pair in degrees."""
    latitude: float
    longitude: float


@dataclass(frozen=True)
class WarehouseInfo:
    """Warehouse data resolved from the directory."""
    id: int
    latitude: float
    longitude: float
    name: Optional[str] = None
    daily_dwell_cost: Decimal = Decimal("0")

    @property
    def coordinate(self) -> Coordinate:
        return Coordinate(self.latitude, self.longitude)


@dataclass(frozen=True)
class WarehouseStop:
    """Waypoint located at a warehouse."""
    warehouse_id: int


@dataclass(frozen=True)
class RawPoint:
    """Waypoint at a bare coordinate (no warehouse)."""
    latitude: float
    longitude: float
    name: str = ORIGIN_POINT_NAME

    @property
    def coordinate(self) -> Coordinate:
        return Coordinate(self.latitude, self.longitude)


Waypoint = Union[WarehouseStop, RawPoint]


def warehouse_chain(
    origin_id: int,
    destination_id: int,
    intermediate_ids: Optional[list[int]] = None,
) -> list[Waypoint]:
    """Build ``origin -> intermediates -> destination`` as warehouse stops."""
    ids = [origin_id, *(intermediate_ids or []), destination_id]
    return [WarehouseStop(warehouse_id) for warehouse_id in ids]
