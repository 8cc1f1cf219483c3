"""
Enum type definitions for the route planner.

Values of the request/cargo enums are the state names understood by the
request service; they are sent over the wire unchanged.
"""
from enum import Enum


class SegmentStatus(str, Enum):
    """
    Lifecycle state of a route segment.

    - CREATED: materialized from an option, no vehicle yet
    - ASSIGNED: vehicle bound, not started
    - STARTED: real start recorded
    - FINISHED: real end recorded (terminal)
    """
    CREATED = "CREATED"
    ASSIGNED = "ASSIGNED"
    STARTED = "STARTED"
    FINISHED = "FINISHED"

    @property
    def is_terminal(self) -> bool:
        """Whether no further transition is possible."""
        return self == SegmentStatus.FINISHED

    @property
    def holds_vehicle(self) -> bool:
        """Whether a segment in this state keeps its vehicle unavailable."""
        return self in (SegmentStatus.ASSIGNED, SegmentStatus.STARTED)


class SegmentEvent(str, Enum):
    """Inbound commands that move a segment between states."""
    ASSIGN = "ASSIGN"
    START = "START"
    FINISH = "FINISH"


class RequestState(str, Enum):
    """Request states pushed to the request service."""
    PROGRAMMED = "PROGRAMADA"
    IN_TRANSIT = "EN_TRANSITO"
    COMPLETED = "COMPLETADA"


class CargoState(str, Enum):
    """Cargo (container) states pushed to the request service."""
    IN_TRANSIT = "EN_TRANSITO"
    IN_WAREHOUSE = "EN_DEPOSITO"
    DELIVERED = "ENTREGADO"
