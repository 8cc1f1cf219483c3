"""
Client for the request service (transport requests and their cargo).

Lookups raise ``IntegrationFailure``. The ``notify_*`` methods are
best-effort: they are called after the local transaction has committed,
and a failure is logged, never propagated.
"""
import logging
from datetime import datetime
from decimal import Decimal
from typing import Optional
from uuid import UUID

import httpx
from pydantic import BaseModel, ConfigDict, Field
from pydantic import ValidationError as PayloadError

from app.core.config import get_settings
from app.core.exceptions import IntegrationFailure
from app.models.enums import CargoState, RequestState
from app.services.http import ServiceClient

logger = logging.getLogger(__name__)


class RequestInfo(BaseModel):
    """Transport request as served by ``/api/v1/solicitudes/{id}``."""
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: int
    cargo_id: Optional[int] = Field(None, alias="contenedorId")
    created_at: Optional[datetime] = Field(None, alias="fechaCreacion")
    origin_latitude: Optional[float] = Field(None, alias="origenLat")
    origin_longitude: Optional[float] = Field(None, alias="origenLong")
    destination_latitude: Optional[float] = Field(None, alias="destinoLat")
    destination_longitude: Optional[float] = Field(None, alias="destinoLong")

    @property
    def has_endpoints(self) -> bool:
        return None not in (
            self.origin_latitude,
            self.origin_longitude,
            self.destination_latitude,
            self.destination_longitude,
        )


class CargoInfo(BaseModel):
    """Cargo container as served by ``/api/v1/contenedores/{id}``."""
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: int
    weight: Optional[Decimal] = Field(None, alias="peso")
    volume: Optional[Decimal] = Field(None, alias="volumen")


class RequestServiceClient(ServiceClient):
    """Reads requests/cargo and pushes state changes back."""

    service_name = "Request service"

    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        client: Optional[httpx.AsyncClient] = None,
    ):
        super().__init__(
            base_url or get_settings().request_service_url,
            timeout=timeout,
            client=client,
        )

    # =========================================================================
    # Lookups
    # =========================================================================

    async def get_request(self, request_id: int) -> RequestInfo:
        data = await self._get_json(f"/api/v1/solicitudes/{request_id}")
        try:
            return RequestInfo.model_validate(data)
        except PayloadError as e:
            raise IntegrationFailure(f"Malformed request {request_id}: {e}") from e

    async def get_cargo(self, cargo_id: int) -> CargoInfo:
        data = await self._get_json(f"/api/v1/contenedores/{cargo_id}")
        try:
            return CargoInfo.model_validate(data)
        except PayloadError as e:
            raise IntegrationFailure(f"Malformed cargo {cargo_id}: {e}") from e

    async def get_cargo_for_request(self, request_id: int) -> CargoInfo:
        """
        Cargo of a request with both weight and volume known.

        Used by the capacity check, which must not pass on missing data.

        Raises:
            IntegrationFailure: If the cargo or either measure is unavailable
        """
        request = await self.get_request(request_id)
        if request.cargo_id is None:
            raise IntegrationFailure(f"Request {request_id} has no cargo")
        cargo = await self.get_cargo(request.cargo_id)
        if cargo.weight is None or cargo.volume is None:
            raise IntegrationFailure(
                f"Cargo {cargo.id} of request {request_id} has no weight/volume"
            )
        return cargo

    # =========================================================================
    # Writes
    # =========================================================================

    async def set_request_state(self, request_id: int, state: RequestState) -> None:
        await self._send(
            "PUT",
            f"/api/v1/solicitudes/{request_id}/estado",
            params={"nuevoEstado": state.value},
        )

    async def set_cargo_state(self, cargo_id: int, state: CargoState) -> None:
        await self._send(
            "PATCH",
            f"/api/v1/contenedores/{cargo_id}",
            params={"estadoNombre": state.value},
        )

    async def attach_route(self, request_id: int, route_id: UUID) -> None:
        await self._send(
            "PATCH",
            f"/api/v1/solicitudes/{request_id}/ruta",
            params={"rutaId": str(route_id)},
        )

    async def finalize(self, request_id: int, final_cost: Decimal, real_hours: float) -> None:
        await self._send(
            "PATCH",
            f"/api/v1/solicitudes/{request_id}/finalizar",
            params={"costoFinal": str(final_cost), "tiempoReal": real_hours},
        )

    # =========================================================================
    # Best-effort notifications
    # =========================================================================

    async def notify_route_attached(self, request_id: int, route_id: UUID) -> bool:
        try:
            await self.attach_route(request_id, route_id)
        except IntegrationFailure as e:
            logger.warning(f"Could not attach route {route_id} to request {request_id}: {e}")
            return False
        logger.info(f"Request {request_id} now points to route {route_id}")
        return True

    async def notify_request_state(self, request_id: int, state: RequestState) -> bool:
        try:
            await self.set_request_state(request_id, state)
        except IntegrationFailure as e:
            logger.warning(f"Could not set request {request_id} to {state.value}: {e}")
            return False
        logger.info(f"Request {request_id} set to {state.value}")
        return True

    async def notify_cargo_state(self, request_id: int, state: CargoState) -> bool:
        try:
            request = await self.get_request(request_id)
            if request.cargo_id is None:
                logger.warning(f"Request {request_id} has no cargo to set to {state.value}")
                return False
            await self.set_cargo_state(request.cargo_id, state)
        except IntegrationFailure as e:
            logger.warning(f"Could not set cargo of request {request_id} to {state.value}: {e}")
            return False
        logger.info(f"Cargo of request {request_id} set to {state.value}")
        return True

    async def notify_completion(
        self,
        request_id: int,
        final_cost: Decimal,
        real_hours: float,
    ) -> bool:
        try:
            await self.finalize(request_id, final_cost, real_hours)
        except IntegrationFailure as e:
            logger.warning(f"Could not finalize request {request_id}: {e}")
            return False
        logger.info(
            f"Request {request_id} finalized: cost={final_cost}, hours={real_hours}"
        )
        return True
