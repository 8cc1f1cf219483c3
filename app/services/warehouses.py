"""
Clients for the calculations service: warehouse directory and tariffs.
"""
import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Iterable, Optional

import httpx
from pydantic import BaseModel, ConfigDict, Field
from pydantic import ValidationError as PayloadError

from app.core.config import get_settings
from app.core.exceptions import IntegrationFailure
from app.services.geo import WarehouseInfo
from app.services.http import ServiceClient

logger = logging.getLogger(__name__)


class WarehousePayload(BaseModel):
    """Warehouse as served by ``/api/v1/depositos``."""
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: int
    latitude: Optional[float] = Field(None, alias="latitud")
    longitude: Optional[float] = Field(None, alias="longitud")
    name: Optional[str] = Field(None, alias="nombre")
    daily_dwell_cost: Optional[Decimal] = Field(None, alias="costoEstadiaDiario")

    def to_info(self) -> Optional[WarehouseInfo]:
        if self.latitude is None or self.longitude is None:
            return None
        return WarehouseInfo(
            id=self.id,
            latitude=self.latitude,
            longitude=self.longitude,
            name=self.name,
            daily_dwell_cost=self.daily_dwell_cost or Decimal("0"),
        )


class TariffPayload(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    fuel_price_per_liter: Optional[Decimal] = Field(None, alias="valorLitroCombustible")
    management_fee: Optional[Decimal] = Field(None, alias="costoBaseGestionFijo")


@dataclass(frozen=True)
class Tariffs:
    fuel_price_per_liter: Decimal
    management_fee: Decimal


class WarehouseDirectory(ServiceClient):
    """Resolves warehouse ids to coordinates, names and daily dwell cost."""

    service_name = "Warehouse directory"

    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        client: Optional[httpx.AsyncClient] = None,
    ):
        super().__init__(
            base_url or get_settings().calculations_service_url,
            timeout=timeout,
            client=client,
        )

    async def list_all(self) -> list[WarehouseInfo]:
        """
        Every warehouse with usable coordinates.

        Raises:
            IntegrationFailure: If the directory cannot be queried
        """
        data = await self._get_json("/api/v1/depositos")
        if not isinstance(data, list):
            raise IntegrationFailure("Warehouse directory returned an unexpected listing")

        warehouses = []
        for item in data:
            try:
                info = WarehousePayload.model_validate(item).to_info()
            except PayloadError as e:
                logger.warning(f"Skipping malformed warehouse entry: {e}")
                continue
            if info is not None:
                warehouses.append(info)
        return warehouses

    async def get(self, warehouse_id: int) -> Optional[WarehouseInfo]:
        """
        One warehouse, or None if it has no coordinates.

        Raises:
            IntegrationFailure: If the directory cannot be queried
        """
        data = await self._get_json(f"/api/v1/depositos/{warehouse_id}")
        try:
            return WarehousePayload.model_validate(data).to_info()
        except PayloadError as e:
            raise IntegrationFailure(f"Malformed warehouse {warehouse_id}: {e}") from e

    async def get_many(self, warehouse_ids: Iterable[int]) -> dict[int, WarehouseInfo]:
        """Resolve several ids; unresolved ones are logged and left out."""
        resolved: dict[int, WarehouseInfo] = {}
        for warehouse_id in dict.fromkeys(warehouse_ids):
            try:
                info = await self.get(warehouse_id)
            except IntegrationFailure as e:
                logger.warning(f"Could not resolve warehouse {warehouse_id}: {e}")
                continue
            if info is None:
                logger.warning(f"Warehouse {warehouse_id} has no coordinates")
                continue
            resolved[warehouse_id] = info
        return resolved


class TariffSource(ServiceClient):
    """Current fuel price and per-segment management fee."""

    service_name = "Tariff service"

    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        client: Optional[httpx.AsyncClient] = None,
    ):
        super().__init__(
            base_url or get_settings().calculations_service_url,
            timeout=timeout,
            client=client,
        )

    async def current(self) -> Tariffs:
        """First published tariff; configured defaults when unavailable."""
        config = get_settings()
        defaults = Tariffs(
            fuel_price_per_liter=config.default_fuel_price_per_liter,
            management_fee=config.default_management_fee,
        )

        try:
            data = await self._get_json("/api/v1/tarifas")
        except IntegrationFailure as e:
            logger.warning(f"Tariffs unavailable, using defaults: {e}")
            return defaults

        if not isinstance(data, list) or not data:
            logger.warning("No tariff published, using defaults")
            return defaults

        try:
            payload = TariffPayload.model_validate(data[0])
        except PayloadError as e:
            logger.warning(f"Malformed tariff, using defaults: {e}")
            return defaults

        return Tariffs(
            fuel_price_per_liter=(
                payload.fuel_price_per_liter
                if payload.fuel_price_per_liter is not None
                else defaults.fuel_price_per_liter
            ),
            management_fee=(
                payload.management_fee
                if payload.management_fee is not None
                else defaults.management_fee
            ),
        )
