"""
Shared async HTTP plumbing for collaborating services.
"""
import logging
from typing import Any, Optional

import httpx

from app.core.config import get_settings
from app.core.exceptions import IntegrationFailure

logger = logging.getLogger(__name__)


class ServiceClient:
    """
    Thin JSON client over httpx.

    A client may be injected (tests pass one built on ``httpx.MockTransport``);
    otherwise every call opens a short-lived ``httpx.AsyncClient``. There is
    no retry: a failed call surfaces as ``IntegrationFailure``.
    """

    service_name = "service"

    def __init__(
        self,
        base_url: str,
        timeout: Optional[float] = None,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout if timeout is not None else get_settings().http_timeout_seconds
        self._client = client

    async def _send(
        self,
        method: str,
        path: str,
        params: Optional[dict[str, Any]] = None,
    ) -> httpx.Response:
        url = f"{self.base_url}{path}"
        try:
            if self._client is not None:
                response = await self._client.request(method, url, params=params)
            else:
                async with httpx.AsyncClient(timeout=self.timeout) as client:
                    response = await client.request(method, url, params=params)
            response.raise_for_status()
        except httpx.HTTPError as e:
            raise IntegrationFailure(
                f"{self.service_name} request {method} {path} failed: {e}"
            ) from e
        return response

    async def _get_json(self, path: str, params: Optional[dict[str, Any]] = None) -> Any:
        response = await self._send("GET", path, params=params)
        try:
            return response.json()
        except ValueError as e:
            raise IntegrationFailure(
                f"{self.service_name} returned invalid JSON for {path}"
            ) from e
