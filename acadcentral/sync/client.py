"""
AcadCentral Department Portal
HTTP client for the remote mirror API
"""

import asyncio
import logging
from typing import Any, Dict, Optional

import httpx

from ..config import get_settings
from ..exceptions import MirrorUnavailableException

logger = logging.getLogger(__name__)


class MirrorClient:
    """
    Thin async wrapper over the mirror's /health, /data, /sync and /sync-all.

    Every transport error, timeout, undecodable body and non-2xx response
    surfaces as ``MirrorUnavailableException``. Requests carry no timeout
    unless one is passed; only hydration is bounded.
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = base_url or get_settings().MIRROR_URL
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            transport=transport,
            timeout=None,
        )

    async def _request(self, method: str, path: str, **kwargs) -> Any:
        try:
            response = await self._client.request(method, path, **kwargs)
            response.raise_for_status()
            return response.json()
        except httpx.HTTPStatusError as e:
            raise MirrorUnavailableException(
                f"Mirror rejected {method} {path}: {e.response.status_code}",
                upstream_status=e.response.status_code,
            ) from e
        except httpx.HTTPError as e:
            raise MirrorUnavailableException(f"Mirror unreachable for {method} {path}: {e}") from e
        except ValueError as e:
            raise MirrorUnavailableException(f"Mirror sent an invalid body for {method} {path}") from e

    async def health(self) -> Dict[str, Any]:
        return await self._request("GET", "/health")

    async def fetch_all(self, timeout: Optional[float] = None) -> Dict[str, Any]:
        """Full mirror state keyed by collection; bounded by ``timeout`` seconds overall"""
        try:
            data = await asyncio.wait_for(self._request("GET", "/data"), timeout)
        except asyncio.TimeoutError as e:
            raise MirrorUnavailableException(f"Mirror did not answer within {timeout}s") from e

        if not isinstance(data, dict):
            raise MirrorUnavailableException("Mirror /data did not return an object")
        return data

    async def sync(self, key: str, value: Any) -> Dict[str, Any]:
        """Replace one mirrored collection; ``value`` is the stored JSON text or the list itself"""
        return await self._request("POST", "/sync", json={"key": key, "value": value})

    async def sync_all(self, snapshot: Dict[str, Any]) -> Dict[str, Any]:
        return await self._request("POST", "/sync-all", json=snapshot)

    async def aclose(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> "MirrorClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()


__all__ = ["MirrorClient"]
