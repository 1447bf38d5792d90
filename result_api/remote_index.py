from __future__ import annotations

import logging
from datetime import date
from typing import Any, Dict, List, Optional

import httpx
from pydantic import ValidationError

from .drawlog.models import ParsedResult
from .drawlog.parser import format_date_fragment
from .prober import fine_cache_buster
from .schema import ResultDescriptor

logger = logging.getLogger("resultweb")


class RemoteIndexError(Exception):
    """The Remote Index could not answer (down, non-2xx, bad payload, success=false)."""


class RemoteIndexClient:
    """
    Client for the optional result index endpoint:
      GET <endpoint>?action=list
      GET <endpoint>?action=find&date=DD-MM-YYYY&time=8pm
      GET <endpoint>?action=clear-cache
    """

    def __init__(
        self,
        endpoint_url: str,
        *,
        timeout: float = 5.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._endpoint_url = (endpoint_url or "").strip()
        self._client = httpx.AsyncClient(
            timeout=httpx.Timeout(timeout, connect=min(timeout, 4.0)),
            transport=transport,
        )

    @property
    def endpoint_url(self) -> str:
        return self._endpoint_url

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _call(self, params: Dict[str, str], *, no_cache: bool = False) -> Dict[str, Any]:
        if not self._endpoint_url:
            raise RemoteIndexError("remote index not configured")

        headers = {"Accept": "application/json"}
        if no_cache:
            headers["Cache-Control"] = "no-cache"
            headers["Pragma"] = "no-cache"

        try:
            resp = await self._client.get(self._endpoint_url, params=params, headers=headers)
            resp.raise_for_status()
            data = resp.json()
        except httpx.HTTPStatusError as e:
            raise RemoteIndexError(f"HTTP {e.response.status_code}") from e
        except httpx.RequestError as e:
            raise RemoteIndexError(f"request failed: {e}") from e
        except ValueError as e:
            raise RemoteIndexError("response is not JSON") from e

        if not isinstance(data, dict) or not data.get("success"):
            raise RemoteIndexError(f"index refused {params.get('action')!r}")
        return data

    @staticmethod
    def _to_result(raw: Any) -> Optional[ParsedResult]:
        try:
            return ResultDescriptor.model_validate(raw).to_result()
        except ValidationError as e:
            logger.debug("skipping malformed descriptor %r: %s", raw, e)
            return None

    async def list_results(self) -> List[ParsedResult]:
        data = await self._call({"action": "list"})
        images = data.get("images")
        if not isinstance(images, list):
            raise RemoteIndexError("listing has no 'images' array")

        out: List[ParsedResult] = []
        for raw in images:
            r = self._to_result(raw)
            if r is not None:
                out.append(r)
        return out

    async def find(self, d: date, slot: str) -> Optional[ParsedResult]:
        """The result for (date, slot), or None when the index says there is none."""
        data = await self._call({"action": "find", "date": format_date_fragment(d), "time": slot})
        if not data.get("found") or not data.get("image"):
            return None
        return self._to_result(data["image"])

    async def clear_cache(self) -> bool:
        try:
            await self._call({"action": "clear-cache", "_t": fine_cache_buster()}, no_cache=True)
            return True
        except RemoteIndexError as e:
            logger.info("Could not clear remote index cache: %s", e)
            return False
