from __future__ import annotations

import asyncio
import io
import logging
import time
from typing import Optional
from urllib.parse import quote, urljoin

import httpx
from PIL import Image, UnidentifiedImageError

from .drawlog.models import ProbeOutcome

logger = logging.getLogger("resultweb")


def fine_cache_buster() -> str:
    # per request
    return str(int(time.time() * 1000))


def coarse_cache_buster() -> str:
    # per minute; lets browsers/CDNs reuse today's asset for a little while
    return str(int(time.time() // 60))


def asset_url(base_url: str, filename: str, cache_buster: Optional[str] = None) -> str:
    base = base_url if base_url.endswith("/") else base_url + "/"
    url = urljoin(base, quote(filename))
    if cache_buster:
        url = f"{url}?v={cache_buster}"
    return url


def _decodes_as_image(payload: bytes) -> bool:
    try:
        with Image.open(io.BytesIO(payload)) as img:
            img.verify()
        return True
    except Image.DecompressionBombError:
        # header decoded; the size alone is not proof of absence
        return True
    except (UnidentifiedImageError, OSError, SyntaxError, ValueError):
        return False


class ImageProber:
    """
    Decides whether a result image is fetchable by actually loading it.

    probe() never raises and settles exactly once: FOUND when the bytes decode as an
    image, MISSING on 404/410 or a non-image body, TRANSIENT on timeout/transport
    trouble/other statuses. Only MISSING is proof of absence.
    """

    def __init__(
        self,
        base_url: str,
        *,
        default_timeout: float = 1.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._base_url = (base_url or "").strip()
        self._default_timeout = float(default_timeout or 1.0)
        limits = httpx.Limits(max_keepalive_connections=10, max_connections=20)
        self._client = httpx.AsyncClient(
            timeout=httpx.Timeout(self._default_timeout),
            limits=limits,
            follow_redirects=True,
            transport=transport,
        )

    @property
    def base_url(self) -> str:
        return self._base_url

    async def aclose(self) -> None:
        await self._client.aclose()

    def url_for(self, filename: str, cache_buster: Optional[str] = None) -> str:
        return asset_url(self._base_url, filename, cache_buster)

    async def _load(self, url: str, timeout: float) -> ProbeOutcome:
        resp = await self._client.get(
            url,
            timeout=timeout,
            headers={"Accept": "image/*", "Cache-Control": "no-cache"},
        )
        if resp.status_code in (404, 410):
            return ProbeOutcome.MISSING
        if resp.status_code >= 300:
            return ProbeOutcome.TRANSIENT
        if not _decodes_as_image(resp.content):
            return ProbeOutcome.MISSING
        return ProbeOutcome.FOUND

    async def probe(
        self,
        filename: str,
        timeout: Optional[float] = None,
        *,
        cache_buster: Optional[str] = None,
    ) -> ProbeOutcome:
        t = float(timeout if timeout is not None else self._default_timeout)
        url = self.url_for(filename, cache_buster or fine_cache_buster())
        try:
            return await asyncio.wait_for(self._load(url, t), timeout=t)
        except (asyncio.TimeoutError, httpx.TimeoutException):
            logger.debug("probe timeout after %.2fs: %s", t, filename)
            return ProbeOutcome.TRANSIENT
        except httpx.HTTPError as e:
            logger.debug("probe error for %s: %s", filename, e)
            return ProbeOutcome.TRANSIENT
        except Exception:
            logger.exception("probe failed unexpectedly for %s", filename)
            return ProbeOutcome.TRANSIENT

    async def exists(self, filename: str, timeout: Optional[float] = None) -> bool:
        return await self.probe(filename, timeout) is ProbeOutcome.FOUND
