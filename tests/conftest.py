from __future__ import annotations

import asyncio
import io
from datetime import date
from pathlib import Path
from typing import Dict, Iterable, List, Optional
from urllib.parse import unquote

import httpx
import pytest
from PIL import Image

from result_api.api_main import create_app
from result_api.config import Settings
from result_api.prober import ImageProber
from result_api.remote_index import RemoteIndexClient
from result_api.resolver import ResultResolver

TODAY = date(2025, 8, 13)
ASSETS_URL = "http://assets.test/results/"
INDEX_URL = "http://index.test/api/get-images"


def image_bytes(fmt: str = "PNG") -> bytes:
    buf = io.BytesIO()
    Image.new("RGB", (4, 4), (200, 30, 30)).save(buf, format=fmt)
    return buf.getvalue()


class AssetStore:
    """In-memory static host: filename -> bytes, served by an httpx mock transport."""

    def __init__(
        self,
        names: Iterable[str] = (),
        *,
        slow: Iterable[str] = (),
        broken: Iterable[str] = (),
        delay: float = 0.0,
    ) -> None:
        self.files: Dict[str, bytes] = {n: image_bytes() for n in names}
        self.slow = set(slow)
        self.broken = set(broken)
        self.delay = delay
        self.requests: List[str] = []
        self.urls: List[str] = []

    async def handler(self, request: httpx.Request) -> httpx.Response:
        name = unquote(request.url.path.rsplit("/", 1)[-1])
        self.requests.append(name)
        self.urls.append(str(request.url))
        if self.delay:
            await asyncio.sleep(self.delay)
        if name in self.slow:
            await asyncio.sleep(5)
        if name in self.broken:
            raise httpx.ConnectError("connection reset", request=request)
        if name in self.files:
            return httpx.Response(200, content=self.files[name], headers={"content-type": "image/png"})
        return httpx.Response(404, text="not found")

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)


def make_settings(**overrides) -> Settings:
    base = dict(
        assets_base_url=ASSETS_URL,
        fast_lookback_days=7,
        background_lookback_days=10,
        extended_lookback_days=3,
        fast_probe_timeout=0.5,
        probe_timeout=0.5,
        scan_batch_size=6,
        scan_batch_pause=0.0,
    )
    base.update(overrides)
    return Settings(**base)


def make_resolver(
    store: AssetStore,
    *,
    index: Optional[RemoteIndexClient] = None,
    today: date = TODAY,
    **overrides,
) -> ResultResolver:
    settings = make_settings(**overrides)
    prober = ImageProber(settings.assets_base_url, default_timeout=settings.probe_timeout, transport=store.transport())
    return ResultResolver(settings, prober, index, today=lambda: today)


def index_client_for(images_dir: Path) -> RemoteIndexClient:
    """A RemoteIndexClient talking to the real index routes in-process."""
    app = create_app(make_settings(images_dir=images_dir, index_cache_seconds=0.0))
    return RemoteIndexClient(INDEX_URL, transport=httpx.ASGITransport(app=app))


def write_images(directory: Path, names: Iterable[str]) -> None:
    directory.mkdir(parents=True, exist_ok=True)
    for n in names:
        (directory / n).write_bytes(image_bytes())


def run(coro):
    return asyncio.run(coro)


@pytest.fixture
def images_dir(tmp_path: Path) -> Path:
    d = tmp_path / "results"
    d.mkdir()
    return d
