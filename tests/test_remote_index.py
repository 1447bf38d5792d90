from datetime import date

import httpx
import pytest

from conftest import INDEX_URL, index_client_for, run, write_images
from result_api.remote_index import RemoteIndexClient, RemoteIndexError


def _with(client, fn):
    async def go():
        try:
            return await fn(client)
        finally:
            await client.aclose()

    return run(go())


def test_list_results_newest_first(images_dir):
    write_images(images_dir, ["12-08-2025 8pm.webp", "13-08-2025 1pm.webp", "notes.txt.webp"])
    results = _with(index_client_for(images_dir), lambda c: c.list_results())
    assert [r.filename for r in results] == ["13-08-2025 1pm.webp", "12-08-2025 8pm.webp"]
    assert results[0].file_size and results[0].timestamp


def test_find_hit_and_miss(images_dir):
    write_images(images_dir, ["File 12-08-2025 6pm.jpeg"])

    async def both(c):
        return await c.find(date(2025, 8, 12), "6pm"), await c.find(date(2025, 8, 12), "8pm")

    hit, miss = _with(index_client_for(images_dir), both)
    assert hit is not None and hit.filename == "File 12-08-2025 6pm.jpeg"
    assert miss is None


def test_clear_cache(images_dir):
    assert _with(index_client_for(images_dir), lambda c: c.clear_cache()) is True


def test_unreachable_index_raises():
    async def handler(request):
        raise httpx.ConnectError("refused", request=request)

    client = RemoteIndexClient(INDEX_URL, transport=httpx.MockTransport(handler))
    with pytest.raises(RemoteIndexError):
        _with(client, lambda c: c.list_results())


@pytest.mark.parametrize(
    "response",
    [
        httpx.Response(500, json={"success": True, "images": []}),
        httpx.Response(200, text="<html>php error</html>"),
        httpx.Response(200, json={"success": False}),
        httpx.Response(200, json={"success": True}),
    ],
)
def test_bad_answers_raise(response):
    async def handler(request):
        return response

    client = RemoteIndexClient(INDEX_URL, transport=httpx.MockTransport(handler))
    with pytest.raises(RemoteIndexError):
        _with(client, lambda c: c.list_results())


def test_unconfigured_index_raises():
    with pytest.raises(RemoteIndexError):
        _with(RemoteIndexClient(""), lambda c: c.list_results())


def test_clear_cache_failure_is_reported_not_raised():
    async def handler(request):
        return httpx.Response(404)

    client = RemoteIndexClient(INDEX_URL, transport=httpx.MockTransport(handler))
    assert _with(client, lambda c: c.clear_cache()) is False


def test_malformed_descriptors_are_skipped():
    good = {
        "filename": "12-08-2025 8pm.webp",
        "day": 12,
        "month": 8,
        "year": 2025,
        "hour": 8,
        "hour24": 20,
        "period": "pm",
        "displayTime": "8pm",
        "timestamp": 1755028800,
    }

    async def handler(request):
        assert request.url.params["action"] == "list"
        return httpx.Response(
            200,
            json={"success": True, "images": [good, {"filename": "x"}, dict(good, hour=0)]},
        )

    client = RemoteIndexClient(INDEX_URL, transport=httpx.MockTransport(handler))
    results = _with(client, lambda c: c.list_results())
    assert [r.filename for r in results] == ["12-08-2025 8pm.webp"]
    assert results[0].hour24 == 20


def test_find_sends_date_fragment_and_slot():
    seen = {}

    async def handler(request):
        seen.update(request.url.params)
        return httpx.Response(200, json={"success": True, "found": False, "image": None})

    client = RemoteIndexClient(INDEX_URL, transport=httpx.MockTransport(handler))
    assert _with(client, lambda c: c.find(date(2025, 8, 3), "1pm")) is None
    assert seen == {"action": "find", "date": "03-08-2025", "time": "1pm"}
