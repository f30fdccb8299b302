"""Resource operations of ``WaterCrawlAPIClient`` over ``httpx.MockTransport``.

Verifies request shapes (method, path, query, body, headers), response
decoding into models, error mapping, and retry behaviour per method.
"""

from __future__ import annotations

import json

import httpx
import pytest

from watercrawl import WaterCrawlAPIClient
from watercrawl.base.errors import ErrorCode, WaterCrawlError
from watercrawl.base.models import PageOptions, SpiderOptions

TEST_API_KEY = "wc-unit-key"  # pragma: allowlist secret - matches the api_client fixture
TEST_BASE_URL = "https://api.watercrawl.test"

CRAWLS = f"{TEST_BASE_URL}/api/v1/core/crawl-requests/"


def _crawl(uuid: str = "abc", status: str = "new") -> dict:
    return {"uuid": uuid, "url": "https://example.com", "status": status, "options": {}}


@pytest.mark.asyncio
async def test_list_sends_pagination_params(api_client):
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={"count": 1, "next": None, "previous": None, "results": [_crawl()]})

    async with api_client(handler) as client:
        page = await client.get_crawl_requests_list(page=2, page_size=5)

    assert page.count == 1  # nosec B101 - test assertion
    assert page.results[0].uuid == "abc"  # nosec B101 - test assertion
    request = seen[0]
    assert request.method == "GET"  # nosec B101 - test assertion
    assert str(request.url).startswith(CRAWLS)  # nosec B101 - test assertion
    assert dict(request.url.params) == {"page": "2", "page_size": "5"}  # nosec B101 - test assertion
    assert request.headers["X-API-Key"] == TEST_API_KEY  # nosec B101 - test assertion


@pytest.mark.asyncio
async def test_list_omits_unset_params(api_client):
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={"results": []})

    async with api_client(handler) as client:
        await client.get_crawl_requests_list()
    assert not seen[0].url.params  # nosec B101 - test assertion


@pytest.mark.asyncio
async def test_create_posts_grouped_options(api_client):
    bodies = []

    def handler(request: httpx.Request) -> httpx.Response:
        bodies.append(json.loads(request.content))
        assert request.method == "POST"  # nosec B101 - test assertion
        return httpx.Response(201, json=_crawl())

    async with api_client(handler) as client:
        crawl = await client.create_crawl_request(
            "https://example.com",
            spider_options=SpiderOptions(max_depth=2, page_limit=10),
            page_options={"only_main_content": True},
        )

    assert crawl.uuid == "abc"  # nosec B101 - test assertion
    assert bodies[0] == {  # nosec B101 - test assertion
        "url": "https://example.com",
        "options": {
            "spider_options": {"max_depth": 2, "page_limit": 10},
            "page_options": {"only_main_content": True},
            "plugin_options": {},
        },
    }


@pytest.mark.asyncio
async def test_get_and_stop_use_item_paths(api_client):
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append((request.method, request.url.path))
        if request.method == "DELETE":
            return httpx.Response(204)
        return httpx.Response(200, json=_crawl(status="running"))

    async with api_client(handler) as client:
        crawl = await client.get_crawl_request("abc")
        assert await client.stop_crawl_request("abc") is None  # nosec B101 - test assertion

    assert crawl.status == "running"  # nosec B101 - test assertion
    assert seen == [  # nosec B101 - test assertion
        ("GET", "/api/v1/core/crawl-requests/abc/"),
        ("DELETE", "/api/v1/core/crawl-requests/abc/"),
    ]


@pytest.mark.asyncio
async def test_download_and_results(api_client):
    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.path.endswith("/download/"):
            return httpx.Response(200, json=[{"url": "https://example.com", "result": {"markdown": "# hi"}}])
        return httpx.Response(
            200,
            json={"count": 1, "results": [{"uuid": "r1", "result": "https://files.test/r1.json"}]},
        )

    async with api_client(handler) as client:
        documents = await client.download_crawl_request("abc")
        results = await client.get_crawl_request_results("abc")

    assert documents[0].result == {"markdown": "# hi"}  # nosec B101 - test assertion
    assert results.results[0].result_url == "https://files.test/r1.json"  # nosec B101 - test assertion


@pytest.mark.asyncio
async def test_download_result_fetches_without_api_key(api_client):
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={"markdown": "# stored"})

    async with api_client(handler) as client:
        doc = await client.download_result({"uuid": "r1", "result": "https://files.test/r1.json"})
        inline = await client.download_result({"uuid": "r2", "result": {"markdown": "# inline"}})

    assert doc == {"markdown": "# stored"}  # nosec B101 - test assertion
    assert inline == {"markdown": "# inline"}  # nosec B101 - test assertion
    assert len(seen) == 1  # nosec B101 - test assertion
    assert str(seen[0].url) == "https://files.test/r1.json"  # nosec B101 - test assertion
    assert "X-API-Key" not in seen[0].headers  # nosec B101 - test assertion


@pytest.mark.asyncio
async def test_download_result_without_url_is_rejected(api_client):
    async with api_client(lambda request: httpx.Response(500)) as client:
        with pytest.raises(WaterCrawlError) as info:
            await client.download_result({"uuid": "r1"})
    assert info.value.code is ErrorCode.VALIDATION  # nosec B101 - test assertion


@pytest.mark.asyncio
async def test_error_response_is_mapped_with_detail(api_client):
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(404, json={"detail": "Not found."})

    async with api_client(handler) as client:
        with pytest.raises(WaterCrawlError) as info:
            await client.get_crawl_request("missing")

    assert info.value.code is ErrorCode.NOT_FOUND  # nosec B101 - test assertion
    assert info.value.status_code == 404  # nosec B101 - test assertion
    assert info.value.message == "Not found."  # nosec B101 - test assertion


@pytest.mark.asyncio
async def test_get_is_retried_on_transient_errors(api_client, no_backoff):
    calls = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        if len(calls) < 3:
            return httpx.Response(503, text="busy")
        return httpx.Response(200, json=_crawl())

    async with api_client(handler) as client:
        crawl = await client.get_crawl_request("abc")

    assert crawl.uuid == "abc"  # nosec B101 - test assertion
    assert len(calls) == 3  # nosec B101 - test assertion
    assert no_backoff == [1.0, 2.0]  # nosec B101 - test assertion


@pytest.mark.asyncio
async def test_post_is_not_retried(api_client, no_backoff):
    calls = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        return httpx.Response(503, text="busy")

    async with api_client(handler) as client:
        with pytest.raises(WaterCrawlError) as info:
            await client.create_crawl_request("https://example.com")

    assert info.value.code is ErrorCode.UNAVAILABLE  # nosec B101 - test assertion
    assert len(calls) == 1  # nosec B101 - test assertion
    assert no_backoff == []  # nosec B101 - test assertion


@pytest.mark.asyncio
async def test_transport_failure_is_classified(api_client):
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    async with api_client(handler) as client:
        with pytest.raises(WaterCrawlError) as info:
            await client.stop_crawl_request("abc")
    assert info.value.code is ErrorCode.CONNECTION  # nosec B101 - test assertion


@pytest.mark.asyncio
async def test_invalid_json_is_a_decode_error(api_client):
    async with api_client(lambda request: httpx.Response(200, text="<html>")) as client:
        with pytest.raises(WaterCrawlError) as info:
            await client.get_crawl_request("abc")
    assert info.value.code is ErrorCode.DECODE  # nosec B101 - test assertion


def test_missing_api_key_fails_fast():
    with pytest.raises(WaterCrawlError) as info:
        WaterCrawlAPIClient(transport=httpx.MockTransport(lambda request: httpx.Response(200)))
    assert info.value.code is ErrorCode.AUTH  # nosec B101 - test assertion


def test_api_key_and_base_url_from_env(monkeypatch):
    monkeypatch.setenv("WATERCRAWL_API_KEY", "wc-env-key")
    monkeypatch.setenv("WATERCRAWL_BASE_URL", "https://env.test/")
    client = WaterCrawlAPIClient(transport=httpx.MockTransport(lambda request: httpx.Response(200)))
    assert client.api_key == "wc-env-key"  # nosec B101 - test assertion
    assert client.base_url == "https://env.test"  # nosec B101 - test assertion


@pytest.mark.asyncio
async def test_injected_http_client_is_not_closed():
    http = httpx.AsyncClient(transport=httpx.MockTransport(lambda request: httpx.Response(200, json=_crawl())))
    client = WaterCrawlAPIClient(api_key=TEST_API_KEY, base_url=TEST_BASE_URL, http_client=http)
    await client.aclose()
    assert not http.is_closed  # nosec B101 - test assertion
    crawl = await client.get_crawl_request("abc")
    assert crawl.uuid == "abc"  # nosec B101 - test assertion
    await http.aclose()


def test_empty_item_id_is_rejected(api_client):
    client = api_client(lambda request: httpx.Response(200))
    with pytest.raises(ValueError):
        client.monitor_crawl_request("")


def test_page_options_model_rejects_negative_timeout():
    with pytest.raises(ValueError):
        PageOptions(timeout=-1)
