"""WaterCrawl API client.

Purpose:
    Resource-level operations for crawl requests: list, fetch, create, stop,
    download, monitor (status stream), fetch results, download a stored
    result document, and a one-call ``scrape_url`` convenience.

Streaming:
    ``monitor_crawl_request`` returns a ``CrawlEventStream``. Use it as an
    async context manager so stopping early always releases the connection::

        async with client.monitor_crawl_request(uuid) as events:
            async for event in events:
                if event.kind == "result":
                    break
"""
from __future__ import annotations

from typing import Any, Dict, List, Mapping, Optional, Union

from .base.api_client import BaseAPIClient
from .base.errors import ErrorCode, WaterCrawlError
from .base.logging import LogContext
from .base.models import (
    CrawlRequest,
    CrawlRequestList,
    CrawlResult,
    CrawlResultList,
    PageOptions,
    PluginOptions,
    SpiderOptions,
    dump_options,
)
from .base.streaming import CrawlEventStream, EventBridge
from .config.defaults import CRAWL_REQUESTS_PATH


def _item_path(item_id: str, suffix: str = "") -> str:
    if not item_id:
        raise ValueError("crawl request id must be a non-empty string")
    return f"{CRAWL_REQUESTS_PATH}{item_id}/{suffix}"


class WaterCrawlAPIClient(BaseAPIClient):
    """Async client for the WaterCrawl crawl request API."""

    async def get_crawl_requests_list(
        self, page: Optional[int] = None, page_size: Optional[int] = None
    ) -> CrawlRequestList:
        """Return one page of crawl requests (server defaults when unset)."""
        data = await self.get(
            CRAWL_REQUESTS_PATH,
            {"page": page, "page_size": page_size},
            operation="crawl_requests.list",
        )
        return CrawlRequestList.model_validate(data)

    async def get_crawl_request(self, item_id: str) -> CrawlRequest:
        data = await self.get(_item_path(item_id), operation="crawl_requests.get")
        return CrawlRequest.model_validate(data)

    async def create_crawl_request(
        self,
        url: str,
        spider_options: Union[SpiderOptions, Dict[str, Any], None] = None,
        page_options: Union[PageOptions, Dict[str, Any], None] = None,
        plugin_options: Optional[PluginOptions] = None,
    ) -> CrawlRequest:
        """Create a crawl job for ``url``.

        Missing option groups are sent as empty objects so the server applies
        its defaults.
        """
        body = {
            "url": url,
            "options": {
                "spider_options": dump_options(spider_options),
                "page_options": dump_options(page_options),
                "plugin_options": dump_options(plugin_options),
            },
        }
        data = await self.post(CRAWL_REQUESTS_PATH, body, operation="crawl_requests.create")
        return CrawlRequest.model_validate(data)

    async def stop_crawl_request(self, item_id: str) -> None:
        await self.delete(_item_path(item_id), operation="crawl_requests.stop")

    async def download_crawl_request(self, item_id: str) -> List[CrawlResult]:
        """Return every result of a crawl in one response."""
        data = await self.get(_item_path(item_id, "download/"), operation="crawl_requests.download")
        return [CrawlResult.model_validate(item) for item in data or []]

    def monitor_crawl_request(
        self,
        item_id: str,
        download: bool = True,
        *,
        idle_timeout: Optional[float] = None,
        max_buffered: Optional[int] = None,
    ) -> CrawlEventStream:
        """Open the status stream of a crawl as an async event sequence.

        Parameters:
            item_id: Crawl request uuid.
            download: Ask the server to inline result documents in ``result``
                events.
            idle_timeout: Maximum seconds to wait for the next event; falls
                back to ``WATERCRAWL_TIMEOUT_STREAM_IDLE_SECONDS`` (disabled
                when unset).
            max_buffered: Optional bound on undelivered events.

        The connection opens when the stream is entered or first iterated.
        """
        ctx = LogContext(
            operation="crawl_requests.monitor",
            crawl_request_id=item_id,
            method="GET",
            path=_item_path(item_id, "status/"),
        )
        source = self.stream_events(ctx.path, {"download": download}, ctx=ctx)
        bridge = EventBridge(max_buffered=max_buffered, ctx=ctx)
        if idle_timeout is None:
            idle_timeout = self.timeouts.stream_idle_timeout_seconds
        return CrawlEventStream(bridge, source, idle_timeout=idle_timeout, ctx=ctx)

    async def get_crawl_request_results(self, item_id: str) -> CrawlResultList:
        data = await self.get(_item_path(item_id, "results/"), operation="crawl_requests.results")
        return CrawlResultList.model_validate(data)

    async def download_result(self, result_object: Union[CrawlResult, Mapping[str, Any]]) -> Dict[str, Any]:
        """Fetch the stored document of one result.

        The document URL points at storage outside the API, so the API key is
        not sent. Results that already carry the document inline are returned
        as-is.
        """
        result = (
            result_object
            if isinstance(result_object, CrawlResult)
            else CrawlResult.model_validate(result_object)
        )
        if isinstance(result.result, dict):
            return result.result
        if not result.result_url:
            raise WaterCrawlError(
                code=ErrorCode.VALIDATION,
                message="crawl result has no document URL to download",
            )
        return await self.get(result.result_url, authenticated=False, operation="results.download")

    async def scrape_url(
        self,
        url: str,
        page_options: Union[PageOptions, Dict[str, Any], None] = None,
        plugin_options: Optional[PluginOptions] = None,
        sync: bool = True,
        download: bool = True,
    ) -> Union[Dict[str, Any], CrawlRequest]:
        """Crawl a single URL.

        Returns the created ``CrawlRequest`` when ``sync`` is false. Otherwise
        waits on the status stream and returns the payload of the first
        ``result`` event; the stream is cancelled as soon as it arrives.

        Raises:
            WaterCrawlError: ``NOT_FOUND`` when the stream ends without a result.
        """
        request = await self.create_crawl_request(url, None, page_options, plugin_options)
        if not sync:
            return request
        async with self.monitor_crawl_request(request.uuid, download) as events:
            async for event in events:
                if event.kind == "result":
                    return event.data
        raise WaterCrawlError(
            code=ErrorCode.NOT_FOUND,
            message=f"no result received from crawl {request.uuid}",
        )


__all__ = ["WaterCrawlAPIClient"]
