"""``StreamSource`` implementation over an HTTP Server-Sent Events response.

Purpose:
    Open ``GET <url>`` as a streaming response on a background task, frame
    the body as SSE, decode each ``data:`` payload into a ``CrawlEvent`` and
    push it to the registered callback.

Completion semantics:
    ``on_complete`` fires exactly once when the reader task ends:
    - ``None`` when the server closes the stream or ``close()`` was called;
    - a ``WaterCrawlError`` with the classified code for an HTTP error status;
    - the transport exception otherwise (the bridge wraps it as
      ``StreamConnectionError``).

Malformed envelopes are logged (``stream.decode_error``) and skipped; they do
not end the stream. Reconnection is out of scope: a dropped connection is a
terminal failure of this source instance.
"""
from __future__ import annotations

import asyncio
import logging
from contextlib import aclosing
from typing import Any, Mapping, Optional

import httpx

from ..errors import EnvelopeDecodeError, ProtocolViolationError, StreamConnectionError, to_watercrawl_error
from ..http.sse import iter_sse_data
from ..interfaces import CompletionCallback, EventCallback
from ..logging import LogContext, get_logger, normalized_log_event
from .events import decode_envelope


class HttpEventSource:
    """Push source reading one SSE status stream."""

    def __init__(
        self,
        client: httpx.AsyncClient,
        url: str,
        *,
        params: Optional[Mapping[str, Any]] = None,
        headers: Optional[Mapping[str, str]] = None,
        timeout: Optional[httpx.Timeout] = None,
        logger: Optional[logging.Logger] = None,
        ctx: Optional[LogContext] = None,
    ) -> None:
        self._client = client
        self._url = url
        self._params = dict(params or {})
        self._headers = {**(headers or {}), "Accept": "text/event-stream"}
        self._timeout = timeout
        self._logger = logger or get_logger("watercrawl.streaming")
        self.ctx = ctx or LogContext(operation="stream", method="GET", path=url)
        self._on_event: Optional[EventCallback] = None
        self._on_complete: Optional[CompletionCallback] = None
        self._task: Optional[asyncio.Task] = None
        self._closed = False
        self._completed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def open(self, on_event: EventCallback, on_complete: CompletionCallback) -> None:
        """Start the reader task; must be called from a running event loop."""
        if self._task is not None:
            raise ProtocolViolationError("stream source already opened")
        self._on_event = on_event
        self._on_complete = on_complete
        self._task = asyncio.get_running_loop().create_task(self._run())
        self._task.add_done_callback(self._on_task_done)

    def close(self) -> None:
        """Idempotently request termination; teardown finishes asynchronously."""
        if self._closed:
            return
        self._closed = True
        if self._task is not None and not self._task.done():
            self._task.cancel()

    async def wait_closed(self) -> None:
        """Wait for the reader task to finish (never raises)."""
        if self._task is None:
            return
        await asyncio.wait({self._task})

    async def _run(self) -> None:
        error: Optional[BaseException] = None
        try:
            await self._consume()
        except asyncio.CancelledError:
            if not self._closed:
                error = StreamConnectionError("status stream reader was cancelled")
                raise
        except httpx.HTTPStatusError as e:
            error = to_watercrawl_error(
                e, message=f"status stream returned HTTP {e.response.status_code}"
            )
        except Exception as e:  # reported through on_complete
            error = e
        finally:
            self._complete(error)

    async def _consume(self) -> None:
        async with self._client.stream(
            "GET",
            self._url,
            params=self._params or None,
            headers=self._headers,
            timeout=self._timeout if self._timeout is not None else httpx.USE_CLIENT_DEFAULT,
        ) as response:
            if response.is_error:
                await response.aread()
                response.raise_for_status()
            normalized_log_event(
                self._logger,
                "stream.connect",
                self.ctx,
                phase="start",
                http_status=response.status_code,
            )
            async with aclosing(iter_sse_data(response.aiter_lines())) as payloads:
                async for payload in payloads:
                    if self._closed:
                        break
                    try:
                        event = decode_envelope(payload)
                    except EnvelopeDecodeError as e:
                        normalized_log_event(
                            self._logger,
                            "stream.decode_error",
                            self.ctx,
                            phase="mid_stream",
                            level=logging.WARNING,
                            error=e.message,
                            error_code=e.code.value,
                            payload=payload[:200],
                        )
                        continue
                    if self._on_event is not None:
                        self._on_event(event)

    def _on_task_done(self, task: asyncio.Task) -> None:
        # A task cancelled before its first step never enters ``_run``.
        if task.cancelled():
            self._complete(
                None if self._closed else StreamConnectionError("status stream reader was cancelled")
            )

    def _complete(self, error: Optional[BaseException]) -> None:
        if self._completed:
            return
        self._completed = True
        if self._on_complete is not None:
            self._on_complete(error)


__all__ = ["HttpEventSource"]
