"""Consumer-facing async sequence over one ``EventBridge``.

``CrawlEventStream`` wraps a bridge/source pair as a lazily produced,
finite, forward-only sequence of ``CrawlEvent`` values. It is not
restartable: iterate again by opening a new stream.

Early exit:
    Leaving an ``async with`` block (``break``, ``return``, an exception)
    cancels the bridge, which closes the source, and waits for the
    connection teardown before control returns. A stream dropped part way
    through a plain ``async for`` is cancelled by its finalizer as soon as
    the last reference goes away; the source is closed synchronously but its
    teardown is not awaited. A stream cancelled before its first pull never
    opens the source.

Idle deadline:
    With ``idle_timeout`` set, each pull races ``asyncio.wait_for`` against
    the bridge. On expiry the bridge is cancelled and
    ``WaterCrawlError(code=timeout)`` is raised.
"""
from __future__ import annotations

import asyncio
import logging
from typing import Optional

from ..cancellation import StreamCancelledError, StreamState
from ..errors import ErrorCode, WaterCrawlError
from ..interfaces import StreamSource
from ..logging import LogContext, get_logger, normalized_log_event
from .event_bridge import EventBridge, PullResult
from .events import END_OF_STREAM, CrawlEvent
from .streaming_metrics import StreamMetrics


class CrawlEventStream:
    """Async iterator and async context manager over crawl status events.

    Responsibilities:
      * Start the bridge on first use (entering the context or first pull).
      * Translate end-of-stream into ``StopAsyncIteration``.
      * Re-raise stream failures after buffered events were delivered.
      * Treat consumer-initiated cancellation as a clean stop.
      * Release the connection on every exit path.
    """

    def __init__(
        self,
        bridge: EventBridge,
        source: StreamSource,
        *,
        idle_timeout: Optional[float] = None,
        logger: Optional[logging.Logger] = None,
        ctx: Optional[LogContext] = None,
    ) -> None:
        if idle_timeout is not None and idle_timeout <= 0:
            raise ValueError("idle_timeout must be positive or None")
        self._bridge = bridge
        self._source = source
        self._idle_timeout = idle_timeout
        self._logger = logger or get_logger("watercrawl.streaming")
        self.ctx = ctx or bridge.ctx
        self._started = False
        self._closed = False
        self._consumer_cancelled = False

    @property
    def bridge(self) -> EventBridge:
        return self._bridge

    @property
    def state(self) -> StreamState:
        return self._bridge.state

    @property
    def metrics(self) -> StreamMetrics:
        return self._bridge.metrics

    @property
    def closed(self) -> bool:
        return self._closed

    # Iteration ------------------------------------------------------------
    def __aiter__(self) -> "CrawlEventStream":
        return self

    async def __anext__(self) -> CrawlEvent:
        if self._closed:
            raise StopAsyncIteration
        if not self._started and self._bridge.state.terminal:
            await self._finalize()
            if self._consumer_cancelled:
                raise StopAsyncIteration
            raise StreamCancelledError(self._bridge.cancel_reason)
        self._ensure_started()
        try:
            item = await self._pull()
        except StreamCancelledError:
            await self._finalize()
            if self._consumer_cancelled:
                raise StopAsyncIteration from None
            raise
        except WaterCrawlError as e:
            normalized_log_event(
                self._logger,
                "stream.error",
                self.ctx,
                phase="finalize",
                level=logging.WARNING,
                error=e.message,
                error_code=e.code.value,
                emitted=self.metrics.delivered,
            )
            await self._finalize()
            raise
        if item is END_OF_STREAM:
            await self._finalize()
            raise StopAsyncIteration
        return item  # type: ignore[return-value]

    async def _pull(self) -> PullResult:
        if self._idle_timeout is None:
            return await self._bridge.next_event()
        try:
            return await asyncio.wait_for(self._bridge.next_event(), self._idle_timeout)
        except asyncio.TimeoutError:
            self._bridge.cancel("idle timeout")
            raise WaterCrawlError(
                code=ErrorCode.TIMEOUT,
                message=f"no status event within {self._idle_timeout}s",
                retryable=True,
            ) from None

    # Control --------------------------------------------------------------
    def cancel(self, reason: Optional[str] = None) -> None:
        """Cancel from the consumer side; a suspended pull ends cleanly."""
        if self._bridge.state.terminal:
            return
        self._consumer_cancelled = True
        normalized_log_event(
            self._logger,
            "stream.cancel",
            self.ctx,
            phase="mid_stream",
            emitted=self.metrics.delivered,
            reason=reason or "cancelled by consumer",
        )
        self._bridge.cancel(reason or "cancelled by consumer")

    async def aclose(self) -> None:
        """Stop early (if still running) and wait for the connection teardown."""
        if self._closed:
            return
        self.cancel("stream closed by consumer")
        await self._finalize()

    async def __aenter__(self) -> "CrawlEventStream":
        self._ensure_started()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()

    def __del__(self) -> None:
        # Abandoned mid-iteration: stop the source without awaiting teardown.
        if getattr(self, "_started", False) and not self._closed:
            self.cancel("stream abandoned")

    # Internals ------------------------------------------------------------
    def _ensure_started(self) -> None:
        if self._started or self._bridge.state.terminal:
            return
        self._started = True
        normalized_log_event(self._logger, "stream.start", self.ctx, phase="start")
        self._bridge.start(self._source)

    async def _finalize(self) -> None:
        if self._closed:
            return
        self._closed = True
        # No-op unless the bridge is still active.
        self._bridge.cancel("stream finalized")
        if self._started:
            await self._source.wait_closed()
        failure = self._bridge.failure
        normalized_log_event(
            self._logger,
            "stream.end",
            self.ctx,
            phase="finalize",
            error_code=failure.code.value if failure else None,
            emitted=self.metrics.delivered,
            state=self._bridge.state.value,
            metrics=self.metrics.to_dict(),
        )


__all__ = ["CrawlEventStream"]
