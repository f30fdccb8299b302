"""Push-to-pull bridge for the crawl status stream.

Purpose:
    A ``StreamSource`` pushes decoded events into a callback whenever the
    server sends them. Consumers want to pull one event at a time.
    ``EventBridge`` sits between the two: a FIFO buffer plus a single waiter
    slot, driven by an explicit state machine
    ``IDLE -> ACTIVE -> {COMPLETED | FAILED | CANCELLED}``.

Concurrency:
    Everything runs on one asyncio event loop. The source callback, the
    completion callback, ``cancel()`` and ``next_event()`` only interleave at
    await points, so buffer, waiter and state need no lock. Sources that
    deliver from another thread must hop onto the loop first
    (``loop.call_soon_threadsafe``).

Guarantees:
    - Events are delivered in callback order, never duplicated.
    - A failure is deferred until every event buffered ahead of it has been
      delivered.
    - Terminal states are absorbing; the first transition wins and the source
      is closed exactly once.
    - At most one pull may be outstanding; a second one raises
      ``ProtocolViolationError``.
"""
from __future__ import annotations

import asyncio
import logging
import time
from collections import deque
from typing import Deque, Optional, Union

from ..cancellation import StreamCancelledError, StreamState
from ..errors import (
    BufferOverflowError,
    ProtocolViolationError,
    StreamConnectionError,
    WaterCrawlError,
    classify_exception,
    extract_status,
)
from ..interfaces import StreamSource
from ..logging import LogContext, get_logger, normalized_log_event
from .events import END_OF_STREAM, CrawlEvent, _EndOfStream
from .streaming_metrics import StreamMetrics

PullResult = Union[CrawlEvent, _EndOfStream]


class EventBridge:
    """Buffer events from a push source and hand them out one pull at a time.

    Parameters:
        max_buffered: Optional bound on buffered events. When the consumer
            falls this far behind, the stream fails with
            ``BufferOverflowError`` and the source is closed. ``None`` (the
            default) means unbounded.
        logger: Logger for lifecycle events; defaults to ``watercrawl.streaming``.
        ctx: Log context shared with the surrounding operation.
    """

    def __init__(
        self,
        *,
        max_buffered: Optional[int] = None,
        logger: Optional[logging.Logger] = None,
        ctx: Optional[LogContext] = None,
    ) -> None:
        if max_buffered is not None and max_buffered < 1:
            raise ValueError("max_buffered must be a positive integer or None")
        self._max_buffered = max_buffered
        self._buffer: Deque[CrawlEvent] = deque()
        self._waiter: Optional[asyncio.Future] = None
        self._state = StreamState.IDLE
        self._source: Optional[StreamSource] = None
        self._source_closed = False
        self._failure: Optional[WaterCrawlError] = None
        self._cancel_reason: Optional[str] = None
        self._t0: Optional[float] = None
        self._logger = logger or get_logger("watercrawl.streaming")
        self.ctx = ctx or LogContext(operation="stream")
        self.metrics = StreamMetrics()

    # Introspection --------------------------------------------------------
    @property
    def state(self) -> StreamState:
        return self._state

    @property
    def failure(self) -> Optional[WaterCrawlError]:
        """Recorded failure once the bridge is ``FAILED``."""
        return self._failure

    @property
    def cancel_reason(self) -> Optional[str]:
        return self._cancel_reason

    @property
    def buffered(self) -> int:
        """Number of events waiting to be pulled."""
        return len(self._buffer)

    @property
    def has_waiter(self) -> bool:
        """Whether a pull is currently suspended."""
        return self._pending_waiter() is not None

    # Lifecycle ------------------------------------------------------------
    def start(self, source: StreamSource) -> None:
        """Bind ``source``, register callbacks, and move to ``ACTIVE``.

        Raises:
            ProtocolViolationError: the bridge was already started or cancelled.
        """
        if self._state is not StreamState.IDLE:
            raise ProtocolViolationError(f"bridge cannot start from state {self._state.value!r}")
        self._source = source
        self._state = StreamState.ACTIVE
        self._t0 = time.perf_counter()
        try:
            source.open(self._on_event, self._on_complete)
        except Exception as e:
            # Surfaced to the consumer through the next pull.
            self._on_complete(e)

    async def next_event(self) -> PullResult:
        """Return the next event, or ``END_OF_STREAM`` once drained.

        Suspends while the buffer is empty and the stream is active.

        Raises:
            ProtocolViolationError: called before ``start()`` or while another
                pull is outstanding.
            WaterCrawlError: the stream failed (``StreamConnectionError`` for
                connection loss) and every earlier event was delivered.
            StreamCancelledError: ``cancel()`` interrupted this pull.
        """
        if self._state is StreamState.IDLE:
            raise ProtocolViolationError("next_event() called before start()")
        if self._pending_waiter() is not None:
            raise ProtocolViolationError("another next_event() is already outstanding")
        if self._buffer:
            return self._deliver(self._buffer.popleft())
        if self._state in (StreamState.COMPLETED, StreamState.CANCELLED):
            return END_OF_STREAM
        if self._state is StreamState.FAILED:
            raise self._failure  # type: ignore[misc]

        waiter = asyncio.get_running_loop().create_future()
        self._waiter = waiter
        try:
            result = await waiter
        except asyncio.CancelledError:
            self._recover_interrupted_waiter(waiter)
            raise
        finally:
            if self._waiter is waiter:
                self._waiter = None
        if result is END_OF_STREAM:
            return END_OF_STREAM
        return self._deliver(result)

    def cancel(self, reason: Optional[str] = None) -> None:
        """Cancel the stream; no-op once terminal.

        From ``ACTIVE`` the state flips to ``CANCELLED`` synchronously, the
        source is closed, and an outstanding pull is resolved with
        ``StreamCancelledError``. An ``IDLE`` bridge is simply marked
        cancelled so it can no longer be started.
        """
        if self._state.terminal:
            return
        self._cancel_reason = reason
        if self._state is StreamState.IDLE:
            self._state = StreamState.CANCELLED
            return
        self._transition(StreamState.CANCELLED)
        waiter = self._take_waiter()
        if waiter is not None:
            waiter.set_exception(StreamCancelledError(reason))

    # Source callbacks -----------------------------------------------------
    def _on_event(self, event: CrawlEvent) -> None:
        if self._state is not StreamState.ACTIVE:
            self.metrics.dropped += 1
            normalized_log_event(
                self._logger,
                "stream.drop",
                self.ctx,
                phase="mid_stream",
                level=logging.DEBUG,
                state=self._state.value,
                kind=event.kind,
            )
            return
        self.metrics.received += 1
        if self.metrics.time_to_first_event_ms is None and self._t0 is not None:
            self.metrics.time_to_first_event_ms = (time.perf_counter() - self._t0) * 1000.0
        waiter = self._take_waiter()
        if waiter is not None:
            # Buffer is empty whenever a pull is suspended.
            self.metrics.direct_handoffs += 1
            waiter.set_result(event)
            return
        if self._max_buffered is not None and len(self._buffer) >= self._max_buffered:
            self._fail(BufferOverflowError(self._max_buffered))
            return
        self._buffer.append(event)
        self.metrics.buffer_high_water = max(self.metrics.buffer_high_water, len(self._buffer))

    def _on_complete(self, error: Optional[BaseException]) -> None:
        if self._state is not StreamState.ACTIVE:
            return
        if error is None:
            self._transition(StreamState.COMPLETED)
            waiter = self._take_waiter()
            if waiter is not None:
                waiter.set_result(END_OF_STREAM)
            return
        self._fail(_as_stream_failure(error))

    # Internals ------------------------------------------------------------
    def _fail(self, failure: WaterCrawlError) -> None:
        self._failure = failure
        self._transition(StreamState.FAILED)
        waiter = self._take_waiter()
        if waiter is not None:
            waiter.set_exception(failure)

    def _transition(self, state: StreamState) -> None:
        previous = self._state
        self._state = state
        if self._t0 is not None:
            self.metrics.total_duration_ms = (time.perf_counter() - self._t0) * 1000.0
        normalized_log_event(
            self._logger,
            "stream.transition",
            self.ctx,
            phase="finalize",
            level=logging.DEBUG,
            error_code=self._failure.code.value if self._failure else None,
            emitted=self.metrics.delivered,
            previous=previous.value,
            state=state.value,
            buffered=len(self._buffer),
            reason=self._cancel_reason,
        )
        self._close_source()

    def _close_source(self) -> None:
        if self._source is None or self._source_closed:
            return
        self._source_closed = True
        try:
            self._source.close()
        except Exception as e:  # close is best effort; the state change already happened
            normalized_log_event(
                self._logger,
                "stream.close_error",
                self.ctx,
                phase="finalize",
                level=logging.WARNING,
                error=str(e),
                error_code=classify_exception(e).value,
            )

    def _pending_waiter(self) -> Optional[asyncio.Future]:
        waiter = self._waiter
        if waiter is None or waiter.done():
            return None
        return waiter

    def _take_waiter(self) -> Optional[asyncio.Future]:
        waiter = self._pending_waiter()
        if waiter is not None:
            self._waiter = None
        return waiter

    def _recover_interrupted_waiter(self, waiter: asyncio.Future) -> None:
        """Keep an event that was handed off just before the pulling task was cancelled."""
        if not waiter.done() or waiter.cancelled():
            return
        if waiter.exception() is not None:
            return
        result = waiter.result()
        if isinstance(result, CrawlEvent):
            self._buffer.appendleft(result)

    def _deliver(self, event: CrawlEvent) -> CrawlEvent:
        self.metrics.delivered += 1
        normalized_log_event(
            self._logger,
            "stream.event",
            self.ctx,
            phase="mid_stream",
            level=logging.DEBUG,
            emitted=self.metrics.delivered,
            kind=event.kind,
            status=event.status,
        )
        return event


def _as_stream_failure(error: BaseException) -> WaterCrawlError:
    if isinstance(error, WaterCrawlError):
        return error
    return StreamConnectionError(
        str(error) or type(error).__name__,
        raw=error,
        status_code=extract_status(error),
    )


__all__ = ["EventBridge", "PullResult"]
