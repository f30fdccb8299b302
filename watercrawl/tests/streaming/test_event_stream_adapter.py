"""Consumer-facing ``CrawlEventStream`` behaviour.

Exercises async iteration, early exit (through the context manager or by
abandoning a plain ``async for``), idle timeouts, and the structured log
lines emitted at start and end.
"""

from __future__ import annotations

import asyncio
import gc

import pytest

from watercrawl.base.cancellation import StreamCancelledError, StreamState
from watercrawl.base.errors import ErrorCode, StreamConnectionError, WaterCrawlError
from watercrawl.base.streaming import CrawlEventStream, EventBridge


def _stream(source, **kwargs) -> CrawlEventStream:
    return CrawlEventStream(EventBridge(), source, **kwargs)


@pytest.mark.asyncio
async def test_async_for_yields_events_until_completion(fake_source):
    stream = _stream(fake_source)
    async with stream:
        fake_source.emit("status", {"status": "running"})
        fake_source.emit("result", {"doc": "a"})
        fake_source.complete()
        kinds = [event.kind async for event in stream]

    assert kinds == ["status", "result"]  # nosec B101 - test assertion
    assert stream.closed  # nosec B101 - test assertion
    assert stream.state is StreamState.COMPLETED  # nosec B101 - test assertion
    assert fake_source.wait_closed_calls == 1  # nosec B101 - test assertion


@pytest.mark.asyncio
async def test_first_iteration_starts_the_bridge(fake_source):
    stream = _stream(fake_source)
    assert not fake_source.opened  # nosec B101 - test assertion
    asyncio.get_running_loop().call_soon(fake_source.complete)
    events = [event async for event in stream]
    assert events == []  # nosec B101 - test assertion
    assert fake_source.opened  # nosec B101 - test assertion
    assert stream.closed  # nosec B101 - test assertion


@pytest.mark.asyncio
async def test_break_inside_context_closes_source(fake_source):
    stream = _stream(fake_source)
    async with stream:
        fake_source.emit("status", {"status": "running"})
        fake_source.emit("status", {"status": "running"})
        async for _event in stream:
            break

    assert fake_source.close_calls == 1  # nosec B101 - test assertion
    assert stream.state is StreamState.CANCELLED  # nosec B101 - test assertion
    assert stream.metrics.delivered == 1  # nosec B101 - test assertion


@pytest.mark.asyncio
async def test_break_from_plain_async_for_cancels_abandoned_stream(fake_source):
    bridge = EventBridge()
    asyncio.get_running_loop().call_soon(fake_source.emit, "status", {"status": "running"})
    async for _event in CrawlEventStream(bridge, fake_source):
        break
    gc.collect()

    assert bridge.state is StreamState.CANCELLED  # nosec B101 - test assertion
    assert bridge.cancel_reason == "stream abandoned"  # nosec B101 - test assertion
    assert fake_source.close_calls == 1  # nosec B101 - test assertion

    fake_source.emit("status", {"status": "running"})
    assert bridge.buffered == 0  # nosec B101 - test assertion
    assert bridge.metrics.dropped == 1  # nosec B101 - test assertion


@pytest.mark.asyncio
async def test_cancel_before_first_pull_ends_without_opening(fake_source):
    stream = _stream(fake_source)
    stream.cancel("not needed")
    events = [event async for event in stream]

    assert events == []  # nosec B101 - test assertion
    assert stream.closed  # nosec B101 - test assertion
    assert stream.state is StreamState.CANCELLED  # nosec B101 - test assertion
    assert not fake_source.opened  # nosec B101 - test assertion
    assert fake_source.close_calls == 0  # nosec B101 - test assertion

    again = _stream(fake_source)
    again.cancel()
    async with again:
        assert [event async for event in again] == []  # nosec B101 - test assertion
    assert not fake_source.opened  # nosec B101 - test assertion


@pytest.mark.asyncio
async def test_failure_is_raised_after_buffered_events(fake_source):
    stream = _stream(fake_source)
    received = []
    with pytest.raises(StreamConnectionError):
        async with stream:
            fake_source.emit("status", {"status": "running"})
            fake_source.fail(ConnectionError("reset"))
            async for event in stream:
                received.append(event.status)

    assert received == ["running"]  # nosec B101 - test assertion
    assert stream.closed  # nosec B101 - test assertion


@pytest.mark.asyncio
async def test_consumer_cancel_ends_iteration_cleanly(fake_source):
    stream = _stream(fake_source)
    async with stream:
        asyncio.get_running_loop().call_later(0.01, stream.cancel, "enough")
        events = [event async for event in stream]

    assert events == []  # nosec B101 - test assertion
    assert stream.bridge.cancel_reason == "enough"  # nosec B101 - test assertion
    assert fake_source.close_calls == 1  # nosec B101 - test assertion


@pytest.mark.asyncio
async def test_bridge_cancel_from_elsewhere_is_raised(fake_source):
    stream = _stream(fake_source)
    with pytest.raises(StreamCancelledError):
        async with stream:
            asyncio.get_running_loop().call_later(0.01, stream.bridge.cancel, "shutdown")
            async for _event in stream:
                pass


@pytest.mark.asyncio
async def test_idle_timeout_cancels_and_raises_timeout(fake_source):
    stream = _stream(fake_source, idle_timeout=0.02)
    with pytest.raises(WaterCrawlError) as info:
        async with stream:
            async for _event in stream:
                pass

    assert info.value.code is ErrorCode.TIMEOUT  # nosec B101 - test assertion
    assert info.value.retryable  # nosec B101 - test assertion
    assert stream.state is StreamState.CANCELLED  # nosec B101 - test assertion
    assert fake_source.close_calls == 1  # nosec B101 - test assertion


def test_idle_timeout_must_be_positive(fake_source):
    with pytest.raises(ValueError):
        _stream(fake_source, idle_timeout=0)


@pytest.mark.asyncio
async def test_aclose_is_idempotent_and_iteration_stops(fake_source):
    stream = _stream(fake_source)
    async with stream:
        pass
    await stream.aclose()
    assert fake_source.close_calls == 1  # nosec B101 - test assertion
    with pytest.raises(StopAsyncIteration):
        await stream.__anext__()


@pytest.mark.asyncio
async def test_lifecycle_is_logged(fake_source, json_logs):
    stream = _stream(fake_source)
    async with stream:
        fake_source.emit("result", {"doc": "a"})
        fake_source.complete()
        async for _event in stream:
            pass

    records = json_logs()
    events = [r.get("event") for r in records]
    assert "stream.start" in events  # nosec B101 - test assertion
    end = next(r for r in records if r.get("event") == "stream.end")
    assert end["state"] == "completed"  # nosec B101 - test assertion
    assert end["emitted"] == 1  # nosec B101 - test assertion
    assert end["phase"] == "finalize"  # nosec B101 - test assertion
