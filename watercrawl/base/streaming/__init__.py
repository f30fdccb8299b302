"""Streaming package for the client.

Exposes the status event primitives, the push-to-pull ``EventBridge``, the
consumer-facing ``CrawlEventStream``, and the HTTP SSE source under a single
namespace.
"""

from .events import (
    END_OF_STREAM,
    EVENT_KINDS,
    TERMINAL_CRAWL_STATUSES,
    CrawlEvent,
    EventKind,
    decode_envelope,
)
from .streaming_metrics import StreamMetrics
from .event_bridge import EventBridge
from .event_stream import CrawlEventStream
from .http_source import HttpEventSource

__all__ = [
    "END_OF_STREAM",
    "EVENT_KINDS",
    "TERMINAL_CRAWL_STATUSES",
    "CrawlEvent",
    "EventKind",
    "decode_envelope",
    "StreamMetrics",
    "EventBridge",
    "CrawlEventStream",
    "HttpEventSource",
]
