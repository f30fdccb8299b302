"""
Client Base Package

Exports the building blocks shared by the resource client:
- Errors: normalized taxonomy and exception classification
- Models: pydantic resource and option models
- Streaming: event primitives, EventBridge, CrawlEventStream, HTTP SSE source
- Infrastructure: timeouts, retry policy, logging, HTTP client construction
"""

from .api_client import BaseAPIClient
from .cancellation import StreamCancelledError, StreamState
from .errors import (
    BufferOverflowError,
    EnvelopeDecodeError,
    ErrorCode,
    ProtocolViolationError,
    StreamConnectionError,
    WaterCrawlError,
    classify_exception,
)
from .interfaces import StreamSource
from .models import (
    CrawlRequest,
    CrawlRequestList,
    CrawlResult,
    CrawlResultList,
    PageOptions,
    PluginOptions,
    SpiderOptions,
)
from .resilience import RetryConfig, retry
from .streaming import (
    END_OF_STREAM,
    CrawlEvent,
    CrawlEventStream,
    EventBridge,
    HttpEventSource,
    StreamMetrics,
)
from .timeouts import TimeoutConfig, get_timeout_config

__all__ = [
    "BaseAPIClient",
    "StreamCancelledError",
    "StreamState",
    "BufferOverflowError",
    "EnvelopeDecodeError",
    "ErrorCode",
    "ProtocolViolationError",
    "StreamConnectionError",
    "WaterCrawlError",
    "classify_exception",
    "StreamSource",
    "CrawlRequest",
    "CrawlRequestList",
    "CrawlResult",
    "CrawlResultList",
    "PageOptions",
    "PluginOptions",
    "SpiderOptions",
    "RetryConfig",
    "retry",
    "END_OF_STREAM",
    "CrawlEvent",
    "CrawlEventStream",
    "EventBridge",
    "HttpEventSource",
    "StreamMetrics",
    "TimeoutConfig",
    "get_timeout_config",
]
