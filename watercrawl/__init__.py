"""watercrawl package

Async Python client for the WaterCrawl crawling service.

Public API (re-exported):
    - Version: ``__version__``
    - Client: :class:`WaterCrawlAPIClient`
    - Streaming: :class:`CrawlEvent`, :class:`CrawlEventStream`,
      :class:`EventBridge`, ``END_OF_STREAM``
    - Errors: :class:`WaterCrawlError`, :class:`ErrorCode`,
      :class:`StreamConnectionError`, :class:`StreamCancelledError`,
      :class:`ProtocolViolationError`
    - Models: :class:`CrawlRequest`, :class:`CrawlResult`,
      :class:`SpiderOptions`, :class:`PageOptions`
"""

from .base import (
    END_OF_STREAM,
    BufferOverflowError,
    CrawlEvent,
    CrawlEventStream,
    CrawlRequest,
    CrawlRequestList,
    CrawlResult,
    CrawlResultList,
    ErrorCode,
    EventBridge,
    PageOptions,
    PluginOptions,
    ProtocolViolationError,
    SpiderOptions,
    StreamCancelledError,
    StreamConnectionError,
    StreamState,
    WaterCrawlError,
)
from .base.logging import configure_logger
from .client import WaterCrawlAPIClient

__version__ = "0.1.0"

__all__ = [
    "__version__",
    "WaterCrawlAPIClient",
    "configure_logger",
    "END_OF_STREAM",
    "CrawlEvent",
    "CrawlEventStream",
    "EventBridge",
    "StreamState",
    "WaterCrawlError",
    "ErrorCode",
    "StreamConnectionError",
    "StreamCancelledError",
    "ProtocolViolationError",
    "BufferOverflowError",
    "CrawlRequest",
    "CrawlRequestList",
    "CrawlResult",
    "CrawlResultList",
    "SpiderOptions",
    "PageOptions",
    "PluginOptions",
]
