"""Errors parts package public surface.

Re-exports individual error taxonomy components for optional direct imports.
Prefer importing from `watercrawl.base.errors` for the stable surface.
"""

from .error_code import ErrorCode
from .watercrawl_error import WaterCrawlError
from .stream_connection_error import StreamConnectionError
from .buffer_overflow_error import BufferOverflowError
from .envelope_decode_error import EnvelopeDecodeError
from .protocol_violation_error import ProtocolViolationError
from .classification import classify_exception, extract_status, to_watercrawl_error

__all__ = [
    "ErrorCode",
    "WaterCrawlError",
    "StreamConnectionError",
    "BufferOverflowError",
    "EnvelopeDecodeError",
    "ProtocolViolationError",
    "classify_exception",
    "to_watercrawl_error",
    "extract_status",
]
