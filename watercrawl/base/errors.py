"""Unified client error taxonomy public surface.

This module re-exports the one-class-per-file implementations under
``watercrawl.base.errors_parts`` to maintain a stable import path.
"""

from .errors_parts.error_code import ErrorCode
from .errors_parts.watercrawl_error import WaterCrawlError
from .errors_parts.stream_connection_error import StreamConnectionError
from .errors_parts.buffer_overflow_error import BufferOverflowError
from .errors_parts.envelope_decode_error import EnvelopeDecodeError
from .errors_parts.protocol_violation_error import ProtocolViolationError
from .errors_parts.classification import (
    RETRYABLE_CODES,
    classify_exception,
    extract_status,
    to_watercrawl_error,
)

__all__ = [
    "ErrorCode",
    "WaterCrawlError",
    "StreamConnectionError",
    "BufferOverflowError",
    "EnvelopeDecodeError",
    "ProtocolViolationError",
    "RETRYABLE_CODES",
    "classify_exception",
    "to_watercrawl_error",
    "extract_status",
]
