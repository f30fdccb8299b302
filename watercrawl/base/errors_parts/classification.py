"""Map arbitrary exceptions onto :class:`ErrorCode`.

The HTTP layer and the stream source both funnel failures through
:func:`to_watercrawl_error` so callers only ever handle ``WaterCrawlError``.
"""
from __future__ import annotations

import asyncio
from typing import Dict, Optional, Tuple

import httpx

from .error_code import ErrorCode
from .watercrawl_error import WaterCrawlError


def _valid_status(value: object) -> Optional[int]:
    return value if isinstance(value, int) and 100 <= value < 600 else None


def extract_status(exc: BaseException) -> Optional[int]:
    """HTTP status carried by ``exc``, if any.

    Looks at ``status_code``, then ``status``, then ``response.status_code``.
    """
    for attr in ("status_code", "status"):
        status = _valid_status(getattr(exc, attr, None))
        if status is not None:
            return status
    # httpx request errors raise RuntimeError when ``.response`` is unset.
    try:
        response = getattr(exc, "response", None)
    except RuntimeError:
        return None
    return _valid_status(getattr(response, "status_code", None))


_HTTP_STATUS_MAP: Dict[int, ErrorCode] = {
    400: ErrorCode.VALIDATION,
    401: ErrorCode.AUTH,
    403: ErrorCode.AUTH,
    404: ErrorCode.NOT_FOUND,
    408: ErrorCode.TIMEOUT,
    409: ErrorCode.CONFLICT,
    410: ErrorCode.NOT_FOUND,
    422: ErrorCode.VALIDATION,
    429: ErrorCode.RATE_LIMIT,
    500: ErrorCode.SERVER_ERROR,
    502: ErrorCode.TRANSIENT,
    503: ErrorCode.UNAVAILABLE,
    504: ErrorCode.TIMEOUT,
}

RETRYABLE_CODES = (
    ErrorCode.TRANSIENT,
    ErrorCode.RATE_LIMIT,
    ErrorCode.TIMEOUT,
    ErrorCode.UNAVAILABLE,
    ErrorCode.CONNECTION,
)

# Checked in order against the lower-cased message; first hit wins.
_MESSAGE_HINTS: Tuple[Tuple[ErrorCode, Tuple[str, ...]], ...] = (
    (ErrorCode.TIMEOUT, ("timeout", "timed out")),
    (ErrorCode.RATE_LIMIT, ("rate limit", "rate-limit", "too many requests")),
    (ErrorCode.AUTH, ("unauthorized", "forbidden", "api key")),
    (ErrorCode.NOT_FOUND, ("not found", "does not exist")),
    (ErrorCode.CONNECTION, ("reset", "refused", "broken pipe", "disconnected")),
    (ErrorCode.UNAVAILABLE, ("unavailable",)),
    (ErrorCode.VALIDATION, ("invalid", "malformed")),
)


def _code_from_status(status: int) -> ErrorCode:
    if status in _HTTP_STATUS_MAP:
        return _HTTP_STATUS_MAP[status]
    if status >= 500:
        return ErrorCode.SERVER_ERROR
    if status >= 400:
        return ErrorCode.VALIDATION
    return ErrorCode.UNKNOWN


def _code_from_message(message: str) -> Optional[ErrorCode]:
    text = message.lower()
    for code, hints in _MESSAGE_HINTS:
        if any(hint in text for hint in hints):
            return code
    return None


def classify_exception(exc: BaseException) -> ErrorCode:
    """Classify ``exc``.

    ``WaterCrawlError`` keeps its code. Timeouts and transport failures are
    recognised by type, then an HTTP status is mapped, then the message is
    scanned for hints. Anything else is ``UNKNOWN``.
    """
    if isinstance(exc, WaterCrawlError):
        return exc.code
    if isinstance(exc, (TimeoutError, asyncio.TimeoutError, httpx.TimeoutException)):
        return ErrorCode.TIMEOUT
    if isinstance(exc, (httpx.TransportError, ConnectionError)):
        return ErrorCode.CONNECTION
    status = extract_status(exc)
    if status is not None:
        return _code_from_status(status)
    return _code_from_message(str(exc)) or ErrorCode.UNKNOWN


def to_watercrawl_error(exc: BaseException, *, message: Optional[str] = None) -> WaterCrawlError:
    """Wrap ``exc`` in a :class:`WaterCrawlError` carrying its classified code."""
    if isinstance(exc, WaterCrawlError):
        return exc
    code = classify_exception(exc)
    return WaterCrawlError(
        code=code,
        message=message or str(exc) or type(exc).__name__,
        status_code=extract_status(exc),
        retryable=code in RETRYABLE_CODES,
        raw=exc,
    )


__all__ = [
    "classify_exception",
    "to_watercrawl_error",
    "RETRYABLE_CODES",
    "extract_status",
]
