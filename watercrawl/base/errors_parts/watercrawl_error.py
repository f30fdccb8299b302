"""
Structured client error exception type.

Wraps HTTP, transport, and stream failures with a normalized `ErrorCode` for
consistent handling, retry logic, and structured logging.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .error_code import ErrorCode


@dataclass
class WaterCrawlError(Exception):
    """Represents a structured client error with a normalized error code.

    Attributes:
        code: Normalized :class:`ErrorCode` classification for the failure.
        message: Human-readable error message suitable for logging.
        status_code: HTTP status returned by the API, when one exists.
        retryable: Hint for upstream retry logic (not authoritative).
        raw: Optional original exception for diagnostics.
    """

    code: ErrorCode
    message: str
    status_code: Optional[int] = None
    retryable: bool = False
    raw: Optional[BaseException] = None

    def __str__(self) -> str:  # pragma: no cover - trivial
        """Return a compact string combining code, status, and message."""
        status = f" [{self.status_code}]" if self.status_code is not None else ""
        return f"{self.code.value}{status}: {self.message}"


__all__ = ["WaterCrawlError"]
