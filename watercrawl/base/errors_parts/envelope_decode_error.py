"""Error raised for a status stream envelope that cannot be decoded."""
from __future__ import annotations

from typing import Optional

from .error_code import ErrorCode
from .watercrawl_error import WaterCrawlError


class EnvelopeDecodeError(WaterCrawlError):
    """A streamed envelope was not valid JSON or had an unknown shape."""

    def __init__(self, message: str, *, raw: Optional[BaseException] = None) -> None:
        super().__init__(code=ErrorCode.DECODE, message=message, raw=raw)


__all__ = ["EnvelopeDecodeError"]
