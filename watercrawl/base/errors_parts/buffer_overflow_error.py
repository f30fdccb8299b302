"""Error raised when a bounded event buffer fills up."""
from __future__ import annotations

from .error_code import ErrorCode
from .watercrawl_error import WaterCrawlError


class BufferOverflowError(WaterCrawlError):
    """The consumer fell behind a bounded event buffer."""

    def __init__(self, limit: int) -> None:
        super().__init__(
            code=ErrorCode.BUFFER_OVERFLOW,
            message=f"event buffer exceeded {limit} pending events",
        )
        self.limit = limit


__all__ = ["BufferOverflowError"]
