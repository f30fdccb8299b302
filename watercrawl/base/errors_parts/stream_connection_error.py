"""Connection failure raised by the crawl status stream.

Surfaced to the consumer only after every event buffered ahead of the
failure has been delivered.
"""
from __future__ import annotations

from typing import Optional

from .error_code import ErrorCode
from .watercrawl_error import WaterCrawlError


class StreamConnectionError(WaterCrawlError):
    """The underlying status stream connection failed (network or protocol)."""

    def __init__(
        self,
        message: str,
        *,
        raw: Optional[BaseException] = None,
        status_code: Optional[int] = None,
    ) -> None:
        super().__init__(
            code=ErrorCode.CONNECTION,
            message=message,
            status_code=status_code,
            retryable=True,
            raw=raw,
        )

    @property
    def cause(self) -> Optional[BaseException]:
        """Underlying exception reported by the stream source, if any."""
        return self.raw


__all__ = ["StreamConnectionError"]
