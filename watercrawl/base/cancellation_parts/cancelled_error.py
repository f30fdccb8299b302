"""Cancellation error type.

Defines the public ``StreamCancelledError`` used to resolve a pull that was
interrupted by a deliberate cancel. Kept isolated to satisfy one-class-per-file
policy.
"""

from __future__ import annotations


class StreamCancelledError(RuntimeError):
    """Raised to an outstanding pull when the stream is cancelled.

    This specialized error distinguishes deliberate cancellation from
    connection failures, enabling targeted handling (treat as a clean stop,
    suppress log noise, avoid retry logic). It is unrelated to
    ``asyncio.CancelledError``, which still signals task cancellation.
    """

    def __init__(self, reason: str | None = None) -> None:
        super().__init__(reason or "stream cancelled")
        self.reason = reason


__all__ = ["StreamCancelledError"]
