"""Programming error raised on misuse of the event bridge.

Covers concurrent pulls, pulls before the bridge was started, and starting a
bridge twice. These are never retried.
"""
from __future__ import annotations


class ProtocolViolationError(RuntimeError):
    """Raised when the single-consumer bridge contract is violated."""


__all__ = ["ProtocolViolationError"]
