"""Lifecycle states for the event bridge.

``IDLE -> ACTIVE -> {COMPLETED | FAILED | CANCELLED}``. Terminal states are
absorbing.
"""

from __future__ import annotations

from enum import Enum


class StreamState(str, Enum):
    """Lifecycle state of one bridge/source pair."""

    IDLE = "idle"
    ACTIVE = "active"
    COMPLETED = "completed"
    FAILED = "failed"
    CANCELLED = "cancelled"

    @property
    def terminal(self) -> bool:  # noqa: D401 - short form
        """Whether the state is absorbing."""
        return self in (StreamState.COMPLETED, StreamState.FAILED, StreamState.CANCELLED)


__all__ = ["StreamState"]
