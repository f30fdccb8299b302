"""Streaming metrics data structures.

Isolated within the streaming package to keep the bridge state machine small.
"""
from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any, Dict, Optional


@dataclass
class StreamMetrics:
    """Collected metrics for one bridge/source pair.

    Attributes:
        received: events handed to the bridge by the source callback.
        delivered: events returned to the consumer.
        dropped: events that arrived after a terminal transition.
        direct_handoffs: events passed straight to a waiting pull.
        buffer_high_water: largest number of buffered events observed.
        time_to_first_event_ms: start to first received event.
        total_duration_ms: start to terminal transition.
    """

    received: int = 0
    delivered: int = 0
    dropped: int = 0
    direct_handoffs: int = 0
    buffer_high_water: int = 0
    time_to_first_event_ms: Optional[float] = None
    total_duration_ms: Optional[float] = None

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


__all__ = ["StreamMetrics"]
