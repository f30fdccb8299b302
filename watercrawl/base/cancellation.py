"""Stream lifecycle and cancellation primitives (public API facade).

Purpose
-------
Expose the cancellation error and the bridge lifecycle enum via the canonical
``watercrawl.base.cancellation`` import path while the concrete
implementations live under ``cancellation_parts``.

Notes
-----
- ``StreamCancelledError`` resolves a pull interrupted by ``cancel()``.
- ``StreamState`` tracks ``idle -> active -> terminal`` transitions.
"""

from .cancellation_parts.cancelled_error import StreamCancelledError
from .cancellation_parts.state import StreamState

__all__ = ["StreamCancelledError", "StreamState"]
