"""Cancellation primitives split one class per file (see ``base.cancellation``)."""

from .cancelled_error import StreamCancelledError
from .state import StreamState

__all__ = ["StreamCancelledError", "StreamState"]
