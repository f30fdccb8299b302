"""Interfaces (Protocols) shared by the HTTP and streaming layers.

``StreamSource`` is the contract between a long-lived push connection and the
``EventBridge`` that turns it into a pull sequence.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Callable, Optional, Protocol, runtime_checkable

if TYPE_CHECKING:
    from .streaming.events import CrawlEvent

EventCallback = Callable[["CrawlEvent"], None]
CompletionCallback = Callable[[Optional[BaseException]], None]


@runtime_checkable
class StreamSource(Protocol):
    """A push-based event source for one streaming connection.

    Implementations must:
    - invoke ``on_event`` once per decoded event, in arrival order;
    - invoke ``on_complete`` exactly once: ``None`` for a normal end, the
      failure cause otherwise (closing via ``close()`` counts as a normal end);
    - treat ``close()`` as idempotent and non-blocking;
    - finish any teardown by the time ``wait_closed()`` returns.
    """

    def open(self, on_event: EventCallback, on_complete: CompletionCallback) -> None:
        """Start delivering events to the given callbacks."""
        ...

    def close(self) -> None:
        """Request termination of the connection."""
        ...

    async def wait_closed(self) -> None:
        """Wait until the connection has been torn down."""
        ...


__all__ = ["StreamSource", "EventCallback", "CompletionCallback"]
