"""Status stream event primitives.

An event is one decoded envelope from the crawl status stream. The wire shape
is ``{"type": "status" | "result" | "error", "data": <payload>}``.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, Final, Literal, Mapping, get_args

from ..errors import EnvelopeDecodeError

EventKind = Literal["status", "result", "error"]

EVENT_KINDS: Final = frozenset(get_args(EventKind))

# Job statuses after which the server sends nothing further for the job.
TERMINAL_CRAWL_STATUSES: Final = frozenset({"finished", "failed", "canceled", "cancelled"})


@dataclass(frozen=True)
class CrawlEvent:
    """Represents one event emitted by the crawl status stream.

    Fields:
      kind: ``status`` (job progress), ``result`` (one crawled page) or
            ``error`` (server-side error marker)
      data: opaque payload, passed through unchanged
      raw: decoded envelope as received (optional, for debugging)
    """

    kind: EventKind
    data: Any
    raw: Mapping[str, Any] | None = None

    @property
    def status(self) -> str | None:
        """Job status carried by a ``status`` event, if present."""
        if self.kind != "status" or not isinstance(self.data, Mapping):
            return None
        value = self.data.get("status")
        return value if isinstance(value, str) else None

    @property
    def is_terminal(self) -> bool:
        """True for error markers and status events reporting a final job status."""
        return self.kind == "error" or self.status in TERMINAL_CRAWL_STATUSES


class _EndOfStream:
    """Sentinel type returned by ``EventBridge.next_event`` once drained."""

    _instance: "_EndOfStream | None" = None

    def __new__(cls) -> "_EndOfStream":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "END_OF_STREAM"

    def __bool__(self) -> bool:
        return False


END_OF_STREAM: Final = _EndOfStream()


def decode_envelope(payload: str | bytes | Mapping[str, Any]) -> CrawlEvent:
    """Decode one wire envelope into a :class:`CrawlEvent`.

    Raises:
        EnvelopeDecodeError: payload is not JSON, not an object, or carries an
            unknown ``type``.
    """
    if isinstance(payload, (str, bytes)):
        try:
            envelope = json.loads(payload)
        except ValueError as e:
            raise EnvelopeDecodeError(f"invalid JSON envelope: {e}", raw=e) from e
    else:
        envelope = payload
    if not isinstance(envelope, Mapping):
        raise EnvelopeDecodeError(f"envelope must be an object, got {type(envelope).__name__}")
    kind = envelope.get("type")
    if kind not in EVENT_KINDS:
        raise EnvelopeDecodeError(f"unknown envelope type: {kind!r}")
    return CrawlEvent(kind=kind, data=envelope.get("data"), raw=dict(envelope))


__all__ = [
    "CrawlEvent",
    "EventKind",
    "EVENT_KINDS",
    "TERMINAL_CRAWL_STATUSES",
    "END_OF_STREAM",
    "decode_envelope",
]
