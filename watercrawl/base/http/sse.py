"""Minimal Server-Sent Events framing for the status stream.

Only ``data:`` fields matter to the client. Multi-line data fields are joined
with newlines, comment lines (``:keepalive``) are skipped, and a blank line
dispatches the accumulated event. Data still pending at end of stream is
dispatched as well.
"""
from __future__ import annotations

from typing import AsyncIterable, AsyncIterator, List


async def iter_sse_data(lines: AsyncIterable[str]) -> AsyncIterator[str]:
    """Yield the ``data`` payload of each event found in ``lines``."""
    pending: List[str] = []
    async for line in lines:
        if not line:
            if pending:
                yield "\n".join(pending)
                pending = []
            continue
        if line.startswith(":"):
            continue
        field, _, value = line.partition(":")
        if field != "data":
            continue
        pending.append(value[1:] if value.startswith(" ") else value)
    if pending:
        yield "\n".join(pending)


__all__ = ["iter_sse_data"]
