"""JSON line formatter for the ``watercrawl`` logger.

Messages produced by ``log_event`` are already JSON objects; their keys are
lifted to the top level next to ``ts``, ``level`` and ``logger``. Any other
message is kept under ``msg``. Attributes passed through ``extra=`` are
merged as well.
"""
from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from typing import Any, Dict

ISO = "%Y-%m-%dT%H:%M:%S.%fZ"

# Attributes every LogRecord carries; anything else arrived through ``extra=``.
_STANDARD_ATTRS = frozenset(vars(logging.makeLogRecord({}))) | {"message", "asctime", "taskName"}


def _as_object(text: str) -> Dict[str, Any] | None:
    if not text.startswith("{"):
        return None
    try:
        value = json.loads(text)
    except ValueError:
        return None
    return value if isinstance(value, dict) else None


class JsonFormatter(logging.Formatter):
    """Render each record as a single JSON object."""

    def format(self, record: logging.LogRecord) -> str:
        out: Dict[str, Any] = {
            "ts": datetime.fromtimestamp(record.created, timezone.utc).strftime(ISO),
            "level": record.levelname,
            "logger": record.name,
        }
        text = record.getMessage()
        parsed = _as_object(text)
        if parsed is None:
            out["msg"] = text
        else:
            out.update(parsed)
        for key, value in vars(record).items():
            if key.startswith("_") or key in _STANDARD_ATTRS:
                continue
            out.setdefault(key, value)
        if record.exc_info:
            out["exc"] = self.formatException(record.exc_info)
        return json.dumps(out, ensure_ascii=False, default=str)


__all__ = ["JsonFormatter", "ISO"]
