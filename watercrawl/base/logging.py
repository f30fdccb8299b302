"""Structured logging for the client.

Every module asks for a logger with ``get_logger("watercrawl.<area>")``. The
shared ``watercrawl`` logger owns one stderr handler (JSON lines by default)
and does not propagate to the root logger; child loggers carry no handlers and
propagate to it. The level comes from ``WATERCRAWL_LOG_LEVEL`` (``INFO`` when
unset).

Events are logged as one JSON object per line through ``log_event``.
``normalized_log_event`` adds the canonical keys ``phase``, ``attempt`` and
``emitted`` (plus ``error_code`` on failures) so request and stream events
can be filtered the same way.
"""
from __future__ import annotations

import contextlib
import json
import logging
import os
import sys
from logging.handlers import RotatingFileHandler
from typing import Any, Dict, Iterable, Optional

from .log_support import JsonFormatter, LogContext

BASE_LOGGER_NAME = "watercrawl"
LOG_LEVEL_ENV = "WATERCRAWL_LOG_LEVEL"

_MARK_READY = "_watercrawl_ready"
_MARK_CONSOLE = "_watercrawl_console"
_MARK_FILE = "_watercrawl_file"
_PLAIN_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"
_FILE_MAX_BYTES = 10 * 1024 * 1024
_FILE_BACKUPS = 5

_LEVELS = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARN": logging.WARNING,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
    "CRITICAL": logging.CRITICAL,
}


def _parse_level(value: str | None, default: int = logging.INFO) -> int:
    """Map a level name to its numeric value; unknown or empty names give ``default``."""
    if not value:
        return default
    return _LEVELS.get(value.strip().upper(), default)


def _formatter(json_mode: bool) -> logging.Formatter:
    return JsonFormatter() if json_mode else logging.Formatter(_PLAIN_FORMAT)


def _discard(logger: logging.Logger, handlers: Iterable[logging.Handler]) -> None:
    for handler in list(handlers):
        logger.removeHandler(handler)
        with contextlib.suppress(Exception):
            handler.close()


def _marked(logger: logging.Logger, mark: str) -> list[logging.Handler]:
    return [h for h in logger.handlers if getattr(h, mark, False)]


def _new_console_handler(json_mode: bool, level: int) -> logging.Handler:
    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(level)
    handler.setFormatter(_formatter(json_mode))
    setattr(handler, _MARK_CONSOLE, True)
    return handler


def _sync_console(logger: logging.Logger, json_mode: bool, level: int) -> None:
    """Point the console handler at the current ``sys.stderr`` with the given settings.

    ``sys.stderr`` may be swapped after the first call (pytest capture, CLI
    redirection); a handler bound to a stale or closed stream is replaced.
    """
    live = []
    for handler in _marked(logger, _MARK_CONSOLE):
        stream = getattr(handler, "stream", None)
        if stream is sys.stderr and not getattr(stream, "closed", False):
            live.append(handler)
        else:
            _discard(logger, [handler])
    if not live:
        logger.addHandler(_new_console_handler(json_mode, level))
        return
    for handler in live:
        handler.setLevel(level)
        if json_mode != isinstance(handler.formatter, JsonFormatter):
            handler.setFormatter(_formatter(json_mode))


def _base_logger(json_mode: bool, level: int) -> logging.Logger:
    logger = logging.getLogger(BASE_LOGGER_NAME)
    resolved = _parse_level(os.getenv(LOG_LEVEL_ENV), default=level)
    logger.setLevel(resolved)
    if not getattr(logger, _MARK_READY, False):
        _discard(logger, logger.handlers)
        logger.propagate = False
        setattr(logger, _MARK_READY, True)
    _sync_console(logger, json_mode, resolved)
    return logger


def get_logger(name: str = BASE_LOGGER_NAME, json_mode: bool = True, level: int = logging.INFO) -> logging.Logger:
    """Return ``name``'s logger, making sure the shared ``watercrawl`` handler exists."""
    base = _base_logger(json_mode, level)
    if name == BASE_LOGGER_NAME:
        return base
    logger = logging.getLogger(name)
    _discard(logger, _marked(logger, _MARK_CONSOLE))
    logger.setLevel(logging.NOTSET)
    logger.propagate = True
    return logger


def configure_logger(
    *,
    level: int | str | None = None,
    file_path: Optional[str] = None,
    json_mode: bool = True,
) -> logging.Logger:
    """Adjust the shared ``watercrawl`` logger at runtime.

    Parameters
    ----------
    level:
        Numeric level or level name. ``None`` keeps the current level.
    file_path:
        Also write to a rotating file (10 MB, 5 backups) at this path. A
        handler already writing there is reused. ``None`` removes any file
        handler added earlier.
    json_mode:
        JSON lines (default) or plain text for the handlers touched here.

    Returns
    -------
    logging.Logger
        The shared base logger.
    """
    logger = get_logger(BASE_LOGGER_NAME, json_mode=json_mode)
    if isinstance(level, str):
        level = _parse_level(level, default=logger.level)
    if level is not None:
        logger.setLevel(level)
        for handler in logger.handlers:
            handler.setLevel(level)

    file_handlers = _marked(logger, _MARK_FILE)
    if file_path is None:
        _discard(logger, file_handlers)
        return logger

    target = os.path.abspath(os.path.expanduser(file_path))
    keep = [h for h in file_handlers if getattr(h, "baseFilename", None) == target]
    _discard(logger, [h for h in file_handlers if h not in keep])
    if keep:
        handler = keep[0]
    else:
        os.makedirs(os.path.dirname(target), exist_ok=True)
        handler = RotatingFileHandler(
            target, maxBytes=_FILE_MAX_BYTES, backupCount=_FILE_BACKUPS, encoding="utf-8"
        )
        setattr(handler, _MARK_FILE, True)
        logger.addHandler(handler)
    handler.setLevel(logger.level)
    handler.setFormatter(_formatter(json_mode))
    return logger


def log_event(
    logger: logging.Logger,
    event: str,
    ctx: LogContext | None = None,
    *,
    level: int = logging.INFO,
    keep_none: bool = False,
    **fields: Any,
) -> None:
    """Log ``event`` as one JSON object.

    Context fields come first, then ``fields``. ``None`` values are dropped
    unless ``keep_none`` is set. Nothing is serialized when ``level`` is
    disabled.
    """
    if not logger.isEnabledFor(level):
        return
    payload: Dict[str, Any] = {"event": event, **(ctx.to_dict() if ctx else {})}
    payload.update(fields if keep_none else {k: v for k, v in fields.items() if v is not None})
    logger.log(level, json.dumps(payload, ensure_ascii=False, default=str))


REQUIRED_NORMALIZED_KEYS = ("phase", "attempt", "error_code", "emitted")


def normalized_log_event(
    logger: logging.Logger,
    event: str,
    ctx: LogContext | None = None,
    *,
    phase: str,
    attempt: int | None = None,
    error_code: str | None = None,
    emitted: int | bool | None = None,
    level: int = logging.INFO,
    **extra_fields: Any,
) -> None:
    """Log ``event`` with the canonical keys always present.

    ``phase``, ``attempt`` and ``emitted`` are written even when ``None``;
    ``error_code`` only on failures. Extra fields cannot override them and
    ``None`` extras are dropped.
    """
    fields: Dict[str, Any] = {"phase": phase, "attempt": attempt, "emitted": emitted}
    if error_code is not None:
        fields["error_code"] = error_code
    fields.update({k: v for k, v in extra_fields.items() if v is not None and k not in fields})
    log_event(logger, event, ctx, level=level, keep_none=True, **fields)


__all__ = [
    "LogContext",
    "get_logger",
    "configure_logger",
    "log_event",
    "normalized_log_event",
    "REQUIRED_NORMALIZED_KEYS",
    "BASE_LOGGER_NAME",
]
