"""Unified timeout settings for the client.

This module centralizes timeout values used by the HTTP layer and the status
stream so that no call site carries its own numeric literal.

Key Components
--------------
TimeoutConfig
    Dataclass capturing normalized timeout values.

get_timeout_config()
    Returns a process-cached configuration, parsing environment overrides on
    first use and again only when the relevant variables change. Supported
    environment variables (all optional):
        WATERCRAWL_TIMEOUT_HTTP_SECONDS
        WATERCRAWL_TIMEOUT_CONNECT_SECONDS
        WATERCRAWL_TIMEOUT_STREAM_IDLE_SECONDS

http_timeout(cfg) / stream_timeout(cfg)
    Build ``httpx.Timeout`` objects. Streaming connections have no read
    timeout: a crawl may stay quiet for long stretches between status events.
    Idle deadlines for the status stream are enforced by the consumer-facing
    event stream instead (``stream_idle_timeout_seconds``).
"""
from __future__ import annotations

import os
from dataclasses import dataclass

import httpx

from ..config.defaults import DEFAULT_CONNECT_TIMEOUT_SECONDS, DEFAULT_HTTP_TIMEOUT_SECONDS

_ENV_VARS = (
    "WATERCRAWL_TIMEOUT_HTTP_SECONDS",
    "WATERCRAWL_TIMEOUT_CONNECT_SECONDS",
    "WATERCRAWL_TIMEOUT_STREAM_IDLE_SECONDS",
)


@dataclass(frozen=True)
class TimeoutConfig:
    """Container for normalized timeout values (seconds).

    Attributes:
        http_timeout_seconds: Per-request timeout for regular REST calls.
        connect_timeout_seconds: Connection establishment timeout, shared by
            REST calls and the status stream.
        stream_idle_timeout_seconds: Optional maximum wait for the next status
            event. ``None`` disables the idle deadline.
    """

    http_timeout_seconds: float = DEFAULT_HTTP_TIMEOUT_SECONDS
    connect_timeout_seconds: float = DEFAULT_CONNECT_TIMEOUT_SECONDS
    stream_idle_timeout_seconds: float | None = None


_CACHED: TimeoutConfig | None = None
_ENV_GUARD: str | None = None


def _parse_env_float(name: str, default: float | None) -> float | None:
    """Parse an environment variable as a positive float, else ``default``."""
    raw = os.getenv(name)
    if not raw:
        return default
    try:
        val = float(raw)
    except ValueError:
        return default
    return val if val > 0 else default


def get_timeout_config() -> TimeoutConfig:
    """Return the process-cached `TimeoutConfig` instance."""
    global _CACHED, _ENV_GUARD  # noqa: PLW0603 - documented module cache
    guard = "/".join(os.getenv(name, "") for name in _ENV_VARS)
    if _CACHED is not None and _ENV_GUARD == guard:
        return _CACHED
    _CACHED = TimeoutConfig(
        http_timeout_seconds=float(
            _parse_env_float("WATERCRAWL_TIMEOUT_HTTP_SECONDS", DEFAULT_HTTP_TIMEOUT_SECONDS)
        ),
        connect_timeout_seconds=float(
            _parse_env_float("WATERCRAWL_TIMEOUT_CONNECT_SECONDS", DEFAULT_CONNECT_TIMEOUT_SECONDS)
        ),
        stream_idle_timeout_seconds=_parse_env_float("WATERCRAWL_TIMEOUT_STREAM_IDLE_SECONDS", None),
    )
    _ENV_GUARD = guard
    return _CACHED


def http_timeout(cfg: TimeoutConfig | None = None) -> httpx.Timeout:
    """``httpx.Timeout`` for regular request/response calls."""
    cfg = cfg or get_timeout_config()
    return httpx.Timeout(cfg.http_timeout_seconds, connect=cfg.connect_timeout_seconds)


def stream_timeout(cfg: TimeoutConfig | None = None) -> httpx.Timeout:
    """``httpx.Timeout`` for the long-lived status stream (no read timeout)."""
    cfg = cfg or get_timeout_config()
    return httpx.Timeout(cfg.http_timeout_seconds, connect=cfg.connect_timeout_seconds, read=None)


__all__ = [
    "TimeoutConfig",
    "get_timeout_config",
    "http_timeout",
    "stream_timeout",
]
