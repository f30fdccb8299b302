"""watercrawl.config.defaults
=========================

Central place for small, stable default values used across the client. These
defaults can be overridden via environment variables or an external config
file, but provide sensible fallbacks for local development and tests.

This module intentionally avoids importing from other client packages to
prevent circular dependencies. Only plain constants live here.
"""

from __future__ import annotations

# ---- API endpoint ----
WATERCRAWL_DEFAULT_BASE_URL = "https://app.watercrawl.dev"
WATERCRAWL_USER_AGENT = "watercrawl-python"

# Crawl request resources, relative to the base URL.
CRAWL_REQUESTS_PATH = "/api/v1/core/crawl-requests/"

# ---- Retry policy (idempotent requests only) ----
DEFAULT_RETRY_MAX_ATTEMPTS = 3
DEFAULT_RETRY_DELAY_BASE = 2.0

# ---- Timeouts (seconds) ----
DEFAULT_HTTP_TIMEOUT_SECONDS = 30.0
DEFAULT_CONNECT_TIMEOUT_SECONDS = 10.0


__all__ = [
    "WATERCRAWL_DEFAULT_BASE_URL",
    "WATERCRAWL_USER_AGENT",
    "CRAWL_REQUESTS_PATH",
    "DEFAULT_RETRY_MAX_ATTEMPTS",
    "DEFAULT_RETRY_DELAY_BASE",
    "DEFAULT_HTTP_TIMEOUT_SECONDS",
    "DEFAULT_CONNECT_TIMEOUT_SECONDS",
]
