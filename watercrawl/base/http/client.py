"""HTTP client construction for the API layer.

Purpose:
    Build the ``httpx.AsyncClient`` shared by every request a
    ``BaseAPIClient`` makes (REST calls and the status stream) and the
    authentication headers sent with API requests. Timeouts derive
    exclusively from :mod:`watercrawl.base.timeouts`.

External dependencies:
    - ``httpx`` for the underlying asynchronous HTTP client.

Lifecycle & cleanup:
    - A client created here is owned by the ``BaseAPIClient`` that asked for
      it and is closed by ``BaseAPIClient.aclose()``. Async clients are bound
      to the event loop they are used on, so they are not pooled process-wide.
    - Callers may inject their own ``httpx.AsyncClient`` (or a transport, e.g.
      ``httpx.MockTransport`` in tests); injected clients are never closed by
      the library.
"""

from __future__ import annotations

from typing import Dict, Optional

import httpx

from ...config.defaults import WATERCRAWL_USER_AGENT
from ..timeouts import http_timeout

API_KEY_HEADER = "X-API-Key"  # pragma: allowlist secret - header name, not a secret


def build_headers(api_key: str) -> Dict[str, str]:
    """Return the headers sent with every authenticated API request."""
    return {
        API_KEY_HEADER: api_key,
        "Accept": "application/json",
        "User-Agent": WATERCRAWL_USER_AGENT,
    }


def create_async_client(
    *,
    transport: Optional[httpx.AsyncBaseTransport] = None,
    timeout: Optional[httpx.Timeout] = None,
) -> httpx.AsyncClient:
    """Create an ``httpx.AsyncClient`` configured with library defaults.

    Parameters:
        transport: Optional transport override (``httpx.MockTransport`` in tests).
        timeout: Request timeout; defaults to :func:`http_timeout`.
    """
    return httpx.AsyncClient(
        timeout=timeout or http_timeout(),
        transport=transport,
        follow_redirects=True,
    )


__all__ = ["API_KEY_HEADER", "build_headers", "create_async_client"]
