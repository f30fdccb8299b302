"""HTTP utilities package.

Exposes async client construction, auth headers, and SSE framing.
"""

from .client import API_KEY_HEADER, build_headers, create_async_client
from .sse import iter_sse_data

__all__ = ["API_KEY_HEADER", "build_headers", "create_async_client", "iter_sse_data"]
