"""Base API client: authentication, request plumbing, and error mapping.

Purpose:
    Turn ``get``/``post``/``delete`` calls into HTTP requests against the
    configured base URL, decode JSON responses, and map every failure to a
    ``WaterCrawlError`` with a normalized code. Also opens the status stream
    as an ``HttpEventSource``.

Configuration:
    ``api_key`` and ``base_url`` come from :func:`get_client_config`
    (defaults, config file, environment, explicit arguments). A missing key
    fails at construction with ``ErrorCode.AUTH``.

Retries:
    Idempotent requests (GET, DELETE) use the ``retry`` section of the
    config; POST is attempted once. The status stream is never retried.
"""
from __future__ import annotations

import logging
import time
from typing import Any, Dict, Mapping, Optional

import httpx

from ..config import get_client_config
from .errors import ErrorCode, WaterCrawlError, to_watercrawl_error
from .http import build_headers, create_async_client
from .logging import LogContext, get_logger, normalized_log_event
from .resilience import NO_RETRY, RetryConfig, retry
from .streaming import HttpEventSource
from .timeouts import TimeoutConfig, get_timeout_config, http_timeout, stream_timeout

_IDEMPOTENT_METHODS = frozenset({"GET", "HEAD", "DELETE"})


def _error_detail(exc: httpx.HTTPStatusError) -> str:
    """Best-effort human message from an error response body."""
    response = exc.response
    try:
        body = response.json()
    except ValueError:
        body = None
    if isinstance(body, dict):
        for key in ("detail", "message", "error"):
            if isinstance(body.get(key), str):
                return body[key]
    text = response.text.strip()
    return text[:300] if text else f"HTTP {response.status_code}"


class BaseAPIClient:
    """Async HTTP plumbing shared by the resource-specific client."""

    def __init__(
        self,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        *,
        http_client: Optional[httpx.AsyncClient] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        retry_config: Optional[RetryConfig] = None,
        timeout_config: Optional[TimeoutConfig] = None,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        """Initialize the client with configuration overrides.

        Parameters
        ----------
        api_key:
            API key sent as ``X-API-Key``. Falls back to ``WATERCRAWL_API_KEY``
            or the config file.
        base_url:
            Service root, e.g. ``https://app.watercrawl.dev``.
        http_client:
            Externally managed ``httpx.AsyncClient``; not closed by ``aclose()``.
        transport:
            Transport for the internally created client (tests use
            ``httpx.MockTransport``). Ignored when ``http_client`` is given.
        retry_config:
            Explicit retry policy; otherwise built from the config ``retry``
            section with attempt logging.
        timeout_config:
            Explicit timeouts; otherwise :func:`get_timeout_config`.
        """
        cfg = get_client_config({"api_key": api_key, "base_url": base_url})
        key = cfg.get("api_key")
        if not isinstance(key, str) or not key.strip():
            raise WaterCrawlError(
                code=ErrorCode.AUTH,
                message="missing API key: pass api_key or set WATERCRAWL_API_KEY",
            )
        self.api_key = key.strip()
        self.base_url = str(cfg["base_url"]).rstrip("/")
        self._retry_settings: Dict[str, Any] = dict(cfg.get("retry") or {})
        self._retry_config = retry_config
        self._timeouts = timeout_config or get_timeout_config()
        self._logger = logger or get_logger("watercrawl.http")
        self._headers = build_headers(self.api_key)
        self._owns_client = http_client is None
        self._http = http_client or create_async_client(
            transport=transport,
            timeout=http_timeout(self._timeouts),
        )

    # Lifecycle ------------------------------------------------------------
    async def aclose(self) -> None:
        """Close the underlying HTTP client if this instance created it."""
        if self._owns_client:
            await self._http.aclose()

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()

    @property
    def timeouts(self) -> TimeoutConfig:
        return self._timeouts

    # Request helpers ------------------------------------------------------
    def _url(self, path: str) -> str:
        if path.startswith(("http://", "https://")):
            return path
        return f"{self.base_url}/{path.lstrip('/')}"

    def _build_retry_config(self, ctx: LogContext) -> RetryConfig:
        if self._retry_config is not None:
            return self._retry_config

        def _attempt_logger(*, attempt: int, max_attempts: int, delay, error: WaterCrawlError | None) -> None:
            if error is None and attempt == 0:
                return
            normalized_log_event(
                self._logger,
                "retry.attempt",
                ctx,
                phase="retry",
                attempt=attempt,
                max_attempts=max_attempts,
                delay=delay,
                error_code=(error.code.value if error else None),
                will_retry=bool(error and delay is not None),
            )

        return RetryConfig.from_mapping(self._retry_settings, attempt_logger=_attempt_logger)

    async def _request(
        self,
        method: str,
        path: str,
        *,
        params: Optional[Mapping[str, Any]] = None,
        json: Any = None,
        authenticated: bool = True,
        operation: Optional[str] = None,
    ) -> Any:
        """Send one request (with retries when idempotent) and decode JSON.

        Returns ``None`` for empty bodies (e.g. ``204 No Content``).
        """
        method = method.upper()
        query = {k: v for k, v in (params or {}).items() if v is not None}
        url = self._url(path)
        ctx = LogContext(operation=operation, method=method, path=path)
        headers = self._headers if authenticated else None

        async def _call() -> httpx.Response:
            try:
                response = await self._http.request(
                    method, url, params=query or None, json=json, headers=headers
                )
                response.raise_for_status()
            except httpx.HTTPStatusError as e:
                raise to_watercrawl_error(e, message=_error_detail(e)) from e
            except httpx.HTTPError as e:
                raise to_watercrawl_error(e) from e
            return response

        policy = self._build_retry_config(ctx) if method in _IDEMPOTENT_METHODS else NO_RETRY
        normalized_log_event(self._logger, "request.start", ctx, phase="start", level=logging.DEBUG)
        t0 = time.perf_counter()
        try:
            response = await retry(policy)(_call)()
        except WaterCrawlError as e:
            normalized_log_event(
                self._logger,
                "request.error",
                ctx,
                phase="finalize",
                level=logging.WARNING,
                error=e.message,
                error_code=e.code.value,
                http_status=e.status_code,
            )
            raise
        latency_ms = (time.perf_counter() - t0) * 1000.0
        normalized_log_event(
            self._logger,
            "request.end",
            ctx,
            phase="finalize",
            level=logging.DEBUG,
            http_status=response.status_code,
            latency_ms=round(latency_ms, 3),
        )
        return self._decode(response)

    @staticmethod
    def _decode(response: httpx.Response) -> Any:
        if response.status_code == 204 or not response.content:
            return None
        try:
            return response.json()
        except ValueError as e:
            raise WaterCrawlError(
                code=ErrorCode.DECODE,
                message=f"response from {response.request.url} is not valid JSON",
                status_code=response.status_code,
                raw=e,
            ) from e

    async def get(self, path: str, params: Optional[Mapping[str, Any]] = None, **kwargs: Any) -> Any:
        return await self._request("GET", path, params=params, **kwargs)

    async def post(self, path: str, data: Any = None, **kwargs: Any) -> Any:
        return await self._request("POST", path, json=data, **kwargs)

    async def delete(self, path: str, **kwargs: Any) -> Any:
        return await self._request("DELETE", path, **kwargs)

    def stream_events(
        self,
        path: str,
        params: Optional[Mapping[str, Any]] = None,
        *,
        ctx: Optional[LogContext] = None,
    ) -> HttpEventSource:
        """Return an unopened ``HttpEventSource`` for an SSE endpoint."""
        return HttpEventSource(
            self._http,
            self._url(path),
            params={k: v for k, v in (params or {}).items() if v is not None},
            headers=self._headers,
            timeout=stream_timeout(self._timeouts),
            ctx=ctx,
        )


__all__ = ["BaseAPIClient"]
