"""Pytest configuration for the watercrawl test suite.

Provides:
- environment isolation so a developer's ``WATERCRAWL_*`` variables, config
  file, or ``.env`` never leak into tests;
- ``FakeStreamSource``: a hand-driven ``StreamSource`` for bridge tests;
- ``api_client``: a factory building a client over ``httpx.MockTransport``;
- ``json_logs``: parse JSON log lines written to stderr.
"""

from __future__ import annotations

import importlib
import json
from typing import Any, Callable, Dict, Iterator, List, Optional

import httpx
import pytest

from watercrawl.base.streaming import CrawlEvent
from watercrawl.client import WaterCrawlAPIClient
from watercrawl.config import reset_config_cache

# The package re-exports the ``retry`` decorator under the submodule name.
retry_module = importlib.import_module("watercrawl.base.resilience.retry")

TEST_API_KEY = "wc-unit-key"  # pragma: allowlist secret - fake key for tests
TEST_BASE_URL = "https://api.watercrawl.test"


class FakeStreamSource:
    """StreamSource driven explicitly by the test.

    ``emit``/``complete``/``fail`` invoke the registered callbacks exactly as
    a real source would. ``close_calls`` counts ``close()`` invocations.
    """

    def __init__(self) -> None:
        self.on_event: Optional[Callable[[CrawlEvent], None]] = None
        self.on_complete: Optional[Callable[[Optional[BaseException]], None]] = None
        self.opened = False
        self.close_calls = 0
        self.wait_closed_calls = 0

    def open(self, on_event, on_complete) -> None:
        self.opened = True
        self.on_event = on_event
        self.on_complete = on_complete

    def close(self) -> None:
        self.close_calls += 1

    async def wait_closed(self) -> None:
        self.wait_closed_calls += 1

    def emit(self, kind: str, data: Any = None) -> CrawlEvent:
        event = CrawlEvent(kind=kind, data=data)  # type: ignore[arg-type]
        assert self.on_event is not None, "source not opened"  # nosec B101 - test harness
        self.on_event(event)
        return event

    def complete(self) -> None:
        assert self.on_complete is not None, "source not opened"  # nosec B101 - test harness
        self.on_complete(None)

    def fail(self, exc: BaseException) -> None:
        assert self.on_complete is not None, "source not opened"  # nosec B101 - test harness
        self.on_complete(exc)


@pytest.fixture(autouse=True)
def isolated_env(monkeypatch: pytest.MonkeyPatch, tmp_path) -> Iterator[None]:
    """Strip client env vars and point config/.env lookups at empty paths."""
    for name in (
        "WATERCRAWL_API_KEY",
        "WATERCRAWL_BASE_URL",
        "WATERCRAWL_API_URL",
        "WATERCRAWL_CONFIG_FILE",
        "WATERCRAWL_LOG_LEVEL",
        "WATERCRAWL_TIMEOUT_HTTP_SECONDS",
        "WATERCRAWL_TIMEOUT_CONNECT_SECONDS",
        "WATERCRAWL_TIMEOUT_STREAM_IDLE_SECONDS",
    ):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("DOTENV_FILE", str(tmp_path / "missing.env"))
    reset_config_cache()
    yield
    reset_config_cache()


@pytest.fixture()
def fake_source() -> FakeStreamSource:
    return FakeStreamSource()


@pytest.fixture()
def fake_source_factory() -> Callable[[], FakeStreamSource]:
    return FakeStreamSource


@pytest.fixture()
def no_backoff(monkeypatch: pytest.MonkeyPatch) -> List[float]:
    """Record retry delays instead of sleeping."""
    delays: List[float] = []

    async def _fake_sleep(delay: float) -> None:
        delays.append(delay)

    monkeypatch.setattr(retry_module, "_sleep", _fake_sleep)
    return delays


@pytest.fixture()
def api_client(no_backoff) -> Callable[..., WaterCrawlAPIClient]:
    """Factory: ``api_client(handler, **kwargs)`` -> client over MockTransport."""

    def _make(handler: Callable[[httpx.Request], httpx.Response], **kwargs: Any) -> WaterCrawlAPIClient:
        kwargs.setdefault("api_key", TEST_API_KEY)
        kwargs.setdefault("base_url", TEST_BASE_URL)
        return WaterCrawlAPIClient(transport=httpx.MockTransport(handler), **kwargs)

    return _make


@pytest.fixture()
def json_logs(capsys) -> Callable[[], List[Dict[str, Any]]]:
    """Return a reader parsing JSON log lines emitted on stderr so far."""

    def _read() -> List[Dict[str, Any]]:
        err = capsys.readouterr().err
        records = []
        for line in err.splitlines():
            line = line.strip()
            if line.startswith("{"):
                records.append(json.loads(line))
        return records

    return _read
