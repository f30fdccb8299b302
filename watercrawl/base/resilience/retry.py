"""Retry policy for idempotent API requests.

Only ``WaterCrawlError`` failures whose code is listed in
``RetryConfig.retryable_codes`` are retried; everything else propagates on the
first attempt. The status stream is never retried here: a dropped stream is a
terminal failure surfaced to the consumer.
"""
from __future__ import annotations

import asyncio
import functools
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, Iterator, Optional, Protocol, TypeVar

from ..errors import RETRYABLE_CODES, ErrorCode, WaterCrawlError

T = TypeVar("T")

# Indirection so tests can skip real backoff delays.
_sleep = asyncio.sleep


class AttemptLogger(Protocol):  # pragma: no cover - structural protocol
    def __call__(
        self,
        *,
        attempt: int,
        max_attempts: int,
        delay: Optional[float],
        error: Optional[WaterCrawlError],
    ) -> None: ...


@dataclass(frozen=True)
class RetryConfig:
    """How often and how patiently to retry.

    Attempt ``n`` (0-based) that fails with a retryable code waits
    ``delay_base ** n`` seconds before the next one.
    """

    max_attempts: int = 3
    delay_base: float = 2.0
    retryable_codes: tuple[ErrorCode, ...] = RETRYABLE_CODES
    attempt_logger: Optional[AttemptLogger] = None

    def delays(self) -> Iterator[float]:
        """Backoff before each retry; one fewer entry than ``max_attempts``."""
        return (self.delay_base**n for n in range(self.max_attempts - 1))

    @classmethod
    def from_mapping(cls, raw: Optional[Dict[str, Any]], **kwargs: Any) -> "RetryConfig":
        """Build a config from the ``retry`` section of the client config."""
        raw = raw or {}
        return cls(
            max_attempts=max(1, int(raw.get("max_attempts", cls.max_attempts))),
            delay_base=float(raw.get("delay_base", cls.delay_base)),
            **kwargs,
        )


DEFAULT_RETRY_CONFIG = RetryConfig()
NO_RETRY = RetryConfig(max_attempts=1)


def retry(config: RetryConfig = DEFAULT_RETRY_CONFIG):
    """Decorate a coroutine function with ``config``'s retry policy.

    The attempt logger (if any) is called after every attempt: with the error
    and the upcoming delay on failure (``delay=None`` when giving up), and
    with ``error=None`` on success.
    """

    def notify(attempt: int, delay: Optional[float], error: Optional[WaterCrawlError]) -> None:
        if config.attempt_logger is not None:
            config.attempt_logger(
                attempt=attempt, max_attempts=config.max_attempts, delay=delay, error=error
            )

    def decorator(func: Callable[..., Awaitable[T]]) -> Callable[..., Awaitable[T]]:
        @functools.wraps(func)
        async def wrapper(*args, **kwargs) -> T:
            backoff = list(config.delays())
            attempt = 0
            while True:
                try:
                    result = await func(*args, **kwargs)
                except WaterCrawlError as e:
                    delay = backoff[attempt] if attempt < len(backoff) else None
                    if e.code not in config.retryable_codes:
                        delay = None
                    notify(attempt, delay, e)
                    if delay is None:
                        raise
                    await _sleep(delay)
                    attempt += 1
                    continue
                notify(attempt, None, None)
                return result

        return wrapper

    return decorator


__all__ = [
    "RetryConfig",
    "DEFAULT_RETRY_CONFIG",
    "NO_RETRY",
    "retry",
]
