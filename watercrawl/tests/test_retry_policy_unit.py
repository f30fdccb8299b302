"""Unit tests for the async retry decorator."""

from __future__ import annotations

import pytest

from watercrawl.base.errors import ErrorCode, WaterCrawlError
from watercrawl.base.resilience import NO_RETRY, RetryConfig, retry


class _Flaky:
    def __init__(self, failures: int, code: ErrorCode = ErrorCode.TRANSIENT) -> None:
        self.failures = failures
        self.code = code
        self.calls = 0

    async def __call__(self) -> str:
        self.calls += 1
        if self.calls <= self.failures:
            raise WaterCrawlError(code=self.code, message=f"attempt {self.calls}")
        return "ok"


@pytest.mark.asyncio
async def test_retries_retryable_errors_with_backoff(no_backoff):
    flaky = _Flaky(failures=2)
    result = await retry(RetryConfig(max_attempts=3, delay_base=2.0))(flaky)()
    assert result == "ok"  # nosec B101 - test assertion
    assert flaky.calls == 3  # nosec B101 - test assertion
    assert no_backoff == [1.0, 2.0]  # nosec B101 - test assertion


@pytest.mark.asyncio
async def test_gives_up_after_max_attempts(no_backoff):
    flaky = _Flaky(failures=5)
    with pytest.raises(WaterCrawlError) as info:
        await retry(RetryConfig(max_attempts=2))(flaky)()
    assert flaky.calls == 2  # nosec B101 - test assertion
    assert info.value.message == "attempt 2"  # nosec B101 - test assertion


@pytest.mark.asyncio
async def test_non_retryable_codes_fail_immediately(no_backoff):
    flaky = _Flaky(failures=1, code=ErrorCode.AUTH)
    with pytest.raises(WaterCrawlError):
        await retry(RetryConfig(max_attempts=3))(flaky)()
    assert flaky.calls == 1  # nosec B101 - test assertion
    assert no_backoff == []  # nosec B101 - test assertion


@pytest.mark.asyncio
async def test_no_retry_policy_attempts_once(no_backoff):
    flaky = _Flaky(failures=1)
    with pytest.raises(WaterCrawlError):
        await retry(NO_RETRY)(flaky)()
    assert flaky.calls == 1  # nosec B101 - test assertion


@pytest.mark.asyncio
async def test_attempt_logger_sees_every_attempt(no_backoff):
    seen = []

    def _log(*, attempt, max_attempts, delay, error):
        seen.append((attempt, delay, error.code if error else None))

    flaky = _Flaky(failures=1)
    await retry(RetryConfig(max_attempts=3, attempt_logger=_log))(flaky)()
    assert seen == [(0, 1.0, ErrorCode.TRANSIENT), (1, None, None)]  # nosec B101 - test assertion


def test_from_mapping_reads_config_section():
    cfg = RetryConfig.from_mapping({"max_attempts": "5", "delay_base": 1.5})
    assert cfg.max_attempts == 5  # nosec B101 - test assertion
    assert cfg.delay_base == 1.5  # nosec B101 - test assertion
    assert RetryConfig.from_mapping({"max_attempts": 0}).max_attempts == 1  # nosec B101 - test assertion
    assert RetryConfig.from_mapping(None).max_attempts == 3  # nosec B101 - test assertion
