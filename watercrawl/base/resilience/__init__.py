"""Resilience helpers (retry policy) for the HTTP layer."""

from .retry import DEFAULT_RETRY_CONFIG, NO_RETRY, RetryConfig, retry

__all__ = ["DEFAULT_RETRY_CONFIG", "NO_RETRY", "RetryConfig", "retry"]
