"""Execution infrastructure for retried side effects.

- RetryConfig / backoff_delay_ms: exponential backoff with symmetric jitter
- RetryPolicy: bounded retry executor with a non-retryable classifier
"""

from formrelay.execution.backoff import RetryConfig, backoff_delay_ms, capped_delay_ms
from formrelay.execution.retry_policy import (
    NON_RETRYABLE_STATUS_CODES,
    RetryPolicy,
    RetryResult,
    is_non_retryable_error,
    with_retry,
)

__all__ = [
    "NON_RETRYABLE_STATUS_CODES",
    "RetryConfig",
    "RetryPolicy",
    "RetryResult",
    "backoff_delay_ms",
    "capped_delay_ms",
    "is_non_retryable_error",
    "with_retry",
]
