"""Retry policy with exponential backoff and jitter.

Wraps an async operation with bounded retries:
- Exponential backoff (see ``formrelay.execution.backoff``)
- Symmetric jitter to spread retries of concurrent callers
- Short-circuit on errors classified as non-retryable

Usage:
    policy = RetryPolicy()

    async def send():
        return await email_service.send_email(message)

    receipt = await policy.execute_with_retry(send, operation_name="confirmation")
"""

import asyncio
import random
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, TypeVar

import structlog

from formrelay.execution.backoff import RetryConfig, UniformSource, backoff_delay_ms
from formrelay.utils.exceptions import ExternalServiceError

logger = structlog.get_logger()

T = TypeVar("T")

# Client-side failures that will not change on a second attempt
NON_RETRYABLE_STATUS_CODES = frozenset({400, 401, 403, 404})

ErrorClassifier = Callable[[Exception], bool]
Sleeper = Callable[[float], Awaitable[Any]]


def is_non_retryable_error(error: Exception) -> bool:
    """Default classifier.

    Only external service errors tagged with a 400/401/403/404 upstream status
    are permanent. Transport errors, timeouts and anything unclassified are
    retried.
    """
    if isinstance(error, ExternalServiceError):
        return error.upstream_status in NON_RETRYABLE_STATUS_CODES
    return False


@dataclass
class RetryResult:
    """Result of a retry operation."""

    success: bool
    value: Any = None
    error: Exception | None = None
    attempts: int = 0
    total_delay_ms: int = 0
    non_retryable: bool = False


class RetryPolicy:
    """Bounded retry executor.

    Example:
        policy = RetryPolicy(RetryConfig(max_attempts=5, initial_delay_ms=500))

        result = await policy.execute(operation)
        if not result.success:
            print(f"Failed after {result.attempts} attempts: {result.error}")
    """

    def __init__(
        self,
        config: RetryConfig | None = None,
        uniform: UniformSource = random.uniform,
        sleep: Sleeper = asyncio.sleep,
    ):
        """Initialize retry policy.

        Args:
            config: Retry configuration. Defaults to ``RetryConfig.from_env()``.
            uniform: Random source for jitter.
            sleep: Coroutine used to wait between attempts (seconds).
        """
        self.config = config or RetryConfig.from_env()
        self._uniform = uniform
        self._sleep = sleep
        self.logger = logger.bind(service="retry_policy")

    async def execute(
        self,
        operation: Callable[[], Awaitable[T]],
        is_non_retryable: ErrorClassifier | None = None,
        max_attempts: int | None = None,
        operation_name: str = "operation",
        context: dict[str, Any] | None = None,
    ) -> RetryResult:
        """Run an operation with retry logic.

        Args:
            operation: Zero-argument coroutine function.
            is_non_retryable: Error classifier. Defaults to ``is_non_retryable_error``.
            max_attempts: Per-call override of ``config.max_attempts``.
            operation_name: Label used in log lines.
            context: Extra key-values for log lines.

        Returns:
            RetryResult with the outcome. Never raises for operation errors.
        """
        classify = is_non_retryable or is_non_retryable_error
        if max_attempts is None:
            max_attempts = self.config.max_attempts
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        log = self.logger.bind(operation=operation_name, **(context or {}))

        total_delay_ms = 0
        last_error: Exception | None = None

        for attempt in range(1, max_attempts + 1):
            try:
                value = await operation()
            except Exception as e:
                last_error = e

                if classify(e):
                    log.error(
                        "Operation failed with non-retryable error",
                        error=str(e),
                        error_type=type(e).__name__,
                        attempt=attempt,
                    )
                    return RetryResult(
                        success=False,
                        error=e,
                        attempts=attempt,
                        total_delay_ms=total_delay_ms,
                        non_retryable=True,
                    )

                if attempt == max_attempts:
                    break

                delay_ms = backoff_delay_ms(attempt, self.config, self._uniform)
                total_delay_ms += delay_ms

                log.warning(
                    "Operation failed, retrying",
                    error=str(e),
                    error_type=type(e).__name__,
                    attempt=attempt,
                    max_attempts=max_attempts,
                    next_delay_ms=delay_ms,
                )

                await self._sleep(delay_ms / 1000)
                continue

            if attempt > 1:
                log.info(
                    "Operation succeeded after retry",
                    attempt=attempt,
                    total_delay_ms=total_delay_ms,
                )

            return RetryResult(
                success=True,
                value=value,
                attempts=attempt,
                total_delay_ms=total_delay_ms,
            )

        log.error(
            "Operation failed after max attempts",
            error=str(last_error),
            error_type=type(last_error).__name__,
            attempts=max_attempts,
            total_delay_ms=total_delay_ms,
        )

        return RetryResult(
            success=False,
            error=last_error,
            attempts=max_attempts,
            total_delay_ms=total_delay_ms,
        )

    async def execute_with_retry(
        self,
        operation: Callable[[], Awaitable[T]],
        is_non_retryable: ErrorClassifier | None = None,
        max_attempts: int | None = None,
        operation_name: str = "operation",
        context: dict[str, Any] | None = None,
    ) -> T:
        """Run an operation with retry logic, raising on failure.

        Returns:
            The operation's result.

        Raises:
            Exception: The non-retryable error, or the last error once all
                attempts are exhausted.
        """
        result = await self.execute(
            operation,
            is_non_retryable=is_non_retryable,
            max_attempts=max_attempts,
            operation_name=operation_name,
            context=context,
        )

        if result.success:
            return result.value

        raise result.error


async def with_retry(
    operation: Callable[[], Awaitable[T]],
    config: RetryConfig | None = None,
    operation_name: str = "operation",
) -> T:
    """Execute an operation with retry logic.

    Convenience function for one-off retries.
    """
    policy = RetryPolicy(config)
    return await policy.execute_with_retry(operation, operation_name=operation_name)
