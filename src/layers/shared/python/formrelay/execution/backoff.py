"""Exponential backoff with symmetric jitter.

Delays are expressed in milliseconds. The exponent is the number of the
attempt that just failed, so with the defaults the first retry waits
2000ms +/- 25% and the cap of 30000ms is reached after the fifth failure.
"""

import os
import random
from dataclasses import dataclass
from typing import Callable

UniformSource = Callable[[float, float], float]


@dataclass(frozen=True)
class RetryConfig:
    """Immutable retry configuration."""

    max_attempts: int = 3
    initial_delay_ms: float = 1000.0
    max_delay_ms: float = 30000.0
    multiplier: float = 2.0
    jitter_fraction: float = 0.25

    def __post_init__(self) -> None:
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        if self.initial_delay_ms < 0 or self.max_delay_ms < 0:
            raise ValueError("delays must be non-negative")
        if self.multiplier < 1:
            raise ValueError("multiplier must be at least 1")
        if not 0 <= self.jitter_fraction <= 1:
            raise ValueError("jitter_fraction must be between 0 and 1")

    @classmethod
    def from_env(cls) -> "RetryConfig":
        """Build a config from MAX_RETRIES, INITIAL_DELAY_MS, MAX_DELAY_MS,
        BACKOFF_MULTIPLIER and JITTER_PERCENTAGE, falling back to defaults.
        """
        return cls(
            max_attempts=int(os.environ.get("MAX_RETRIES", cls.max_attempts)),
            initial_delay_ms=float(os.environ.get("INITIAL_DELAY_MS", cls.initial_delay_ms)),
            max_delay_ms=float(os.environ.get("MAX_DELAY_MS", cls.max_delay_ms)),
            multiplier=float(os.environ.get("BACKOFF_MULTIPLIER", cls.multiplier)),
            jitter_fraction=float(os.environ.get("JITTER_PERCENTAGE", cls.jitter_fraction)),
        )


def capped_delay_ms(attempt: int, config: RetryConfig) -> float:
    """Get the un-jittered delay after ``attempt`` failures.

    Args:
        attempt: Number of the attempt that just failed (1-indexed).
        config: Retry configuration.

    Returns:
        Delay in milliseconds, capped at ``config.max_delay_ms``.
    """
    if attempt < 1:
        raise ValueError("attempt is 1-indexed")
    base = config.initial_delay_ms * (config.multiplier ** attempt)
    return min(base, config.max_delay_ms)


def backoff_delay_ms(
    attempt: int,
    config: RetryConfig,
    uniform: UniformSource = random.uniform,
) -> int:
    """Calculate the delay before the next attempt.

    Args:
        attempt: Number of the attempt that just failed (1-indexed).
        config: Retry configuration.
        uniform: Random source called as ``uniform(-1, 1)``.

    Returns:
        Delay in whole milliseconds, never negative.
    """
    capped = capped_delay_ms(attempt, config)
    jitter = capped * config.jitter_fraction * uniform(-1, 1)
    return max(round(capped + jitter), 0)
