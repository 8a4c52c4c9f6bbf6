"""
Retry utilities with exception-aware handling.

Uses the exception hierarchy to make retry decisions:
- Transient errors: retry after the configured interval
- Auth errors: fail immediately (a bad ticket does not heal itself)
- Permanent errors: fail immediately (no retry)
"""

import logging
import random
import time
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, TypeVar

from core.errors.exceptions import PipelineError, wrap_exception

logger = logging.getLogger(__name__)

T = TypeVar("T")


def _log_retry_failure(
    log: logging.Logger,
    operation: str,
    wrapped: PipelineError,
    config: "RetryConfig",
) -> None:
    """Log permanent-error or max-retries-exhausted."""
    extra = {
        "operation": operation,
        "error_type": type(wrapped).__name__,
        "error_category": wrapped.category.value,
        "error_message": str(wrapped)[:200],
    }
    if not wrapped.is_retryable:
        log.debug("Non-retryable error for %s: %s", operation, str(wrapped)[:200], extra=extra)
        return

    extra["max_attempts"] = config.max_attempts
    log.error("Max retries exhausted for %s: %s", operation, str(wrapped)[:200], extra=extra)


@dataclass
class RetryConfig:
    """Configuration for retry behavior."""

    max_attempts: int = 2
    base_delay: float = 1.0
    max_delay: float = 30.0
    exponential_base: float = 1.0

    # Equal jitter on top of the computed delay
    jitter: bool = False

    def __post_init__(self):
        """Ensure proper types from YAML/env vars."""
        self.max_attempts = int(self.max_attempts)
        self.base_delay = float(self.base_delay)
        self.max_delay = float(self.max_delay)
        self.exponential_base = float(self.exponential_base)
        # bool('false') would be True, so only coerce non-bools
        self.jitter = self.jitter if isinstance(self.jitter, bool) else bool(self.jitter)

        if self.max_attempts < 1:
            raise ValueError(f"max_attempts must be >= 1, got {self.max_attempts}")
        if self.base_delay < 0:
            raise ValueError(f"base_delay must be >= 0, got {self.base_delay}")

    @classmethod
    def fixed_interval(cls, retry_times: int, retry_interval: float) -> "RetryConfig":
        """
        Build a policy of retry_times extra attempts, retry_interval apart.

        Args:
            retry_times: Number of retries after the first attempt
            retry_interval: Seconds to wait between attempts
        """
        retry_interval = float(retry_interval)
        return cls(
            max_attempts=int(retry_times) + 1,
            base_delay=retry_interval,
            max_delay=max(retry_interval, 0.0),
            exponential_base=1.0,
            jitter=False,
        )

    def get_delay(self, attempt: int) -> float:
        """
        Calculate delay before the next attempt.

        Args:
            attempt: 0-indexed attempt number that just failed

        Returns:
            Delay in seconds
        """
        base_delay = self.base_delay * (self.exponential_base**attempt)

        if self.jitter:
            # Equal jitter: half fixed, half random
            base_delay = (base_delay / 2) + random.uniform(0, base_delay / 2)

        return min(base_delay, self.max_delay)

    def should_retry(self, error: Exception, attempt: int) -> bool:
        """
        Determine if error should be retried.

        Args:
            error: The exception that occurred
            attempt: 0-indexed current attempt

        Returns:
            True if should retry
        """
        if attempt >= self.max_attempts - 1:
            return False

        wrapped = error if isinstance(error, PipelineError) else wrap_exception(error)
        return wrapped.is_retryable


# Single attempt, used when retry_known_errors is disabled
NO_RETRY = RetryConfig(max_attempts=1, base_delay=0.0)


def retry_call(
    func: Callable[..., T],
    *args: Any,
    config: RetryConfig = NO_RETRY,
    operation: str | None = None,
    log: logging.Logger | None = None,
    sleep: Callable[[float], None] | None = None,
    **kwargs: Any,
) -> T:
    """
    Call func, retrying retryable failures according to config.

    Non-PipelineError exceptions are wrapped through wrap_exception so the
    caller always sees a classified error; the original is chained.

    Args:
        func: Callable to invoke
        config: Retry policy (defaults to a single attempt)
        operation: Name used in log records (defaults to func.__name__)
        log: Logger for retry diagnostics (defaults to this module's logger)
        sleep: Sleep function (defaults to time.sleep)

    Raises:
        PipelineError: The last classified error once retries are exhausted
            or a non-retryable error occurred
    """
    log = log or logger
    sleep = sleep or time.sleep
    operation = operation or getattr(func, "__name__", "operation")

    for attempt in range(config.max_attempts):
        try:
            result = func(*args, **kwargs)
        except Exception as e:
            wrapped = e if isinstance(e, PipelineError) else wrap_exception(e)

            if not config.should_retry(wrapped, attempt):
                _log_retry_failure(log, operation, wrapped, config)
                if wrapped is e:
                    raise
                raise wrapped from e

            delay = config.get_delay(attempt)
            log.warning(
                "Retryable error for %s, will retry",
                operation,
                extra={
                    "operation": operation,
                    "attempt": attempt + 1,
                    "max_attempts": config.max_attempts,
                    "error_category": wrapped.category.value,
                    "delay_seconds": round(delay, 2),
                    "error_message": str(wrapped)[:200],
                },
            )

            sleep(delay)
            continue

        if attempt > 0:
            log.info(
                "Retry succeeded for %s after %d attempts",
                operation,
                attempt + 1,
                extra={
                    "operation": operation,
                    "attempt": attempt + 1,
                    "total_attempts": config.max_attempts,
                },
            )
        return result

    # Unreachable: the final attempt either returns or raises
    raise RuntimeError(f"retry loop for {operation} exited without result")


__all__ = [
    "RetryConfig",
    "NO_RETRY",
    "retry_call",
]
