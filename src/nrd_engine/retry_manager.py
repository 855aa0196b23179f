"""
Retry Manager for the external domain-age lookup.

Transient lookup failures are retried with exponential backoff. Final answers
("not registered", "no registration date") are returned after one attempt;
once retries are exhausted the resolver degrades to an unavailable age
instead of raising.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Awaitable, Callable, Generic, Optional, TypeVar

from .config import RetryConfig
from .enums import LookupErrorCode
from .exceptions import LookupUnavailable

T = TypeVar("T")


@dataclass
class RetryResult(Generic[T]):
    """Outcome of a retried lookup."""

    success: bool
    result: Optional[T]
    attempts: int
    last_error: Optional[Exception]


class RetryManager:
    """
    Runs a lookup until it succeeds, fails finally, or runs out of attempts.

    The wait before retry n (0-indexed) is base_delay * 2^n, never more than
    max_delay.
    """

    # Lookup outcomes that will not change on a retry
    FINAL_ERROR_CODES = {
        LookupErrorCode.NOT_REGISTERED.value,
        LookupErrorCode.NO_REGISTRATION_DATE.value,
    }

    def __init__(self, config: RetryConfig) -> None:
        self._config = config

    @property
    def config(self) -> RetryConfig:
        return self._config

    def _calculate_delay(self, attempt: int) -> float:
        """Seconds to wait after the given failed attempt (0-indexed)."""
        backoff = self._config.base_delay_seconds * (2 ** attempt)
        return min(backoff, self._config.max_delay_seconds)

    def is_retryable_lookup_error(self, error: Exception) -> bool:
        """
        Check if a lookup failure is transient and worth retrying.

        LookupUnavailable is retried unless its code is final. Any other
        exception (timeouts, connection failures) is treated as transient.
        """
        if isinstance(error, LookupUnavailable):
            return error.code not in self.FINAL_ERROR_CODES
        return True

    async def execute_with_retry(
        self,
        operation: Callable[[], Awaitable[T]],
        is_retryable: Optional[Callable[[Exception], bool]] = None,
    ) -> RetryResult[T]:
        """
        Await operation, retrying transient failures.

        Args:
            operation: Zero-argument coroutine factory performing one lookup
            is_retryable: Predicate deciding whether a failure is retried;
                is_retryable_lookup_error by default

        Returns:
            RetryResult with the value on success, or the last error

        Raises:
            asyncio.CancelledError: Cancellation is never treated as a failure
        """
        should_retry = is_retryable or self.is_retryable_lookup_error
        budget = 1 + self._config.max_retries
        error: Optional[Exception] = None

        for attempt in range(1, budget + 1):
            try:
                value = await operation()
            except asyncio.CancelledError:
                raise
            except Exception as e:
                error = e
                if attempt == budget or not should_retry(e):
                    return RetryResult(
                        success=False,
                        result=None,
                        attempts=attempt,
                        last_error=error,
                    )
                await asyncio.sleep(self._calculate_delay(attempt - 1))
            else:
                return RetryResult(
                    success=True,
                    result=value,
                    attempts=attempt,
                    last_error=None,
                )

        # Only reached when max_retries is negative
        return RetryResult(success=False, result=None, attempts=0, last_error=error)
