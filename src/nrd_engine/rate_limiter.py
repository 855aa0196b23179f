"""
Rate Limiter for calls to the external domain-age lookup service.

Tracks outgoing requests within a sliding window and hands out start slots
that respect both the request quota and a minimum spacing between calls.
Slots are reserved synchronously, so no lock is ever held across the
lookup itself and lookups for different domains still overlap.
"""

import time
from dataclasses import dataclass
from typing import Callable, Optional

from .config import RateLimitRule


@dataclass
class RateLimitStatus:
    """Result of a slot reservation."""

    allowed: bool
    wait_seconds: float
    reason: Optional[str] = None


class RateLimiter:
    """Sliding-window limiter with minimum spacing between requests."""

    def __init__(
        self,
        rule: RateLimitRule,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        """
        Initialize the rate limiter.

        Args:
            rule: Quota for the lookup service
            clock: Monotonic time source in seconds
        """
        self._rule = rule
        self._clock = clock
        # Start times of reserved requests, possibly in the future
        self._request_times: list[float] = []

    @property
    def rule(self) -> RateLimitRule:
        return self._rule

    def reserve(self) -> RateLimitStatus:
        """
        Reserve the next request slot.

        The slot is recorded immediately; the caller must wait
        status.wait_seconds before starting the request.

        Returns:
            RateLimitStatus with allowed=True when the request may start now
        """
        current_time = self._clock()
        wait_seconds, reason = self._calculate_wait_time(current_time)
        self._request_times.append(current_time + wait_seconds)

        if wait_seconds > 0:
            return RateLimitStatus(
                allowed=False,
                wait_seconds=wait_seconds,
                reason=reason,
            )
        return RateLimitStatus(allowed=True, wait_seconds=0.0)

    def _calculate_wait_time(self, current_time: float) -> tuple[float, Optional[str]]:
        """
        Calculate how long a request starting now must wait.

        Returns:
            Tuple of (wait_seconds, reason)
        """
        rule = self._rule

        # Drop slots that have left the window
        window_start = current_time - rule.window_seconds
        self._request_times = [t for t in self._request_times if t > window_start]

        wait = 0.0
        reason = None

        if len(self._request_times) >= rule.max_requests:
            # The slot frees when the request max_requests back leaves the window
            blocking = sorted(self._request_times)[-rule.max_requests]
            quota_wait = blocking + rule.window_seconds - current_time
            if quota_wait > wait:
                wait = quota_wait
                reason = (
                    f"Rate limit reached: {len(self._request_times)}/{rule.max_requests} "
                    f"in {rule.window_seconds}s"
                )

        if rule.min_delay_seconds > 0 and self._request_times:
            spacing_wait = max(self._request_times) + rule.min_delay_seconds - current_time
            if spacing_wait > wait:
                wait = spacing_wait
                reason = "Minimum delay between lookups"

        return max(0.0, wait), reason

    def pending_requests(self) -> int:
        """Number of requests counted against the current window."""
        current_time = self._clock()
        window_start = current_time - self._rule.window_seconds
        return sum(1 for t in self._request_times if t > window_start)
