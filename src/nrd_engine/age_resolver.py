"""
Domain-Age Resolver client.

Wraps an injected, rate-limited domain-age lookup service with:
- an in-memory TTL cache keyed by the canonical ASCII domain
- at most one in-flight external lookup per domain; concurrent callers
  share its result
- retries with exponential backoff for transient failures
- a short negative cache for domains the service could not answer

A lookup failure is never raised to the caller: it degrades to an
AgeLookupResult with source=UNAVAILABLE and age_days=None.
"""

import asyncio
import time
from abc import abstractmethod
from dataclasses import dataclass, replace
from datetime import datetime, timezone
from typing import Callable, Optional, Protocol, runtime_checkable

from .audit_logger import AuditLogger
from .config import Configuration, RetryConfig
from .enums import AgeSource, LogLevel, LookupErrorCode
from .exceptions import LookupUnavailable
from .label_extractor import canonical_lookup_key
from .models import AgeLookupResult, RegistrationRecord
from .rate_limiter import RateLimiter
from .retry_manager import RetryManager


SECONDS_PER_DAY = 86_400


@runtime_checkable
class AgeLookupService(Protocol):
    """Protocol for the external domain-age lookup (RDAP, WHOIS, a feed...)."""

    @abstractmethod
    async def lookup(self, domain: str) -> Optional[RegistrationRecord]:
        """
        Look up when a domain was registered.

        Args:
            domain: Canonical ASCII domain name

        Returns:
            RegistrationRecord, or None if no registration date is known

        Raises:
            LookupUnavailable: If the service cannot answer
        """
        ...


@dataclass
class _CacheEntry:
    result: AgeLookupResult
    expires_at: float


class AgeCache:
    """TTL cache of age lookup results, owned by one resolver."""

    def __init__(self, clock: Callable[[], float] = time.monotonic) -> None:
        self._clock = clock
        self._entries: dict[str, _CacheEntry] = {}

    def get(self, key: str) -> Optional[AgeLookupResult]:
        """Return the cached result, dropping it if it has expired."""
        entry = self._entries.get(key)
        if entry is None:
            return None
        if self._clock() >= entry.expires_at:
            del self._entries[key]
            return None
        return entry.result

    def put(self, key: str, result: AgeLookupResult, ttl_ms: int) -> None:
        """Store a result, first dropping every entry that has expired."""
        now = self._clock()
        self.prune(now)
        self._entries[key] = _CacheEntry(
            result=result,
            expires_at=now + ttl_ms / 1000.0,
        )

    def prune(self, now: Optional[float] = None) -> int:
        """
        Drop expired entries.

        Returns:
            Number of entries removed
        """
        if now is None:
            now = self._clock()
        expired = [key for key, entry in self._entries.items() if now >= entry.expires_at]
        for key in expired:
            del self._entries[key]
        return len(expired)

    def invalidate(self, key: str) -> None:
        self._entries.pop(key, None)

    def clear(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)


def _as_utc(moment: datetime) -> datetime:
    if moment.tzinfo is None:
        return moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(timezone.utc)


def compute_age_days(registered_at: datetime, now: datetime) -> int:
    """Whole days between registration and now, never negative."""
    elapsed = (_as_utc(now) - _as_utc(registered_at)).total_seconds()
    return max(0, int(elapsed // SECONDS_PER_DAY))


class DomainAgeResolver:
    """
    Cache-first, deduplicating client for the domain-age lookup service.

    Construct once per process and share it between classifications; the
    cache and the in-flight table are its only mutable state.
    """

    COMPONENT = "DomainAgeResolver"

    def __init__(
        self,
        service: AgeLookupService,
        cache: Optional[AgeCache] = None,
        retry_config: Optional[RetryConfig] = None,
        rate_limiter: Optional[RateLimiter] = None,
        logger: Optional[AuditLogger] = None,
        now: Optional[Callable[[], datetime]] = None,
    ) -> None:
        """
        Initialize the resolver.

        Args:
            service: External lookup implementation
            cache: Cache to use; a fresh AgeCache by default
            retry_config: Backoff settings for transient failures
            rate_limiter: Optional limiter spacing out calls to the service
            logger: Optional audit logger
            now: Wall-clock source for timestamps and age computation
        """
        self._service = service
        self._cache = cache if cache is not None else AgeCache()
        self._retry_manager = RetryManager(retry_config or RetryConfig())
        self._rate_limiter = rate_limiter
        self._logger = logger
        self._now = now or (lambda: datetime.now(timezone.utc))
        self._in_flight: dict[str, asyncio.Task] = {}

    async def resolve_age(self, domain: str, config: Configuration) -> AgeLookupResult:
        """
        Resolve the age of a domain, cache first.

        When config.enable_age_lookup is False the service is never consulted
        and an unavailable result is returned without suspending.

        Args:
            domain: Domain name in any case or script
            config: Configuration snapshot for this evaluation

        Returns:
            AgeLookupResult with source CACHE, LIVE or UNAVAILABLE
        """
        if not config.enable_age_lookup:
            return self.unavailable_result(domain)

        key = canonical_lookup_key(domain)

        cached = self._cache.get(key)
        if cached is not None:
            self._log(LogLevel.DEBUG, "Cache hit", {"domain": key})
            return self._from_cache(cached)

        task = self._in_flight.get(key)
        if task is None:
            task = asyncio.create_task(self._lookup_and_store(key, config))
            self._in_flight[key] = task
            task.add_done_callback(lambda done, key=key: self._release(key, done))
        else:
            self._log(LogLevel.DEBUG, "Joining in-flight lookup", {"domain": key})

        # A cancelled caller must not cancel the lookup other waiters share
        return await asyncio.shield(task)

    def unavailable_result(self, domain: str) -> AgeLookupResult:
        """Build the result used when age lookup is disabled."""
        return AgeLookupResult(
            domain=canonical_lookup_key(domain),
            registered_at=None,
            age_days=None,
            resolved_at=self._now(),
            source=AgeSource.UNAVAILABLE,
        )

    def clear_cache(self) -> None:
        """Drop every cached answer; in-flight lookups are unaffected."""
        self._cache.clear()

    @property
    def cache_size(self) -> int:
        return len(self._cache)

    @property
    def in_flight_count(self) -> int:
        return len(self._in_flight)

    def _from_cache(self, cached: AgeLookupResult) -> AgeLookupResult:
        if cached.registered_at is None:
            return cached
        return replace(
            cached,
            age_days=compute_age_days(cached.registered_at, self._now()),
            source=AgeSource.CACHE,
        )

    def _release(self, key: str, task: asyncio.Task) -> None:
        if self._in_flight.get(key) is task:
            del self._in_flight[key]
        if not task.cancelled() and task.exception() is not None:
            self._log_error("In-flight lookup crashed", task.exception(), {"domain": key})

    async def _wait_for_slot(self, key: str) -> None:
        if self._rate_limiter is None:
            return
        status = self._rate_limiter.reserve()
        if not status.allowed:
            self._log(
                LogLevel.INFO,
                f"Rate limit delay: {status.wait_seconds:.3f}s",
                {"domain": key, "reason": status.reason},
            )
            await asyncio.sleep(status.wait_seconds)

    async def _lookup_and_store(self, key: str, config: Configuration) -> AgeLookupResult:
        async def do_lookup() -> RegistrationRecord:
            await self._wait_for_slot(key)
            record = await self._service.lookup(key)
            if record is None:
                raise LookupUnavailable(
                    code=LookupErrorCode.NO_REGISTRATION_DATE.value,
                    message="Lookup service returned no registration date",
                    details={"domain": key},
                )
            return record

        self._log(LogLevel.DEBUG, "Starting external lookup", {"domain": key})
        outcome = await self._retry_manager.execute_with_retry(do_lookup)
        now = self._now()

        if outcome.success:
            registered_at = _as_utc(outcome.result.registered_at)
            result = AgeLookupResult(
                domain=key,
                registered_at=registered_at,
                age_days=compute_age_days(registered_at, now),
                resolved_at=now,
                source=AgeSource.LIVE,
            )
            self._cache.put(key, result, config.cache_ttl_ms)
            self._log(
                LogLevel.INFO,
                f"Resolved age for {key}: {result.age_days} days",
                {
                    "domain": key,
                    "age_days": result.age_days,
                    "attempts": outcome.attempts,
                },
            )
            return result

        result = AgeLookupResult(
            domain=key,
            registered_at=None,
            age_days=None,
            resolved_at=now,
            source=AgeSource.UNAVAILABLE,
        )
        self._cache.put(key, result, config.effective_negative_ttl_ms)
        self._log(
            LogLevel.WARN,
            f"Age lookup unavailable for {key}",
            {
                "domain": key,
                "attempts": outcome.attempts,
                "error_type": type(outcome.last_error).__name__,
                "error_message": str(outcome.last_error),
            },
        )
        return result

    def _log(self, level: LogLevel, message: str, data: dict) -> None:
        if self._logger:
            self._logger.log(level, self.COMPONENT, message, data)

    def _log_error(self, message: str, error: BaseException, data: dict) -> None:
        if self._logger:
            self._logger.log_error(self.COMPONENT, message, error, data)
