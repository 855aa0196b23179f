"""
Configuration dataclasses for the NRD classification engine.

This module defines the user-adjustable Configuration snapshot read by every
evaluation, plus the engine-side settings for retrying and throttling the
external age lookup and for logging.
"""

import os
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Iterable, Optional, Union

from dotenv import load_dotenv

from .exceptions import ConfigurationError


# TLDs statistically associated with abuse (free or near-free registration,
# lax registrar controls). Users may replace this set entirely.
DEFAULT_REPUTATION_TLDS = frozenset({
    "tk", "ml", "ga", "cf", "gq",
    "xyz", "top", "club", "work", "click", "link", "online", "site",
    "icu", "buzz", "rest", "fit", "loan", "win", "bid", "racing",
    "download", "stream", "gdn", "men", "review", "country", "kim",
    "science", "party", "date", "faith", "cricket", "accountant",
    "zip", "mov",
})

MIN_AGE_THRESHOLD_DAYS = 1
MAX_AGE_THRESHOLD_DAYS = 365
MIN_SUSPICION_THRESHOLD = 0
MAX_SUSPICION_THRESHOLD = 100


def _normalize_tlds(tlds: Iterable[str]) -> frozenset[str]:
    return frozenset(
        tld.strip().lstrip(".").lower()
        for tld in tlds
        if tld and tld.strip().lstrip(".")
    )


@dataclass(frozen=True)
class Configuration:
    """
    Immutable snapshot of the user-adjustable classification settings.

    The configuration provider owns persistence; the engine only reads one
    snapshot per evaluation. Out-of-range values raise ConfigurationError.
    """

    enable_age_lookup: bool = True
    age_threshold_days: int = 30
    suspicion_threshold: int = 60
    reputation_tlds: frozenset[str] = DEFAULT_REPUTATION_TLDS
    cache_ttl_ms: int = 86_400_000  # 24 hours
    negative_cache_ttl_ms: int = 300_000  # 5 minutes

    def __post_init__(self) -> None:
        object.__setattr__(self, "reputation_tlds", _normalize_tlds(self.reputation_tlds))
        self._validate()

    def _validate(self) -> None:
        if not MIN_AGE_THRESHOLD_DAYS <= self.age_threshold_days <= MAX_AGE_THRESHOLD_DAYS:
            raise ConfigurationError(
                code="age_threshold_out_of_range",
                message=(
                    f"age_threshold_days must be between {MIN_AGE_THRESHOLD_DAYS} "
                    f"and {MAX_AGE_THRESHOLD_DAYS}"
                ),
                details={"age_threshold_days": self.age_threshold_days},
            )
        if not MIN_SUSPICION_THRESHOLD <= self.suspicion_threshold <= MAX_SUSPICION_THRESHOLD:
            raise ConfigurationError(
                code="suspicion_threshold_out_of_range",
                message=(
                    f"suspicion_threshold must be between {MIN_SUSPICION_THRESHOLD} "
                    f"and {MAX_SUSPICION_THRESHOLD}"
                ),
                details={"suspicion_threshold": self.suspicion_threshold},
            )
        for name in ("cache_ttl_ms", "negative_cache_ttl_ms"):
            value = getattr(self, name)
            if value < 0:
                raise ConfigurationError(
                    code="negative_ttl",
                    message=f"{name} must not be negative",
                    details={name: value},
                )

    @property
    def effective_negative_ttl_ms(self) -> int:
        """Negative-cache TTL, never longer than the positive TTL."""
        return min(self.negative_cache_ttl_ms, self.cache_ttl_ms)

    def with_updates(self, **changes) -> "Configuration":
        """Return a new validated snapshot with the given fields replaced."""
        return replace(self, **changes)

    def to_dict(self) -> dict:
        """Serialize to a JSON-safe dictionary."""
        return {
            "enable_age_lookup": self.enable_age_lookup,
            "age_threshold_days": self.age_threshold_days,
            "suspicion_threshold": self.suspicion_threshold,
            "reputation_tlds": sorted(self.reputation_tlds),
            "cache_ttl_ms": self.cache_ttl_ms,
            "negative_cache_ttl_ms": self.negative_cache_ttl_ms,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Configuration":
        """
        Build a configuration from a dictionary, ignoring unknown keys.

        Missing keys fall back to the defaults.
        """
        known = {f.name for f in fields(cls)}
        kwargs = {key: value for key, value in data.items() if key in known}
        if "reputation_tlds" in kwargs:
            kwargs["reputation_tlds"] = frozenset(kwargs["reputation_tlds"])
        return cls(**kwargs)


@dataclass(frozen=True)
class RetryConfig:
    """Retry behavior for the external age lookup."""

    max_retries: int = 2
    base_delay_seconds: float = 0.5
    max_delay_seconds: float = 8.0


@dataclass(frozen=True)
class RateLimitRule:
    """Quota for calls to the external age lookup service."""

    max_requests: int
    window_seconds: float
    min_delay_seconds: float = 0.0


@dataclass(frozen=True)
class LoggingConfig:
    """Logging and audit configuration."""

    level: str = "info"
    audit_mode: bool = False
    audit_signing_key: Optional[str] = None
    output_format: str = "both"  # 'json', 'text', 'both'


def _int_env(name: str, default: int) -> int:
    try:
        return int(os.getenv(name, str(default)))
    except (TypeError, ValueError):
        return default


def _bool_env(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


def load_configuration_from_env(
    env_file: Optional[Union[str, Path]] = None,
) -> Configuration:
    """
    Build a Configuration from NRD_* environment variables.

    An optional .env file is loaded first without overriding variables that
    are already set. Unparsable numbers fall back to the defaults; values that
    parse but are out of range raise ConfigurationError.

    Recognized variables:
        NRD_ENABLE_AGE_LOOKUP, NRD_AGE_THRESHOLD_DAYS, NRD_SUSPICION_THRESHOLD,
        NRD_REPUTATION_TLDS (comma or whitespace separated), NRD_CACHE_TTL_MS,
        NRD_NEGATIVE_CACHE_TTL_MS
    """
    load_dotenv(dotenv_path=env_file, override=False)
    defaults = Configuration()

    raw_tlds = os.getenv("NRD_REPUTATION_TLDS")
    if raw_tlds is None:
        reputation_tlds = defaults.reputation_tlds
    else:
        reputation_tlds = frozenset(
            part
            for chunk in raw_tlds.replace(";", ",").split(",")
            for part in chunk.split()
        )

    return Configuration(
        enable_age_lookup=_bool_env("NRD_ENABLE_AGE_LOOKUP", defaults.enable_age_lookup),
        age_threshold_days=_int_env("NRD_AGE_THRESHOLD_DAYS", defaults.age_threshold_days),
        suspicion_threshold=_int_env("NRD_SUSPICION_THRESHOLD", defaults.suspicion_threshold),
        reputation_tlds=reputation_tlds,
        cache_ttl_ms=_int_env("NRD_CACHE_TTL_MS", defaults.cache_ttl_ms),
        negative_cache_ttl_ms=_int_env(
            "NRD_NEGATIVE_CACHE_TTL_MS", defaults.negative_cache_ttl_ms
        ),
    )
