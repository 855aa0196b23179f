"""
Enumeration types for the NRD classification engine.

These enums provide type-safe constants for confidence tiers, age sources,
error codes, and log levels throughout the engine.
"""

from enum import Enum


class Confidence(Enum):
    """Confidence tier of an NRD classification."""

    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class AgeSource(Enum):
    """Where a domain-age answer came from."""

    CACHE = "cache"
    LIVE = "live"
    UNAVAILABLE = "unavailable"


class LogLevel(Enum):
    """Logging severity levels."""

    DEBUG = "debug"
    INFO = "info"
    WARN = "warn"
    ERROR = "error"


class InvalidDomainCode(Enum):
    """Error codes for label extraction failures."""

    EMPTY_INPUT = "empty_input"
    TOO_FEW_LABELS = "too_few_labels"
    EMPTY_LABEL = "empty_label"


class LookupErrorCode(Enum):
    """Error codes reported by the domain-age lookup service."""

    NOT_REGISTERED = "not_registered"
    NO_REGISTRATION_DATE = "no_registration_date"
    TIMEOUT = "timeout"
    SERVICE_ERROR = "service_error"
    RATE_LIMITED = "rate_limited"
