"""
NRD Engine - domain suspicion and newly-registered-domain classification.

This package scores domain names for lexical traits of malicious or
auto-generated infrastructure and combines that score with the domain's
registration age, looked up through an injected, rate-limited service
behind a deduplicating cache.
"""

__version__ = "0.1.0"
__author__ = "NRD Engine Team"

from nrd_engine.exceptions import (
    NrdEngineError,
    InvalidDomain,
    LookupUnavailable,
    ConfigurationError,
)
from nrd_engine.enums import (
    AgeSource,
    Confidence,
    InvalidDomainCode,
    LogLevel,
    LookupErrorCode,
)
from nrd_engine.config import (
    DEFAULT_REPUTATION_TLDS,
    Configuration,
    LoggingConfig,
    RateLimitRule,
    RetryConfig,
    load_configuration_from_env,
)
from nrd_engine.models import (
    AgeLookupResult,
    ClassificationResult,
    DDNSInfo,
    DomainLabels,
    RegistrationRecord,
    SuspicionScore,
)
from nrd_engine.label_extractor import (
    canonical_lookup_key,
    extract_labels,
)
from nrd_engine.suspicion_scorer import (
    entropy,
    has_excessive_digits,
    has_excessive_hyphens,
    is_high_risk,
    is_random_looking,
    score,
)
from nrd_engine.ddns import (
    DDNS_PROVIDERS,
    check_ddns,
    get_ddns_provider_names,
)
from nrd_engine.audit_logger import (
    AuditLogger,
    LogEntry,
)
from nrd_engine.retry_manager import (
    RetryManager,
    RetryResult,
)
from nrd_engine.rate_limiter import (
    RateLimiter,
    RateLimitStatus,
)
from nrd_engine.age_resolver import (
    AgeCache,
    AgeLookupService,
    DomainAgeResolver,
    compute_age_days,
)
from nrd_engine.classifier import (
    NrdClassifier,
)

__all__ = [
    # Exceptions
    "NrdEngineError",
    "InvalidDomain",
    "LookupUnavailable",
    "ConfigurationError",
    # Enums
    "AgeSource",
    "Confidence",
    "InvalidDomainCode",
    "LogLevel",
    "LookupErrorCode",
    # Configuration
    "DEFAULT_REPUTATION_TLDS",
    "Configuration",
    "LoggingConfig",
    "RateLimitRule",
    "RetryConfig",
    "load_configuration_from_env",
    # Models
    "AgeLookupResult",
    "ClassificationResult",
    "DDNSInfo",
    "DomainLabels",
    "RegistrationRecord",
    "SuspicionScore",
    # Lexical Feature Extractor
    "canonical_lookup_key",
    "extract_labels",
    # Suspicion Scorer
    "entropy",
    "has_excessive_digits",
    "has_excessive_hyphens",
    "is_high_risk",
    "is_random_looking",
    "score",
    # DDNS
    "DDNS_PROVIDERS",
    "check_ddns",
    "get_ddns_provider_names",
    # Audit Logger
    "AuditLogger",
    "LogEntry",
    # Retry Manager
    "RetryManager",
    "RetryResult",
    # Rate Limiter
    "RateLimiter",
    "RateLimitStatus",
    # Domain-Age Resolver
    "AgeCache",
    "AgeLookupService",
    "DomainAgeResolver",
    "compute_age_days",
    # Classifier
    "NrdClassifier",
]
