"""
Data models for the NRD classification engine.

Every record is created fully populated in one pass and never mutated;
re-evaluating a domain produces new objects.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from .enums import AgeSource, Confidence


@dataclass(frozen=True)
class DomainLabels:
    """Lexical split of a domain under the single-label TLD model."""

    tld: str
    sld: str
    subdomain: Optional[str] = None
    is_idn: bool = False  # Any A-label or non-ASCII label present


@dataclass(frozen=True)
class SuspicionScore:
    """Lexical suspicion signals for an SLD and their bounded aggregate."""

    entropy: float  # Normalized Shannon entropy, 0-1
    suspicious_tld: bool
    excessive_hyphens: bool
    excessive_digits: bool
    random_looking: bool
    total: int  # 0-100


@dataclass(frozen=True)
class RegistrationRecord:
    """Successful answer from the external domain-age lookup service."""

    registered_at: datetime


@dataclass(frozen=True)
class AgeLookupResult:
    """
    Resolved age of a domain.

    age_days is None when the lookup service could not answer; that never
    means the domain is old.
    """

    domain: str
    registered_at: Optional[datetime]
    age_days: Optional[int]
    resolved_at: datetime
    source: AgeSource

    @property
    def is_known(self) -> bool:
        return self.age_days is not None


@dataclass(frozen=True)
class DDNSInfo:
    """Dynamic-DNS provider match for a domain."""

    is_ddns: bool
    provider: Optional[str] = None
    matched_domain: Optional[str] = None


@dataclass(frozen=True)
class ClassificationResult:
    """Final NRD verdict for one evaluation of one domain."""

    domain: str
    is_nrd: bool
    confidence: Confidence
    score: SuspicionScore
    age: AgeLookupResult
    ddns: DDNSInfo
    evaluated_at: datetime

    def to_dict(self) -> dict:
        """Render as a JSON-safe record keyed by domain for the result sink."""
        return {
            "domain": self.domain,
            "is_nrd": self.is_nrd,
            "confidence": self.confidence.value,
            "score": {
                "entropy": self.score.entropy,
                "suspicious_tld": self.score.suspicious_tld,
                "excessive_hyphens": self.score.excessive_hyphens,
                "excessive_digits": self.score.excessive_digits,
                "random_looking": self.score.random_looking,
                "total": self.score.total,
            },
            "age": {
                "domain": self.age.domain,
                "registered_at": (
                    self.age.registered_at.isoformat()
                    if self.age.registered_at is not None
                    else None
                ),
                "age_days": self.age.age_days,
                "resolved_at": self.age.resolved_at.isoformat(),
                "source": self.age.source.value,
            },
            "ddns": {
                "is_ddns": self.ddns.is_ddns,
                "provider": self.ddns.provider,
                "matched_domain": self.ddns.matched_domain,
            },
            "evaluated_at": self.evaluated_at.isoformat(),
        }
