"""
NRD Classifier.

Combines the lexical suspicion score of a domain with its resolved age into
a ClassificationResult. Each evaluation moves through
Extracted -> Scored -> AgeResolved -> Classified; nothing is kept between
calls except the resolver's age cache.

Decision rules:
- Known age below the threshold -> NRD
- Unknown age and score at or above the suspicion threshold -> NRD
  (the lexical signal stands in for the missing temporal one)
- Otherwise -> not NRD
"""

import math
from datetime import datetime, timezone
from typing import Callable, Optional

from .age_resolver import DomainAgeResolver
from .audit_logger import AuditLogger
from .config import Configuration
from .ddns import check_ddns
from .enums import Confidence, LogLevel
from .exceptions import InvalidDomain
from .label_extractor import extract_labels
from .models import AgeLookupResult, ClassificationResult, SuspicionScore
from .suspicion_scorer import is_high_risk, score


# Points either side of the suspicion threshold that count as borderline
SCORE_BORDERLINE_MARGIN = 10
# Fraction of the age threshold an age must clear to be decisive on its own
AGE_DECISIVE_RATIO = 0.5


class NrdClassifier:
    """Stateless classifier around a shared DomainAgeResolver."""

    COMPONENT = "NrdClassifier"

    def __init__(
        self,
        resolver: DomainAgeResolver,
        logger: Optional[AuditLogger] = None,
        now: Optional[Callable[[], datetime]] = None,
    ) -> None:
        """
        Initialize the classifier.

        Args:
            resolver: Shared age resolver (owns the cache)
            logger: Optional audit logger
            now: Wall-clock source for evaluated_at
        """
        self._resolver = resolver
        self._logger = logger
        self._now = now or (lambda: datetime.now(timezone.utc))

    @property
    def resolver(self) -> DomainAgeResolver:
        return self._resolver

    async def classify(self, domain: str, config: Configuration) -> ClassificationResult:
        """
        Classify a domain as newly registered or not.

        Args:
            domain: Domain name to evaluate
            config: Configuration snapshot used for this evaluation only

        Returns:
            Fully populated ClassificationResult

        Raises:
            InvalidDomain: If the domain has fewer than two non-empty labels
        """
        try:
            labels = extract_labels(domain)
        except InvalidDomain as e:
            self._log_error(f"Invalid domain: {e.message}", e, {"raw_domain": domain})
            raise

        normalized = ".".join(
            part for part in (labels.subdomain, labels.sld, labels.tld) if part
        )

        suspicion = score(labels, config.reputation_tlds)
        age = await self._resolver.resolve_age(normalized, config)

        is_nrd = self.determine_nrd(suspicion, age, config)
        confidence = self.determine_confidence(is_nrd, suspicion, age, config)

        result = ClassificationResult(
            domain=normalized,
            is_nrd=is_nrd,
            confidence=confidence,
            score=suspicion,
            age=age,
            ddns=check_ddns(normalized),
            evaluated_at=self._now(),
        )

        self._log(
            LogLevel.INFO,
            f"Classified {normalized}: nrd={is_nrd} confidence={confidence.value}",
            {
                "domain": normalized,
                "is_nrd": is_nrd,
                "confidence": confidence.value,
                "score": suspicion.total,
                "age_days": age.age_days,
                "age_source": age.source.value,
                "is_ddns": result.ddns.is_ddns,
            },
        )
        return result

    def score_domain(self, domain: str, config: Configuration) -> SuspicionScore:
        """
        Score a domain lexically without any age lookup.

        Raises:
            InvalidDomain: If the domain has fewer than two non-empty labels
        """
        return score(extract_labels(domain), config.reputation_tlds)

    def determine_nrd(
        self,
        suspicion: SuspicionScore,
        age: AgeLookupResult,
        config: Configuration,
    ) -> bool:
        """Apply the NRD decision rules to one score and one age."""
        if age.age_days is not None:
            return age.age_days < config.age_threshold_days
        return is_high_risk(suspicion, config.suspicion_threshold)

    def determine_confidence(
        self,
        is_nrd: bool,
        suspicion: SuspicionScore,
        age: AgeLookupResult,
        config: Configuration,
    ) -> Confidence:
        """
        Grade how much the verdict can be trusted.

        HIGH when the age is far from the threshold, or when a borderline
        age and the lexical score point the same way.
        MEDIUM when a single signal drives the decision on its own.
        LOW when the score sits near its threshold and the age is either
        unknown or borderline and disagreeing.
        """
        lexical_says_nrd = is_high_risk(suspicion, config.suspicion_threshold)
        score_is_borderline = (
            abs(suspicion.total - config.suspicion_threshold) < SCORE_BORDERLINE_MARGIN
        )

        if age.age_days is not None:
            threshold = config.age_threshold_days
            margin = math.ceil(threshold * AGE_DECISIVE_RATIO)
            if age.age_days < threshold - margin or age.age_days >= threshold + margin:
                return Confidence.HIGH
            if lexical_says_nrd == is_nrd:
                return Confidence.HIGH
            if score_is_borderline:
                return Confidence.LOW
            return Confidence.MEDIUM

        if score_is_borderline:
            return Confidence.LOW
        return Confidence.MEDIUM

    def _log(self, level: LogLevel, message: str, data: dict) -> None:
        if self._logger:
            self._logger.log(level, self.COMPONENT, message, data)

    def _log_error(self, message: str, error: Exception, data: dict) -> None:
        if self._logger:
            self._logger.log_error(self.COMPONENT, message, error, data)
