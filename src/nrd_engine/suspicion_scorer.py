"""
Suspicion scoring for domain labels.

Pure, total functions over arbitrary strings that flag lexical traits of
auto-generated (DGA) and throwaway domains, combined into a bounded score.
The aggregate is monotone: turning any single signal more suspicious never
lowers the total.
"""

import math
import re
from collections import Counter

import regex

from .models import DomainLabels, SuspicionScore


CONSONANTS = "bcdfghjklmnpqrstvwxyz"

# Runs of 4+ ASCII digits, or digits making up 30%+ of the label
DIGIT_RUN_LENGTH = 4
DIGIT_RATIO_THRESHOLD = 0.3
CONSONANT_RUN_LENGTH = 5

ENTROPY_WEIGHT = 30
SUSPICIOUS_TLD_POINTS = 25
EXCESSIVE_HYPHENS_POINTS = 15
EXCESSIVE_DIGITS_POINTS = 15
RANDOM_LOOKING_POINTS = 25
MAX_SCORE = 100

_GRAPHEME_PATTERN = regex.compile(r"\X")
_DIGIT_RUN_PATTERN = re.compile(r"[0-9]{%d,}" % DIGIT_RUN_LENGTH)
_CONSONANT_RUN_PATTERN = re.compile(
    r"[%s%s]{%d,}" % (CONSONANTS, CONSONANTS.upper(), CONSONANT_RUN_LENGTH)
)


def entropy(label: str) -> float:
    """
    Normalized Shannon entropy of a label over its grapheme clusters.

    The raw entropy is divided by log2 of the cluster count, so a label whose
    clusters are all distinct scores exactly 1 and a label made of a single
    repeated character scores 0.

    Args:
        label: Any string

    Returns:
        Entropy in [0, 1]
    """
    if len(set(label)) <= 1:
        return 0.0

    clusters = _GRAPHEME_PATTERN.findall(label)
    length = len(clusters)
    counts = Counter(clusters)
    if length <= 1 or len(counts) == 1:
        return 0.0
    if len(counts) == length:
        return 1.0

    raw = -sum(
        (count / length) * math.log2(count / length)
        for count in counts.values()
    )
    return min(1.0, max(0.0, raw / math.log2(length)))


def has_excessive_hyphens(label: str) -> bool:
    """True for a leading or trailing hyphen, or any "--" in the label."""
    return label.startswith("-") or label.endswith("-") or "--" in label


def has_excessive_digits(label: str) -> bool:
    """True for a run of 4+ digits or a digit share of at least 30%."""
    if not label:
        return False
    if _DIGIT_RUN_PATTERN.search(label):
        return True
    digit_count = sum(1 for char in label if "0" <= char <= "9")
    return digit_count / len(label) >= DIGIT_RATIO_THRESHOLD


def is_random_looking(label: str) -> bool:
    """
    True if the label has a run of 5+ consecutive ASCII consonants.

    "y" counts as a consonant; a label of vowels alone is never flagged.
    """
    return _CONSONANT_RUN_PATTERN.search(label) is not None


def score(labels: DomainLabels, reputation_tlds: frozenset[str]) -> SuspicionScore:
    """
    Score the SLD of a domain and the reputation of its TLD.

    Args:
        labels: Extracted domain labels
        reputation_tlds: Lower-case TLDs associated with abuse

    Returns:
        SuspicionScore with all signals and a total clamped to [0, 100]
    """
    sld = labels.sld
    sld_entropy = entropy(sld)
    suspicious_tld = labels.tld.lower() in reputation_tlds
    excessive_hyphens = has_excessive_hyphens(sld)
    excessive_digits = has_excessive_digits(sld)
    random_looking = is_random_looking(sld)

    total = round(sld_entropy * ENTROPY_WEIGHT)
    if suspicious_tld:
        total += SUSPICIOUS_TLD_POINTS
    if excessive_hyphens:
        total += EXCESSIVE_HYPHENS_POINTS
    if excessive_digits:
        total += EXCESSIVE_DIGITS_POINTS
    if random_looking:
        total += RANDOM_LOOKING_POINTS

    return SuspicionScore(
        entropy=sld_entropy,
        suspicious_tld=suspicious_tld,
        excessive_hyphens=excessive_hyphens,
        excessive_digits=excessive_digits,
        random_looking=random_looking,
        total=max(0, min(MAX_SCORE, total)),
    )


def is_high_risk(suspicion: SuspicionScore, threshold: int) -> bool:
    """Check whether a score reaches the given suspicion threshold."""
    return suspicion.total >= threshold
