"""
Lexical feature extraction for domain names.

Splits a domain into TLD, SLD and subdomain under a naive single-label TLD
model: multi-part public suffixes such as co.uk are not treated specially,
so "example.co.uk" yields sld="co" and tld="uk".
"""

import idna

from .enums import InvalidDomainCode
from .exceptions import InvalidDomain
from .models import DomainLabels


ACE_PREFIX = "xn--"


def _prepare(domain: str) -> str:
    """Trim whitespace and a single trailing dot, then lower-case."""
    prepared = domain.strip().lower()
    if prepared.endswith("."):
        prepared = prepared[:-1]
    return prepared


def extract_labels(domain: str) -> DomainLabels:
    """
    Split a domain into its TLD, SLD and subdomain labels.

    Args:
        domain: Domain name, e.g. "www.example.com" or "Example.COM."

    Returns:
        DomainLabels with lower-cased labels; subdomain is None when the
        domain has exactly two labels

    Raises:
        InvalidDomain: If the domain has fewer than two dot-separated,
            non-empty labels
    """
    prepared = _prepare(domain)
    if not prepared:
        raise InvalidDomain(
            code=InvalidDomainCode.EMPTY_INPUT.value,
            message="Domain input is empty",
            details={"raw_input": domain},
        )

    labels = prepared.split(".")
    if len(labels) < 2:
        raise InvalidDomain(
            code=InvalidDomainCode.TOO_FEW_LABELS.value,
            message="Domain must have at least two labels",
            details={"raw_input": domain, "label_count": len(labels)},
        )

    if any(not label for label in labels):
        raise InvalidDomain(
            code=InvalidDomainCode.EMPTY_LABEL.value,
            message="Domain contains an empty label",
            details={"raw_input": domain},
        )

    is_idn = any(
        label.startswith(ACE_PREFIX) or not label.isascii()
        for label in labels
    )

    return DomainLabels(
        tld=labels[-1],
        sld=labels[-2],
        subdomain=".".join(labels[:-2]) or None,
        is_idn=is_idn,
    )


def canonical_lookup_key(domain: str) -> str:
    """
    Convert a domain to the ASCII form used for caching and external lookups.

    Unicode domains are IDNA-encoded (UTS #46 mapping) so that "bücher.de"
    and "xn--bcher-kva.de" share one key. Domains that cannot be encoded are
    returned lower-cased and trimmed.
    """
    prepared = _prepare(domain)
    if prepared.isascii():
        return prepared
    try:
        return idna.encode(prepared, uts46=True).decode("ascii")
    except idna.IDNAError:
        return prepared
