"""Trusted domain registry for web fact verification.

Maps each fact category to the domains trusted to corroborate it, tagged with
a trust tier:

1. Official (tier 1): tfl.gov.uk, gov.uk, royalmail.com, ons.gov.uk
2. Authority (tier 2): timeout.com, visitlondon.com, visitbritain.com, londonist.com
3. Reference (tier 3): tripadvisor.com, booking.com, wikipedia.org

A page may corroborate a fact even when its domain is trusted for a different
category, so lookups fall back to the whole registry before defaulting to
tier 3. Hostnames match by suffix ("www.tfl.gov.uk" and "tfl.gov.uk" both
match "tfl.gov.uk").
"""

from dataclasses import dataclass
from types import MappingProxyType
from typing import Iterable, Mapping, Optional

from factcheck_system.data_management.schemas.fact_schema import FactCategory

VALID_TIERS: frozenset[int] = frozenset({1, 2, 3})
DEFAULT_TIER: int = 3


class RegistryConfigError(ValueError):
    """Raised when the trusted domain registry is malformed."""


@dataclass(frozen=True)
class TrustedDomain:
    """A domain trusted for a fact category."""

    domain: str
    tier: int


TRUSTED_DOMAINS: Mapping[FactCategory, tuple[TrustedDomain, ...]] = MappingProxyType({
    FactCategory.PRICE: (
        TrustedDomain("timeout.com", 2),
        TrustedDomain("visitlondon.com", 2),
        TrustedDomain("tripadvisor.com", 3),
        TrustedDomain("booking.com", 3),
        TrustedDomain("londonist.com", 2),
    ),
    FactCategory.SCHEDULE: (
        TrustedDomain("timeout.com", 2),
        TrustedDomain("visitlondon.com", 2),
        TrustedDomain("londonist.com", 2),
        TrustedDomain("tripadvisor.com", 3),
    ),
    FactCategory.ADDRESS: (
        TrustedDomain("royalmail.com", 1),
        TrustedDomain("timeout.com", 2),
        TrustedDomain("visitlondon.com", 2),
        TrustedDomain("tripadvisor.com", 3),
    ),
    FactCategory.CONTACT: (
        TrustedDomain("timeout.com", 2),
        TrustedDomain("visitlondon.com", 2),
        TrustedDomain("tripadvisor.com", 3),
        TrustedDomain("londonist.com", 2),
    ),
    FactCategory.TRANSPORT: (
        TrustedDomain("tfl.gov.uk", 1),
        TrustedDomain("visitlondon.com", 2),
        TrustedDomain("timeout.com", 2),
        TrustedDomain("londonist.com", 2),
    ),
    FactCategory.REGULATION: (
        TrustedDomain("gov.uk", 1),
        TrustedDomain("visitbritain.com", 2),
        TrustedDomain("visitlondon.com", 2),
    ),
    FactCategory.STATISTIC: (
        TrustedDomain("ons.gov.uk", 1),
        TrustedDomain("visitbritain.com", 2),
        TrustedDomain("visitlondon.com", 2),
        TrustedDomain("wikipedia.org", 3),
    ),
})

# Categories whose searches are restricted to their most authoritative sites
SITE_HINTS: Mapping[FactCategory, tuple[str, ...]] = MappingProxyType({
    FactCategory.TRANSPORT: ("tfl.gov.uk", "timeout.com"),
    FactCategory.REGULATION: ("gov.uk", "visitbritain.com"),
    FactCategory.STATISTIC: ("ons.gov.uk", "visitbritain.com"),
})

MAX_SITE_HINTS: int = 2


def validate_registry(
    registry: Mapping[FactCategory, Iterable[TrustedDomain]],
    site_hints: Mapping[FactCategory, Iterable[str]],
) -> None:
    """Check registry entries and site hints, raising RegistryConfigError."""
    known: set[str] = set()
    for category, entries in registry.items():
        if not isinstance(category, FactCategory):
            raise RegistryConfigError(f"Unknown category key: {category!r}")
        for entry in entries:
            if not entry.domain or entry.domain != entry.domain.strip().lower():
                raise RegistryConfigError(
                    f"Invalid domain {entry.domain!r} for category {category.value}"
                )
            if entry.tier not in VALID_TIERS:
                raise RegistryConfigError(
                    f"Invalid tier {entry.tier} for {entry.domain} "
                    f"(must be one of {sorted(VALID_TIERS)})"
                )
            known.add(entry.domain)

    for category, domains in site_hints.items():
        for domain in domains:
            if domain not in known:
                raise RegistryConfigError(
                    f"Site hint {domain!r} for {category.value} is not a trusted domain"
                )


def _flatten(registry: Mapping[FactCategory, Iterable[TrustedDomain]]) -> frozenset[str]:
    return frozenset(entry.domain for entries in registry.values() for entry in entries)


validate_registry(TRUSTED_DOMAINS, SITE_HINTS)

# All unique trusted domains, independent of category
ALL_TRUSTED_DOMAINS: frozenset[str] = _flatten(TRUSTED_DOMAINS)


def domain_matches(host: str, domain: str) -> bool:
    """True if host is domain or one of its subdomains."""
    return host == domain or host.endswith("." + domain)


def category_domains(category: Optional[FactCategory]) -> frozenset[str]:
    """Domains trusted for a category (empty for no category)."""
    if category is None:
        return frozenset()
    return frozenset(entry.domain for entry in TRUSTED_DOMAINS.get(category, ()))


def is_trusted(host: str, domains: Iterable[str] = ALL_TRUSTED_DOMAINS) -> bool:
    """True if host matches any of the given domains."""
    return bool(host) and any(domain_matches(host, domain) for domain in domains)


def get_tier_for_domain(host: str, category: Optional[FactCategory]) -> int:
    """Resolve the trust tier of a hostname.

    Checks the category's own list first, then every category in registry
    order. Unknown hosts resolve to tier 3.
    """
    if not host:
        return DEFAULT_TIER

    if category is not None:
        for entry in TRUSTED_DOMAINS.get(category, ()):
            if domain_matches(host, entry.domain):
                return entry.tier

    for entries in TRUSTED_DOMAINS.values():
        for entry in entries:
            if domain_matches(host, entry.domain):
                return entry.tier

    return DEFAULT_TIER


def get_site_hints(category: Optional[FactCategory]) -> tuple[str, ...]:
    """Up to MAX_SITE_HINTS site restrictions for a category."""
    if category is None:
        return ()
    return tuple(SITE_HINTS.get(category, ()))[:MAX_SITE_HINTS]
