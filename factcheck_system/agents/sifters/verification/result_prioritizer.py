"""Reorder search results so trusted sources are checked first."""

from typing import Optional

from factcheck_system.agents.crawlers.urls import extract_domain
from factcheck_system.config.trusted_domains import (
    ALL_TRUSTED_DOMAINS,
    category_domains,
    is_trusted,
)
from factcheck_system.data_management.schemas import FactCategory, SearchResult


def prioritize_results(
    results: list[SearchResult],
    category: Optional[FactCategory],
) -> list[SearchResult]:
    """
    Stable-sort results: trusted domains before untrusted, and within the
    trusted group, domains trusted for this category first.

    Args:
        results: Search results in engine order
        category: Fact category, or None

    Returns:
        New list in priority order; ties keep engine order
    """
    own_domains = category_domains(category)

    def sort_key(result: SearchResult) -> tuple[int, int]:
        domain = extract_domain(result.url)
        trusted = is_trusted(domain, ALL_TRUSTED_DOMAINS)
        category_trusted = trusted and is_trusted(domain, own_domains)
        return (0 if trusted else 1, 0 if category_trusted else 1)

    return sorted(results, key=sort_key)
