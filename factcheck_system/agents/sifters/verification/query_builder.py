"""Search query construction for web fact verification.

Builds one short query per fact: the most distinctive keywords, a location
hint, and for categories with clear official sources a site restriction
(``site:a OR site:b``) that biases results toward tier-1 pages.

Usage:
    from factcheck_system.agents.sifters.verification.query_builder import QueryBuilder

    builder = QueryBuilder(destination="London")
    query = builder.build("Oyster card daily cap is £8.10", FactCategory.PRICE)
"""

from typing import Optional

import structlog

from factcheck_system.agents.sifters.verification.keyword_extractor import extract_keywords
from factcheck_system.config.trusted_domains import get_site_hints
from factcheck_system.data_management.schemas import FactCategory

MAX_QUERY_KEYWORDS = 8


class QueryBuilder:
    """Compose search engine queries from fact text and category."""

    def __init__(
        self,
        destination: str = "London",
        max_keywords: int = MAX_QUERY_KEYWORDS,
    ) -> None:
        """Initialize QueryBuilder.

        Args:
            destination: Destination name appended as a location hint.
            max_keywords: Maximum keywords used in a query (default 8).
        """
        self.destination = destination
        self.max_keywords = max_keywords
        self._logger = structlog.get_logger().bind(component="QueryBuilder")

    def keywords(self, fact_text: str) -> list[str]:
        """Keywords for a fact; the destination name is never one of them."""
        return extract_keywords(fact_text, extra_stopwords=self._destination_words())

    def build(self, fact_text: str, category: Optional[FactCategory]) -> str:
        """Build the search query for a fact.

        Args:
            fact_text: Claim text.
            category: Fact category, or None.

        Returns:
            Query string, e.g. ``"Oyster card daily cap £8.10 London"``.
        """
        terms = self.keywords(fact_text)[: self.max_keywords]
        query = " ".join(terms)

        if self.destination and self.destination.lower() not in query.lower():
            query = f"{query} {self.destination}".strip()

        site_hints = get_site_hints(category)
        if site_hints:
            restriction = " OR ".join(f"site:{domain}" for domain in site_hints)
            query = f"{query} {restriction}"

        self._logger.debug(
            "query_built",
            category=category.value if category else None,
            keywords=len(terms),
            query=query[:100],
        )
        return query

    def _destination_words(self) -> list[str]:
        return self.destination.split() if self.destination else []
