"""Web search clients for fact verification.

DuckDuckGoSearchClient scrapes the plain-HTML results page (no API key
needed). Scraping a results page is fragile to markup changes and anti-bot
measures, so callers depend only on BaseSearchClient and a licensed search
API can be swapped in without touching matching or scoring.

Failures never propagate: any non-2xx status, network error, parse error or
empty page yields an empty list, which callers treat as "no results".
"""

from abc import ABC, abstractmethod
from typing import Optional

import httpx
from bs4 import BeautifulSoup

from factcheck_system.agents.crawlers.transport import (
    SEARCH_RETRY_POLICY,
    RetryPolicy,
    fetch_with_retry,
)
from factcheck_system.agents.crawlers.urls import extract_domain, unwrap_redirect
from factcheck_system.config.logging import get_logger
from factcheck_system.data_management.schemas import SearchResult

DEFAULT_ENDPOINT = "https://html.duckduckgo.com/html/"
DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (compatible; YallaLondonFactChecker/1.0; +https://yalla-london.com)"
)
DEFAULT_LIMIT = 10

RESULT_SELECTOR = ".result"
TITLE_SELECTOR = ".result__title a, .result__a"
SNIPPET_SELECTOR = ".result__snippet"


class BaseSearchClient(ABC):
    """Interface for anything that turns a query into ranked search results."""

    @abstractmethod
    async def search(self, query: str, limit: int = DEFAULT_LIMIT) -> list[SearchResult]:
        """
        Run a query.

        Args:
            query: Search engine query string
            limit: Maximum number of results

        Returns:
            Ordered results, or an empty list on any failure
        """

    async def aclose(self) -> None:
        """Release network resources."""


def parse_results(html: str, limit: int = DEFAULT_LIMIT) -> list[SearchResult]:
    """
    Parse result blocks out of a DuckDuckGo HTML results page.

    Redirect links are unwrapped to their outbound URL and links back to the
    search engine itself (ads, internal pages) are skipped.

    Args:
        html: Results page markup
        limit: Stop after this many results

    Returns:
        Parsed results in page order
    """
    soup = BeautifulSoup(html, "html.parser")
    results: list[SearchResult] = []

    for block in soup.select(RESULT_SELECTOR):
        if len(results) >= limit:
            break

        title_el = block.select_one(TITLE_SELECTOR)
        if title_el is None:
            continue

        url = unwrap_redirect(str(title_el.get("href") or ""))
        if not url.startswith(("http://", "https://")):
            continue
        domain = extract_domain(url)
        if not domain or domain == "duckduckgo.com" or domain.endswith(".duckduckgo.com"):
            continue

        snippet_el = block.select_one(SNIPPET_SELECTOR)
        results.append(
            SearchResult(
                title=title_el.get_text(" ", strip=True),
                url=url,
                snippet=snippet_el.get_text(" ", strip=True) if snippet_el else "",
            )
        )

    return results


class DuckDuckGoSearchClient(BaseSearchClient):
    """
    Search client backed by DuckDuckGo's plain-HTML endpoint.

    Attributes:
        endpoint: Results page URL
        user_agent: Descriptive bot User-Agent with contact URL
        retry_policy: Backoff applied because the endpoint rate-limits intermittently
        timeout: Per-attempt timeout in seconds
    """

    def __init__(
        self,
        client: Optional[httpx.AsyncClient] = None,
        endpoint: str = DEFAULT_ENDPOINT,
        user_agent: str = DEFAULT_USER_AGENT,
        retry_policy: RetryPolicy = SEARCH_RETRY_POLICY,
        timeout: float = 15.0,
    ):
        self.endpoint = endpoint
        self.user_agent = user_agent
        self.retry_policy = retry_policy
        self.timeout = timeout
        self._client = client
        self._owns_client = client is None
        self.logger = get_logger("DuckDuckGoSearchClient")

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                timeout=httpx.Timeout(self.timeout),
                follow_redirects=True,
            )
            self._owns_client = True
        return self._client

    async def aclose(self) -> None:
        if self._owns_client and self._client is not None:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.aclose()

    async def search(self, query: str, limit: int = DEFAULT_LIMIT) -> list[SearchResult]:
        try:
            response = await fetch_with_retry(
                self._get_client(),
                self.endpoint,
                policy=self.retry_policy,
                headers={"User-Agent": self.user_agent, "Accept": "text/html"},
                params={"q": query},
                timeout=self.timeout,
            )
        except httpx.HTTPError as e:
            self.logger.warning(
                "Search failed",
                query=query[:60],
                error=str(e) or type(e).__name__,
            )
            return []

        if not response.is_success:
            self.logger.warning(
                f"Search returned {response.status_code}",
                query=query[:60],
            )
            return []

        try:
            results = parse_results(response.text, limit)
        except Exception as e:
            self.logger.warning("Search results could not be parsed", query=query[:60], error=str(e))
            return []

        self.logger.debug("Search completed", query=query[:60], results=len(results))
        return results
