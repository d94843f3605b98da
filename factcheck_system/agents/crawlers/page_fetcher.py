"""Candidate page fetching and text extraction for keyword matching.

Fetches a page with the shared retrying transport, bounds the HTML kept in
memory, strips non-content elements with BeautifulSoup and returns the
remaining body text lowercased with whitespace collapsed.
"""

import re
from typing import Optional

import httpx
from bs4 import BeautifulSoup

from factcheck_system.agents.crawlers.search_client import DEFAULT_USER_AGENT
from factcheck_system.agents.crawlers.transport import (
    PAGE_RETRY_POLICY,
    RetryPolicy,
    fetch_with_retry,
)
from factcheck_system.config.logging import get_logger

# Elements that never carry the content a fact would be stated in
NON_CONTENT_SELECTOR = "script, style, nav, footer, header, aside, .cookie-banner, .ad"

DEFAULT_TIMEOUT = 8.0
MAX_PAGE_CHARS = 500_000

_WHITESPACE = re.compile(r"\s+")


class PageFetchError(Exception):
    """A candidate page could not be fetched or read."""


def html_to_text(html: str, max_chars: int = MAX_PAGE_CHARS) -> str:
    """
    Reduce page markup to lowercased, whitespace-collapsed content text.

    Args:
        html: Raw page markup
        max_chars: Markup characters kept before parsing

    Returns:
        Content text
    """
    soup = BeautifulSoup(html[:max_chars], "html.parser")

    # extract() rather than decompose(): nested matches are already detached
    for element in soup.select(NON_CONTENT_SELECTOR):
        element.extract()

    root = soup.body or soup
    text = root.get_text(" ")
    return _WHITESPACE.sub(" ", text).strip().lower()


class PageFetcher:
    """
    Fetches candidate pages for full-text keyword matching.

    Attributes:
        user_agent: Descriptive bot User-Agent with contact URL
        timeout: Per-attempt timeout in seconds
        max_chars: Markup characters kept from each page
        retry_policy: Backoff for transient failures
    """

    def __init__(
        self,
        client: Optional[httpx.AsyncClient] = None,
        user_agent: str = DEFAULT_USER_AGENT,
        timeout: float = DEFAULT_TIMEOUT,
        max_chars: int = MAX_PAGE_CHARS,
        retry_policy: RetryPolicy = PAGE_RETRY_POLICY,
    ):
        self.user_agent = user_agent
        self.timeout = timeout
        self.max_chars = max_chars
        self.retry_policy = retry_policy
        self._client = client
        self._owns_client = client is None
        self.logger = get_logger("PageFetcher")

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                timeout=httpx.Timeout(self.timeout),
                limits=httpx.Limits(max_connections=10, max_keepalive_connections=5),
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

    async def fetch_text(self, url: str) -> str:
        """
        Fetch a page and return its content text.

        Args:
            url: Candidate page URL

        Returns:
            Lowercased content text

        Raises:
            PageFetchError: Non-2xx status after retries
            httpx.HTTPError: Network failure or timeout after retries
        """
        try:
            response = await fetch_with_retry(
                self._get_client(),
                url,
                policy=self.retry_policy,
                headers={"User-Agent": self.user_agent, "Accept": "text/html"},
                timeout=self.timeout,
            )
        except httpx.HTTPStatusError as e:
            raise PageFetchError(f"HTTP {e.response.status_code}") from e

        if not response.is_success:
            raise PageFetchError(f"HTTP {response.status_code}")

        text = html_to_text(response.text, self.max_chars)
        self.logger.debug("Page fetched", url=url, chars=len(text))
        return text
