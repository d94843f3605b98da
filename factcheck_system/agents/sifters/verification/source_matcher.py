"""Two-stage corroboration check for a single candidate source.

Stage 1 compares the first few keywords against the search engine snippet.
When enough of them appear, the snippet is the evidence and the page is never
fetched, which saves latency and avoids load on third-party sites.

Stage 2 fetches the page and measures keyword coverage over the whole text.
Its threshold is lower because full pages are noisier and keyword diversity
drops. Any fetch failure becomes a non-match carrying the error message.

Usage:
    matcher = SourceMatcher(page_fetcher=PageFetcher())
    match = await matcher.check(search_result, keywords)
"""

import asyncio
from typing import Optional

import httpx
import structlog

from factcheck_system.agents.crawlers.page_fetcher import PageFetcher, PageFetchError
from factcheck_system.agents.sifters.verification.schemas import MatchMethod, SourceMatch
from factcheck_system.data_management.schemas import SearchResult

SNIPPET_KEYWORD_COUNT = 5
SNIPPET_MATCH_THRESHOLD = 0.5
PAGE_MATCH_THRESHOLD = 0.4

# Evidence window around the first matched keyword
WINDOW_BEFORE = 80
WINDOW_AFTER = 120
SNIPPET_EVIDENCE_CHARS = 150


def keyword_ratio(text: str, keywords: list[str]) -> tuple[list[str], float]:
    """Lowercased keywords found in text and their share of all keywords."""
    lower_text = text.lower()
    lower_keywords = [kw.lower() for kw in keywords]
    found = [kw for kw in lower_keywords if kw in lower_text]
    return found, len(found) / max(len(lower_keywords), 1)


class SourceMatcher:
    """Decide whether one search result corroborates a fact."""

    def __init__(
        self,
        page_fetcher: Optional[PageFetcher] = None,
        snippet_keyword_count: int = SNIPPET_KEYWORD_COUNT,
        snippet_threshold: float = SNIPPET_MATCH_THRESHOLD,
        page_threshold: float = PAGE_MATCH_THRESHOLD,
    ) -> None:
        """Initialize SourceMatcher.

        Args:
            page_fetcher: Fetcher for stage 2. Created lazily if None.
            snippet_keyword_count: Leading keywords compared against snippets.
            snippet_threshold: Keyword ratio for a snippet match (default 0.5).
            page_threshold: Keyword ratio for a full-page match (default 0.4).
        """
        self.page_fetcher = page_fetcher or PageFetcher()
        self.snippet_keyword_count = snippet_keyword_count
        self.snippet_threshold = snippet_threshold
        self.page_threshold = page_threshold
        self._logger = structlog.get_logger().bind(component="SourceMatcher")

    async def check(
        self,
        result: SearchResult,
        keywords: list[str],
        timeout: Optional[float] = None,
    ) -> SourceMatch:
        """Run the snippet check, falling back to a full page check.

        Args:
            result: Candidate search result.
            keywords: Fact keywords.
            timeout: Remaining caller deadline in seconds; exceeding it is
                treated like a fetch timeout.

        Returns:
            SourceMatch tagged with the method that decided it.
        """
        snippet_match = self.check_snippet(result, keywords)
        if snippet_match is not None:
            return snippet_match
        return await self.check_page(result.url, keywords, timeout=timeout)

    def check_snippet(self, result: SearchResult, keywords: list[str]) -> Optional[SourceMatch]:
        """Stage 1: match on the search snippet, or None to fall through."""
        if not result.snippet:
            return None

        _, ratio = keyword_ratio(result.snippet, keywords[: self.snippet_keyword_count])
        if ratio < self.snippet_threshold:
            return None

        return SourceMatch(
            matched=True,
            method=MatchMethod.SNIPPET,
            snippet=f'Search snippet match: "{result.snippet[:SNIPPET_EVIDENCE_CHARS]}..."',
        )

    async def check_page(
        self,
        url: str,
        keywords: list[str],
        timeout: Optional[float] = None,
    ) -> SourceMatch:
        """Stage 2: fetch the page and scan it for keyword coverage."""
        if timeout is not None and timeout <= 0:
            return SourceMatch(False, MatchMethod.FETCH_FAILED, "Verification deadline exceeded")

        try:
            fetch = self.page_fetcher.fetch_text(url)
            if timeout is not None:
                page_text = await asyncio.wait_for(fetch, timeout=timeout)
            else:
                page_text = await fetch
        except asyncio.TimeoutError:
            return SourceMatch(False, MatchMethod.FETCH_FAILED, "Verification deadline exceeded")
        except (PageFetchError, httpx.HTTPError) as e:
            return SourceMatch(False, MatchMethod.FETCH_FAILED, str(e) or type(e).__name__)
        except Exception as e:
            # Malformed markup or encoding problems on one page must not abort the fact
            self._logger.warning("page_check_failed", url=url[:100], error=str(e))
            return SourceMatch(False, MatchMethod.FETCH_FAILED, str(e) or "Fetch failed")

        return self.match_page_text(page_text, keywords)

    def match_page_text(self, page_text: str, keywords: list[str]) -> SourceMatch:
        """Score lowercased page text against all keywords."""
        found, ratio = keyword_ratio(page_text, keywords)
        total = len(keywords)

        if ratio < self.page_threshold or not found:
            return SourceMatch(
                matched=False,
                method=MatchMethod.FULL_FETCH,
                snippet=f"{len(found)}/{total} keywords matched on page",
            )

        page_text = page_text.lower()
        first = found[0]
        idx = page_text.find(first)
        start = max(0, idx - WINDOW_BEFORE)
        end = min(len(page_text), idx + len(first) + WINDOW_AFTER)
        window = page_text[start:end].strip()

        return SourceMatch(
            matched=True,
            method=MatchMethod.FULL_FETCH,
            snippet=f"...{window}... ({len(found)}/{total} keywords matched)",
        )
