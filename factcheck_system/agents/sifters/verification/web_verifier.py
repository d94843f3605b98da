"""Web fact verification engine.

Verifies one factual claim against the open web without an LLM:

1. Extract keywords (short-circuit at 30 if fewer than 2)
2. Build a query with location and site hints, search (25 if no results)
3. Prioritize trusted domains, keep the top 5 candidates
4. Snippet check, falling back to a full page check, per candidate
5. Tier-weighted confidence, temporal decay, classification

Network failures never escape: search failures look like "no results" and a
failing page becomes one non-matching SourceCheck.

Usage:
    from factcheck_system.agents.sifters.verification import WebVerifier

    async with WebVerifier.from_settings() as verifier:
        result = await verifier.verify(fact)
"""

import asyncio
from datetime import datetime
from typing import Optional

import httpx
import structlog

from factcheck_system.agents.crawlers.page_fetcher import PageFetcher
from factcheck_system.agents.crawlers.search_client import (
    BaseSearchClient,
    DuckDuckGoSearchClient,
)
from factcheck_system.agents.crawlers.transport import RetryPolicy
from factcheck_system.agents.crawlers.urls import extract_domain
from factcheck_system.agents.sifters.verification.confidence_scorer import (
    ConfidenceScorer,
)
from factcheck_system.agents.sifters.verification.keyword_extractor import (
    has_enough_keywords,
)
from factcheck_system.agents.sifters.verification.query_builder import QueryBuilder
from factcheck_system.agents.sifters.verification.result_prioritizer import (
    prioritize_results,
)
from factcheck_system.agents.sifters.verification.schemas import (
    MatchMethod,
    SourceMatch,
    TierMatches,
)
from factcheck_system.agents.sifters.verification.source_matcher import SourceMatcher
from factcheck_system.config.settings import Settings
from factcheck_system.config.trusted_domains import get_tier_for_domain
from factcheck_system.data_management.schemas import (
    MAX_SOURCES_CHECKED,
    Fact,
    SearchResult,
    SourceCheck,
    VerificationOutcome,
    WebVerificationResult,
)

INSUFFICIENT_KEYWORDS_CONFIDENCE = 30
NO_RESULTS_CONFIDENCE = 25
DEADLINE_EXCEEDED = "Verification deadline exceeded"


class WebVerifier:
    """Verify facts by cross-referencing trusted web sources.

    Holds no per-fact state, so one instance can verify many facts
    concurrently from separate tasks.
    """

    def __init__(
        self,
        search_client: Optional[BaseSearchClient] = None,
        source_matcher: Optional[SourceMatcher] = None,
        query_builder: Optional[QueryBuilder] = None,
        scorer: Optional[ConfidenceScorer] = None,
        max_sources: int = MAX_SOURCES_CHECKED,
        search_limit: int = 10,
        max_concurrent_fetches: int = 1,
    ) -> None:
        """Initialize WebVerifier.

        Args:
            search_client: Search engine client.
            source_matcher: Snippet/page corroboration checker.
            query_builder: Query construction from fact text.
            scorer: Confidence scorer and classifier.
            max_sources: Candidates inspected per fact (at most 5).
            search_limit: Results requested from the search client.
            max_concurrent_fetches: Candidates checked at once (1 = sequential).
        """
        self.search_client = search_client or DuckDuckGoSearchClient()
        self.source_matcher = source_matcher or SourceMatcher()
        self.query_builder = query_builder or QueryBuilder()
        self.scorer = scorer or ConfidenceScorer()
        self.max_sources = min(max_sources, MAX_SOURCES_CHECKED)
        self.search_limit = search_limit
        self.max_concurrent_fetches = max(1, max_concurrent_fetches)
        self._logger = structlog.get_logger().bind(component="WebVerifier")

    @classmethod
    def from_settings(
        cls,
        config: Optional[Settings] = None,
        client: Optional[httpx.AsyncClient] = None,
    ) -> "WebVerifier":
        """Build a verifier wired from application settings."""
        if config is None:
            from factcheck_system.config.settings import settings as config

        search_client = DuckDuckGoSearchClient(
            client=client,
            endpoint=config.search_endpoint,
            user_agent=config.user_agent,
            retry_policy=RetryPolicy(
                max_retries=config.search_max_retries,
                base_delay=config.search_base_delay,
                max_delay=config.search_max_delay,
            ),
        )
        page_fetcher = PageFetcher(
            client=client,
            user_agent=config.user_agent,
            timeout=config.page_fetch_timeout,
            max_chars=config.max_page_chars,
            retry_policy=RetryPolicy(
                max_retries=config.page_max_retries,
                base_delay=config.page_base_delay,
                max_delay=config.page_max_delay,
            ),
        )
        return cls(
            search_client=search_client,
            source_matcher=SourceMatcher(
                page_fetcher=page_fetcher,
                snippet_keyword_count=config.snippet_keyword_count,
                snippet_threshold=config.snippet_match_threshold,
                page_threshold=config.page_match_threshold,
            ),
            query_builder=QueryBuilder(destination=config.destination_name),
            max_sources=config.max_sources_checked,
            search_limit=config.search_result_limit,
            max_concurrent_fetches=config.max_concurrent_fetches,
        )

    async def aclose(self) -> None:
        await self.search_client.aclose()
        await self.source_matcher.page_fetcher.aclose()

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.aclose()

    async def verify(
        self,
        fact: Fact,
        now: Optional[datetime] = None,
        timeout: Optional[float] = None,
    ) -> WebVerificationResult:
        """Verify one fact against the web.

        Args:
            fact: Fact to verify.
            now: Reference time for age decay (defaults to current UTC time).
            timeout: Overall budget in seconds for the page fetches. Snippet
                checks always run; pages not fetched in time are recorded
                as non-matches.

        Returns:
            WebVerificationResult; never raises for network failures.
        """
        log = self._logger.bind(fact_id=fact.id)

        keywords = self.query_builder.keywords(fact.fact_text)
        if not has_enough_keywords(keywords):
            log.info("insufficient_keywords", keywords=len(keywords))
            return WebVerificationResult(
                confidence=INSUFFICIENT_KEYWORDS_CONFIDENCE,
                result=VerificationOutcome.UNVERIFIABLE,
                source="insufficient-keywords",
                notes=(
                    f"Only {len(keywords)} keyword(s) extracted; "
                    "too few for meaningful web search."
                ),
            )

        query = self.query_builder.build(fact.fact_text, fact.category)
        results = await self.search_client.search(query, limit=self.search_limit)
        if not results:
            log.info("search_no_results", query=query[:100])
            return WebVerificationResult(
                confidence=NO_RESULTS_CONFIDENCE,
                result=VerificationOutcome.UNVERIFIABLE,
                source="search-no-results",
                notes=f'Web search returned no results for: "{query[:100]}"',
            )

        candidates = prioritize_results(results, fact.category)[: self.max_sources]
        matches = await self._check_candidates(candidates, keywords, timeout)

        checks: list[SourceCheck] = []
        tiers = TierMatches()
        reachable = 0
        for candidate, match in zip(candidates, matches):
            domain = extract_domain(candidate.url)
            tier = get_tier_for_domain(domain, fact.category)
            if match.reachable:
                reachable += 1
            if match.matched:
                tiers = tiers.add(tier)
            checks.append(
                SourceCheck(
                    url=candidate.url,
                    domain=domain,
                    tier=tier,
                    matched=match.matched,
                    snippet=match.snippet,
                )
            )

        matched_domains = [c.domain for c in checks if c.matched]
        checked_domains = [c.domain for c in checks]

        verdict = self.scorer.score(
            tiers,
            sources_checked=len(checks),
            reachable=reachable,
            category=fact.category,
            age_days=fact.age_days(now),
            matched_domains=matched_domains,
            checked_domains=checked_domains,
        )

        log.info(
            "fact_verified",
            result=verdict.result.value,
            confidence=verdict.confidence,
            matched=tiers.total,
            checked=len(checks),
        )

        return WebVerificationResult(
            confidence=verdict.confidence,
            result=verdict.result,
            source=", ".join(matched_domains or checked_domains),
            notes=verdict.notes,
            sources_checked=checks,
        )

    async def _check_candidates(
        self,
        candidates: list[SearchResult],
        keywords: list[str],
        timeout: Optional[float],
    ) -> list[SourceMatch]:
        """Check candidates in priority order, preserving that order in results."""
        loop = asyncio.get_running_loop()
        deadline = loop.time() + timeout if timeout is not None else None
        semaphore = asyncio.Semaphore(self.max_concurrent_fetches)

        async def check_one(candidate: SearchResult) -> SourceMatch:
            # Snippets need no network call, so the deadline only gates page fetches
            snippet_match = self.source_matcher.check_snippet(candidate, keywords)
            if snippet_match is not None:
                return snippet_match
            async with semaphore:
                remaining = None
                if deadline is not None:
                    remaining = deadline - loop.time()
                    if remaining <= 0:
                        return SourceMatch(False, MatchMethod.FETCH_FAILED, DEADLINE_EXCEEDED)
                return await self.source_matcher.check_page(
                    candidate.url, keywords, timeout=remaining
                )

        return list(await asyncio.gather(*(check_one(c) for c in candidates)))


async def verify_fact(
    fact: Fact,
    now: Optional[datetime] = None,
    timeout: Optional[float] = None,
) -> WebVerificationResult:
    """Verify one fact with a verifier built from application settings."""
    async with WebVerifier.from_settings() as verifier:
        return await verifier.verify(fact, now=now, timeout=timeout)
