"""End-to-end tests for WebVerifier with mocked search and page fetching.

Tests cover:
- Short-circuits (insufficient keywords, no search results)
- Cross-verification, partial verification and age decay
- Untrusted / unreachable candidates
- Candidate cap, ordering and concurrency
- Caller deadline
"""

import asyncio
from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock

import pytest

from factcheck_system.agents.crawlers.page_fetcher import PageFetchError
from factcheck_system.agents.sifters.verification.query_builder import QueryBuilder
from factcheck_system.agents.sifters.verification.source_matcher import SourceMatcher
from factcheck_system.agents.sifters.verification.web_verifier import WebVerifier
from factcheck_system.config.settings import Settings
from factcheck_system.data_management.schemas import (
    Fact,
    FactCategory,
    SearchResult,
    VerificationOutcome,
)

NOW = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)
OYSTER_FACT = "Oyster card daily cap is £8.10 in Zones 1-2"
OYSTER_PAGE = "fares and caps. the oyster card daily cap for zones 1-2 is £8.10 on weekdays."


# ── Helpers ──────────────────────────────────────────────────────────────


def _fact(
    text: str = OYSTER_FACT,
    category: FactCategory | None = FactCategory.PRICE,
    age_days: int = 10,
) -> Fact:
    return Fact(
        id="fact-001",
        category=category,
        created_at=NOW - timedelta(days=age_days),
        fact_text=text,
    )


def _result(url: str, snippet: str = "") -> SearchResult:
    return SearchResult(title=url, url=url, snippet=snippet)


def _verifier(results: list[SearchResult], pages: dict, **kwargs) -> WebVerifier:
    """Verifier whose search returns results and whose fetcher serves pages.

    A page value that is an exception instance is raised instead.
    """
    search_client = AsyncMock()
    search_client.search = AsyncMock(return_value=results)

    async def fetch_text(url: str) -> str:
        page = pages.get(url, "")
        if isinstance(page, Exception):
            raise page
        return page

    fetcher = AsyncMock()
    fetcher.fetch_text = AsyncMock(side_effect=fetch_text)

    return WebVerifier(
        search_client=search_client,
        source_matcher=SourceMatcher(page_fetcher=fetcher),
        query_builder=QueryBuilder(destination="London"),
        **kwargs,
    )


# ── Short-circuits ───────────────────────────────────────────────────────


class TestShortCircuits:

    @pytest.mark.asyncio
    async def test_insufficient_keywords(self):
        """A claim with fewer than two keywords is never searched."""
        verifier = _verifier([], {})

        result = await verifier.verify(_fact("London is a city", category=None), now=NOW)

        assert result.result is VerificationOutcome.UNVERIFIABLE
        assert result.confidence == 30
        assert result.source == "insufficient-keywords"
        assert result.sources_checked == []
        assert result.notes.startswith("Only 1 keyword(s) extracted")
        verifier.search_client.search.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_no_search_results(self):
        verifier = _verifier([], {})

        result = await verifier.verify(_fact(), now=NOW)

        assert result.result is VerificationOutcome.UNVERIFIABLE
        assert result.confidence == 25
        assert result.source == "search-no-results"
        assert "Oyster card daily cap" in result.notes
        assert result.sources_checked == []

    @pytest.mark.asyncio
    async def test_query_uses_builder(self):
        verifier = _verifier([], {})

        await verifier.verify(_fact(category=FactCategory.TRANSPORT), now=NOW)

        query = verifier.search_client.search.await_args.args[0]
        assert query == "Oyster card daily cap £8.10 Zones 1-2 London site:tfl.gov.uk OR site:timeout.com"


# ── Corroboration ─────────────────────────────────────────────────────────


class TestCorroboration:

    @pytest.mark.asyncio
    async def test_cross_verified_on_official_and_authority(self):
        results = [
            _result("https://tfl.gov.uk/fares/find-fares"),
            _result("https://www.timeout.com/london/oyster"),
        ]
        pages = {r.url: OYSTER_PAGE for r in results}
        verifier = _verifier(results, pages)

        result = await verifier.verify(_fact(age_days=10), now=NOW)

        assert result.result is VerificationOutcome.VERIFIED
        assert result.confidence >= 60
        assert "tfl.gov.uk" in result.source
        assert {c.domain: c.tier for c in result.sources_checked} == {
            "tfl.gov.uk": 1,
            "timeout.com": 2,
        }

    @pytest.mark.asyncio
    async def test_single_official_match_is_partial(self):
        results = [_result("https://tfl.gov.uk/fares")]
        verifier = _verifier(results, {results[0].url: OYSTER_PAGE})

        result = await verifier.verify(_fact(age_days=10), now=NOW)

        assert result.result is VerificationOutcome.VERIFIED
        assert result.confidence == 45
        assert result.notes.startswith("Partially verified")

    @pytest.mark.asyncio
    async def test_old_volatile_fact_is_outdated(self):
        results = [_result("https://tfl.gov.uk/fares")]
        verifier = _verifier(results, {results[0].url: OYSTER_PAGE})

        fresh = await verifier.verify(_fact(age_days=10), now=NOW)
        stale = await verifier.verify(_fact(age_days=120), now=NOW)

        assert stale.confidence < fresh.confidence
        assert stale.result is VerificationOutcome.OUTDATED
        assert stale.source == "tfl.gov.uk"
        assert "120 days old" in stale.notes

    @pytest.mark.asyncio
    async def test_untrusted_non_matching_sources_flagged(self):
        results = [
            _result("https://blog-one.example/london"),
            _result("https://blog-two.example/london"),
            _result("https://forum.example/thread/1"),
        ]
        pages = {r.url: "a page about something else entirely" for r in results}
        verifier = _verifier(results, pages)

        result = await verifier.verify(_fact(), now=NOW)

        assert result.result is VerificationOutcome.FLAGGED_FOR_REVIEW
        assert result.confidence <= 35
        assert len(result.sources_checked) == 3
        assert all(c.tier == 3 and not c.matched for c in result.sources_checked)
        assert result.source == "blog-one.example, blog-two.example, forum.example"

    @pytest.mark.asyncio
    async def test_all_fetches_failed_is_unverifiable(self):
        results = [_result("https://tfl.gov.uk/a"), _result("https://timeout.com/b")]
        pages = {
            "https://tfl.gov.uk/a": PageFetchError("HTTP 503"),
            "https://timeout.com/b": PageFetchError("HTTP 404"),
        }
        verifier = _verifier(results, pages)

        result = await verifier.verify(_fact(), now=NOW)

        assert result.result is VerificationOutcome.UNVERIFIABLE
        assert result.confidence == 20
        assert [c.snippet for c in result.sources_checked] == ["HTTP 404", "HTTP 503"]

    @pytest.mark.asyncio
    async def test_failed_source_does_not_abort(self):
        results = [_result("https://timeout.com/a"), _result("https://tfl.gov.uk/b")]
        pages = {
            "https://timeout.com/a": PageFetchError("HTTP 500"),
            "https://tfl.gov.uk/b": OYSTER_PAGE,
        }
        verifier = _verifier(results, pages)

        result = await verifier.verify(_fact(), now=NOW)

        assert len(result.sources_checked) == 2
        assert result.source == "tfl.gov.uk"
        assert result.result is VerificationOutcome.VERIFIED

    @pytest.mark.asyncio
    async def test_snippet_match_skips_page(self):
        results = [_result("https://timeout.com/a", snippet="Oyster card daily cap guide")]
        verifier = _verifier(results, {})

        result = await verifier.verify(_fact(), now=NOW)

        assert result.sources_checked[0].matched is True
        assert result.sources_checked[0].snippet.startswith("Search snippet match")
        verifier.source_matcher.page_fetcher.fetch_text.assert_not_awaited()


# ── Candidate handling ───────────────────────────────────────────────────


class TestCandidates:

    @pytest.mark.asyncio
    async def test_at_most_five_sources(self):
        results = [_result(f"https://site{i}.example/") for i in range(8)]
        verifier = _verifier(results, {})

        result = await verifier.verify(_fact(), now=NOW)

        assert len(result.sources_checked) == 5
        assert 20 <= result.confidence <= 95

    @pytest.mark.asyncio
    async def test_trusted_checked_first(self):
        results = [
            _result("https://random.example/"),
            _result("https://www.visitlondon.com/oyster"),
        ]
        verifier = _verifier(results, {})

        result = await verifier.verify(_fact(), now=NOW)

        assert [c.domain for c in result.sources_checked] == ["visitlondon.com", "random.example"]

    @pytest.mark.asyncio
    async def test_concurrent_checks_keep_priority_order(self):
        results = [
            _result("https://tfl.gov.uk/a"),
            _result("https://timeout.com/b"),
            _result("https://other.example/c"),
        ]
        delays = {"https://tfl.gov.uk/a": 0.05, "https://timeout.com/b": 0.0, "https://other.example/c": 0.01}

        verifier = _verifier(results, {}, max_concurrent_fetches=3)

        async def fetch_text(url: str) -> str:
            await asyncio.sleep(delays[url])
            return OYSTER_PAGE

        verifier.source_matcher.page_fetcher.fetch_text.side_effect = fetch_text

        result = await verifier.verify(_fact(category=FactCategory.TRANSPORT), now=NOW)

        assert [c.domain for c in result.sources_checked] == ["tfl.gov.uk", "timeout.com", "other.example"]
        assert all(c.matched for c in result.sources_checked)

    @pytest.mark.asyncio
    async def test_deadline_records_non_matches(self):
        results = [_result("https://tfl.gov.uk/a"), _result("https://timeout.com/b")]
        verifier = _verifier(results, {})

        async def slow_fetch(url: str) -> str:
            await asyncio.sleep(5)
            return OYSTER_PAGE

        verifier.source_matcher.page_fetcher.fetch_text.side_effect = slow_fetch

        result = await verifier.verify(_fact(), now=NOW, timeout=0.05)

        assert len(result.sources_checked) == 2
        assert all(c.snippet == "Verification deadline exceeded" for c in result.sources_checked)
        assert result.result is VerificationOutcome.UNVERIFIABLE

    @pytest.mark.asyncio
    async def test_snippet_match_survives_spent_deadline(self):
        """A slow first page spends the budget; a later snippet still corroborates."""
        results = [
            _result("https://tfl.gov.uk/fares"),
            _result("https://blog.example/oyster", snippet="Oyster card daily cap £8.10 Zones 1-2"),
        ]
        verifier = _verifier(results, {})

        async def slow_fetch(url: str) -> str:
            await asyncio.sleep(5)
            return OYSTER_PAGE

        verifier.source_matcher.page_fetcher.fetch_text.side_effect = slow_fetch

        result = await verifier.verify(_fact(), now=NOW, timeout=0.05)

        checks = [(c.domain, c.matched) for c in result.sources_checked]
        assert checks == [("tfl.gov.uk", False), ("blog.example", True)]
        assert result.sources_checked[0].snippet == "Verification deadline exceeded"
        assert result.sources_checked[1].snippet.startswith("Search snippet match")
        assert result.result is VerificationOutcome.OUTDATED
        assert result.confidence == 30
        assert result.source == "blog.example"
        verifier.source_matcher.page_fetcher.fetch_text.assert_awaited_once()


class TestFromSettings:

    def test_wires_settings(self):
        config = Settings(
            _env_file=None,
            destination_name="Paris",
            max_sources_checked=3,
            page_match_threshold=0.6,
            max_concurrent_fetches=2,
        )

        verifier = WebVerifier.from_settings(config)

        assert verifier.query_builder.destination == "Paris"
        assert verifier.max_sources == 3
        assert verifier.max_concurrent_fetches == 2
        assert verifier.source_matcher.page_threshold == 0.6
        assert "YallaLondonFactChecker" in verifier.search_client.user_agent
