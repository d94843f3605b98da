"""Tests for DuckDuckGo result parsing and the search client failure modes."""

import httpx
import pytest
from loguru import logger

from factcheck_system.agents.crawlers.search_client import (
    DuckDuckGoSearchClient,
    parse_results,
)
from factcheck_system.agents.crawlers.transport import RetryPolicy
from factcheck_system.agents.crawlers.urls import extract_domain, unwrap_redirect


# ── Fixtures ──────────────────────────────────────────────────────────────


RESULTS_HTML = """
<html><body>
<div class="result results_links">
  <h2 class="result__title">
    <a class="result__a" href="//duckduckgo.com/l/?uddg=https%3A%2F%2Ftfl.gov.uk%2Ffares%2Ffind-fares&amp;rut=abc">
      Tube fares | TfL
    </a>
  </h2>
  <a class="result__snippet" href="#">Daily cap for <b>Zones 1-2</b> is £8.10.</a>
</div>
<div class="result result--ad">
  <h2 class="result__title">
    <a class="result__a" href="https://duckduckgo.com/y.js?ad_domain=example.com">Sponsored</a>
  </h2>
</div>
<div class="result">
  <h2 class="result__title">
    <a class="result__a" href="https://www.timeout.com/london/travel/oyster">Oyster guide</a>
  </h2>
</div>
<div class="result">
  <h2 class="result__title"><a class="result__a" href="javascript:void(0)">Broken</a></h2>
</div>
<div class="result">
  <h2 class="result__title">
    <a class="result__a" href="https://en.wikipedia.org/wiki/Oyster_card">Oyster card</a>
  </h2>
  <a class="result__snippet" href="#">Smart card for London transport.</a>
</div>
</body></html>
"""

NO_RETRY = RetryPolicy(max_retries=0, base_delay=0, max_delay=0)


def _client(handler) -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


class TestParseResults:

    def test_parses_and_unwraps(self):
        results = parse_results(RESULTS_HTML)

        assert [r.url for r in results] == [
            "https://tfl.gov.uk/fares/find-fares",
            "https://www.timeout.com/london/travel/oyster",
            "https://en.wikipedia.org/wiki/Oyster_card",
        ]
        assert results[0].title == "Tube fares | TfL"
        assert "Zones 1-2" in results[0].snippet

    def test_missing_snippet_is_empty(self):
        results = parse_results(RESULTS_HTML)

        assert results[1].snippet == ""

    def test_limit(self):
        assert len(parse_results(RESULTS_HTML, limit=2)) == 2

    def test_no_results(self):
        assert parse_results("<html><body><p>No results.</p></body></html>") == []


class TestUrlHelpers:

    def test_extract_domain(self):
        assert extract_domain("https://www.TfL.gov.uk/fares") == "tfl.gov.uk"
        assert extract_domain("not a url") == ""

    def test_unwrap_redirect_passthrough(self):
        assert unwrap_redirect("https://timeout.com/x") == "https://timeout.com/x"


class TestDuckDuckGoSearchClient:

    @pytest.mark.asyncio
    async def test_search_success(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["q"] = request.url.params.get("q")
            seen["ua"] = request.headers.get("user-agent")
            return httpx.Response(200, text=RESULTS_HTML)

        async with _client(handler) as http:
            client = DuckDuckGoSearchClient(client=http, user_agent="TestBot/1.0", retry_policy=NO_RETRY)
            results = await client.search("oyster daily cap London", limit=10)

        assert len(results) == 3
        assert seen["q"] == "oyster daily cap London"
        assert seen["ua"] == "TestBot/1.0"

    @pytest.mark.asyncio
    async def test_non_success_returns_empty(self):
        async with _client(lambda request: httpx.Response(403, text="blocked")) as http:
            client = DuckDuckGoSearchClient(client=http, retry_policy=NO_RETRY)

            assert await client.search("anything") == []

    @pytest.mark.asyncio
    async def test_failure_logged_with_component(self):
        records = []
        sink_id = logger.add(lambda message: records.append(message.record), level="WARNING")
        try:
            async with _client(lambda request: httpx.Response(403, text="blocked")) as http:
                client = DuckDuckGoSearchClient(client=http, retry_policy=NO_RETRY)
                await client.search("oyster cap")
        finally:
            logger.remove(sink_id)

        assert records
        assert records[-1]["message"] == "Search returned 403"
        assert records[-1]["extra"]["component"] == "DuckDuckGoSearchClient"
        assert records[-1]["extra"]["query"] == "oyster cap"

    @pytest.mark.asyncio
    async def test_network_error_returns_empty(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        async with _client(handler) as http:
            client = DuckDuckGoSearchClient(client=http, retry_policy=NO_RETRY)

            assert await client.search("anything") == []

    @pytest.mark.asyncio
    async def test_rate_limited_is_retried(self):
        calls = []

        def handler(request: httpx.Request) -> httpx.Response:
            calls.append(request)
            if len(calls) == 1:
                return httpx.Response(429)
            return httpx.Response(200, text=RESULTS_HTML)

        policy = RetryPolicy(max_retries=2, base_delay=0, max_delay=0)
        async with _client(handler) as http:
            client = DuckDuckGoSearchClient(client=http, retry_policy=policy)
            results = await client.search("oyster")

        assert len(calls) == 2
        assert len(results) == 3

    @pytest.mark.asyncio
    async def test_persistent_server_error_returns_empty(self):
        calls = []

        def handler(request: httpx.Request) -> httpx.Response:
            calls.append(request)
            return httpx.Response(503)

        policy = RetryPolicy(max_retries=2, base_delay=0, max_delay=0)
        async with _client(handler) as http:
            client = DuckDuckGoSearchClient(client=http, retry_policy=policy)

            assert await client.search("oyster") == []

        assert len(calls) == 3
