"""Tests for the retrying HTTP transport."""

import httpx
import pytest

from factcheck_system.agents.crawlers.transport import (
    PAGE_RETRY_POLICY,
    SEARCH_RETRY_POLICY,
    RetryPolicy,
    fetch_with_retry,
    is_retryable,
)

FAST = RetryPolicy(max_retries=1, base_delay=0, max_delay=0)


class TestRetryPolicy:

    def test_defaults(self):
        assert SEARCH_RETRY_POLICY.max_attempts == 3
        assert SEARCH_RETRY_POLICY.max_delay == 10.0
        assert PAGE_RETRY_POLICY.max_attempts == 2

    def test_is_immutable(self):
        with pytest.raises(AttributeError):
            SEARCH_RETRY_POLICY.max_retries = 5  # type: ignore[misc]


class TestIsRetryable:

    def _status_error(self, status: int) -> httpx.HTTPStatusError:
        request = httpx.Request("GET", "https://example.com")
        response = httpx.Response(status, request=request)
        return httpx.HTTPStatusError("error", request=request, response=response)

    def test_statuses(self):
        assert is_retryable(self._status_error(429))
        assert is_retryable(self._status_error(502))
        assert not is_retryable(self._status_error(404))

    def test_transport_errors(self):
        assert is_retryable(httpx.ConnectTimeout("timed out"))
        assert not is_retryable(ValueError("nope"))


class TestFetchWithRetry:

    @pytest.mark.asyncio
    async def test_retries_then_succeeds(self):
        calls = []

        def handler(request: httpx.Request) -> httpx.Response:
            calls.append(request)
            if len(calls) == 1:
                raise httpx.ReadTimeout("slow", request=request)
            return httpx.Response(200, text="ok")

        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
            response = await fetch_with_retry(client, "https://example.com", policy=FAST)

        assert response.status_code == 200
        assert len(calls) == 2

    @pytest.mark.asyncio
    async def test_non_retryable_status_returned(self):
        calls = []

        def handler(request: httpx.Request) -> httpx.Response:
            calls.append(request)
            return httpx.Response(404)

        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
            response = await fetch_with_retry(client, "https://example.com", policy=FAST)

        assert response.status_code == 404
        assert len(calls) == 1

    @pytest.mark.asyncio
    async def test_reraises_after_exhausting(self):
        async with httpx.AsyncClient(
            transport=httpx.MockTransport(lambda request: httpx.Response(500))
        ) as client:
            with pytest.raises(httpx.HTTPStatusError):
                await fetch_with_retry(client, "https://example.com", policy=FAST)
