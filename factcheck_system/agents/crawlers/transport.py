"""Resilient HTTP transport shared by the search client and page fetcher.

Retries transient failures (network errors, timeouts, HTTP 429 and 5xx) with
exponential backoff via tenacity. The retry policy is a plain value object
passed into every call, so no retry state is shared between callers.
"""

from dataclasses import dataclass
from typing import Any, Mapping, Optional

import httpx
from tenacity import (
    AsyncRetrying,
    RetryCallState,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential,
)

from factcheck_system.config.logging import get_logger

RETRYABLE_STATUS_CODES: frozenset[int] = frozenset({429, 500, 502, 503, 504})


@dataclass(frozen=True)
class RetryPolicy:
    """Retry configuration for one kind of outbound request.

    Attributes:
        max_retries: Retries after the first attempt
        base_delay: First backoff delay in seconds (doubles per retry)
        max_delay: Upper bound on a single backoff delay in seconds
    """

    max_retries: int = 2
    base_delay: float = 2.0
    max_delay: float = 10.0

    @property
    def max_attempts(self) -> int:
        return self.max_retries + 1


SEARCH_RETRY_POLICY = RetryPolicy(max_retries=2, base_delay=2.0, max_delay=10.0)
PAGE_RETRY_POLICY = RetryPolicy(max_retries=1, base_delay=1.0, max_delay=5.0)


def is_retryable(exc: BaseException) -> bool:
    """Transport errors and throttling/server statuses are worth retrying."""
    if isinstance(exc, httpx.HTTPStatusError):
        return exc.response.status_code in RETRYABLE_STATUS_CODES
    return isinstance(exc, httpx.TransportError)


def _log_retry(retry_state: RetryCallState) -> None:
    exc = retry_state.outcome.exception() if retry_state.outcome else None
    get_logger("transport").warning(
        "Retrying request",
        attempt=retry_state.attempt_number,
        error=str(exc) or type(exc).__name__,
        wait=round(retry_state.next_action.sleep, 2) if retry_state.next_action else 0,
    )


async def fetch_with_retry(
    client: httpx.AsyncClient,
    url: str,
    *,
    policy: RetryPolicy = SEARCH_RETRY_POLICY,
    headers: Optional[Mapping[str, str]] = None,
    params: Optional[Mapping[str, Any]] = None,
    timeout: Optional[float] = None,
) -> httpx.Response:
    """
    GET a URL, retrying transient failures according to policy.

    Non-retryable responses (e.g. 404) are returned to the caller unchanged.

    Args:
        client: Shared async HTTP client
        url: URL to fetch
        policy: Retry/backoff configuration
        headers: Extra request headers
        params: Query parameters
        timeout: Per-attempt timeout in seconds (client default if None)

    Returns:
        httpx.Response

    Raises:
        httpx.HTTPStatusError: Retryable status persisted after all attempts
        httpx.TransportError: Network failure persisted after all attempts
    """
    request_timeout = timeout if timeout is not None else client.timeout

    async for attempt in AsyncRetrying(
        stop=stop_after_attempt(policy.max_attempts),
        wait=wait_exponential(multiplier=policy.base_delay, max=policy.max_delay),
        retry=retry_if_exception(is_retryable),
        before_sleep=_log_retry,
        reraise=True,
    ):
        with attempt:
            response = await client.get(
                url,
                headers=headers,
                params=params,
                timeout=request_timeout,
                follow_redirects=True,
            )
            if response.status_code in RETRYABLE_STATUS_CODES:
                response.raise_for_status()
            return response

    # AsyncRetrying with reraise=True either returns above or raises
    raise RuntimeError(f"Failed to fetch {url}")
