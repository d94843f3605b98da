"""Internal value objects for the web verification engine.

Public input/output models (Fact, SearchResult, SourceCheck,
WebVerificationResult) live in factcheck_system.data_management.schemas;
the types here only travel between engine components.
"""

from dataclasses import dataclass
from enum import Enum


class MatchMethod(str, Enum):
    """How a candidate source was judged.

    SNIPPET: The search snippet alone carried enough keywords; page not fetched.
    FULL_FETCH: The page was fetched and scanned.
    FETCH_FAILED: The page could not be fetched (timeout, HTTP error, parse error,
        cancellation); always a non-match.
    """

    SNIPPET = "snippet"
    FULL_FETCH = "full_fetch"
    FETCH_FAILED = "fetch_failed"


@dataclass(frozen=True)
class SourceMatch:
    """Tagged result of the two-stage snippet/page check."""

    matched: bool
    method: MatchMethod
    snippet: str

    @property
    def reachable(self) -> bool:
        """True if the source's content was actually inspected."""
        return self.method is not MatchMethod.FETCH_FAILED


@dataclass(frozen=True)
class TierMatches:
    """Match counts per trust tier for one verification."""

    tier1: int = 0
    tier2: int = 0
    tier3: int = 0

    @property
    def total(self) -> int:
        return self.tier1 + self.tier2 + self.tier3

    def add(self, tier: int) -> "TierMatches":
        """Return counts with one more match at the given tier."""
        if tier == 1:
            return TierMatches(self.tier1 + 1, self.tier2, self.tier3)
        if tier == 2:
            return TierMatches(self.tier1, self.tier2 + 1, self.tier3)
        return TierMatches(self.tier1, self.tier2, self.tier3 + 1)
