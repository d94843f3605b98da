"""Verification result schemas for web fact verification.

Defines the search results, per-source checks and the final result produced
for one fact. The publication pipeline gates on WebVerificationResult.result:

- VERIFIED / OUTDATED: informative confidence levels, human override allowed
- UNVERIFIABLE / FLAGGED_FOR_REVIEW: do not auto-publish
"""

from enum import Enum
from typing import Literal

from pydantic import BaseModel, Field

MAX_SOURCES_CHECKED = 5


class VerificationOutcome(str, Enum):
    """Classification of a web verification attempt.

    VERIFIED: Corroborated by enough weighted sources.
    OUTDATED: Some corroboration, but confidence fell below 40 (usually age decay).
    UNVERIFIABLE: Nothing could be searched or fetched.
    FLAGGED_FOR_REVIEW: Sources were reachable but corroboration is missing or weak.
    """

    VERIFIED = "verified"
    OUTDATED = "outdated"
    UNVERIFIABLE = "unverifiable"
    FLAGGED_FOR_REVIEW = "flagged_for_review"


class SearchResult(BaseModel):
    """One organic result parsed from a search engine results page."""

    title: str = ""
    url: str
    snippet: str = ""


class SourceCheck(BaseModel):
    """Outcome of inspecting one candidate source."""

    url: str = Field(..., description="Candidate page URL")
    domain: str = Field(..., description="Hostname with www. stripped")
    tier: Literal[1, 2, 3] = Field(..., description="Trust tier of the domain")
    matched: bool = Field(..., description="True if the source corroborates the fact")
    snippet: str = Field(
        ..., description="Supporting text, or the reason the source did not match"
    )


class WebVerificationResult(BaseModel):
    """Final result of verifying one fact against the web."""

    confidence: int = Field(..., ge=0, le=95, description="Bounded confidence score")
    result: VerificationOutcome
    source: str = Field(
        ...,
        description="Comma-joined matched domains, or every checked domain if none matched",
    )
    notes: str = Field(..., description="Human-readable rationale")
    sources_checked: list[SourceCheck] = Field(
        default_factory=list,
        max_length=MAX_SOURCES_CHECKED,
    )

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "confidence": 60,
                    "result": "verified",
                    "source": "tfl.gov.uk, timeout.com",
                    "notes": "Cross-verified on 2 sources (1 official, 1 authority, 0 reference). Sources: tfl.gov.uk, timeout.com",
                    "sources_checked": [
                        {
                            "url": "https://tfl.gov.uk/fares/find-fares/tube-and-rail-fares",
                            "domain": "tfl.gov.uk",
                            "tier": 1,
                            "matched": True,
                            "snippet": "...daily cap £8.10 zones 1-2... (4/5 keywords matched)",
                        }
                    ],
                }
            ]
        }
    }
