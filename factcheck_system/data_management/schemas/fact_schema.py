"""Fact schemas - verification input and stored fact records.

Fact is the immutable input to a single verification call. FactEntry is the
mutable record kept by FactStore across pipeline runs, with its verification
log and recheck schedule. ExtractedFact is the raw output of the regex fact
extractor before registration.

Hard requirements: id, fact_text, created_at.
"""

import uuid
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Literal, Optional

from pydantic import AliasChoices, BaseModel, Field, field_validator


class FactCategory(str, Enum):
    """Closed taxonomy of verifiable fact categories.

    PRICE and SCHEDULE are volatile: their real-world values change often
    enough to warrant faster confidence decay.
    """

    PRICE = "price"
    SCHEDULE = "schedule"
    ADDRESS = "address"
    CONTACT = "contact"
    TRANSPORT = "transport"
    REGULATION = "regulation"
    STATISTIC = "statistic"


VOLATILE_CATEGORIES: frozenset[FactCategory] = frozenset(
    {FactCategory.PRICE, FactCategory.SCHEDULE}
)


class FactStatus(str, Enum):
    """Lifecycle status of a stored fact."""

    PENDING = "pending"
    VERIFIED = "verified"
    OUTDATED = "outdated"
    FLAGGED_FOR_REVIEW = "flagged_for_review"


def _coerce_category(value: Any) -> Any:
    """Map empty / "none" categories to None."""
    if value is None:
        return None
    if isinstance(value, str) and value.strip().lower() in ("", "none", "null"):
        return None
    return value


class Fact(BaseModel):
    """A single factual claim submitted for web verification.

    Immutable for the duration of a verification call.
    """

    id: str = Field(..., description="Fact identifier")
    category: Optional[FactCategory] = Field(
        default=None,
        description="Fact category, or None when uncategorized",
    )
    status: str = Field(default=FactStatus.PENDING.value, description="Current status")
    verification_count: int = Field(default=0, ge=0)
    created_at: datetime = Field(..., description="When the fact was first recorded")
    fact_text: str = Field(
        ...,
        validation_alias=AliasChoices("fact_text", "fact_text_en"),
        description="Free-text claim in the working language",
    )

    model_config = {
        "frozen": True,
        "populate_by_name": True,
        "json_schema_extra": {
            "examples": [
                {
                    "id": "fact-001",
                    "category": "price",
                    "status": "pending",
                    "verification_count": 0,
                    "created_at": "2026-01-10T09:00:00Z",
                    "fact_text": "Oyster card daily cap is £8.10 in Zones 1-2",
                }
            ]
        },
    }

    @field_validator("category", mode="before")
    @classmethod
    def normalize_category(cls, value: Any) -> Any:
        return _coerce_category(value)

    def age_days(self, now: Optional[datetime] = None) -> int:
        """Whole days since created_at (naive timestamps are treated as UTC)."""
        now = now or datetime.now(timezone.utc)
        created = self.created_at
        if created.tzinfo is None:
            created = created.replace(tzinfo=timezone.utc)
        if now.tzinfo is None:
            now = now.replace(tzinfo=timezone.utc)
        return max(0, (now - created).days)


class ExtractedFact(BaseModel):
    """A fact found in article content by the regex extractor."""

    text: str = Field(..., min_length=10, max_length=500)
    category: FactCategory
    location: str = Field(
        default="",
        description="Nearest heading or paragraph-N hint",
    )


class VerificationLogEntry(BaseModel):
    """One verification attempt appended to a fact's history."""

    date: datetime
    source: str
    result: str
    notes: str


class FactEntry(BaseModel):
    """Stored fact record with verification history and recheck schedule."""

    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    article_type: Literal["blog", "information"]
    article_slug: str
    fact_text: str
    fact_location: str = ""
    category: Optional[FactCategory] = None
    status: FactStatus = FactStatus.PENDING
    confidence_score: int = Field(default=0, ge=0, le=100)
    verification_count: int = Field(default=0, ge=0)
    verification_log: list[VerificationLogEntry] = Field(default_factory=list)
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    last_verified_at: Optional[datetime] = None
    next_check_at: Optional[datetime] = None
    agent_notes: Optional[str] = None

    @field_validator("category", mode="before")
    @classmethod
    def normalize_category(cls, value: Any) -> Any:
        return _coerce_category(value)

    @property
    def dedup_key(self) -> str:
        return f"{self.article_slug}::{self.fact_text}"

    def to_fact(self) -> Fact:
        """Snapshot this record as an immutable verification input."""
        return Fact(
            id=self.id,
            category=self.category,
            status=self.status.value,
            verification_count=self.verification_count,
            created_at=self.created_at,
            fact_text=self.fact_text,
        )
