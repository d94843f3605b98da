"""Schema package for fact, article and verification data structures.

Primary exports:
- Fact: Immutable verification input
- FactEntry: Stored fact record with history and recheck schedule
- WebVerificationResult: Output of one web verification

Usage:
    from factcheck_system.data_management.schemas import Fact, FactCategory
    fact = Fact(id="f1", category=FactCategory.PRICE, created_at=now, fact_text="...")
"""

from factcheck_system.data_management.schemas.article_schema import Article
from factcheck_system.data_management.schemas.fact_schema import (
    VOLATILE_CATEGORIES,
    ExtractedFact,
    Fact,
    FactCategory,
    FactEntry,
    FactStatus,
    VerificationLogEntry,
)
from factcheck_system.data_management.schemas.verification_schema import (
    MAX_SOURCES_CHECKED,
    SearchResult,
    SourceCheck,
    VerificationOutcome,
    WebVerificationResult,
)

__all__ = [
    "Article",
    "ExtractedFact",
    "Fact",
    "FactCategory",
    "FactEntry",
    "FactStatus",
    "MAX_SOURCES_CHECKED",
    "SearchResult",
    "SourceCheck",
    "VOLATILE_CATEGORIES",
    "VerificationLogEntry",
    "VerificationOutcome",
    "WebVerificationResult",
]
