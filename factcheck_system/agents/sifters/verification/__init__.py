"""Web verification submodule for destination facts.

Verifies a single factual claim against the open web using keyword search,
trusted-domain prioritization, snippet/page corroboration and tier-weighted
confidence scoring. No LLM is involved.

Core workflow:
1. QueryBuilder turns fact text into a search query with location/site hints
2. A search client returns candidate pages
3. prioritize_results puts trusted domains first
4. SourceMatcher corroborates each candidate (snippet, then full page)
5. ConfidenceScorer applies tier weights, age decay and the verdict ladder
"""

from factcheck_system.agents.sifters.verification.confidence_scorer import (
    ConfidenceScorer,
    DecayRule,
    ScoredVerdict,
    ScoringPolicy,
)
from factcheck_system.agents.sifters.verification.keyword_extractor import (
    extract_keywords,
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
from factcheck_system.agents.sifters.verification.web_verifier import (
    WebVerifier,
    verify_fact,
)

__all__ = [
    "ConfidenceScorer",
    "DecayRule",
    "MatchMethod",
    "QueryBuilder",
    "ScoredVerdict",
    "ScoringPolicy",
    "SourceMatch",
    "SourceMatcher",
    "TierMatches",
    "WebVerifier",
    "extract_keywords",
    "prioritize_results",
    "verify_fact",
]
