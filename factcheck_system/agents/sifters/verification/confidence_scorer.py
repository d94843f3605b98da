"""Tier-weighted confidence scoring with temporal decay and classification.

Scoring:
- Base 20 for having searched at all
- +25 per official (tier 1), +15 per authority (tier 2), +10 per reference (tier 3) match
- Capped at 95

Decay (first matching rule only):
- Volatile category (price, schedule) older than 90 days: -20, floor 20
- Volatile category older than 30 days: -10, floor 30
- Any category older than 180 days: -15, floor 25
Decay never raises a score.

Classification ladder (first match wins):
1. No matches, no reachable source  -> UNVERIFIABLE
2. No matches, some reachable       -> FLAGGED_FOR_REVIEW (confidence capped at 35)
3. Confidence < 40                  -> OUTDATED
4. >= 2 matches and confidence >= 60 -> VERIFIED
5. >= 1 match and confidence >= 45  -> VERIFIED (partial)
6. Otherwise                        -> FLAGGED_FOR_REVIEW (weak corroboration)

All constants are empirical and live in ScoringPolicy.
"""

from dataclasses import dataclass, field
from typing import Optional

import structlog

from factcheck_system.agents.sifters.verification.schemas import TierMatches
from factcheck_system.data_management.schemas import (
    VOLATILE_CATEGORIES,
    FactCategory,
    VerificationOutcome,
)


@dataclass(frozen=True)
class DecayRule:
    """Penalty applied once a fact is older than min_age_days."""

    min_age_days: int
    penalty: int
    floor: int
    volatile_only: bool

    def applies(self, age_days: int, volatile: bool) -> bool:
        return age_days > self.min_age_days and (volatile or not self.volatile_only)


DEFAULT_DECAY_RULES: tuple[DecayRule, ...] = (
    DecayRule(min_age_days=90, penalty=20, floor=20, volatile_only=True),
    DecayRule(min_age_days=30, penalty=10, floor=30, volatile_only=True),
    DecayRule(min_age_days=180, penalty=15, floor=25, volatile_only=False),
)


@dataclass(frozen=True)
class ScoringPolicy:
    """Tunable scoring constants."""

    base_confidence: int = 20
    tier_weights: tuple[int, int, int] = (25, 15, 10)
    max_confidence: int = 95
    min_confidence: int = 20
    decay_rules: tuple[DecayRule, ...] = DEFAULT_DECAY_RULES
    no_match_cap: int = 35
    outdated_below: int = 40
    verified_min_matches: int = 2
    verified_min_confidence: int = 60
    partial_min_confidence: int = 45


@dataclass(frozen=True)
class ScoredVerdict:
    """Final confidence, outcome and rationale for one fact."""

    confidence: int
    result: VerificationOutcome
    notes: str
    breakdown: dict = field(default_factory=dict)


class ConfidenceScorer:
    """Turn per-tier match counts and fact age into a bounded verdict."""

    def __init__(self, policy: Optional[ScoringPolicy] = None) -> None:
        self.policy = policy or ScoringPolicy()
        self._logger = structlog.get_logger().bind(component="ConfidenceScorer")

    def match_score(self, matches: TierMatches) -> int:
        """Base plus tier-weighted matches, capped at max_confidence."""
        w1, w2, w3 = self.policy.tier_weights
        score = (
            self.policy.base_confidence
            + matches.tier1 * w1
            + matches.tier2 * w2
            + matches.tier3 * w3
        )
        return min(self.policy.max_confidence, score)

    def apply_decay(
        self,
        score: int,
        age_days: int,
        category: Optional[FactCategory],
    ) -> int:
        """Apply the first decay rule matching the fact's age and category."""
        volatile = category in VOLATILE_CATEGORIES
        for rule in self.policy.decay_rules:
            if rule.applies(age_days, volatile):
                return min(score, max(rule.floor, score - rule.penalty))
        return score

    def score(
        self,
        matches: TierMatches,
        sources_checked: int,
        reachable: int,
        category: Optional[FactCategory],
        age_days: int,
        matched_domains: list[str],
        checked_domains: list[str],
    ) -> ScoredVerdict:
        """Score and classify one verification.

        Args:
            matches: Match counts per tier.
            sources_checked: Number of SourceChecks recorded.
            reachable: Sources whose content was actually inspected.
            category: Fact category.
            age_days: Fact age in whole days.
            matched_domains: Domains of matching sources, in check order.
            checked_domains: Domains of all checked sources, in check order.

        Returns:
            ScoredVerdict with confidence clamped to the policy bounds.
        """
        policy = self.policy
        raw = self.match_score(matches)
        confidence = self.apply_decay(raw, age_days, category)
        confidence = max(policy.min_confidence, min(policy.max_confidence, confidence))

        total = matches.total
        source_names = ", ".join(matched_domains)
        volatile = category in VOLATILE_CATEGORIES

        if total == 0 and reachable == 0:
            result = VerificationOutcome.UNVERIFIABLE
            notes = (
                f"No pages could be fetched for verification "
                f"({sources_checked} candidate source(s) failed)."
            )
        elif total == 0:
            result = VerificationOutcome.FLAGGED_FOR_REVIEW
            confidence = min(confidence, policy.no_match_cap)
            notes = (
                f"Checked {sources_checked} sources but none corroborated the fact. "
                "Manual review recommended."
            )
        elif confidence < policy.outdated_below:
            result = VerificationOutcome.OUTDATED
            category_label = category.value if category else "uncategorized"
            volatile_label = "volatile " if volatile else ""
            notes = (
                f"Low confidence ({confidence}). {total}/{sources_checked} sources matched "
                f"but fact is {age_days} days old in {volatile_label}category "
                f"{category_label}. Sources: {source_names}"
            )
        elif total >= policy.verified_min_matches and confidence >= policy.verified_min_confidence:
            result = VerificationOutcome.VERIFIED
            notes = (
                f"Cross-verified on {total} sources ({matches.tier1} official, "
                f"{matches.tier2} authority, {matches.tier3} reference). "
                f"Sources: {source_names}"
            )
        elif total >= 1 and confidence >= policy.partial_min_confidence:
            result = VerificationOutcome.VERIFIED
            notes = (
                f"Partially verified on {total} source(s). Confidence: {confidence}. "
                f"Sources: {source_names}"
            )
        else:
            result = VerificationOutcome.FLAGGED_FOR_REVIEW
            notes = (
                f"Weak corroboration: {total}/{sources_checked} sources matched, "
                f"confidence {confidence}. Sources checked: {', '.join(checked_domains)}"
            )

        breakdown = {
            "raw_score": raw,
            "age_days": age_days,
            "tier1": matches.tier1,
            "tier2": matches.tier2,
            "tier3": matches.tier3,
            "reachable": reachable,
        }
        self._logger.debug(
            "verdict_scored",
            confidence=confidence,
            result=result.value,
            **breakdown,
        )
        return ScoredVerdict(confidence=confidence, result=result, notes=notes, breakdown=breakdown)
