"""Scheduled fact verification run over published destination content.

One run:
1. Extract facts from every published article
2. Register facts not seen before in the FactStore
3. Verify due facts against the web, pausing every few facts and stopping
   once the run's time budget is spent
4. Return run metrics

Usage:
    from factcheck_system.pipeline import VerificationPipeline

    pipeline = VerificationPipeline(fact_store=FactStore("facts.json"))
    metrics = await pipeline.run(articles)
"""

import asyncio
import time
from datetime import datetime, timezone
from typing import Any, Callable, Iterable, Optional

from factcheck_system.agents.sifters.fact_extractor import extract_facts
from factcheck_system.agents.sifters.verification.web_verifier import WebVerifier
from factcheck_system.data_management.fact_store import FactStore
from factcheck_system.data_management.schemas import Article, VerificationOutcome
from factcheck_system.utils.logging import get_correlation_id, get_structured_logger

# Outcomes reported together as needing editorial attention
_FLAGGED_OUTCOMES = {VerificationOutcome.OUTDATED, VerificationOutcome.FLAGGED_FOR_REVIEW}


class VerificationPipeline:
    """Orchestrates extraction -> registration -> web verification."""

    def __init__(
        self,
        verifier: Optional[WebVerifier] = None,
        fact_store: Optional[FactStore] = None,
        facts_per_run: int = 30,
        run_time_budget: float = 240.0,
        pause_every: int = 5,
        pause_seconds: float = 2.0,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        """Initialize VerificationPipeline.

        Args:
            verifier: Web verifier. Built from settings if None.
            fact_store: Fact store. Memory-only if None.
            facts_per_run: Due facts verified per run (default 30).
            run_time_budget: Seconds after which no new fact is started.
            pause_every: Pause after this many verified facts.
            pause_seconds: Pause length, to avoid search engine throttling.
            clock: Monotonic clock used for the time budget.
        """
        self._verifier = verifier
        self.fact_store = fact_store or FactStore()
        self.facts_per_run = facts_per_run
        self.run_time_budget = run_time_budget
        self.pause_every = pause_every
        self.pause_seconds = pause_seconds
        self._clock = clock

    @classmethod
    def from_settings(cls, config=None) -> "VerificationPipeline":
        """Build a pipeline wired from application settings."""
        if config is None:
            from factcheck_system.config.settings import settings as config

        return cls(
            verifier=WebVerifier.from_settings(config),
            fact_store=FactStore(config.fact_store_path),
            facts_per_run=config.facts_per_run,
            run_time_budget=config.run_time_budget,
            pause_every=config.pause_every,
            pause_seconds=config.pause_seconds,
        )

    async def aclose(self) -> None:
        if self._verifier is not None:
            await self._verifier.aclose()

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.aclose()

    def _get_verifier(self) -> WebVerifier:
        """Lazy-init WebVerifier from settings."""
        if self._verifier is None:
            self._verifier = WebVerifier.from_settings()
        return self._verifier

    async def run(
        self,
        articles: Iterable[Article],
        now: Optional[datetime] = None,
    ) -> dict[str, Any]:
        """Run one verification pass.

        Args:
            articles: Candidate articles; unpublished ones are skipped.
            now: Run timestamp (defaults to current UTC time).

        Returns:
            Run metrics.
        """
        now = now or datetime.now(timezone.utc)
        run_id = get_correlation_id()
        log = get_structured_logger("pipeline", run_id=run_id, component="VerificationPipeline")
        started = self._clock()

        metrics: dict[str, Any] = {
            "run_id": run_id,
            "articles_scanned": 0,
            "facts_extracted": 0,
            "new_facts_registered": 0,
            "facts_verified": 0,
            "facts_flagged_outdated": 0,
            "errors": [],
            "stopped_early": False,
        }

        log.info("verification_run_started")

        # Extract and register
        for article in articles:
            if not article.published:
                continue
            extracted = extract_facts(article.content)
            metrics["articles_scanned"] += 1
            metrics["facts_extracted"] += len(extracted)
            created = await self.fact_store.register_facts(
                extracted,
                article_slug=article.slug,
                article_type=article.article_type,
                now=now,
            )
            metrics["new_facts_registered"] += len(created)

        log.info(
            "facts_registered",
            articles=metrics["articles_scanned"],
            extracted=metrics["facts_extracted"],
            registered=metrics["new_facts_registered"],
        )

        # Verify due facts
        due = await self.fact_store.get_due_facts(now=now, limit=self.facts_per_run)
        log.info("due_facts_loaded", count=len(due))

        verifier = self._get_verifier()
        last_pause_at = 0
        for entry in due:
            verified = metrics["facts_verified"]
            if verified and verified % self.pause_every == 0 and verified != last_pause_at:
                last_pause_at = verified
                await asyncio.sleep(self.pause_seconds)

            if self._clock() - started > self.run_time_budget:
                metrics["stopped_early"] = True
                log.warning("time_budget_exhausted", remaining=len(due) - verified)
                break

            try:
                result = await verifier.verify(entry.to_fact(), now=now)
                await self.fact_store.apply_result(entry.id, result, now=now)
            except Exception as e:
                log.error("fact_verification_failed", fact_id=entry.id, error=str(e))
                metrics["errors"].append(f"Verify error ({entry.id}): {e}")
                continue

            metrics["facts_verified"] += 1
            if result.result in _FLAGGED_OUTCOMES:
                metrics["facts_flagged_outdated"] += 1

        metrics["duration_ms"] = int((self._clock() - started) * 1000)
        log.info(
            "verification_run_complete",
            verified=metrics["facts_verified"],
            flagged=metrics["facts_flagged_outdated"],
            errors=len(metrics["errors"]),
            duration_ms=metrics["duration_ms"],
        )
        return metrics
