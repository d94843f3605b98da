"""Fact storage for extracted destination facts and their verification history.

Features:
- In-memory storage with optional JSON persistence
- De-duplication on article slug + fact text
- Due-fact queue ordered by verification count, then next check time
- Verification results applied with status mapping and recheck scheduling
- Thread-safe operations with asyncio locks
"""

import asyncio
import json
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Dict, Iterable, List, Literal, Optional

from loguru import logger

from factcheck_system.data_management.schemas import (
    ExtractedFact,
    FactEntry,
    FactStatus,
    VerificationLogEntry,
    VerificationOutcome,
    WebVerificationResult,
)

INITIAL_CHECK_DAYS = 7
DEFAULT_DUE_LIMIT = 30

# Outcomes that replace the stored status; UNVERIFIABLE keeps it for a retry
_STATUS_FOR_OUTCOME = {
    VerificationOutcome.VERIFIED: FactStatus.VERIFIED,
    VerificationOutcome.OUTDATED: FactStatus.OUTDATED,
    VerificationOutcome.FLAGGED_FOR_REVIEW: FactStatus.FLAGGED_FOR_REVIEW,
}


def next_check_days(confidence: int) -> int:
    """Days until the next recheck: 14 at confidence >= 70, 7 at >= 50, else 3."""
    if confidence >= 70:
        return 14
    if confidence >= 50:
        return 7
    return 3


def _aware(value: datetime) -> datetime:
    return value if value.tzinfo else value.replace(tzinfo=timezone.utc)


class FactStore:
    """
    Storage adapter for FactEntry records.

    Memory-only unless a persistence path is given, in which case every
    mutation is written back to a JSON list of entries.

    Indexes:
    - _entries: fact id -> FactEntry
    - _key_index: "slug::text" -> fact id for registration dedup
    """

    def __init__(self, persistence_path: Optional[str] = None):
        """
        Initialize fact store.

        Args:
            persistence_path: Optional path to JSON file for persistence.
                            If None, storage is memory-only.
        """
        self._entries: Dict[str, FactEntry] = {}
        self._key_index: Dict[str, str] = {}
        self._lock = asyncio.Lock()

        self.persistence_path = Path(persistence_path) if persistence_path else None
        self.logger = logger.bind(component="FactStore")

        if self.persistence_path:
            self._load_from_file()

        self.logger.info(
            "FactStore initialized",
            persistence=bool(self.persistence_path),
            facts=len(self._entries),
        )

    async def register_facts(
        self,
        facts: Iterable[ExtractedFact],
        article_slug: str,
        article_type: Literal["blog", "information"],
        now: Optional[datetime] = None,
    ) -> List[FactEntry]:
        """
        Register newly extracted facts for an article.

        Facts whose slug + text is already stored are skipped. New entries
        start pending with confidence 0 and a first check a week out.

        Args:
            facts: Facts extracted from the article
            article_slug: Article slug
            article_type: "blog" or "information"
            now: Registration time (defaults to current UTC time)

        Returns:
            The newly created entries
        """
        now = now or datetime.now(timezone.utc)
        created: List[FactEntry] = []

        async with self._lock:
            for fact in facts:
                key = f"{article_slug}::{fact.text}"
                if key in self._key_index:
                    continue

                entry = FactEntry(
                    article_type=article_type,
                    article_slug=article_slug,
                    fact_text=fact.text,
                    fact_location=fact.location,
                    category=fact.category,
                    status=FactStatus.PENDING,
                    confidence_score=0,
                    created_at=now,
                    next_check_at=now + timedelta(days=INITIAL_CHECK_DAYS),
                )
                self._entries[entry.id] = entry
                self._key_index[key] = entry.id
                created.append(entry)

            if created:
                self._save_to_file()

        if created:
            self.logger.info(
                f"Registered {len(created)} facts",
                article_slug=article_slug,
            )
        return created

    async def get_due_facts(
        self,
        now: Optional[datetime] = None,
        limit: int = DEFAULT_DUE_LIMIT,
    ) -> List[FactEntry]:
        """
        Facts that are pending or whose next check has passed.

        Never-verified facts come first, then the longest overdue.

        Args:
            now: Reference time (defaults to current UTC time)
            limit: Maximum facts returned

        Returns:
            Due entries in verification order
        """
        now = _aware(now or datetime.now(timezone.utc))
        far_future = datetime.max.replace(tzinfo=timezone.utc)

        async with self._lock:
            due = [
                entry
                for entry in self._entries.values()
                if entry.status == FactStatus.PENDING
                or (entry.next_check_at is not None and _aware(entry.next_check_at) <= now)
            ]

        due.sort(
            key=lambda e: (
                e.verification_count,
                _aware(e.next_check_at) if e.next_check_at else far_future,
            )
        )
        return due[:limit]

    async def apply_result(
        self,
        fact_id: str,
        result: WebVerificationResult,
        now: Optional[datetime] = None,
    ) -> Optional[FactEntry]:
        """
        Record a verification result against a stored fact.

        Args:
            fact_id: Fact to update
            result: Web verification result
            now: Verification time (defaults to current UTC time)

        Returns:
            Updated entry, or None if the fact is unknown
        """
        now = now or datetime.now(timezone.utc)

        async with self._lock:
            entry = self._entries.get(fact_id)
            if entry is None:
                self.logger.warning(f"Fact {fact_id} not found, result discarded")
                return None

            log_entry = VerificationLogEntry(
                date=now,
                source=result.source,
                result=result.result.value,
                notes=result.notes,
            )
            updated = entry.model_copy(
                update={
                    "status": _STATUS_FOR_OUTCOME.get(result.result, entry.status),
                    "confidence_score": result.confidence,
                    "last_verified_at": now,
                    "next_check_at": now + timedelta(days=next_check_days(result.confidence)),
                    "verification_count": entry.verification_count + 1,
                    "verification_log": [*entry.verification_log, log_entry],
                    "agent_notes": result.notes,
                }
            )
            self._entries[fact_id] = updated
            self._save_to_file()

        self.logger.debug(
            f"Applied {result.result.value} to {fact_id}",
            confidence=result.confidence,
        )
        return updated

    async def get_fact(self, fact_id: str) -> Optional[FactEntry]:
        async with self._lock:
            return self._entries.get(fact_id)

    async def get_all(self) -> List[FactEntry]:
        async with self._lock:
            return list(self._entries.values())

    async def get_stats(self) -> Dict[str, int]:
        """Fact counts per status plus the total."""
        async with self._lock:
            stats = {status.value: 0 for status in FactStatus}
            for entry in self._entries.values():
                stats[entry.status.value] += 1
            stats["total"] = len(self._entries)
        return stats

    def _save_to_file(self) -> None:
        """Save current storage to JSON file (synchronous)."""
        if not self.persistence_path:
            return

        try:
            self.persistence_path.parent.mkdir(parents=True, exist_ok=True)
            data = [entry.model_dump(mode="json") for entry in self._entries.values()]
            with open(self.persistence_path, "w") as f:
                json.dump(data, f, indent=2)

            self.logger.debug(f"Persisted to {self.persistence_path}")

        except Exception as e:
            self.logger.error(f"Failed to persist to file: {e}", exc_info=True)

    def _load_from_file(self) -> None:
        """Load storage from JSON file and rebuild the dedup index (synchronous)."""
        if not self.persistence_path or not self.persistence_path.exists():
            return

        try:
            with open(self.persistence_path, "r") as f:
                data = json.load(f)

            entries = [FactEntry.model_validate(item) for item in data]
            self._entries = {entry.id: entry for entry in entries}
            self._key_index = {entry.dedup_key: entry.id for entry in entries}

            self.logger.info(
                f"Loaded from {self.persistence_path}",
                facts=len(self._entries),
            )

        except Exception as e:
            self.logger.error(f"Failed to load from file: {e}", exc_info=True)
            self._entries = {}
            self._key_index = {}
