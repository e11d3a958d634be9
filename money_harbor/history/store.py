"""
Search history storage for the "My Harbor" view.

Every recommendation request is saved as a ``SearchBatch`` (newest first)
together with the preferences that produced it, so later report requests
can reuse the last search.  Users mark each batch with what they did:

    not_invested     -> counts 0 investments
    invested_in_one  -> counts 1
    combined         -> counts ``recommendations_count`` (2 when unset)

Storage is injected behind the ``SearchHistoryStore`` protocol:

- ``InMemoryHistoryStore``  — process-local; used in tests and the dashboard
                              session.
- ``JsonFileHistoryStore``  — persists to one JSON file; used by the CLI.

``summarize_history()`` is a pure function over a batch list.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Optional, Protocol, Sequence

from money_harbor.models.history import DEFAULT_STATUS_COUNTS, BatchStatus, SearchBatch
from money_harbor.models.investment import ScoredInvestment, UserPreferences

logger = logging.getLogger(__name__)

MAX_BATCH_RECOMMENDATIONS = 3


# ── Batch construction ────────────────────────────────────────────────────────

def new_batch(
    preferences: UserPreferences,
    recommendations: Sequence[ScoredInvestment],
    now: Optional[datetime] = None,
) -> SearchBatch:
    """Build a fresh ``not_invested`` batch from one recommendation request.

    The id is ``batch-<epoch-ms>`` of ``now`` (UTC now when omitted).
    """
    now = now or datetime.now(timezone.utc)
    return SearchBatch(
        batch_id=f"batch-{int(now.timestamp() * 1000)}",
        amount=preferences.amount,
        time_horizon=preferences.time_horizon,
        risk_level=str(preferences.risk_level),
        knowledge_level=(
            str(preferences.knowledge_level) if preferences.knowledge_level else None
        ),
        additional_notes=preferences.additional_notes,
        recommendations=tuple(recommendations[:MAX_BATCH_RECOMMENDATIONS]),
        created_at=now,
    )


def _with_status(batch: SearchBatch, status: BatchStatus, count: Optional[int]) -> SearchBatch:
    # A zero or missing count falls back to the status default.
    resolved = count or DEFAULT_STATUS_COUNTS[status]
    return SearchBatch.model_validate(
        {**batch.model_dump(), "status": status, "recommendations_count": resolved}
    )


# ── Storage interface ─────────────────────────────────────────────────────────

class SearchHistoryStore(Protocol):
    """Storage for search batches and the last submitted preferences."""

    def save_batch(
        self,
        batch: SearchBatch,
        preferences: Optional[UserPreferences] = None,
    ) -> None: ...

    def list_batches(self) -> list[SearchBatch]: ...

    def update_status(
        self,
        batch_id: str,
        status: BatchStatus,
        count: Optional[int] = None,
    ) -> SearchBatch: ...

    def last_preferences(self) -> Optional[UserPreferences]: ...


class InMemoryHistoryStore:
    """Process-local history store."""

    def __init__(self) -> None:
        self._batches: list[SearchBatch] = []
        self._last_preferences: Optional[UserPreferences] = None

    def save_batch(
        self,
        batch: SearchBatch,
        preferences: Optional[UserPreferences] = None,
    ) -> None:
        """Insert ``batch`` at the front, replacing any batch with the same id."""
        self._batches = [b for b in self._batches if b.batch_id != batch.batch_id]
        self._batches.insert(0, batch)
        if preferences is not None:
            self._last_preferences = preferences
        self._persist()

    def list_batches(self) -> list[SearchBatch]:
        """Return all batches, newest first."""
        return list(self._batches)

    def update_status(
        self,
        batch_id: str,
        status: BatchStatus,
        count: Optional[int] = None,
    ) -> SearchBatch:
        """Set the status of one batch.

        Raises:
            KeyError: If no batch has ``batch_id``.
        """
        for i, batch in enumerate(self._batches):
            if batch.batch_id == batch_id:
                updated = _with_status(batch, status, count)
                self._batches[i] = updated
                self._persist()
                logger.debug("Batch %s -> %s (%d)", batch_id, status, updated.recommendations_count)
                return updated
        raise KeyError(f"No search batch with id '{batch_id}'.")

    def last_preferences(self) -> Optional[UserPreferences]:
        return self._last_preferences

    def _persist(self) -> None:
        """Hook for durable subclasses; in-memory storage has nothing to do."""


class JsonFileHistoryStore(InMemoryHistoryStore):
    """History store backed by a single JSON file.

    File layout::

        {"batches": [...newest first...], "lastPreferences": {...} | null}

    The file is rewritten after every mutation.  A missing file is an empty
    history; a corrupt file raises ``ValueError`` on construction.
    """

    def __init__(self, path: Path) -> None:
        super().__init__()
        self.path = Path(path)
        self._load()

    def _load(self) -> None:
        if not self.path.exists():
            return
        try:
            raw: dict[str, Any] = json.loads(self.path.read_text(encoding="utf-8"))
            self._batches = [SearchBatch.model_validate(b) for b in raw.get("batches", [])]
            prefs = raw.get("lastPreferences")
            self._last_preferences = (
                UserPreferences.model_validate(prefs) if prefs is not None else None
            )
        except (json.JSONDecodeError, AttributeError) as exc:
            raise ValueError(f"History file {self.path} is corrupt: {exc}") from exc
        logger.debug("Loaded %d search batches from %s", len(self._batches), self.path)

    def _persist(self) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        payload = {
            "batches": [b.model_dump(mode="json") for b in self._batches],
            "lastPreferences": (
                self._last_preferences.model_dump(mode="json", by_alias=True)
                if self._last_preferences is not None
                else None
            ),
        }
        self.path.write_text(
            json.dumps(payload, indent=2, ensure_ascii=False), encoding="utf-8"
        )


# ── Summary ───────────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class HistorySummary:
    """Progress numbers shown at the top of "My Harbor".

    Attributes:
        total_queries:     Number of saved batches.
        total_investments: Investments implied by the batch statuses.
        percentage:        ``100 * investments / queries`` rounded half-up; 0 when empty.
        message:           Encouragement line; empty when there is no history.
    """

    total_queries: int
    total_investments: int
    percentage: int
    message: str


def _progress_message(total_queries: int, percentage: int) -> str:
    if total_queries == 0:
        return ""
    if percentage >= 100:
        return "Well done - every recommendation found its mooring"
    if percentage >= 75:
        return "Excellent progress - most recommendations were acted on"
    if percentage >= 50:
        return "Making good headway - halfway there"
    if percentage > 0:
        return "A good start - there is more potential"
    return "No investments made from the recommendations yet"


def count_investments(batch: SearchBatch) -> int:
    if batch.status == BatchStatus.INVESTED_IN_ONE:
        return 1
    if batch.status == BatchStatus.COMBINED:
        return batch.recommendations_count or DEFAULT_STATUS_COUNTS[BatchStatus.COMBINED]
    return 0


def summarize_history(batches: Sequence[SearchBatch]) -> HistorySummary:
    """Compute the progress summary for ``batches``."""
    total_queries = len(batches)
    total_investments = sum(count_investments(b) for b in batches)
    # Half-up rounding, so 12.5% shows as 13%
    percentage = int(total_investments * 100 / total_queries + 0.5) if total_queries else 0
    return HistorySummary(
        total_queries=total_queries,
        total_investments=total_investments,
        percentage=percentage,
        message=_progress_message(total_queries, percentage),
    )
