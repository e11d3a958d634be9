"""
Search-history models for the "My Harbor" view.

Every recommendation request is saved as a ``SearchBatch``: the preferences
that were submitted plus the (up to three) recommendations that came back.
The user later marks whether they acted on the batch.
"""

from __future__ import annotations

from datetime import datetime, timezone
from enum import StrEnum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from money_harbor.models.investment import ScoredInvestment


class BatchStatus(StrEnum):
    """What the user did with a batch of recommendations."""

    NOT_INVESTED = "not_invested"
    INVESTED_IN_ONE = "invested_in_one"
    COMBINED = "combined"
    """Invested in more than one option from the batch."""


# Number of investments implied by a status when no explicit count is given.
DEFAULT_STATUS_COUNTS: dict[BatchStatus, int] = {
    BatchStatus.NOT_INVESTED:    0,
    BatchStatus.INVESTED_IN_ONE: 1,
    BatchStatus.COMBINED:        2,
}


class SearchBatch(BaseModel):
    """One saved search with its recommendations.

    Attributes:
        batch_id:              ``"batch-<epoch-ms>"``.
        amount:                Amount searched for.
        time_horizon:          Horizon UI label.
        risk_level:            Risk preference.
        knowledge_level:       Optional knowledge tier.
        additional_notes:      Optional free text.
        recommendations_count: How many of the recommendations were acted on (0-3).
        recommendations:       Full recommendation records (at most three).
        status:                ``BatchStatus``.
        created_at:            UTC creation time.
    """

    model_config = ConfigDict(frozen=True)

    batch_id: str
    amount: float
    time_horizon: str
    risk_level: str
    knowledge_level: Optional[str] = None
    additional_notes: Optional[str] = None
    recommendations_count: int = Field(default=0, ge=0, le=3)
    recommendations: tuple[ScoredInvestment, ...] = ()
    status: BatchStatus = BatchStatus.NOT_INVESTED
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    @field_validator("recommendations")
    @classmethod
    def validate_at_most_three(
        cls, v: tuple[ScoredInvestment, ...]
    ) -> tuple[ScoredInvestment, ...]:
        return v[:3]
