"""
Investment catalog, user preference, and scored recommendation models.

Field names are snake_case in Python and camelCase on the wire
(``riskLevel``, ``minAmount``, ``matchReason`` ...).  Both the rule-based
engine and the LLM recommender emit ``ScoredInvestment`` records, and the
report/email layer consumes them, so the JSON shape must be identical
regardless of which path produced the record.  Serialise with
``model_dump(by_alias=True)``.

All models are frozen: catalog entries are read-only at runtime and scoring
produces new ``ScoredInvestment`` objects rather than mutating inputs.
"""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from money_harbor.taxonomy.investment_taxonomy import (
    KnowledgeLevel,
    Liquidity,
    RiskLevel,
    TimeHorizon,
)


class _WireModel(BaseModel):
    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )


class ActionSteps(_WireModel):
    """How to actually get started with an investment.

    Attributes:
        platforms: Banks, brokers or apps that offer the instrument.
        costs:     Free-text fee summary (management fees, spreads ...).
        steps:     Ordered how-to-start checklist.
    """

    platforms: tuple[str, ...] = ()
    costs: Optional[str] = None
    steps: tuple[str, ...] = ()


class InvestmentOption(_WireModel):
    """A static catalog entry.

    Attributes:
        id:              Stable identifier, e.g. ``"sp500-index"``.
        name:            Display name; also drives category inference.
        description:     Plain-language explanation (pass-through).
        risk_level:      Instrument risk on the three-point scale.
        time_horizon:    Every horizon bucket the instrument fits.
        liquidity:       How quickly the money can be withdrawn.
        min_amount:      Minimum investable amount, or ``None`` for no floor.
        suitable_for:    Knowledge levels the instrument is appropriate for.
        pros, cons:      Pass-through bullet lists.
        expected_return: Indicative annual return in percent (pass-through).
        action_steps:    Platform / cost / how-to metadata (pass-through).
    """

    id: str
    name: str
    description: str = ""
    risk_level: RiskLevel
    time_horizon: tuple[TimeHorizon, ...]
    liquidity: Liquidity
    min_amount: Optional[float] = Field(default=None, ge=0)
    suitable_for: tuple[KnowledgeLevel, ...] = ()
    pros: tuple[str, ...] = ()
    cons: tuple[str, ...] = ()
    expected_return: Optional[float] = None
    action_steps: Optional[ActionSteps] = None

    @field_validator("time_horizon")
    @classmethod
    def validate_time_horizon_not_empty(
        cls, v: tuple[TimeHorizon, ...]
    ) -> tuple[TimeHorizon, ...]:
        if not v:
            raise ValueError("time_horizon must contain at least one bucket.")
        return v

    @field_validator("id", "name")
    @classmethod
    def validate_not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("id and name must not be blank.")
        return v


class UserPreferences(_WireModel):
    """One recommendation request, as submitted by the input form.

    ``time_horizon`` and ``liquidity`` carry the raw UI labels; they are mapped
    to internal buckets during scoring, with unknown labels treated as medium.

    Attributes:
        amount:           Investment size; must be positive.
        time_horizon:     UI label such as ``"3 years"`` or ``"7+ years"``.
        risk_level:       Preferred risk on the three-point scale.
        liquidity:        UI liquidity label.
        knowledge_level:  Optional experience tier.
        additional_notes: Free text; only the LLM recommender reads it.
    """

    amount: float = Field(gt=0)
    time_horizon: str
    risk_level: RiskLevel
    liquidity: str
    knowledge_level: Optional[KnowledgeLevel] = None
    additional_notes: Optional[str] = None


class ScoredInvestment(InvestmentOption):
    """An ``InvestmentOption`` with its suitability score and explanation.

    Attributes:
        score:        Suitability score including random jitter.  Unbounded;
                      not stable across calls with identical input.
        match_reason: Comma-joined list of the rules that matched.
    """

    score: float
    match_reason: str

    @classmethod
    def from_option(
        cls,
        option: InvestmentOption,
        score: float,
        match_reason: str,
    ) -> "ScoredInvestment":
        """Copy ``option`` into a new scored record (``option`` is untouched)."""
        return cls.model_validate(
            {**option.model_dump(), "score": score, "match_reason": match_reason}
        )
