"""
Recommendation scoring: rates how well one catalog entry fits one user's
preferences and explains why.

Score formula (additive, unbounded)
-----------------------------------
    total = horizon_points + risk_points + liquidity_points
            + amount_points + knowledge_points

Criterion table
---------------
    time horizon : bucket in option.time_horizon  +30  else -10
    risk level   : ordinal distance 0 -> +35,  1 -> +15,  2 -> -15
    liquidity    : equal +20;  option >= required +10;  option < required -10
    min amount   : no minimum +10;  amount >= minimum +10;  shortfall -30
    knowledge    : level in option.suitable_for +5  (else 0)

Positive matches (and the amount shortfall) add a reason, collected in the
order above.  Random jitter is *not* applied here — see ``ranker`` — so
``compute_score()`` is a pure, deterministic function.

UI label mapping
----------------
``map_time_horizon()`` and ``map_liquidity()`` translate form labels into the
internal three-level scales.  Both are total: an unknown label maps to
``MEDIUM`` rather than raising, since the form only ever emits known labels.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from money_harbor.models.investment import InvestmentOption, UserPreferences
from money_harbor.taxonomy.investment_taxonomy import (
    LIQUIDITY_LABELS,
    TIME_HORIZON_LABELS,
    Liquidity,
    TimeHorizon,
    ordinal,
)

CURRENCY_SYMBOL = "₪"
FALLBACK_REASON = "Alternative investment option"


# ── UI label mapping ──────────────────────────────────────────────────────────

def map_time_horizon(label: str) -> TimeHorizon:
    """Map a time-horizon UI label to its bucket; unknown labels -> MEDIUM."""
    return TIME_HORIZON_LABELS.get(label, TimeHorizon.MEDIUM)


def map_liquidity(label: str) -> Liquidity:
    """Map a liquidity UI label to the ordinal scale; unknown labels -> MEDIUM."""
    return LIQUIDITY_LABELS.get(label, Liquidity.MEDIUM)


# ── Score components ──────────────────────────────────────────────────────────

@dataclass
class ScoreComponents:
    """Per-criterion points for one (option, preferences) pair.

    Attributes:
        horizon_points:   +30 / -10.
        risk_points:      +35 / +15 / -15.
        liquidity_points: +20 / +10 / -10.
        amount_points:    +10 / -30.
        knowledge_points: +5 / 0.
        reasons:          Human-readable reasons, in criterion order.
    """

    horizon_points:   float
    risk_points:      float
    liquidity_points: float
    amount_points:    float
    knowledge_points: float
    reasons:          list[str] = field(default_factory=list)

    @property
    def total(self) -> float:
        """Unjittered sum of all criteria."""
        return (
            self.horizon_points
            + self.risk_points
            + self.liquidity_points
            + self.amount_points
            + self.knowledge_points
        )


def compute_score(
    option:      InvestmentOption,
    preferences: UserPreferences,
) -> ScoreComponents:
    """Score ``option`` against ``preferences``.

    Args:
        option:      Catalog entry (not modified).
        preferences: The user's submitted preferences.

    Returns:
        ScoreComponents with every criterion populated.
    """
    reasons: list[str] = []

    # ── Time horizon ──────────────────────────────────────────────────────────
    user_horizon = map_time_horizon(preferences.time_horizon)
    if user_horizon in option.time_horizon:
        horizon_points = 30.0
        reasons.append(f"Fits your chosen time horizon ({preferences.time_horizon})")
    else:
        horizon_points = -10.0

    # ── Risk level ────────────────────────────────────────────────────────────
    risk_distance = abs(ordinal(option.risk_level) - ordinal(preferences.risk_level))
    if risk_distance == 0:
        risk_points = 35.0
        reasons.append(f"Matches your preferred risk level ({preferences.risk_level})")
    elif risk_distance == 1:
        risk_points = 15.0
    else:
        risk_points = -15.0

    # ── Liquidity ─────────────────────────────────────────────────────────────
    user_liquidity = map_liquidity(preferences.liquidity)
    if option.liquidity == user_liquidity:
        liquidity_points = 20.0
        reasons.append("Liquidity matches your requirements")
    elif ordinal(option.liquidity) >= ordinal(user_liquidity):
        # More liquid than required is still acceptable
        liquidity_points = 10.0
    else:
        liquidity_points = -10.0

    # ── Minimum amount ────────────────────────────────────────────────────────
    if option.min_amount is None or preferences.amount >= option.min_amount:
        amount_points = 10.0
    else:
        amount_points = -30.0
        reasons.append(
            f"Requires a minimum initial amount of {format_amount(option.min_amount)}"
        )

    # ── Knowledge level ───────────────────────────────────────────────────────
    knowledge_points = 0.0
    if (
        preferences.knowledge_level is not None
        and preferences.knowledge_level in option.suitable_for
    ):
        knowledge_points = 5.0
        reasons.append("Suits your knowledge level")

    return ScoreComponents(
        horizon_points=horizon_points,
        risk_points=risk_points,
        liquidity_points=liquidity_points,
        amount_points=amount_points,
        knowledge_points=knowledge_points,
        reasons=reasons,
    )


def build_match_reason(reasons: list[str]) -> str:
    """Join reasons into the ``match_reason`` string (never empty)."""
    return ", ".join(reasons) or FALLBACK_REASON


# ── Helper ────────────────────────────────────────────────────────────────────

def format_amount(amount: float) -> str:
    """Format a currency amount with thousands separators, e.g. ``₪25,000``."""
    if float(amount).is_integer():
        return f"{CURRENCY_SYMBOL}{int(amount):,}"
    return f"{CURRENCY_SYMBOL}{amount:,.2f}"
