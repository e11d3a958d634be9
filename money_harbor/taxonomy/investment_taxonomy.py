"""
Investment taxonomy: the three-level ordinal scales shared by catalog entries
and user preferences, plus the coarse category set used for diversity.

Ordinal scales
--------------
``RiskLevel``, ``TimeHorizon`` and ``Liquidity`` are three-point scales.
Their declaration order *is* the ordinal order (low → high, short → long);
``ordinal()`` returns the 0-based position used for distance scoring.

UI vocabulary
-------------
The input form never emits bucket values directly.  It emits one of seven
time-horizon labels and one of three liquidity labels; the lookup tables
below compress those into the internal buckets.  Unknown labels are *not* an
error — the mapping functions in ``recommendations.scorer`` default them to
``MEDIUM``.

This module has NO imports from any other ``money_harbor`` package.
"""

from enum import StrEnum


class RiskLevel(StrEnum):
    """Risk tolerance / instrument risk on a three-point scale."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class TimeHorizon(StrEnum):
    """Internal time-horizon bucket."""

    SHORT = "short"
    """Up to roughly one year."""

    MEDIUM = "medium"
    """Two to three years."""

    LONG = "long"
    """Four years and beyond."""


class Liquidity(StrEnum):
    """How quickly money can be withdrawn without a meaningful penalty."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class KnowledgeLevel(StrEnum):
    """Investor experience tier."""

    BEGINNER = "beginner"
    INTERMEDIATE = "intermediate"
    ADVANCED = "advanced"


class InvestmentCategory(StrEnum):
    """Coarse instrument family.  Drives result diversity only."""

    INDEX_FUNDS = "index-funds"
    BONDS = "bonds"
    REAL_ESTATE = "real-estate"
    LENDING = "lending"
    CRYPTO = "crypto"
    DIVIDEND_STOCKS = "dividend-stocks"
    SAVINGS = "savings"
    OTHER = "other"


def ordinal(value: RiskLevel | TimeHorizon | Liquidity) -> int:
    """Return the 0-based position of ``value`` within its scale."""
    return list(type(value)).index(value)


# ── UI label tables ───────────────────────────────────────────────────────────

TIME_HORIZON_LABELS: dict[str, TimeHorizon] = {
    "1 year":   TimeHorizon.SHORT,
    "2 years":  TimeHorizon.MEDIUM,
    "3 years":  TimeHorizon.MEDIUM,
    "4 years":  TimeHorizon.LONG,
    "5 years":  TimeHorizon.LONG,
    "6 years":  TimeHorizon.LONG,
    "7+ years": TimeHorizon.LONG,
}

LIQUIDITY_LABELS: dict[str, Liquidity] = {
    "High liquidity is important to me":  Liquidity.HIGH,
    "Can lock funds for a medium period":  Liquidity.MEDIUM,
    "High liquidity is not required":      Liquidity.LOW,
}
