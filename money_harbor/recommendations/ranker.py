"""
Recommendation ranker: scores the whole catalog, tags each option with a
coarse category, and picks a diverse top-3.

Usage flow
----------
1. score_catalog(catalog, preferences, rng)
   -> list[CategorizedScore]  (one per catalog entry, jitter applied)

2. select_diverse(candidates, n=3)
   -> list[CategorizedScore]  (category-diverse first, then by score)

``get_top_recommendations()`` runs both steps and strips the category tag.

Jitter
------
Each option receives an independent uniform draw from
``[-jitter_points, +jitter_points]`` (default ±5) so that repeated identical
queries do not always return the identical ordering.  Pass a seeded
``random.Random`` for reproducible results; otherwise a fresh generator is
created per call, so concurrent callers never share generator state.

Diversity
---------
Pure score ranking tends to return three near-identical instruments (e.g.
three index funds).  The first pass accepts at most one option per category;
a second pass fills any remaining slots purely by score when the catalog has
fewer than ``n`` categories.
"""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass
from typing import Callable, Sequence

from money_harbor.models.investment import (
    InvestmentOption,
    ScoredInvestment,
    UserPreferences,
)
from money_harbor.recommendations.scorer import build_match_reason, compute_score
from money_harbor.taxonomy.investment_taxonomy import InvestmentCategory

logger = logging.getLogger(__name__)

DEFAULT_TOP_N = 3
DEFAULT_JITTER_POINTS = 5.0


# ── Category classification ───────────────────────────────────────────────────

def _name_contains(*terms: str) -> Callable[[str], bool]:
    return lambda name: any(term in name for term in terms)


# Evaluated in order; the first matching rule wins.
_CATEGORY_RULES: list[tuple[Callable[[str], bool], InvestmentCategory]] = [
    (_name_contains("s&p", "nasdaq", "index", "global", "מדד", "גלובלי"),
     InvestmentCategory.INDEX_FUNDS),
    (_name_contains("bond", "treasury", "t-bill", "אג״ח", "מק״מ"),
     InvestmentCategory.BONDS),
    (_name_contains("real estate", "reit", "נדל״ן"),
     InvestmentCategory.REAL_ESTATE),
    (_name_contains("p2p", "peer-to-peer", "lending", "loans", "הלוואות"),
     InvestmentCategory.LENDING),
    (_name_contains("bitcoin", "crypto", "ביטקוין", "קריפטו"),
     InvestmentCategory.CRYPTO),
    (_name_contains("dividend", "דיבידנד"),
     InvestmentCategory.DIVIDEND_STOCKS),
    (_name_contains("savings", "deposit", "חיסכון", "פיקדון"),
     InvestmentCategory.SAVINGS),
]


def classify_category(option: InvestmentOption) -> InvestmentCategory:
    """Return the coarse category of ``option`` from keywords in its name.

    Matching is case-insensitive substring search; ``OTHER`` when no rule hits.
    """
    name = option.name.lower()
    for predicate, category in _CATEGORY_RULES:
        if predicate(name):
            return category
    return InvestmentCategory.OTHER


# ── Scoring ───────────────────────────────────────────────────────────────────

@dataclass
class CategorizedScore:
    """Internal pairing of a scored record with its diversity category.

    Attributes:
        investment: The scored record returned to callers.
        category:   Category from ``classify_category()``; never exposed.
        base_score: Score before jitter.
    """

    investment: ScoredInvestment
    category:   InvestmentCategory
    base_score: float

    @property
    def score(self) -> float:
        return self.investment.score


def score_catalog(
    catalog:       Sequence[InvestmentOption],
    preferences:   UserPreferences,
    rng:           random.Random | None = None,
    jitter_points: float = DEFAULT_JITTER_POINTS,
) -> list[CategorizedScore]:
    """Score, jitter and categorize every catalog entry.

    Args:
        catalog:       Catalog snapshot (not modified).
        preferences:   The user's preferences.
        rng:           Random source for jitter; a fresh one when ``None``.
        jitter_points: Half-width of the uniform jitter interval.

    Returns:
        One CategorizedScore per catalog entry, in catalog order.
    """
    rng = rng or random.Random()
    scored: list[CategorizedScore] = []

    for option in catalog:
        components = compute_score(option, preferences)
        jitter = rng.uniform(-jitter_points, jitter_points)
        scored.append(
            CategorizedScore(
                investment=ScoredInvestment.from_option(
                    option,
                    score=components.total + jitter,
                    match_reason=build_match_reason(components.reasons),
                ),
                category=classify_category(option),
                base_score=components.total,
            )
        )

    return scored


# ── Selection ─────────────────────────────────────────────────────────────────

def select_diverse(
    candidates: list[CategorizedScore],
    n:          int = DEFAULT_TOP_N,
) -> list[CategorizedScore]:
    """Pick up to ``n`` candidates, preferring one per category.

    Candidates are ranked by score descending (stable on ties).  The first
    pass takes the best candidate of each unseen category; the second pass
    tops up with the best remaining candidates regardless of category.

    Returns:
        ``min(n, len(candidates))`` distinct candidates in selection order.
    """
    ranked = sorted(candidates, key=lambda c: -c.score)
    selected: list[CategorizedScore] = []
    selected_ids: set[int] = set()
    seen_categories: set[InvestmentCategory] = set()

    for cand in ranked:
        if len(selected) >= n:
            break
        if cand.category not in seen_categories:
            selected.append(cand)
            selected_ids.add(id(cand))
            seen_categories.add(cand.category)

    if len(selected) < n:
        for cand in ranked:
            if len(selected) >= n:
                break
            if id(cand) not in selected_ids:
                selected.append(cand)
                selected_ids.add(id(cand))

    return selected


def get_top_recommendations(
    catalog:       Sequence[InvestmentOption],
    preferences:   UserPreferences,
    n:             int = DEFAULT_TOP_N,
    rng:           random.Random | None = None,
    jitter_points: float = DEFAULT_JITTER_POINTS,
) -> list[ScoredInvestment]:
    """Return the top ``n`` (default 3) category-diverse recommendations.

    Never raises for a well-formed catalog; an empty catalog yields ``[]``.

    Args:
        catalog:       Catalog snapshot.
        preferences:   The user's preferences.
        n:             Number of recommendations to return.
        rng:           Optional seeded random source for the jitter.
        jitter_points: Half-width of the jitter interval.

    Returns:
        Up to ``n`` ScoredInvestment records with distinct ids.
    """
    candidates = score_catalog(catalog, preferences, rng=rng, jitter_points=jitter_points)
    selected = select_diverse(candidates, n=n)

    logger.debug(
        "Selected %d of %d options: %s",
        len(selected),
        len(candidates),
        ", ".join(f"{c.investment.id}[{c.category}]={c.score:.1f}" for c in selected),
    )
    return [c.investment for c in selected]
