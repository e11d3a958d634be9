"""
Tests for money_harbor/recommendations/ranker.py.

What we test
------------
classify_category():
  - English and Hebrew keywords map to the right category.
  - First matching rule wins; unmatched names are OTHER.
  - Case-insensitive.

score_catalog():
  - One entry per catalog option, jitter bounded by +/- jitter_points.
  - Zero jitter gives the raw criterion total.
  - Seeded RNG -> identical scores across calls.
  - Catalog is not mutated.

select_diverse():
  - One per category first, then top-up by score.
  - Never returns duplicates; returns min(n, len(candidates)).

get_top_recommendations():
  - Worked three-option scenario (bonds / index fund / crypto).
  - Catalog smaller than 3 and empty catalog.
  - Category diversity on the shared sample catalog.
"""

from __future__ import annotations

import random

import pytest

from money_harbor.models.investment import InvestmentOption, UserPreferences
from money_harbor.recommendations.ranker import (
    CategorizedScore,
    classify_category,
    get_top_recommendations,
    score_catalog,
    select_diverse,
)
from money_harbor.taxonomy.investment_taxonomy import InvestmentCategory


def _option(id: str, name: str, **overrides) -> InvestmentOption:
    fields = dict(
        id=id,
        name=name,
        risk_level="medium",
        time_horizon=("medium",),
        liquidity="medium",
    )
    fields.update(overrides)
    return InvestmentOption(**fields)


@pytest.fixture
def scenario_catalog() -> list[InvestmentOption]:
    return [
        _option("a", "Government Bond Fund", min_amount=0),
        _option("b", "S&P 500 Index Fund", min_amount=1_000_000),
        _option("c", "Bitcoin", risk_level="high", time_horizon=("long",), min_amount=0),
    ]


@pytest.fixture
def scenario_prefs() -> UserPreferences:
    return UserPreferences(
        amount=10_000,
        time_horizon="2 years",
        risk_level="medium",
        liquidity="medium",
    )


# ── classify_category ─────────────────────────────────────────────────────────

class TestClassifyCategory:
    @pytest.mark.parametrize("name, expected", [
        ("S&P 500 Index Fund", InvestmentCategory.INDEX_FUNDS),
        ("Nasdaq-100 Tracker ETF", InvestmentCategory.INDEX_FUNDS),
        ("Global Equity Index Fund", InvestmentCategory.INDEX_FUNDS),
        ("קרן מחקה מדד", InvestmentCategory.INDEX_FUNDS),
        ("Corporate Bond Fund", InvestmentCategory.BONDS),
        ("Short-Term Treasury Bills (Makam)", InvestmentCategory.BONDS),
        ("אג״ח ממשלתי", InvestmentCategory.BONDS),
        ("Real Estate REIT Fund", InvestmentCategory.REAL_ESTATE),
        ("P2P Lending Platform", InvestmentCategory.LENDING),
        ("Bitcoin", InvestmentCategory.CRYPTO),
        ("ביטקוין", InvestmentCategory.CRYPTO),
        ("Dividend Aristocrats", InvestmentCategory.DIVIDEND_STOCKS),
        ("Fixed-Term Bank Deposit", InvestmentCategory.SAVINGS),
        ("Gold ETF", InvestmentCategory.OTHER),
    ])
    def test_keywords(self, name, expected):
        assert classify_category(_option("x", name)) == expected

    def test_case_insensitive(self):
        assert classify_category(_option("x", "BITCOIN")) == InvestmentCategory.CRYPTO

    def test_first_rule_wins(self):
        # "index" (index funds) is checked before "bond" (bonds)
        assert classify_category(_option("x", "Bond Index Tracker")) == InvestmentCategory.INDEX_FUNDS

    def test_stable_across_calls(self):
        option = _option("x", "Real Estate REIT Fund")
        assert {classify_category(option) for _ in range(5)} == {InvestmentCategory.REAL_ESTATE}


# ── score_catalog ─────────────────────────────────────────────────────────────

class TestScoreCatalog:
    def test_one_entry_per_option(self, sample_catalog, sample_preferences):
        scored = score_catalog(sample_catalog, sample_preferences, rng=random.Random(1))
        assert [s.investment.id for s in scored] == [o.id for o in sample_catalog]

    def test_jitter_is_bounded(self, sample_catalog, sample_preferences):
        for seed in range(20):
            for cand in score_catalog(sample_catalog, sample_preferences, rng=random.Random(seed)):
                assert abs(cand.score - cand.base_score) <= 5.0

    def test_zero_jitter_is_raw_total(self, scenario_catalog, scenario_prefs):
        scored = score_catalog(scenario_catalog, scenario_prefs, jitter_points=0.0)
        assert [s.score for s in scored] == [95.0, 55.0, 35.0]

    def test_seeded_rng_reproducible(self, sample_catalog, sample_preferences):
        first = score_catalog(sample_catalog, sample_preferences, rng=random.Random(42))
        second = score_catalog(sample_catalog, sample_preferences, rng=random.Random(42))
        assert [c.score for c in first] == [c.score for c in second]

    def test_catalog_not_mutated(self, sample_catalog, sample_preferences):
        before = [o.model_dump() for o in sample_catalog]
        score_catalog(sample_catalog, sample_preferences)
        assert [o.model_dump() for o in sample_catalog] == before

    def test_match_reason_never_empty(self, sample_catalog, sample_preferences):
        for cand in score_catalog(sample_catalog, sample_preferences):
            assert cand.investment.match_reason


# ── select_diverse ────────────────────────────────────────────────────────────

def _cand(id: str, name: str, score: float) -> CategorizedScore:
    from money_harbor.models.investment import ScoredInvestment

    option = _option(id, name)
    return CategorizedScore(
        investment=ScoredInvestment.from_option(option, score=score, match_reason="r"),
        category=classify_category(option),
        base_score=score,
    )


class TestSelectDiverse:
    def test_prefers_distinct_categories(self):
        cands = [
            _cand("i1", "S&P 500 Index Fund", 90),
            _cand("i2", "Nasdaq Index", 89),
            _cand("b1", "Bond Fund", 50),
            _cand("c1", "Bitcoin", 10),
        ]
        chosen = [c.investment.id for c in select_diverse(cands, n=3)]
        assert chosen == ["i1", "b1", "c1"]

    def test_tops_up_when_too_few_categories(self):
        cands = [
            _cand("i1", "S&P 500 Index Fund", 90),
            _cand("i2", "Nasdaq Index", 80),
            _cand("i3", "Global Index", 70),
            _cand("b1", "Bond Fund", 60),
        ]
        chosen = [c.investment.id for c in select_diverse(cands, n=3)]
        assert chosen == ["i1", "b1", "i2"]

    def test_no_duplicates_and_size(self):
        cands = [_cand(f"i{k}", "Index Fund", 50 + k) for k in range(5)]
        chosen = select_diverse(cands, n=3)
        assert len(chosen) == 3
        assert len({c.investment.id for c in chosen}) == 3

    def test_fewer_candidates_than_n(self):
        assert len(select_diverse([_cand("a", "Bitcoin", 1)], n=3)) == 1

    def test_empty(self):
        assert select_diverse([], n=3) == []


# ── get_top_recommendations ───────────────────────────────────────────────────

class TestGetTopRecommendations:
    def test_worked_scenario(self, scenario_catalog, scenario_prefs):
        for seed in range(10):
            recs = get_top_recommendations(
                scenario_catalog, scenario_prefs, rng=random.Random(seed)
            )
            assert [r.id for r in recs] == ["a", "b", "c"]

    def test_worked_scenario_reasons(self, scenario_catalog, scenario_prefs):
        recs = {r.id: r for r in get_top_recommendations(scenario_catalog, scenario_prefs)}
        assert "Requires a minimum initial amount of ₪1,000,000" in recs["b"].match_reason
        assert "Matches your preferred risk level (medium)" in recs["a"].match_reason
        assert "Fits your chosen time horizon" not in recs["c"].match_reason

    def test_returns_three_distinct_categories(self, sample_catalog, sample_preferences):
        recs = get_top_recommendations(sample_catalog, sample_preferences, rng=random.Random(7))
        assert len(recs) == 3
        assert len({classify_category(r) for r in recs}) == 3

    def test_small_catalog(self, scenario_prefs):
        catalog = [_option("only", "Bitcoin")]
        recs = get_top_recommendations(catalog, scenario_prefs)
        assert [r.id for r in recs] == ["only"]

    def test_empty_catalog(self, scenario_prefs):
        assert get_top_recommendations([], scenario_prefs) == []

    def test_custom_n(self, sample_catalog, sample_preferences):
        assert len(get_top_recommendations(sample_catalog, sample_preferences, n=5)) == 5
