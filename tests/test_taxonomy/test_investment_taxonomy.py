"""Tests for investment taxonomy integrity — enums, ordinals, UI label tables."""

from __future__ import annotations

import pytest

from money_harbor.taxonomy.investment_taxonomy import (
    LIQUIDITY_LABELS,
    TIME_HORIZON_LABELS,
    InvestmentCategory,
    KnowledgeLevel,
    Liquidity,
    RiskLevel,
    TimeHorizon,
    ordinal,
)


class TestEnums:
    @pytest.mark.parametrize("enum_cls", [RiskLevel, TimeHorizon, Liquidity, KnowledgeLevel])
    def test_three_point_scales(self, enum_cls):
        assert len(list(enum_cls)) == 3

    def test_no_duplicate_category_values(self):
        values = [m.value for m in InvestmentCategory]
        assert len(values) == len(set(values))

    def test_other_category_present(self):
        assert InvestmentCategory.OTHER == "other"

    def test_values_are_wire_strings(self):
        assert RiskLevel("medium") is RiskLevel.MEDIUM
        assert f"{Liquidity.HIGH}" == "high"


class TestOrdinal:
    @pytest.mark.parametrize("value, expected", [
        (RiskLevel.LOW, 0),
        (RiskLevel.MEDIUM, 1),
        (RiskLevel.HIGH, 2),
        (TimeHorizon.SHORT, 0),
        (TimeHorizon.LONG, 2),
        (Liquidity.LOW, 0),
        (Liquidity.HIGH, 2),
    ])
    def test_positions(self, value, expected):
        assert ordinal(value) == expected


class TestLabelTables:
    def test_horizon_labels_cover_one_to_seven_plus(self):
        assert list(TIME_HORIZON_LABELS) == [
            "1 year", "2 years", "3 years", "4 years", "5 years", "6 years", "7+ years",
        ]

    def test_horizon_labels_hit_every_bucket(self):
        assert set(TIME_HORIZON_LABELS.values()) == set(TimeHorizon)

    def test_liquidity_labels_hit_every_level(self):
        assert set(LIQUIDITY_LABELS.values()) == set(Liquidity)
