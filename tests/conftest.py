"""
Shared pytest fixtures for the MoneyHarbor test suite.

Provides:
  - ``in_memory_db``: A fresh in-memory SQLite connection with the full
    schema applied. Created anew for each test that requests it.
  - Sample domain object factories for use in multiple test modules.
"""

from __future__ import annotations

import sqlite3
from datetime import datetime, timezone
from typing import Generator

import pytest

from money_harbor.db.schema import apply_schema
from money_harbor.models.investment import (
    ActionSteps,
    InvestmentOption,
    ScoredInvestment,
    UserPreferences,
)
from money_harbor.models.lead import Lead


# ── Database fixture ──────────────────────────────────────────────────────────

@pytest.fixture
def in_memory_db() -> Generator[sqlite3.Connection, None, None]:
    """Yield a fresh in-memory SQLite connection with the full schema applied."""
    conn = sqlite3.connect(":memory:")
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA foreign_keys = ON;")
    apply_schema(conn)
    yield conn
    conn.close()


# ── Sample domain object factories ────────────────────────────────────────────

@pytest.fixture
def sample_option() -> InvestmentOption:
    """A valid catalog entry (S&P 500 index fund)."""
    return InvestmentOption(
        id="sp500-index",
        name="S&P 500 Index Fund",
        description="Tracks the 500 largest US companies.",
        risk_level="medium",
        time_horizon=("medium", "long"),
        liquidity="high",
        min_amount=1000,
        suitable_for=("beginner", "intermediate"),
        pros=("Broad diversification", "Low fees"),
        cons=("Currency exposure",),
        expected_return=8.0,
        action_steps=ActionSteps(
            platforms=("Meitav Trade", "IBI", "Bank Leumi"),
            costs="0.1%-0.3% annual management fee",
            steps=("Open a trading account", "Buy the fund"),
        ),
    )


@pytest.fixture
def sample_catalog(sample_option: InvestmentOption) -> list[InvestmentOption]:
    """A small catalog spanning five categories."""
    return [
        sample_option,
        InvestmentOption(
            id="gov-bonds",
            name="Government Bond Fund",
            risk_level="low",
            time_horizon=("short", "medium"),
            liquidity="high",
            min_amount=500,
            suitable_for=("beginner",),
        ),
        InvestmentOption(
            id="nasdaq-etf",
            name="Nasdaq-100 Tracker ETF",
            risk_level="high",
            time_horizon=("long",),
            liquidity="high",
            min_amount=1000,
            suitable_for=("intermediate", "advanced"),
        ),
        InvestmentOption(
            id="savings-account",
            name="High-Yield Savings Account",
            risk_level="low",
            time_horizon=("short",),
            liquidity="high",
            suitable_for=("beginner", "intermediate", "advanced"),
        ),
        InvestmentOption(
            id="bitcoin",
            name="Bitcoin",
            risk_level="high",
            time_horizon=("long",),
            liquidity="high",
            suitable_for=("advanced",),
        ),
        InvestmentOption(
            id="reit",
            name="Real Estate REIT Fund",
            risk_level="medium",
            time_horizon=("long",),
            liquidity="medium",
            min_amount=5000,
            suitable_for=("intermediate",),
        ),
    ]


@pytest.fixture
def sample_preferences() -> UserPreferences:
    """A medium-risk, five-year, medium-liquidity profile."""
    return UserPreferences(
        amount=50_000,
        time_horizon="5 years",
        risk_level="medium",
        liquidity="Can lock funds for a medium period",
        knowledge_level="intermediate",
    )


@pytest.fixture
def sample_scored(sample_option: InvestmentOption) -> ScoredInvestment:
    """The sample option with a fixed score and reason."""
    return ScoredInvestment.from_option(
        sample_option,
        score=84.3,
        match_reason="Fits your chosen time horizon (5 years)",
    )


@pytest.fixture
def sample_lead() -> Lead:
    """A valid ``Lead`` for testing."""
    return Lead(
        email="dana@example.com",
        full_name="Dana Levi",
        investment_name="S&P 500 Index Fund",
        investment_type="medium",
        amount=50_000,
        time_horizon="5 years",
        risk_level="medium",
        knowledge_level="intermediate",
        additional_notes=None,
        pdf_sent=True,
        sent_at=datetime(2025, 3, 1, 9, 30, 0, tzinfo=timezone.utc),
    )
