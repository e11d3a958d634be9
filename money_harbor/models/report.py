"""
LLM-generated content models: the expanded investment guide and the market
news briefing.

Both are parsed from JSON produced by the chat-completions API, so every
field has a lenient default; a partially filled guide is still renderable.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

NewsImpact = Literal["positive", "negative", "neutral"]


class _LLMModel(BaseModel):
    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )


class GuideAudience(_LLMModel):
    suitable: tuple[str, ...] = ()
    not_suitable: tuple[str, ...] = ()


class GuideReturns(_LLMModel):
    historical: str = ""
    estimated: str = ""
    disclaimer: str = "Past performance does not guarantee future returns."


class InvestmentGuide(_LLMModel):
    """Structured explainer report for one investment (at most ~4 pages)."""

    tldr: tuple[str, ...] = ()
    what_is_it: str = ""
    who_is_it_for: GuideAudience = GuideAudience()
    returns: GuideReturns = GuideReturns()
    risks: tuple[str, ...] = ()
    time_and_liquidity: str = ""
    costs: str = ""
    taxation: str = ""
    how_to_start: tuple[str, ...] = ()
    questions_to_ask: tuple[str, ...] = ()
    summary: tuple[str, ...] = ()
    disclaimer: str = ""


class NewsItem(_LLMModel):
    title: str
    summary: str
    impact: NewsImpact = "neutral"
    category: str = "update"


class NewsBriefing(_LLMModel):
    """A market news briefing.

    Attributes:
        items:        5-7 news items (one placeholder item in demo mode).
        generated_at: UTC time the briefing was produced.
        is_demo:      ``True`` when the LLM was unavailable or failed.
        error:        Failure message when ``is_demo`` is due to an error.
        tokens_used:  Total tokens reported by the API (0 in demo mode).
    """

    items: tuple[NewsItem, ...] = Field(default=(), alias="briefing")
    generated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    is_demo: bool = False
    error: str | None = None
    tokens_used: int = 0
