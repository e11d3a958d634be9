"""
Market news briefing: 5-7 short items on what is moving Israeli and global
markets, generated by the LLM.

The briefing page must always render, so ``generate_briefing()`` never
raises: without a client, or on any API or parsing failure, it returns the
demo placeholder with ``is_demo=True`` and the error message recorded.
"""

from __future__ import annotations

import logging
from typing import Optional

import httpx

from money_harbor.clients.llm_client import LLMClient, LLMResponseError
from money_harbor.models.report import NewsBriefing, NewsItem

logger = logging.getLogger(__name__)

NEWS_TEMPERATURE = 0.8
NEWS_MAX_TOKENS = 1500

NEWS_SYSTEM_PROMPT = """You are an expert financial journalist who knows the Israeli
and global markets well.

Write a professional briefing of the 5-7 hottest topics in investing and the
economy right now, focused on the Israeli market but including relevant
global trends. Target passive investors in Israel.

For each topic include:
- a short, engaging title (10-15 words)
- a 2-3 sentence summary of what is happening and why it matters
- whether the impact is positive, negative or neutral

Return ONLY JSON:
{
  "briefing": [
    {
      "title": "...",
      "summary": "...",
      "impact": "positive" | "negative" | "neutral",
      "category": "israel" | "global" | "currencies" | "stocks" | "bonds" | "real-estate"
    }
  ]
}
"""

NEWS_USER_PROMPT = "Write an up-to-date news briefing for the Israeli and global investment markets."

DEMO_ITEMS: tuple[NewsItem, ...] = (
    NewsItem(
        title="News page under construction",
        summary=(
            "We are working on bringing real-time updates from the Israeli and "
            "global financial markets. Daily analyses and summaries are coming soon."
        ),
        impact="neutral",
        category="update",
    ),
)


def demo_briefing(error: Optional[str] = None) -> NewsBriefing:
    """Return the placeholder briefing shown when the LLM is unavailable."""
    return NewsBriefing(items=DEMO_ITEMS, is_demo=True, error=error)


def generate_briefing(client: Optional[LLMClient]) -> NewsBriefing:
    """Generate the current news briefing.

    Args:
        client: Configured LLM client, or ``None`` for demo mode.

    Returns:
        A live briefing, or the demo briefing on any failure.
    """
    if client is None:
        logger.info("LLM not configured; returning demo news briefing")
        return demo_briefing()

    try:
        completion = client.complete(
            NEWS_SYSTEM_PROMPT,
            NEWS_USER_PROMPT,
            temperature=NEWS_TEMPERATURE,
            max_tokens=NEWS_MAX_TOKENS,
        )
        data = completion.json()
        raw_items = data.get("briefing")
        if not isinstance(raw_items, list) or not raw_items:
            raise LLMResponseError("LLM answer has no 'briefing' items.")
        items = tuple(NewsItem.model_validate(item) for item in raw_items)
    except (httpx.HTTPError, ValueError) as exc:
        logger.warning("News briefing failed, returning demo content: %s", exc)
        return demo_briefing(error=str(exc))

    logger.info(
        "Generated %d news items (%d tokens)", len(items), completion.total_tokens
    )
    return NewsBriefing(items=items, tokens_used=completion.total_tokens)
