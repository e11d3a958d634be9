"""
Investment guide expansion: turns one recommendation into a structured,
plain-language explainer report via the LLM.

The report is deliberately short (it must fit on at most four PDF pages), so
the prompt caps every section at a few sentences.  PDF rendering itself is
out of scope here; callers render ``InvestmentGuide`` however they like.

Older prompt versions returned the report under ``detailedGuide``; both root
keys are accepted.
"""

from __future__ import annotations

import logging
from typing import Any, Optional

from money_harbor.clients.llm_client import LLMClient, LLMResponseError
from money_harbor.models.investment import InvestmentOption
from money_harbor.models.report import InvestmentGuide
from money_harbor.recommendations.scorer import format_amount

logger = logging.getLogger(__name__)

GUIDE_TEMPERATURE = 0.7
GUIDE_MAX_TOKENS = 2000
_ROOT_KEYS = ("report", "detailedGuide")

GUIDE_SYSTEM_PROMPT = """You are an expert financial writer and investment educator.

Write a clear, well-structured investment explainer report for non-expert
retail investors in Israel.

Rules:
- Simple, conversational language a smart 16-year-old can follow.
- Neutral and educational. Do NOT give personal investment advice.
- Never promise returns. Always mention risks, costs and limitations.
- Assume the Israeli tax and regulatory environment.
- Maximum 4 pages: every section is 2-4 sentences, every list 3-5 items.

Return ONLY valid JSON of this shape:
{
  "report": {
    "tldr": ["one sentence", "..."],
    "whatIsIt": "2-3 sentences",
    "whoIsItFor": {"suitable": ["..."], "notSuitable": ["..."]},
    "returns": {"historical": "...", "estimated": "...", "disclaimer": "..."},
    "risks": ["...", "..."],
    "timeAndLiquidity": "2-3 sentences",
    "costs": "2-3 sentences",
    "taxation": "2-3 sentences, ending with 'This is not personal tax advice.'",
    "howToStart": ["step", "..."],
    "questionsToAsk": ["question?", "..."],
    "summary": ["one sentence", "..."],
    "disclaimer": "full disclaimer"
  }
}
"""


def build_guide_prompt(
    investment: InvestmentOption,
    user_amount: Optional[float] = None,
) -> str:
    """Describe ``investment`` (and the user's amount) for the model."""
    lines = [
        "Generate an educational investment report for:",
        "",
        f"Investment: {investment.name}",
        f"Description: {investment.description or 'N/A'}",
        f"Risk level: {investment.risk_level}",
        f"Liquidity: {investment.liquidity}",
        "Min amount: "
        + (format_amount(investment.min_amount) if investment.min_amount else "N/A"),
    ]
    if investment.expected_return is not None:
        lines.append(f"Expected return: {investment.expected_return}%")
    if investment.action_steps is not None:
        if investment.action_steps.platforms:
            lines.append(f"Known platforms: {', '.join(investment.action_steps.platforms)}")
        if investment.action_steps.costs:
            lines.append(f"Cost info: {investment.action_steps.costs}")

    amount = user_amount if user_amount is not None else investment.min_amount
    lines += [
        "",
        "User profile:",
        f"- Amount: {format_amount(amount) if amount else 'N/A'}",
        f"- Time horizon: {', '.join(investment.time_horizon)}",
        f"- Risk tolerance: {investment.risk_level}",
    ]
    return "\n".join(lines)


def parse_guide(data: dict[str, Any]) -> InvestmentGuide:
    """Extract the report object from the model's JSON answer.

    Raises:
        LLMResponseError: If neither ``report`` nor ``detailedGuide`` is an object.
    """
    for key in _ROOT_KEYS:
        body = data.get(key)
        if isinstance(body, dict):
            return InvestmentGuide.model_validate(body)
    raise LLMResponseError(
        f"LLM answer has none of the expected root keys {list(_ROOT_KEYS)}."
    )


def expand_guide(
    investment: InvestmentOption,
    client: LLMClient,
    user_amount: Optional[float] = None,
) -> InvestmentGuide:
    """Generate the explainer report for one investment.

    Args:
        investment:  Catalog entry or scored recommendation.
        client:      Configured LLM client.
        user_amount: Amount from the user's search; defaults to the option minimum.

    Returns:
        The parsed ``InvestmentGuide``.

    Raises:
        httpx.HTTPStatusError: On a non-2xx API response.
        LLMResponseError:      On missing or malformed content.
    """
    logger.info("Generating guide for '%s'", investment.name)
    data = client.complete_json(
        GUIDE_SYSTEM_PROMPT,
        build_guide_prompt(investment, user_amount),
        temperature=GUIDE_TEMPERATURE,
        max_tokens=GUIDE_MAX_TOKENS,
    )
    return parse_guide(data)
