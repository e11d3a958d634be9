"""
LLM-backed recommender with rule-engine fallback.

``recommend()`` is what callers use.  When an ``LLMClient`` is supplied it
asks the model for exactly three recommendations; on any failure it falls
back to ``ranker.get_top_recommendations()``.  Either way the caller gets
the same ``ScoredInvestment`` shape, tagged with the path that produced it.

Fallback triggers
-----------------
- no client (LLM not configured)
- HTTP error or timeout
- content that is not a JSON object, or entries that fail validation
- ``"useFallback": true`` in the model's answer
- an empty ``recommendations`` list

LLM records do not come from the catalog, so they get synthetic ids
(``ai-0``, ``ai-1``, ...), a display score of ``100 - 10 * rank`` and are
marked suitable for every knowledge level.
"""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass
from typing import Any, Literal, Optional, Sequence

import httpx

from money_harbor.clients.llm_client import LLMClient, LLMResponseError
from money_harbor.models.investment import (
    InvestmentOption,
    ScoredInvestment,
    UserPreferences,
)
from money_harbor.recommendations.ranker import (
    DEFAULT_JITTER_POINTS,
    DEFAULT_TOP_N,
    get_top_recommendations,
)
from money_harbor.recommendations.scorer import FALLBACK_REASON, format_amount
from money_harbor.taxonomy.investment_taxonomy import KnowledgeLevel

logger = logging.getLogger(__name__)

RecommendationSource = Literal["ai", "rules"]

AI_RECOMMENDATION_COUNT = 3

SYSTEM_PROMPT = """You are an investment educator for retail investors in Israel.

Given a user's investment profile, propose exactly 3 DIFFERENT investment
options from different asset families (for example an index fund, a bond
product and a savings product). Be neutral and educational; never promise
returns.

Return ONLY a JSON object of this shape:
{
  "recommendations": [
    {
      "name": "short display name",
      "description": "2-3 plain-language sentences",
      "riskLevel": "low" | "medium" | "high",
      "timeHorizon": ["short" | "medium" | "long", ...],
      "liquidity": "low" | "medium" | "high",
      "minAmount": number or null,
      "expectedReturn": number or null,
      "pros": ["...", "..."],
      "cons": ["...", "..."],
      "matchReason": "one sentence on why it fits this user",
      "actionSteps": {
        "platforms": ["..."],
        "costs": "...",
        "steps": ["...", "..."]
      }
    }
  ],
  "useFallback": false
}

If you cannot produce 3 sensible options, return {"recommendations": [], "useFallback": true}.
"""


@dataclass(frozen=True)
class RecommendationResult:
    """Recommendations plus the path that produced them.

    Attributes:
        recommendations: Up to three records (exactly three on the AI path).
        source:          ``"ai"`` or ``"rules"``.
        fallback_reason: Why the rule engine was used; ``None`` on the AI path.
    """

    recommendations: list[ScoredInvestment]
    source: RecommendationSource
    fallback_reason: Optional[str] = None


def build_user_prompt(
    preferences: UserPreferences,
    catalog: Sequence[InvestmentOption] = (),
) -> str:
    """Render the user profile (and the known catalog names) for the model."""
    lines = [
        "Investor profile:",
        f"- Amount: {format_amount(preferences.amount)}",
        f"- Time horizon: {preferences.time_horizon}",
        f"- Risk tolerance: {preferences.risk_level}",
        f"- Liquidity needs: {preferences.liquidity}",
    ]
    if preferences.knowledge_level:
        lines.append(f"- Knowledge level: {preferences.knowledge_level}")
    if preferences.additional_notes:
        lines.append(f"- Notes from the investor: {preferences.additional_notes}")
    if catalog:
        lines.append("")
        lines.append("Instruments available in our catalog (you may use others):")
        lines.extend(f"- {option.name}" for option in catalog)
    return "\n".join(lines)


def parse_ai_recommendations(data: dict[str, Any]) -> list[ScoredInvestment]:
    """Map the model's answer onto ``ScoredInvestment`` records.

    Returns an empty list when the model asked for the fallback.

    Raises:
        LLMResponseError: If ``recommendations`` is missing or not a list.
        pydantic.ValidationError: If an entry is missing required fields.
    """
    if data.get("useFallback"):
        return []

    raw = data.get("recommendations")
    if not isinstance(raw, list):
        raise LLMResponseError("LLM answer has no 'recommendations' list.")

    results: list[ScoredInvestment] = []
    for i, rec in enumerate(raw[:AI_RECOMMENDATION_COUNT]):
        if not isinstance(rec, dict):
            raise LLMResponseError(f"Recommendation {i} is not an object.")
        horizon = rec.get("timeHorizon")
        if isinstance(horizon, str):
            horizon = [horizon]
        results.append(
            ScoredInvestment.model_validate({
                **rec,
                "timeHorizon": horizon,
                "id": f"ai-{i}",
                "score": 100 - i * 10,
                "suitableFor": list(KnowledgeLevel),
                "matchReason": rec.get("matchReason") or FALLBACK_REASON,
            })
        )
    return results


def recommend_with_ai(
    preferences: UserPreferences,
    client: LLMClient,
    catalog: Sequence[InvestmentOption] = (),
) -> list[ScoredInvestment]:
    """Ask the LLM for three recommendations.

    Raises:
        httpx.HTTPError:          On transport or HTTP status errors.
        LLMResponseError:         On unusable content.
        pydantic.ValidationError: On malformed entries.
    """
    data = client.complete_json(SYSTEM_PROMPT, build_user_prompt(preferences, catalog))
    return parse_ai_recommendations(data)


def recommend(
    preferences:   UserPreferences,
    catalog:       Sequence[InvestmentOption],
    client:        Optional[LLMClient] = None,
    rng:           random.Random | None = None,
    n:             int = DEFAULT_TOP_N,
    jitter_points: float = DEFAULT_JITTER_POINTS,
) -> RecommendationResult:
    """Recommend investments, preferring the LLM and falling back to the rules.

    Args:
        preferences:   The user's preferences.
        catalog:       Catalog snapshot for the rule engine.
        client:        LLM client; ``None`` goes straight to the rule engine.
        rng:           Optional seeded random source for the rule engine jitter.
        n:             Number of rule-engine recommendations.
        jitter_points: Rule-engine jitter half-width.

    Returns:
        RecommendationResult; never raises for a well-formed catalog.
    """
    fallback_reason = "LLM not configured"

    if client is not None:
        try:
            ai_results = recommend_with_ai(preferences, client, catalog)
        except (httpx.HTTPError, ValueError) as exc:
            # Covers LLMResponseError, pydantic.ValidationError and JSON decode errors
            fallback_reason = f"{type(exc).__name__}: {exc}"
            logger.warning("AI recommendation failed, using rule engine: %s", fallback_reason)
        else:
            if ai_results:
                logger.info("Using %d AI recommendations", len(ai_results))
                return RecommendationResult(recommendations=ai_results, source="ai")
            fallback_reason = "LLM requested fallback"
            logger.info("LLM requested fallback; using rule engine")

    results = get_top_recommendations(
        catalog, preferences, n=n, rng=rng, jitter_points=jitter_points
    )
    return RecommendationResult(
        recommendations=results,
        source="rules",
        fallback_reason=fallback_reason,
    )
