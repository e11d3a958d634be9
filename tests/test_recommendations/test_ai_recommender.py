"""
Tests for money_harbor/recommendations/ai_recommender.py.

All LLM traffic goes through ``httpx.MockTransport``; nothing touches the
network.

What we test
------------
build_user_prompt():
  - Includes amount, horizon, risk and liquidity; notes only when given.
  - Lists catalog names when a catalog is passed.

parse_ai_recommendations():
  - Synthetic ids ai-0.., scores 100/90/80, all knowledge levels.
  - String timeHorizon is wrapped into a list.
  - Missing matchReason gets the fallback text.
  - useFallback -> empty list; missing list -> LLMResponseError.

recommend_with_ai():
  - Returns the parsed picks; HTTP errors propagate to the caller.

recommend():
  - No client -> rules with "LLM not configured".
  - Valid AI answer -> source "ai".
  - HTTP 500, invalid JSON, invalid entry, useFallback -> rules fallback.
"""

from __future__ import annotations

import json
import random

import httpx
import pytest

from money_harbor.clients.llm_client import LLMClient, LLMResponseError
from money_harbor.recommendations.ai_recommender import (
    build_user_prompt,
    parse_ai_recommendations,
    recommend,
    recommend_with_ai,
)
from money_harbor.recommendations.scorer import FALLBACK_REASON
from money_harbor.taxonomy.investment_taxonomy import KnowledgeLevel, TimeHorizon


def _ai_rec(name: str, **overrides) -> dict:
    rec = {
        "name": name,
        "description": f"{name} description",
        "riskLevel": "medium",
        "timeHorizon": ["medium", "long"],
        "liquidity": "high",
        "minAmount": 1000,
        "expectedReturn": 6.5,
        "pros": ["p1"],
        "cons": ["c1"],
        "matchReason": f"{name} fits you",
        "actionSteps": {"platforms": ["IBI"], "costs": "low", "steps": ["open account"]},
    }
    rec.update(overrides)
    return rec


def _llm_client(content: str | None = None, status: int = 200) -> LLMClient:
    def handler(request: httpx.Request) -> httpx.Response:
        if status != 200:
            return httpx.Response(status, json={"error": {"message": "boom"}})
        return httpx.Response(
            200,
            json={
                "model": "gpt-4o-mini",
                "choices": [{"message": {"role": "assistant", "content": content}}],
                "usage": {"total_tokens": 321},
            },
        )

    return LLMClient(
        api_key="sk-test",
        http_client=httpx.Client(transport=httpx.MockTransport(handler)),
    )


# ── build_user_prompt ─────────────────────────────────────────────────────────

class TestBuildUserPrompt:
    def test_contains_profile(self, sample_preferences):
        prompt = build_user_prompt(sample_preferences)
        assert "₪50,000" in prompt
        assert "5 years" in prompt
        assert "medium" in prompt
        assert "Can lock funds for a medium period" in prompt
        assert "Notes from the investor" not in prompt

    def test_includes_notes_and_catalog(self, sample_preferences, sample_catalog):
        prefs = sample_preferences.model_copy(update={"additional_notes": "Saving for a flat"})
        prompt = build_user_prompt(prefs, sample_catalog)
        assert "Saving for a flat" in prompt
        assert "- Bitcoin" in prompt


# ── parse_ai_recommendations ──────────────────────────────────────────────────

class TestParseAiRecommendations:
    def test_synthetic_fields(self):
        recs = parse_ai_recommendations(
            {"recommendations": [_ai_rec("A"), _ai_rec("B"), _ai_rec("C")]}
        )
        assert [r.id for r in recs] == ["ai-0", "ai-1", "ai-2"]
        assert [r.score for r in recs] == [100, 90, 80]
        assert set(recs[0].suitable_for) == set(KnowledgeLevel)

    def test_truncates_to_three(self):
        recs = parse_ai_recommendations(
            {"recommendations": [_ai_rec(str(i)) for i in range(5)]}
        )
        assert len(recs) == 3

    def test_string_time_horizon_wrapped(self):
        recs = parse_ai_recommendations({"recommendations": [_ai_rec("A", timeHorizon="long")]})
        assert recs[0].time_horizon == (TimeHorizon.LONG,)

    def test_missing_match_reason(self):
        rec = _ai_rec("A")
        del rec["matchReason"]
        assert parse_ai_recommendations({"recommendations": [rec]})[0].match_reason == FALLBACK_REASON

    def test_use_fallback(self):
        assert parse_ai_recommendations({"recommendations": [], "useFallback": True}) == []

    def test_missing_list_raises(self):
        with pytest.raises(LLMResponseError):
            parse_ai_recommendations({"something": "else"})


# ── recommend ─────────────────────────────────────────────────────────────────

class TestRecommend:
    def test_no_client_uses_rules(self, sample_catalog, sample_preferences):
        result = recommend(sample_preferences, sample_catalog, rng=random.Random(3))
        assert result.source == "rules"
        assert result.fallback_reason == "LLM not configured"
        assert len(result.recommendations) == 3

    def test_ai_success(self, sample_catalog, sample_preferences):
        content = json.dumps({"recommendations": [_ai_rec("A"), _ai_rec("B"), _ai_rec("C")]})
        with _llm_client(content) as client:
            result = recommend(sample_preferences, sample_catalog, client=client)
        assert result.source == "ai"
        assert result.fallback_reason is None
        assert [r.name for r in result.recommendations] == ["A", "B", "C"]

    def test_http_error_falls_back(self, sample_catalog, sample_preferences):
        with _llm_client(status=500) as client:
            result = recommend(sample_preferences, sample_catalog, client=client)
        assert result.source == "rules"
        assert result.fallback_reason.startswith("HTTPStatusError")
        assert len(result.recommendations) == 3

    def test_invalid_json_falls_back(self, sample_catalog, sample_preferences):
        with _llm_client("not json at all") as client:
            result = recommend(sample_preferences, sample_catalog, client=client)
        assert result.source == "rules"
        assert result.fallback_reason.startswith("LLMResponseError")

    def test_invalid_entry_falls_back(self, sample_catalog, sample_preferences):
        content = json.dumps({"recommendations": [_ai_rec("A", riskLevel="extreme")]})
        with _llm_client(content) as client:
            result = recommend(sample_preferences, sample_catalog, client=client)
        assert result.source == "rules"
        assert result.fallback_reason.startswith("ValidationError")

    def test_model_requested_fallback(self, sample_catalog, sample_preferences):
        content = json.dumps({"recommendations": [], "useFallback": True})
        with _llm_client(content) as client:
            result = recommend(sample_preferences, sample_catalog, client=client)
        assert result.source == "rules"
        assert result.fallback_reason == "LLM requested fallback"


# ── recommend_with_ai ─────────────────────────────────────────────────────────

class TestRecommendWithAi:
    def test_returns_parsed_picks(self, sample_preferences):
        content = json.dumps({"recommendations": [_ai_rec("A"), _ai_rec("B"), _ai_rec("C")]})
        with _llm_client(content) as client:
            recs = recommend_with_ai(sample_preferences, client)
        assert [r.id for r in recs] == ["ai-0", "ai-1", "ai-2"]
        assert [r.score for r in recs] == [100, 90, 80]

    def test_http_error_propagates(self, sample_preferences):
        with _llm_client(status=500) as client:
            with pytest.raises(httpx.HTTPStatusError):
                recommend_with_ai(sample_preferences, client)
