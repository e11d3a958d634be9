"""
Tests for money_harbor/clients/llm_client.py.

What we test
------------
LLMClient:
  - Refuses an empty API key; from_config() refuses a config without one.
  - complete(): POSTs to /chat/completions with bearer auth, JSON mode,
    the configured model and per-call temperature / max_tokens overrides.
  - complete(): returns content, model and total_tokens.
  - complete(): raises HTTPStatusError on non-2xx; LLMResponseError on
    missing or empty content.

ChatCompletion.json():
  - Parses plain JSON and fenced ```json blocks.
  - Non-object JSON and invalid JSON raise LLMResponseError.
"""

from __future__ import annotations

import json

import httpx
import pytest
from pydantic import SecretStr

from money_harbor.clients.llm_client import (
    ChatCompletion,
    LLMClient,
    LLMNotConfiguredError,
    LLMResponseError,
)
from money_harbor.config import LLMConfig


def _client(handler) -> LLMClient:
    return LLMClient(
        api_key="sk-test",
        base_url="https://llm.example/v1/",
        model="test-model",
        http_client=httpx.Client(transport=httpx.MockTransport(handler)),
    )


def _ok(content: str, tokens: int = 42) -> httpx.Response:
    return httpx.Response(
        200,
        json={
            "model": "test-model-2025",
            "choices": [{"message": {"content": content}}],
            "usage": {"total_tokens": tokens},
        },
    )


class TestConstruction:
    def test_empty_key_rejected(self):
        with pytest.raises(LLMNotConfiguredError):
            LLMClient(api_key="")

    def test_from_config_without_key(self):
        with pytest.raises(LLMNotConfiguredError):
            LLMClient.from_config(LLMConfig())

    def test_from_config_with_key(self):
        client = LLMClient.from_config(
            LLMConfig(api_key=SecretStr("sk-abc"), model="m1", base_url="https://x/v1/")
        )
        try:
            assert client.model == "m1"
            assert client.base_url == "https://x/v1"
        finally:
            client.close()


class TestComplete:
    def test_request_shape(self):
        seen: dict = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["url"] = str(request.url)
            seen["auth"] = request.headers["Authorization"]
            seen["body"] = json.loads(request.content)
            return _ok('{"ok": true}')

        with _client(handler) as client:
            client.complete("sys", "user", temperature=0.1, max_tokens=99)

        assert seen["url"] == "https://llm.example/v1/chat/completions"
        assert seen["auth"] == "Bearer sk-test"
        body = seen["body"]
        assert body["model"] == "test-model"
        assert body["messages"] == [
            {"role": "system", "content": "sys"},
            {"role": "user", "content": "user"},
        ]
        assert body["temperature"] == 0.1
        assert body["max_tokens"] == 99
        assert body["response_format"] == {"type": "json_object"}

    def test_defaults_used_without_overrides(self):
        seen: dict = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen.update(json.loads(request.content))
            return _ok("{}")

        with _client(handler) as client:
            client.complete("s", "u")
        assert seen["temperature"] == 0.7
        assert seen["max_tokens"] == 2000

    def test_result_fields(self):
        with _client(lambda r: _ok('{"a": 1}', tokens=123)) as client:
            completion = client.complete("s", "u")
        assert completion.content == '{"a": 1}'
        assert completion.model == "test-model-2025"
        assert completion.total_tokens == 123

    def test_complete_json(self):
        with _client(lambda r: _ok('{"a": 1}')) as client:
            assert client.complete_json("s", "u") == {"a": 1}

    def test_http_error(self):
        with _client(lambda r: httpx.Response(401, json={"error": "bad key"})) as client:
            with pytest.raises(httpx.HTTPStatusError):
                client.complete("s", "u")

    def test_no_choices(self):
        with _client(lambda r: httpx.Response(200, json={"choices": []})) as client:
            with pytest.raises(LLMResponseError):
                client.complete("s", "u")

    def test_empty_content(self):
        with _client(lambda r: _ok("")) as client:
            with pytest.raises(LLMResponseError):
                client.complete("s", "u")


class TestChatCompletionJson:
    def test_plain(self):
        assert ChatCompletion(content='{"x": 1}', model="m").json() == {"x": 1}

    def test_fenced(self):
        content = '```json\n{"x": 2}\n```'
        assert ChatCompletion(content=content, model="m").json() == {"x": 2}

    def test_array_rejected(self):
        with pytest.raises(LLMResponseError):
            ChatCompletion(content="[1, 2]", model="m").json()

    def test_invalid_json(self):
        with pytest.raises(LLMResponseError):
            ChatCompletion(content="{nope", model="m").json()
