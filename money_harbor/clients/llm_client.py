"""
OpenAI-compatible chat-completions client.

API:   POST {base_url}/chat/completions
Auth:  ``Authorization: Bearer <OPENAI_API_KEY>``

Credential setup (.env, gitignored):
  OPENAI_API_KEY=sk-...

Every call requests ``response_format = {"type": "json_object"}`` so the
model returns a single JSON object.  ``complete_json()`` parses it and
raises ``LLMResponseError`` when the content is missing or not an object.

The underlying ``httpx.Client`` may be injected (tests pass one built on
``httpx.MockTransport``); otherwise the client owns and closes its own.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, ClassVar, Optional

import httpx

if TYPE_CHECKING:
    from money_harbor.config import LLMConfig

logger = logging.getLogger(__name__)


class LLMNotConfiguredError(RuntimeError):
    """Raised when no usable API key is available."""


class LLMResponseError(ValueError):
    """Raised when the API answers 2xx but the content cannot be used."""


# ── Response type ─────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class ChatCompletion:
    """The parts of a chat-completions response the app uses."""

    content: str
    model: str
    total_tokens: int = 0

    def json(self) -> dict[str, Any]:
        """Parse ``content`` as a JSON object.

        Tolerates a surrounding Markdown code fence, which some
        OpenAI-compatible providers add even in JSON mode.

        Raises:
            LLMResponseError: If the content is not a JSON object.
        """
        text = self.content.strip()
        if text.startswith("```"):
            text = text.strip("`")
            if text.lower().startswith("json"):
                text = text[4:]
        try:
            data = json.loads(text)
        except json.JSONDecodeError as exc:
            raise LLMResponseError(f"LLM returned invalid JSON: {exc}") from exc
        if not isinstance(data, dict):
            raise LLMResponseError(
                f"LLM returned a JSON {type(data).__name__}, expected an object."
            )
        return data


# ── Client ────────────────────────────────────────────────────────────────────

class LLMClient:
    """Minimal chat-completions client.

    Usage::

        client = LLMClient.from_config(config.llm)
        data = client.complete_json(SYSTEM_PROMPT, user_prompt)
    """

    COMPLETIONS_PATH: ClassVar[str] = "/chat/completions"

    def __init__(
        self,
        api_key: str,
        base_url: str = "https://api.openai.com/v1",
        model: str = "gpt-4o-mini",
        temperature: float = 0.7,
        max_tokens: int = 2000,
        timeout_s: float = 60.0,
        http_client: Optional[httpx.Client] = None,
    ) -> None:
        if not api_key:
            raise LLMNotConfiguredError("OpenAI API key not configured.")
        self._api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.model = model
        self.temperature = temperature
        self.max_tokens = max_tokens
        self._owns_client = http_client is None
        self._http = http_client or httpx.Client(timeout=timeout_s)

    @classmethod
    def from_config(
        cls,
        config: "LLMConfig",
        http_client: Optional[httpx.Client] = None,
    ) -> "LLMClient":
        """Build a client from ``AppConfig.llm``.

        Raises:
            LLMNotConfiguredError: If ``OPENAI_API_KEY`` is missing or a placeholder.
        """
        if config.api_key is None:
            raise LLMNotConfiguredError(
                "OpenAI API key not configured. Set OPENAI_API_KEY in .env."
            )
        return cls(
            api_key=config.api_key.get_secret_value(),
            base_url=config.base_url,
            model=config.model,
            temperature=config.temperature,
            max_tokens=config.max_tokens,
            timeout_s=config.timeout_s,
            http_client=http_client,
        )

    def complete(
        self,
        system_prompt: str,
        user_prompt: str,
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None,
    ) -> ChatCompletion:
        """Send one system + user exchange and return the first choice.

        Raises:
            httpx.HTTPStatusError: On a non-2xx response.
            LLMResponseError:      If the response has no message content.
        """
        payload = {
            "model": self.model,
            "messages": [
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_prompt},
            ],
            "temperature": self.temperature if temperature is None else temperature,
            "max_tokens": self.max_tokens if max_tokens is None else max_tokens,
            "response_format": {"type": "json_object"},
        }
        resp = self._http.post(
            f"{self.base_url}{self.COMPLETIONS_PATH}",
            json=payload,
            headers={"Authorization": f"Bearer {self._api_key}"},
        )
        resp.raise_for_status()
        data = resp.json()

        try:
            content = data["choices"][0]["message"]["content"]
        except (KeyError, IndexError, TypeError) as exc:
            raise LLMResponseError("LLM response has no message content.") from exc
        if not content:
            raise LLMResponseError("LLM response has empty message content.")

        total_tokens = int((data.get("usage") or {}).get("total_tokens", 0))
        logger.debug("LLM call used %d tokens (model=%s)", total_tokens, self.model)
        return ChatCompletion(
            content=content,
            model=data.get("model", self.model),
            total_tokens=total_tokens,
        )

    def complete_json(
        self,
        system_prompt: str,
        user_prompt: str,
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None,
    ) -> dict[str, Any]:
        """Like ``complete()`` but returns the parsed JSON object.

        Raises:
            httpx.HTTPStatusError: On a non-2xx response.
            LLMResponseError:      If the content is missing or not a JSON object.
        """
        return self.complete(system_prompt, user_prompt, temperature, max_tokens).json()

    def close(self) -> None:
        if self._owns_client:
            self._http.close()

    def __enter__(self) -> "LLMClient":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()
