"""Claude-backed JSON LLM adapter."""

import os
from typing import Any

import anthropic

from truthtrollers_evidence.llm.parsing import JSON_ONLY_SUFFIX, parse_json_object


class ClaudeJsonLLM:
    """Generate JSON objects using Anthropic's Claude API.

    Args:
        model: Anthropic model ID to use.
        api_key: API key (defaults to CLAUDE_API_KEY env var).
        max_tokens: Completion token limit per call.
    """

    def __init__(
        self,
        *,
        model: str = "claude-haiku-4-5-20251001",
        api_key: str | None = None,
        max_tokens: int = 1024,
    ) -> None:
        self._model = model
        resolved_key = api_key or os.environ.get("CLAUDE_API_KEY")
        self._client = anthropic.AsyncAnthropic(api_key=resolved_key)
        self._max_tokens = max_tokens

    @property
    def model(self) -> str:
        return self._model

    async def generate(
        self,
        *,
        system: str,
        user: str,
        schema_hint: str,
        temperature: float = 0.2,
    ) -> dict[str, Any]:
        response = await self._client.messages.create(
            model=self._model,
            max_tokens=self._max_tokens,
            temperature=temperature,
            system=system,
            messages=[{"role": "user", "content": user + JSON_ONLY_SUFFIX + schema_hint}],
        )

        response_text = ""
        for block in response.content:
            if block.type == "text":
                response_text += block.text

        return parse_json_object(response_text)
