"""OpenAI-backed JSON LLM adapter using JSON mode."""

import os
from typing import Any

from openai import AsyncOpenAI

from truthtrollers_evidence.llm.parsing import JSON_ONLY_SUFFIX, parse_json_object


class OpenAIJsonLLM:
    """Generate JSON objects with OpenAI chat completions in JSON mode.

    Args:
        model: OpenAI model ID (defaults to OPENAI_MODEL env var, then gpt-4o-mini).
        api_key: API key (defaults to OPENAI_API_KEY env var).
        project: Optional project ID (defaults to OPENAI_PROJECT_ID env var).
        max_tokens: Completion token limit per call.
    """

    def __init__(
        self,
        *,
        model: str | None = None,
        api_key: str | None = None,
        project: str | None = None,
        max_tokens: int = 384,
    ) -> None:
        resolved_key = api_key or os.environ.get("OPENAI_API_KEY")
        if not resolved_key:
            raise ValueError(
                "OpenAI API key required. Pass api_key or set OPENAI_API_KEY env var."
            )
        self._model = model or os.environ.get("OPENAI_MODEL") or "gpt-4o-mini"
        self._client = AsyncOpenAI(
            api_key=resolved_key,
            project=project or os.environ.get("OPENAI_PROJECT_ID"),
        )
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
        response = await self._client.chat.completions.create(
            model=self._model,
            temperature=temperature,
            max_tokens=self._max_tokens,
            response_format={"type": "json_object"},
            messages=[
                {"role": "system", "content": system},
                {"role": "user", "content": user + JSON_ONLY_SUFFIX + schema_hint},
            ],
        )
        if not response.choices:
            return {}
        content = response.choices[0].message.content or ""
        return parse_json_object(content)
