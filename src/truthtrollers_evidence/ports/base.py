"""Capability interfaces the engine depends on.

Concrete vendor adapters live in ``llm``, ``search``, ``fetch`` and
``storage``; the orchestration code only ever sees these protocols.
"""

from dataclasses import dataclass
from typing import Any, Protocol

from truthtrollers_evidence.data import CandidateDoc, ClaimMappingResult


class LLMJson(Protocol):
    """Text-in, JSON-out language model capability."""

    async def generate(
        self,
        *,
        system: str,
        user: str,
        schema_hint: str,
        temperature: float = 0.2,
    ) -> dict[str, Any]:
        """Run one completion and return the parsed JSON object.

        Args:
            system: System prompt.
            user: User prompt.
            schema_hint: Example of the expected JSON shape.
            temperature: Sampling temperature.

        Returns:
            The parsed object, or ``{}`` when the model output is not a JSON
            object. Transport and API errors are raised.
        """
        ...


class SearchPorts(Protocol):
    """External web search and internal corpus search."""

    async def web(
        self,
        *,
        query: str,
        top_k: int,
        prefer: list[str] | None = None,
        avoid: list[str] | None = None,
        strict: bool = False,
    ) -> list[CandidateDoc]:
        """Search the web.

        Args:
            query: Query string.
            top_k: Maximum number of results.
            prefer: Preferred domains. Restricts results when ``strict``.
            avoid: Domains to exclude.
            strict: Only return results from ``prefer``.
        """
        ...

    async def internal(self, *, query: str, top_k: int) -> list[CandidateDoc]:
        """Search the internal corpus."""
        ...


class FetcherPort(Protocol):
    """Full-text retrieval for a candidate."""

    async def get_text(self, candidate: CandidateDoc) -> str: ...


class StoragePort(Protocol):
    """Optional cache and result sink."""

    async def cache_get(self, key: str) -> Any | None: ...

    async def cache_set(self, key: str, value: Any, ttl_s: int | None = None) -> None: ...

    async def persist_results(self, results: list[ClaimMappingResult]) -> None: ...


@dataclass(frozen=True)
class EngineDeps:
    """Bundle of ports injected into the engine."""

    llm: LLMJson
    search: SearchPorts
    fetcher: FetcherPort
    storage: StoragePort
