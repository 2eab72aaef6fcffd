"""Deterministic offline adapters for wiring the engine without API keys.

Every adapter returns canned data so the whole pipeline can be exercised
without network access.
"""

import logging
from typing import Any

from truthtrollers_evidence.data import CandidateDoc, CandidateSource, ClaimMappingResult
from truthtrollers_evidence.ports.base import EngineDeps
from truthtrollers_evidence.url import domain_matches

logger = logging.getLogger(__name__)

DEV_FULL_TEXT = "\n\n".join(
    [
        "Coffee contributes to daily fluid intake and does not cause chronic dehydration.",
        "Caffeine has a mild acute diuretic effect in caffeine-naive individuals.",
        "Overall, regular coffee consumption does not appear to lead to chronic "
        "dehydration in healthy adults.",
    ]
)


class DevLLM:
    """Routes on the schema hint and returns canned JSON.

    Engine query generation, evidence extraction and red-team audits get a
    plausible answer. Batched query refinement and evidence picking get
    ``{}`` so callers take their deterministic fallbacks.
    """

    model = "dev"

    async def generate(
        self,
        *,
        system: str,
        user: str,
        schema_hint: str,
        temperature: float = 0.2,
    ) -> dict[str, Any]:
        if '"intent"' in schema_hint:
            return {
                "queries": [
                    {"query": "coffee dehydration randomized trial", "intent": "refute"},
                    {"query": "coffee hydration meta-analysis", "intent": "refute"},
                    {"query": "caffeine diuresis endurance athletes", "intent": "background"},
                ]
            }
        if '"quote"' in schema_hint:
            return {
                "items": [
                    {
                        "quote": "Coffee contributes to daily fluid intake and does not "
                        "cause chronic dehydration.",
                        "stance": "refute",
                        "summary": "Refutes the claim that coffee causes dehydration.",
                        "location": {"section": "Results"},
                    },
                    {
                        "quote": "Caffeine has a mild acute diuretic effect in "
                        "caffeine-naive individuals.",
                        "stance": "nuance",
                        "summary": "Short-term diuresis without long-term dehydration.",
                        "location": {"section": "Discussion"},
                    },
                ]
            }
        if '"blindspots"' in schema_hint:
            return {
                "blindspots": ["Limited sample size and specific population."],
                "delta_confidence": -0.05,
            }
        return {}


_DEV_INTERNAL = [
    CandidateDoc(
        id="int1",
        url="https://example.edu/hydration",
        title="Hydration meta-analysis",
        domain="example.edu",
        published_at="2022-01-01",
        snippet="Meta-analysis on hydration and common beverages",
        score=95,
        source=CandidateSource.INTERNAL_DB,
    ),
]

_DEV_WEB = [
    CandidateDoc(
        id="web1",
        url="https://apnews.com/coffee-hydration",
        title="AP News: Coffee and hydration",
        domain="apnews.com",
        published_at="2023-02-01",
        snippet="News explainer on coffee and hydration",
        score=90,
    ),
    CandidateDoc(
        id="web2",
        url="https://clickbait.health/blog",
        title="Random health blog",
        domain="clickbait.health",
        published_at="2021-06-01",
        snippet="Blog claiming coffee totally dehydrates you",
        score=40,
    ),
]


class DevSearch:
    """Returns the same small candidate set for every query."""

    async def web(
        self,
        *,
        query: str,
        top_k: int,
        prefer: list[str] | None = None,
        avoid: list[str] | None = None,
        strict: bool = False,
    ) -> list[CandidateDoc]:
        docs = list(_DEV_WEB)
        if avoid:
            docs = [d for d in docs if not domain_matches(d.domain, avoid)]
        if strict and prefer:
            docs = [d for d in docs if domain_matches(d.domain, prefer)]
        return docs[:top_k]

    async def internal(self, *, query: str, top_k: int) -> list[CandidateDoc]:
        return list(_DEV_INTERNAL)[:top_k]


class DevFetcher:
    """Returns canned full text for any candidate."""

    async def get_text(self, candidate: CandidateDoc) -> str:
        return DEV_FULL_TEXT


class DevStorage:
    """No cache; logs persisted result counts."""

    async def cache_get(self, key: str) -> Any | None:
        return None

    async def cache_set(self, key: str, value: Any, ttl_s: int | None = None) -> None:
        return None

    async def persist_results(self, results: list[ClaimMappingResult]) -> None:
        logger.info(f"DevStorage.persist_results count={len(results)}")


def dev_deps() -> EngineDeps:
    """Build the offline dependency bundle."""
    return EngineDeps(
        llm=DevLLM(),
        search=DevSearch(),
        fetcher=DevFetcher(),
        storage=DevStorage(),
    )
