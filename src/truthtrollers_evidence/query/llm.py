"""LLM-backed batched query synthesis with local fallback."""

import json
import logging
from typing import Any

from pydantic import AliasChoices, BaseModel, Field, ValidationError

from truthtrollers_evidence.concurrency import with_timeout
from truthtrollers_evidence.data import ClaimInput, QueryStats
from truthtrollers_evidence.ports.base import LLMJson
from truthtrollers_evidence.query.local import local_queries

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = "Return strict JSON only."

SCHEMA_HINT = '{"items":[{"i":0,"queries":["q1","q2","q3","q4"]}]}'


class _QueryItem(BaseModel):
    """One aligned entry of the model's batch response."""

    i: int
    queries: list[Any] = Field(
        default_factory=list, validation_alias=AliasChoices("queries", "q")
    )


def build_user_prompt(claims: list[ClaimInput], queries_per_claim: int) -> str:
    """Build the batched refinement prompt for ``claims``."""
    items = [{"i": c.i, "claim": c.text} for c in claims]
    return (
        f"For each item, propose up to {queries_per_claim} concise web search queries."
        f" Return EXACTLY: {SCHEMA_HINT}."
        " Keep `i` unchanged for alignment.\n"
        "Items:\n" + json.dumps({"items": items})
    )


def clean_queries(raw: list[Any], limit: int) -> list[str]:
    """Stringify, strip, drop empties and duplicates, then truncate."""
    cleaned = [str(q).strip() for q in raw if q is not None]
    return list(dict.fromkeys(q for q in cleaned if q))[:limit]


class LLMQuerySynthesizer:
    """Refine queries for a batch of claims with one LLM call.

    The model must echo each claim's ``i``. Entries whose ``i`` was not
    requested, repeats an earlier entry, or that carry no usable queries
    count as misses. Every claim left unresolved, including all of them
    when the call fails, gets ``local_queries``.

    Args:
        llm: JSON LLM port.
        queries_per_claim: Maximum queries per claim.
        enabled: When False, never call the LLM.
        call_timeout_s: Timeout for the LLM call (None disables).
    """

    def __init__(
        self,
        llm: LLMJson,
        *,
        queries_per_claim: int = 4,
        enabled: bool = True,
        call_timeout_s: float | None = 30.0,
    ) -> None:
        self._llm = llm
        self._limit = queries_per_claim
        self._enabled = enabled
        self._timeout_s = call_timeout_s

    async def synthesize(
        self, claims: list[ClaimInput]
    ) -> tuple[dict[int, list[str]], QueryStats]:
        """Resolve queries for every claim.

        Args:
            claims: Claims needing queries.

        Returns:
            Tuple of (queries keyed by claim index, stats). Every input
            index is present with at least one query.
        """
        stats = QueryStats()
        resolved: dict[int, list[str]] = {}

        if self._enabled and claims:
            stats.tried = len(claims)
            resolved = await self._refine(claims, stats)

        for claim in claims:
            if claim.i not in resolved:
                resolved[claim.i] = local_queries(claim.text, self._limit)

        return (resolved, stats)

    async def _refine(self, claims: list[ClaimInput], stats: QueryStats) -> dict[int, list[str]]:
        logger.info(f"Query refinement: sending {len(claims)} claims")
        try:
            out = await with_timeout(
                self._llm.generate(
                    system=SYSTEM_PROMPT,
                    user=build_user_prompt(claims, self._limit),
                    schema_hint=SCHEMA_HINT,
                    temperature=0,
                ),
                self._timeout_s,
            )
        except Exception as e:
            stats.llm_error = str(e) or type(e).__name__
            logger.warning(f"Query refinement failed; using local queries. Error: {e!r}")
            return {}

        raw_items = out.get("items") if isinstance(out, dict) else None
        items = raw_items if isinstance(raw_items, list) else []
        logger.info(f"Query refinement: got {len(items)} items")
        if not items:
            logger.warning("Query refinement returned no items; using local queries")

        requested = {c.i for c in claims}
        resolved: dict[int, list[str]] = {}
        for raw in items:
            try:
                item = _QueryItem.model_validate(raw)
            except ValidationError:
                stats.missed += 1
                continue
            if item.i not in requested or item.i in resolved:
                stats.missed += 1
                continue
            queries = clean_queries(item.queries, self._limit)
            if not queries:
                stats.missed += 1
                continue
            resolved[item.i] = queries
            stats.applied += 1
            stats.refined.append(item.i)
        return resolved
