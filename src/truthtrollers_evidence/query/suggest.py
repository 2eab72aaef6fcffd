"""Cached per-claim query suggestions with domain hints."""

import json
import logging
from dataclasses import dataclass
from typing import Any

from pydantic import BaseModel, ValidationError

from truthtrollers_evidence.concurrency import PoolError, run_pool, with_timeout
from truthtrollers_evidence.data import QuerySuggestion
from truthtrollers_evidence.errors import InvalidClaimsError
from truthtrollers_evidence.ports.base import LLMJson, StoragePort
from truthtrollers_evidence.query.llm import clean_queries
from truthtrollers_evidence.query.local import local_queries
from truthtrollers_evidence.settings import DEFAULT_PREFER_DOMAINS
from truthtrollers_evidence.storage.keys import cache_key

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = (
    "You are a research assistant. For each short claim, propose 3-5 web search queries "
    "and a list of preferred domains and disallowed domains. Output strict JSON."
)

SCHEMA_HINT = (
    '{"items":[{"claim":"...","queries":["..."],'
    '"prefer_domains":["..."],"avoid_domains":["..."]}]}'
)


class _SuggestionItem(BaseModel):
    claim: str = ""
    queries: list[Any] = []
    prefer_domains: list[Any] = []
    avoid_domains: list[Any] = []


@dataclass
class SuggestStats:
    """Counters from a suggestion run."""

    cache_hits: int = 0
    refined_chunks: int = 0
    failed_chunks: int = 0


def _to_cache(s: QuerySuggestion) -> dict[str, Any]:
    return {
        "claim": s.claim,
        "queries": list(s.queries),
        "prefer_domains": list(s.prefer_domains),
        "avoid_domains": list(s.avoid_domains),
    }


def _from_cache(value: Any) -> QuerySuggestion | None:
    if not isinstance(value, dict) or not value.get("claim") or not value.get("queries"):
        return None
    return QuerySuggestion(
        claim=str(value["claim"]),
        queries=tuple(value["queries"]),
        prefer_domains=tuple(value.get("prefer_domains", ())),
        avoid_domains=tuple(value.get("avoid_domains", ())),
    )


class QuerySuggester:
    """Suggest queries and domain preferences for claims, with caching.

    Claims are deduplicated, cache hits are served from storage, and the
    rest are refined in chunks by the LLM through the bounded worker pool.
    A failed chunk keeps its local suggestions.

    Args:
        llm: JSON LLM port.
        storage: Storage port used as the suggestion cache.
        queries_per_claim: Maximum queries per claim.
        prefer_domains: Default preferred domains.
        chunk_size: Claims per LLM call.
        concurrency: Maximum concurrent LLM calls.
        enabled: When False, only local suggestions are produced.
        cache_ttl_s: Cache lifetime for stored suggestions.
        call_timeout_s: Timeout per LLM call (None disables).
    """

    def __init__(
        self,
        llm: LLMJson,
        storage: StoragePort,
        *,
        queries_per_claim: int = 4,
        prefer_domains: tuple[str, ...] = DEFAULT_PREFER_DOMAINS,
        chunk_size: int = 10,
        concurrency: int = 3,
        enabled: bool = True,
        cache_ttl_s: int | None = 86400,
        call_timeout_s: float | None = 30.0,
    ) -> None:
        self._llm = llm
        self._storage = storage
        self._limit = queries_per_claim
        self._prefer = tuple(prefer_domains)
        self._chunk_size = chunk_size
        self._concurrency = concurrency
        self._enabled = enabled
        self._ttl_s = cache_ttl_s
        self._timeout_s = call_timeout_s

    def local_suggestion(self, claim: str) -> QuerySuggestion:
        return QuerySuggestion(
            claim=claim,
            queries=tuple(local_queries(claim, self._limit)),
            prefer_domains=self._prefer,
        )

    async def suggest(self, claims: list[Any]) -> tuple[list[QuerySuggestion], SuggestStats]:
        """Suggest queries for each distinct claim, preserving first-seen order.

        Args:
            claims: Claim strings or mappings with a ``text`` key.

        Returns:
            Tuple of (one suggestion per distinct claim, stats).

        Raises:
            InvalidClaimsError: If no claim has non-empty text.
        """
        texts: list[str] = []
        for c in claims:
            text = c if isinstance(c, str) else (c.get("text") if isinstance(c, dict) else None)
            if isinstance(text, str) and text.strip():
                texts.append(text.strip())
        texts = list(dict.fromkeys(texts))
        if not texts:
            raise InvalidClaimsError()

        stats = SuggestStats()
        by_claim: dict[str, QuerySuggestion] = {}
        to_process: list[str] = []
        for text in texts:
            hit = _from_cache(await self._cache_get(text))
            if hit is not None:
                by_claim[text] = hit
                stats.cache_hits += 1
            else:
                to_process.append(text)

        working = {text: self.local_suggestion(text) for text in to_process}

        if self._enabled and to_process:
            chunks = [
                to_process[i : i + self._chunk_size]
                for i in range(0, len(to_process), self._chunk_size)
            ]
            results = await run_pool(chunks, self._refine_chunk, self._concurrency)
            for result in results:
                if isinstance(result, PoolError):
                    stats.failed_chunks += 1
                    logger.warning(f"Suggestion chunk failed, keeping local queries: {result.error}")
                    continue
                stats.refined_chunks += 1
                for suggestion in result:
                    if suggestion.claim in working:
                        working[suggestion.claim] = suggestion
                        await self._cache_set(suggestion)
        else:
            for suggestion in working.values():
                await self._cache_set(suggestion)

        by_claim.update(working)
        logger.info(f"Suggested queries for {len(texts)} claims (cache hits: {stats.cache_hits})")
        return ([by_claim[t] for t in texts], stats)

    async def _refine_chunk(self, chunk: list[str], index: int) -> list[QuerySuggestion]:
        user = (
            "Return JSON as { items: [{ claim, queries: string[], prefer_domains: string[], "
            "avoid_domains: string[] }] } for these claims:\n\n"
            + json.dumps({"claims": chunk}, indent=2)
        )
        out = await with_timeout(
            self._llm.generate(
                system=SYSTEM_PROMPT, user=user, schema_hint=SCHEMA_HINT, temperature=0
            ),
            self._timeout_s,
        )
        raw_items = out.get("items") if isinstance(out, dict) else None
        suggestions: list[QuerySuggestion] = []
        for raw in raw_items if isinstance(raw_items, list) else []:
            try:
                item = _SuggestionItem.model_validate(raw)
            except ValidationError:
                continue
            claim = item.claim.strip()
            if not claim:
                continue
            queries = clean_queries(item.queries, self._limit) or local_queries(claim, self._limit)
            prefer = tuple(clean_queries(item.prefer_domains, 50)) or self._prefer
            suggestions.append(
                QuerySuggestion(
                    claim=claim,
                    queries=tuple(queries),
                    prefer_domains=prefer,
                    avoid_domains=tuple(clean_queries(item.avoid_domains, 50)),
                )
            )
        return suggestions

    async def _cache_get(self, claim: str) -> Any | None:
        try:
            return await self._storage.cache_get(cache_key("suggest", claim))
        except Exception as e:
            logger.warning(f"Suggestion cache read failed: {e!r}")
            return None

    async def _cache_set(self, suggestion: QuerySuggestion) -> None:
        try:
            await self._storage.cache_set(
                cache_key("suggest", suggestion.claim), _to_cache(suggestion), self._ttl_s
            )
        except Exception as e:
            logger.warning(f"Suggestion cache write failed: {e!r}")
