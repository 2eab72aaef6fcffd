"""Claim mapping orchestrator: claims in, labelled evidence and references out."""

import logging
import time
from collections.abc import Mapping, Sequence
from typing import Any

from truthtrollers_evidence.concurrency import PoolError, run_pool
from truthtrollers_evidence.data import (
    CandidateDoc,
    Claim,
    ClaimInput,
    MapClaimsResult,
    MappedClaim,
    Pick,
    QueryStats,
    SearchStats,
    SelectionMethod,
)
from truthtrollers_evidence.errors import InvalidClaimsError
from truthtrollers_evidence.pipeline.references import dedupe_references
from truthtrollers_evidence.ports.base import EngineDeps
from truthtrollers_evidence.query.base import QuerySynthesizer
from truthtrollers_evidence.query.llm import LLMQuerySynthesizer, clean_queries
from truthtrollers_evidence.query.local import local_queries
from truthtrollers_evidence.run_logger import RunLogger
from truthtrollers_evidence.search.fanout import SearchFanout
from truthtrollers_evidence.selector.base import EvidenceSelector
from truthtrollers_evidence.selector.llm import LLMEvidenceSelector
from truthtrollers_evidence.settings import EngineSettings
from truthtrollers_evidence.storage.keys import cache_key

logger = logging.getLogger(__name__)


def normalize_claims(raw_claims: Any, queries_per_claim: int = 4) -> list[ClaimInput]:
    """Turn a raw request list into ``ClaimInput`` entries.

    Entries may be strings, mappings with ``text`` and optional ``queries``,
    or ``Claim`` objects. ``i`` is the entry's position in ``raw_claims``.
    Entries whose trimmed text is empty are dropped, as are supplied queries
    that are not non-empty strings.
    """
    if not isinstance(raw_claims, Sequence) or isinstance(raw_claims, str):
        return []

    normalized: list[ClaimInput] = []
    for i, raw in enumerate(raw_claims):
        supplied: list[Any] = []
        if isinstance(raw, str):
            text = raw
        elif isinstance(raw, Claim):
            text = raw.text
        elif isinstance(raw, Mapping):
            text = raw.get("text") if isinstance(raw.get("text"), str) else ""
            if isinstance(raw.get("queries"), list):
                supplied = [q for q in raw["queries"] if isinstance(q, str)]
        else:
            continue
        text = text.strip()
        if not text:
            continue
        normalized.append(
            ClaimInput(i=i, text=text, queries=tuple(clean_queries(supplied, queries_per_claim)))
        )
    return normalized


class ClaimMapper:
    """Map claims to labelled evidence picks and a deduplicated reference list.

    Flow:
    1. Normalize the request, failing fast when no claim is usable
    2. Resolve queries: supplied, cached, synthesized, else local templates
    3. Search every claim through the bounded worker pool
    4. Select evidence for every claim through the same pool
    5. Aggregate items in request order and dedupe references by URL

    A claim whose search or selection raises gets empty picks; the other
    claims are unaffected.

    Args:
        deps: Injected ports.
        settings: Limits and feature flags.
        synthesizer: Query synthesizer; defaults to the batched LLM one.
        fanout: Search fan-out; defaults to one built from ``settings``.
        selector: Evidence selector; defaults to the LLM one.
        run_logger: Optional RunLogger for intermediate result logging.
        model_name: Model name reported in ``meta``.
    """

    def __init__(
        self,
        deps: EngineDeps,
        settings: EngineSettings | None = None,
        *,
        synthesizer: QuerySynthesizer | None = None,
        fanout: SearchFanout | None = None,
        selector: EvidenceSelector | None = None,
        run_logger: RunLogger | None = None,
        model_name: str | None = None,
    ) -> None:
        self._deps = deps
        self._settings = settings or EngineSettings()
        s = self._settings
        self._synthesizer = synthesizer or LLMQuerySynthesizer(
            deps.llm,
            queries_per_claim=s.queries_per_claim,
            enabled=s.refine_queries_with_llm,
            call_timeout_s=s.call_timeout_s,
        )
        self._fanout = fanout or SearchFanout(
            deps.search,
            max_results=s.search_results_per_claim,
            strict_domain_filter=s.strict_domain_filter,
            call_timeout_s=s.call_timeout_s,
        )
        self._selector = selector or LLMEvidenceSelector(
            deps.llm, enabled=s.pick_with_llm, call_timeout_s=s.call_timeout_s
        )
        self._run_logger = run_logger
        self._model_name = model_name or getattr(deps.llm, "model", None)

    @property
    def settings(self) -> EngineSettings:
        return self._settings

    async def map_claims(
        self,
        raw_claims: Any,
        *,
        prefer_domains: list[str] | None = None,
        avoid_domains: list[str] | None = None,
        return_queries: bool = True,
    ) -> MapClaimsResult:
        """Map every claim in the request to evidence.

        Args:
            raw_claims: Strings or ``{"text", "queries"?}`` mappings.
            prefer_domains: Preferred domains; None uses the configured list.
            avoid_domains: Domains to exclude from search.
            return_queries: Include each claim's queries in its item.

        Returns:
            The aggregated result with one item per usable claim.

        Raises:
            InvalidClaimsError: If no claim has non-empty text. No port is
                called in that case.
        """
        t_start = time.monotonic()
        s = self._settings
        claims = normalize_claims(raw_claims, s.queries_per_claim)
        if not claims:
            raise InvalidClaimsError()

        prefer = list(s.prefer_domains) if prefer_domains is None else list(prefer_domains)
        avoid = list(avoid_domains or [])

        if self._run_logger:
            self._run_logger.start_run(
                "map_claims",
                {"claims": claims, "prefer_domains": prefer, "avoid_domains": avoid},
            )

        # Step 1: Resolve queries
        t0 = time.monotonic()
        queries, query_stats, cache_hits = await self._resolve_queries(claims)
        query_duration = time.monotonic() - t0

        if self._run_logger:
            self._run_logger.log_stage(
                stage="query_synthesis",
                component=type(self._synthesizer).__name__,
                input_data=claims,
                output_data=queries,
                duration_seconds=query_duration,
            )

        # Step 2: Search
        async def search_claim(
            claim: ClaimInput, index: int
        ) -> tuple[list[CandidateDoc], SearchStats]:
            return await self._fanout.search(
                queries[claim.i], prefer_domains=prefer, avoid_domains=avoid
            )

        t0 = time.monotonic()
        search_results = await run_pool(claims, search_claim, s.max_concurrency)
        search_duration = time.monotonic() - t0

        claim_errors = 0
        search_stats = SearchStats()
        candidates: list[list[CandidateDoc]] = []
        for claim, result in zip(claims, search_results, strict=True):
            if isinstance(result, PoolError):
                claim_errors += 1
                logger.warning(f"Search failed for claim {claim.i}: {result.error}")
                candidates.append([])
                continue
            docs, stats = result
            search_stats += stats
            candidates.append(docs)

        total_candidates = sum(len(c) for c in candidates)
        logger.info(
            f"Search: {len(claims)} claims, {search_stats.requests} queries, "
            f"{total_candidates} candidates ({search_stats.failures} failed queries)"
        )

        if self._run_logger:
            self._run_logger.log_stage(
                stage="search",
                component=type(self._fanout).__name__,
                input_data=queries,
                output_data=candidates,
                duration_seconds=search_duration,
            )

        # Step 3: Select evidence
        async def select_claim(
            claim: ClaimInput, index: int
        ) -> tuple[list[Pick], SelectionMethod]:
            return await self._selector.select(claim.text, candidates[index], s.picks_per_claim)

        t0 = time.monotonic()
        select_results = await run_pool(claims, select_claim, s.max_concurrency)
        select_duration = time.monotonic() - t0

        methods: dict[SelectionMethod, int] = dict.fromkeys(SelectionMethod, 0)
        items: list[MappedClaim] = []
        for claim, result in zip(claims, select_results, strict=True):
            picks: list[Pick] = []
            if isinstance(result, PoolError):
                claim_errors += 1
                logger.warning(f"Evidence selection failed for claim {claim.i}: {result.error}")
            else:
                picks, method = result
                methods[method] += 1
            items.append(
                MappedClaim(
                    i=claim.i,
                    claim=claim.text,
                    picks=picks,
                    queries=list(queries[claim.i]) if return_queries else None,
                )
            )

        if self._run_logger:
            self._run_logger.log_stage(
                stage="selection",
                component=type(self._selector).__name__,
                input_data=candidates,
                output_data=items,
                duration_seconds=select_duration,
            )

        # Step 4: Aggregate
        references = dedupe_references(items)
        meta = {
            "model": self._model_name,
            "queries_per_claim": s.queries_per_claim,
            "search_results_per_claim": s.search_results_per_claim,
            "picks_per_claim": s.picks_per_claim,
            "max_concurrency": s.max_concurrency,
            "refine_queries_with_llm": s.refine_queries_with_llm,
            "pick_with_llm": s.pick_with_llm,
            "strict_domain_filter": s.strict_domain_filter,
            "refine_tried": query_stats.tried,
            "refine_applied": query_stats.applied,
            "refine_missed": query_stats.missed,
            "refine_error": query_stats.llm_error,
            "cache_hits": cache_hits,
            "total_candidates": total_candidates,
            "search_requests": search_stats.requests,
            "search_failures": search_stats.failures,
            "picks_llm": methods[SelectionMethod.LLM],
            "picks_heuristic": methods[SelectionMethod.HEURISTIC],
            "claim_errors": claim_errors,
            "durations_ms": {
                "queries": round(query_duration * 1000),
                "search": round(search_duration * 1000),
                "selection": round(select_duration * 1000),
            },
        }

        if self._run_logger:
            self._run_logger.finish_run(items, meta)

        return MapClaimsResult(
            success=True,
            items=items,
            references=references,
            took_ms=round((time.monotonic() - t_start) * 1000),
            meta=meta,
        )

    async def _resolve_queries(
        self, claims: list[ClaimInput]
    ) -> tuple[dict[int, list[str]], QueryStats, int]:
        s = self._settings
        resolved: dict[int, list[str]] = {}
        cache_hits = 0
        pending: list[ClaimInput] = []

        for claim in claims:
            if claim.queries:
                resolved[claim.i] = list(claim.queries)
                continue
            cached = await self._cache_get(claim.text)
            if cached:
                resolved[claim.i] = cached
                cache_hits += 1
            else:
                pending.append(claim)

        stats = QueryStats()
        if pending:
            synthesized, stats = await self._synthesizer.synthesize(pending)
            refined = set(stats.refined)
            for claim in pending:
                claim_queries = synthesized.get(claim.i) or local_queries(
                    claim.text, s.queries_per_claim
                )
                resolved[claim.i] = claim_queries[: s.queries_per_claim]
                # Only model output is cached.
                if claim.i in refined:
                    await self._cache_set(claim.text, resolved[claim.i])

        if cache_hits:
            logger.info(f"Query cache: {cache_hits} hits")
        return (resolved, stats, cache_hits)

    async def _cache_get(self, text: str) -> list[str]:
        try:
            value = await self._deps.storage.cache_get(cache_key("queries", text))
        except Exception as e:
            logger.warning(f"Query cache read failed: {e!r}")
            return []
        if not isinstance(value, list):
            return []
        return clean_queries(value, self._settings.queries_per_claim)

    async def _cache_set(self, text: str, queries: list[str]) -> None:
        try:
            await self._deps.storage.cache_set(
                cache_key("queries", text), queries, self._settings.query_cache_ttl_s
            )
        except Exception as e:
            logger.warning(f"Query cache write failed: {e!r}")
