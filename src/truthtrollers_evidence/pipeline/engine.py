"""Deep evidence engine: queries, retrieval, quote extraction and adjudication."""

import asyncio
import dataclasses
import json
import logging
import re
import time
from datetime import UTC, datetime
from typing import Any

from pydantic import BaseModel, ValidationError

from truthtrollers_evidence.concurrency import PoolError, run_pool, with_timeout
from truthtrollers_evidence.data import (
    Adjudication,
    CandidateDoc,
    Claim,
    ClaimMappingResult,
    EvidenceItem,
    Query,
    QueryIntent,
    Stance,
    Verdict,
)
from truthtrollers_evidence.ports.base import EngineDeps
from truthtrollers_evidence.query.local import local_queries
from truthtrollers_evidence.run_logger import RunLogger
from truthtrollers_evidence.settings import EngineSettings

logger = logging.getLogger(__name__)

QUERY_SYSTEM_PROMPT = "You generate diverse, high-precision search queries for fact-checking."
QUERY_SCHEMA_HINT = '{"queries":[{"query":"...","intent":"support|refute|background|factbox"}]}'

EVIDENCE_SYSTEM_PROMPT = (
    "You extract verbatim quotes that directly bear on a claim; "
    "classify stance and avoid speculation."
)
EVIDENCE_SCHEMA_HINT = (
    '{"items":[{"quote":"...","stance":"support|refute|nuance|insufficient",'
    '"summary":"...","location":{"page":null,"section":"..."}}]}'
)

RED_TEAM_SYSTEM_PROMPT = (
    "You critically audit conclusions. Identify weak assumptions and missing evidence."
)
RED_TEAM_SCHEMA_HINT = '{"blindspots":["..."],"delta_confidence":0}'

CREDIBLE_DOMAIN_RE = re.compile(r"(reuters|apnews|nature|nih|who|gov|\.edu)", re.IGNORECASE)
CREDIBLE_DOMAIN_BOOST = 0.2

RECENCY_DECAY_YEARS = 5
RECENCY_FLOOR = 0.5
UNDATED_RECENCY = 0.8

MAX_VERDICT_EVIDENCE = 4
MAX_COUNTERS = 3


class _EngineQuery(BaseModel):
    query: str
    intent: QueryIntent


class _ExtractedQuote(BaseModel):
    quote: str
    stance: str | None = None
    summary: str | None = None
    location: dict[str, Any] | None = None


def candidate_quality(candidate: CandidateDoc) -> float:
    """Search score scaled to [0, 1], boosted for well-known credible domains."""
    base = (candidate.score or 0) / 100
    boost = (
        CREDIBLE_DOMAIN_BOOST
        if candidate.domain and CREDIBLE_DOMAIN_RE.search(candidate.domain)
        else 0.0
    )
    return max(0.0, min(1.0, base + boost))


def _parse_date(value: str | None) -> datetime | None:
    if not value:
        return None
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None
    return parsed if parsed.tzinfo else parsed.replace(tzinfo=UTC)


def evidence_weight(item: EvidenceItem, now: datetime) -> float:
    """Quality times a recency factor that decays linearly over five years."""
    published = _parse_date(item.published_at)
    if published is None:
        recency = UNDATED_RECENCY
    else:
        age_years = (now - published).total_seconds() / (365 * 24 * 3600)
        recency = max(RECENCY_FLOOR, 1 - age_years / RECENCY_DECAY_YEARS)
    return item.quality * recency


def _cite(item: EvidenceItem) -> str:
    return item.title or item.url or item.candidate_id


def _parse_stance(raw: str | None) -> Stance:
    try:
        return Stance(str(raw).strip().lower())
    except ValueError:
        return Stance.INSUFFICIENT


class EvidenceEngine:
    """Map claims to quoted evidence and a weighted verdict.

    Per claim: generate intent-labelled queries, retrieve candidates from the
    internal corpus and/or the web, extract quotes from the best candidates,
    adjudicate, and optionally red-team the verdict. Claims run through the
    bounded worker pool; the results are handed to ``storage.persist_results``.

    Upstream failures degrade: queries fall back to local templates, a
    failing search or extraction contributes nothing, and a failed red-team
    audit leaves the adjudication unchanged.

    Args:
        deps: Injected ports.
        settings: Limits and feature flags.
        run_logger: Optional RunLogger for intermediate result logging.
    """

    def __init__(
        self,
        deps: EngineDeps,
        settings: EngineSettings | None = None,
        *,
        run_logger: RunLogger | None = None,
    ) -> None:
        self._deps = deps
        self._settings = settings or EngineSettings()
        self._run_logger = run_logger

    async def generate_queries(
        self, claim: Claim, context: Any = None, n: int | None = None
    ) -> list[Query]:
        """Generate up to ``n`` queries across intents for ``claim``.

        Entries with an unknown intent or an empty query are dropped;
        duplicates (same intent, same lowercased query) are removed. When the
        LLM fails or yields nothing, local queries labelled ``background``
        are used.
        """
        n = n or self._settings.queries_per_claim
        user = (
            f"Claim: {claim.text}\nContext: {json.dumps(context or {}, default=str)}\n"
            f"Task: Produce {n} queries across intents (support, refute, background, factbox)."
        )
        queries: list[Query] = []
        try:
            out = await with_timeout(
                self._deps.llm.generate(
                    system=QUERY_SYSTEM_PROMPT,
                    user=user,
                    schema_hint=QUERY_SCHEMA_HINT,
                    temperature=0.2,
                ),
                self._settings.call_timeout_s,
            )
            raw_queries = out.get("queries") if isinstance(out, dict) else None
            seen: set[str] = set()
            for raw in raw_queries if isinstance(raw_queries, list) else []:
                try:
                    item = _EngineQuery.model_validate(raw)
                except ValidationError:
                    continue
                text = item.query.strip()
                key = f"{item.intent}|{text.lower()}"
                if not text or key in seen:
                    continue
                seen.add(key)
                queries.append(Query(claim_id=claim.id, query=text, intent=item.intent))
        except Exception as e:
            logger.warning(f"Query generation failed for claim {claim.id}: {e!r}")

        if not queries:
            queries = [
                Query(claim_id=claim.id, query=q, intent=QueryIntent.BACKGROUND)
                for q in local_queries(claim.text, n)
            ]
        return queries[:n]

    async def retrieve_candidates(
        self,
        claim: Claim,
        queries: list[Query],
        *,
        enable_web: bool = True,
        enable_internal: bool = True,
        prefer_domains: list[str] | None = None,
        avoid_domains: list[str] | None = None,
    ) -> list[CandidateDoc]:
        """Search every query and keep the best-scoring copy of each candidate.

        Candidates are keyed by id, else URL, sorted by score descending and
        truncated to ``search_results_per_claim``. A failing search call is
        logged and skipped.
        """
        s = self._settings
        top_k = s.search_results_per_claim
        calls = []
        for q in queries:
            if enable_internal:
                calls.append(self._deps.search.internal(query=q.query, top_k=top_k))
            if enable_web:
                calls.append(
                    self._deps.search.web(
                        query=q.query,
                        top_k=top_k,
                        prefer=prefer_domains,
                        avoid=avoid_domains,
                        strict=s.strict_domain_filter,
                    )
                )
        results = await asyncio.gather(
            *(with_timeout(c, s.call_timeout_s) for c in calls), return_exceptions=True
        )

        best: dict[str, CandidateDoc] = {}
        for result in results:
            if isinstance(result, BaseException):
                logger.warning(f"Candidate search failed for claim {claim.id}: {result!r}")
                continue
            for doc in result:
                key = doc.id or doc.url
                prev = best.get(key)
                if prev is None or (doc.score or 0) > (prev.score or 0):
                    best[key] = doc

        ranked = sorted(best.values(), key=lambda d: d.score or 0, reverse=True)
        return ranked[:top_k]

    async def extract_evidence(self, claim: Claim, candidate: CandidateDoc) -> list[EvidenceItem]:
        """Fetch a candidate's text and extract stance-labelled quotes from it.

        Returns an empty list when the text is empty or any step fails.
        """
        s = self._settings
        try:
            text = await with_timeout(self._deps.fetcher.get_text(candidate), s.call_timeout_s)
            if not text:
                return []
            user = (
                f"Claim: {claim.text}\nSource: {candidate.title or candidate.url}\n"
                f"Text (truncated):\n{text[: s.max_chars_per_doc]}\n"
                f"Task: Select up to {s.evidence_per_doc} short quotes (<= 40 words) "
                "with stance and 1-line summary."
            )
            out = await with_timeout(
                self._deps.llm.generate(
                    system=EVIDENCE_SYSTEM_PROMPT,
                    user=user,
                    schema_hint=EVIDENCE_SCHEMA_HINT,
                    temperature=0.1,
                ),
                s.call_timeout_s,
            )
        except Exception as e:
            logger.warning(f"Evidence extraction failed for {candidate.url}: {e!r}")
            return []

        raw_items = out.get("items") if isinstance(out, dict) else None
        quality = candidate_quality(candidate)
        evidence: list[EvidenceItem] = []
        for raw in raw_items if isinstance(raw_items, list) else []:
            try:
                item = _ExtractedQuote.model_validate(raw)
            except ValidationError:
                continue
            quote = item.quote.strip()
            if not quote:
                continue
            evidence.append(
                EvidenceItem(
                    id=f"{claim.id}:{candidate.id}:{len(evidence)}",
                    claim_id=claim.id,
                    candidate_id=candidate.id,
                    quote=quote,
                    summary=(item.summary or "").strip(),
                    stance=_parse_stance(item.stance),
                    quality=quality,
                    url=candidate.url,
                    title=candidate.title,
                    location=item.location,
                    published_at=candidate.published_at,
                )
            )
        return evidence[: s.evidence_per_doc]

    def adjudicate(
        self, claim: Claim, evidence: list[EvidenceItem], *, now: datetime | None = None
    ) -> Adjudication:
        """Weigh the evidence by stance and pick a verdict.

        Each item weighs ``quality * recency``. The heaviest stance wins, or
        ``insufficient`` when every bucket is empty. Confidence blends the
        winner's share with the total weight and is clamped to [0.15, 0.98].
        """
        now = now or datetime.now(tz=UTC)
        buckets: dict[Stance, float] = dict.fromkeys(Stance, 0.0)
        for item in evidence:
            buckets[item.stance] += evidence_weight(item, now)

        top_stance, top_weight = max(buckets.items(), key=lambda kv: kv[1])
        verdict = Verdict.INSUFFICIENT if top_weight == 0 else Verdict(top_stance.value)

        total = sum(buckets.values()) or 0.0001
        dominance = top_weight / total
        confidence = max(0.15, min(0.98, 0.4 * dominance + 0.6 * min(1.0, total)))

        ranked = sorted(evidence, key=lambda e: evidence_weight(e, now), reverse=True)
        backing = [e for e in ranked if e.stance.value == verdict.value][:MAX_VERDICT_EVIDENCE]
        counters = [
            e
            for e in ranked
            if e.stance.value != verdict.value and e.stance != Stance.INSUFFICIENT
        ][:MAX_COUNTERS]

        parts = []
        if backing:
            parts.append("; ".join(f"“{e.quote}” - {_cite(e)}" for e in backing[:2]))
        if counters:
            parts.append(f"Counterpoint: “{counters[0].quote}” - {_cite(counters[0])}")

        return Adjudication(
            claim_id=claim.id,
            final_verdict=verdict,
            confidence=confidence,
            rationale=". ".join(parts),
            evidence_ids=tuple(e.id for e in backing),
            counters=tuple(e.id for e in counters),
        )

    async def red_team(
        self, claim: Claim, adjudication: Adjudication, evidence: list[EvidenceItem]
    ) -> Adjudication:
        """Ask the LLM to audit a verdict; it may only lower the confidence.

        ``delta_confidence`` is clamped to [-0.2, 0] and blindspots are
        appended to the rationale. Any failure returns ``adjudication``
        unchanged.
        """
        payload = json.dumps([dataclasses.asdict(e) for e in evidence], default=str)[:8000]
        user = (
            f"Claim: {claim.text}\n"
            f"Verdict: {adjudication.final_verdict} ({adjudication.confidence:.2f})\n"
            f"Evidence:\n{payload}\n"
            "Task: <=120 words blindspots + delta_confidence (-0.2..0)."
        )
        try:
            out = await with_timeout(
                self._deps.llm.generate(
                    system=RED_TEAM_SYSTEM_PROMPT,
                    user=user,
                    schema_hint=RED_TEAM_SCHEMA_HINT,
                    temperature=0.1,
                ),
                self._settings.call_timeout_s,
            )
        except Exception as e:
            logger.warning(f"Red-team audit failed for claim {claim.id}: {e!r}")
            return adjudication

        delta = out.get("delta_confidence") if isinstance(out, dict) else None
        if isinstance(delta, bool) or not isinstance(delta, int | float):
            delta = 0.0
        delta = max(-0.2, min(0.0, float(delta)))

        blindspots = out.get("blindspots") if isinstance(out, dict) else None
        rationale = adjudication.rationale
        if isinstance(blindspots, list) and blindspots:
            rationale += "\nBlindspots: " + "; ".join(str(b) for b in blindspots)

        return dataclasses.replace(
            adjudication,
            confidence=max(0.0, min(1.0, adjudication.confidence + delta)),
            rationale=rationale,
        )

    async def map_claim(
        self,
        claim: Claim,
        context: Any = None,
        *,
        enable_web: bool = True,
        enable_internal: bool = True,
        enable_red_team: bool = False,
        prefer_domains: list[str] | None = None,
        avoid_domains: list[str] | None = None,
    ) -> ClaimMappingResult:
        """Run every stage for a single claim."""
        s = self._settings
        t0 = time.monotonic()
        queries = await self.generate_queries(claim, context)
        candidates = await self.retrieve_candidates(
            claim,
            queries,
            enable_web=enable_web,
            enable_internal=enable_internal,
            prefer_domains=prefer_domains,
            avoid_domains=avoid_domains,
        )
        extracted = await asyncio.gather(
            *(self.extract_evidence(claim, c) for c in candidates[: s.max_evidence_candidates])
        )
        evidence = [e for batch in extracted for e in batch]

        adjudication = self.adjudicate(claim, evidence)
        if enable_red_team:
            adjudication = await self.red_team(claim, adjudication, evidence)

        return ClaimMappingResult(
            claim=claim,
            queries=tuple(queries),
            candidates=tuple(candidates),
            evidence=tuple(evidence),
            adjudication=adjudication,
            meta={"took_ms": round((time.monotonic() - t0) * 1000)},
            context=context,
        )

    async def run(
        self,
        claims: list[Claim],
        contexts: dict[str, Any] | None = None,
        *,
        enable_web: bool = True,
        enable_internal: bool = True,
        enable_red_team: bool = False,
        prefer_domains: list[str] | None = None,
        avoid_domains: list[str] | None = None,
    ) -> list[ClaimMappingResult]:
        """Map every claim and persist the results.

        Args:
            claims: Claims to map.
            contexts: Optional context per claim id, passed to query generation.
            enable_web: Search the web.
            enable_internal: Search the internal corpus.
            enable_red_team: Audit each verdict with a second LLM call.
            prefer_domains: Preferred domains; None uses the configured list.
            avoid_domains: Domains to exclude.

        Returns:
            One result per claim, in input order. A claim whose mapping
            raised gets an ``insufficient`` result with the error in ``meta``.
        """
        s = self._settings
        prefer = list(s.prefer_domains) if prefer_domains is None else list(prefer_domains)
        contexts = contexts or {}

        if self._run_logger:
            self._run_logger.start_run("evidence_engine", {"claims": claims})

        async def worker(claim: Claim, index: int) -> ClaimMappingResult:
            return await self.map_claim(
                claim,
                contexts.get(claim.id),
                enable_web=enable_web,
                enable_internal=enable_internal,
                enable_red_team=enable_red_team,
                prefer_domains=prefer,
                avoid_domains=avoid_domains,
            )

        t0 = time.monotonic()
        outcomes = await run_pool(claims, worker, s.max_concurrency)
        duration = time.monotonic() - t0

        results: list[ClaimMappingResult] = []
        for claim, outcome in zip(claims, outcomes, strict=True):
            if isinstance(outcome, PoolError):
                outcome = ClaimMappingResult(
                    claim=claim,
                    queries=(),
                    candidates=(),
                    evidence=(),
                    adjudication=self.adjudicate(claim, []),
                    meta={"error": outcome.error},
                    context=contexts.get(claim.id),
                )
            results.append(outcome)

        if self._run_logger:
            self._run_logger.log_stage(
                stage="evidence_mapping",
                component=type(self).__name__,
                input_data=claims,
                output_data=results,
                duration_seconds=duration,
            )
            self._run_logger.finish_run(results)

        try:
            await self._deps.storage.persist_results(results)
        except Exception as e:
            logger.warning(f"Persisting {len(results)} results failed: {e!r}")

        logger.info(f"Evidence engine mapped {len(results)} claims in {duration:.2f}s")
        return results
