"""Core data models for the evidence engine."""

from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any


class QueryIntent(StrEnum):
    """What a search query is trying to surface for a claim."""

    SUPPORT = "support"
    REFUTE = "refute"
    BACKGROUND = "background"
    FACTBOX = "factbox"


class CandidateSource(StrEnum):
    """Where a candidate document came from."""

    INTERNAL_DB = "internal_db"
    WEB_SEARCH = "web_search"
    UPLOAD = "upload"
    ARCHIVE = "archive"


class Stance(StrEnum):
    """Relationship of an extracted quote to a claim."""

    SUPPORT = "support"
    REFUTE = "refute"
    NUANCE = "nuance"
    INSUFFICIENT = "insufficient"


class Verdict(StrEnum):
    """Final adjudication of a claim."""

    SUPPORT = "support"
    REFUTE = "refute"
    NUANCE = "nuance"
    INSUFFICIENT = "insufficient"


class PickStance(StrEnum):
    """Stance label attached to a picked search result."""

    SUPPORT = "support"
    REFUTE = "refute"
    NEUTRAL = "neutral"


class SelectionMethod(StrEnum):
    """How the picks for a claim were produced."""

    LLM = "llm"
    HEURISTIC = "heuristic"
    NONE = "none"


@dataclass(frozen=True)
class Claim:
    """An atomic, falsifiable assertion extracted upstream."""

    id: str
    text: str
    language: str | None = None
    source_content_id: str | None = None


@dataclass(frozen=True)
class Query:
    """A search query generated for a claim."""

    claim_id: str
    query: str
    intent: QueryIntent


@dataclass(frozen=True)
class CandidateDoc:
    """A search result considered as potential evidence."""

    id: str
    url: str
    title: str | None = None
    domain: str | None = None
    published_at: str | None = None
    snippet: str | None = None
    score: float | None = None
    source: CandidateSource = CandidateSource.WEB_SEARCH


@dataclass(frozen=True)
class EvidenceItem:
    """A quote extracted from a candidate, labelled with its stance.

    ``quality`` is a confidence in [0, 1] derived from the candidate's
    search score and the credibility of its domain.
    """

    id: str
    claim_id: str
    candidate_id: str
    quote: str
    summary: str
    stance: Stance
    quality: float
    url: str | None = None
    title: str | None = None
    location: dict[str, Any] | None = None
    published_at: str | None = None


@dataclass(frozen=True)
class Adjudication:
    """Weighted verdict over a claim's evidence."""

    claim_id: str
    final_verdict: Verdict
    confidence: float
    rationale: str
    evidence_ids: tuple[str, ...] = ()
    counters: tuple[str, ...] = ()


@dataclass(frozen=True)
class ClaimMappingResult:
    """Everything the evidence engine produced for one claim."""

    claim: Claim
    queries: tuple[Query, ...]
    candidates: tuple[CandidateDoc, ...]
    evidence: tuple[EvidenceItem, ...]
    adjudication: Adjudication
    meta: dict[str, Any] | None = None
    context: dict[str, Any] | None = None


@dataclass(frozen=True)
class Pick:
    """A candidate selected as evidence for a claim."""

    url: str
    title: str
    stance: PickStance
    why: str


@dataclass(frozen=True)
class ClaimInput:
    """A normalized request entry; ``i`` is its position in the raw request."""

    i: int
    text: str
    queries: tuple[str, ...] = ()


@dataclass(frozen=True)
class MappedClaim:
    """One entry of the map-claims ``items`` list."""

    i: int
    claim: str
    picks: list[Pick] = field(default_factory=list)
    queries: list[str] | None = None


@dataclass
class Reference:
    """A source deduplicated by URL with every claim that cites it."""

    url: str
    content_name: str
    claims: list[str] = field(default_factory=list)
    origin: str = "claim"


@dataclass
class MapClaimsResult:
    """Aggregated output of a map-claims run."""

    success: bool
    items: list[MappedClaim]
    references: list[Reference]
    took_ms: int
    meta: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class QuerySuggestion:
    """Suggested queries and domain hints for a single claim."""

    claim: str
    queries: tuple[str, ...]
    prefer_domains: tuple[str, ...] = ()
    avoid_domains: tuple[str, ...] = ()


@dataclass
class QueryStats:
    """Counters from query synthesis."""

    tried: int = 0
    applied: int = 0
    missed: int = 0
    llm_error: str | None = None
    refined: list[int] = field(default_factory=list)


@dataclass
class SearchStats:
    """Counters from one claim's search fan-out."""

    requests: int = 0
    failures: int = 0
    pre_dedup_count: int = 0

    def __iadd__(self, other: "SearchStats") -> "SearchStats":
        self.requests += other.requests
        self.failures += other.failures
        self.pre_dedup_count += other.pre_dedup_count
        return self
