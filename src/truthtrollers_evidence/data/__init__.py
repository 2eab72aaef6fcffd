"""Data models for the evidence engine."""

from truthtrollers_evidence.data.models import (
    Adjudication,
    CandidateDoc,
    CandidateSource,
    Claim,
    ClaimInput,
    ClaimMappingResult,
    EvidenceItem,
    MapClaimsResult,
    MappedClaim,
    Pick,
    PickStance,
    Query,
    QueryIntent,
    QueryStats,
    QuerySuggestion,
    Reference,
    SearchStats,
    SelectionMethod,
    Stance,
    Verdict,
)

__all__ = [
    "Adjudication",
    "CandidateDoc",
    "CandidateSource",
    "Claim",
    "ClaimInput",
    "ClaimMappingResult",
    "EvidenceItem",
    "MapClaimsResult",
    "MappedClaim",
    "Pick",
    "PickStance",
    "Query",
    "QueryIntent",
    "QueryStats",
    "QuerySuggestion",
    "Reference",
    "SearchStats",
    "SelectionMethod",
    "Stance",
    "Verdict",
]
