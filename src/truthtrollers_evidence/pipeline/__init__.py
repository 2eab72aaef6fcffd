"""Claim mapping and evidence engine pipelines."""

from truthtrollers_evidence.pipeline.engine import EvidenceEngine, candidate_quality
from truthtrollers_evidence.pipeline.mapper import ClaimMapper, normalize_claims
from truthtrollers_evidence.pipeline.references import dedupe_references

__all__ = [
    "ClaimMapper",
    "EvidenceEngine",
    "candidate_quality",
    "dedupe_references",
    "normalize_claims",
]
