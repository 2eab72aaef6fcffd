"""TruthTrollers Evidence: map claims to search queries, evidence and references."""

from truthtrollers_evidence.config import TruthTrollersConfig, create_from_config, load_config
from truthtrollers_evidence.data import (
    Adjudication,
    CandidateDoc,
    Claim,
    ClaimMappingResult,
    EvidenceItem,
    MapClaimsResult,
    MappedClaim,
    Pick,
    Reference,
)
from truthtrollers_evidence.errors import InvalidClaimsError, TruthTrollersError
from truthtrollers_evidence.pipeline import ClaimMapper, EvidenceEngine
from truthtrollers_evidence.ports import EngineDeps, dev_deps
from truthtrollers_evidence.query import QuerySuggester
from truthtrollers_evidence.settings import EngineSettings

__all__ = [
    # Models
    "Adjudication",
    "CandidateDoc",
    "Claim",
    "ClaimMappingResult",
    "EvidenceItem",
    "MapClaimsResult",
    "MappedClaim",
    "Pick",
    "Reference",
    # Errors
    "InvalidClaimsError",
    "TruthTrollersError",
    # Pipelines
    "ClaimMapper",
    "EvidenceEngine",
    "QuerySuggester",
    # Wiring
    "EngineDeps",
    "EngineSettings",
    "TruthTrollersConfig",
    "create_from_config",
    "dev_deps",
    "load_config",
]
