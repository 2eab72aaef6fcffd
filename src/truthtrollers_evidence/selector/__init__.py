from truthtrollers_evidence.selector.base import EvidenceSelector
from truthtrollers_evidence.selector.heuristic import (
    HEURISTIC_WHY,
    HeuristicEvidenceSelector,
    heuristic_picks,
)
from truthtrollers_evidence.selector.llm import LLMEvidenceSelector

__all__ = [
    "EvidenceSelector",
    "HEURISTIC_WHY",
    "HeuristicEvidenceSelector",
    "LLMEvidenceSelector",
    "heuristic_picks",
]
