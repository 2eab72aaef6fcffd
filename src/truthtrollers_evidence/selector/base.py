from typing import Protocol

from truthtrollers_evidence.data import CandidateDoc, Pick, SelectionMethod


class EvidenceSelector(Protocol):
    """Interface for picking and labelling evidence among candidates."""

    async def select(
        self, claim: str, candidates: list[CandidateDoc], picks: int
    ) -> tuple[list[Pick], SelectionMethod]: ...
