"""Heuristic evidence selection: trust the search ranking."""

from truthtrollers_evidence.data import CandidateDoc, Pick, PickStance, SelectionMethod

HEURISTIC_WHY = "High-ranked search result."


def heuristic_picks(candidates: list[CandidateDoc], picks: int) -> list[Pick]:
    """Take the first ``picks`` candidates in their given order, all neutral."""
    return [
        Pick(
            url=c.url,
            title=c.title or c.url,
            stance=PickStance.NEUTRAL,
            why=HEURISTIC_WHY,
        )
        for c in candidates[:picks]
    ]


class HeuristicEvidenceSelector:
    """Selector that never calls a model."""

    async def select(
        self, claim: str, candidates: list[CandidateDoc], picks: int
    ) -> tuple[list[Pick], SelectionMethod]:
        if not candidates:
            return ([], SelectionMethod.NONE)
        return (heuristic_picks(candidates, picks), SelectionMethod.HEURISTIC)
