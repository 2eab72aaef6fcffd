from typing import Protocol

from truthtrollers_evidence.data import ClaimInput, QueryStats


class QuerySynthesizer(Protocol):
    """Interface for turning claims into bounded search query lists."""

    async def synthesize(
        self, claims: list[ClaimInput]
    ) -> tuple[dict[int, list[str]], QueryStats]: ...
