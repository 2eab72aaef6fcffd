from typing import Any

from truthtrollers_evidence.data import ClaimMappingResult


class NoOpStorage:
    """Storage port that caches nothing and discards results."""

    async def cache_get(self, key: str) -> Any | None:
        return None

    async def cache_set(self, key: str, value: Any, ttl_s: int | None = None) -> None:
        return None

    async def persist_results(self, results: list[ClaimMappingResult]) -> None:
        return None
