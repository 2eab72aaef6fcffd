"""In-process storage with a TTL cache."""

import time
from typing import Any

from truthtrollers_evidence.data import ClaimMappingResult


class MemoryStorage:
    """Dictionary-backed cache whose lifetime is that of the instance.

    Entries expire after their TTL; when ``max_entries`` is exceeded the
    oldest entry is evicted. Persisted results are kept in ``persisted``.

    Args:
        max_entries: Maximum number of cached entries.
    """

    def __init__(self, *, max_entries: int = 1000) -> None:
        self._max_entries = max_entries
        self._entries: dict[str, tuple[float | None, Any]] = {}
        self.persisted: list[ClaimMappingResult] = []

    @property
    def size(self) -> int:
        """Number of live or not yet purged entries."""
        return len(self._entries)

    def clear(self) -> None:
        self._entries.clear()
        self.persisted.clear()

    async def cache_get(self, key: str) -> Any | None:
        entry = self._entries.get(key)
        if entry is None:
            return None
        expires_at, value = entry
        if expires_at is not None and time.monotonic() >= expires_at:
            del self._entries[key]
            return None
        return value

    async def cache_set(self, key: str, value: Any, ttl_s: int | None = None) -> None:
        expires_at = time.monotonic() + ttl_s if ttl_s else None
        self._entries.pop(key, None)
        self._entries[key] = (expires_at, value)
        while len(self._entries) > self._max_entries:
            oldest = next(iter(self._entries))
            del self._entries[oldest]

    async def persist_results(self, results: list[ClaimMappingResult]) -> None:
        self.persisted.extend(results)
