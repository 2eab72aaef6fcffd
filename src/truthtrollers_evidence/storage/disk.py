"""Disk-backed storage using diskcache."""

import asyncio
import dataclasses
import json
import logging
from pathlib import Path
from typing import Any

import diskcache

from truthtrollers_evidence.data import ClaimMappingResult

logger = logging.getLogger(__name__)


class DiskCacheStorage:
    """Cache entries in a diskcache directory and append results as JSON lines.

    Disk reads and writes run in worker threads so the event loop is not blocked.

    Args:
        directory: Cache directory, created if missing.
        results_file: File name for persisted results inside ``directory``.
    """

    def __init__(self, directory: Path | str, *, results_file: str = "results.jsonl") -> None:
        self._directory = Path(directory)
        self._directory.mkdir(parents=True, exist_ok=True)
        self._cache = diskcache.Cache(str(self._directory))
        self._results_path = self._directory / results_file

    @property
    def results_path(self) -> Path:
        return self._results_path

    def close(self) -> None:
        self._cache.close()

    async def cache_get(self, key: str) -> Any | None:
        return await asyncio.to_thread(self._cache.get, key)

    async def cache_set(self, key: str, value: Any, ttl_s: int | None = None) -> None:
        await asyncio.to_thread(self._cache.set, key, value, expire=ttl_s or None)

    async def persist_results(self, results: list[ClaimMappingResult]) -> None:
        if not results:
            return
        await asyncio.to_thread(self._append_results, results)
        logger.info(f"Persisted {len(results)} claim results to {self._results_path}")

    def _append_results(self, results: list[ClaimMappingResult]) -> None:
        with self._results_path.open("a", encoding="utf-8") as f:
            for result in results:
                f.write(json.dumps(dataclasses.asdict(result), default=str) + "\n")
