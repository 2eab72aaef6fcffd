"""Tests for storage port implementations."""

import asyncio
import json
from pathlib import Path
from types import SimpleNamespace
from typing import Any

import pytest

from truthtrollers_evidence.data import Adjudication, Claim, ClaimMappingResult, Verdict
from truthtrollers_evidence.storage import DiskCacheStorage, MemoryStorage, NoOpStorage, cache_key
from truthtrollers_evidence.storage import disk, memory


def _result(claim_id: str = "c1") -> ClaimMappingResult:
    return ClaimMappingResult(
        claim=Claim(id=claim_id, text="text"),
        queries=(),
        candidates=(),
        evidence=(),
        adjudication=Adjudication(
            claim_id=claim_id,
            final_verdict=Verdict.INSUFFICIENT,
            confidence=0.15,
            rationale="",
        ),
    )


def test_cache_key_is_stable_and_namespaced() -> None:
    assert cache_key("queries", " Claim ") == cache_key("queries", "Claim")
    assert cache_key("queries", "Claim") != cache_key("suggest", "Claim")
    assert cache_key("queries", "Claim").startswith("queries:")


class TestMemoryStorage:
    """Tests for MemoryStorage."""

    async def test_set_and_get(self) -> None:
        storage = MemoryStorage()
        await storage.cache_set("k", ["a", "b"])
        assert await storage.cache_get("k") == ["a", "b"]
        assert await storage.cache_get("missing") is None

    async def test_expired_entry_is_dropped(self, monkeypatch: pytest.MonkeyPatch) -> None:
        clock = [1000.0]
        monkeypatch.setattr(memory, "time", SimpleNamespace(monotonic=lambda: clock[0]))
        storage = MemoryStorage()
        await storage.cache_set("k", "v", ttl_s=10)

        clock[0] += 5
        assert await storage.cache_get("k") == "v"
        clock[0] += 10
        assert await storage.cache_get("k") is None
        assert storage.size == 0

    async def test_evicts_oldest(self) -> None:
        storage = MemoryStorage(max_entries=2)
        await storage.cache_set("a", 1)
        await storage.cache_set("b", 2)
        await storage.cache_set("c", 3)

        assert await storage.cache_get("a") is None
        assert await storage.cache_get("c") == 3
        assert storage.size == 2

    def test_empty_storage_is_truthy(self) -> None:
        assert MemoryStorage()

    async def test_persist_results(self) -> None:
        storage = MemoryStorage()
        await storage.persist_results([_result()])
        assert len(storage.persisted) == 1
        storage.clear()
        assert storage.persisted == []


async def test_noop_storage() -> None:
    storage = NoOpStorage()
    await storage.cache_set("k", "v")
    assert await storage.cache_get("k") is None
    await storage.persist_results([_result()])


class TestDiskCacheStorage:
    """Tests for DiskCacheStorage."""

    async def test_cache_round_trip(self, tmp_path: Path) -> None:
        storage = DiskCacheStorage(tmp_path / "cache")
        try:
            await storage.cache_set("k", {"queries": ["q1"]}, ttl_s=60)
            assert await storage.cache_get("k") == {"queries": ["q1"]}
        finally:
            storage.close()

    async def test_persist_appends_json_lines(self, tmp_path: Path) -> None:
        storage = DiskCacheStorage(tmp_path)
        try:
            await storage.persist_results([_result("c1"), _result("c2")])
            await storage.persist_results([_result("c3")])
        finally:
            storage.close()

        lines = storage.results_path.read_text().splitlines()
        assert [json.loads(line)["claim"]["id"] for line in lines] == ["c1", "c2", "c3"]
        assert json.loads(lines[0])["adjudication"]["final_verdict"] == "insufficient"

    async def test_disk_io_runs_in_worker_threads(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        calls: list[str] = []
        to_thread = asyncio.to_thread

        async def recording_to_thread(func: Any, /, *args: Any, **kwargs: Any) -> Any:
            calls.append(func.__name__)
            return await to_thread(func, *args, **kwargs)

        monkeypatch.setattr(disk.asyncio, "to_thread", recording_to_thread)
        storage = DiskCacheStorage(tmp_path)
        try:
            await storage.cache_set("k", "v")
            assert await storage.cache_get("k") == "v"
            await storage.persist_results([_result()])
        finally:
            storage.close()

        assert calls == ["set", "get", "_append_results"]
