"""Search adapter that merges several backends."""

import asyncio
import logging

from truthtrollers_evidence.data import CandidateDoc
from truthtrollers_evidence.ports.base import SearchPorts

logger = logging.getLogger(__name__)


class HybridSearch:
    """Query every backend in parallel and merge results by URL.

    Backends are consulted in the given order; the first occurrence of a
    URL wins. A failing backend is logged and skipped.

    Args:
        backends: Search adapters to combine.
    """

    def __init__(self, backends: list[SearchPorts]) -> None:
        self._backends = backends

    async def web(
        self,
        *,
        query: str,
        top_k: int,
        prefer: list[str] | None = None,
        avoid: list[str] | None = None,
        strict: bool = False,
    ) -> list[CandidateDoc]:
        tasks = [
            backend.web(query=query, top_k=top_k, prefer=prefer, avoid=avoid, strict=strict)
            for backend in self._backends
        ]
        results = await asyncio.gather(*tasks, return_exceptions=True)
        return self._merge(results, top_k)

    async def internal(self, *, query: str, top_k: int) -> list[CandidateDoc]:
        tasks = [backend.internal(query=query, top_k=top_k) for backend in self._backends]
        results = await asyncio.gather(*tasks, return_exceptions=True)
        return self._merge(results, top_k)

    def _merge(
        self,
        results: list[list[CandidateDoc] | BaseException],
        top_k: int,
    ) -> list[CandidateDoc]:
        seen_urls: set[str] = set()
        merged: list[CandidateDoc] = []
        for i, result in enumerate(results):
            if isinstance(result, BaseException):
                backend = type(self._backends[i]).__name__
                logger.warning(f"Error in {backend} search: {result}")
                continue
            for doc in result:
                if doc.url not in seen_urls:
                    seen_urls.add(doc.url)
                    merged.append(doc)
        return merged[:top_k]
