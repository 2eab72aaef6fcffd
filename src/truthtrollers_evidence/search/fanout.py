"""Per-claim search fan-out with URL deduplication."""

import asyncio
import logging

from truthtrollers_evidence.concurrency import with_timeout
from truthtrollers_evidence.data import CandidateDoc, SearchStats
from truthtrollers_evidence.ports.base import SearchPorts

logger = logging.getLogger(__name__)


class SearchFanout:
    """Run one web search per query and merge the results.

    All queries for a claim are issued in parallel. Results are flattened in
    query submission order, deduplicated by URL (first occurrence wins) and
    truncated to ``max_results``; they are not re-sorted by score.

    A query that fails or times out is logged and contributes no
    candidates; the other queries are unaffected.

    Args:
        search: Search adapter.
        max_results: Cap on merged candidates, also the per-query ``top_k``.
        strict_domain_filter: Restrict backends to the preferred domains.
        call_timeout_s: Timeout for each backend call (None disables).
    """

    def __init__(
        self,
        search: SearchPorts,
        *,
        max_results: int = 8,
        strict_domain_filter: bool = False,
        call_timeout_s: float | None = 30.0,
    ) -> None:
        self._search = search
        self._max_results = max_results
        self._strict = strict_domain_filter
        self._timeout_s = call_timeout_s

    async def search(
        self,
        queries: list[str],
        *,
        prefer_domains: list[str] | None = None,
        avoid_domains: list[str] | None = None,
    ) -> tuple[list[CandidateDoc], SearchStats]:
        """Search every query and merge the results.

        Args:
            queries: Query strings for a single claim.
            prefer_domains: Preferred domains, advisory unless strict filtering is on.
            avoid_domains: Domains to exclude.

        Returns:
            Tuple of (deduplicated candidates, stats).
        """
        prefer = list(prefer_domains) if prefer_domains else None
        avoid = list(avoid_domains) if avoid_domains else None
        tasks = [
            with_timeout(
                self._search.web(
                    query=query,
                    top_k=self._max_results,
                    prefer=prefer,
                    avoid=avoid,
                    strict=self._strict,
                ),
                self._timeout_s,
            )
            for query in queries
        ]
        results = await asyncio.gather(*tasks, return_exceptions=True)

        stats = SearchStats(requests=len(queries))
        seen_urls: set[str] = set()
        merged: list[CandidateDoc] = []

        for query, result in zip(queries, results, strict=True):
            if isinstance(result, BaseException):
                stats.failures += 1
                logger.warning(f"Search failed for query {query!r}. Error: {result!r}")
                continue
            stats.pre_dedup_count += len(result)
            for doc in result:
                if not doc.url or doc.url in seen_urls:
                    continue
                seen_urls.add(doc.url)
                merged.append(doc)

        return (merged[: self._max_results], stats)
