"""Tests for SearchFanout."""

import asyncio
from typing import Any
from unittest.mock import AsyncMock, MagicMock

from truthtrollers_evidence.data import CandidateDoc
from truthtrollers_evidence.search import SearchFanout


def _doc(url: str, score: float = 50) -> CandidateDoc:
    return CandidateDoc(id=url, url=url, title=url.rsplit("/", 1)[-1], score=score)


def _make_search(by_query: dict[str, Any]) -> MagicMock:
    """Search double returning (or raising) a fixed value per query."""

    async def web(*, query: str, **kwargs: Any) -> list[CandidateDoc]:
        result = by_query[query]
        if isinstance(result, BaseException):
            raise result
        return result

    search = MagicMock()
    search.web = AsyncMock(side_effect=web)
    return search


async def test_merges_in_query_order_and_dedups_by_url() -> None:
    search = _make_search(
        {
            "q1": [_doc("https://a.com/1", 10), _doc("https://b.com/2", 90)],
            "q2": [_doc("https://b.com/2", 99), _doc("https://c.com/3", 80)],
        }
    )
    fanout = SearchFanout(search, max_results=8)
    docs, stats = await fanout.search(["q1", "q2"])

    assert [d.url for d in docs] == ["https://a.com/1", "https://b.com/2", "https://c.com/3"]
    # First occurrence wins, no score re-sorting
    assert docs[1].score == 90
    assert stats.requests == 2
    assert stats.pre_dedup_count == 4


async def test_truncates_to_max_results() -> None:
    search = _make_search({"q": [_doc(f"https://a.com/{n}") for n in range(10)]})
    fanout = SearchFanout(search, max_results=3)
    docs, _ = await fanout.search(["q"])

    assert len(docs) == 3
    assert search.web.call_args.kwargs["top_k"] == 3


async def test_failed_query_contributes_nothing() -> None:
    search = _make_search(
        {"good": [_doc("https://a.com/1")], "bad": RuntimeError("quota exceeded")}
    )
    fanout = SearchFanout(search)
    docs, stats = await fanout.search(["bad", "good"])

    assert [d.url for d in docs] == ["https://a.com/1"]
    assert stats.failures == 1


async def test_drops_results_without_url() -> None:
    search = _make_search({"q": [CandidateDoc(id="x", url=""), _doc("https://a.com/1")]})
    docs, _ = await SearchFanout(search).search(["q"])
    assert [d.url for d in docs] == ["https://a.com/1"]


async def test_passes_domain_filters() -> None:
    search = _make_search({"q": []})
    fanout = SearchFanout(search, strict_domain_filter=True)
    await fanout.search(["q"], prefer_domains=["reuters.com"], avoid_domains=["spam.com"])

    kwargs = search.web.call_args.kwargs
    assert kwargs["prefer"] == ["reuters.com"]
    assert kwargs["avoid"] == ["spam.com"]
    assert kwargs["strict"] is True


async def test_empty_avoid_is_not_sent() -> None:
    search = _make_search({"q": []})
    await SearchFanout(search).search(["q"], prefer_domains=[], avoid_domains=[])

    kwargs = search.web.call_args.kwargs
    assert kwargs["avoid"] is None
    assert kwargs["strict"] is False


async def test_queries_run_in_parallel() -> None:
    in_flight = 0
    peak = 0

    async def web(**kwargs: Any) -> list[CandidateDoc]:
        nonlocal in_flight, peak
        in_flight += 1
        peak = max(peak, in_flight)
        await asyncio.sleep(0.01)
        in_flight -= 1
        return []

    search = MagicMock()
    search.web = web
    await SearchFanout(search).search(["q1", "q2", "q3"])
    assert peak == 3


async def test_timed_out_query_is_a_failure() -> None:
    async def web(*, query: str, **kwargs: Any) -> list[CandidateDoc]:
        if query == "slow":
            await asyncio.sleep(1)
        return [_doc(f"https://a.com/{query}")]

    search = MagicMock()
    search.web = web
    fanout = SearchFanout(search, call_timeout_s=0.05)
    docs, stats = await fanout.search(["slow", "fast"])

    assert [d.url for d in docs] == ["https://a.com/fast"]
    assert stats.failures == 1
