"""Tavily web search over its HTTP API."""

import logging
import os
from typing import Any

import httpx

from truthtrollers_evidence.data import CandidateDoc, CandidateSource
from truthtrollers_evidence.url import extract_domain

TAVILY_API_URL = "https://api.tavily.com/search"

logger = logging.getLogger(__name__)


class TavilySearcher:
    """Search the web using the Tavily API.

    A missing API key disables the searcher: every call returns an empty
    list instead of raising, so callers can run without web search.

    Args:
        api_key: Tavily API key (defaults to TAVILY_API_KEY env var).
        search_depth: "basic" or "advanced".
        timeout_s: HTTP timeout per request.
    """

    def __init__(
        self,
        *,
        api_key: str | None = None,
        search_depth: str = "basic",
        timeout_s: float = 30.0,
    ) -> None:
        self._api_key = api_key or os.environ.get("TAVILY_API_KEY")
        if not self._api_key:
            logger.warning("TAVILY_API_KEY is not set; Tavily web search is disabled")
        self._search_depth = search_depth
        self._timeout_s = timeout_s

    @property
    def enabled(self) -> bool:
        return bool(self._api_key)

    async def web(
        self,
        *,
        query: str,
        top_k: int,
        prefer: list[str] | None = None,
        avoid: list[str] | None = None,
        strict: bool = False,
    ) -> list[CandidateDoc]:
        """Search Tavily for ``query``.

        ``prefer`` is only sent as ``include_domains`` when ``strict`` is set;
        ``avoid`` is always sent as ``exclude_domains`` when non-empty.
        """
        if not self._api_key or not query.strip():
            return []

        payload: dict[str, Any] = {
            "query": query,
            "search_depth": self._search_depth,
            "max_results": top_k,
            "include_answer": False,
            "include_raw_content": False,
        }
        if strict and prefer:
            payload["include_domains"] = prefer
        if avoid:
            payload["exclude_domains"] = avoid

        headers = {"Authorization": f"Bearer {self._api_key}"}
        async with httpx.AsyncClient(timeout=self._timeout_s) as client:
            response = await client.post(TAVILY_API_URL, json=payload, headers=headers)
            response.raise_for_status()
            data = response.json()

        results = data.get("results", []) if isinstance(data, dict) else []
        docs: list[CandidateDoc] = []
        for idx, item in enumerate(results):
            url = item.get("url")
            if not url:
                continue
            docs.append(_to_candidate(item, idx))
        return docs[:top_k]

    async def internal(self, *, query: str, top_k: int) -> list[CandidateDoc]:
        """Tavily has no internal corpus."""
        return []


def _to_candidate(item: dict[str, Any], idx: int) -> CandidateDoc:
    """Convert a Tavily result into a CandidateDoc.

    Tavily scores are in [0, 1]; candidates carry scores on a 0-100 scale.
    Results without a score are ranked by position.
    """
    raw_score = item.get("score")
    if isinstance(raw_score, (int, float)):
        score = float(raw_score) * 100
    else:
        score = 100 / (idx + 1)
    url = item["url"]
    return CandidateDoc(
        id=str(item.get("id") or url),
        url=url,
        title=item.get("title"),
        domain=extract_domain(url),
        published_at=item.get("published_date"),
        snippet=item.get("content") or item.get("snippet") or "",
        score=score,
        source=CandidateSource.WEB_SEARCH,
    )
