"""Exa search using the official exa-py SDK."""

import logging
import os

from exa_py import AsyncExa

from truthtrollers_evidence.data import CandidateDoc, CandidateSource
from truthtrollers_evidence.url import extract_domain

logger = logging.getLogger(__name__)


class ExaSearcher:
    """Search the web using the Exa API.

    Without an API key the searcher is disabled and returns no results.

    Args:
        api_key: Exa API key (defaults to EXA_API_KEY env var).
    """

    def __init__(self, *, api_key: str | None = None) -> None:
        self._api_key = api_key or os.environ.get("EXA_API_KEY")
        self._client: AsyncExa | None = None
        if self._api_key:
            self._client = AsyncExa(api_key=self._api_key)
        else:
            logger.warning("EXA_API_KEY is not set; Exa web search is disabled")

    async def web(
        self,
        *,
        query: str,
        top_k: int,
        prefer: list[str] | None = None,
        avoid: list[str] | None = None,
        strict: bool = False,
    ) -> list[CandidateDoc]:
        if self._client is None or not query.strip():
            return []

        response = await self._client.search(
            query,
            num_results=top_k,
            include_domains=prefer if strict and prefer else None,
            exclude_domains=avoid or None,
        )

        docs: list[CandidateDoc] = []
        for idx, result in enumerate(response.results):
            if not result.url:
                continue
            score = getattr(result, "score", None)
            docs.append(
                CandidateDoc(
                    id=str(getattr(result, "id", None) or result.url),
                    url=result.url,
                    title=result.title or "",
                    domain=extract_domain(result.url),
                    published_at=result.published_date,
                    snippet=getattr(result, "text", None) or "",
                    score=float(score) * 100 if isinstance(score, (int, float)) else 100 / (idx + 1),
                    source=CandidateSource.WEB_SEARCH,
                )
            )
        return docs[:top_k]

    async def internal(self, *, query: str, top_k: int) -> list[CandidateDoc]:
        return []
