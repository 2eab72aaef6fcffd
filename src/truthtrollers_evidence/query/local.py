"""Deterministic templated queries used when no LLM is available."""

from truthtrollers_evidence.data import ClaimInput, QueryStats


def local_queries(claim: str, limit: int = 4) -> list[str]:
    """Build fallback search queries for a claim.

    The result depends only on the claim text and ``limit``: the claim
    itself, a fact-check query and three site-restricted queries, with
    duplicates removed and truncated to ``limit``.
    """
    text = claim.strip()
    if not text:
        return []
    base = [
        text,
        f"{text} fact check",
        f"{text} site:wikipedia.org",
        f"{text} site:reuters.com",
        f"{text} site:apnews.com",
    ]
    return list(dict.fromkeys(base))[:limit]


class LocalQuerySynthesizer:
    """Query synthesizer that never calls a model.

    Args:
        queries_per_claim: Maximum queries per claim.
    """

    def __init__(self, *, queries_per_claim: int = 4) -> None:
        self._limit = queries_per_claim

    async def synthesize(
        self, claims: list[ClaimInput]
    ) -> tuple[dict[int, list[str]], QueryStats]:
        resolved = {c.i: local_queries(c.text, self._limit) for c in claims}
        return (resolved, QueryStats())
