"""LLM-backed evidence selection with heuristic fallback."""

import json
import logging

from pydantic import BaseModel, ValidationError

from truthtrollers_evidence.concurrency import with_timeout
from truthtrollers_evidence.data import CandidateDoc, Pick, PickStance, SelectionMethod
from truthtrollers_evidence.ports.base import LLMJson
from truthtrollers_evidence.selector.heuristic import heuristic_picks

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = "Return strict JSON only."

SCHEMA_HINT = (
    '{"pick":[{"url":"...","title":"...","stance":"support|refute|neutral","why":"..."}]}'
)


class _PickItem(BaseModel):
    url: str
    title: str | None = None
    stance: str | None = None
    why: str | None = None


def build_user_prompt(claim: str, candidates: list[dict[str, str | None]], picks: int) -> str:
    return (
        f"Pick up to {picks} links from CANDIDATES that best assess the CLAIM. "
        "Prefer high-credibility/primary sources. "
        'Label stance: "support" | "refute" | "neutral" and add a short "why". '
        f"Return EXACTLY: {SCHEMA_HINT} "
        "CLAIM:\n" + json.dumps(claim) + "\n"
        "CANDIDATES:\n" + json.dumps(candidates)
    )


def _parse_stance(raw: str | None) -> PickStance:
    try:
        return PickStance(str(raw).strip().lower())
    except ValueError:
        return PickStance.NEUTRAL


class LLMEvidenceSelector:
    """Pick the best candidates for a claim with one LLM call.

    The response is validated against the candidate list: picks without a
    URL or with a URL that was not offered are dropped, unknown stances
    become neutral, and missing titles come from the candidate. An empty
    result, a failed call or a disabled selector falls back to
    ``heuristic_picks``. LLM failures never propagate.

    Args:
        llm: JSON LLM port.
        enabled: When False, always use the heuristic.
        call_timeout_s: Timeout for the LLM call (None disables).
    """

    def __init__(
        self,
        llm: LLMJson,
        *,
        enabled: bool = True,
        call_timeout_s: float | None = 30.0,
    ) -> None:
        self._llm = llm
        self._enabled = enabled
        self._timeout_s = call_timeout_s

    async def select(
        self, claim: str, candidates: list[CandidateDoc], picks: int
    ) -> tuple[list[Pick], SelectionMethod]:
        """Select up to ``picks`` candidates as evidence for ``claim``.

        Returns:
            Tuple of (picks, how they were selected).
        """
        if not candidates:
            return ([], SelectionMethod.NONE)

        offered = [{"url": c.url, "title": c.title, "snippet": c.snippet} for c in candidates]

        if self._enabled:
            try:
                out = await with_timeout(
                    self._llm.generate(
                        system=SYSTEM_PROMPT,
                        user=build_user_prompt(claim, offered, picks),
                        schema_hint=SCHEMA_HINT,
                        temperature=0,
                    ),
                    self._timeout_s,
                )
                chosen = self._validate(out, candidates, picks)
                if chosen:
                    return (chosen, SelectionMethod.LLM)
                logger.warning(f"Picker returned no usable picks for claim {claim[:80]!r}")
            except Exception as e:
                logger.warning(f"Picker LLM failed, using heuristic. Error: {e!r}")

        return (heuristic_picks(candidates, picks), SelectionMethod.HEURISTIC)

    def _validate(self, out: object, candidates: list[CandidateDoc], picks: int) -> list[Pick]:
        raw_picks = out.get("pick") if isinstance(out, dict) else None
        if not isinstance(raw_picks, list):
            return []

        by_url = {c.url: c for c in candidates}
        chosen: list[Pick] = []
        seen: set[str] = set()
        for raw in raw_picks:
            try:
                item = _PickItem.model_validate(raw)
            except ValidationError:
                continue
            url = item.url.strip()
            candidate = by_url.get(url)
            if candidate is None or url in seen:
                continue
            seen.add(url)
            chosen.append(
                Pick(
                    url=url,
                    title=(item.title or "").strip() or candidate.title or url,
                    stance=_parse_stance(item.stance),
                    why=(item.why or "").strip(),
                )
            )
        return chosen[:picks]
