"""Tests for LLMQuerySynthesizer."""

import asyncio
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest

from truthtrollers_evidence.data import ClaimInput
from truthtrollers_evidence.query import LLMQuerySynthesizer, local_queries
from truthtrollers_evidence.query.llm import SCHEMA_HINT, build_user_prompt, clean_queries


def _make_llm(response: Any = None, side_effect: Any = None) -> MagicMock:
    llm = MagicMock()
    llm.generate = AsyncMock(return_value=response, side_effect=side_effect)
    return llm


@pytest.fixture
def claims() -> list[ClaimInput]:
    return [
        ClaimInput(i=0, text="Coffee dehydrates you"),
        ClaimInput(i=2, text="The moon is made of cheese"),
    ]


def test_build_user_prompt_keeps_indices(claims: list[ClaimInput]) -> None:
    prompt = build_user_prompt(claims, 4)
    assert "Keep `i` unchanged for alignment" in prompt
    assert '"i": 2' in prompt
    assert SCHEMA_HINT in prompt


def test_clean_queries() -> None:
    assert clean_queries([" a ", "", None, "a", 3, "b"], 3) == ["a", "3", "b"]


async def test_applies_aligned_items(claims: list[ClaimInput]) -> None:
    llm = _make_llm(
        {
            "items": [
                {"i": 2, "queries": ["moon cheese myth", "moon composition"]},
                {"i": 0, "q": ["coffee hydration study"]},
            ]
        }
    )
    synth = LLMQuerySynthesizer(llm, queries_per_claim=4)
    resolved, stats = await synth.synthesize(claims)

    assert resolved[0] == ["coffee hydration study"]
    assert resolved[2] == ["moon cheese myth", "moon composition"]
    assert stats.tried == 2
    assert stats.applied == 2
    assert stats.missed == 0
    assert sorted(stats.refined) == [0, 2]
    assert llm.generate.call_args.kwargs["temperature"] == 0


async def test_truncates_to_limit(claims: list[ClaimInput]) -> None:
    llm = _make_llm({"items": [{"i": 0, "queries": ["a", "b", "c", "d", "e"]}]})
    synth = LLMQuerySynthesizer(llm, queries_per_claim=2)
    resolved, _ = await synth.synthesize(claims)

    assert resolved[0] == ["a", "b"]
    assert resolved[2] == local_queries("The moon is made of cheese", 2)


async def test_unknown_and_duplicate_indices_are_misses(claims: list[ClaimInput]) -> None:
    llm = _make_llm(
        {
            "items": [
                {"i": 7, "queries": ["stray"]},
                {"i": 0, "queries": ["first"]},
                {"i": 0, "queries": ["second"]},
                {"i": 2, "queries": []},
                {"queries": ["no index"]},
            ]
        }
    )
    synth = LLMQuerySynthesizer(llm, queries_per_claim=4)
    resolved, stats = await synth.synthesize(claims)

    assert resolved[0] == ["first"]
    assert resolved[2] == local_queries("The moon is made of cheese", 4)
    assert stats.applied == 1
    assert stats.missed == 4


async def test_llm_error_falls_back_for_whole_batch(claims: list[ClaimInput]) -> None:
    llm = _make_llm(side_effect=RuntimeError("boom"))
    synth = LLMQuerySynthesizer(llm, queries_per_claim=4)
    resolved, stats = await synth.synthesize(claims)

    assert resolved == {c.i: local_queries(c.text, 4) for c in claims}
    assert stats.llm_error == "boom"
    assert stats.applied == 0


async def test_empty_items_fall_back(claims: list[ClaimInput]) -> None:
    synth = LLMQuerySynthesizer(_make_llm({}), queries_per_claim=3)
    resolved, stats = await synth.synthesize(claims)

    assert resolved == {c.i: local_queries(c.text, 3) for c in claims}
    assert stats.tried == 2


async def test_disabled_never_calls_llm(claims: list[ClaimInput]) -> None:
    llm = _make_llm({"items": []})
    synth = LLMQuerySynthesizer(llm, queries_per_claim=4, enabled=False)
    resolved, stats = await synth.synthesize(claims)

    llm.generate.assert_not_called()
    assert stats.tried == 0
    assert resolved[0] == local_queries("Coffee dehydrates you", 4)


async def test_timeout_falls_back(claims: list[ClaimInput]) -> None:
    async def slow(**kwargs: Any) -> dict[str, Any]:
        await asyncio.sleep(1)
        return {"items": [{"i": 0, "queries": ["late"]}]}

    llm = MagicMock()
    llm.generate = slow
    synth = LLMQuerySynthesizer(llm, queries_per_claim=4, call_timeout_s=0.01)
    resolved, stats = await synth.synthesize(claims)

    assert resolved[0] == local_queries("Coffee dehydrates you", 4)
    assert stats.llm_error is not None
