"""Tests for protocol compliance."""

import inspect

import pytest

from truthtrollers_evidence.fetch import HttpFetcher
from truthtrollers_evidence.llm import ClaudeJsonLLM, OpenAIJsonLLM
from truthtrollers_evidence.ports import DevFetcher, DevLLM, DevSearch, DevStorage
from truthtrollers_evidence.query import LLMQuerySynthesizer, LocalQuerySynthesizer
from truthtrollers_evidence.search import ExaSearcher, HybridSearch, TavilySearcher
from truthtrollers_evidence.selector import HeuristicEvidenceSelector, LLMEvidenceSelector
from truthtrollers_evidence.storage import MemoryStorage, NoOpStorage


def _has_async(obj: object, *names: str) -> bool:
    return all(inspect.iscoroutinefunction(getattr(obj, name, None)) for name in names)


def test_llm_adapters_match_protocol(monkeypatch: pytest.MonkeyPatch) -> None:
    """Every LLM adapter structurally matches LLMJson."""
    monkeypatch.setenv("OPENAI_API_KEY", "test")
    for llm in (ClaudeJsonLLM(api_key="test"), OpenAIJsonLLM(), DevLLM()):
        assert _has_async(llm, "generate")
        assert isinstance(llm.model, str)


def test_search_adapters_match_protocol() -> None:
    """Every search adapter structurally matches SearchPorts."""
    searchers = [
        TavilySearcher(api_key="test"),
        ExaSearcher(api_key="test"),
        HybridSearch([DevSearch()]),
        DevSearch(),
    ]
    for searcher in searchers:
        assert _has_async(searcher, "web", "internal")


def test_fetchers_match_protocol() -> None:
    for fetcher in (HttpFetcher(), DevFetcher()):
        assert _has_async(fetcher, "get_text")


def test_storage_matches_protocol() -> None:
    for storage in (MemoryStorage(), NoOpStorage(), DevStorage()):
        assert _has_async(storage, "cache_get", "cache_set", "persist_results")


def test_synthesizers_and_selectors_match_protocol() -> None:
    llm = DevLLM()
    for synth in (LocalQuerySynthesizer(), LLMQuerySynthesizer(llm)):
        assert _has_async(synth, "synthesize")
    for selector in (HeuristicEvidenceSelector(), LLMEvidenceSelector(llm)):
        assert _has_async(selector, "select")


class MockSearch:
    """A minimal implementation to verify protocol requirements."""

    async def web(self, *, query, top_k, prefer=None, avoid=None, strict=False):
        return []

    async def internal(self, *, query, top_k):
        return []


def test_mock_search_satisfies_protocol() -> None:
    """Any class with the right method signatures satisfies the protocol."""
    assert _has_async(MockSearch(), "web", "internal")
