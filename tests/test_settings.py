"""Tests for EngineSettings and environment overrides."""

import pytest
from pydantic import ValidationError

from truthtrollers_evidence.settings import DEFAULT_PREFER_DOMAINS, EngineSettings


def test_defaults() -> None:
    settings = EngineSettings()
    assert settings.queries_per_claim == 4
    assert settings.search_results_per_claim == 8
    assert settings.picks_per_claim == 3
    assert settings.max_concurrency == 4
    assert settings.refine_queries_with_llm is True
    assert settings.pick_with_llm is True
    assert settings.strict_domain_filter is False
    assert settings.call_timeout_s == 30.0
    assert settings.query_cache_ttl_s == 86400
    assert settings.prefer_domains == DEFAULT_PREFER_DOMAINS


def test_from_env_overrides() -> None:
    settings = EngineSettings.from_env(
        {
            "QUERIES_PER_CLAIM": "2",
            "PICKS_PER_CLAIM": "5",
            "PICK_WITH_LLM": "false",
            "STRICT_DOMAIN_FILTER": "1",
            "PREFER_DOMAINS": "who.int, nih.gov,,",
            "CALL_TIMEOUT_S": "12.5",
        }
    )
    assert settings.queries_per_claim == 2
    assert settings.picks_per_claim == 5
    assert settings.pick_with_llm is False
    assert settings.strict_domain_filter is True
    assert settings.prefer_domains == ("who.int", "nih.gov")
    assert settings.call_timeout_s == 12.5


def test_claim_concurrency_wins_over_max_concurrency() -> None:
    settings = EngineSettings.from_env({"MAX_CONCURRENCY": "6", "CLAIM_CONCURRENCY": "2"})
    assert settings.max_concurrency == 2


@pytest.mark.parametrize("raw", ["0", "none", "off"])
def test_timeout_can_be_disabled(raw: str) -> None:
    assert EngineSettings.from_env({"CALL_TIMEOUT_S": raw}).call_timeout_s is None


def test_from_env_keeps_base_values() -> None:
    base = EngineSettings(picks_per_claim=7)
    settings = EngineSettings.from_env({"QUERIES_PER_CLAIM": " "}, base=base)
    assert settings.picks_per_claim == 7
    assert settings.queries_per_claim == 4


def test_invalid_env_value_raises() -> None:
    with pytest.raises(ValidationError):
        EngineSettings.from_env({"QUERIES_PER_CLAIM": "zero"})


def test_limits_must_be_positive() -> None:
    with pytest.raises(ValidationError):
        EngineSettings(picks_per_claim=0)
