"""Tests for configuration loading and factory functions."""

from __future__ import annotations

from pathlib import Path
from tempfile import NamedTemporaryFile

import pytest
from pydantic import ValidationError

from truthtrollers_evidence.config import (
    ClaudeLLMConfig,
    DevFetcherConfig,
    DevLLMConfig,
    DevSearchConfig,
    DiskStorageConfig,
    ExaSearchConfig,
    HttpFetcherConfig,
    MemoryStorageConfig,
    NoOpStorageConfig,
    OpenAILLMConfig,
    TavilySearchConfig,
    TruthTrollersConfig,
    create_from_config,
    get_default_config_path,
    load_config,
)
from truthtrollers_evidence.config.factory import (
    create_fetcher,
    create_llm,
    create_search,
    create_searcher,
    create_storage,
)
from truthtrollers_evidence.config.loader import CONFIG_ENV_VAR
from truthtrollers_evidence.fetch import HttpFetcher
from truthtrollers_evidence.llm import ClaudeJsonLLM, OpenAIJsonLLM
from truthtrollers_evidence.pipeline import ClaimMapper, EvidenceEngine
from truthtrollers_evidence.ports import DevFetcher, DevLLM, DevSearch
from truthtrollers_evidence.query import QuerySuggester
from truthtrollers_evidence.run_logger import RunLogger
from truthtrollers_evidence.search import ExaSearcher, HybridSearch, TavilySearcher
from truthtrollers_evidence.storage import DiskCacheStorage, MemoryStorage, NoOpStorage

DEV_CONFIG = TruthTrollersConfig(
    llm=DevLLMConfig(),
    search=[DevSearchConfig()],
    fetcher=DevFetcherConfig(),
    storage=NoOpStorageConfig(),
)


def _load_yaml(content: str) -> TruthTrollersConfig:
    with NamedTemporaryFile(mode="w", suffix=".yaml", delete=False) as f:
        f.write(content)
        f.flush()
        return load_config(Path(f.name))


class TestConfigModels:
    """Tests for Pydantic config models."""

    def test_claude_llm_config_defaults(self) -> None:
        config = ClaudeLLMConfig()
        assert config.type == "claude"
        assert config.model == "claude-haiku-4-5-20251001"
        assert config.max_tokens == 1024

    def test_openai_llm_config_defaults(self) -> None:
        config = OpenAILLMConfig()
        assert config.type == "openai"
        assert config.model is None

    def test_tavily_search_config_defaults(self) -> None:
        config = TavilySearchConfig()
        assert config.type == "tavily"
        assert config.search_depth == "basic"

    def test_root_config_defaults(self) -> None:
        config = TruthTrollersConfig()
        assert isinstance(config.llm, ClaudeLLMConfig)
        assert config.search == [TavilySearchConfig()]
        assert isinstance(config.fetcher, HttpFetcherConfig)
        assert isinstance(config.storage, MemoryStorageConfig)
        assert config.engine.picks_per_claim == 3
        assert config.logging.enabled is False

    def test_config_is_frozen(self) -> None:
        config = TruthTrollersConfig()
        with pytest.raises(ValidationError):
            config.llm = DevLLMConfig()  # type: ignore[misc]


class TestConfigLoader:
    """Tests for YAML config loading."""

    def test_load_config_full(self) -> None:
        config = _load_yaml(
            """
llm:
  type: openai
  model: gpt-4o
search:
  - type: tavily
    search_depth: advanced
  - type: exa
fetcher:
  type: dev
storage:
  type: disk
  directory: /tmp/tt-cache
engine:
  queries_per_claim: 2
  pick_with_llm: false
logging:
  enabled: true
  log_dir: run-logs
"""
        )
        assert isinstance(config.llm, OpenAILLMConfig)
        assert config.llm.model == "gpt-4o"
        assert isinstance(config.search[0], TavilySearchConfig)
        assert config.search[0].search_depth == "advanced"
        assert isinstance(config.search[1], ExaSearchConfig)
        assert isinstance(config.fetcher, DevFetcherConfig)
        assert isinstance(config.storage, DiskStorageConfig)
        assert config.storage.directory == "/tmp/tt-cache"
        assert config.engine.queries_per_claim == 2
        assert config.engine.pick_with_llm is False
        assert config.logging.log_dir == "run-logs"

    def test_empty_file_uses_defaults(self) -> None:
        config = _load_yaml("")
        assert isinstance(config.llm, ClaudeLLMConfig)

    def test_unknown_type_is_rejected(self) -> None:
        with pytest.raises(ValidationError):
            _load_yaml("llm:\n  type: gemini\n")

    def test_get_default_config_path(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv(CONFIG_ENV_VAR, raising=False)
        path = get_default_config_path()
        assert path.name == "default.yaml"
        assert "configs" in str(path)

    def test_default_config_path_from_env(
        self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path
    ) -> None:
        target = tmp_path / "team.yaml"
        monkeypatch.setenv(CONFIG_ENV_VAR, str(target))
        assert get_default_config_path() == target

    def test_blank_env_uses_bundled_config(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv(CONFIG_ENV_VAR, "  ")
        assert get_default_config_path().name == "default.yaml"

    def test_non_mapping_document_is_rejected(self) -> None:
        with pytest.raises(ValueError, match="mapping of sections"):
            _load_yaml("- llm\n- search\n")

    def test_missing_file_raises(self, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError):
            load_config(tmp_path / "absent.yaml")

    def test_load_default_config(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv(CONFIG_ENV_VAR, raising=False)
        path = get_default_config_path()
        if path.exists():
            config = load_config(path)
            assert isinstance(config, TruthTrollersConfig)

    def test_load_dev_config(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv(CONFIG_ENV_VAR, raising=False)
        path = get_default_config_path().parent / "dev.yaml"
        if path.exists():
            config = load_config(path)
            assert isinstance(config.llm, DevLLMConfig)


class TestFactoryFunctions:
    """Tests for component factory functions."""

    def test_create_llm_claude(self) -> None:
        llm = create_llm(ClaudeLLMConfig(model="test-model"))
        assert isinstance(llm, ClaudeJsonLLM)
        assert llm.model == "test-model"

    def test_create_llm_openai(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("OPENAI_API_KEY", "test-key")
        llm = create_llm(OpenAILLMConfig(model="gpt-test"))
        assert isinstance(llm, OpenAIJsonLLM)
        assert llm.model == "gpt-test"

    def test_create_llm_dev(self) -> None:
        assert isinstance(create_llm(DevLLMConfig()), DevLLM)

    def test_create_searchers(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("EXA_API_KEY", "test-key")
        assert isinstance(create_searcher(TavilySearchConfig()), TavilySearcher)
        assert isinstance(create_searcher(ExaSearchConfig()), ExaSearcher)
        assert isinstance(create_searcher(DevSearchConfig()), DevSearch)

    def test_create_search_single_backend(self) -> None:
        assert isinstance(create_search([DevSearchConfig()]), DevSearch)

    def test_create_search_multiple_backends(self) -> None:
        search = create_search([DevSearchConfig(), TavilySearchConfig()])
        assert isinstance(search, HybridSearch)

    def test_create_search_requires_a_backend(self) -> None:
        with pytest.raises(ValueError, match="search backend"):
            create_search([])

    def test_create_fetcher(self) -> None:
        assert isinstance(create_fetcher(HttpFetcherConfig()), HttpFetcher)
        assert isinstance(create_fetcher(DevFetcherConfig()), DevFetcher)

    def test_create_storage(self, tmp_path: Path) -> None:
        assert isinstance(create_storage(MemoryStorageConfig()), MemoryStorage)
        assert isinstance(create_storage(NoOpStorageConfig()), NoOpStorage)
        disk = create_storage(DiskStorageConfig(directory=str(tmp_path)))
        assert isinstance(disk, DiskCacheStorage)
        disk.close()

    def test_create_from_config(self) -> None:
        mapper, engine, suggester, run_logger = create_from_config(DEV_CONFIG, use_env=False)
        assert isinstance(mapper, ClaimMapper)
        assert isinstance(engine, EvidenceEngine)
        assert isinstance(suggester, QuerySuggester)
        assert run_logger is None

    def test_create_from_config_with_logging(self, tmp_path: Path) -> None:
        _, _, _, run_logger = create_from_config(
            DEV_CONFIG, log_override=True, log_dir_override=str(tmp_path)
        )
        assert isinstance(run_logger, RunLogger)

    def test_env_overrides_engine_settings(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("PICKS_PER_CLAIM", "1")
        mapper, _, _, _ = create_from_config(DEV_CONFIG)
        assert mapper.settings.picks_per_claim == 1

    def test_env_ignored_when_disabled(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("PICKS_PER_CLAIM", "1")
        mapper, _, _, _ = create_from_config(DEV_CONFIG, use_env=False)
        assert mapper.settings.picks_per_claim == 3
