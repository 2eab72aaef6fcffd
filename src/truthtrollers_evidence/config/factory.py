"""Factory functions to create components from configuration."""

from pathlib import Path

from truthtrollers_evidence.config.models import (
    ClaudeLLMConfig,
    DevFetcherConfig,
    DevLLMConfig,
    DevSearchConfig,
    DiskStorageConfig,
    ExaSearchConfig,
    FetcherConfig,
    HttpFetcherConfig,
    LLMConfig,
    MemoryStorageConfig,
    NoOpStorageConfig,
    OpenAILLMConfig,
    SearchConfig,
    StorageConfig,
    TavilySearchConfig,
    TruthTrollersConfig,
)
from truthtrollers_evidence.fetch.http import HttpFetcher
from truthtrollers_evidence.llm.claude import ClaudeJsonLLM
from truthtrollers_evidence.llm.openai import OpenAIJsonLLM
from truthtrollers_evidence.pipeline.engine import EvidenceEngine
from truthtrollers_evidence.pipeline.mapper import ClaimMapper
from truthtrollers_evidence.ports.base import (
    EngineDeps,
    FetcherPort,
    LLMJson,
    SearchPorts,
    StoragePort,
)
from truthtrollers_evidence.ports.dev import DevFetcher, DevLLM, DevSearch
from truthtrollers_evidence.query.suggest import QuerySuggester
from truthtrollers_evidence.run_logger import RunLogger
from truthtrollers_evidence.search.exa import ExaSearcher
from truthtrollers_evidence.search.hybrid import HybridSearch
from truthtrollers_evidence.search.tavily import TavilySearcher
from truthtrollers_evidence.settings import EngineSettings
from truthtrollers_evidence.storage.disk import DiskCacheStorage
from truthtrollers_evidence.storage.memory import MemoryStorage
from truthtrollers_evidence.storage.noop import NoOpStorage


def create_llm(config: LLMConfig) -> LLMJson:
    """Create a JSON LLM adapter from config.

    Uses explicit type matching rather than getattr.
    """
    if isinstance(config, ClaudeLLMConfig):
        return ClaudeJsonLLM(model=config.model, max_tokens=config.max_tokens)
    if isinstance(config, OpenAILLMConfig):
        return OpenAIJsonLLM(model=config.model, max_tokens=config.max_tokens)
    if isinstance(config, DevLLMConfig):
        return DevLLM()
    msg = f"Unknown llm config type: {type(config)}"
    raise ValueError(msg)


def create_searcher(config: SearchConfig) -> SearchPorts:
    """Create a single search backend from config."""
    if isinstance(config, TavilySearchConfig):
        return TavilySearcher(search_depth=config.search_depth, timeout_s=config.timeout_s)
    if isinstance(config, ExaSearchConfig):
        return ExaSearcher()
    if isinstance(config, DevSearchConfig):
        return DevSearch()
    msg = f"Unknown search config type: {type(config)}"
    raise ValueError(msg)


def create_search(configs: list[SearchConfig]) -> SearchPorts:
    """Create the search port; several backends are merged by HybridSearch."""
    if not configs:
        msg = "At least one search backend must be configured"
        raise ValueError(msg)
    backends = [create_searcher(c) for c in configs]
    if len(backends) == 1:
        return backends[0]
    return HybridSearch(backends)


def create_fetcher(config: FetcherConfig) -> FetcherPort:
    """Create a full-text fetcher from config."""
    if isinstance(config, HttpFetcherConfig):
        return HttpFetcher(timeout_s=config.timeout_s, max_chars=config.max_chars)
    if isinstance(config, DevFetcherConfig):
        return DevFetcher()
    msg = f"Unknown fetcher config type: {type(config)}"
    raise ValueError(msg)


def create_storage(config: StorageConfig) -> StoragePort:
    """Create a storage port from config."""
    if isinstance(config, MemoryStorageConfig):
        return MemoryStorage(max_entries=config.max_entries)
    if isinstance(config, DiskStorageConfig):
        return DiskCacheStorage(config.directory, results_file=config.results_file)
    if isinstance(config, NoOpStorageConfig):
        return NoOpStorage()
    msg = f"Unknown storage config type: {type(config)}"
    raise ValueError(msg)


def create_deps(config: TruthTrollersConfig) -> EngineDeps:
    """Create the port bundle from root config."""
    return EngineDeps(
        llm=create_llm(config.llm),
        search=create_search(config.search),
        fetcher=create_fetcher(config.fetcher),
        storage=create_storage(config.storage),
    )


def create_from_config(
    config: TruthTrollersConfig,
    *,
    use_env: bool = True,
    log_override: bool | None = None,
    log_dir_override: str | None = None,
) -> tuple[ClaimMapper, EvidenceEngine, QuerySuggester, RunLogger | None]:
    """Create every engine component from root config.

    Args:
        config: Root configuration.
        use_env: Overlay engine settings from environment variables.
        log_override: Override the config's logging.enabled setting.
        log_dir_override: Override the config's logging.log_dir setting.

    Returns:
        Tuple of (claim_mapper, evidence_engine, query_suggester, run_logger).
        run_logger is None if logging is disabled.
    """
    log_enabled = log_override if log_override is not None else config.logging.enabled
    log_dir = Path(log_dir_override if log_dir_override is not None else config.logging.log_dir)

    run_logger: RunLogger | None = None
    if log_enabled:
        run_logger = RunLogger(log_dir=log_dir, enabled=True)

    settings = EngineSettings.from_env(base=config.engine) if use_env else config.engine
    deps = create_deps(config)

    mapper = ClaimMapper(deps, settings, run_logger=run_logger)
    engine = EvidenceEngine(deps, settings, run_logger=run_logger)
    suggester = QuerySuggester(
        deps.llm,
        deps.storage,
        queries_per_claim=settings.queries_per_claim,
        prefer_domains=settings.prefer_domains,
        chunk_size=settings.suggest_chunk_size,
        concurrency=settings.max_concurrency,
        enabled=settings.refine_queries_with_llm,
        cache_ttl_s=settings.query_cache_ttl_s,
        call_timeout_s=settings.call_timeout_s,
    )
    return (mapper, engine, suggester, run_logger)
