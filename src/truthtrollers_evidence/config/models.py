"""Pydantic configuration models for the evidence engine."""

from typing import Annotated, Literal

from pydantic import BaseModel, Field

from truthtrollers_evidence.settings import EngineSettings

# ============================================================
# LLM Configs
# ============================================================


class ClaudeLLMConfig(BaseModel):
    """Configuration for ClaudeJsonLLM."""

    type: Literal["claude"] = "claude"
    model: str = "claude-haiku-4-5-20251001"
    max_tokens: int = 1024

    model_config = {"frozen": True}


class OpenAILLMConfig(BaseModel):
    """Configuration for OpenAIJsonLLM. ``model`` falls back to OPENAI_MODEL."""

    type: Literal["openai"] = "openai"
    model: str | None = None
    max_tokens: int = 384

    model_config = {"frozen": True}


class DevLLMConfig(BaseModel):
    """Canned offline LLM."""

    type: Literal["dev"] = "dev"

    model_config = {"frozen": True}


LLMConfig = Annotated[
    ClaudeLLMConfig | OpenAILLMConfig | DevLLMConfig,
    Field(discriminator="type"),
]


# ============================================================
# Search Configs
# ============================================================


class TavilySearchConfig(BaseModel):
    """Configuration for TavilySearcher."""

    type: Literal["tavily"] = "tavily"
    search_depth: Literal["basic", "advanced"] = "basic"
    timeout_s: float = 30.0

    model_config = {"frozen": True}


class ExaSearchConfig(BaseModel):
    """Configuration for ExaSearcher."""

    type: Literal["exa"] = "exa"

    model_config = {"frozen": True}


class DevSearchConfig(BaseModel):
    """Canned offline search."""

    type: Literal["dev"] = "dev"

    model_config = {"frozen": True}


SearchConfig = Annotated[
    TavilySearchConfig | ExaSearchConfig | DevSearchConfig,
    Field(discriminator="type"),
]


# ============================================================
# Fetcher Configs
# ============================================================


class HttpFetcherConfig(BaseModel):
    """Configuration for HttpFetcher."""

    type: Literal["http"] = "http"
    timeout_s: float = 15.0
    max_chars: int = 50_000

    model_config = {"frozen": True}


class DevFetcherConfig(BaseModel):
    """Canned offline fetcher."""

    type: Literal["dev"] = "dev"

    model_config = {"frozen": True}


FetcherConfig = Annotated[
    HttpFetcherConfig | DevFetcherConfig,
    Field(discriminator="type"),
]


# ============================================================
# Storage Configs
# ============================================================


class MemoryStorageConfig(BaseModel):
    """In-process TTL cache."""

    type: Literal["memory"] = "memory"
    max_entries: int = 1000

    model_config = {"frozen": True}


class DiskStorageConfig(BaseModel):
    """diskcache-backed cache with a JSONL results file."""

    type: Literal["disk"] = "disk"
    directory: str = ".cache/truthtrollers"
    results_file: str = "results.jsonl"

    model_config = {"frozen": True}


class NoOpStorageConfig(BaseModel):
    """No cache and no persistence."""

    type: Literal["noop"] = "noop"

    model_config = {"frozen": True}


StorageConfig = Annotated[
    MemoryStorageConfig | DiskStorageConfig | NoOpStorageConfig,
    Field(discriminator="type"),
]


# ============================================================
# Logging Config
# ============================================================


class LoggingConfig(BaseModel):
    """Configuration for intermediate pipeline logging."""

    enabled: bool = False
    log_dir: str = "logs"

    model_config = {"frozen": True}


# ============================================================
# Root Config
# ============================================================


class TruthTrollersConfig(BaseModel):
    """Root configuration for the evidence engine."""

    llm: LLMConfig = Field(default_factory=ClaudeLLMConfig)
    search: list[SearchConfig] = Field(default_factory=lambda: [TavilySearchConfig()])
    fetcher: FetcherConfig = Field(default_factory=HttpFetcherConfig)
    storage: StorageConfig = Field(default_factory=MemoryStorageConfig)
    engine: EngineSettings = Field(default_factory=EngineSettings)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    model_config = {"frozen": True}
