"""Configuration module for the evidence engine."""

from truthtrollers_evidence.config.factory import create_deps, create_from_config
from truthtrollers_evidence.config.loader import get_default_config_path, load_config
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
    LoggingConfig,
    MemoryStorageConfig,
    NoOpStorageConfig,
    OpenAILLMConfig,
    SearchConfig,
    StorageConfig,
    TavilySearchConfig,
    TruthTrollersConfig,
)

__all__ = [
    "ClaudeLLMConfig",
    "DevFetcherConfig",
    "DevLLMConfig",
    "DevSearchConfig",
    "DiskStorageConfig",
    "ExaSearchConfig",
    "FetcherConfig",
    "HttpFetcherConfig",
    "LLMConfig",
    "LoggingConfig",
    "MemoryStorageConfig",
    "NoOpStorageConfig",
    "OpenAILLMConfig",
    "SearchConfig",
    "StorageConfig",
    "TavilySearchConfig",
    "TruthTrollersConfig",
    "create_deps",
    "create_from_config",
    "get_default_config_path",
    "load_config",
]
