"""Ports and the offline dev bundle."""

from truthtrollers_evidence.ports.base import (
    EngineDeps,
    FetcherPort,
    LLMJson,
    SearchPorts,
    StoragePort,
)
from truthtrollers_evidence.ports.dev import DevFetcher, DevLLM, DevSearch, DevStorage, dev_deps

__all__ = [
    "DevFetcher",
    "DevLLM",
    "DevSearch",
    "DevStorage",
    "EngineDeps",
    "FetcherPort",
    "LLMJson",
    "SearchPorts",
    "StoragePort",
    "dev_deps",
]
