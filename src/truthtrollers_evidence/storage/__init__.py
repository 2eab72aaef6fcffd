"""Storage port implementations."""

from truthtrollers_evidence.storage.disk import DiskCacheStorage
from truthtrollers_evidence.storage.keys import cache_key
from truthtrollers_evidence.storage.memory import MemoryStorage
from truthtrollers_evidence.storage.noop import NoOpStorage

__all__ = [
    "DiskCacheStorage",
    "MemoryStorage",
    "NoOpStorage",
    "cache_key",
]
