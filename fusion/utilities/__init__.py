"""Utilities - caching, logging."""

from fusion.utilities.cache import CacheStats, MemoryTTLCache
from fusion.utilities.logging import setup_logging

__all__ = [
    "CacheStats",
    "MemoryTTLCache",
    "setup_logging",
]
