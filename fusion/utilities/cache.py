"""In-memory TTL cache for resolved binding data.

Implements the DataCache interface. Entries expire lazily on read;
`prune()` sweeps expired entries explicitly.

Patterns for invalidate_pattern() support `*` as the only wildcard,
so binding keys and JSON fragments never need escaping.
"""

import asyncio
import copy
import logging
import re
import time
from dataclasses import dataclass
from typing import Any

from core.interfaces import CacheEntry

logger = logging.getLogger(__name__)

DEFAULT_TTL = 300  # seconds


@dataclass(frozen=True)
class CacheStats:
    """Snapshot of cache activity."""

    entries: int
    hits: int
    misses: int

    @property
    def hit_rate(self) -> float:
        total = self.hits + self.misses
        return self.hits / total if total else 0.0


@dataclass
class _Entry:
    data: Any
    timestamp: float  # epoch seconds when stored
    expires_at: float  # monotonic deadline


def _compile_pattern(pattern: str) -> re.Pattern:
    return re.compile(".*".join(re.escape(part) for part in pattern.split("*")), re.DOTALL)


class MemoryTTLCache:
    """Process-local cache with per-entry TTL.

    Values are deep-copied on the way in and out so callers can't mutate
    what other pages will read.
    """

    def __init__(self, default_ttl: int = DEFAULT_TTL, max_entries: int | None = None):
        self._default_ttl = default_ttl
        self._max_entries = max_entries
        self._entries: dict[str, _Entry] = {}
        self._lock = asyncio.Lock()
        self._hits = 0
        self._misses = 0

    async def get(self, key: str) -> CacheEntry | None:
        async with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                self._misses += 1
                return None
            if entry.expires_at <= time.monotonic():
                del self._entries[key]
                self._misses += 1
                return None
            self._hits += 1
            return CacheEntry(data=copy.deepcopy(entry.data), timestamp=entry.timestamp)

    async def set(self, key: str, data: Any, ttl: int | None = None) -> None:
        ttl = self._default_ttl if ttl is None else ttl
        async with self._lock:
            if self._max_entries and key not in self._entries and len(self._entries) >= self._max_entries:
                # Evict the oldest insertion
                oldest = next(iter(self._entries))
                del self._entries[oldest]
            self._entries[key] = _Entry(
                data=copy.deepcopy(data),
                timestamp=time.time(),
                expires_at=time.monotonic() + ttl,
            )

    async def invalidate(self, key: str) -> None:
        async with self._lock:
            self._entries.pop(key, None)

    async def invalidate_pattern(self, pattern: str) -> None:
        regex = _compile_pattern(pattern)
        async with self._lock:
            doomed = [k for k in self._entries if regex.fullmatch(k)]
            for key in doomed:
                del self._entries[key]
        if doomed:
            logger.debug("[CACHE] Invalidated %d entries matching %s", len(doomed), pattern)

    async def clear(self) -> None:
        async with self._lock:
            self._entries.clear()

    async def prune(self) -> int:
        """Drop expired entries. Returns how many were removed."""
        now = time.monotonic()
        async with self._lock:
            expired = [k for k, e in self._entries.items() if e.expires_at <= now]
            for key in expired:
                del self._entries[key]
        return len(expired)

    def stats(self) -> CacheStats:
        return CacheStats(entries=len(self._entries), hits=self._hits, misses=self._misses)
