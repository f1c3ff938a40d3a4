"""Capability interfaces consumed by the resolver.

The surrounding application supplies implementations: an HTTP client,
a data store client, a cache. The resolver only depends on these shapes.
"""

from dataclasses import dataclass
from typing import Any, Protocol


class DataFetchers(Protocol):
    """Fetch functions, one per source kind.

    Implementations should let asyncio cancellation interrupt in-flight
    requests: the resolver cancels a fetch that loses its timeout or
    abort race.
    """

    async def fetch_content_object(
        self, id: str, *, select: list[str] | None = None
    ) -> dict[str, Any]:
        """Fetch a single content object by ID."""
        ...

    async def query_objects(self, query: dict[str, Any]) -> list[dict[str, Any]]:
        """Query content objects.

        `query` carries filter, search, select, sort, limit, offset,
        type and status (unset fields are None).
        """
        ...

    async def query_data_store(
        self,
        store_id: str,
        sql: str,
        *,
        limit: int | None = None,
        version_id: str | None = None,
    ) -> Any:
        """Run SQL against a data store; result exposes `rows` and `columns`."""
        ...

    async def fetch_artifact(
        self, path: str, *, format: str | None = None, run_id: str | None = None
    ) -> Any:
        """Fetch an artifact file."""
        ...

    async def fetch_api(
        self,
        endpoint: str,
        *,
        method: str | None = None,
        body: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
    ) -> Any:
        """Make an API request."""
        ...


@dataclass(frozen=True)
class CacheEntry:
    """A cached value and when it was stored (epoch seconds)."""

    data: Any
    timestamp: float


class DataCache(Protocol):
    """Cache for resolved binding data. Owns its own TTL and consistency."""

    async def get(self, key: str) -> CacheEntry | None: ...

    async def set(self, key: str, data: Any, ttl: int | None = None) -> None: ...

    async def invalidate(self, key: str) -> None: ...

    async def invalidate_pattern(self, pattern: str) -> None:
        """Drop every entry matching a `*` wildcard pattern."""
        ...
