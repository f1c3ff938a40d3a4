"""Core data types for the Fusion binding resolver.

All data structures are pure dataclasses with attribute access.
Binding specs are serializable input authored by the page layer;
results are created fresh on every resolution and never mutated.

Use attribute access: binding.key, result.data, etc.
"""

import asyncio
from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class DataSourceType(str, Enum):
    """Kinds of data source a binding can read from."""

    CONTENT_OBJECT = "contentObject"  # Single content object by ID
    OBJECT_QUERY = "objectQuery"  # Filtered content object query
    COLLECTION = "collection"  # Deprecated, same as legacy objectQuery
    DATA_STORE = "dataStore"  # SQL against a data store
    ARTIFACT = "artifact"  # Stored artifact file (agent runs, etc.)
    API = "api"  # REST endpoint
    STATIC = "static"  # Inline data
    ROUTE = "route"  # Route parameters


class OnError(str, Enum):
    """What a failed binding contributes to the page data."""

    THROW = "throw"  # data=None, failure recorded, nothing raised
    NULL = "null"  # data=None
    EMPTY = "empty"  # data=[] for array sources, None otherwise
    PROPAGATE = "propagate"  # re-raise to the caller, aborting the page


# =============================================================================
# Source Queries
# One per source kind. Fields that accept {{path}} placeholders are noted.
# =============================================================================


@dataclass
class ContentObjectQuery:
    """Query for the contentObject source."""

    id: str  # supports {{route.param}}
    select: list[str] | None = None


@dataclass
class ObjectQuerySpec:
    """Query for the objectQuery source. Every field is interpolated."""

    filter: dict[str, Any] | None = None
    search: str | None = None
    select: list[str] | None = None
    sort: dict[str, str] | None = None  # {"field": "...", "direction": "asc"|"desc"}
    limit: int | None = None
    offset: int | None = None
    type: str | None = None
    status: str | None = None


@dataclass
class DataStoreQuery:
    """SQL query against a data store."""

    store_id: str  # interpolated
    sql: str  # interpolated
    limit: int | None = None
    version_id: str | None = None  # query a snapshot instead of latest


@dataclass
class ArtifactQuery:
    """Stored artifact lookup."""

    path: str  # interpolated
    format: str | None = None  # "json" | "text" | "csv" | "binary"
    run_id: str | None = None  # interpolated


@dataclass
class ApiQuery:
    """REST call."""

    endpoint: str  # interpolated
    method: str | None = None  # "GET" | "POST"
    body: dict[str, Any] | None = None  # interpolated
    headers: dict[str, str] | None = None


@dataclass
class LegacyQuery:
    """Deprecated generic query, inspected structurally by each source."""

    id: str | None = None
    collection_id: str | None = None
    endpoint: str | None = None
    filter: dict[str, Any] | None = None
    sort: dict[str, str] | None = None
    limit: int | None = None
    method: str | None = None


@dataclass
class BindingSpec:
    """Declarative instruction for obtaining one named piece of page data.

    `source` and `on_error` are kept as the raw strings: specs are not
    validated when they are built. An unknown or missing source fails that
    binding at resolve time; an unknown on_error falls back to `throw`.
    """

    key: str
    source: str | None

    # Source-specific queries (use the one matching source)
    content_object: ContentObjectQuery | None = None
    object_query: ObjectQuerySpec | None = None
    data_store: DataStoreQuery | None = None
    artifact: ArtifactQuery | None = None
    api: ApiQuery | None = None

    # Deprecated: use the source-specific field instead
    query: LegacyQuery | None = None

    data: Any = None  # static source only
    transform: str | None = None
    on_error: OnError | str = OnError.THROW

    # Rendering-layer hints, ignored by the resolver
    refetch_on_focus: bool = False
    polling_interval: int = 0  # seconds, 0 = disabled


# =============================================================================
# Resolution Context and Options
# =============================================================================


@dataclass
class ResolutionContext:
    """Ambient values available to {{path}} interpolation.

    Immutable by convention: resolve_all derives a copy with its own
    `resolved` map rather than writing into the caller's context.
    """

    route: dict[str, str] | None = None
    settings: dict[str, Any] | None = None
    user: dict[str, Any] | None = None
    resolved: dict[str, Any] | None = None  # earlier bindings (sequential mode)
    values: dict[str, Any] = field(default_factory=dict)  # custom top-level keys

    def as_scope(self) -> dict[str, Any]:
        """Flatten into the dict used as interpolation scope."""
        scope: dict[str, Any] = dict(self.values)
        scope["route"] = self.route
        scope["settings"] = self.settings
        scope["user"] = self.user
        scope["resolved"] = self.resolved
        return scope


@dataclass
class ResolveOptions:
    """Per-call resolution options."""

    signal: asyncio.Event | None = None  # set() to cancel
    parallel: bool = True
    timeout: float | None = None  # ms per binding, None = resolver default
    use_cache: bool = True
    cache_ttl: int | None = None  # seconds, None = cache default
    max_concurrency: int | None = None  # parallel mode pacing only


# =============================================================================
# Results
# =============================================================================


@dataclass(frozen=True)
class ResolvedBinding:
    """Outcome of resolving a single binding."""

    key: str
    data: Any
    success: bool
    error: str | None = None
    duration: float = 0.0  # ms
    stale: bool = False  # served from cache


@dataclass(frozen=True)
class BindingErrorEntry:
    """A failed binding as reported on the page result."""

    key: str
    error: str


@dataclass
class PageDataResult:
    """Aggregate result of resolving every binding on a page."""

    data: dict[str, Any]
    bindings: dict[str, ResolvedBinding]
    success: bool
    duration: float  # ms
    errors: list[BindingErrorEntry] = field(default_factory=list)
