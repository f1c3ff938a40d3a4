"""Source resolvers.

Each binding goes through two steps:

1. normalize_query() maps the binding onto one canonical query shape for
   its source, folding in the deprecated generic `query` field. This is
   the only place legacy fallbacks live.
2. The source's resolver interpolates the canonical query against the
   context and calls the matching fetcher.

Dispatch is a table keyed by DataSourceType, checked for exhaustiveness
at import time.
"""

import json
from collections.abc import Awaitable, Callable, Mapping
from dataclasses import asdict, is_dataclass
from typing import Any

from binding_resolver.errors import MissingConfiguration, UnknownSourceType
from binding_resolver.interpolate import interpolate_object, interpolate_string
from core.interfaces import DataFetchers
from core.types import (
    ApiQuery,
    ArtifactQuery,
    BindingSpec,
    ContentObjectQuery,
    DataSourceType,
    DataStoreQuery,
    LegacyQuery,
    ObjectQuerySpec,
    ResolutionContext,
)

# Sources whose data is a list; onError=empty yields [] for these
EMPTY_ARRAY_SOURCES = frozenset(
    {DataSourceType.OBJECT_QUERY, DataSourceType.COLLECTION, DataSourceType.DATA_STORE}
)

# Sources resolved without fetchers; never cached
LOCAL_SOURCES = frozenset({DataSourceType.STATIC, DataSourceType.ROUTE})


def parse_source(source: Any) -> DataSourceType:
    """Map a binding's raw source string onto DataSourceType.

    Raises:
        UnknownSourceType: if the source is not recognized
    """
    try:
        return DataSourceType(source)
    except ValueError:
        raise UnknownSourceType(source) from None


# =============================================================================
# Normalization
# =============================================================================


def _legacy_object_query(query: LegacyQuery) -> ObjectQuerySpec:
    return ObjectQuerySpec(filter=query.filter, sort=query.sort, limit=query.limit)


def normalize_query(binding: BindingSpec, source: DataSourceType | None = None) -> Any:
    """Produce the canonical query for a binding's source.

    Returns a ContentObjectQuery, ObjectQuerySpec, DataStoreQuery,
    ArtifactQuery or ApiQuery; the inline data for static; None for route.

    Raises:
        MissingConfiguration: if a required field is absent
        UnknownSourceType: if binding.source is not recognized
    """
    if source is None:
        source = parse_source(binding.source)

    if source == DataSourceType.CONTENT_OBJECT:
        if binding.content_object is not None and binding.content_object.id:
            return binding.content_object
        if binding.query is not None and binding.query.id:
            return ContentObjectQuery(id=binding.query.id)
        raise MissingConfiguration(source.value, "id")

    if source == DataSourceType.OBJECT_QUERY:
        if binding.object_query is not None:
            return binding.object_query
        if binding.query is not None:
            return _legacy_object_query(binding.query)
        raise MissingConfiguration(source.value, "query")

    if source == DataSourceType.COLLECTION:
        if binding.query is not None:
            return _legacy_object_query(binding.query)
        raise MissingConfiguration(source.value, "query")

    if source == DataSourceType.DATA_STORE:
        config = binding.data_store
        if config is None or not config.store_id:
            raise MissingConfiguration(source.value, "storeId")
        if not config.sql:
            raise MissingConfiguration(source.value, "sql")
        return config

    if source == DataSourceType.ARTIFACT:
        if binding.artifact is None or not binding.artifact.path:
            raise MissingConfiguration(source.value, "path")
        return binding.artifact

    if source == DataSourceType.API:
        if binding.api is not None and binding.api.endpoint:
            return binding.api
        if binding.query is not None and binding.query.endpoint:
            return ApiQuery(endpoint=binding.query.endpoint, method=binding.query.method)
        raise MissingConfiguration(source.value, "endpoint")

    if source == DataSourceType.STATIC:
        return binding.data

    if source == DataSourceType.ROUTE:
        return None

    raise UnknownSourceType(source)


# =============================================================================
# Resolvers
# =============================================================================


async def resolve_content_object(
    query: ContentObjectQuery, context: ResolutionContext, fetchers: DataFetchers
) -> Any:
    object_id = interpolate_string(query.id, context)
    return await fetchers.fetch_content_object(object_id, select=query.select)


async def resolve_object_query(
    query: ObjectQuerySpec, context: ResolutionContext, fetchers: DataFetchers
) -> Any:
    return await fetchers.query_objects(interpolate_object(asdict(query), context))


async def resolve_data_store(
    query: DataStoreQuery, context: ResolutionContext, fetchers: DataFetchers
) -> Any:
    store_id = interpolate_string(query.store_id, context)
    sql = interpolate_string(query.sql, context)
    result = await fetchers.query_data_store(
        store_id, sql, limit=query.limit, version_id=query.version_id
    )
    # Only rows are exposed; columns and other metadata are dropped
    if isinstance(result, Mapping):
        return result.get("rows")
    return getattr(result, "rows", None)


async def resolve_artifact(
    query: ArtifactQuery, context: ResolutionContext, fetchers: DataFetchers
) -> Any:
    path = interpolate_string(query.path, context)
    run_id = interpolate_string(query.run_id, context) if query.run_id else None
    return await fetchers.fetch_artifact(path, format=query.format, run_id=run_id)


async def resolve_api(query: ApiQuery, context: ResolutionContext, fetchers: DataFetchers) -> Any:
    endpoint = interpolate_string(query.endpoint, context)
    body = interpolate_object(query.body, context) if query.body else None
    return await fetchers.fetch_api(
        endpoint, method=query.method, body=body, headers=query.headers
    )


async def resolve_static(query: Any, context: ResolutionContext, fetchers: DataFetchers) -> Any:
    return query


async def resolve_route(query: Any, context: ResolutionContext, fetchers: DataFetchers) -> Any:
    return context.route or {}


SourceResolver = Callable[[Any, ResolutionContext, DataFetchers], Awaitable[Any]]

SOURCE_RESOLVERS: dict[DataSourceType, SourceResolver] = {
    DataSourceType.CONTENT_OBJECT: resolve_content_object,
    DataSourceType.OBJECT_QUERY: resolve_object_query,
    # Deprecated: same semantics as the legacy objectQuery path
    DataSourceType.COLLECTION: resolve_object_query,
    DataSourceType.DATA_STORE: resolve_data_store,
    DataSourceType.ARTIFACT: resolve_artifact,
    DataSourceType.API: resolve_api,
    DataSourceType.STATIC: resolve_static,
    DataSourceType.ROUTE: resolve_route,
}

_unhandled = set(DataSourceType) - set(SOURCE_RESOLVERS)
if _unhandled:
    raise RuntimeError(f"No resolver for source types: {sorted(s.value for s in _unhandled)}")


async def resolve_source(
    source: DataSourceType, query: Any, context: ResolutionContext, fetchers: DataFetchers
) -> Any:
    """Dispatch a normalized query to its source resolver."""
    return await SOURCE_RESOLVERS[source](query, context, fetchers)


# =============================================================================
# Cache Keys
# =============================================================================


def _stable_json(value: Any) -> str:
    return json.dumps(value, sort_keys=True, separators=(",", ":"), default=str)


def make_cache_key(binding: BindingSpec, query: Any, context: ResolutionContext) -> str:
    """Build the cache key for a binding.

    Format: "{key}:{source}:{route}:{query}" so that "{key}:*" matches
    every entry for a binding. The query part is the interpolated
    canonical query, so chained bindings referencing resolved values
    get distinct keys.
    """
    parts = [binding.key, parse_source(binding.source).value]
    if context.route:
        parts.append(_stable_json(context.route))
    if query is not None:
        config = asdict(query) if is_dataclass(query) else query
        parts.append(_stable_json(interpolate_object(config, context)))
    return ":".join(parts)
