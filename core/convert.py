"""Conversion between wire dicts and core dataclasses.

Binding specs arrive as JSON authored by the page layer (camelCase keys).
snake_case keys are accepted too so Python callers can build dicts by hand.
Results are converted back to the camelCase wire shape.
"""

from typing import Any

from core.types import (
    ApiQuery,
    ArtifactQuery,
    BindingSpec,
    ContentObjectQuery,
    DataStoreQuery,
    LegacyQuery,
    ObjectQuerySpec,
    OnError,
    PageDataResult,
    ResolvedBinding,
)


def _pick(d: dict, *names: str, default: Any = None) -> Any:
    """Return the first present key among camelCase/snake_case aliases."""
    for name in names:
        if name in d:
            return d[name]
    return default


def dict_to_content_object(d: dict | None) -> ContentObjectQuery | None:
    if d is None:
        return None
    return ContentObjectQuery(id=d.get("id"), select=d.get("select"))


def dict_to_object_query(d: dict | None) -> ObjectQuerySpec | None:
    if d is None:
        return None
    return ObjectQuerySpec(
        filter=d.get("filter"),
        search=d.get("search"),
        select=d.get("select"),
        sort=d.get("sort"),
        limit=d.get("limit"),
        offset=d.get("offset"),
        type=d.get("type"),
        status=d.get("status"),
    )


def dict_to_data_store(d: dict | None) -> DataStoreQuery | None:
    if d is None:
        return None
    return DataStoreQuery(
        store_id=_pick(d, "storeId", "store_id"),
        sql=d.get("sql"),
        limit=d.get("limit"),
        version_id=_pick(d, "versionId", "version_id"),
    )


def dict_to_artifact(d: dict | None) -> ArtifactQuery | None:
    if d is None:
        return None
    return ArtifactQuery(
        path=d.get("path"),
        format=d.get("format"),
        run_id=_pick(d, "runId", "run_id"),
    )


def dict_to_api(d: dict | None) -> ApiQuery | None:
    if d is None:
        return None
    return ApiQuery(
        endpoint=d.get("endpoint"),
        method=d.get("method"),
        body=d.get("body"),
        headers=d.get("headers"),
    )


def dict_to_legacy_query(d: dict | None) -> LegacyQuery | None:
    if d is None:
        return None
    return LegacyQuery(
        id=d.get("id"),
        collection_id=_pick(d, "collectionId", "collection_id"),
        endpoint=d.get("endpoint"),
        filter=d.get("filter"),
        sort=d.get("sort"),
        limit=d.get("limit"),
        method=d.get("method"),
    )


def _on_error(value: Any) -> OnError | str:
    if not value:
        return OnError.THROW
    try:
        return OnError(value)
    except ValueError:
        return value


def _seconds(value: Any) -> int:
    try:
        return int(value or 0)
    except (TypeError, ValueError):
        return 0


def dict_to_binding(d: dict) -> BindingSpec:
    """Build a BindingSpec from its wire dict.

    No validation beyond shape: a missing query, a missing or unknown
    source and an unknown onError are all handled when the binding is
    resolved, so one bad binding never rejects the page.

    Raises:
        KeyError: if `key` is absent
    """
    return BindingSpec(
        key=d["key"],
        source=d.get("source"),
        content_object=dict_to_content_object(_pick(d, "contentObject", "content_object")),
        object_query=dict_to_object_query(_pick(d, "objectQuery", "object_query")),
        data_store=dict_to_data_store(_pick(d, "dataStore", "data_store")),
        artifact=dict_to_artifact(d.get("artifact")),
        api=dict_to_api(d.get("api")),
        query=dict_to_legacy_query(d.get("query")),
        data=d.get("data"),
        transform=d.get("transform"),
        on_error=_on_error(_pick(d, "onError", "on_error")),
        refetch_on_focus=bool(_pick(d, "refetchOnFocus", "refetch_on_focus", default=False)),
        polling_interval=_seconds(_pick(d, "pollingInterval", "polling_interval")),
    )


def resolved_to_dict(result: ResolvedBinding) -> dict:
    """Wire shape of a ResolvedBinding. `error`/`stale` only when set."""
    out: dict[str, Any] = {
        "key": result.key,
        "data": result.data,
        "success": result.success,
        "duration": result.duration,
    }
    if result.error is not None:
        out["error"] = result.error
    if result.stale:
        out["stale"] = True
    return out


def page_result_to_dict(result: PageDataResult) -> dict:
    return {
        "data": result.data,
        "bindings": {k: resolved_to_dict(b) for k, b in result.bindings.items()},
        "success": result.success,
        "duration": result.duration,
        "errors": [{"key": e.key, "error": e.error} for e in result.errors],
    }
