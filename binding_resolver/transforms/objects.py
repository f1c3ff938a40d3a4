"""Record transforms for content-object shaped data."""

from collections.abc import Mapping
from typing import Any

from binding_resolver.interpolate import get_nested_value
from binding_resolver.registry import register_transform


def _extract(item: Any) -> Any:
    if isinstance(item, Mapping) and "properties" in item:
        return item["properties"]
    return item


@register_transform(
    name="pick",
    description="Project a property, e.g. 'pick:properties.title' (elementwise on arrays)",
    parameterized=True,
)
def pick(data: Any, context: Any, path: str | None) -> Any:
    # Bare "pick" has nothing to project
    if not path:
        return data
    if isinstance(data, list):
        return [get_nested_value(item, path) for item in data]
    return get_nested_value(data, path)


@register_transform(
    name="extractProperties",
    description="Replace content objects with their .properties (elementwise on arrays)",
)
def extract_properties(data: Any, context: Any) -> Any:
    if isinstance(data, list):
        return [_extract(item) for item in data]
    return _extract(data)
