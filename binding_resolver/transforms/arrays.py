"""Array transforms.

Non-array input passes through unchanged, except `count`, which is 0.
"""

from typing import Any

from binding_resolver.registry import register_transform


@register_transform(
    name="flatten",
    description="Flatten nested arrays one level",
)
def flatten(data: Any, context: Any) -> Any:
    if not isinstance(data, list):
        return data
    flat: list = []
    for item in data:
        if isinstance(item, list):
            flat.extend(item)
        else:
            flat.append(item)
    return flat


@register_transform(
    name="first",
    description="First item of an array (None if empty)",
)
def first(data: Any, context: Any) -> Any:
    if isinstance(data, list):
        return data[0] if data else None
    return data


@register_transform(
    name="last",
    description="Last item of an array (None if empty)",
)
def last(data: Any, context: Any) -> Any:
    if isinstance(data, list):
        return data[-1] if data else None
    return data


@register_transform(
    name="count",
    description="Number of items in an array (0 for anything else)",
)
def count(data: Any, context: Any) -> int:
    if isinstance(data, list):
        return len(data)
    return 0
