"""String interpolation for data bindings.

Handles {{key}} and {{key.nested.path}} placeholders in strings and
nested objects. Paths are dot notation only; no expressions.

Unresolved placeholders (missing path or None value) are left verbatim,
so a broken reference stays visible in the generated SQL or URL instead
of silently becoming an empty string.
"""

import json
import re
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, is_dataclass
from typing import Any, TypeVar

from core.types import ResolutionContext

T = TypeVar("T")

INTERPOLATION_PATTERN = re.compile(r"\{\{([^}]+)\}\}")


def _scope(context: Any) -> Any:
    if isinstance(context, ResolutionContext):
        return context.as_scope()
    return context


def get_nested_value(obj: Any, path: str) -> Any:
    """Get a value from nested dicts, dataclasses or lists by dotted path.

    Numeric segments index into lists: 'items.0.id'; negative indexes
    do not count from the end. Attributes starting with "_" are never
    read off objects. Returns None if any segment is missing.
    """
    current = _scope(obj)
    for part in path.split("."):
        if current is None:
            return None
        if isinstance(current, Mapping):
            current = current.get(part)
        elif isinstance(current, Sequence) and not isinstance(current, str | bytes):
            try:
                index = int(part)
            except ValueError:
                return None
            if index < 0 or index >= len(current):
                return None
            current = current[index]
        elif is_dataclass(current) or hasattr(current, "__dict__"):
            if part.startswith("_"):
                return None
            current = getattr(current, part, None)
        else:
            return None
    return current


def has_interpolation(value: str) -> bool:
    """Check if a string contains {{...}} placeholders."""
    return bool(INTERPOLATION_PATTERN.search(value))


def _render(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, Mapping | list | tuple):
        return json.dumps(value, default=str)
    return str(value)


def interpolate_string(template: str, context: Any) -> str:
    """Replace {{path}} placeholders with values from context.

    Example:
        interpolate_string("/api/customers/{{route.id}}", {"route": {"id": "123"}})
        # "/api/customers/123"
    """
    scope = _scope(context)

    def replace(match: re.Match) -> str:
        value = get_nested_value(scope, match.group(1).strip())
        if value is None:
            return match.group(0)
        return _render(value)

    return INTERPOLATION_PATTERN.sub(replace, template)


def interpolate_object(obj: T, context: Any) -> T:
    """Return a deep copy of obj with every string leaf interpolated.

    The input is never mutated. Numbers, booleans and None pass through.
    """
    scope = _scope(context)
    return _walk(obj, scope)


def _walk(obj: Any, scope: Any) -> Any:
    if isinstance(obj, str):
        return interpolate_string(obj, scope)
    if isinstance(obj, Mapping):
        return {k: _walk(v, scope) for k, v in obj.items()}
    if isinstance(obj, list):
        return [_walk(v, scope) for v in obj]
    if isinstance(obj, tuple):
        return tuple(_walk(v, scope) for v in obj)
    return obj


def extract_interpolation_keys(value: Any) -> list[str]:
    """List the unique placeholder paths in a string or nested object."""
    keys: dict[str, None] = {}

    def extract(v: Any) -> None:
        if isinstance(v, str):
            for match in INTERPOLATION_PATTERN.finditer(v):
                keys.setdefault(match.group(1).strip())
        elif isinstance(v, Mapping):
            for item in v.values():
                extract(item)
        elif isinstance(v, list | tuple):
            for item in v:
                extract(item)

    extract(value)
    return list(keys)


@dataclass(frozen=True)
class InterpolationCheck:
    valid: bool
    missing_keys: list[str]


def validate_interpolation_keys(value: Any, context: Any) -> InterpolationCheck:
    """Check that every placeholder in value resolves against context."""
    scope = _scope(context)
    missing = [k for k in extract_interpolation_keys(value) if get_nested_value(scope, k) is None]
    return InterpolationCheck(valid=not missing, missing_keys=missing)
