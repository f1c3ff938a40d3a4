"""Data Binding Resolution Engine.

Resolves a page's declarative data bindings into one flat data object.

Usage:
    from binding_resolver import create_data_binding_resolver
    from core import ResolutionContext, dict_to_binding

    resolver = create_data_binding_resolver(fetchers=my_fetchers)
    binding = dict_to_binding({
        "key": "fund",
        "source": "contentObject",
        "contentObject": {"id": "{{route.fundId}}"},
    })
    result = await resolver.resolve_all([binding], ResolutionContext(route={"fundId": "abc123"}))

Sources are dispatched by type (see sources.py); post-fetch transforms are
looked up in a per-resolver registry seeded with the built-ins.
"""

from binding_resolver.errors import (
    Aborted,
    BindingError,
    FetchFailed,
    MissingConfiguration,
    TimeoutExceeded,
    TransformFailed,
    UnknownSourceType,
)
from binding_resolver.interpolate import (
    extract_interpolation_keys,
    get_nested_value,
    has_interpolation,
    interpolate_object,
    interpolate_string,
    validate_interpolation_keys,
)
from binding_resolver.registry import (
    TransformDefinition,
    TransformRegistry,
    default_registry,
    register_transform,
)
from binding_resolver.resolver import (
    DEFAULT_TIMEOUT,
    DataBindingResolver,
    create_data_binding_resolver,
)
from binding_resolver.sources import make_cache_key, normalize_query

__all__ = [
    # Main API
    "DEFAULT_TIMEOUT",
    "DataBindingResolver",
    "create_data_binding_resolver",
    "make_cache_key",
    "normalize_query",
    # Interpolation
    "extract_interpolation_keys",
    "get_nested_value",
    "has_interpolation",
    "interpolate_object",
    "interpolate_string",
    "validate_interpolation_keys",
    # Transforms
    "TransformDefinition",
    "TransformRegistry",
    "default_registry",
    "register_transform",
    # Errors
    "Aborted",
    "BindingError",
    "FetchFailed",
    "MissingConfiguration",
    "TimeoutExceeded",
    "TransformFailed",
    "UnknownSourceType",
]

# Import all transform modules to register the built-ins
from binding_resolver import transforms  # noqa: F401, E402
