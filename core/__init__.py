"""Core types and interfaces for the Fusion binding resolver.

All data structures are dataclasses with attribute access.
Applications implement the DataFetchers and DataCache interfaces.
"""

from core.convert import dict_to_binding, page_result_to_dict, resolved_to_dict
from core.interfaces import CacheEntry, DataCache, DataFetchers
from core.types import (
    ApiQuery,
    ArtifactQuery,
    BindingErrorEntry,
    BindingSpec,
    ContentObjectQuery,
    DataSourceType,
    DataStoreQuery,
    LegacyQuery,
    ObjectQuerySpec,
    OnError,
    PageDataResult,
    ResolutionContext,
    ResolvedBinding,
    ResolveOptions,
)

__all__ = [
    # Types
    "ApiQuery",
    "ArtifactQuery",
    "BindingErrorEntry",
    "BindingSpec",
    "ContentObjectQuery",
    "DataSourceType",
    "DataStoreQuery",
    "LegacyQuery",
    "ObjectQuerySpec",
    "OnError",
    "PageDataResult",
    "ResolutionContext",
    "ResolvedBinding",
    "ResolveOptions",
    # Interfaces
    "CacheEntry",
    "DataCache",
    "DataFetchers",
    # Conversion
    "dict_to_binding",
    "page_result_to_dict",
    "resolved_to_dict",
]
