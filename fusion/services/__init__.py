"""Service layer - resolver wiring and page data prefetch."""

from fusion.services.page_data import (
    create_default_fetchers,
    create_default_resolver,
    resolve_page_data,
)

__all__ = [
    "create_default_fetchers",
    "create_default_resolver",
    "resolve_page_data",
]
