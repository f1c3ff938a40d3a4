"""Page data service layer.

Wires the binding resolver to settings, the cache and the platform
fetchers, and exposes the server-side prefetch entry point used before
rendering a page.
"""

import logging
from collections.abc import Iterable
from typing import Any

from binding_resolver import DataBindingResolver, create_data_binding_resolver
from core import (
    BindingSpec,
    DataCache,
    DataFetchers,
    PageDataResult,
    ResolutionContext,
    ResolveOptions,
    dict_to_binding,
)
from fusion.config import FusionSettings, get_settings
from fusion.providers import HttpDataFetchers
from fusion.utilities.cache import MemoryTTLCache

logger = logging.getLogger(__name__)


def create_default_fetchers(settings: FusionSettings | None = None) -> HttpDataFetchers:
    """Platform HTTP fetchers configured from settings. Caller owns aclose()."""
    settings = settings or get_settings()
    return HttpDataFetchers(
        settings.api_base_url,
        token=settings.api_token,
        timeout=settings.request_timeout,
        retry_count=settings.request_retries,
    )


def create_default_resolver(
    settings: FusionSettings | None = None,
    fetchers: DataFetchers | None = None,
    cache: DataCache | None = None,
) -> DataBindingResolver:
    """Create a resolver from application settings.

    Fetchers default to the platform HTTP client; a memory cache is added
    when caching is enabled and no cache is supplied.
    """
    settings = settings or get_settings()

    if fetchers is None:
        fetchers = create_default_fetchers(settings)
    if cache is None and settings.cache_enabled:
        cache = MemoryTTLCache(default_ttl=settings.cache_ttl_seconds)

    logger.debug(
        "[RESOLVER] Created resolver (cache=%s, timeout=%.0fms)",
        type(cache).__name__ if cache else None,
        settings.default_timeout_ms,
    )
    return create_data_binding_resolver(
        fetchers=fetchers,
        cache=cache,
        default_timeout=settings.default_timeout_ms,
    )


async def resolve_page_data(
    resolver: DataBindingResolver,
    bindings: Iterable[BindingSpec | dict],
    route: dict[str, str] | None = None,
    *,
    settings: dict[str, Any] | None = None,
    user: dict[str, Any] | None = None,
    options: ResolveOptions | None = None,
) -> PageDataResult:
    """Prefetch all data for a page on the server.

    Bindings may be BindingSpec instances or their wire dicts.
    """
    specs = [b if isinstance(b, BindingSpec) else dict_to_binding(b) for b in bindings]
    context = ResolutionContext(route=route or {}, settings=settings, user=user)
    return await resolver.resolve_all(specs, context, options)
