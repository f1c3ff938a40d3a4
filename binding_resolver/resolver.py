"""Data binding resolver.

Resolves a page's data bindings by fetching from the configured sources
and folding the results into one flat data object for the renderer.

Per binding:
    normalize -> cache lookup -> race(fetch, timeout, abort)
    -> transform -> cache write -> error policy

A failed binding never aborts its siblings. Failures are reported on the
result (success=False, error) and collected in PageDataResult.errors;
only bindings with onError=propagate raise to the caller.

Usage:
    resolver = create_data_binding_resolver(fetchers=my_fetchers, cache=MemoryTTLCache())
    result = await resolver.resolve_all(page_bindings, ResolutionContext(route={"id": "123"}))
    result.data["customer"]
"""

import asyncio
import logging
import time
from collections.abc import Awaitable, Callable, Iterable, Mapping
from dataclasses import replace
from typing import Any

from binding_resolver.errors import (
    Aborted,
    BindingError,
    FetchFailed,
    TimeoutExceeded,
    UnknownSourceType,
)
from binding_resolver.registry import Transform, TransformRegistry, default_registry
from binding_resolver.sources import (
    EMPTY_ARRAY_SOURCES,
    LOCAL_SOURCES,
    make_cache_key,
    normalize_query,
    parse_source,
    resolve_source,
)
from core.interfaces import CacheEntry, DataCache, DataFetchers
from core.types import (
    BindingErrorEntry,
    BindingSpec,
    OnError,
    PageDataResult,
    ResolutionContext,
    ResolvedBinding,
    ResolveOptions,
)

logger = logging.getLogger(__name__)

# Default per-binding timeout (ms)
DEFAULT_TIMEOUT = 30000


def _elapsed_ms(start: float) -> float:
    return round((time.monotonic() - start) * 1000, 2)


def _policy(binding: BindingSpec) -> OnError:
    try:
        return OnError(binding.on_error or OnError.THROW)
    except ValueError:
        logger.warning(
            "[RESOLVER] Unknown onError '%s' for binding '%s', using 'throw'",
            binding.on_error,
            binding.key,
        )
        return OnError.THROW


class DataBindingResolver:
    """Resolves data bindings against injected fetchers and an optional cache.

    Each instance owns its transform registry; registering a transform on
    one resolver does not affect any other.
    """

    def __init__(
        self,
        fetchers: DataFetchers,
        cache: DataCache | None = None,
        default_timeout: float = DEFAULT_TIMEOUT,
        transforms: Mapping[str, Transform] | TransformRegistry | None = None,
    ):
        self._fetchers = fetchers
        self._cache = cache
        self._default_timeout = default_timeout

        if isinstance(transforms, TransformRegistry):
            self._transforms = transforms.copy()
        else:
            self._transforms = default_registry()
            for name, func in (transforms or {}).items():
                self._transforms.register(name, func)

    @property
    def transforms(self) -> TransformRegistry:
        return self._transforms

    # =========================================================================
    # Public API
    # =========================================================================

    async def resolve_binding(
        self,
        binding: BindingSpec,
        context: ResolutionContext,
        options: ResolveOptions | None = None,
    ) -> ResolvedBinding:
        """Resolve a single data binding.

        Returns a fresh ResolvedBinding. Failures are reported, not raised,
        unless the binding's onError policy is `propagate`.

        Raises:
            BindingError: only for onError=propagate
        """
        options = options or ResolveOptions()
        start = time.monotonic()

        try:
            source = parse_source(binding.source)
            query = normalize_query(binding, source)

            cache_key = None
            if self._cache is not None and source not in LOCAL_SOURCES:
                cache_key = make_cache_key(binding, query, context)
                if options.use_cache:
                    cached = await self._cache_get(cache_key)
                    if cached is not None:
                        logger.debug("[CACHE] Hit for binding '%s'", binding.key)
                        return ResolvedBinding(
                            key=binding.key,
                            data=cached.data,
                            success=True,
                            duration=_elapsed_ms(start),
                            stale=True,
                        )

            data = await self._race(
                lambda: resolve_source(source, query, context, self._fetchers),
                options,
            )

            if binding.transform and data is not None:
                data = self._transforms.apply(data, binding.transform, context)

            if cache_key is not None:
                await self._cache_set(cache_key, data, options.cache_ttl)

            duration = _elapsed_ms(start)
            logger.debug("[RESOLVER] Resolved '%s' (%s) in %.1fms", binding.key, source.value, duration)
            return ResolvedBinding(key=binding.key, data=data, success=True, duration=duration)

        except BindingError as e:
            return self._failure(binding, e, start)

    async def resolve_all(
        self,
        bindings: Iterable[BindingSpec],
        context: ResolutionContext,
        options: ResolveOptions | None = None,
    ) -> PageDataResult:
        """Resolve all data bindings for a page.

        Parallel (default): every binding resolves concurrently and none can
        see another's result. Sequential: bindings resolve in list order and
        each successful result is exposed as {{resolved.<key>}} to the rest.

        Raises:
            BindingError: if a binding with onError=propagate fails
        """
        options = options or ResolveOptions()
        start = time.monotonic()
        bindings = list(bindings)

        # Private copy; the caller's context is never written to
        resolved_context = replace(context, resolved=dict(context.resolved or {}))

        if options.parallel:
            results = await self._resolve_parallel(bindings, resolved_context, options)
        else:
            results = []
            for binding in bindings:
                result = await self.resolve_binding(binding, resolved_context, options)
                results.append(result)
                if result.success:
                    resolved_context.resolved[result.key] = result.data

        data: dict[str, Any] = {}
        by_key: dict[str, ResolvedBinding] = {}
        errors: list[BindingErrorEntry] = []
        for result in results:
            by_key[result.key] = result
            data[result.key] = result.data
            if not result.success:
                errors.append(BindingErrorEntry(key=result.key, error=result.error or "Unknown error"))

        duration = _elapsed_ms(start)
        if errors:
            logger.info(
                "[RESOLVER] Resolved %d bindings in %.1fms with %d error(s)",
                len(results),
                duration,
                len(errors),
            )
        else:
            logger.debug("[RESOLVER] Resolved %d bindings in %.1fms", len(results), duration)

        return PageDataResult(
            data=data,
            bindings=by_key,
            success=not errors,
            duration=duration,
            errors=errors,
        )

    async def invalidate(self, key: str) -> None:
        """Invalidate every cached entry for a binding key."""
        if self._cache is None:
            return
        await self._cache.invalidate_pattern(f"{key}:*")
        logger.debug("[CACHE] Invalidated binding '%s'", key)

    def register_transform(
        self,
        name: str,
        func: Transform,
        description: str = "",
        parameterized: bool = False,
    ) -> None:
        """Register a custom transform on this resolver."""
        self._transforms.register(name, func, description, parameterized)

    # =========================================================================
    # Internals
    # =========================================================================

    async def _resolve_parallel(
        self,
        bindings: list[BindingSpec],
        context: ResolutionContext,
        options: ResolveOptions,
    ) -> list[ResolvedBinding]:
        semaphore = asyncio.Semaphore(options.max_concurrency) if options.max_concurrency else None

        async def run(binding: BindingSpec) -> ResolvedBinding:
            if semaphore is None:
                return await self.resolve_binding(binding, context, options)
            async with semaphore:
                return await self.resolve_binding(binding, context, options)

        tasks = [asyncio.ensure_future(run(b)) for b in bindings]
        try:
            return list(await asyncio.gather(*tasks))
        except BaseException:
            # A propagate failure aborts the page: stop the siblings
            for task in tasks:
                if not task.done():
                    task.cancel()
            raise

    async def _race(
        self,
        fetch: Callable[[], Awaitable[Any]],
        options: ResolveOptions,
    ) -> Any:
        """Run a fetch against the timeout and the caller's abort signal.

        Whichever loses is cancelled, so the fetcher sees CancelledError at
        its current await point.
        """
        timeout_ms = options.timeout if options.timeout is not None else self._default_timeout
        signal = options.signal
        if signal is not None and signal.is_set():
            raise Aborted()

        fetch_task = asyncio.ensure_future(fetch())
        abort_task = asyncio.ensure_future(signal.wait()) if signal is not None else None
        waiters = {fetch_task} if abort_task is None else {fetch_task, abort_task}

        try:
            done, _ = await asyncio.wait(
                waiters,
                timeout=timeout_ms / 1000,
                return_when=asyncio.FIRST_COMPLETED,
            )
        finally:
            for task in waiters:
                if not task.done():
                    task.cancel()

        if fetch_task in done:
            # Cancelled from inside the fetcher; our own cancellation arrives at asyncio.wait
            if fetch_task.cancelled():
                raise FetchFailed("Cancelled")
            try:
                return fetch_task.result()
            except BindingError:
                raise
            except Exception as e:
                raise FetchFailed(str(e) or type(e).__name__, e) from e

        if abort_task is not None and abort_task in done:
            raise Aborted()
        raise TimeoutExceeded(timeout_ms)

    def _failure(self, binding: BindingSpec, error: BindingError, start: float) -> ResolvedBinding:
        policy = _policy(binding)
        message = str(error) or type(error).__name__
        logger.warning("[RESOLVER] Binding '%s' failed: %s", binding.key, message)

        if policy == OnError.PROPAGATE:
            raise error

        data = None
        if policy == OnError.EMPTY:
            try:
                if parse_source(binding.source) in EMPTY_ARRAY_SOURCES:
                    data = []
            except UnknownSourceType:
                pass

        return ResolvedBinding(
            key=binding.key,
            data=data,
            success=False,
            error=message,
            duration=_elapsed_ms(start),
        )

    async def _cache_get(self, key: str) -> CacheEntry | None:
        try:
            return await self._cache.get(key)
        except Exception as e:
            logger.warning("[CACHE] Read failed, treating as miss: %s", e)
            return None

    async def _cache_set(self, key: str, data: Any, ttl: int | None) -> None:
        try:
            await self._cache.set(key, data, ttl)
        except Exception as e:
            logger.warning("[CACHE] Write failed: %s", e)


def create_data_binding_resolver(
    fetchers: DataFetchers,
    cache: DataCache | None = None,
    default_timeout: float = DEFAULT_TIMEOUT,
    transforms: Mapping[str, Transform] | TransformRegistry | None = None,
) -> DataBindingResolver:
    """Create a data binding resolver.

    Example:
        resolver = create_data_binding_resolver(
            fetchers=HttpDataFetchers(base_url, token),
            cache=MemoryTTLCache(),
        )
        result = await resolver.resolve_all(bindings, ResolutionContext(route={"customerId": "123"}))
    """
    return DataBindingResolver(
        fetchers=fetchers,
        cache=cache,
        default_timeout=default_timeout,
        transforms=transforms,
    )
