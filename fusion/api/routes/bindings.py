"""Data binding API endpoints.

Server-side page data prefetch:
- POST /bindings/resolve - Resolve a page's bindings for a route
- POST /bindings/invalidate/{key} - Drop cached data for a binding key
"""

import logging
from functools import lru_cache
from typing import Any

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, ConfigDict, Field

from binding_resolver import BindingError, DataBindingResolver
from core import ResolveOptions, page_result_to_dict
from fusion.providers import HttpDataFetchers
from fusion.services import create_default_fetchers, create_default_resolver, resolve_page_data

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/bindings", tags=["Data Bindings"])


@lru_cache(maxsize=1)
def get_fetchers() -> HttpDataFetchers:
    """Shared platform client, closed by close_resolver() on shutdown."""
    return create_default_fetchers()


@lru_cache(maxsize=1)
def get_resolver() -> DataBindingResolver:
    """Shared resolver instance (override in tests via dependency_overrides)."""
    return create_default_resolver(fetchers=get_fetchers())


async def close_resolver() -> None:
    """Close the shared platform client, if one was created."""
    if get_fetchers.cache_info().currsize:
        await get_fetchers().aclose()
        logger.info("[API] Closed platform client")
    get_fetchers.cache_clear()
    get_resolver.cache_clear()


# =============================================================================
# PYDANTIC MODELS
# =============================================================================


class ResolveRequest(BaseModel):
    """Bindings to resolve plus the page's route and ambient context."""

    model_config = ConfigDict(populate_by_name=True)

    bindings: list[dict[str, Any]]  # DataBindingSpec wire dicts
    route: dict[str, str] = Field(default_factory=dict)
    settings: dict[str, Any] | None = None
    user: dict[str, Any] | None = None
    parallel: bool = True
    timeout: float | None = Field(default=None, gt=0)  # ms per binding
    use_cache: bool = Field(default=True, alias="useCache")


class ResolvedBindingModel(BaseModel):
    key: str
    data: Any = None
    success: bool
    error: str | None = None
    duration: float = 0.0
    stale: bool = False


class BindingErrorModel(BaseModel):
    key: str
    error: str


class PageDataResponse(BaseModel):
    data: dict[str, Any]
    bindings: dict[str, ResolvedBindingModel]
    success: bool
    duration: float
    errors: list[BindingErrorModel]


# =============================================================================
# ENDPOINTS
# =============================================================================


@router.post("/resolve", response_model=PageDataResponse)
async def resolve_bindings(
    request: ResolveRequest,
    resolver: DataBindingResolver = Depends(get_resolver),
):
    """Resolve all bindings for a page.

    Failed bindings are reported in `errors`; the request itself only fails
    for a binding without a key or a binding with onError=propagate.
    """
    options = ResolveOptions(
        parallel=request.parallel,
        timeout=request.timeout,
        use_cache=request.use_cache,
    )
    try:
        result = await resolve_page_data(
            resolver,
            request.bindings,
            request.route,
            settings=request.settings,
            user=request.user,
            options=options,
        )
    except KeyError as e:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=f"Invalid binding: missing {e}",
        ) from None
    except BindingError as e:
        logger.warning("[API] Page resolution aborted: %s", e)
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(e)) from None

    return page_result_to_dict(result)


@router.post("/invalidate/{key}")
async def invalidate_binding(
    key: str,
    resolver: DataBindingResolver = Depends(get_resolver),
) -> dict:
    """Invalidate cached data for a binding key."""
    await resolver.invalidate(key)
    return {"invalidated": key}
