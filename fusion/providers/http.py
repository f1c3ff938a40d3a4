"""Platform REST API fetchers.

Implements DataFetchers over httpx.AsyncClient against the platform
endpoints (objects, data stores, files). Handles raw HTTP only - no
caching and no transformation beyond response parsing.

Cancelling the awaiting task aborts the in-flight request, which is how
the resolver stops fetches that lose a timeout or abort race.
"""

import asyncio
import csv
import io
import logging
from typing import Any

import httpx

logger = logging.getLogger(__name__)

OBJECTS_PATH = "/api/v1/objects"
DATA_PATH = "/api/v1/data"
FILES_PATH = "/api/v1/files"

# Agent run artifacts are stored under agents/{run_id}/{name}
ARTIFACTS_PREFIX = "agents"

DEFAULT_TIMEOUT = 30.0  # seconds
DEFAULT_RETRY_COUNT = 2
DEFAULT_RETRY_DELAY = 0.5  # seconds, multiplied by attempt number


class FetchError(Exception):
    """A platform request failed."""


class HTTPStatusFetchError(FetchError):
    """The platform answered with an error status."""

    def __init__(self, status_code: int, url: str, detail: str = ""):
        self.status_code = status_code
        self.url = url
        message = f"HTTP {status_code} for {url}"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message)


def artifact_path(path: str, run_id: str | None) -> str:
    """Full storage path of an artifact, scoped to a run when given."""
    if not run_id:
        return path
    return f"{ARTIFACTS_PREFIX}/{run_id}/{path.lstrip('/')}"


def _parse_content(response: httpx.Response, format: str | None) -> Any:
    if format == "binary":
        return response.content
    if format == "text":
        return response.text
    if format == "csv":
        return list(csv.DictReader(io.StringIO(response.text)))
    if format == "json" or "json" in response.headers.get("content-type", ""):
        return response.json()
    return response.text


class HttpDataFetchers:
    """DataFetchers backed by the platform REST API.

    Usage:
        async with HttpDataFetchers("https://api.example.com", token="...") as fetchers:
            resolver = create_data_binding_resolver(fetchers=fetchers)
    """

    def __init__(
        self,
        base_url: str,
        token: str | None = None,
        timeout: float = DEFAULT_TIMEOUT,
        retry_count: int = DEFAULT_RETRY_COUNT,
        retry_delay: float = DEFAULT_RETRY_DELAY,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self._base_url = base_url.rstrip("/")
        self._token = token
        self._timeout = timeout
        self._retry_count = retry_count
        self._retry_delay = retry_delay
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    def _auth_headers(self, url: str) -> dict[str, str]:
        # Platform-relative URLs only; signed and external URLs get no token
        if self._token and not url.startswith(("http://", "https://")):
            return {"Authorization": f"Bearer {self._token}"}
        return {}

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self._base_url,
                headers={"Accept": "application/json"},
                timeout=self._timeout,
                transport=self._transport,
                limits=httpx.Limits(max_connections=50, max_keepalive_connections=10),
            )
        return self._client

    async def aclose(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> "HttpDataFetchers":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def _request(
        self,
        method: str,
        url: str,
        *,
        params: dict | None = None,
        json: Any = None,
        headers: dict[str, str] | None = None,
    ) -> httpx.Response:
        """Send a request, retrying transport errors and 5xx responses.

        Raises:
            HTTPStatusFetchError: on a 4xx, or a 5xx after the last retry
            FetchError: on a transport error after the last retry
        """
        request_headers = {**self._auth_headers(url), **(headers or {})}
        attempts = self._retry_count + 1
        for attempt in range(attempts):
            try:
                response = await self._get_client().request(
                    method, url, params=params, json=json, headers=request_headers
                )
                response.raise_for_status()
                return response
            except httpx.HTTPStatusError as e:
                status = e.response.status_code
                logger.warning("[FETCH] HTTP %d for %s %s", status, method, url)
                if status < 500 or attempt == attempts - 1:
                    raise HTTPStatusFetchError(status, url, e.response.text[:200]) from e
            except httpx.RequestError as e:
                logger.warning("[FETCH] Request failed for %s %s: %s", method, url, e)
                if attempt == attempts - 1:
                    raise FetchError(f"Request failed for {url}: {e}") from e
            await asyncio.sleep(self._retry_delay * (attempt + 1))
        raise FetchError(f"Request failed for {url}")

    # =========================================================================
    # DataFetchers
    # =========================================================================

    async def fetch_content_object(self, id: str, *, select: list[str] | None = None) -> Any:
        params = {"select": ",".join(select)} if select else None
        response = await self._request("GET", f"{OBJECTS_PATH}/{id}", params=params)
        return response.json()

    async def query_objects(self, query: dict[str, Any]) -> Any:
        payload = {k: v for k, v in query.items() if v is not None}
        response = await self._request("POST", f"{OBJECTS_PATH}/find", json=payload)
        return response.json()

    async def query_data_store(
        self,
        store_id: str,
        sql: str,
        *,
        limit: int | None = None,
        version_id: str | None = None,
    ) -> Any:
        payload: dict[str, Any] = {"sql": sql}
        if limit is not None:
            payload["limit"] = limit
        if version_id:
            url = f"{DATA_PATH}/{store_id}/versions/{version_id}/query"
        else:
            url = f"{DATA_PATH}/{store_id}/query"
        response = await self._request("POST", url, json=payload)
        return response.json()

    async def fetch_artifact(
        self, path: str, *, format: str | None = None, run_id: str | None = None
    ) -> Any:
        full_path = artifact_path(path, run_id)
        response = await self._request(
            "POST",
            f"{FILES_PATH}/download-url",
            json={"file": full_path, "name": full_path.rsplit("/", 1)[-1]},
        )
        url = response.json().get("url")
        if not url:
            raise FetchError(f"No download URL returned for artifact {full_path}")
        content = await self._request("GET", url)
        return _parse_content(content, format)

    async def fetch_api(
        self,
        endpoint: str,
        *,
        method: str | None = None,
        body: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
    ) -> Any:
        method = (method or "GET").upper()
        response = await self._request(
            method,
            endpoint,
            json=body if method != "GET" else None,
            headers=headers,
        )
        return _parse_content(response, None)
