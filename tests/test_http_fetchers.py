"""Tests for the platform HTTP fetchers.

Requests are served by httpx.MockTransport; no network access.
"""

import json

import httpx
import pytest

from fusion.providers import FetchError, HttpDataFetchers, HTTPStatusFetchError
from fusion.providers.http import artifact_path

BASE_URL = "https://platform.test"


def _make_fetchers(handler, **kwargs) -> HttpDataFetchers:
    kwargs.setdefault("retry_delay", 0)
    return HttpDataFetchers(BASE_URL, transport=httpx.MockTransport(handler), **kwargs)


class _Recorder:
    """MockTransport handler that records requests and replays responses."""

    def __init__(self, *responses: httpx.Response):
        self.responses = list(responses)
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if len(self.responses) > 1:
            return self.responses.pop(0)
        return self.responses[0]


class TestArtifactPath:
    def test_without_run(self):
        assert artifact_path("reports/summary.json", None) == "reports/summary.json"

    def test_with_run(self):
        assert artifact_path("/summary.json", "run-1") == "agents/run-1/summary.json"


class TestHttpDataFetchers:
    @pytest.mark.asyncio
    async def test_fetch_content_object(self):
        recorder = _Recorder(httpx.Response(200, json={"id": "abc"}))
        async with _make_fetchers(recorder, token="secret") as fetchers:
            data = await fetchers.fetch_content_object("abc", select=["name", "nav"])

        assert data == {"id": "abc"}
        request = recorder.requests[0]
        assert request.method == "GET"
        assert request.url.path == "/api/v1/objects/abc"
        assert request.url.params["select"] == "name,nav"
        assert request.headers["Authorization"] == "Bearer secret"

    @pytest.mark.asyncio
    async def test_no_token_no_auth_header(self):
        recorder = _Recorder(httpx.Response(200, json={}))
        async with _make_fetchers(recorder) as fetchers:
            await fetchers.fetch_content_object("abc")
        assert "Authorization" not in recorder.requests[0].headers

    @pytest.mark.asyncio
    async def test_query_objects_drops_unset_fields(self):
        recorder = _Recorder(httpx.Response(200, json=[{"id": "1"}]))
        async with _make_fetchers(recorder) as fetchers:
            data = await fetchers.query_objects({"filter": {"a": 1}, "limit": 5, "search": None})

        assert data == [{"id": "1"}]
        request = recorder.requests[0]
        assert request.method == "POST"
        assert request.url.path == "/api/v1/objects/find"
        assert json.loads(request.content) == {"filter": {"a": 1}, "limit": 5}

    @pytest.mark.asyncio
    async def test_query_data_store_latest_and_version(self):
        recorder = _Recorder(httpx.Response(200, json={"rows": [], "columns": []}))
        async with _make_fetchers(recorder) as fetchers:
            await fetchers.query_data_store("store-1", "SELECT 1", limit=10)
            await fetchers.query_data_store("store-1", "SELECT 1", version_id="v3")

        latest, versioned = recorder.requests
        assert latest.url.path == "/api/v1/data/store-1/query"
        assert json.loads(latest.content) == {"sql": "SELECT 1", "limit": 10}
        assert versioned.url.path == "/api/v1/data/store-1/versions/v3/query"
        assert json.loads(versioned.content) == {"sql": "SELECT 1"}

    @pytest.mark.asyncio
    async def test_fetch_artifact_follows_download_url(self):
        def handler(request: httpx.Request) -> httpx.Response:
            if request.url.path == "/api/v1/files/download-url":
                body = json.loads(request.content)
                assert body == {"file": "agents/run-9/out.csv", "name": "out.csv"}
                return httpx.Response(200, json={"url": "https://storage.test/signed/out.csv"})
            assert request.url.host == "storage.test"
            assert "Authorization" not in request.headers
            return httpx.Response(200, text="name,total\nAcme,10\n")

        async with _make_fetchers(handler, token="secret") as fetchers:
            rows = await fetchers.fetch_artifact("out.csv", format="csv", run_id="run-9")

        assert rows == [{"name": "Acme", "total": "10"}]

    @pytest.mark.asyncio
    async def test_fetch_artifact_without_url(self):
        recorder = _Recorder(httpx.Response(200, json={}))
        async with _make_fetchers(recorder) as fetchers:
            with pytest.raises(FetchError, match="No download URL"):
                await fetchers.fetch_artifact("missing.json")

    @pytest.mark.asyncio
    async def test_fetch_api_get_sends_no_body(self):
        recorder = _Recorder(httpx.Response(200, json={"ok": True}))
        async with _make_fetchers(recorder) as fetchers:
            data = await fetchers.fetch_api("/custom/stats", body={"ignored": True}, headers={"X-Trace": "t"})

        assert data == {"ok": True}
        request = recorder.requests[0]
        assert request.method == "GET"
        assert request.content == b""
        assert request.headers["X-Trace"] == "t"

    @pytest.mark.asyncio
    async def test_fetch_api_post_sends_json(self):
        recorder = _Recorder(httpx.Response(200, text="done"))
        async with _make_fetchers(recorder) as fetchers:
            data = await fetchers.fetch_api("/custom/run", method="post", body={"id": "1"})

        assert data == "done"
        assert recorder.requests[0].method == "POST"
        assert json.loads(recorder.requests[0].content) == {"id": "1"}

    @pytest.mark.asyncio
    async def test_client_error_is_not_retried(self):
        recorder = _Recorder(httpx.Response(404, text="not found"))
        async with _make_fetchers(recorder, retry_count=3) as fetchers:
            with pytest.raises(HTTPStatusFetchError) as exc:
                await fetchers.fetch_content_object("nope")

        assert exc.value.status_code == 404
        assert "not found" in str(exc.value)
        assert len(recorder.requests) == 1

    @pytest.mark.asyncio
    async def test_server_error_is_retried(self):
        recorder = _Recorder(
            httpx.Response(503, text="busy"),
            httpx.Response(200, json={"id": "abc"}),
        )
        async with _make_fetchers(recorder, retry_count=2) as fetchers:
            data = await fetchers.fetch_content_object("abc")

        assert data == {"id": "abc"}
        assert len(recorder.requests) == 2

    @pytest.mark.asyncio
    async def test_server_error_after_last_retry(self):
        recorder = _Recorder(httpx.Response(500, text="broken"))
        async with _make_fetchers(recorder, retry_count=1) as fetchers:
            with pytest.raises(HTTPStatusFetchError) as exc:
                await fetchers.fetch_content_object("abc")

        assert exc.value.status_code == 500
        assert len(recorder.requests) == 2

    @pytest.mark.asyncio
    async def test_transport_error_becomes_fetch_error(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        async with _make_fetchers(handler, retry_count=0) as fetchers:
            with pytest.raises(FetchError, match="connection refused"):
                await fetchers.fetch_content_object("abc")
