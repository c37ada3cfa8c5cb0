"""Unit tests for the httpx sync endpoint adapter."""

import json
from datetime import date

import httpx
import pytest

from finsync.domain.sync.exceptions import SyncConcurrencyError, TransportError
from finsync.domain.sync.ports import SyncRequest
from finsync.infrastructure.sync import HttpSyncEndpoint, encode_frame

BASE_URL = "http://sync.local"

REQUEST = SyncRequest(
    account_id="acc-1",
    vendor="max",
    start_date=date(2024, 3, 1),
    credential_ref="cred-9",
    options={"showBrowser": False},
)


def _endpoint(handler) -> HttpSyncEndpoint:
    return HttpSyncEndpoint(BASE_URL, transport=httpx.MockTransport(handler))


async def _read_all(endpoint: HttpSyncEndpoint) -> bytes:
    body = b""
    async with endpoint.open_stream(REQUEST) as stream:
        async for chunk in stream:
            body += chunk
    return body


class TestOpenStream:
    @pytest.mark.asyncio
    async def test_posts_request_and_streams_body(self):
        seen = []
        body = encode_frame("progress", {"step": "login"}).encode()

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(
                200,
                content=body,
                headers={"Content-Type": "text/event-stream"},
            )

        received = await _read_all(_endpoint(handler))

        assert received == body
        request = seen[0]
        assert request.method == "POST"
        assert request.url.path == "/api/scrapers/run-stream"
        assert request.headers["Accept"] == "text/event-stream"
        assert json.loads(request.content) == {
            "accountId": "acc-1",
            "vendor": "max",
            "startDate": "2024-03-01",
            "options": {"showBrowser": False},
            "credentialId": "cred-9",
        }

    @pytest.mark.asyncio
    async def test_concurrency_refusal(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(
                409,
                json={"type": "CONCURRENCY_ERROR", "message": "Already running"},
            )

        with pytest.raises(SyncConcurrencyError) as exc_info:
            await _read_all(_endpoint(handler))

        assert exc_info.value.message == "Already running"
        assert exc_info.value.account_id == "acc-1"

    @pytest.mark.asyncio
    async def test_http_error_status(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(500, text="upstream exploded")

        with pytest.raises(TransportError) as exc_info:
            await _read_all(_endpoint(handler))

        assert exc_info.value.status_code == 500
        assert "500" in exc_info.value.message

    @pytest.mark.asyncio
    async def test_connection_failure(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        with pytest.raises(TransportError, match="unreachable"):
            await _read_all(_endpoint(handler))

    @pytest.mark.asyncio
    async def test_timeout(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ReadTimeout("no data", request=request)

        with pytest.raises(TransportError, match="timed out"):
            await _read_all(_endpoint(handler))


class TestForceStop:
    @pytest.mark.asyncio
    async def test_posts_to_stop_path(self):
        seen = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request.url.path)
            return httpx.Response(200, json={"success": True})

        await _endpoint(handler).force_stop()

        assert seen == ["/api/scrapers/stop"]

    @pytest.mark.asyncio
    async def test_error_status_raises(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(503, json={"message": "Nothing to stop"})

        with pytest.raises(TransportError) as exc_info:
            await _endpoint(handler).force_stop()

        assert exc_info.value.status_code == 503
        assert exc_info.value.message == "Nothing to stop"
