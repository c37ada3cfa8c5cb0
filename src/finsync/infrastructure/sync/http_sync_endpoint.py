"""httpx adapter for the remote streamed sync endpoint."""

from __future__ import annotations

import json
import logging
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING, AsyncIterator, Optional

import httpx

from finsync.domain.shared.exceptions import ErrorCode
from finsync.domain.sync.exceptions import SyncConcurrencyError, TransportError
from finsync.domain.sync.ports import SyncEndpoint, SyncRequest

if TYPE_CHECKING:
    from finsync_config.settings import Settings

logger = logging.getLogger(__name__)

STREAM_PATH = "/api/scrapers/run-stream"
FORCE_STOP_PATH = "/api/scrapers/stop"


def _error_body(content: bytes) -> dict:
    try:
        body = json.loads(content.decode("utf-8", errors="replace"))
    except json.JSONDecodeError:
        return {}
    return body if isinstance(body, dict) else {}


class HttpSyncEndpoint(SyncEndpoint):
    """Open event streams with ``httpx.AsyncClient.stream``.

    The read timeout bounds the gap between two chunks, not the whole sync;
    long vendor waits are announced by ``network`` events in between.
    """

    def __init__(
        self,
        base_url: str,
        connect_timeout: float = 10.0,
        read_timeout: float = 600.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self._base_url = base_url.rstrip("/")
        self._timeout = httpx.Timeout(
            connect=connect_timeout,
            read=read_timeout,
            write=10.0,
            pool=10.0,
        )
        self._transport = transport

    @classmethod
    def from_settings(cls, settings: Settings) -> HttpSyncEndpoint:
        return cls(
            base_url=settings.sync_endpoint_url,
            connect_timeout=settings.sync_connect_timeout_seconds,
            read_timeout=settings.sync_read_timeout_seconds,
        )

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self._base_url,
            timeout=self._timeout,
            transport=self._transport,
        )

    @asynccontextmanager
    async def open_stream(self, request: SyncRequest) -> AsyncIterator[AsyncIterator[bytes]]:
        try:
            async with (
                self._client() as client,
                client.stream(
                    "POST",
                    STREAM_PATH,
                    json=request.to_payload(),
                    headers={"Accept": "text/event-stream"},
                ) as response,
            ):
                if response.status_code >= 400:
                    body = _error_body(await response.aread())
                    self._raise_for_status(response.status_code, body, request)
                yield self._iter_bytes(response)
        except httpx.TimeoutException as e:
            msg = f"Sync endpoint timed out: {e}"
            raise TransportError(msg) from e
        except httpx.HTTPError as e:
            msg = f"Sync endpoint unreachable: {e}"
            raise TransportError(msg) from e

    async def force_stop(self) -> None:
        try:
            async with self._client() as client:
                response = await client.post(FORCE_STOP_PATH)
        except httpx.HTTPError as e:
            msg = f"Sync endpoint unreachable: {e}"
            raise TransportError(msg) from e
        if response.status_code >= 400:
            body = _error_body(response.content)
            raise TransportError(
                body.get("message") or f"Force-stop returned {response.status_code}",
                status_code=response.status_code,
            )
        logger.info("Remote sync processes stopped")

    @staticmethod
    async def _iter_bytes(response: httpx.Response) -> AsyncIterator[bytes]:
        async for chunk in response.aiter_bytes():
            yield chunk

    @staticmethod
    def _raise_for_status(status_code: int, body: dict, request: SyncRequest) -> None:
        kind = body.get("kind") or body.get("type")
        message = body.get("message") or body.get("error")
        if kind == ErrorCode.CONCURRENCY_ERROR.value:
            raise SyncConcurrencyError(
                message or "Another sync is already running",
                account_id=request.account_id,
            )
        raise TransportError(
            message or f"Sync endpoint returned {status_code}",
            status_code=status_code,
        )
