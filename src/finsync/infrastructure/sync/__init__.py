"""Sync infrastructure: event-stream codec and HTTP endpoint adapter."""

from finsync.infrastructure.sync.http_sync_endpoint import HttpSyncEndpoint
from finsync.infrastructure.sync.sse_codec import SSEDecoder, encode_frame

__all__ = ["HttpSyncEndpoint", "SSEDecoder", "encode_frame"]
