"""Sync ports (interfaces implemented by infrastructure)."""

from finsync.domain.sync.ports.account_directory import (
    AccountDirectory,
    TransactionDateLookup,
)
from finsync.domain.sync.ports.event_stream_decoder import (
    DEFAULT_EVENT_TAG,
    EventStreamDecoder,
    RawFrame,
)
from finsync.domain.sync.ports.sync_endpoint import SyncEndpoint, SyncRequest

__all__ = [
    "DEFAULT_EVENT_TAG",
    "AccountDirectory",
    "EventStreamDecoder",
    "RawFrame",
    "SyncEndpoint",
    "SyncRequest",
    "TransactionDateLookup",
]
