"""Sync value objects."""

from finsync.domain.sync.value_objects.account import Account
from finsync.domain.sync.value_objects.checkpoint import (
    DEFAULT_FALLBACK_DAYS,
    DEFAULT_OVERLAP_DAYS,
    CheckpointMode,
    CheckpointPolicy,
    CheckpointSource,
    SyncCheckpoint,
)
from finsync.domain.sync.value_objects.protocol_events import (
    CompleteEvent,
    ErrorEvent,
    NetworkEvent,
    NetworkEventKind,
    ProcessedTransaction,
    ProgressEvent,
    ProtocolEvent,
    SyncSummary,
    TerminalEvent,
    is_terminal,
)
from finsync.domain.sync.value_objects.session_state import (
    ALLOWED_TRANSITIONS,
    SyncSessionState,
)

__all__ = [
    "ALLOWED_TRANSITIONS",
    "DEFAULT_FALLBACK_DAYS",
    "DEFAULT_OVERLAP_DAYS",
    "Account",
    "CheckpointMode",
    "CheckpointPolicy",
    "CheckpointSource",
    "CompleteEvent",
    "ErrorEvent",
    "NetworkEvent",
    "NetworkEventKind",
    "ProcessedTransaction",
    "ProgressEvent",
    "ProtocolEvent",
    "SyncCheckpoint",
    "SyncSessionState",
    "SyncSummary",
    "TerminalEvent",
    "is_terminal",
]
