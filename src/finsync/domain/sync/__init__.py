"""Sync domain: checkpoints, protocol events, session states."""

from finsync.domain.sync.exceptions import (
    ForceStopFailedError,
    ForceStopNotConfirmedError,
    IllegalStateTransitionError,
    InvalidCheckpointPolicyError,
    OrchestrationStartError,
    ProtocolFrameError,
    SyncCancelledError,
    SyncConcurrencyError,
    SyncError,
    TransportError,
    VendorSyncError,
)

__all__ = [
    "ForceStopFailedError",
    "ForceStopNotConfirmedError",
    "IllegalStateTransitionError",
    "InvalidCheckpointPolicyError",
    "OrchestrationStartError",
    "ProtocolFrameError",
    "SyncCancelledError",
    "SyncConcurrencyError",
    "SyncError",
    "TransportError",
    "VendorSyncError",
]
