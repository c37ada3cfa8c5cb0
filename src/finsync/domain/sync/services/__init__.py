"""Sync domain services."""

from finsync.domain.sync.services.checkpoint_resolver import (
    CheckpointResolver,
    resolve_checkpoint,
)
from finsync.domain.sync.services.rate_limit_monitor import (
    RateLimitMonitor,
    WaitState,
)
from finsync.domain.sync.services.session_state_machine import (
    SessionStateMachine,
    StepRecord,
)

__all__ = [
    "CheckpointResolver",
    "RateLimitMonitor",
    "SessionStateMachine",
    "StepRecord",
    "WaitState",
    "resolve_checkpoint",
]
