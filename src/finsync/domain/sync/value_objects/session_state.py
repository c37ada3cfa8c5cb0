"""Per-session sync states."""

from enum import Enum


class SyncSessionState(str, Enum):
    """Lifecycle of one streamed sync for one account."""

    IDLE = "idle"
    STARTING = "starting"
    RUNNING = "running"
    WAITING_BACKOFF = "waiting_backoff"
    COMPLETED = "completed"
    FAILED = "failed"
    CANCELLED = "cancelled"

    @property
    def is_terminal(self) -> bool:
        return self in _TERMINAL_STATES

    @property
    def is_active(self) -> bool:
        return self in (
            SyncSessionState.STARTING,
            SyncSessionState.RUNNING,
            SyncSessionState.WAITING_BACKOFF,
        )


_TERMINAL_STATES = frozenset(
    {
        SyncSessionState.COMPLETED,
        SyncSessionState.FAILED,
        SyncSessionState.CANCELLED,
    },
)

ALLOWED_TRANSITIONS: dict[SyncSessionState, frozenset[SyncSessionState]] = {
    SyncSessionState.IDLE: frozenset(
        {SyncSessionState.STARTING, SyncSessionState.CANCELLED},
    ),
    SyncSessionState.STARTING: frozenset(
        {
            SyncSessionState.RUNNING,
            SyncSessionState.WAITING_BACKOFF,
            SyncSessionState.COMPLETED,
            SyncSessionState.FAILED,
            SyncSessionState.CANCELLED,
        },
    ),
    SyncSessionState.RUNNING: frozenset(
        {
            SyncSessionState.WAITING_BACKOFF,
            SyncSessionState.COMPLETED,
            SyncSessionState.FAILED,
            SyncSessionState.CANCELLED,
        },
    ),
    SyncSessionState.WAITING_BACKOFF: frozenset(
        {
            SyncSessionState.RUNNING,
            SyncSessionState.COMPLETED,
            SyncSessionState.FAILED,
            SyncSessionState.CANCELLED,
        },
    ),
    SyncSessionState.COMPLETED: frozenset(),
    SyncSessionState.FAILED: frozenset(),
    SyncSessionState.CANCELLED: frozenset(),
}
