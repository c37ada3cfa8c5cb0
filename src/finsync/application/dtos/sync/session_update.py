"""Per-event snapshot handed from a session to its observer."""

from dataclasses import dataclass
from typing import Optional

from finsync.domain.sync.services import WaitState
from finsync.domain.sync.value_objects import (
    Account,
    ProtocolEvent,
    SyncSessionState,
)


@dataclass(frozen=True)
class SessionUpdate:
    """One applied protocol event and the session state right after it."""

    account: Account
    event: ProtocolEvent
    state: SyncSessionState
    percent: float
    wait: Optional[WaitState] = None
    # Set when a wait was just cleared by this event
    wait_ended: bool = False
