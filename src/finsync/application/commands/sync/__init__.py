"""Sync commands."""

from finsync.application.commands.sync.force_stop_command import (
    ForceStopCommand,
    ForceStopResult,
)
from finsync.application.commands.sync.orchestrate_sync_command import (
    DEFAULT_RATE_LIMITED_VENDORS,
    OrchestrateSyncCommand,
    order_accounts_for_sync,
)
from finsync.application.commands.sync.sync_session_command import (
    SessionObserver,
    SyncSessionCommand,
)

__all__ = [
    "DEFAULT_RATE_LIMITED_VENDORS",
    "ForceStopCommand",
    "ForceStopResult",
    "OrchestrateSyncCommand",
    "SessionObserver",
    "SyncSessionCommand",
    "order_accounts_for_sync",
]
