"""Sync DTOs: outcomes, reports and run notifications."""

from finsync.application.dtos.sync.account_outcome import (
    AccountOutcome,
    RetryOptions,
)
from finsync.application.dtos.sync.catch_up_plan import (
    AccountCatchUpDTO,
    CatchUpPlanDTO,
)
from finsync.application.dtos.sync.notifications import (
    AccountFinishedNotification,
    AccountProgressNotification,
    AccountStartedNotification,
    DataChangedNotification,
    ForceStopRequiredNotification,
    NetworkActivityNotification,
    NotificationType,
    RunFinishedNotification,
    RunStartedNotification,
    SyncNotification,
    WaitingNotification,
)
from finsync.application.dtos.sync.orchestration_options import (
    OrchestrationOptions,
)
from finsync.application.dtos.sync.session_report import RunStatus, SessionReport
from finsync.application.dtos.sync.session_update import SessionUpdate

__all__ = [
    "AccountCatchUpDTO",
    "AccountFinishedNotification",
    "AccountOutcome",
    "AccountProgressNotification",
    "AccountStartedNotification",
    "CatchUpPlanDTO",
    "DataChangedNotification",
    "ForceStopRequiredNotification",
    "NetworkActivityNotification",
    "NotificationType",
    "OrchestrationOptions",
    "RetryOptions",
    "RunFinishedNotification",
    "RunStartedNotification",
    "RunStatus",
    "SessionReport",
    "SessionUpdate",
    "SyncNotification",
    "WaitingNotification",
]
