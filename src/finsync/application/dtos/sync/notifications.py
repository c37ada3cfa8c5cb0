"""Notifications published while an orchestration run is in progress.

These are what the streaming endpoint re-publishes to the browser and what
the CLI renders. They are informational only; nothing in the core waits on
a subscriber.
"""

from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import Optional

from finsync.application.dtos.sync.account_outcome import AccountOutcome
from finsync.application.dtos.sync.session_report import SessionReport
from finsync.domain.shared.time import utc_now


class NotificationType(str, Enum):
    """Types of run notifications."""

    RUN_STARTED = "run_started"
    RUN_FINISHED = "run_finished"

    ACCOUNT_STARTED = "account_started"
    ACCOUNT_PROGRESS = "account_progress"
    ACCOUNT_NETWORK = "account_network"
    ACCOUNT_WAITING = "account_waiting"
    ACCOUNT_COMPLETED = "account_completed"
    ACCOUNT_FAILED = "account_failed"
    ACCOUNT_CANCELLED = "account_cancelled"

    FORCE_STOP_REQUIRED = "force_stop_required"
    DATA_CHANGED = "data_changed"


@dataclass
class SyncNotification:
    """Base class for run notifications."""

    notification_type: NotificationType
    message: str
    timestamp: datetime = field(default_factory=utc_now)

    def to_dict(self) -> dict:
        return {
            "type": self.notification_type.value,
            "message": self.message,
            "timestamp": self.timestamp.isoformat(),
        }


@dataclass
class RunStartedNotification(SyncNotification):
    """Emitted once before the first account."""

    total_accounts: int = 0

    def __init__(self, total_accounts: int, message: Optional[str] = None):
        super().__init__(
            notification_type=NotificationType.RUN_STARTED,
            message=message or f"Starting sync for {total_accounts} account(s)",
        )
        self.total_accounts = total_accounts

    def to_dict(self) -> dict:
        d = super().to_dict()
        d["total_accounts"] = self.total_accounts
        return d


@dataclass
class AccountStartedNotification(SyncNotification):
    """Emitted when an account's session is about to start."""

    account_id: str = ""
    vendor: str = ""
    nickname: str = ""
    account_index: int = 0
    total_accounts: int = 0
    start_date: Optional[date] = None

    def __init__(  # noqa: PLR0913
        self,
        account_id: str,
        vendor: str,
        nickname: str,
        account_index: int,
        total_accounts: int,
        start_date: date,
        message: Optional[str] = None,
    ):
        super().__init__(
            notification_type=NotificationType.ACCOUNT_STARTED,
            message=message
            or f"Syncing {nickname or vendor} ({account_index}/{total_accounts})",
        )
        self.account_id = account_id
        self.vendor = vendor
        self.nickname = nickname
        self.account_index = account_index
        self.total_accounts = total_accounts
        self.start_date = start_date

    def to_dict(self) -> dict:
        d = super().to_dict()
        d["account_id"] = self.account_id
        d["vendor"] = self.vendor
        d["nickname"] = self.nickname
        d["account_index"] = self.account_index
        d["total_accounts"] = self.total_accounts
        d["start_date"] = self.start_date.isoformat() if self.start_date else None
        return d


@dataclass
class AccountProgressNotification(SyncNotification):
    """Step-level progress of the running account."""

    account_id: str = ""
    account_index: int = 0
    total_accounts: int = 0
    step: str = ""
    percent: float = 0.0
    phase: Optional[str] = None
    success: Optional[bool] = None

    def __init__(  # noqa: PLR0913
        self,
        account_id: str,
        account_index: int,
        total_accounts: int,
        step: str,
        percent: float,
        message: str,
        phase: Optional[str] = None,
        success: Optional[bool] = None,
    ):
        super().__init__(
            notification_type=NotificationType.ACCOUNT_PROGRESS,
            message=message,
        )
        self.account_id = account_id
        self.account_index = account_index
        self.total_accounts = total_accounts
        self.step = step
        self.percent = percent
        self.phase = phase
        self.success = success

    def to_dict(self) -> dict:
        d = super().to_dict()
        d["account_id"] = self.account_id
        d["account_index"] = self.account_index
        d["total_accounts"] = self.total_accounts
        d["step"] = self.step
        d["percent"] = self.percent
        d["phase"] = self.phase
        d["success"] = self.success
        return d


@dataclass
class NetworkActivityNotification(SyncNotification):
    """A request/response seen by the remote side."""

    account_id: str = ""
    kind: str = ""
    status: Optional[int] = None
    method: Optional[str] = None
    url: Optional[str] = None

    def __init__(  # noqa: PLR0913
        self,
        account_id: str,
        kind: str,
        status: Optional[int] = None,
        method: Optional[str] = None,
        url: Optional[str] = None,
        message: Optional[str] = None,
    ):
        super().__init__(
            notification_type=NotificationType.ACCOUNT_NETWORK,
            message=message or kind,
        )
        self.account_id = account_id
        self.kind = kind
        self.status = status
        self.method = method
        self.url = url

    def to_dict(self) -> dict:
        d = super().to_dict()
        d["account_id"] = self.account_id
        d["kind"] = self.kind
        d["status"] = self.status
        d["method"] = self.method
        d["url"] = self.url
        return d


@dataclass
class WaitingNotification(SyncNotification):
    """A rate-limit or retry wait started (``seconds > 0``) or ended (0)."""

    account_id: str = ""
    kind: str = ""
    seconds: float = 0.0

    def __init__(
        self,
        account_id: str,
        kind: str,
        seconds: float,
        message: Optional[str] = None,
    ):
        super().__init__(
            notification_type=NotificationType.ACCOUNT_WAITING,
            message=message
            or (f"Waiting {seconds:.0f}s" if seconds > 0 else "Wait finished"),
        )
        self.account_id = account_id
        self.kind = kind
        self.seconds = seconds

    @property
    def is_waiting(self) -> bool:
        return self.seconds > 0

    def to_dict(self) -> dict:
        d = super().to_dict()
        d["account_id"] = self.account_id
        d["kind"] = self.kind
        d["seconds"] = self.seconds
        d["is_waiting"] = self.is_waiting
        return d


_OUTCOME_TYPES = {
    "completed": NotificationType.ACCOUNT_COMPLETED,
    "failed": NotificationType.ACCOUNT_FAILED,
    "cancelled": NotificationType.ACCOUNT_CANCELLED,
}


@dataclass
class AccountFinishedNotification(SyncNotification):
    """Emitted once per account with its terminal outcome."""

    outcome: Optional[AccountOutcome] = None
    account_index: int = 0
    total_accounts: int = 0

    def __init__(
        self,
        outcome: AccountOutcome,
        account_index: int,
        total_accounts: int,
        message: Optional[str] = None,
    ):
        name = outcome.nickname or outcome.vendor
        if outcome.succeeded:
            default = f"{name}: {outcome.transactions_saved} new transaction(s)"
        elif outcome.cancelled:
            default = f"{name}: cancelled"
        else:
            default = f"{name}: {outcome.error_message or 'failed'}"
        super().__init__(
            notification_type=_OUTCOME_TYPES[outcome.state.value],
            message=message or default,
        )
        self.outcome = outcome
        self.account_index = account_index
        self.total_accounts = total_accounts

    def to_dict(self) -> dict:
        d = super().to_dict()
        d["account_index"] = self.account_index
        d["total_accounts"] = self.total_accounts
        d["outcome"] = self.outcome.to_dict() if self.outcome else None
        return d


@dataclass
class ForceStopRequiredNotification(SyncNotification):
    """The remote side has a stuck sync; the run halted."""

    account_id: str = ""

    def __init__(self, account_id: str, message: Optional[str] = None):
        super().__init__(
            notification_type=NotificationType.FORCE_STOP_REQUIRED,
            message=message
            or "Another sync is already running. Force-stop it before retrying.",
        )
        self.account_id = account_id

    def to_dict(self) -> dict:
        d = super().to_dict()
        d["account_id"] = self.account_id
        return d


@dataclass
class DataChangedNotification(SyncNotification):
    """Persisted data changed; views showing it should reload."""

    accounts: tuple[str, ...] = ()
    what: tuple[str, ...] = ()

    def __init__(
        self,
        accounts: tuple[str, ...],
        what: tuple[str, ...] = ("transactions",),
        message: Optional[str] = None,
    ):
        super().__init__(
            notification_type=NotificationType.DATA_CHANGED,
            message=message or f"Data changed for {len(accounts)} account(s)",
        )
        self.accounts = tuple(accounts)
        self.what = tuple(what)

    def to_dict(self) -> dict:
        d = super().to_dict()
        d["accounts"] = list(self.accounts)
        d["what"] = list(self.what)
        return d


@dataclass
class RunFinishedNotification(SyncNotification):
    """Emitted once after the last account with the full report."""

    report: Optional[SessionReport] = None

    def __init__(self, report: SessionReport, message: Optional[str] = None):
        super().__init__(
            notification_type=NotificationType.RUN_FINISHED,
            message=message
            or (
                f"Sync {report.status.value}: {report.total_saved} saved "
                f"across {report.accounts_synced} account(s)"
            ),
        )
        self.report = report

    def to_dict(self) -> dict:
        d = super().to_dict()
        d["report"] = self.report.to_dict() if self.report else None
        return d
