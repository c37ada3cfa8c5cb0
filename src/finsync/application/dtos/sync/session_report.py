"""DTO for the aggregated result of an orchestration run."""

from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import Optional

from finsync.application.dtos.sync.account_outcome import AccountOutcome


class RunStatus(str, Enum):
    """Overall classification of a run."""

    SUCCESS = "success"
    PARTIAL = "partial"
    FAILED = "failed"
    CANCELLED = "cancelled"


@dataclass(frozen=True)
class SessionReport:
    """Result of syncing a list of accounts one after another."""

    started_at: datetime
    status: RunStatus
    outcomes: tuple[AccountOutcome, ...] = ()

    # Aggregate counts
    total_fetched: int = 0
    total_saved: int = 0
    total_duplicate: int = 0
    total_updated: int = 0
    card_breakdown: dict[str, int] = field(default_factory=dict)

    covered_from: Optional[date] = None
    covered_to: Optional[date] = None
    duration_seconds: float = 0.0

    # Set when the remote side reported a stuck sync; nothing after it ran
    force_stop_required: bool = False
    not_attempted: tuple[str, ...] = ()

    @property
    def succeeded(self) -> tuple[AccountOutcome, ...]:
        return tuple(o for o in self.outcomes if o.succeeded)

    @property
    def failed(self) -> tuple[AccountOutcome, ...]:
        return tuple(o for o in self.outcomes if o.failed)

    @property
    def cancelled(self) -> bool:
        return self.status is RunStatus.CANCELLED

    @property
    def accounts_synced(self) -> int:
        return len(self.succeeded)

    def outcome_for(self, account_id: str) -> Optional[AccountOutcome]:
        for outcome in self.outcomes:
            if outcome.account_id == account_id:
                return outcome
        return None

    def to_dict(self) -> dict:
        return {
            "status": self.status.value,
            "started_at": self.started_at.isoformat(),
            "total_fetched": self.total_fetched,
            "total_saved": self.total_saved,
            "total_duplicate": self.total_duplicate,
            "total_updated": self.total_updated,
            "card_breakdown": dict(self.card_breakdown),
            "covered_from": self.covered_from.isoformat() if self.covered_from else None,
            "covered_to": self.covered_to.isoformat() if self.covered_to else None,
            "duration_seconds": round(self.duration_seconds, 3),
            "accounts_synced": self.accounts_synced,
            "accounts_failed": len(self.failed),
            "force_stop_required": self.force_stop_required,
            "not_attempted": list(self.not_attempted),
            "outcomes": [o.to_dict() for o in self.outcomes],
        }
