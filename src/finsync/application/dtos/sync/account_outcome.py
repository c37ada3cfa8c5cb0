"""DTOs for the result of syncing one account."""

from dataclasses import dataclass, field
from datetime import date
from typing import Optional

from finsync.domain.sync.services import StepRecord
from finsync.domain.sync.value_objects import Account, SyncSessionState


def _iso(value: Optional[date]) -> Optional[str]:
    return value.isoformat() if value else None


@dataclass(frozen=True)
class RetryOptions:
    """Start dates offered to the user after a failed sync.

    ``continue_from_date`` is None when nothing was ever saved for the
    account, in which case only the original date makes sense.
    """

    original_start_date: date
    continue_from_date: Optional[date] = None

    def to_dict(self) -> dict:
        return {
            "original_start_date": self.original_start_date.isoformat(),
            "continue_from_date": (
                self.continue_from_date.isoformat()
                if self.continue_from_date
                else None
            ),
        }


@dataclass(frozen=True)
class AccountOutcome:
    """Terminal result of one account's sync session."""

    account: Account
    state: SyncSessionState
    start_date: date
    end_date: date

    transactions_fetched: int = 0
    transactions_saved: int = 0
    transactions_duplicate: int = 0
    transactions_updated: int = 0
    card_breakdown: dict[str, int] = field(default_factory=dict)
    # dates of the transactions the server actually processed
    first_transaction_date: Optional[date] = None
    last_transaction_date: Optional[date] = None

    error_message: Optional[str] = None
    error_kind: Optional[str] = None
    error_hint: Optional[str] = None
    attempts_made: Optional[int] = None
    retry_options: Optional[RetryOptions] = None

    elapsed_seconds: float = 0.0
    steps: tuple[StepRecord, ...] = ()

    @property
    def account_id(self) -> str:
        return self.account.account_id

    @property
    def vendor(self) -> str:
        return self.account.vendor

    @property
    def nickname(self) -> str:
        return self.account.nickname

    @property
    def succeeded(self) -> bool:
        return self.state is SyncSessionState.COMPLETED

    @property
    def failed(self) -> bool:
        return self.state is SyncSessionState.FAILED

    @property
    def cancelled(self) -> bool:
        return self.state is SyncSessionState.CANCELLED

    @property
    def is_concurrency_error(self) -> bool:
        return self.failed and self.error_kind == "CONCURRENCY_ERROR"

    @property
    def covered_range(self) -> tuple[date, date]:
        """Processed transaction dates, or the requested window without them."""
        if self.first_transaction_date is None or self.last_transaction_date is None:
            return self.start_date, self.end_date
        return self.first_transaction_date, self.last_transaction_date

    def to_dict(self) -> dict:
        return {
            "account_id": self.account_id,
            "vendor": self.vendor,
            "nickname": self.nickname,
            "state": self.state.value,
            "start_date": self.start_date.isoformat(),
            "end_date": self.end_date.isoformat(),
            "transactions_fetched": self.transactions_fetched,
            "transactions_saved": self.transactions_saved,
            "transactions_duplicate": self.transactions_duplicate,
            "transactions_updated": self.transactions_updated,
            "card_breakdown": dict(self.card_breakdown),
            "first_transaction_date": _iso(self.first_transaction_date),
            "last_transaction_date": _iso(self.last_transaction_date),
            "error_message": self.error_message,
            "error_kind": self.error_kind,
            "error_hint": self.error_hint,
            "attempts_made": self.attempts_made,
            "retry_options": (
                self.retry_options.to_dict() if self.retry_options else None
            ),
            "elapsed_seconds": round(self.elapsed_seconds, 3),
            "steps": [
                {
                    "step": s.step,
                    "message": s.message,
                    "success": s.success,
                    "phase": s.phase,
                }
                for s in self.steps
            ],
        }
