"""DTOs for the catch-up plan query."""

from dataclasses import dataclass
from datetime import date
from typing import Optional


@dataclass(frozen=True)
class AccountCatchUpDTO:
    """Where the next catch-up sync of one account would start."""

    account_id: str
    vendor: str
    nickname: str
    last_transaction_date: Optional[date]
    sync_from_date: date
    days_to_sync: int
    source: str

    @property
    def is_first_sync(self) -> bool:
        return self.last_transaction_date is None

    def to_dict(self) -> dict:
        return {
            "account_id": self.account_id,
            "vendor": self.vendor,
            "nickname": self.nickname,
            "last_transaction_date": (
                self.last_transaction_date.isoformat()
                if self.last_transaction_date
                else None
            ),
            "sync_from_date": self.sync_from_date.isoformat(),
            "days_to_sync": self.days_to_sync,
            "source": self.source,
            "is_first_sync": self.is_first_sync,
        }


@dataclass(frozen=True)
class CatchUpPlanDTO:
    """Catch-up plan for every active account, in sync order."""

    accounts: tuple[AccountCatchUpDTO, ...]
    today: date

    @property
    def total_accounts(self) -> int:
        return len(self.accounts)

    @property
    def first_sync_accounts(self) -> tuple[AccountCatchUpDTO, ...]:
        return tuple(acc for acc in self.accounts if acc.is_first_sync)

    def to_dict(self) -> dict:
        return {
            "accounts": [acc.to_dict() for acc in self.accounts],
            "total_accounts": self.total_accounts,
            "has_first_sync_accounts": bool(self.first_sync_accounts),
            "today": self.today.isoformat(),
        }
