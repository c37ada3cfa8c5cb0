"""Account value object as seen by the sync core."""

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional


@dataclass(frozen=True)
class Account:
    """A vendor login the orchestrator can sync.

    Owned by account management; the sync core only reads it. The credential
    reference is opaque here and passed through to the sync endpoint.
    """

    account_id: str
    vendor: str
    nickname: str = ""
    credential_ref: Optional[str] = None
    last_synced_at: Optional[datetime] = None
    last_transaction_date: Optional[date] = None

    @property
    def display_name(self) -> str:
        return self.nickname or self.vendor

    def with_last_transaction_date(self, value: Optional[date]) -> "Account":
        return Account(
            account_id=self.account_id,
            vendor=self.vendor,
            nickname=self.nickname,
            credential_ref=self.credential_ref,
            last_synced_at=self.last_synced_at,
            last_transaction_date=value,
        )
