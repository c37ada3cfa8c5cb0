"""Read-only ports onto account management and the transaction store."""

from abc import ABC, abstractmethod
from datetime import date
from typing import Optional

from finsync.domain.sync.value_objects import Account


class AccountDirectory(ABC):
    """Lists the accounts that can be synced."""

    @abstractmethod
    async def list_active(self) -> list[Account]:
        """Return active accounts, least recently synced first."""

    @abstractmethod
    async def find_by_id(self, account_id: str) -> Optional[Account]:
        """Return one account or None."""


class TransactionDateLookup(ABC):
    """Most recent persisted transaction date for a vendor."""

    @abstractmethod
    async def last_transaction_date(self, vendor: str) -> Optional[date]:
        """Return the newest transaction date stored for ``vendor``."""
