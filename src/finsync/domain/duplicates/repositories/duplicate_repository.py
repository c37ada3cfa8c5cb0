"""Repository interface for duplicate detection and resolution."""

from abc import ABC, abstractmethod
from typing import AsyncContextManager, Optional

from finsync.domain.duplicates.value_objects import (
    DuplicatePair,
    DuplicateResolution,
    DuplicateStatus,
    StoredTransaction,
    TransactionRef,
)


class DuplicateRepository(ABC):
    """Access to stored transactions and the duplicate tracking table."""

    @abstractmethod
    async def list_transactions(self) -> list[StoredTransaction]:
        """Return every stored transaction that detection should scan."""

    @abstractmethod
    async def transaction_exists(self, ref: TransactionRef) -> bool:
        """Check whether a transaction is still stored."""

    @abstractmethod
    async def delete_transaction(self, ref: TransactionRef) -> bool:
        """
        Delete one transaction.

        Returns
        -------
        True if a row was deleted, False if it did not exist
        """

    @abstractmethod
    async def get_resolution(
        self,
        first: TransactionRef,
        second: TransactionRef,
    ) -> Optional[DuplicateResolution]:
        """Return the tracked record for a pair in either order, or None."""

    @abstractmethod
    async def list_resolutions(
        self,
        status: Optional[DuplicateStatus] = None,
        limit: Optional[int] = None,
    ) -> list[DuplicateResolution]:
        """Return tracked records, newest first (all of them without a limit)."""

    @abstractmethod
    async def record_resolution(
        self,
        pair: DuplicatePair,
        status: DuplicateStatus,
        resolved_action: str,
    ) -> None:
        """Insert or update the tracking record for a pair."""

    @abstractmethod
    def unit(self) -> AsyncContextManager[None]:
        """
        Open a nested transaction (SAVEPOINT) for one pair.

        Everything done inside is committed together or rolled back
        together when the block raises.
        """
