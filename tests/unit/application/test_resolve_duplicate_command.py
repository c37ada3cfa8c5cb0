"""Unit tests for resolving a single duplicate pair."""

from datetime import date
from decimal import Decimal

import pytest

from finsync.application.commands.duplicates import ResolveDuplicateCommand
from finsync.domain.duplicates.exceptions import (
    DuplicateAlreadyResolvedError,
    DuplicateNotFoundError,
    InvalidResolutionActionError,
)
from finsync.domain.duplicates.value_objects import (
    DuplicatePair,
    DuplicateStatus,
    ResolutionAction,
    StoredTransaction,
    TransactionRef,
)
from tests.shared.fakes import InMemoryDuplicateRepository

FIRST = TransactionRef("tx-1", "max")
SECOND = TransactionRef("tx-2", "max")


def _stored(ref: TransactionRef) -> StoredTransaction:
    return StoredTransaction(
        ref=ref,
        name="Coffee Shop",
        transaction_date=date(2024, 3, 10),
        amount=Decimal("-18.00"),
    )


class TestResolveDuplicateCommand:
    def setup_method(self):
        self.repo = InMemoryDuplicateRepository([_stored(FIRST), _stored(SECOND)])
        self.command = ResolveDuplicateCommand(self.repo)
        self.pair = DuplicatePair(FIRST, SECOND, 0.95)

    @pytest.mark.asyncio
    async def test_keep_first_deletes_second(self):
        result = await self.command.execute(self.pair, "keep_first")

        assert result.deleted == SECOND
        assert set(self.repo.transactions) == {FIRST}
        resolution = await self.repo.get_resolution(FIRST, SECOND)
        assert resolution.status is DuplicateStatus.CONFIRMED_DUPLICATE
        assert resolution.resolved_action == "kept_first"

    @pytest.mark.asyncio
    async def test_keep_second_deletes_first(self):
        result = await self.command.execute(self.pair, ResolutionAction.KEEP_SECOND)

        assert result.deleted == FIRST
        assert set(self.repo.transactions) == {SECOND}

    @pytest.mark.asyncio
    async def test_delete_aliases(self):
        result = await self.command.execute(self.pair, "delete_first")

        assert result.action is ResolutionAction.KEEP_SECOND
        assert result.deleted == FIRST

    @pytest.mark.asyncio
    async def test_not_duplicate_keeps_both(self):
        result = await self.command.execute(self.pair, "not_duplicate")

        assert result.deleted is None
        assert set(self.repo.transactions) == {FIRST, SECOND}
        resolution = await self.repo.get_resolution(SECOND, FIRST)
        assert resolution.status is DuplicateStatus.NOT_DUPLICATE
        assert resolution.resolved_action == "kept_both"
        assert result.to_dict()["marked_as_not_duplicate"] is True

    @pytest.mark.asyncio
    async def test_second_resolution_is_rejected(self):
        await self.command.execute(self.pair, "not_duplicate")

        with pytest.raises(DuplicateAlreadyResolvedError):
            await self.command.execute(DuplicatePair(SECOND, FIRST, 0.95), "keep_first")

        assert set(self.repo.transactions) == {FIRST, SECOND}

    @pytest.mark.asyncio
    async def test_missing_transaction(self):
        del self.repo.transactions[SECOND]

        with pytest.raises(DuplicateNotFoundError) as exc_info:
            await self.command.execute(self.pair, "keep_second")

        assert exc_info.value.details == SECOND.to_dict()
        assert FIRST in self.repo.transactions
        assert self.repo.resolutions == []

    @pytest.mark.asyncio
    async def test_unknown_action(self):
        with pytest.raises(InvalidResolutionActionError):
            await self.command.execute(self.pair, "delete_both")

    @pytest.mark.asyncio
    async def test_action_not_allowed_for_pair(self):
        pair = DuplicatePair(
            FIRST,
            SECOND,
            0.7,
            allowed_actions=(ResolutionAction.NOT_DUPLICATE,),
        )

        with pytest.raises(InvalidResolutionActionError):
            await self.command.execute(pair, "keep_first")

    @pytest.mark.asyncio
    async def test_failed_tracking_write_rolls_back_delete(self):
        self.repo.fail_record = True

        with pytest.raises(RuntimeError):
            await self.command.execute(self.pair, "keep_first")

        assert set(self.repo.transactions) == {FIRST, SECOND}
        assert self.repo.resolutions == []
