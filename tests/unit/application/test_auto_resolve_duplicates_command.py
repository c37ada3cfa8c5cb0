"""Unit tests for bulk resolution of exact duplicates."""

from datetime import date
from decimal import Decimal

import pytest

from finsync.application.commands.duplicates import (
    AutoResolveDuplicatesCommand,
    ResolveDuplicateCommand,
)
from finsync.domain.duplicates.value_objects import (
    DuplicatePair,
    DuplicateStatus,
    StoredTransaction,
    TransactionRef,
)
from tests.shared.fakes import InMemoryDuplicateRepository


def _stored(identifier, name="Coffee Shop", on=date(2024, 3, 10), amount="-18.00"):
    return StoredTransaction(
        ref=TransactionRef(identifier, "max"),
        name=name,
        transaction_date=on,
        amount=Decimal(amount),
    )


class TestAutoResolveDuplicatesCommand:
    def setup_method(self):
        self.repo = InMemoryDuplicateRepository(
            [
                _stored("a"),
                _stored("b"),
                # Loose candidate (a day later) is left for a human
                _stored("c", name="Bakery", on=date(2024, 3, 1)),
                _stored("d", name="Bakery", on=date(2024, 3, 2)),
            ],
        )
        self.command = AutoResolveDuplicatesCommand(self.repo)

    @pytest.mark.asyncio
    async def test_keeps_first_of_exact_pairs(self):
        result = await self.command.execute()

        assert result.candidates == 1
        assert result.deleted == [TransactionRef("b", "max")]
        assert {ref.identifier for ref in self.repo.transactions} == {"a", "c", "d"}
        resolution = await self.repo.get_resolution(
            TransactionRef("a", "max"),
            TransactionRef("b", "max"),
        )
        assert resolution.status is DuplicateStatus.CONFIRMED_DUPLICATE

    @pytest.mark.asyncio
    async def test_second_run_deletes_nothing(self):
        await self.command.execute()

        result = await self.command.execute()

        assert result.candidates == 0
        assert result.deleted_count == 0

    @pytest.mark.asyncio
    async def test_dry_run_changes_nothing(self):
        result = await self.command.execute(dry_run=True)

        assert result.deleted == [TransactionRef("b", "max")]
        assert len(self.repo.transactions) == 4
        assert self.repo.resolutions == []
        assert "would_delete" in result.to_dict()

    @pytest.mark.asyncio
    async def test_chain_keeps_one_copy(self):
        repo = InMemoryDuplicateRepository([_stored("x"), _stored("y"), _stored("z")])

        result = await AutoResolveDuplicatesCommand(repo).execute()

        assert result.candidates == 3
        assert result.deleted_count == 2
        assert result.skipped == 1
        assert [ref.identifier for ref in repo.transactions] == ["x"]

    @pytest.mark.asyncio
    async def test_suppressed_pairs_are_not_touched(self):
        await ResolveDuplicateCommand(self.repo).execute(
            DuplicatePair(TransactionRef("a", "max"), TransactionRef("b", "max"), 0.95),
            "not_duplicate",
        )

        result = await self.command.execute()

        assert result.candidates == 0
        assert len(self.repo.transactions) == 4

    @pytest.mark.asyncio
    async def test_threshold_is_configurable(self):
        command = AutoResolveDuplicatesCommand(self.repo, threshold=0.7)

        result = await command.execute()

        assert result.candidates == 2
        assert result.deleted_count == 2
