"""Catch-up plan query: per-account start dates for the next sync."""

from __future__ import annotations

from datetime import date
from typing import Optional

from finsync.application.commands.sync import order_accounts_for_sync
from finsync.application.dtos.sync import AccountCatchUpDTO, CatchUpPlanDTO
from finsync.domain.shared.time import today_local
from finsync.domain.sync.ports import AccountDirectory, TransactionDateLookup
from finsync.domain.sync.services import CheckpointResolver
from finsync.domain.sync.value_objects import CheckpointMode


class CatchUpPlanQuery:
    """Preview what a catch-up run would do, without syncing anything.

    Accounts with history start ``overlap_days`` before their newest stored
    transaction; accounts without any start ``fallback_days`` back.
    """

    def __init__(
        self,
        directory: AccountDirectory,
        resolver: Optional[CheckpointResolver] = None,
        date_lookup: Optional[TransactionDateLookup] = None,
    ):
        self._directory = directory
        self._resolver = resolver or CheckpointResolver()
        self._date_lookup = date_lookup

    async def execute(self, today: Optional[date] = None) -> CatchUpPlanDTO:
        today = today or today_local()
        accounts = order_accounts_for_sync(await self._directory.list_active())

        plans = []
        for account in accounts:
            if account.last_transaction_date is None and self._date_lookup:
                account = account.with_last_transaction_date(
                    await self._date_lookup.last_transaction_date(account.vendor),
                )
            checkpoint = self._resolver.resolve(
                account,
                mode=CheckpointMode.CATCH_UP,
                today=today,
            )
            plans.append(
                AccountCatchUpDTO(
                    account_id=account.account_id,
                    vendor=account.vendor,
                    nickname=account.nickname,
                    last_transaction_date=account.last_transaction_date,
                    sync_from_date=checkpoint.start_date,
                    days_to_sync=checkpoint.days_to_sync(today),
                    source=checkpoint.source.value,
                ),
            )

        return CatchUpPlanDTO(accounts=tuple(plans), today=today)
