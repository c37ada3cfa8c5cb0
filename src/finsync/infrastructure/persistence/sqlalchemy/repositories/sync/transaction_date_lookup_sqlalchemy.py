"""Newest stored transaction date per vendor."""

from __future__ import annotations

from datetime import date
from typing import Optional

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from finsync.domain.sync.ports import TransactionDateLookup
from finsync.infrastructure.persistence.sqlalchemy.models import TransactionModel


class TransactionDateLookupSQLAlchemy(TransactionDateLookup):
    def __init__(self, session: AsyncSession):
        self._session = session

    async def last_transaction_date(self, vendor: str) -> Optional[date]:
        stmt = select(func.max(TransactionModel.transaction_date)).where(
            TransactionModel.vendor == vendor,
        )
        result = await self._session.execute(stmt)
        return result.scalar_one_or_none()
