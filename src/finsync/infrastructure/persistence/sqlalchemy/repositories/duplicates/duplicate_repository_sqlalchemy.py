"""SQLAlchemy implementation of DuplicateRepository."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

from sqlalchemy import and_, delete, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from finsync.domain.duplicates.repositories import DuplicateRepository
from finsync.domain.duplicates.value_objects import (
    DuplicatePair,
    DuplicateResolution,
    DuplicateStatus,
    StoredTransaction,
    TransactionRef,
)
from finsync.domain.shared.time import utc_now
from finsync.infrastructure.persistence.sqlalchemy.models import (
    PotentialDuplicateModel,
    TransactionModel,
)

logger = logging.getLogger(__name__)


def _matches(first: TransactionRef, second: TransactionRef):
    return and_(
        PotentialDuplicateModel.transaction1_id == first.identifier,
        PotentialDuplicateModel.transaction1_vendor == first.vendor,
        PotentialDuplicateModel.transaction2_id == second.identifier,
        PotentialDuplicateModel.transaction2_vendor == second.vendor,
    )


class DuplicateRepositorySQLAlchemy(DuplicateRepository):
    """Reads transactions and tracks resolved pairs in potential_duplicates.

    The repository never commits; the caller owns the outer transaction
    and each ``unit()`` is a SAVEPOINT inside it.
    """

    def __init__(self, session: AsyncSession):
        self._session = session

    async def list_transactions(self) -> list[StoredTransaction]:
        stmt = select(TransactionModel).order_by(
            TransactionModel.vendor,
            TransactionModel.transaction_date,
            TransactionModel.identifier,
        )
        result = await self._session.execute(stmt)
        return [self._transaction_to_domain(m) for m in result.scalars().all()]

    async def transaction_exists(self, ref: TransactionRef) -> bool:
        stmt = select(func.count()).where(
            TransactionModel.identifier == ref.identifier,
            TransactionModel.vendor == ref.vendor,
        )
        result = await self._session.execute(stmt)
        return result.scalar_one() > 0

    async def delete_transaction(self, ref: TransactionRef) -> bool:
        stmt = delete(TransactionModel).where(
            TransactionModel.identifier == ref.identifier,
            TransactionModel.vendor == ref.vendor,
        )
        result = await self._session.execute(stmt)
        deleted = result.rowcount > 0
        if deleted:
            logger.debug("Deleted transaction %s/%s", ref.vendor, ref.identifier)
        return deleted

    async def get_resolution(
        self,
        first: TransactionRef,
        second: TransactionRef,
    ) -> Optional[DuplicateResolution]:
        model = await self._find(first, second)
        if model is None:
            return None
        return self._resolution_to_domain(model)

    async def list_resolutions(
        self,
        status: Optional[DuplicateStatus] = None,
        limit: Optional[int] = None,
    ) -> list[DuplicateResolution]:
        stmt = select(PotentialDuplicateModel)
        if status is not None:
            stmt = stmt.where(PotentialDuplicateModel.status == status.value)
        stmt = stmt.order_by(
            func.coalesce(
                PotentialDuplicateModel.resolved_at,
                PotentialDuplicateModel.created_at,
            ).desc(),
            PotentialDuplicateModel.id.desc(),
        )
        if limit is not None:
            stmt = stmt.limit(limit)
        result = await self._session.execute(stmt)
        return [self._resolution_to_domain(m) for m in result.scalars().all()]

    async def record_resolution(
        self,
        pair: DuplicatePair,
        status: DuplicateStatus,
        resolved_action: str,
    ) -> None:
        model = await self._find(pair.first, pair.second)
        now = utc_now()
        if model is None:
            model = PotentialDuplicateModel(
                transaction1_id=pair.first.identifier,
                transaction1_vendor=pair.first.vendor,
                transaction2_id=pair.second.identifier,
                transaction2_vendor=pair.second.vendor,
                similarity_score=pair.similarity,
                status=status.value,
                resolved_action=resolved_action,
                resolved_at=now,
            )
            self._session.add(model)
        else:
            model.similarity_score = pair.similarity
            model.status = status.value
            model.resolved_action = resolved_action
            model.resolved_at = now
        await self._session.flush()

    @asynccontextmanager
    async def unit(self) -> AsyncIterator[None]:
        async with self._session.begin_nested():
            yield

    async def _find(
        self,
        first: TransactionRef,
        second: TransactionRef,
    ) -> Optional[PotentialDuplicateModel]:
        stmt = (
            select(PotentialDuplicateModel)
            .where(or_(_matches(first, second), _matches(second, first)))
            .limit(1)
        )
        result = await self._session.execute(stmt)
        return result.scalar_one_or_none()

    @staticmethod
    def _transaction_to_domain(model: TransactionModel) -> StoredTransaction:
        return StoredTransaction(
            ref=TransactionRef(identifier=model.identifier, vendor=model.vendor),
            name=model.name,
            transaction_date=model.transaction_date,
            amount=model.price,
            account_number=model.account_number,
            processed_date=model.processed_date,
        )

    @staticmethod
    def _resolution_to_domain(model: PotentialDuplicateModel) -> DuplicateResolution:
        return DuplicateResolution(
            first=TransactionRef(model.transaction1_id, model.transaction1_vendor),
            second=TransactionRef(model.transaction2_id, model.transaction2_vendor),
            similarity=model.similarity_score,
            status=DuplicateStatus(model.status),
            resolved_action=model.resolved_action,
            resolved_at=model.resolved_at,
        )
