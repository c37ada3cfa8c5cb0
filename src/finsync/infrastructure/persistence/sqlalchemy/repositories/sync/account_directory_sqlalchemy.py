"""SQLAlchemy implementation of AccountDirectory."""

from __future__ import annotations

from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from finsync.domain.sync.ports import AccountDirectory
from finsync.domain.sync.value_objects import Account
from finsync.infrastructure.persistence.sqlalchemy.models import VendorCredentialModel


class AccountDirectorySQLAlchemy(AccountDirectory):
    """Reads vendor logins from the vendor_credentials table."""

    def __init__(self, session: AsyncSession):
        self._session = session

    async def list_active(self) -> list[Account]:
        stmt = (
            select(VendorCredentialModel)
            .where(VendorCredentialModel.is_active.is_(True))
            .order_by(
                VendorCredentialModel.last_synced_at.asc().nulls_first(),
                VendorCredentialModel.id.asc(),
            )
        )
        result = await self._session.execute(stmt)
        return [self._to_domain(model) for model in result.scalars().all()]

    async def find_by_id(self, account_id: str) -> Optional[Account]:
        model = await self._session.get(VendorCredentialModel, account_id)
        if model is None:
            return None
        return self._to_domain(model)

    @staticmethod
    def _to_domain(model: VendorCredentialModel) -> Account:
        return Account(
            account_id=model.id,
            vendor=model.vendor,
            nickname=model.nickname or "",
            credential_ref=model.credential_ref,
            last_synced_at=model.last_synced_at,
            last_transaction_date=model.last_transaction_date,
        )
