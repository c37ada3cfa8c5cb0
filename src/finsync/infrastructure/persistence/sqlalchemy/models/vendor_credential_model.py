"""SQLAlchemy model for vendor logins."""

from __future__ import annotations

from datetime import date, datetime
from typing import Optional

from sqlalchemy import Boolean, Date, DateTime, String
from sqlalchemy.orm import Mapped, mapped_column

from finsync.infrastructure.persistence.sqlalchemy.models.base import (
    Base,
    TimestampMixin,
)


class VendorCredentialModel(Base, TimestampMixin):
    """A stored vendor login.

    Credentials themselves live in the sync endpoint's vault; only an opaque
    reference is kept here.
    """

    __tablename__ = "vendor_credentials"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    vendor: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    nickname: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    credential_ref: Mapped[Optional[str]] = mapped_column(String(255))
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    last_synced_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True),
    )
    last_transaction_date: Mapped[Optional[date]] = mapped_column(Date)

    def __repr__(self) -> str:
        return f"<VendorCredentialModel(id={self.id}, vendor={self.vendor})>"
