"""SQLAlchemy model for scraped transactions."""

from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import Optional

from sqlalchemy import Date, DateTime, Index, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from finsync.infrastructure.persistence.sqlalchemy.models.base import Base


class TransactionModel(Base):
    """Database model for transactions written by the sync endpoint.

    Rows are identified by the vendor's own identifier together with the
    vendor name. The sync core never writes here; duplicate resolution
    reads and deletes.
    """

    __tablename__ = "transactions"

    identifier: Mapped[str] = mapped_column(String(255), primary_key=True)
    vendor: Mapped[str] = mapped_column(String(64), primary_key=True)

    name: Mapped[str] = mapped_column(Text, nullable=False)
    transaction_date: Mapped[date] = mapped_column("date", Date, nullable=False)
    price: Mapped[Decimal] = mapped_column(Numeric(15, 2), nullable=False)
    account_number: Mapped[Optional[str]] = mapped_column(String(64))
    processed_date: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True),
    )

    __table_args__ = (Index("ix_transactions_vendor_date", "vendor", "date"),)

    def __repr__(self) -> str:
        return (
            f"<TransactionModel(identifier={self.identifier}, vendor={self.vendor}, "
            f"date={self.transaction_date}, price={self.price})>"
        )
