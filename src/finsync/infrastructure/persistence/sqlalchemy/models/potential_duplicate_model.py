"""SQLAlchemy model for tracked duplicate pairs."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlalchemy import DateTime, Float, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from finsync.infrastructure.persistence.sqlalchemy.models.base import (
    Base,
    TimestampMixin,
)


class PotentialDuplicateModel(Base, TimestampMixin):
    """One resolved (or pending) candidate pair.

    Lookups match a pair in either order; resolved_action refers to the
    order stored here.
    """

    __tablename__ = "potential_duplicates"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    transaction1_id: Mapped[str] = mapped_column(String(255), nullable=False)
    transaction1_vendor: Mapped[str] = mapped_column(String(64), nullable=False)
    transaction2_id: Mapped[str] = mapped_column(String(255), nullable=False)
    transaction2_vendor: Mapped[str] = mapped_column(String(64), nullable=False)

    similarity_score: Mapped[float] = mapped_column(Float, nullable=False)
    status: Mapped[str] = mapped_column(
        String(32),
        nullable=False,
        default="pending",
        index=True,
    )
    resolved_action: Mapped[Optional[str]] = mapped_column(String(32))
    resolved_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True))

    __table_args__ = (
        UniqueConstraint(
            "transaction1_id",
            "transaction1_vendor",
            "transaction2_id",
            "transaction2_vendor",
            name="uq_potential_duplicates_pair",
        ),
    )

    def __repr__(self) -> str:
        return (
            f"<PotentialDuplicateModel({self.transaction1_id}/{self.transaction1_vendor}"
            f" ~ {self.transaction2_id}/{self.transaction2_vendor}, "
            f"status={self.status})>"
        )
