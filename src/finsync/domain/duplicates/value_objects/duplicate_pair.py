"""Duplicate candidate value objects."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Optional

from finsync.domain.shared.exceptions import ValidationError

EXACT_DUPLICATE_THRESHOLD = 0.95


class ResolutionAction(str, Enum):
    """What to do with a candidate pair."""

    KEEP_FIRST = "keep_first"
    KEEP_SECOND = "keep_second"
    NOT_DUPLICATE = "not_duplicate"

    @classmethod
    def parse(cls, value: str) -> ResolutionAction:
        """Accept both our names and the delete-oriented wire names."""
        aliases = {
            "delete_second": cls.KEEP_FIRST,
            "delete_first": cls.KEEP_SECOND,
        }
        if value in aliases:
            return aliases[value]
        return cls(value)

    @property
    def resolved_action(self) -> str:
        return {
            ResolutionAction.KEEP_FIRST: "kept_first",
            ResolutionAction.KEEP_SECOND: "kept_second",
            ResolutionAction.NOT_DUPLICATE: "kept_both",
        }[self]


class DuplicateStatus(str, Enum):
    """Tracking status of a pair."""

    PENDING = "pending"
    CONFIRMED_DUPLICATE = "confirmed_duplicate"
    NOT_DUPLICATE = "not_duplicate"


@dataclass(frozen=True, order=True)
class TransactionRef:
    """Identity of a persisted transaction."""

    identifier: str
    vendor: str

    def to_dict(self) -> dict:
        return {"identifier": self.identifier, "vendor": self.vendor}


@dataclass(frozen=True)
class StoredTransaction:
    """The fields duplicate detection looks at."""

    ref: TransactionRef
    name: str
    transaction_date: date
    amount: Decimal
    account_number: Optional[str] = None
    processed_date: Optional[datetime] = None

    @property
    def normalized_name(self) -> str:
        return self.name.strip().lower()


ALL_ACTIONS: tuple[ResolutionAction, ...] = tuple(ResolutionAction)


@dataclass(frozen=True)
class DuplicatePair:
    """A candidate pair. Immutable; resolving it is a one-shot action."""

    first: TransactionRef
    second: TransactionRef
    similarity: float
    allowed_actions: tuple[ResolutionAction, ...] = field(default=ALL_ACTIONS)
    first_date: Optional[date] = None
    name: Optional[str] = None

    def __post_init__(self) -> None:
        if not 0.0 <= self.similarity <= 1.0:
            msg = f"Similarity must be within [0, 1], got {self.similarity}"
            raise ValidationError(msg)
        if self.first == self.second:
            msg = "A duplicate pair needs two distinct transactions"
            raise ValidationError(msg)

    @property
    def key(self) -> tuple[TransactionRef, TransactionRef]:
        """Order-independent identity of the pair."""
        return (self.first, self.second) if self.first < self.second else (
            self.second,
            self.first,
        )

    def is_exact(self, threshold: float = EXACT_DUPLICATE_THRESHOLD) -> bool:
        return self.similarity >= threshold

    def allows(self, action: ResolutionAction) -> bool:
        return action in self.allowed_actions

    def to_delete(self, action: ResolutionAction) -> Optional[TransactionRef]:
        if action is ResolutionAction.KEEP_FIRST:
            return self.second
        if action is ResolutionAction.KEEP_SECOND:
            return self.first
        return None

    def to_dict(self) -> dict:
        return {
            "transaction1": self.first.to_dict(),
            "transaction2": self.second.to_dict(),
            "similarity": self.similarity,
            "allowed_actions": [a.value for a in self.allowed_actions],
            "date": self.first_date.isoformat() if self.first_date else None,
            "name": self.name,
        }


@dataclass(frozen=True)
class DuplicateResolution:
    """Recorded outcome of resolving a pair."""

    first: TransactionRef
    second: TransactionRef
    similarity: float
    status: DuplicateStatus
    resolved_action: Optional[str] = None
    resolved_at: Optional[datetime] = None

    @property
    def is_resolved(self) -> bool:
        return self.status is not DuplicateStatus.PENDING
