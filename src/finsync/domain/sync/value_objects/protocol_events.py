"""Typed events carried by the sync event stream.

The remote endpoint emits four tags: ``progress``, ``network``, ``complete``
and ``error``. ``complete`` and ``error`` are terminal; so is an abort on the
client side, which has no wire representation.
"""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Optional, Union


class NetworkEventKind(str, Enum):
    """Kinds of ``network`` events."""

    REQUEST = "request"
    RESPONSE = "response"
    RATE_LIMIT_WAIT = "rateLimitWait"
    RETRY_WAIT = "retryWait"
    RATE_LIMIT_FINISHED = "rateLimitFinished"

    @property
    def is_wait(self) -> bool:
        return self in (NetworkEventKind.RATE_LIMIT_WAIT, NetworkEventKind.RETRY_WAIT)

    @property
    def ends_wait(self) -> bool:
        return self in (NetworkEventKind.REQUEST, NetworkEventKind.RATE_LIMIT_FINISHED)


@dataclass(frozen=True)
class ProgressEvent:
    """Step-level progress of the remote sync."""

    step: str
    message: str
    percent: float
    phase: Optional[str] = None
    # Tri-state: True/False once a step resolved, None while in flight
    success: Optional[bool] = None
    completed_steps: tuple[str, ...] = ()

    @property
    def is_resolved(self) -> bool:
        return self.success is not None


@dataclass(frozen=True)
class NetworkEvent:
    """Low-level request/response and backoff notices."""

    kind: NetworkEventKind
    seconds: Optional[float] = None
    message: Optional[str] = None
    status: Optional[int] = None
    method: Optional[str] = None
    url: Optional[str] = None


@dataclass(frozen=True)
class ProcessedTransaction:
    """One transaction the server reported as handled during the sync."""

    identifier: Optional[str] = None
    card_last4: Optional[str] = None
    transaction_date: Optional[date] = None
    status: Optional[str] = None


@dataclass(frozen=True)
class SyncSummary:
    """Server-side statistics reported with ``complete``."""

    accounts: int = 0
    transactions: int = 0
    saved_transactions: int = 0
    duplicate_transactions: int = 0
    updated_transactions: int = 0
    bank_transactions: int = 0
    skipped_cards: int = 0
    duration_seconds: Optional[int] = None
    processed_transactions: tuple[ProcessedTransaction, ...] = field(
        default_factory=tuple,
    )

    def card_breakdown(self) -> dict[str, int]:
        """Count processed transactions per card (last four digits)."""
        counts = Counter(
            tx.card_last4 for tx in self.processed_transactions if tx.card_last4
        )
        return dict(counts)

    def transaction_date_range(self) -> tuple[Optional[date], Optional[date]]:
        dates = [
            tx.transaction_date
            for tx in self.processed_transactions
            if tx.transaction_date is not None
        ]
        if not dates:
            return None, None
        return min(dates), max(dates)


@dataclass(frozen=True)
class CompleteEvent:
    """Terminal success."""

    summary: SyncSummary
    message: Optional[str] = None


@dataclass(frozen=True)
class ErrorEvent:
    """Terminal failure reported by the server."""

    message: str
    kind: Optional[str] = None
    hint: Optional[str] = None
    attempts_made: Optional[int] = None

    @property
    def is_concurrency_error(self) -> bool:
        return self.kind == "CONCURRENCY_ERROR"


ProtocolEvent = Union[ProgressEvent, NetworkEvent, CompleteEvent, ErrorEvent]
TerminalEvent = Union[CompleteEvent, ErrorEvent]


def is_terminal(event: ProtocolEvent) -> bool:
    return isinstance(event, (CompleteEvent, ErrorEvent))
