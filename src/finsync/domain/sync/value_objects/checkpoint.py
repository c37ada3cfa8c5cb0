"""Checkpoint value objects: where the next sync of an account starts."""

from dataclasses import dataclass
from datetime import date
from enum import Enum

from finsync.domain.sync.exceptions import InvalidCheckpointPolicyError

DEFAULT_OVERLAP_DAYS = 2
DEFAULT_FALLBACK_DAYS = 90


class CheckpointMode(str, Enum):
    """How the caller wants the start date chosen."""

    # Automatic catch-up: re-read a small overlap before the last known date
    CATCH_UP = "catch_up"
    # Manual retry after a failure: resume the day after the last saved one
    CONTINUE = "continue"
    # Fixed window back from today, ignoring history
    FIXED_LOOKBACK = "fixed_lookback"
    # Retry from the start date the failed run originally used
    RETRY_ORIGINAL = "retry_original"


class CheckpointSource(str, Enum):
    """Which rule produced a checkpoint (useful in logs and reports)."""

    LAST_TRANSACTION = "last_transaction"
    FALLBACK = "fallback"
    FIXED_LOOKBACK = "fixed_lookback"
    ORIGINAL_START = "original_start"


@dataclass(frozen=True)
class CheckpointPolicy:
    """Named knobs for checkpoint computation."""

    overlap_days: int = DEFAULT_OVERLAP_DAYS
    fallback_days: int = DEFAULT_FALLBACK_DAYS

    def __post_init__(self) -> None:
        if self.overlap_days < 0:
            raise InvalidCheckpointPolicyError("overlap_days", self.overlap_days)
        if self.fallback_days < 0:
            raise InvalidCheckpointPolicyError("fallback_days", self.fallback_days)


@dataclass(frozen=True)
class SyncCheckpoint:
    """Derived start date for one sync request. Never persisted."""

    start_date: date
    mode: CheckpointMode
    source: CheckpointSource
    clamped: bool = False

    def days_to_sync(self, today: date) -> int:
        return (today - self.start_date).days

    def to_dict(self) -> dict:
        return {
            "start_date": self.start_date.isoformat(),
            "mode": self.mode.value,
            "source": self.source.value,
            "clamped": self.clamped,
        }
