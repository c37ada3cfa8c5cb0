"""Checkpoint resolution: pick the start date for the next sync of an account.

Pure computation, no I/O. Callers pass ``today`` explicitly in tests; in
production it defaults to the local calendar date.
"""

from __future__ import annotations

from datetime import date, timedelta
from typing import Optional

from finsync.domain.shared.exceptions import ValidationError
from finsync.domain.shared.time import today_local
from finsync.domain.sync.exceptions import InvalidCheckpointPolicyError
from finsync.domain.sync.value_objects import (
    Account,
    CheckpointMode,
    CheckpointPolicy,
    CheckpointSource,
    SyncCheckpoint,
)

_DEFAULT_POLICY = CheckpointPolicy()


def resolve_checkpoint(  # noqa: PLR0913
    last_transaction_date: Optional[date],
    mode: CheckpointMode = CheckpointMode.CATCH_UP,
    policy: CheckpointPolicy = _DEFAULT_POLICY,
    today: Optional[date] = None,
    days_back: Optional[int] = None,
    original_start_date: Optional[date] = None,
) -> SyncCheckpoint:
    """Compute the start date for one account.

    - CATCH_UP: ``last - overlap_days``
    - CONTINUE: ``last + 1 day`` (the last day is already saved)
    - FIXED_LOOKBACK: ``today - days_back``
    - RETRY_ORIGINAL: ``original_start_date``
    - no history (CATCH_UP/CONTINUE): ``today - fallback_days``

    The result is always clamped to ``today``.
    """
    today = today or today_local()

    if mode is CheckpointMode.FIXED_LOOKBACK:
        if days_back is None:
            msg = "days_back is required for a fixed lookback checkpoint"
            raise ValidationError(msg)
        if days_back < 0:
            raise InvalidCheckpointPolicyError("days_back", days_back)
        start = today - timedelta(days=days_back)
        source = CheckpointSource.FIXED_LOOKBACK
    elif mode is CheckpointMode.RETRY_ORIGINAL:
        if original_start_date is None:
            msg = "original_start_date is required to retry from the original date"
            raise ValidationError(msg)
        start = original_start_date
        source = CheckpointSource.ORIGINAL_START
    elif last_transaction_date is None:
        start = today - timedelta(days=policy.fallback_days)
        source = CheckpointSource.FALLBACK
    elif mode is CheckpointMode.CONTINUE:
        start = last_transaction_date + timedelta(days=1)
        source = CheckpointSource.LAST_TRANSACTION
    else:
        start = last_transaction_date - timedelta(days=policy.overlap_days)
        source = CheckpointSource.LAST_TRANSACTION

    clamped = start > today
    return SyncCheckpoint(
        start_date=min(start, today),
        mode=mode,
        source=source,
        clamped=clamped,
    )


class CheckpointResolver:
    """Policy-bound wrapper around :func:`resolve_checkpoint`."""

    def __init__(self, policy: Optional[CheckpointPolicy] = None):
        self._policy = policy or CheckpointPolicy()

    @property
    def policy(self) -> CheckpointPolicy:
        return self._policy

    def resolve(  # noqa: PLR0913
        self,
        account: Account,
        mode: CheckpointMode = CheckpointMode.CATCH_UP,
        today: Optional[date] = None,
        days_back: Optional[int] = None,
        original_start_date: Optional[date] = None,
    ) -> SyncCheckpoint:
        return resolve_checkpoint(
            account.last_transaction_date,
            mode=mode,
            policy=self._policy,
            today=today,
            days_back=days_back,
            original_start_date=original_start_date,
        )
