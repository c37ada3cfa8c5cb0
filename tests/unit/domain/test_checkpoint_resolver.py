"""Unit tests for checkpoint resolution."""

from datetime import date

import pytest

from finsync.domain.shared.exceptions import ValidationError
from finsync.domain.sync.exceptions import InvalidCheckpointPolicyError
from finsync.domain.sync.services import CheckpointResolver, resolve_checkpoint
from finsync.domain.sync.value_objects import (
    Account,
    CheckpointMode,
    CheckpointPolicy,
    CheckpointSource,
)

TODAY = date(2024, 3, 15)


class TestResolveCheckpoint:
    def test_catch_up_overlaps_last_transaction(self):
        checkpoint = resolve_checkpoint(date(2024, 3, 10), today=TODAY)

        assert checkpoint.start_date == date(2024, 3, 8)
        assert checkpoint.source is CheckpointSource.LAST_TRANSACTION
        assert checkpoint.clamped is False

    def test_catch_up_without_history_uses_fallback(self):
        checkpoint = resolve_checkpoint(None, today=TODAY)

        assert checkpoint.start_date == date(2023, 12, 16)
        assert checkpoint.source is CheckpointSource.FALLBACK
        assert checkpoint.days_to_sync(TODAY) == 90

    def test_continue_starts_the_day_after(self):
        checkpoint = resolve_checkpoint(
            date(2024, 3, 10),
            mode=CheckpointMode.CONTINUE,
            today=TODAY,
        )

        assert checkpoint.start_date == date(2024, 3, 11)

    def test_continue_from_today_is_clamped(self):
        checkpoint = resolve_checkpoint(
            TODAY,
            mode=CheckpointMode.CONTINUE,
            today=TODAY,
        )

        assert checkpoint.start_date == TODAY
        assert checkpoint.clamped is True

    def test_future_last_date_is_clamped_to_today(self):
        checkpoint = resolve_checkpoint(date(2024, 4, 1), today=TODAY)

        assert checkpoint.start_date == TODAY
        assert checkpoint.clamped is True

    def test_fixed_lookback(self):
        checkpoint = resolve_checkpoint(
            date(2024, 3, 10),
            mode=CheckpointMode.FIXED_LOOKBACK,
            today=TODAY,
            days_back=30,
        )

        assert checkpoint.start_date == date(2024, 2, 14)
        assert checkpoint.source is CheckpointSource.FIXED_LOOKBACK

    def test_fixed_lookback_requires_days_back(self):
        with pytest.raises(ValidationError):
            resolve_checkpoint(None, mode=CheckpointMode.FIXED_LOOKBACK, today=TODAY)

    def test_negative_days_back_is_rejected(self):
        with pytest.raises(InvalidCheckpointPolicyError):
            resolve_checkpoint(
                None,
                mode=CheckpointMode.FIXED_LOOKBACK,
                today=TODAY,
                days_back=-1,
            )

    def test_retry_original_reuses_the_given_date(self):
        checkpoint = resolve_checkpoint(
            date(2024, 3, 10),
            mode=CheckpointMode.RETRY_ORIGINAL,
            today=TODAY,
            original_start_date=date(2024, 1, 2),
        )

        assert checkpoint.start_date == date(2024, 1, 2)
        assert checkpoint.source is CheckpointSource.ORIGINAL_START

    def test_retry_original_requires_a_date(self):
        with pytest.raises(ValidationError):
            resolve_checkpoint(None, mode=CheckpointMode.RETRY_ORIGINAL, today=TODAY)

    def test_zero_overlap(self):
        policy = CheckpointPolicy(overlap_days=0)

        checkpoint = resolve_checkpoint(date(2024, 3, 10), policy=policy, today=TODAY)

        assert checkpoint.start_date == date(2024, 3, 10)


class TestCheckpointPolicy:
    @pytest.mark.parametrize("field", ["overlap_days", "fallback_days"])
    def test_negative_windows_are_rejected(self, field):
        with pytest.raises(InvalidCheckpointPolicyError):
            CheckpointPolicy(**{field: -1})


class TestCheckpointResolver:
    def test_uses_account_last_transaction_date(self):
        resolver = CheckpointResolver(CheckpointPolicy(overlap_days=5))
        account = Account("a1", "max", last_transaction_date=date(2024, 3, 10))

        checkpoint = resolver.resolve(account, today=TODAY)

        assert checkpoint.start_date == date(2024, 3, 5)
        assert checkpoint.mode is CheckpointMode.CATCH_UP
