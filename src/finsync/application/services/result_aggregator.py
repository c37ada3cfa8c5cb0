"""Fold per-account outcomes into one run report."""

from __future__ import annotations

import logging
from collections import Counter
from datetime import date, datetime
from typing import Callable, Optional

from finsync.application.dtos.sync import AccountOutcome, RunStatus, SessionReport
from finsync.domain.shared.time import monotonic_seconds, utc_now

logger = logging.getLogger(__name__)


class ResultAggregator:
    """Accumulate outcomes in order and classify the run on ``finish``.

    Once finished the report is frozen: later additions are ignored.
    """

    def __init__(
        self,
        clock: Callable[[], float] = monotonic_seconds,
        started_at: Optional[datetime] = None,
    ):
        self._clock = clock
        self._started = clock()
        self._started_at = started_at or utc_now()
        self._outcomes: list[AccountOutcome] = []
        self._cancelled = False
        self._force_stop_required = False
        self._not_attempted: list[str] = []
        self._report: Optional[SessionReport] = None

    @property
    def is_finished(self) -> bool:
        return self._report is not None

    @property
    def outcomes(self) -> tuple[AccountOutcome, ...]:
        return tuple(self._outcomes)

    def add(self, outcome: AccountOutcome) -> bool:
        if self._report is not None:
            logger.warning(
                "Ignoring outcome for %s after the report was finished",
                outcome.account_id,
            )
            return False
        self._outcomes.append(outcome)
        return True

    def mark_cancelled(self) -> None:
        if self._report is None:
            self._cancelled = True

    def require_force_stop(self) -> None:
        if self._report is None:
            self._force_stop_required = True

    def skip(self, account_ids: list[str]) -> None:
        if self._report is None:
            self._not_attempted.extend(account_ids)

    def finish(self) -> SessionReport:
        if self._report is not None:
            return self._report

        cards: Counter[str] = Counter()
        for outcome in self._outcomes:
            cards.update(outcome.card_breakdown)

        covered_from, covered_to = self._covered_range()
        self._report = SessionReport(
            started_at=self._started_at,
            status=self._classify(),
            outcomes=tuple(self._outcomes),
            total_fetched=sum(o.transactions_fetched for o in self._outcomes),
            total_saved=sum(o.transactions_saved for o in self._outcomes),
            total_duplicate=sum(o.transactions_duplicate for o in self._outcomes),
            total_updated=sum(o.transactions_updated for o in self._outcomes),
            card_breakdown=dict(cards),
            covered_from=covered_from,
            covered_to=covered_to,
            duration_seconds=max(0.0, self._clock() - self._started),
            force_stop_required=self._force_stop_required,
            not_attempted=tuple(self._not_attempted),
        )
        return self._report

    def _classify(self) -> RunStatus:
        if self._cancelled:
            return RunStatus.CANCELLED
        # Cancelled outcomes are not failures
        considered = [o for o in self._outcomes if not o.cancelled]
        failed = sum(1 for o in considered if o.failed)
        if failed == 0:
            return RunStatus.SUCCESS
        if failed == len(considered):
            return RunStatus.FAILED
        return RunStatus.PARTIAL

    def _covered_range(self) -> tuple[Optional[date], Optional[date]]:
        ranges = [o.covered_range for o in self._outcomes if o.succeeded]
        if not ranges:
            return None, None
        return min(r[0] for r in ranges), max(r[1] for r in ranges)
