"""Unit tests for API error mapping and SSE formatting.

Clients switch on the ``code`` field and on the HTTP status, so both must
stay stable for every domain error the sync and duplicate flows raise.
"""

import asyncio
import json
import logging

import pytest

from finsync.domain.duplicates.exceptions import (
    DuplicateAlreadyResolvedError,
    DuplicateNotFoundError,
    InvalidResolutionActionError,
)
from finsync.domain.duplicates.value_objects import DuplicatePair, TransactionRef
from finsync.domain.shared.exceptions import (
    BusinessRuleViolation,
    DomainException,
    ErrorCode,
)
from finsync.domain.sync.exceptions import (
    ForceStopFailedError,
    ForceStopNotConfirmedError,
    OrchestrationStartError,
    TransportError,
)
from finsync.presentation.api.exception_handlers import _get_status_for_exception
from finsync.presentation.api.routers.sync import (
    _collect_abandoned_run,
    _format_sse_event,
)

A = TransactionRef("a", "max")
B = TransactionRef("b", "max")


class TestStatusMapping:
    @pytest.mark.parametrize(
        ("exc", "status"),
        [
            (InvalidResolutionActionError("delete_both"), 400),
            (ForceStopNotConfirmedError(), 400),
            (DuplicateNotFoundError(A), 404),
            (DuplicateAlreadyResolvedError(DuplicatePair(A, B, 0.95)), 409),
            (TransportError("refused"), 502),
            (OrchestrationStartError("no"), 503),
            (ForceStopFailedError("no", status_code=500), 503),
        ],
    )
    def test_known_codes(self, exc, status):
        assert _get_status_for_exception(exc) == status

    def test_business_rule_violation_is_422(self):
        exc = BusinessRuleViolation("nope")

        assert _get_status_for_exception(exc) == 422

    def test_internal_error_is_500(self):
        exc = DomainException("boom", ErrorCode.INTERNAL_ERROR)

        assert _get_status_for_exception(exc) == 500


class TestSseFormatting:
    def test_event_frame(self):
        frame = _format_sse_event("run_started", {"total_accounts": 2})

        event_line, data_line, *rest = frame.split("\n")
        assert event_line == "event: run_started"
        assert json.loads(data_line.removeprefix("data: ")) == {"total_accounts": 2}
        assert rest == ["", ""]


class TestAbandonedRun:
    @pytest.mark.asyncio
    async def test_failure_after_disconnect_is_logged(self, caplog):
        async def failing_run():
            raise TransportError("connection reset")

        task = asyncio.create_task(failing_run())
        await asyncio.wait([task])

        with caplog.at_level(logging.WARNING, logger="finsync.presentation.api.routers.sync"):
            _collect_abandoned_run(task)

        assert "failed after the client disconnected" in caplog.text
        assert "connection reset" in caplog.text

    @pytest.mark.asyncio
    async def test_clean_finish_logs_nothing(self, caplog):
        async def finished_run():
            return None

        task = asyncio.create_task(finished_run())
        await task

        with caplog.at_level(logging.WARNING):
            _collect_abandoned_run(task)

        assert caplog.records == []
