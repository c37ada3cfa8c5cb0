"""Unit tests for a single account's streamed sync session."""

from datetime import date

import pytest

from finsync.application.commands.sync import SyncSessionCommand
from finsync.application.commands.sync.sync_session_command import (
    STREAM_ENDED_MESSAGE,
)
from finsync.application.services import CancellationToken
from finsync.domain.sync.exceptions import SyncConcurrencyError, TransportError
from finsync.domain.sync.value_objects import (
    Account,
    CheckpointMode,
    CheckpointSource,
    ProgressEvent,
    SyncCheckpoint,
    SyncSessionState,
)
from finsync.infrastructure.sync import SSEDecoder
from tests.shared.fakes import FakeDateLookup, FakeSyncEndpoint
from tests.shared.streams import complete, concurrency_error, error, network, progress

TODAY = date(2024, 3, 15)
ACCOUNT = Account(
    account_id="acc-1",
    vendor="max",
    nickname="Max card",
    credential_ref="cred-1",
    last_transaction_date=date(2024, 3, 3),
)
CHECKPOINT = SyncCheckpoint(
    start_date=date(2024, 3, 1),
    mode=CheckpointMode.CATCH_UP,
    source=CheckpointSource.LAST_TRANSACTION,
)


class TestSyncSessionCommand:
    def setup_method(self):
        self.endpoint = FakeSyncEndpoint()
        self.date_lookup = FakeDateLookup()
        self.command = SyncSessionCommand(
            self.endpoint,
            decoder_factory=SSEDecoder,
            date_lookup=self.date_lookup,
        )
        self.updates = []

    async def _run(self, token=None, **kwargs):
        return await self.command.execute(
            ACCOUNT,
            CHECKPOINT,
            cancellation_token=token,
            observer=self.updates.append,
            today=TODAY,
            **kwargs,
        )

    @pytest.mark.asyncio
    async def test_completed_session(self):
        self.endpoint.script(
            "acc-1",
            progress("login", 10),
            progress("login", 30, success=True),
            network("request", url="/transactions"),
            complete(
                transactions=5,
                saved=3,
                duplicates=2,
                processed=[{"cardLast4": "1234"}, {"cardLast4": "1234"}],
            ),
        )

        outcome = await self._run()

        assert outcome.state is SyncSessionState.COMPLETED
        assert outcome.transactions_fetched == 5
        assert outcome.transactions_saved == 3
        assert outcome.transactions_duplicate == 2
        assert outcome.card_breakdown == {"1234": 2}
        assert outcome.start_date == date(2024, 3, 1)
        assert outcome.end_date == TODAY
        assert [s.step for s in outcome.steps] == ["login"]
        assert len(self.updates) == 4
        assert self.endpoint.closed == ["acc-1"]

    @pytest.mark.asyncio
    async def test_request_carries_checkpoint_and_options(self):
        self.endpoint.script("acc-1", complete())

        await self._run(endpoint_options={"showBrowser": True})

        request = self.endpoint.requests[0]
        assert request.start_date == date(2024, 3, 1)
        assert request.credential_ref == "cred-1"
        assert request.options == {"showBrowser": True}

    @pytest.mark.asyncio
    async def test_chunk_boundaries_do_not_matter(self):
        raw = progress("login", 10) + complete(transactions=1, saved=1)
        self.endpoint.script("acc-1", *(raw[i : i + 7] for i in range(0, len(raw), 7)))

        outcome = await self._run()

        assert outcome.succeeded
        assert outcome.transactions_saved == 1

    @pytest.mark.asyncio
    async def test_vendor_error_offers_retry_dates(self):
        self.date_lookup.dates["max"] = date(2024, 3, 8)
        self.endpoint.script(
            "acc-1",
            progress("login", 10),
            error("Invalid password", hint="Update credentials", attempts=2),
        )

        outcome = await self._run()

        assert outcome.state is SyncSessionState.FAILED
        assert outcome.error_kind == "VENDOR_ERROR"
        assert outcome.error_message == "Invalid password"
        assert outcome.error_hint == "Update credentials"
        assert outcome.attempts_made == 2
        assert outcome.retry_options.original_start_date == date(2024, 3, 1)
        assert outcome.retry_options.continue_from_date == date(2024, 3, 9)

    @pytest.mark.asyncio
    async def test_retry_falls_back_to_known_last_date(self):
        self.endpoint.script("acc-1", error("Site down"))

        outcome = await self._run()

        assert outcome.retry_options.continue_from_date == date(2024, 3, 4)

    @pytest.mark.asyncio
    async def test_continue_date_never_passes_today(self):
        # Everything up to today was saved before the failure
        self.date_lookup.dates["max"] = TODAY
        self.endpoint.script("acc-1", error("Session expired"))

        outcome = await self._run()

        assert outcome.retry_options.continue_from_date == TODAY

    @pytest.mark.asyncio
    async def test_completed_session_records_processed_dates(self):
        self.endpoint.script(
            "acc-1",
            complete(
                transactions=3,
                saved=3,
                processed=[
                    {"date": "2024-03-05"},
                    {"date": "2024-03-02"},
                    {"cardLast4": "1234"},
                ],
            ),
        )

        outcome = await self._run()

        assert outcome.first_transaction_date == date(2024, 3, 2)
        assert outcome.last_transaction_date == date(2024, 3, 5)
        assert outcome.covered_range == (date(2024, 3, 2), date(2024, 3, 5))

    @pytest.mark.asyncio
    async def test_completed_session_without_dates_covers_requested_window(self):
        self.endpoint.script("acc-1", complete(transactions=0))

        outcome = await self._run()

        assert outcome.first_transaction_date is None
        assert outcome.covered_range == (date(2024, 3, 1), TODAY)

    @pytest.mark.asyncio
    async def test_transport_failure(self):
        self.endpoint.script("acc-1", open_error=TransportError("Connection refused"))

        outcome = await self._run()

        assert outcome.state is SyncSessionState.FAILED
        assert outcome.error_kind == "TRANSPORT_ERROR"
        assert outcome.error_message == "Connection refused"
        assert outcome.retry_options is not None

    @pytest.mark.asyncio
    async def test_concurrency_error_in_stream(self):
        self.endpoint.script("acc-1", progress("init", 1), concurrency_error())

        outcome = await self._run()

        assert outcome.is_concurrency_error
        assert outcome.retry_options is None

    @pytest.mark.asyncio
    async def test_concurrency_refusal_on_open(self):
        self.endpoint.script("acc-1", open_error=SyncConcurrencyError())

        outcome = await self._run()

        assert outcome.is_concurrency_error
        assert outcome.retry_options is None

    @pytest.mark.asyncio
    async def test_stream_ending_without_terminal_event(self):
        self.endpoint.script("acc-1", progress("login", 10), progress("fetch", 50))

        outcome = await self._run()

        assert outcome.state is SyncSessionState.FAILED
        assert outcome.error_kind == "PROTOCOL_ERROR"
        assert outcome.error_message == STREAM_ENDED_MESSAGE

    @pytest.mark.asyncio
    async def test_malformed_frame_is_skipped(self):
        self.endpoint.script(
            "acc-1",
            b"event: progress\ndata: {oops\n\n",
            complete(transactions=1, saved=1),
        )

        outcome = await self._run()

        assert outcome.succeeded

    @pytest.mark.asyncio
    async def test_stream_stops_at_first_terminal_event(self):
        self.endpoint.script("acc-1", complete(saved=1), error("late"))

        outcome = await self._run()

        assert outcome.succeeded
        assert outcome.error_message is None

    @pytest.mark.asyncio
    async def test_wait_updates(self):
        self.endpoint.script(
            "acc-1",
            network("rateLimitWait", seconds=30),
            network("request", url="/tx"),
            complete(),
        )

        await self._run()

        assert self.updates[0].state is SyncSessionState.WAITING_BACKOFF
        assert self.updates[0].wait.total_seconds == 30
        assert self.updates[1].wait_ended is True
        assert self.updates[1].state is SyncSessionState.RUNNING

    @pytest.mark.asyncio
    async def test_observer_failure_does_not_abort(self):
        self.endpoint.script("acc-1", progress("login", 10), complete())

        def broken(update):
            raise RuntimeError("render failed")

        outcome = await self.command.execute(
            ACCOUNT,
            CHECKPOINT,
            observer=broken,
            today=TODAY,
        )

        assert outcome.succeeded

    @pytest.mark.asyncio
    async def test_cancel_mid_stream_closes_request(self):
        token = CancellationToken()
        self.endpoint.script("acc-1", progress("login", 10), hang=True)

        def cancel_on_progress(update):
            if isinstance(update.event, ProgressEvent):
                token.cancel("user")

        outcome = await self.command.execute(
            ACCOUNT,
            CHECKPOINT,
            cancellation_token=token,
            observer=cancel_on_progress,
            today=TODAY,
        )

        assert outcome.state is SyncSessionState.CANCELLED
        assert outcome.cancelled
        assert not outcome.failed
        assert self.endpoint.closed == ["acc-1"]

    @pytest.mark.asyncio
    async def test_already_cancelled_never_opens_a_stream(self):
        token = CancellationToken()
        token.cancel()

        outcome = await self._run(token=token)

        assert outcome.state is SyncSessionState.CANCELLED
        assert self.endpoint.requests == []
