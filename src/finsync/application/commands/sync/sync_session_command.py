"""Run one account's streamed sync session from request to terminal state."""

from __future__ import annotations

import asyncio
import contextlib
import logging
from dataclasses import dataclass
from datetime import date
from typing import Any, Callable, Optional

from finsync.application.dtos.sync import AccountOutcome, RetryOptions, SessionUpdate
from finsync.application.services import CancellationToken
from finsync.domain.shared.exceptions import ErrorCode
from finsync.domain.shared.time import monotonic_seconds, today_local
from finsync.domain.sync.exceptions import (
    ProtocolFrameError,
    SyncConcurrencyError,
    TransportError,
)
from finsync.domain.sync.ports import (
    EventStreamDecoder,
    RawFrame,
    SyncEndpoint,
    SyncRequest,
    TransactionDateLookup,
)
from finsync.domain.sync.services import (
    RateLimitMonitor,
    SessionStateMachine,
    resolve_checkpoint,
)
from finsync.domain.sync.value_objects import (
    Account,
    CheckpointMode,
    CompleteEvent,
    ErrorEvent,
    NetworkEvent,
    SyncCheckpoint,
    SyncSessionState,
)

logger = logging.getLogger(__name__)

SessionObserver = Callable[[SessionUpdate], None]
DecoderFactory = Callable[[], EventStreamDecoder]

STREAM_ENDED_MESSAGE = "Stream ended without a terminal event"


@dataclass
class _Failure:
    kind: str
    message: str
    hint: Optional[str] = None
    attempts_made: Optional[int] = None


class _SessionRun:
    """Mutable per-session state shared by the reader and the outcome builder."""

    def __init__(self, account: Account, clock: Callable[[], float]):
        self.account = account
        self.machine = SessionStateMachine()
        self.monitor = RateLimitMonitor(clock=clock)
        self.failure: Optional[_Failure] = None
        self.skipped_frames = 0

    def fail(self, kind: str, message: str) -> None:
        if self.machine.fail(message):
            self.failure = _Failure(kind=kind, message=message)


class SyncSessionCommand:
    """Drive a single account sync against the streaming endpoint.

    The session never raises for sync problems: transport failures, vendor
    errors, a remote sync already in progress and cancellation all end in an
    ``AccountOutcome`` with the matching terminal state. Malformed frames are
    logged and skipped.
    """

    def __init__(
        self,
        endpoint: SyncEndpoint,
        decoder_factory: DecoderFactory,
        date_lookup: Optional[TransactionDateLookup] = None,
        clock: Callable[[], float] = monotonic_seconds,
    ):
        self._endpoint = endpoint
        self._decoder_factory = decoder_factory
        self._date_lookup = date_lookup
        self._clock = clock

    async def execute(  # noqa: PLR0913
        self,
        account: Account,
        checkpoint: SyncCheckpoint,
        cancellation_token: Optional[CancellationToken] = None,
        observer: Optional[SessionObserver] = None,
        endpoint_options: Optional[dict[str, Any]] = None,
        today: Optional[date] = None,
    ) -> AccountOutcome:
        token = cancellation_token or CancellationToken()
        today = today or today_local()
        run = _SessionRun(account, self._clock)
        started = self._clock()

        if token.is_cancelled:
            run.machine.cancel()
            return await self._build_outcome(run, checkpoint, today, started)

        request = SyncRequest(
            account_id=account.account_id,
            vendor=account.vendor,
            start_date=checkpoint.start_date,
            credential_ref=account.credential_ref,
            options=endpoint_options or {},
        )
        logger.info(
            "Starting sync for %s (%s) from %s",
            account.account_id,
            account.vendor,
            checkpoint.start_date.isoformat(),
        )
        run.machine.start()

        reader = asyncio.ensure_future(self._consume(request, run, observer))
        cancelled = asyncio.ensure_future(token.wait())
        try:
            await asyncio.wait(
                {reader, cancelled},
                return_when=asyncio.FIRST_COMPLETED,
            )
        finally:
            cancelled.cancel()

        if not reader.done():
            # Cancelling the reader leaves the stream context, closing the request
            reader.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await reader
            run.machine.cancel()
            logger.info("Sync for %s cancelled", account.account_id)
        else:
            reader.result()

        return await self._build_outcome(run, checkpoint, today, started)

    async def _consume(
        self,
        request: SyncRequest,
        run: _SessionRun,
        observer: Optional[SessionObserver],
    ) -> None:
        decoder = self._decoder_factory()
        try:
            async with self._endpoint.open_stream(request) as stream:
                async for chunk in stream:
                    for frame in decoder.feed(chunk):
                        if self._handle_frame(decoder, frame, run, observer):
                            return
                for frame in decoder.finish():
                    if self._handle_frame(decoder, frame, run, observer):
                        return
        except SyncConcurrencyError as e:
            logger.warning("Sync for %s refused: %s", request.account_id, e.message)
            run.fail(ErrorCode.CONCURRENCY_ERROR.value, e.message)
            return
        except TransportError as e:
            logger.warning("Transport failure for %s: %s", request.account_id, e.message)
            run.fail(ErrorCode.TRANSPORT_ERROR.value, e.message)
            return

        if not run.machine.is_terminal:
            logger.warning("Sync for %s: %s", request.account_id, STREAM_ENDED_MESSAGE)
            run.fail(ErrorCode.PROTOCOL_ERROR.value, STREAM_ENDED_MESSAGE)

    def _handle_frame(
        self,
        decoder: EventStreamDecoder,
        frame: RawFrame,
        run: _SessionRun,
        observer: Optional[SessionObserver],
    ) -> bool:
        """Apply one frame. Returns True once the session is terminal."""
        try:
            event = decoder.decode(frame)
        except ProtocolFrameError as e:
            run.skipped_frames += 1
            logger.warning(
                "Skipping malformed %s frame for %s: %s",
                frame.tag,
                run.account.account_id,
                e.message,
            )
            return False
        if event is None:
            return False

        had_wait = run.monitor.is_waiting
        if not run.machine.apply(event):
            return run.machine.is_terminal

        wait = None
        if isinstance(event, NetworkEvent):
            wait = run.monitor.observe(event)
        elif isinstance(event, ErrorEvent):
            kind = (
                ErrorCode.CONCURRENCY_ERROR.value
                if event.is_concurrency_error
                else ErrorCode.VENDOR_ERROR.value
            )
            run.failure = _Failure(
                kind=kind,
                message=event.message,
                hint=event.hint,
                attempts_made=event.attempts_made,
            )

        if observer is not None:
            update = SessionUpdate(
                account=run.account,
                event=event,
                state=run.machine.state,
                percent=run.machine.percent,
                wait=wait,
                wait_ended=had_wait and not run.monitor.is_waiting,
            )
            try:
                observer(update)
            except Exception:
                logger.warning("Session observer failed", exc_info=True)

        return run.machine.is_terminal

    async def _build_outcome(
        self,
        run: _SessionRun,
        checkpoint: SyncCheckpoint,
        today: date,
        started: float,
    ) -> AccountOutcome:
        machine = run.machine
        base = {
            "account": run.account,
            "state": machine.state,
            "start_date": checkpoint.start_date,
            "end_date": today,
            "elapsed_seconds": max(0.0, self._clock() - started),
            "steps": machine.step_history,
        }

        terminal = machine.terminal_event
        if machine.state is SyncSessionState.COMPLETED and isinstance(
            terminal,
            CompleteEvent,
        ):
            summary = terminal.summary
            first_date, last_date = summary.transaction_date_range()
            logger.info(
                "Sync for %s completed: %d fetched, %d saved",
                run.account.account_id,
                summary.transactions,
                summary.saved_transactions,
            )
            return AccountOutcome(
                **base,
                transactions_fetched=summary.transactions,
                transactions_saved=summary.saved_transactions,
                transactions_duplicate=summary.duplicate_transactions,
                transactions_updated=summary.updated_transactions,
                card_breakdown=summary.card_breakdown(),
                first_transaction_date=first_date,
                last_transaction_date=last_date,
            )

        if machine.state is SyncSessionState.FAILED and run.failure is not None:
            failure = run.failure
            retry = None
            if failure.kind != ErrorCode.CONCURRENCY_ERROR.value:
                retry = await self._retry_options(run.account, checkpoint, today)
            return AccountOutcome(
                **base,
                error_message=failure.message,
                error_kind=failure.kind,
                error_hint=failure.hint,
                attempts_made=failure.attempts_made,
                retry_options=retry,
            )

        return AccountOutcome(**base)

    async def _retry_options(
        self,
        account: Account,
        checkpoint: SyncCheckpoint,
        today: date,
    ) -> RetryOptions:
        last_date = account.last_transaction_date
        if self._date_lookup is not None:
            # The failed run may have saved some transactions before failing
            try:
                last_date = (
                    await self._date_lookup.last_transaction_date(account.vendor)
                    or last_date
                )
            except Exception:
                logger.warning(
                    "Could not refresh last transaction date for %s",
                    account.vendor,
                    exc_info=True,
                )
        continue_from = None
        if last_date is not None:
            continue_from = resolve_checkpoint(
                last_date,
                CheckpointMode.CONTINUE,
                today=today,
            ).start_date
        return RetryOptions(
            original_start_date=checkpoint.start_date,
            continue_from_date=continue_from,
        )
