"""Sync a list of accounts one after another and aggregate the results."""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass, replace
from datetime import date, datetime, timedelta, timezone
from typing import TYPE_CHECKING, Callable, Iterable, Optional

from finsync.application.commands.sync.sync_session_command import (
    SyncSessionCommand,
)
from finsync.application.dtos.sync import (
    AccountFinishedNotification,
    AccountOutcome,
    AccountProgressNotification,
    AccountStartedNotification,
    DataChangedNotification,
    ForceStopRequiredNotification,
    NetworkActivityNotification,
    OrchestrationOptions,
    RunFinishedNotification,
    RunStartedNotification,
    SessionReport,
    SessionUpdate,
    SyncNotification,
    WaitingNotification,
)
from finsync.application.services import (
    CancellationToken,
    NotificationChannel,
    ResultAggregator,
)
from finsync.domain.shared.exceptions import DomainException, ErrorCode
from finsync.domain.shared.time import today_local
from finsync.domain.sync.exceptions import OrchestrationStartError
from finsync.domain.sync.ports import TransactionDateLookup
from finsync.domain.sync.services import CheckpointResolver
from finsync.domain.sync.value_objects import (
    Account,
    CheckpointMode,
    NetworkEvent,
    ProgressEvent,
    SyncCheckpoint,
    SyncSessionState,
)

if TYPE_CHECKING:
    from finsync_config.settings import Settings

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[SyncNotification], None]

# Card issuers known to throttle aggressively
DEFAULT_RATE_LIMITED_VENDORS = frozenset({"isracard", "amex"})
DEFAULT_VENDOR_DELAY_RANGE = (3.0, 8.0)
VENDOR_DELAY_KIND = "vendorDelay"


def order_accounts_for_sync(accounts: Iterable[Account]) -> list[Account]:
    """Never-synced accounts first, then least recently synced, then by id."""

    def key(account: Account) -> tuple[bool, datetime, str]:
        synced = account.last_synced_at
        if synced is not None and synced.tzinfo is not None:
            synced = synced.astimezone(timezone.utc).replace(tzinfo=None)
        return (synced is not None, synced or datetime.min, account.account_id)

    return sorted(accounts, key=key)


@dataclass(frozen=True)
class _PlannedAccount:
    account: Account
    mode: Optional[CheckpointMode] = None
    original_start_date: Optional[date] = None


class OrchestrateSyncCommand:
    """Run account syncs strictly one at a time.

    Vendor failures and transport errors are recorded and the run moves on;
    a remote "already running" halts the run and asks for a force-stop;
    cancellation halts the run immediately.
    """

    def __init__(  # noqa: PLR0913
        self,
        session_command: SyncSessionCommand,
        resolver: Optional[CheckpointResolver] = None,
        date_lookup: Optional[TransactionDateLookup] = None,
        channel: Optional[NotificationChannel] = None,
        rate_limited_vendors: Iterable[str] = DEFAULT_RATE_LIMITED_VENDORS,
        vendor_delay_range: tuple[float, float] = DEFAULT_VENDOR_DELAY_RANGE,
        rng: Optional[random.Random] = None,
    ):
        self._session = session_command
        self._resolver = resolver or CheckpointResolver()
        self._date_lookup = date_lookup
        self._channel = channel
        self._rate_limited_vendors = frozenset(v.lower() for v in rate_limited_vendors)
        self._vendor_delay_range = vendor_delay_range
        self._rng = rng or random.Random()

    @classmethod
    def from_settings(  # noqa: PLR0913
        cls,
        settings: Settings,
        session_command: SyncSessionCommand,
        date_lookup: Optional[TransactionDateLookup] = None,
        channel: Optional[NotificationChannel] = None,
    ) -> OrchestrateSyncCommand:
        return cls(
            session_command=session_command,
            resolver=CheckpointResolver(settings.checkpoint_policy),
            date_lookup=date_lookup,
            channel=channel,
            rate_limited_vendors=settings.sync_rate_limited_vendors,
            vendor_delay_range=(
                settings.sync_vendor_delay_min_seconds,
                settings.sync_vendor_delay_max_seconds,
            ),
        )

    async def execute(
        self,
        accounts: list[Account],
        options: Optional[OrchestrationOptions] = None,
        on_progress: Optional[ProgressCallback] = None,
        cancellation_token: Optional[CancellationToken] = None,
    ) -> SessionReport:
        options = options or OrchestrationOptions()
        try:
            options.validate()
        except DomainException as e:
            raise OrchestrationStartError(e.message, e.details) from e

        plan = [_PlannedAccount(account) for account in accounts]
        return await self._run(plan, options, on_progress, cancellation_token)

    async def retry_failed(
        self,
        report: SessionReport,
        mode: CheckpointMode = CheckpointMode.CONTINUE,
        options: Optional[OrchestrationOptions] = None,
        on_progress: Optional[ProgressCallback] = None,
        cancellation_token: Optional[CancellationToken] = None,
        force_stopped: bool = False,
    ) -> SessionReport:
        """Re-run only the failed accounts of ``report``.

        CONTINUE resumes the day after the last saved transaction;
        RETRY_ORIGINAL reuses the start date of the failed attempt. Only the
        pass-through parts of ``options`` (endpoint options, vendor delay,
        today) are used.

        A report that ended on a remote "already running" is only retried
        once the caller has force-stopped the remote side and says so with
        ``force_stopped``.
        """
        if mode not in (CheckpointMode.CONTINUE, CheckpointMode.RETRY_ORIGINAL):
            msg = f"Cannot retry with checkpoint mode {mode.value}"
            raise OrchestrationStartError(msg, {"mode": mode.value})

        blocked = [o.account_id for o in report.failed if o.is_concurrency_error]
        if (report.force_stop_required or blocked) and not force_stopped:
            msg = "A sync is still running remotely; force-stop it before retrying"
            raise OrchestrationStartError(
                msg,
                {"code": ErrorCode.CONCURRENCY_ERROR.value, "account_ids": blocked},
            )

        plan = []
        for outcome in report.failed:
            account = outcome.account
            retry = outcome.retry_options
            if mode is CheckpointMode.RETRY_ORIGINAL:
                original = retry.original_start_date if retry else outcome.start_date
                plan.append(
                    _PlannedAccount(account, mode=mode, original_start_date=original),
                )
                continue
            if retry is not None and retry.continue_from_date is not None:
                # Resolves back to continue_from_date under CONTINUE
                account = account.with_last_transaction_date(
                    retry.continue_from_date - timedelta(days=1),
                )
            plan.append(_PlannedAccount(account, mode=mode))

        options = replace(
            options or OrchestrationOptions(),
            mode=CheckpointMode.CONTINUE,
            days_back=None,
        )
        return await self._run(plan, options, on_progress, cancellation_token)

    async def _run(  # noqa: PLR0912
        self,
        plan: list[_PlannedAccount],
        options: OrchestrationOptions,
        on_progress: Optional[ProgressCallback],
        cancellation_token: Optional[CancellationToken],
    ) -> SessionReport:
        token = cancellation_token or CancellationToken()
        today = options.today or today_local()
        aggregator = ResultAggregator()
        total = len(plan)

        self._publish(RunStartedNotification(total_accounts=total), on_progress)

        for index, planned in enumerate(plan, 1):
            if token.is_cancelled:
                aggregator.mark_cancelled()
                aggregator.skip([p.account.account_id for p in plan[index - 1 :]])
                break

            try:
                outcome = await self._sync_account(
                    planned,
                    index,
                    total,
                    options,
                    today,
                    token,
                    on_progress,
                )
            except Exception as e:
                if index == 1:
                    logger.exception("Could not start sync for the first account")
                    message = getattr(e, "message", None) or str(e)
                    raise OrchestrationStartError(
                        f"Could not start sync: {message}",
                        {"account_id": planned.account.account_id},
                    ) from e
                logger.exception(
                    "Unexpected error syncing %s",
                    planned.account.account_id,
                )
                outcome = AccountOutcome(
                    account=planned.account,
                    state=SyncSessionState.FAILED,
                    start_date=planned.original_start_date or today,
                    end_date=today,
                    error_message=str(e),
                    error_kind=ErrorCode.INTERNAL_ERROR.value,
                )

            aggregator.add(outcome)
            self._publish(
                AccountFinishedNotification(outcome, index, total),
                on_progress,
            )

            if outcome.cancelled:
                aggregator.mark_cancelled()
                aggregator.skip([p.account.account_id for p in plan[index:]])
                break
            if outcome.is_concurrency_error:
                aggregator.require_force_stop()
                aggregator.skip([p.account.account_id for p in plan[index:]])
                self._publish(
                    ForceStopRequiredNotification(outcome.account_id),
                    on_progress,
                )
                break

        report = aggregator.finish()
        changed = tuple(
            o.account_id
            for o in report.outcomes
            if o.transactions_saved or o.transactions_updated
        )
        if changed:
            self._publish(DataChangedNotification(accounts=changed), on_progress)
        self._publish(RunFinishedNotification(report), on_progress)
        logger.info(
            "Sync run %s: %d/%d accounts synced, %d transactions saved",
            report.status.value,
            report.accounts_synced,
            total,
            report.total_saved,
        )
        return report

    async def _sync_account(  # noqa: PLR0913
        self,
        planned: _PlannedAccount,
        index: int,
        total: int,
        options: OrchestrationOptions,
        today: date,
        token: CancellationToken,
        on_progress: Optional[ProgressCallback],
    ) -> AccountOutcome:
        account = planned.account
        if account.last_transaction_date is None and self._date_lookup is not None:
            last_date = await self._date_lookup.last_transaction_date(account.vendor)
            account = account.with_last_transaction_date(last_date)

        checkpoint = self._checkpoint_for(account, planned, options, today)
        self._publish(
            AccountStartedNotification(
                account_id=account.account_id,
                vendor=account.vendor,
                nickname=account.nickname,
                account_index=index,
                total_accounts=total,
                start_date=checkpoint.start_date,
            ),
            on_progress,
        )

        if options.vendor_delay and account.vendor.lower() in self._rate_limited_vendors:
            delay = self._rng.uniform(*self._vendor_delay_range)
            logger.info("Waiting %.1fs before syncing %s", delay, account.vendor)
            self._publish(
                WaitingNotification(
                    account_id=account.account_id,
                    kind=VENDOR_DELAY_KIND,
                    seconds=delay,
                    message=f"Pausing {delay:.0f}s to avoid {account.vendor} rate limits",
                ),
                on_progress,
            )
            await token.sleep(delay)

        def observe(update: SessionUpdate) -> None:
            self._on_session_update(update, index, total, on_progress)

        return await self._session.execute(
            account,
            checkpoint,
            cancellation_token=token,
            observer=observe,
            endpoint_options=options.endpoint_options,
            today=today,
        )

    def _checkpoint_for(
        self,
        account: Account,
        planned: _PlannedAccount,
        options: OrchestrationOptions,
        today: date,
    ) -> SyncCheckpoint:
        return self._resolver.resolve(
            account,
            mode=planned.mode or options.mode,
            today=today,
            days_back=options.days_back,
            original_start_date=planned.original_start_date,
        )

    def _on_session_update(
        self,
        update: SessionUpdate,
        index: int,
        total: int,
        on_progress: Optional[ProgressCallback],
    ) -> None:
        event = update.event
        account_id = update.account.account_id
        if isinstance(event, ProgressEvent):
            self._publish(
                AccountProgressNotification(
                    account_id=account_id,
                    account_index=index,
                    total_accounts=total,
                    step=event.step,
                    percent=update.percent,
                    message=event.message,
                    phase=event.phase,
                    success=event.success,
                ),
                on_progress,
            )
        elif isinstance(event, NetworkEvent):
            if update.wait is not None and event.kind.is_wait:
                self._publish(
                    WaitingNotification(
                        account_id=account_id,
                        kind=event.kind.value,
                        seconds=update.wait.total_seconds,
                        message=update.wait.message,
                    ),
                    on_progress,
                )
            elif update.wait_ended:
                self._publish(
                    WaitingNotification(
                        account_id=account_id,
                        kind=event.kind.value,
                        seconds=0.0,
                    ),
                    on_progress,
                )
            if not event.kind.is_wait:
                self._publish(
                    NetworkActivityNotification(
                        account_id=account_id,
                        kind=event.kind.value,
                        status=event.status,
                        method=event.method,
                        url=event.url,
                        message=event.message,
                    ),
                    on_progress,
                )

    def _publish(
        self,
        notification: SyncNotification,
        on_progress: Optional[ProgressCallback],
    ) -> None:
        if self._channel is not None:
            self._channel.publish(notification)
        if on_progress is not None:
            try:
                on_progress(notification)
            except Exception:
                logger.warning(
                    "Progress callback failed on %s",
                    notification.notification_type.value,
                    exc_info=True,
                )
