"""finsync CLI application using Typer.

Runs syncs and resolves duplicates against the configured database and
sync endpoint, rendering progress with rich.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
import signal
import sys
from typing import Optional

import typer
from rich.console import Console
from rich.table import Table

from finsync.application.commands.duplicates import (
    AutoResolveDuplicatesCommand,
    ResolveDuplicateCommand,
)
from finsync.application.commands.sync import (
    ForceStopCommand,
    OrchestrateSyncCommand,
    SyncSessionCommand,
    order_accounts_for_sync,
)
from finsync.application.dtos.sync import (
    AccountFinishedNotification,
    AccountProgressNotification,
    AccountStartedNotification,
    ForceStopRequiredNotification,
    NotificationType,
    OrchestrationOptions,
    RunStatus,
    SessionReport,
    SyncNotification,
    WaitingNotification,
)
from finsync.application.queries.duplicates import ListDuplicatesQuery
from finsync.application.queries.sync import CatchUpPlanQuery
from finsync.application.services import CancellationToken, NotificationChannel
from finsync.domain.duplicates.services import DuplicateDetector
from finsync.domain.shared.exceptions import DomainException
from finsync.domain.sync.services import CheckpointResolver
from finsync.domain.sync.value_objects import CheckpointMode
from finsync.infrastructure.persistence.sqlalchemy import (
    AccountDirectorySQLAlchemy,
    DuplicateRepositorySQLAlchemy,
    TransactionDateLookupSQLAlchemy,
    create_tables,
    dispose_engine,
    session_scope,
)
from finsync.infrastructure.sync import HttpSyncEndpoint, SSEDecoder
from finsync_config.settings import get_settings

app = typer.Typer(
    name="finsync",
    help="finsync - account sync and duplicate cleanup",
    no_args_is_help=True,
)
console = Console()

sync_app = typer.Typer(name="sync", help="Sync accounts", no_args_is_help=True)
duplicates_app = typer.Typer(
    name="duplicates",
    help="Find and resolve duplicated transactions",
    no_args_is_help=True,
)
db_app = typer.Typer(name="db", help="Database utilities", no_args_is_help=True)
app.add_typer(sync_app)
app.add_typer(duplicates_app)
app.add_typer(db_app)

_STATUS_STYLE = {
    RunStatus.SUCCESS: "green",
    RunStatus.PARTIAL: "yellow",
    RunStatus.FAILED: "red",
    RunStatus.CANCELLED: "dim",
}


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging"),
) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        stream=sys.stderr,
        force=True,
    )
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("aiosqlite").setLevel(logging.WARNING)


def _run(coro) -> None:
    """Run a coroutine, turning domain errors into a red message and exit 1."""

    async def wrapper():
        try:
            return await coro
        finally:
            await dispose_engine()

    try:
        asyncio.run(wrapper())
    except DomainException as e:
        console.print(f"[red]Error:[/red] {e.message} [dim]({e.code.value})[/dim]")
        raise typer.Exit(code=1) from None


# ---------------------------------------------------------------------------
# Rendering
# ---------------------------------------------------------------------------


def render_notification(notification: SyncNotification) -> None:
    """Print one run notification as a console line."""
    if isinstance(notification, AccountStartedNotification):
        start = notification.start_date.isoformat() if notification.start_date else "?"
        console.print(
            f"[bold][{notification.account_index}/{notification.total_accounts}]"
            f"[/bold] {notification.nickname or notification.vendor} "
            f"[dim]({notification.vendor}, from {start})[/dim]",
        )
    elif isinstance(notification, AccountProgressNotification):
        console.print(f"    {notification.percent:3.0f}% {notification.message}")
    elif isinstance(notification, WaitingNotification):
        if notification.is_waiting:
            console.print(
                f"    [yellow]waiting {notification.seconds:.0f}s[/yellow] "
                f"{notification.message}",
            )
    elif isinstance(notification, AccountFinishedNotification):
        outcome = notification.outcome
        if outcome.succeeded:
            console.print(
                f"    [green]done[/green] {outcome.transactions_saved} saved, "
                f"{outcome.transactions_updated} updated",
            )
        elif outcome.cancelled:
            console.print("    [dim]cancelled[/dim]")
        else:
            console.print(
                f"    [red]failed[/red] {outcome.error_message} "
                f"[dim]({outcome.error_kind})[/dim]",
            )
    elif isinstance(notification, ForceStopRequiredNotification):
        console.print(
            "[yellow]A sync is already running on the endpoint. "
            "Run 'finsync sync force-stop' and try again.[/yellow]",
        )
    elif notification.notification_type is NotificationType.RUN_STARTED:
        console.print(f"[bold green]{notification.message}[/bold green]")


def render_report(report: SessionReport) -> None:
    table = Table(title="Sync report")
    table.add_column("Account")
    table.add_column("Vendor")
    table.add_column("State")
    table.add_column("Saved", justify="right")
    table.add_column("Updated", justify="right")
    table.add_column("Error")
    for outcome in report.outcomes:
        table.add_row(
            outcome.nickname or outcome.account_id,
            outcome.vendor,
            outcome.state.value,
            str(outcome.transactions_saved),
            str(outcome.transactions_updated),
            outcome.error_message or "",
        )
    for account_id in report.not_attempted:
        table.add_row(account_id, "", "not attempted", "", "", "")
    console.print(table)

    style = _STATUS_STYLE[report.status]
    console.print(
        f"[{style}]{report.status.value}[/{style}]: "
        f"{report.accounts_synced}/{len(report.outcomes)} accounts, "
        f"{report.total_saved} saved in {report.duration_seconds:.1f}s",
    )


# ---------------------------------------------------------------------------
# sync
# ---------------------------------------------------------------------------


@sync_app.command("run")
def sync_run(  # noqa: PLR0913
    mode: CheckpointMode = typer.Option(
        CheckpointMode.CATCH_UP,
        help="How start dates are chosen",
    ),
    days_back: Optional[int] = typer.Option(
        None,
        min=0,
        help="Window for fixed_lookback mode",
    ),
    account: Optional[list[str]] = typer.Option(
        None,
        "--account",
        "-a",
        help="Only sync these account ids",
    ),
    vendor_delay: bool = typer.Option(
        True,
        help="Pause before vendors known to rate-limit",
    ),
    retry_failed: bool = typer.Option(
        False,
        help="Retry failed accounts once, continuing after their last saved day",
    ),
) -> None:
    """Sync every active account, least recently synced first.

    Ctrl-C cancels the run after the current account stops.
    """
    options = OrchestrationOptions(
        mode=mode,
        days_back=days_back,
        vendor_delay=vendor_delay,
    )
    _run(_sync_run(options, account, retry_failed))


async def _sync_run(
    options: OrchestrationOptions,
    account_ids: Optional[list[str]],
    retry_failed: bool,
) -> None:
    settings = get_settings()
    endpoint = HttpSyncEndpoint.from_settings(settings)
    channel = NotificationChannel(settings.sync_notification_buffer_size)
    channel.add_observer(render_notification)

    token = CancellationToken()
    loop = asyncio.get_running_loop()
    with contextlib.suppress(NotImplementedError):
        loop.add_signal_handler(signal.SIGINT, token.cancel, "Interrupted")

    async with session_scope() as session:
        accounts = await AccountDirectorySQLAlchemy(session).list_active()
        if account_ids:
            wanted = set(account_ids)
            accounts = [a for a in accounts if a.account_id in wanted]
        date_lookup = TransactionDateLookupSQLAlchemy(session)
        command = OrchestrateSyncCommand.from_settings(
            settings,
            session_command=SyncSessionCommand(endpoint, SSEDecoder, date_lookup),
            date_lookup=date_lookup,
            channel=channel,
        )
        report = await command.execute(
            order_accounts_for_sync(accounts),
            options,
            cancellation_token=token,
        )
        render_report(report)

        if retry_failed and report.failed and not report.force_stop_required:
            console.print(f"\nRetrying {len(report.failed)} failed account(s)...")
            report = await command.retry_failed(
                report,
                options=options,
                cancellation_token=token,
            )
            render_report(report)

    if report.status in (RunStatus.FAILED, RunStatus.PARTIAL):
        raise typer.Exit(code=1)


@sync_app.command("plan")
def sync_plan() -> None:
    """Show where the next catch-up run would start."""
    _run(_sync_plan())


async def _sync_plan() -> None:
    settings = get_settings()
    async with session_scope() as session:
        query = CatchUpPlanQuery(
            AccountDirectorySQLAlchemy(session),
            CheckpointResolver(settings.checkpoint_policy),
            TransactionDateLookupSQLAlchemy(session),
        )
        plan = await query.execute()

    table = Table(title=f"Catch-up plan ({plan.today.isoformat()})")
    table.add_column("Account")
    table.add_column("Vendor")
    table.add_column("Last transaction")
    table.add_column("Sync from")
    table.add_column("Days", justify="right")
    for acc in plan.accounts:
        table.add_row(
            acc.nickname or acc.account_id,
            acc.vendor,
            acc.last_transaction_date.isoformat() if acc.last_transaction_date else "-",
            acc.sync_from_date.isoformat(),
            str(acc.days_to_sync),
        )
    console.print(table)


@sync_app.command("force-stop")
def sync_force_stop(
    yes: bool = typer.Option(False, "--yes", "-y", help="Do not ask for confirmation"),
) -> None:
    """Stop every sync running on the endpoint."""
    confirmed = yes or typer.confirm(
        "This aborts whatever the sync endpoint is doing. Continue?",
    )
    if not confirmed:
        raise typer.Abort()
    _run(_sync_force_stop())


async def _sync_force_stop() -> None:
    endpoint = HttpSyncEndpoint.from_settings(get_settings())
    result = await ForceStopCommand(endpoint).execute(confirmed=True)
    console.print(f"[green]{result.message}[/green]")


# ---------------------------------------------------------------------------
# duplicates
# ---------------------------------------------------------------------------


@duplicates_app.command("list")
def duplicates_list(
    limit: int = typer.Option(50, min=1, help="Maximum pairs to show"),
) -> None:
    """List unresolved duplicate candidates, numbered for 'resolve'."""
    _run(_duplicates_list(limit))


async def _duplicates_list(limit: int) -> None:
    async with session_scope() as session:
        repo = DuplicateRepositorySQLAlchemy(session)
        result = await ListDuplicatesQuery(repo, DuplicateDetector()).execute(limit=limit)

    if not result.detected:
        console.print("[green]No duplicate candidates.[/green]")
        return

    table = Table(title="Duplicate candidates")
    table.add_column("#", justify="right")
    table.add_column("Date")
    table.add_column("Name")
    table.add_column("First")
    table.add_column("Second")
    table.add_column("Similarity", justify="right")
    for index, pair in enumerate(result.detected, 1):
        table.add_row(
            str(index),
            pair.first_date.isoformat() if pair.first_date else "",
            pair.name or "",
            f"{pair.first.vendor}/{pair.first.identifier}",
            f"{pair.second.vendor}/{pair.second.identifier}",
            f"{pair.similarity:.2f}",
        )
    console.print(table)


@duplicates_app.command("resolve")
def duplicates_resolve(
    index: int = typer.Argument(..., min=1, help="Number shown by 'duplicates list'"),
    action: str = typer.Argument(..., help="keep_first, keep_second or not_duplicate"),
) -> None:
    """Resolve one candidate pair by its list number."""
    _run(_duplicates_resolve(index, action))


async def _duplicates_resolve(index: int, action: str) -> None:
    async with session_scope() as session:
        repo = DuplicateRepositorySQLAlchemy(session)
        result = await ListDuplicatesQuery(repo, DuplicateDetector()).execute(
            limit=index,
        )
        if index > len(result.detected):
            console.print(f"[red]No candidate number {index}.[/red]")
            raise typer.Exit(code=1)
        outcome = await ResolveDuplicateCommand(repo).execute(
            result.detected[index - 1],
            action,
        )

    if outcome.deleted is not None:
        console.print(
            f"[green]Deleted[/green] {outcome.deleted.vendor}/{outcome.deleted.identifier}",
        )
    else:
        console.print("[green]Marked as not a duplicate.[/green]")


@duplicates_app.command("auto-resolve")
def duplicates_auto_resolve(
    dry_run: bool = typer.Option(False, "--dry-run", help="Only report what would go"),
) -> None:
    """Keep the first of every exact pair and delete the second."""
    _run(_duplicates_auto_resolve(dry_run))


async def _duplicates_auto_resolve(dry_run: bool) -> None:
    settings = get_settings()
    async with session_scope() as session:
        command = AutoResolveDuplicatesCommand(
            DuplicateRepositorySQLAlchemy(session),
            DuplicateDetector(),
            threshold=settings.duplicate_exact_threshold,
        )
        result = await command.execute(dry_run=dry_run)
        if dry_run:
            await session.rollback()

    verb = "Would delete" if dry_run else "Deleted"
    console.print(
        f"{verb} [bold]{result.deleted_count}[/bold] of {result.candidates} "
        f"exact candidates ({result.skipped} skipped)",
    )
    for ref in result.deleted:
        console.print(f"  [dim]{ref.vendor}/{ref.identifier}[/dim]")


# ---------------------------------------------------------------------------
# db
# ---------------------------------------------------------------------------


@db_app.command("init")
def db_init() -> None:
    """Create missing tables (existing data is never touched)."""
    _run(create_tables())
    console.print("[green]Database schema is up to date.[/green]")


def cli() -> None:
    """Entry point for the CLI application."""
    app()


if __name__ == "__main__":
    cli()
