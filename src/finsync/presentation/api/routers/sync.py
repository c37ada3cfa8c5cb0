"""Sync router: catch-up preview, streamed runs and force-stop."""

import asyncio
import json
import logging
from typing import Annotated, Optional

from fastapi import APIRouter, Depends
from fastapi.responses import StreamingResponse
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from finsync.application.commands.sync import ForceStopCommand, order_accounts_for_sync
from finsync.application.dtos.sync import OrchestrationOptions, SessionReport
from finsync.application.queries.sync import CatchUpPlanQuery
from finsync.application.services import CancellationToken, NotificationChannel
from finsync.domain.shared.exceptions import DomainException, ErrorCode
from finsync.domain.sync.ports import SyncEndpoint
from finsync.infrastructure.persistence.sqlalchemy import (
    AccountDirectorySQLAlchemy,
    session_scope,
)
from finsync.presentation.api.dependencies import (
    AppSettings,
    Endpoint,
    SessionFactory,
    build_orchestrator,
    get_catch_up_query,
    get_force_stop_command,
)
from finsync.presentation.api.schemas.sync import (
    CatchUpPlanResponse,
    ForceStopRequest,
    ForceStopResponse,
    SyncRunRequest,
)
from finsync_config.settings import Settings

logger = logging.getLogger(__name__)

router = APIRouter()

RUN_FAILED_EVENT = "run_failed"


@router.get(
    "/catch-up",
    summary="Preview the next catch-up run",
    responses={200: {"description": "Per-account start dates"}},
)
async def get_catch_up_plan(
    query: Annotated[CatchUpPlanQuery, Depends(get_catch_up_query)],
) -> CatchUpPlanResponse:
    """
    Show where a catch-up run would start for every active account.

    Accounts with stored transactions start a couple of days before the
    newest one; accounts without history start at the fallback window.
    """
    plan = await query.execute()
    return CatchUpPlanResponse.model_validate(plan.to_dict())


@router.post(
    "/run/stream",
    summary="Run a sync with streaming progress",
    responses={
        200: {
            "description": "SSE stream of sync notifications",
            "content": {"text/event-stream": {}},
        },
        400: {"description": "Invalid parameters"},
    },
)
async def run_sync_streaming(
    endpoint: Endpoint,
    session_factory: SessionFactory,
    settings: AppSettings,
    request: Optional[SyncRunRequest] = None,
) -> StreamingResponse:
    """
    Sync every active account one after another and stream notifications.

    ## Event Types

    - **run_started**: includes total_accounts
    - **account_started**: account id, vendor and start date
    - **account_progress**: step message and monotonic percent
    - **account_network** / **account_waiting**: endpoint network activity
      and rate-limit waits (seconds = 0 ends a wait)
    - **account_completed** / **account_failed** / **account_cancelled**
    - **force_stop_required**: the endpoint reported a sync already running;
      call `POST /sync/force-stop` and retry
    - **data_changed**: transactions were saved or updated
    - **run_finished**: the full report
    - **run_failed**: the run could not start

    Closing the connection cancels the run.
    """
    request = request or SyncRunRequest()
    options = OrchestrationOptions(
        mode=request.mode,
        days_back=request.days_back,
        endpoint_options=request.options,
        vendor_delay=request.vendor_delay,
    )
    # Reject bad parameters before the stream starts
    options.validate()

    channel = NotificationChannel(settings.sync_notification_buffer_size)
    subscription = channel.subscribe()
    token = CancellationToken()

    async def event_generator():
        task = asyncio.create_task(
            _run_orchestration(
                session_factory,
                endpoint,
                settings,
                channel,
                token,
                options,
                request.account_ids,
            ),
        )
        try:
            async for notification in subscription:
                yield _format_sse_event(
                    notification.notification_type.value,
                    notification.to_dict(),
                )
            await task
        except DomainException as e:
            logger.warning("Streaming sync failed (domain): %s", e)
            yield _format_sse_event(
                RUN_FAILED_EVENT,
                {"message": e.message, "code": e.code.value},
            )
        except Exception as e:
            logger.exception("Streaming sync failed (unexpected): %s", e)
            yield _format_sse_event(
                RUN_FAILED_EVENT,
                {
                    "message": "Sync failed unexpectedly",
                    "code": ErrorCode.INTERNAL_ERROR.value,
                },
            )
        finally:
            if not task.done():
                token.cancel("Client disconnected")
                task.add_done_callback(_collect_abandoned_run)

    return StreamingResponse(
        event_generator(),
        media_type="text/event-stream",
        headers={
            "Cache-Control": "no-cache",
            "Connection": "keep-alive",
            "X-Accel-Buffering": "no",  # Disable nginx buffering
        },
    )


def _collect_abandoned_run(task: asyncio.Task) -> None:
    """Log how a run whose stream was abandoned ended."""
    if task.cancelled():
        return
    exc = task.exception()
    if exc is not None:
        logger.warning(
            "Sync run failed after the client disconnected: %s",
            exc,
            exc_info=exc,
        )


async def _run_orchestration(  # noqa: PLR0913
    session_factory: async_sessionmaker[AsyncSession],
    endpoint: SyncEndpoint,
    settings: Settings,
    channel: NotificationChannel,
    token: CancellationToken,
    options: OrchestrationOptions,
    account_ids: Optional[list[str]],
) -> SessionReport:
    """Run in its own task and session so a disconnect cannot close them early."""
    try:
        async with session_scope(session_factory) as session:
            accounts = await AccountDirectorySQLAlchemy(session).list_active()
            if account_ids is not None:
                wanted = set(account_ids)
                accounts = [a for a in accounts if a.account_id in wanted]
            command = build_orchestrator(session, endpoint, settings, channel)
            return await command.execute(
                order_accounts_for_sync(accounts),
                options,
                cancellation_token=token,
            )
    finally:
        channel.close()


def _format_sse_event(event_type: str, data: dict) -> str:
    """Format data as an SSE event string."""
    json_data = json.dumps(data)
    return f"event: {event_type}\ndata: {json_data}\n\n"


@router.post(
    "/force-stop",
    summary="Stop every sync running on the endpoint",
    responses={
        200: {"description": "Running syncs were stopped"},
        400: {"description": "Not confirmed"},
        503: {"description": "The endpoint could not be reached"},
    },
)
async def force_stop(
    command: Annotated[ForceStopCommand, Depends(get_force_stop_command)],
    request: ForceStopRequest,
) -> ForceStopResponse:
    """
    Kill every sync process on the remote endpoint.

    Needed after a run halted with **force_stop_required**. Requires
    `{"confirm": true}`.
    """
    result = await command.execute(confirmed=request.confirm)
    return ForceStopResponse(message=result.message, stopped_at=result.stopped_at)
