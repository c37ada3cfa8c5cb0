"""Duplicates router: list, resolve and auto-resolve candidate pairs."""

import logging
from typing import Annotated, Optional

from fastapi import APIRouter, Depends, Query

from finsync.application.commands.duplicates import (
    AutoResolveDuplicatesCommand,
    ResolveDuplicateCommand,
)
from finsync.application.queries.duplicates import ListDuplicatesQuery
from finsync.domain.duplicates.value_objects import DuplicatePair, DuplicateStatus
from finsync.presentation.api.dependencies import (
    DBSession,
    get_auto_resolve_command,
    get_list_duplicates_query,
    get_resolve_duplicate_command,
)
from finsync.presentation.api.schemas.duplicates import (
    AutoResolveResponse,
    DuplicateListResponse,
    ResolveDuplicateRequest,
    ResolveDuplicateResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get(
    "",
    summary="List duplicate candidates",
    responses={200: {"description": "Unresolved candidates and tracked pairs"}},
)
async def list_duplicates(
    query: Annotated[ListDuplicatesQuery, Depends(get_list_duplicates_query)],
    status: Optional[DuplicateStatus] = Query(
        default=None,
        description="Filter tracked pairs by status",
    ),
    limit: int = Query(default=100, ge=1, le=1000),
) -> DuplicateListResponse:
    """
    Detect candidate pairs among stored transactions.

    Pairs already resolved are never detected again.
    """
    result = await query.execute(status=status, limit=limit)
    return DuplicateListResponse.model_validate(result.to_dict())


@router.post(
    "/resolve",
    summary="Resolve one duplicate pair",
    responses={
        200: {"description": "Pair resolved"},
        400: {"description": "Unknown action"},
        404: {"description": "A transaction of the pair no longer exists"},
        409: {"description": "Pair was already resolved"},
    },
)
async def resolve_duplicate(
    request: ResolveDuplicateRequest,
    command: Annotated[ResolveDuplicateCommand, Depends(get_resolve_duplicate_command)],
    session: DBSession,
) -> ResolveDuplicateResponse:
    """
    Delete one transaction of the pair or mark the pair as not a duplicate.

    The deletion and the tracking record are committed together.
    """
    pair = DuplicatePair(
        first=request.transaction1.to_domain(),
        second=request.transaction2.to_domain(),
        similarity=request.similarity,
    )
    try:
        result = await command.execute(pair, request.action)
        await session.commit()
    except Exception:
        await session.rollback()
        raise
    return ResolveDuplicateResponse.model_validate(result.to_dict())


@router.post(
    "/auto-resolve",
    summary="Resolve every exact duplicate",
    responses={200: {"description": "Exact pairs resolved (or previewed)"}},
)
async def auto_resolve_duplicates(
    command: Annotated[
        AutoResolveDuplicatesCommand,
        Depends(get_auto_resolve_command),
    ],
    session: DBSession,
    dry_run: bool = Query(default=False, description="Only report what would go"),
) -> AutoResolveResponse:
    """
    Keep the first transaction of every exact pair and delete the second.

    Safe to repeat: a second call deletes nothing.
    """
    try:
        result = await command.execute(dry_run=dry_run)
        if dry_run:
            await session.rollback()
        else:
            await session.commit()
    except Exception:
        await session.rollback()
        raise
    return AutoResolveResponse.model_validate(result.to_dict())
