"""FastAPI dependency injection for the finsync API.

Provides dependencies for:
- Database sessions
- The remote sync endpoint
- Command and query instances
"""

import logging
from functools import lru_cache
from typing import Annotated, AsyncGenerator, Optional

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from finsync.application.commands.duplicates import (
    AutoResolveDuplicatesCommand,
    ResolveDuplicateCommand,
)
from finsync.application.commands.sync import (
    ForceStopCommand,
    OrchestrateSyncCommand,
    SyncSessionCommand,
)
from finsync.application.queries.duplicates import ListDuplicatesQuery
from finsync.application.queries.sync import CatchUpPlanQuery
from finsync.application.services import NotificationChannel
from finsync.domain.duplicates.services import DuplicateDetector
from finsync.domain.sync.ports import SyncEndpoint
from finsync.domain.sync.services import CheckpointResolver
from finsync.infrastructure.persistence.sqlalchemy import (
    AccountDirectorySQLAlchemy,
    DuplicateRepositorySQLAlchemy,
    TransactionDateLookupSQLAlchemy,
    get_session_maker,
)
from finsync.infrastructure.sync import HttpSyncEndpoint, SSEDecoder
from finsync_config.settings import Settings, get_settings

logger = logging.getLogger(__name__)


# -----------------------------------------------------------------------------
# Database Session
# -----------------------------------------------------------------------------


def get_session_factory() -> async_sessionmaker[AsyncSession]:
    """Shared session maker; overridden in tests."""
    return get_session_maker()


SessionFactory = Annotated[
    async_sessionmaker[AsyncSession],
    Depends(get_session_factory),
]


async def get_db_session(
    session_factory: SessionFactory,
) -> AsyncGenerator[AsyncSession, None]:
    """
    Database session dependency.

    Yields
    ------
    AsyncSession for database operations
    """
    async with session_factory() as session:
        yield session


# Type alias for injected session
DBSession = Annotated[AsyncSession, Depends(get_db_session)]

AppSettings = Annotated[Settings, Depends(get_settings)]


# -----------------------------------------------------------------------------
# Sync Endpoint (Singleton)
# -----------------------------------------------------------------------------


@lru_cache(maxsize=1)
def get_sync_endpoint() -> SyncEndpoint:
    return HttpSyncEndpoint.from_settings(get_settings())


Endpoint = Annotated[SyncEndpoint, Depends(get_sync_endpoint)]


# -----------------------------------------------------------------------------
# Command / Query Builders
# -----------------------------------------------------------------------------


def build_orchestrator(
    session: AsyncSession,
    endpoint: SyncEndpoint,
    settings: Settings,
    channel: Optional[NotificationChannel] = None,
) -> OrchestrateSyncCommand:
    date_lookup = TransactionDateLookupSQLAlchemy(session)
    session_command = SyncSessionCommand(
        endpoint=endpoint,
        decoder_factory=SSEDecoder,
        date_lookup=date_lookup,
    )
    return OrchestrateSyncCommand.from_settings(
        settings,
        session_command=session_command,
        date_lookup=date_lookup,
        channel=channel,
    )


def get_catch_up_query(session: DBSession, settings: AppSettings) -> CatchUpPlanQuery:
    return CatchUpPlanQuery(
        directory=AccountDirectorySQLAlchemy(session),
        resolver=CheckpointResolver(settings.checkpoint_policy),
        date_lookup=TransactionDateLookupSQLAlchemy(session),
    )


def get_force_stop_command(endpoint: Endpoint) -> ForceStopCommand:
    return ForceStopCommand(endpoint)


def get_duplicate_repository(session: DBSession) -> DuplicateRepositorySQLAlchemy:
    return DuplicateRepositorySQLAlchemy(session)


DuplicateRepo = Annotated[
    DuplicateRepositorySQLAlchemy,
    Depends(get_duplicate_repository),
]


def get_list_duplicates_query(repo: DuplicateRepo) -> ListDuplicatesQuery:
    return ListDuplicatesQuery(repo, DuplicateDetector())


def get_resolve_duplicate_command(repo: DuplicateRepo) -> ResolveDuplicateCommand:
    return ResolveDuplicateCommand(repo)


def get_auto_resolve_command(
    repo: DuplicateRepo,
    settings: AppSettings,
) -> AutoResolveDuplicatesCommand:
    return AutoResolveDuplicatesCommand(
        repo,
        DuplicateDetector(),
        threshold=settings.duplicate_exact_threshold,
    )
