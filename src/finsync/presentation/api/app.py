"""Builds the finsync HTTP application.

Routes live under ``/api/v1``; ``/health`` stays outside the version prefix.
"""

import logging
import sys
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from functools import lru_cache

from fastapi import APIRouter, FastAPI
from fastapi.middleware.cors import CORSMiddleware

from finsync import __version__
from finsync.infrastructure.persistence.sqlalchemy import (
    create_tables,
    dispose_engine,
    get_engine,
)
from finsync.presentation.api.exception_handlers import setup_exception_handlers
from finsync.presentation.api.routers import duplicates_router, sync_router
from finsync_config.settings import Settings, get_settings

_CHATTY_LOGGERS = ("httpx", "httpcore", "sqlalchemy.engine", "aiosqlite")


@lru_cache(maxsize=1)
def _setup_logging() -> None:
    """Send log records to stdout at the level from LOG_LEVEL (once per process)."""
    level_name = get_settings().log_level.upper()
    level = logging.getLevelName(level_name)
    if not isinstance(level, int):
        level = logging.INFO

    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)-8s [%(name)s] %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        stream=sys.stdout,
        force=True,
    )
    logging.getLogger("finsync").setLevel(level)
    for name in _CHATTY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


logger = logging.getLogger(__name__)

API_VERSION = __version__
API_V1_PREFIX = "/api/v1"

OPENAPI_TAGS = [
    {
        "name": "Sync",
        "description": """Account synchronization through the streaming sync endpoint.

**How it works:**
1. Accounts are synced strictly one at a time, least recently synced first
2. Each account starts a couple of days before its newest stored transaction
3. Progress is streamed as Server-Sent Events
4. A failing account does not stop the run; a sync already running does
""",
    },
    {
        "name": "Duplicates",
        "description": """Detection and resolution of duplicated transactions.

**Actions:**
- `keep_first` / `keep_second`: delete the other transaction
- `not_duplicate`: keep both and never suggest the pair again
""",
    },
    {
        "name": "Health",
        "description": "Liveness probe for monitoring.",
    },
]


@asynccontextmanager
async def lifespan(_: FastAPI) -> AsyncIterator[None]:
    logger.info("finsync API %s starting", API_VERSION)
    await _ensure_schema()
    yield
    logger.info("finsync API stopping")
    await dispose_engine()
    logger.info("Engine disposed")


async def _ensure_schema() -> None:
    """Create missing tables; exit if the database is unreachable."""
    try:
        await create_tables(get_engine())
    except ConnectionRefusedError:
        logger.critical("Database refused the connection, giving up.")
        raise SystemExit(1) from None


def build_v1_router() -> APIRouter:
    router = APIRouter()
    router.include_router(sync_router, prefix="/sync", tags=["Sync"])
    router.include_router(duplicates_router, prefix="/duplicates", tags=["Duplicates"])
    return router


def create_app(settings: Settings | None = None) -> FastAPI:
    """Assemble the application.

    Parameters
    ----------
    settings
        Settings to use instead of the cached environment settings.

    Returns
    -------
    The FastAPI app with CORS, error handlers and all routers mounted.
    """
    _setup_logging()
    settings = settings or get_settings()
    debug = settings.api_debug

    app = FastAPI(
        title=f"{settings.app_name} API",
        description="Sync orchestration and duplicate resolution for finsync.",
        version=API_VERSION,
        lifespan=lifespan,
        openapi_tags=OPENAPI_TAGS,
        # interactive docs only in debug mode
        docs_url="/docs" if debug else None,
        redoc_url="/redoc" if debug else None,
        openapi_url="/openapi.json" if debug else None,
    )
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    setup_exception_handlers(app)
    app.include_router(build_v1_router(), prefix=API_V1_PREFIX)

    @app.get("/health", tags=["Health"])
    async def health() -> dict:
        return {
            "status": "healthy",
            "version": API_VERSION,
            "api_versions": ["v1"],
        }

    return app
