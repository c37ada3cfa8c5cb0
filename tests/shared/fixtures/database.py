"""Database fixtures for integration tests.

SQLite fixtures run everywhere. The PostgreSQL ones start a container via
Testcontainers and only run with --run-integration.
"""

from collections.abc import AsyncGenerator, Generator
from pathlib import Path

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker
from sqlalchemy.pool import NullPool
from testcontainers.postgres import PostgresContainer

from finsync.infrastructure.persistence.sqlalchemy import build_engine, create_tables
from finsync.infrastructure.persistence.sqlalchemy.models import Base


def sqlite_url(path: Path) -> str:
    return f"sqlite+aiosqlite:///{path}"


@pytest_asyncio.fixture
async def sqlite_engine(tmp_path) -> AsyncGenerator[AsyncEngine, None]:
    """File-backed SQLite engine with the full schema."""
    engine = build_engine(sqlite_url(tmp_path / "finsync.db"), poolclass=NullPool)
    await create_tables(engine)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(sqlite_engine) -> AsyncGenerator[AsyncSession, None]:
    maker = async_sessionmaker(sqlite_engine, expire_on_commit=False)
    async with maker() as session:
        yield session


@pytest.fixture(scope="session")
def postgres_container() -> Generator[PostgresContainer, None, None]:
    """Start a PostgreSQL container for the test session."""
    with PostgresContainer("postgres:18-alpine") as postgres:
        yield postgres


@pytest.fixture(scope="session")
def postgres_engine(postgres_container) -> AsyncEngine:
    # NullPool keeps connections from leaking across event loops
    url = postgres_container.get_connection_url().replace(
        "postgresql+psycopg2://",
        "postgresql+asyncpg://",
    )
    return build_engine(url, poolclass=NullPool)


@pytest_asyncio.fixture
async def postgres_session(postgres_engine) -> AsyncGenerator[AsyncSession, None]:
    """Session against a freshly created schema."""
    async with postgres_engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)

    maker = async_sessionmaker(postgres_engine, expire_on_commit=False)
    async with maker() as session:
        yield session

    async with postgres_engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
