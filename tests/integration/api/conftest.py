"""Pytest fixtures for API integration tests.

The app runs against a SQLite file and a fake sync endpoint. Clients are
created without entering the lifespan, so no PostgreSQL is needed.
"""

from collections.abc import Callable, Generator

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from sqlalchemy.orm import Session
from sqlalchemy.pool import NullPool

from finsync.infrastructure.persistence.sqlalchemy import build_engine
from finsync.infrastructure.persistence.sqlalchemy.models import Base
from finsync.presentation.api.app import API_V1_PREFIX, create_app
from finsync.presentation.api.dependencies import (
    get_session_factory,
    get_sync_endpoint,
)
from finsync_config.settings import Settings, get_settings
from tests.shared.fakes import FakeSyncEndpoint
from tests.shared.fixtures.database import sqlite_url


@pytest.fixture
def api_v1_prefix() -> str:
    return API_V1_PREFIX


@pytest.fixture
def database_path(tmp_path):
    return tmp_path / "api.db"


@pytest.fixture
def api_settings(database_path) -> Settings:
    """Test API settings with debug enabled and no vendor delays."""
    return Settings(
        _env_file=None,
        database_url_override=sqlite_url(database_path),
        api_debug=True,
        api_cors_origins="http://localhost:5173",
        sync_rate_limited_vendors_csv="",
        sync_vendor_delay_min_seconds=0.0,
        sync_vendor_delay_max_seconds=0.0,
    )


@pytest.fixture
def seed(database_path) -> Generator[Callable[..., None], None, None]:
    """Create the schema and return a helper that inserts rows."""
    engine = create_engine(f"sqlite:///{database_path}")
    Base.metadata.create_all(engine)

    def _seed(*rows) -> None:
        with Session(engine) as session:
            session.add_all(rows)
            session.commit()

    yield _seed
    engine.dispose()


@pytest.fixture
def fake_endpoint() -> FakeSyncEndpoint:
    return FakeSyncEndpoint()


@pytest.fixture
def test_client(api_settings, seed, fake_endpoint) -> TestClient:
    app = create_app(settings=api_settings)
    engine = build_engine(api_settings.database_url, poolclass=NullPool)
    session_factory = async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )

    app.dependency_overrides[get_session_factory] = lambda: session_factory
    app.dependency_overrides[get_sync_endpoint] = lambda: fake_endpoint
    app.dependency_overrides[get_settings] = lambda: api_settings

    return TestClient(app)
