"""Integration fixtures shared by the persistence and API tests."""

from tests.shared.fixtures.database import (  # noqa: F401
    db_session,
    postgres_container,
    postgres_engine,
    postgres_session,
    sqlite_engine,
)
