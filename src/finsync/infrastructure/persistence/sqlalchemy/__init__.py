"""SQLAlchemy persistence layer."""

from finsync.infrastructure.persistence.sqlalchemy.database import (
    build_engine,
    create_tables,
    dispose_engine,
    get_engine,
    get_session_maker,
    session_scope,
)
from finsync.infrastructure.persistence.sqlalchemy.repositories import (
    AccountDirectorySQLAlchemy,
    DuplicateRepositorySQLAlchemy,
    TransactionDateLookupSQLAlchemy,
)

__all__ = [
    "AccountDirectorySQLAlchemy",
    "DuplicateRepositorySQLAlchemy",
    "TransactionDateLookupSQLAlchemy",
    "build_engine",
    "create_tables",
    "dispose_engine",
    "get_engine",
    "get_session_maker",
    "session_scope",
]
