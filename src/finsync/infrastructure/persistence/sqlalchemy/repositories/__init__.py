"""SQLAlchemy repository implementations."""

from finsync.infrastructure.persistence.sqlalchemy.repositories.duplicates import (
    DuplicateRepositorySQLAlchemy,
)
from finsync.infrastructure.persistence.sqlalchemy.repositories.sync import (
    AccountDirectorySQLAlchemy,
    TransactionDateLookupSQLAlchemy,
)

__all__ = [
    "AccountDirectorySQLAlchemy",
    "DuplicateRepositorySQLAlchemy",
    "TransactionDateLookupSQLAlchemy",
]
