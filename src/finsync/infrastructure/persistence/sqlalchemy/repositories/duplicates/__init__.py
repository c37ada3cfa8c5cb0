"""Duplicate repository implementations."""

from finsync.infrastructure.persistence.sqlalchemy.repositories.duplicates.duplicate_repository_sqlalchemy import (  # NOQA: E501
    DuplicateRepositorySQLAlchemy,
)

__all__ = ["DuplicateRepositorySQLAlchemy"]
