"""Duplicate repositories."""

from finsync.domain.duplicates.repositories.duplicate_repository import (
    DuplicateRepository,
)

__all__ = ["DuplicateRepository"]
