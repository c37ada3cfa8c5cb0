"""Duplicate queries."""

from finsync.application.queries.duplicates.list_duplicates_query import (
    ListDuplicatesQuery,
)

__all__ = ["ListDuplicatesQuery"]
