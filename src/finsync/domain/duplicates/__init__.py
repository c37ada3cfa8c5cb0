"""Duplicate transaction domain."""

from finsync.domain.duplicates.exceptions import (
    DuplicateAlreadyResolvedError,
    DuplicateError,
    DuplicateNotFoundError,
    InvalidResolutionActionError,
)

__all__ = [
    "DuplicateAlreadyResolvedError",
    "DuplicateError",
    "DuplicateNotFoundError",
    "InvalidResolutionActionError",
]
