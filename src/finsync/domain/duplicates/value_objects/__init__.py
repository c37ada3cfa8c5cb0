"""Duplicate value objects."""

from finsync.domain.duplicates.value_objects.duplicate_pair import (
    ALL_ACTIONS,
    EXACT_DUPLICATE_THRESHOLD,
    DuplicatePair,
    DuplicateResolution,
    DuplicateStatus,
    ResolutionAction,
    StoredTransaction,
    TransactionRef,
)

__all__ = [
    "ALL_ACTIONS",
    "EXACT_DUPLICATE_THRESHOLD",
    "DuplicatePair",
    "DuplicateResolution",
    "DuplicateStatus",
    "ResolutionAction",
    "StoredTransaction",
    "TransactionRef",
]
