"""Duplicate domain services."""

from finsync.domain.duplicates.services.duplicate_detector import (
    DuplicateDetector,
    similarity,
)

__all__ = ["DuplicateDetector", "similarity"]
