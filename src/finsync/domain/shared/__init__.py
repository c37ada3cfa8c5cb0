"""Shared kernel: exceptions and time helpers used by every domain."""

from finsync.domain.shared.exceptions import (
    BusinessRuleViolation,
    ConflictError,
    DomainException,
    EntityNotFoundError,
    ErrorCode,
    ValidationError,
)
from finsync.domain.shared.time import monotonic_seconds, today_local, utc_now

__all__ = [
    "BusinessRuleViolation",
    "ConflictError",
    "DomainException",
    "EntityNotFoundError",
    "ErrorCode",
    "ValidationError",
    "monotonic_seconds",
    "today_local",
    "utc_now",
]
