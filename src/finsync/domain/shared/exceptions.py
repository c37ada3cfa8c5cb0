"""Error codes and the exception base classes used across finsync.

The API translates any DomainException subclass into an HTTP error, so new
errors should derive from one of the classes below.
"""

from enum import Enum
from typing import Any


class ErrorCode(str, Enum):
    """Machine-readable codes returned in the ``code`` field of API errors.

    Clients depend on these strings; renaming one is a breaking change.
    """

    # 400
    VALIDATION_ERROR = "VALIDATION_ERROR"
    INVALID_DATE = "INVALID_DATE"
    INVALID_RESOLUTION_ACTION = "INVALID_RESOLUTION_ACTION"
    FORCE_STOP_NOT_CONFIRMED = "FORCE_STOP_NOT_CONFIRMED"

    # 404
    ENTITY_NOT_FOUND = "ENTITY_NOT_FOUND"
    DUPLICATE_NOT_FOUND = "DUPLICATE_NOT_FOUND"

    # 409
    CONFLICT = "CONFLICT"
    DUPLICATE_ALREADY_RESOLVED = "DUPLICATE_ALREADY_RESOLVED"
    CONCURRENCY_ERROR = "CONCURRENCY_ERROR"

    # 422
    BUSINESS_RULE_VIOLATION = "BUSINESS_RULE_VIOLATION"
    ILLEGAL_STATE_TRANSITION = "ILLEGAL_STATE_TRANSITION"

    # sync endpoint and session failures
    TRANSPORT_ERROR = "TRANSPORT_ERROR"
    PROTOCOL_FRAME_ERROR = "PROTOCOL_FRAME_ERROR"
    PROTOCOL_ERROR = "PROTOCOL_ERROR"
    VENDOR_ERROR = "VENDOR_ERROR"
    SYNC_CANCELLED = "SYNC_CANCELLED"
    SYNC_START_FAILED = "SYNC_START_FAILED"
    FORCE_STOP_FAILED = "FORCE_STOP_FAILED"

    # anything unexpected
    INTERNAL_ERROR = "INTERNAL_ERROR"


class DomainException(Exception):  # NOQA: N818
    """Root of every error finsync raises on purpose.

    ``message`` may be shown to users as is. ``code`` is what clients branch
    on. ``details`` carries extra context for the logs and never reaches an
    HTTP response body.
    """

    default_code: ErrorCode = ErrorCode.INTERNAL_ERROR

    def __init__(
        self,
        message: str,
        code: ErrorCode | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code or self.default_code
        self.details = dict(details) if details else {}

    def __str__(self) -> str:
        return self.message

    def __repr__(self) -> str:
        name = type(self).__name__
        return f"{name}({self.message!r}, code={self.code.value}, details={self.details!r})"


class ValidationError(DomainException):
    """Input is malformed or out of range."""

    default_code = ErrorCode.VALIDATION_ERROR


class BusinessRuleViolation(DomainException):
    default_code = ErrorCode.BUSINESS_RULE_VIOLATION


class EntityNotFoundError(DomainException):
    default_code = ErrorCode.ENTITY_NOT_FOUND


class ConflictError(DomainException):
    """The requested change clashes with what is already stored."""

    default_code = ErrorCode.CONFLICT
