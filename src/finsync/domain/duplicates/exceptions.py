"""Duplicate resolution exceptions."""

from finsync.domain.duplicates.value_objects.duplicate_pair import (
    DuplicatePair,
    TransactionRef,
)
from finsync.domain.shared.exceptions import (
    ConflictError,
    DomainException,
    EntityNotFoundError,
    ErrorCode,
    ValidationError,
)


class DuplicateError(DomainException):
    """Base exception for duplicate resolution errors."""


class DuplicateNotFoundError(EntityNotFoundError):
    """Raised when a transaction of the pair no longer exists."""

    def __init__(self, ref: TransactionRef) -> None:
        super().__init__(
            message=f"Transaction {ref.identifier} ({ref.vendor}) not found",
            code=ErrorCode.DUPLICATE_NOT_FOUND,
            details=ref.to_dict(),
        )


class DuplicateAlreadyResolvedError(ConflictError):
    """Raised when a pair is resolved a second time."""

    def __init__(self, pair: DuplicatePair) -> None:
        super().__init__(
            message="This duplicate pair has already been resolved",
            code=ErrorCode.DUPLICATE_ALREADY_RESOLVED,
            details={
                "transaction1": pair.first.to_dict(),
                "transaction2": pair.second.to_dict(),
            },
        )


class InvalidResolutionActionError(ValidationError):
    """Raised for an unknown action or one the pair does not allow."""

    def __init__(self, action: str) -> None:
        super().__init__(
            message=(
                f"Invalid action {action!r}. "
                "Use: keep_first, keep_second, not_duplicate"
            ),
            code=ErrorCode.INVALID_RESOLUTION_ACTION,
            details={"action": action},
        )
