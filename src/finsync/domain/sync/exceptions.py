"""Sync domain exceptions.

These cover everything that can go wrong while streaming a sync from the
remote endpoint. Only SyncConcurrencyError and cancellation halt a whole
orchestration run; the rest are folded into per-account outcomes.
"""

from typing import Any, Optional

from finsync.domain.shared.exceptions import (
    BusinessRuleViolation,
    DomainException,
    ErrorCode,
    ValidationError,
)


class SyncError(DomainException):
    """Base exception for sync errors."""


class TransportError(SyncError):
    """Raised when the sync endpoint cannot be reached or the stream breaks."""

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        merged = dict(details or {})
        if status_code is not None:
            merged["status_code"] = status_code
        super().__init__(message, ErrorCode.TRANSPORT_ERROR, merged)
        self.status_code = status_code


class ProtocolFrameError(SyncError):
    """Raised for a single malformed event-stream frame."""

    def __init__(self, message: str, raw: str = "") -> None:
        super().__init__(
            message,
            ErrorCode.PROTOCOL_FRAME_ERROR,
            {"raw": raw[:200]} if raw else None,
        )
        self.raw = raw


class VendorSyncError(SyncError):
    """Raised when the vendor side reports a failure (login, scrape, save)."""

    def __init__(
        self,
        message: str,
        hint: Optional[str] = None,
        attempts_made: Optional[int] = None,
    ) -> None:
        super().__init__(
            message,
            ErrorCode.VENDOR_ERROR,
            {"hint": hint, "attempts_made": attempts_made},
        )
        self.hint = hint
        self.attempts_made = attempts_made


class SyncConcurrencyError(SyncError):
    """Raised when the remote side already runs a sync for this account.

    Never retried automatically: a force-stop has to be confirmed first.
    """

    def __init__(
        self,
        message: str = "Another sync is already running",
        account_id: Optional[str] = None,
    ) -> None:
        super().__init__(
            message,
            ErrorCode.CONCURRENCY_ERROR,
            {"account_id": account_id} if account_id else None,
        )
        self.account_id = account_id


class SyncCancelledError(SyncError):
    """Raised when a caller cancels a sync. Not a failure."""

    def __init__(self, message: str = "Sync cancelled") -> None:
        super().__init__(message, ErrorCode.SYNC_CANCELLED)


class IllegalStateTransitionError(BusinessRuleViolation):
    """Raised when a session state machine is driven out of a terminal state."""

    def __init__(self, current: str, target: str) -> None:
        super().__init__(
            f"Illegal sync state transition: {current} -> {target}",
            ErrorCode.ILLEGAL_STATE_TRANSITION,
            {"current": current, "target": target},
        )


class OrchestrationStartError(SyncError):
    """Raised when the very first account's session cannot be started."""

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(message, ErrorCode.SYNC_START_FAILED, details)


class InvalidCheckpointPolicyError(ValidationError):
    """Raised for negative overlap/fallback/lookback windows."""

    def __init__(self, field: str, value: int) -> None:
        super().__init__(
            f"{field} must be zero or positive, got {value}",
            ErrorCode.VALIDATION_ERROR,
            {"field": field, "value": value},
        )


class ForceStopNotConfirmedError(ValidationError):
    """Raised when a force-stop is requested without explicit confirmation."""

    def __init__(self) -> None:
        super().__init__(
            "Force-stop terminates every running remote sync and must be confirmed",
            ErrorCode.FORCE_STOP_NOT_CONFIRMED,
        )


class ForceStopFailedError(SyncError):
    """Raised when the remote side could not be told to stop."""

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(
            message,
            ErrorCode.FORCE_STOP_FAILED,
            {"status_code": status_code} if status_code is not None else None,
        )
        self.status_code = status_code
