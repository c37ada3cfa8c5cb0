"""Translate domain errors into JSON error bodies.

Every failure the API reports has the shape ``{"detail": ..., "code": ...}``
where ``code`` is an ``ErrorCode`` value clients can switch on.
"""

import logging

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from finsync.domain.shared.exceptions import (
    BusinessRuleViolation,
    ConflictError,
    DomainException,
    EntityNotFoundError,
    ErrorCode,
    ValidationError,
)
from finsync.domain.sync.exceptions import SyncError

logger = logging.getLogger(__name__)

_BAD_REQUEST = status.HTTP_400_BAD_REQUEST
_NOT_FOUND = status.HTTP_404_NOT_FOUND
_CONFLICT = status.HTTP_409_CONFLICT
_UNPROCESSABLE = status.HTTP_422_UNPROCESSABLE_ENTITY
_BAD_GATEWAY = status.HTTP_502_BAD_GATEWAY
_UNAVAILABLE = status.HTTP_503_SERVICE_UNAVAILABLE

STATUS_BY_CODE: dict[ErrorCode, int] = {
    ErrorCode.VALIDATION_ERROR: _BAD_REQUEST,
    ErrorCode.INVALID_DATE: _BAD_REQUEST,
    ErrorCode.INVALID_RESOLUTION_ACTION: _BAD_REQUEST,
    ErrorCode.FORCE_STOP_NOT_CONFIRMED: _BAD_REQUEST,
    ErrorCode.ENTITY_NOT_FOUND: _NOT_FOUND,
    ErrorCode.DUPLICATE_NOT_FOUND: _NOT_FOUND,
    ErrorCode.CONFLICT: _CONFLICT,
    ErrorCode.DUPLICATE_ALREADY_RESOLVED: _CONFLICT,
    ErrorCode.CONCURRENCY_ERROR: _CONFLICT,
    ErrorCode.SYNC_CANCELLED: _CONFLICT,
    ErrorCode.BUSINESS_RULE_VIOLATION: _UNPROCESSABLE,
    ErrorCode.ILLEGAL_STATE_TRANSITION: _UNPROCESSABLE,
    # the upstream sync endpoint misbehaved
    ErrorCode.TRANSPORT_ERROR: _BAD_GATEWAY,
    ErrorCode.PROTOCOL_FRAME_ERROR: _BAD_GATEWAY,
    ErrorCode.PROTOCOL_ERROR: _BAD_GATEWAY,
    ErrorCode.VENDOR_ERROR: _BAD_GATEWAY,
    ErrorCode.SYNC_START_FAILED: _UNAVAILABLE,
    ErrorCode.FORCE_STOP_FAILED: _UNAVAILABLE,
    ErrorCode.INTERNAL_ERROR: status.HTTP_500_INTERNAL_SERVER_ERROR,
}

# Used for codes added later without a table entry; first match wins.
_STATUS_BY_TYPE: tuple[tuple[type[DomainException], int], ...] = (
    (EntityNotFoundError, _NOT_FOUND),
    (ConflictError, _CONFLICT),
    (ValidationError, _BAD_REQUEST),
    (BusinessRuleViolation, _UNPROCESSABLE),
    (SyncError, _BAD_GATEWAY),
)


def _get_status_for_exception(exc: DomainException) -> int:
    """Look up the HTTP status for ``exc`` by code, then by type."""
    mapped = STATUS_BY_CODE.get(exc.code)
    if mapped is not None:
        return mapped
    for exc_type, status_code in _STATUS_BY_TYPE:
        if isinstance(exc, exc_type):
            return status_code
    return _BAD_REQUEST


def _error_body(status_code: int, detail: str, code: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"detail": detail, "code": code},
    )


def setup_exception_handlers(app: FastAPI) -> None:
    """Install the domain and fallback handlers on ``app``."""

    @app.exception_handler(DomainException)
    async def handle_domain_error(
        request: Request,
        exc: DomainException,
    ) -> JSONResponse:
        # details go to the log only
        logger.warning(
            "%s %s failed with %s: %s %s",
            request.method,
            request.url.path,
            exc.code.value,
            exc.message,
            exc.details,
        )
        return _error_body(
            _get_status_for_exception(exc),
            exc.message,
            exc.code.value,
        )

    @app.exception_handler(Exception)
    async def handle_unexpected_error(
        request: Request,
        exc: Exception,
    ) -> JSONResponse:
        logger.exception(
            "Unexpected failure in %s %s: %s",
            request.method,
            request.url.path,
            exc,
        )
        return _error_body(
            status.HTTP_500_INTERNAL_SERVER_ERROR,
            "An internal error occurred",
            ErrorCode.INTERNAL_ERROR.value,
        )
