"""API request/response schemas."""

from finsync.presentation.api.schemas.duplicates import (
    AutoResolveResponse,
    DuplicateListResponse,
    DuplicatePairResponse,
    DuplicateResolutionResponse,
    ResolveDuplicateRequest,
    ResolveDuplicateResponse,
    TransactionRefSchema,
)
from finsync.presentation.api.schemas.sync import (
    AccountCatchUpResponse,
    CatchUpPlanResponse,
    ForceStopRequest,
    ForceStopResponse,
    SyncRunRequest,
)

__all__ = [
    "AccountCatchUpResponse",
    "AutoResolveResponse",
    "CatchUpPlanResponse",
    "DuplicateListResponse",
    "DuplicatePairResponse",
    "DuplicateResolutionResponse",
    "ForceStopRequest",
    "ForceStopResponse",
    "ResolveDuplicateRequest",
    "ResolveDuplicateResponse",
    "SyncRunRequest",
    "TransactionRefSchema",
]
