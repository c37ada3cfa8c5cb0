"""Duplicate schemas for API request/response models."""

from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel, Field

from finsync.domain.duplicates.value_objects import TransactionRef


class TransactionRefSchema(BaseModel):
    identifier: str
    vendor: str

    def to_domain(self) -> TransactionRef:
        return TransactionRef(identifier=self.identifier, vendor=self.vendor)


class DuplicatePairResponse(BaseModel):
    transaction1: TransactionRefSchema
    transaction2: TransactionRefSchema
    similarity: float
    allowed_actions: list[str]
    first_date: Optional[date] = Field(default=None, alias="date")
    name: Optional[str] = None


class DuplicateResolutionResponse(BaseModel):
    transaction1: TransactionRefSchema
    transaction2: TransactionRefSchema
    similarity: float
    status: str
    resolved_action: Optional[str] = None
    resolved_at: Optional[datetime] = None


class DuplicateSummaryResponse(BaseModel):
    detected_count: int
    pending_count: int
    resolved_count: int


class DuplicateListResponse(BaseModel):
    """Unresolved candidates plus the tracked history."""

    detected: list[DuplicatePairResponse]
    tracked: list[DuplicateResolutionResponse]
    summary: DuplicateSummaryResponse


class ResolveDuplicateRequest(BaseModel):
    """Resolve one pair.

    ``action`` is one of keep_first, keep_second or not_duplicate
    (delete_second and delete_first are accepted as aliases).
    """

    transaction1: TransactionRefSchema
    transaction2: TransactionRefSchema
    action: str
    similarity: float = Field(..., ge=0.0, le=1.0)


class ResolveDuplicateResponse(BaseModel):
    success: bool
    action: str
    resolved_action: str
    deleted: Optional[TransactionRefSchema] = None
    marked_as_not_duplicate: bool


class AutoResolveResponse(BaseModel):
    dry_run: bool
    candidates: int
    deleted_count: int
    deleted: list[TransactionRefSchema] = Field(default_factory=list)
    would_delete: list[TransactionRefSchema] = Field(default_factory=list)
    skipped: int
