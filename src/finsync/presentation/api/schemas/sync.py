"""Sync schemas for API request/response models."""

from datetime import date, datetime
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field

from finsync.domain.sync.value_objects import CheckpointMode


class SyncRunRequest(BaseModel):
    """Request schema for a streamed sync run.

    All fields are optional. Without a body every active account is synced
    in catch-up mode.
    """

    mode: CheckpointMode = Field(
        default=CheckpointMode.CATCH_UP,
        description="How each account's start date is chosen",
    )
    days_back: Optional[int] = Field(
        default=None,
        ge=0,
        le=730,
        description="Window size for fixed_lookback mode (max 2 years)",
    )
    account_ids: Optional[list[str]] = Field(
        default=None,
        description="Sync only these accounts (default: all active accounts)",
    )
    vendor_delay: bool = Field(
        default=True,
        description="Pause before vendors known to rate-limit",
    )
    options: dict[str, Any] = Field(
        default_factory=dict,
        description="Passed through to the sync endpoint unchanged",
    )

    model_config = ConfigDict(
        json_schema_extra={
            "examples": [
                {"summary": "Catch up every account", "value": {}},
                {
                    "summary": "Last 30 days for one account",
                    "value": {
                        "mode": "fixed_lookback",
                        "days_back": 30,
                        "account_ids": ["cred-1"],
                    },
                },
            ],
        },
    )


class AccountCatchUpResponse(BaseModel):
    account_id: str
    vendor: str
    nickname: str
    last_transaction_date: Optional[date] = None
    sync_from_date: date
    days_to_sync: int
    source: str
    is_first_sync: bool


class CatchUpPlanResponse(BaseModel):
    """Where the next catch-up run would start, per account."""

    accounts: list[AccountCatchUpResponse]
    total_accounts: int
    has_first_sync_accounts: bool
    today: date


class ForceStopRequest(BaseModel):
    confirm: bool = Field(
        default=False,
        description="Must be true; stopping aborts whatever the endpoint is doing",
    )


class ForceStopResponse(BaseModel):
    success: bool = True
    message: str
    stopped_at: datetime
