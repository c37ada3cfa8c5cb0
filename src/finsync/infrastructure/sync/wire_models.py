"""Pydantic models for the JSON payloads of the sync event stream.

Field names follow the remote endpoint (camelCase); both the older
``type`` and the newer ``kind`` discriminator spellings are accepted.
"""

from datetime import date
from typing import Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field

from finsync.domain.sync.value_objects import (
    CompleteEvent,
    ErrorEvent,
    NetworkEvent,
    NetworkEventKind,
    ProcessedTransaction,
    ProgressEvent,
    SyncSummary,
)

_NETWORK_KIND_ALIASES = {
    "httpRequest": NetworkEventKind.REQUEST,
    "httpResponse": NetworkEventKind.RESPONSE,
}


class _WireModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class ProgressPayload(_WireModel):
    step: str = ""
    message: str = ""
    percent: float = 0.0
    phase: Optional[str] = None
    success: Optional[bool] = None
    completed_steps: list[str] = Field(
        default_factory=list,
        validation_alias=AliasChoices("completedSteps", "completed_steps"),
    )

    def to_event(self) -> ProgressEvent:
        return ProgressEvent(
            step=self.step,
            message=self.message,
            percent=self.percent,
            phase=self.phase,
            success=self.success,
            completed_steps=tuple(self.completed_steps),
        )


class NetworkPayload(_WireModel):
    kind: str = Field(validation_alias=AliasChoices("kind", "type"))
    seconds: Optional[float] = None
    message: Optional[str] = None
    status: Optional[int] = None
    method: Optional[str] = None
    url: Optional[str] = None

    def to_event(self) -> NetworkEvent:
        kind = _NETWORK_KIND_ALIASES.get(self.kind) or NetworkEventKind(self.kind)
        return NetworkEvent(
            kind=kind,
            seconds=self.seconds,
            message=self.message,
            status=self.status,
            method=self.method,
            url=self.url,
        )


class ProcessedTransactionPayload(_WireModel):
    identifier: Optional[str] = None
    card_last4: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("cardLast4", "card_last4"),
    )
    transaction_date: Optional[date] = Field(
        default=None,
        validation_alias=AliasChoices("date", "transactionDate"),
    )
    status: Optional[str] = None


class SummaryPayload(_WireModel):
    accounts: int = 0
    transactions: int = 0
    saved_transactions: int = Field(
        default=0,
        validation_alias=AliasChoices("savedTransactions", "saved_transactions"),
    )
    duplicate_transactions: int = Field(
        default=0,
        validation_alias=AliasChoices("duplicateTransactions", "duplicate_transactions"),
    )
    updated_transactions: int = Field(
        default=0,
        validation_alias=AliasChoices("updatedTransactions", "updated_transactions"),
    )
    bank_transactions: int = Field(
        default=0,
        validation_alias=AliasChoices("bankTransactions", "bank_transactions"),
    )
    skipped_cards: int = Field(
        default=0,
        validation_alias=AliasChoices("skippedCards", "skipped_cards"),
    )
    duration_seconds: Optional[int] = Field(
        default=None,
        validation_alias=AliasChoices("durationSeconds", "duration_seconds"),
    )
    processed_transactions: list[ProcessedTransactionPayload] = Field(
        default_factory=list,
        validation_alias=AliasChoices(
            "processedTransactions",
            "processed_transactions",
        ),
    )

    def to_summary(self) -> SyncSummary:
        return SyncSummary(
            accounts=self.accounts,
            transactions=self.transactions,
            saved_transactions=self.saved_transactions,
            duplicate_transactions=self.duplicate_transactions,
            updated_transactions=self.updated_transactions,
            bank_transactions=self.bank_transactions,
            skipped_cards=self.skipped_cards,
            duration_seconds=self.duration_seconds,
            processed_transactions=tuple(
                ProcessedTransaction(
                    identifier=tx.identifier,
                    card_last4=tx.card_last4,
                    transaction_date=tx.transaction_date,
                    status=tx.status,
                )
                for tx in self.processed_transactions
            ),
        )


class CompletePayload(_WireModel):
    message: Optional[str] = None
    summary: SummaryPayload = Field(default_factory=SummaryPayload)

    def to_event(self) -> CompleteEvent:
        return CompleteEvent(summary=self.summary.to_summary(), message=self.message)


class ErrorPayload(_WireModel):
    message: str = "Unknown error"
    kind: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("kind", "type"),
    )
    hint: Optional[str] = None
    attempts_made: Optional[int] = Field(
        default=None,
        validation_alias=AliasChoices("attemptsMade", "attempts_made"),
    )

    def to_event(self) -> ErrorEvent:
        return ErrorEvent(
            message=self.message,
            kind=self.kind,
            hint=self.hint,
            attempts_made=self.attempts_made,
        )


PAYLOAD_MODELS: dict[str, type[_WireModel]] = {
    "progress": ProgressPayload,
    "network": NetworkPayload,
    "complete": CompletePayload,
    "error": ErrorPayload,
}
