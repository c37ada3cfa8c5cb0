"""Port for the remote streamed sync endpoint."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import date
from typing import Any, AsyncContextManager, AsyncIterator, Optional


@dataclass(frozen=True)
class SyncRequest:
    """Parameters of one streamed sync request."""

    account_id: str
    vendor: str
    start_date: date
    credential_ref: Optional[str] = None
    options: dict[str, Any] = field(default_factory=dict)

    def to_payload(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "accountId": self.account_id,
            "vendor": self.vendor,
            "startDate": self.start_date.isoformat(),
            "options": dict(self.options),
        }
        if self.credential_ref is not None:
            payload["credentialId"] = self.credential_ref
        return payload


class SyncEndpoint(ABC):
    """Remote side that runs the vendor scrape and streams its progress.

    ``open_stream`` raises ``SyncConcurrencyError`` when the remote side
    refuses because a sync is already active, and ``TransportError`` for
    any other failure to obtain a stream. Leaving the context closes the
    underlying request, which is how cancellation aborts an in-flight sync.
    """

    @abstractmethod
    def open_stream(self, request: SyncRequest) -> AsyncContextManager[AsyncIterator[bytes]]:
        """Open the event stream for one account sync."""

    @abstractmethod
    async def force_stop(self) -> None:
        """Terminate every stuck remote sync process."""
