"""Terminate stuck remote sync processes."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime

from finsync.domain.shared.time import utc_now
from finsync.domain.sync.exceptions import (
    ForceStopFailedError,
    ForceStopNotConfirmedError,
    TransportError,
)
from finsync.domain.sync.ports import SyncEndpoint

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ForceStopResult:
    """Result of a confirmed force-stop."""

    message: str
    stopped_at: datetime = field(default_factory=utc_now)

    def to_dict(self) -> dict:
        return {
            "success": True,
            "message": self.message,
            "stopped_at": self.stopped_at.isoformat(),
        }


class ForceStopCommand:
    """Ask the remote side to kill every running sync.

    Destructive for whatever the remote side is doing, so the caller must
    confirm explicitly.
    """

    def __init__(self, endpoint: SyncEndpoint):
        self._endpoint = endpoint

    async def execute(self, confirmed: bool = False) -> ForceStopResult:
        if not confirmed:
            raise ForceStopNotConfirmedError()
        logger.warning("Force-stopping all remote sync processes")
        try:
            await self._endpoint.force_stop()
        except TransportError as e:
            raise ForceStopFailedError(
                f"Force-stop failed: {e.message}",
                status_code=e.status_code,
            ) from e
        return ForceStopResult(message="All running syncs were stopped")
