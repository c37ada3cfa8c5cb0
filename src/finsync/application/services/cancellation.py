"""Cooperative cancellation for one orchestration run."""

from __future__ import annotations

import asyncio
import logging
from typing import Callable, Optional

from finsync.domain.sync.exceptions import SyncCancelledError

logger = logging.getLogger(__name__)


class CancellationToken:
    """Set once by the caller, observed by the orchestrator and the session.

    Waiting on the token is how an in-flight stream read is interrupted:
    the session races its reader against :meth:`wait`.
    """

    def __init__(self) -> None:
        self._event = asyncio.Event()
        self._reason: Optional[str] = None
        self._callbacks: list[Callable[[], None]] = []

    @property
    def is_cancelled(self) -> bool:
        return self._event.is_set()

    @property
    def reason(self) -> Optional[str]:
        return self._reason

    def cancel(self, reason: Optional[str] = None) -> None:
        if self._event.is_set():
            return
        self._reason = reason
        self._event.set()
        logger.info("Sync cancellation requested%s", f": {reason}" if reason else "")
        for callback in self._callbacks:
            try:
                callback()
            except Exception:
                logger.exception("Cancellation callback failed")

    def add_callback(self, callback: Callable[[], None]) -> None:
        """Run ``callback`` on cancellation (immediately if already cancelled)."""
        if self._event.is_set():
            callback()
            return
        self._callbacks.append(callback)

    async def wait(self) -> None:
        await self._event.wait()

    async def sleep(self, seconds: float) -> bool:
        """Sleep up to ``seconds``. Returns True when woken by cancellation."""
        if seconds <= 0:
            return self.is_cancelled
        try:
            await asyncio.wait_for(self._event.wait(), timeout=seconds)
        except asyncio.TimeoutError:
            return False
        return True

    def raise_if_cancelled(self) -> None:
        if self.is_cancelled:
            raise SyncCancelledError(self._reason or "Sync cancelled")
