"""Derived view over ``network`` events: is the remote side currently waiting?"""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass
from typing import Callable, Optional

from finsync.domain.shared.time import monotonic_seconds
from finsync.domain.sync.value_objects import NetworkEvent, NetworkEventKind

_DEFAULT_WAIT_MESSAGES = {
    NetworkEventKind.RATE_LIMIT_WAIT: "Rate limit wait...",
    NetworkEventKind.RETRY_WAIT: "Retrying...",
}


@dataclass(frozen=True)
class WaitState:
    """The single wait currently in effect."""

    kind: NetworkEventKind
    message: str
    total_seconds: float
    started_at: float

    def elapsed_seconds(self, now: float) -> float:
        return max(0.0, now - self.started_at)

    def remaining_seconds(self, now: float) -> float:
        return max(0.0, self.total_seconds - self.elapsed_seconds(now))

    def to_dict(self) -> dict:
        return {
            "kind": self.kind.value,
            "message": self.message,
            "total_seconds": self.total_seconds,
        }


class RateLimitMonitor:
    """Track the most recent rate-limit/retry wait and a short network log.

    Holds only the latest wait; a new wait replaces the previous one.
    """

    NETWORK_LOG_SIZE = 50

    def __init__(self, clock: Callable[[], float] = monotonic_seconds):
        self._clock = clock
        self._current: Optional[WaitState] = None
        self._log: deque[NetworkEvent] = deque(maxlen=self.NETWORK_LOG_SIZE)

    @property
    def current_wait(self) -> Optional[WaitState]:
        return self._current

    @property
    def is_waiting(self) -> bool:
        return self._current is not None

    @property
    def network_log(self) -> tuple[NetworkEvent, ...]:
        """Recent network events, newest first."""
        return tuple(self._log)

    def remaining_seconds(self) -> float:
        if self._current is None:
            return 0.0
        return self._current.remaining_seconds(self._clock())

    def observe(self, event: NetworkEvent) -> Optional[WaitState]:
        if event.kind is not NetworkEventKind.RATE_LIMIT_FINISHED:
            self._log.appendleft(event)

        if event.kind.is_wait and event.seconds and event.seconds > 0:
            self._current = WaitState(
                kind=event.kind,
                message=event.message or _DEFAULT_WAIT_MESSAGES[event.kind],
                total_seconds=float(event.seconds),
                started_at=self._clock(),
            )
        elif event.kind.ends_wait:
            self._current = None

        return self._current

    def reset(self) -> None:
        self._current = None
        self._log.clear()
