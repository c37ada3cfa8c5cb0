"""Pure state machine for one streamed sync session.

Knows nothing about transports or rendering: it is fed protocol events and
reports the resulting state. Events arriving after a terminal state are
ignored so a finished session can never change its outcome.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from finsync.domain.sync.exceptions import IllegalStateTransitionError
from finsync.domain.sync.value_objects import (
    ALLOWED_TRANSITIONS,
    CompleteEvent,
    ErrorEvent,
    NetworkEvent,
    ProgressEvent,
    ProtocolEvent,
    SyncSessionState,
    TerminalEvent,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StepRecord:
    """A resolved step (success or failure) in the session history."""

    step: str
    message: str
    success: bool
    phase: Optional[str] = None


class SessionStateMachine:
    """Translate protocol events into session state transitions."""

    def __init__(self) -> None:
        self._state = SyncSessionState.IDLE
        self._percent = 0.0
        self._last_progress: Optional[ProgressEvent] = None
        self._terminal_event: Optional[TerminalEvent] = None
        self._steps: list[StepRecord] = []
        self._failure_reason: Optional[str] = None

    @property
    def state(self) -> SyncSessionState:
        return self._state

    @property
    def percent(self) -> float:
        return self._percent

    @property
    def is_terminal(self) -> bool:
        return self._state.is_terminal

    @property
    def last_progress(self) -> Optional[ProgressEvent]:
        return self._last_progress

    @property
    def terminal_event(self) -> Optional[TerminalEvent]:
        return self._terminal_event

    @property
    def step_history(self) -> tuple[StepRecord, ...]:
        return tuple(self._steps)

    @property
    def failure_reason(self) -> Optional[str]:
        return self._failure_reason

    def transition_to(self, target: SyncSessionState) -> None:
        if target == self._state:
            return
        if target not in ALLOWED_TRANSITIONS[self._state]:
            raise IllegalStateTransitionError(self._state.value, target.value)
        logger.debug("Session state %s -> %s", self._state.value, target.value)
        self._state = target

    def start(self) -> None:
        """Request issued."""
        self.transition_to(SyncSessionState.STARTING)

    def apply(self, event: ProtocolEvent) -> bool:
        """Feed one protocol event. Returns False when the event was ignored."""
        if self.is_terminal:
            logger.debug(
                "Ignoring %s after terminal state %s",
                type(event).__name__,
                self._state.value,
            )
            return False

        if isinstance(event, ProgressEvent):
            self._apply_progress(event)
        elif isinstance(event, NetworkEvent):
            self._apply_network(event)
        elif isinstance(event, CompleteEvent):
            self._percent = 100.0
            self._terminal_event = event
            self.transition_to(SyncSessionState.COMPLETED)
        elif isinstance(event, ErrorEvent):
            self._terminal_event = event
            self._failure_reason = event.message
            self.transition_to(SyncSessionState.FAILED)
        else:
            return False
        return True

    def fail(self, reason: str) -> bool:
        """Fail from outside the protocol (transport error, truncated stream)."""
        if self.is_terminal:
            return False
        self._failure_reason = reason
        self.transition_to(SyncSessionState.FAILED)
        return True

    def cancel(self) -> bool:
        if self.is_terminal:
            return False
        self.transition_to(SyncSessionState.CANCELLED)
        return True

    def _apply_progress(self, event: ProgressEvent) -> None:
        if self._state is SyncSessionState.STARTING:
            self.transition_to(SyncSessionState.RUNNING)

        percent = min(max(event.percent, 0.0), 100.0)
        if percent < self._percent:
            logger.debug(
                "Progress went backwards (%.1f < %.1f) at step %s; keeping %.1f",
                percent,
                self._percent,
                event.step,
                self._percent,
            )
        self._percent = max(self._percent, percent)
        self._last_progress = event

        if event.success is None:
            return
        if self._steps and self._steps[-1].step == event.step:
            return
        self._steps.append(
            StepRecord(
                step=event.step,
                message=event.message,
                success=event.success,
                phase=event.phase,
            ),
        )

    def _apply_network(self, event: NetworkEvent) -> None:
        if event.kind.is_wait and event.seconds and event.seconds > 0:
            self.transition_to(SyncSessionState.WAITING_BACKOFF)
        elif (
            event.kind.ends_wait
            and self._state is SyncSessionState.WAITING_BACKOFF
        ):
            self.transition_to(SyncSessionState.RUNNING)
