"""Port for turning raw stream bytes into protocol events."""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional

from finsync.domain.sync.value_objects import ProtocolEvent

DEFAULT_EVENT_TAG = "message"


@dataclass(frozen=True)
class RawFrame:
    """One blank-line delimited frame before JSON decoding."""

    tag: str
    data: str


class EventStreamDecoder(ABC):
    """Incremental decoder for one session's byte stream.

    ``feed`` may be called with arbitrary chunk boundaries. Decoding a frame
    into an event is a separate step so one malformed frame never affects
    the frames around it.
    """

    @abstractmethod
    def feed(self, chunk: bytes) -> list[RawFrame]:
        """Buffer ``chunk`` and return every frame it completed."""

    @abstractmethod
    def finish(self) -> list[RawFrame]:
        """Flush the trailing unterminated frame at end of stream."""

    @abstractmethod
    def decode(self, frame: RawFrame) -> Optional[ProtocolEvent]:
        """
        Decode one frame.

        Returns
        -------
        The event, or None for tags this client does not know

        Raises
        ------
        ProtocolFrameError
            If the payload is not valid JSON or misses required fields
        """
