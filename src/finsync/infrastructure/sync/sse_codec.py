"""Incremental decoder for the ``text/event-stream`` sync protocol.

Reads may split a frame, a line, or even a UTF-8 sequence anywhere, so
bytes are buffered until a full line is available and lines are buffered
until a blank line closes the frame.
"""

from __future__ import annotations

import codecs
import json
import logging
from typing import Optional

from pydantic import ValidationError as PydanticValidationError

from finsync.domain.sync.exceptions import ProtocolFrameError
from finsync.domain.sync.ports import DEFAULT_EVENT_TAG, EventStreamDecoder, RawFrame
from finsync.domain.sync.value_objects import ProtocolEvent
from finsync.infrastructure.sync.wire_models import PAYLOAD_MODELS

logger = logging.getLogger(__name__)


class SSEDecoder(EventStreamDecoder):
    """Split a byte stream into frames and decode frames into events."""

    def __init__(self) -> None:
        self._utf8 = codecs.getincrementaldecoder("utf-8")(errors="replace")
        self._buffer = ""
        self._tag: Optional[str] = None
        self._data: list[str] = []

    def feed(self, chunk: bytes) -> list[RawFrame]:
        self._buffer += self._utf8.decode(chunk)
        return self._drain_lines()

    def finish(self) -> list[RawFrame]:
        self._buffer += self._utf8.decode(b"", final=True)
        frames = self._drain_lines()
        if self._buffer:
            # Last line without a newline
            self._process_line(self._buffer.rstrip("\r"), frames)
            self._buffer = ""
        self._dispatch(frames)
        return frames

    def decode(self, frame: RawFrame) -> Optional[ProtocolEvent]:
        model = PAYLOAD_MODELS.get(frame.tag)
        if model is None:
            logger.debug("Ignoring frame with unknown tag %r", frame.tag)
            return None
        try:
            payload = json.loads(frame.data)
        except json.JSONDecodeError as e:
            msg = f"Invalid JSON in {frame.tag} frame: {e.msg}"
            raise ProtocolFrameError(msg, raw=frame.data) from e
        if not isinstance(payload, dict):
            msg = f"Expected a JSON object in {frame.tag} frame"
            raise ProtocolFrameError(msg, raw=frame.data)
        try:
            return model.model_validate(payload).to_event()
        except (PydanticValidationError, ValueError) as e:
            msg = f"Invalid {frame.tag} payload: {e}"
            raise ProtocolFrameError(msg, raw=frame.data) from e

    def _drain_lines(self) -> list[RawFrame]:
        frames: list[RawFrame] = []
        while True:
            index = self._next_line_end()
            if index is None:
                return frames
            line = self._buffer[:index]
            # CRLF counts as one terminator
            step = 2 if self._buffer.startswith("\r\n", index) else 1
            self._buffer = self._buffer[index + step :]
            self._process_line(line, frames)

    def _next_line_end(self) -> Optional[int]:
        ends = [i for i in (self._buffer.find("\n"), self._buffer.find("\r")) if i >= 0]
        if not ends:
            return None
        index = min(ends)
        # A trailing CR may be the first half of a CRLF split across reads
        if self._buffer[index] == "\r" and index == len(self._buffer) - 1:
            return None
        return index

    def _process_line(self, line: str, frames: list[RawFrame]) -> None:
        if line == "":
            self._dispatch(frames)
            return
        if line.startswith(":"):
            return
        field, _, value = line.partition(":")
        if value.startswith(" "):
            value = value[1:]
        if field == "event":
            self._tag = value
        elif field == "data":
            self._data.append(value)

    def _dispatch(self, frames: list[RawFrame]) -> None:
        if self._data:
            frames.append(
                RawFrame(tag=self._tag or DEFAULT_EVENT_TAG, data="\n".join(self._data)),
            )
        self._tag = None
        self._data = []


def encode_frame(tag: str, data: dict) -> str:
    """Serialize one frame the way the remote endpoint does."""
    return f"event: {tag}\ndata: {json.dumps(data)}\n\n"
