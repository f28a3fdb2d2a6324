"""HTTP/3 frames."""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum
from typing import Any

from wtserver import quicvarint


class FrameType(IntEnum):
    """HTTP/3 frame types."""

    DATA = 0x00
    HEADERS = 0x01
    CANCEL_PUSH = 0x03
    SETTINGS = 0x04
    PUSH_PROMISE = 0x05
    GOAWAY = 0x07
    MAX_PUSH_ID = 0x0D
    WEBTRANSPORT_STREAM = 0x41


@dataclass
class Frame:
    """An HTTP/3 frame.

    For WEBTRANSPORT_STREAM frames the second varint on the wire is the
    request session ID and the frame carries no payload; for every other
    type it is the payload length. A length left as None is taken from data.
    """

    type: int
    session_id: int = 0
    length: int | None = None
    data: bytes = b""

    def __post_init__(self) -> None:
        if self.length is None:
            self.length = 0 if self.type == FrameType.WEBTRANSPORT_STREAM else len(self.data)

    def to_bytes(self) -> bytes:
        """Serialise the frame to its wire form."""
        second = self.session_id if self.type == FrameType.WEBTRANSPORT_STREAM else self.length
        return quicvarint.encode(self.type) + quicvarint.encode(second) + bytes(self.data)

    def write(self, writer: Any) -> int:
        """Write the frame to *writer* and return the number of bytes written."""
        payload = self.to_bytes()
        writer.write(payload)
        return len(payload)


def _read_exact(reader: Any, size: int) -> bytes:
    buf = bytearray()
    while len(buf) < size:
        chunk = reader.read(size - len(buf))
        if not chunk:
            raise EOFError(f"truncated frame payload: needed {size} bytes, got {len(buf)}")
        buf += chunk
    return bytes(buf)


def read_frame(reader: Any) -> Frame:
    """Read one HTTP/3 frame from a file-like *reader*."""
    frame_type = quicvarint.read(reader)
    second = quicvarint.read(reader)
    if frame_type == FrameType.WEBTRANSPORT_STREAM:
        return Frame(type=frame_type, session_id=second, length=0, data=b"")
    return Frame(type=frame_type, length=second, data=_read_exact(reader, second))