"""HTTP/3 unidirectional stream headers."""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum
from typing import Any

from wtserver import quicvarint


class StreamType(IntEnum):
    """HTTP/3 unidirectional stream types."""

    CONTROL = 0x00
    PUSH = 0x01
    QPACK_ENCODER = 0x02
    QPACK_DECODER = 0x03
    WEBTRANSPORT_UNI_STREAM = 0x54


_TYPE_ONLY = frozenset({StreamType.CONTROL, StreamType.QPACK_ENCODER, StreamType.QPACK_DECODER})
_WITH_ID = frozenset({StreamType.PUSH, StreamType.WEBTRANSPORT_UNI_STREAM})


class UnknownStreamTypeError(ValueError):
    """Raised for a stream header with an unrecognised type."""

    def __init__(self, stream_type: int) -> None:
        super().__init__("unknown stream type")
        self.stream_type = stream_type


@dataclass
class StreamHeader:
    """Header opening an HTTP/3 unidirectional stream.

    PUSH and WEBTRANSPORT_UNI_STREAM headers carry an ID after the type.
    """

    type: int
    id: int = 0

    def to_bytes(self) -> bytes:
        """Serialise the header to its wire form."""
        if self.type in _TYPE_ONLY:
            return quicvarint.encode(self.type)
        if self.type in _WITH_ID:
            return quicvarint.encode(self.type) + quicvarint.encode(self.id)
        raise UnknownStreamTypeError(self.type)

    def write(self, writer: Any) -> int:
        """Write the header to *writer* and return the number of bytes written."""
        payload = self.to_bytes()
        writer.write(payload)
        return len(payload)


def read_stream_header(reader: Any) -> StreamHeader:
    """Read a stream header from a file-like *reader*."""
    stream_type = quicvarint.read(reader)
    if stream_type in _TYPE_ONLY:
        return StreamHeader(type=stream_type)
    if stream_type in _WITH_ID:
        return StreamHeader(type=stream_type, id=quicvarint.read(reader))
    raise UnknownStreamTypeError(stream_type)