"""Unidirectional WebTransport streams."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from wtserver.h3.streams import StreamHeader, StreamType, read_stream_header


class WrongStreamTypeError(Exception):
    """Raised when a unidirectional stream does not carry WebTransport data."""

    def __init__(self) -> None:
        super().__init__("unidirectional stream received with the wrong stream type")


@dataclass(eq=False)
class ReceiveStream:
    """Incoming unidirectional WebTransport stream.

    The WebTransport stream header is consumed before the first read and
    the request session ID it carries is kept in ``request_session_id``.
    Other attributes are looked up on the wrapped stream.
    """

    stream: Any
    read_header_before_data: bool = True
    header_read: bool = False
    request_session_id: int = 0

    def __getattr__(self, name: str) -> Any:
        if name == "stream":
            raise AttributeError(name)
        return getattr(self.stream, name)

    def read(self, n: int = -1) -> bytes:
        """Read up to *n* bytes of stream data."""
        if self.read_header_before_data and not self.header_read:
            header = read_stream_header(self.stream)
            if header.type != StreamType.WEBTRANSPORT_UNI_STREAM:
                raise WrongStreamTypeError()
            self.request_session_id = header.id
            self.header_read = True
        return self.stream.read(n)


@dataclass(eq=False)
class SendStream:
    """Outgoing unidirectional WebTransport stream.

    The WebTransport stream header is written before the first data.
    Other attributes are looked up on the wrapped stream.
    """

    stream: Any
    write_header_before_data: bool = True
    header_written: bool = False
    request_session_id: int = 0

    def __getattr__(self, name: str) -> Any:
        if name == "stream":
            raise AttributeError(name)
        return getattr(self.stream, name)

    def write(self, data: bytes) -> int:
        """Write *data* and return the number of bytes written.

        If the stream header cannot be written the stream is closed and
        the error is raised.
        """
        if self.write_header_before_data and not self.header_written:
            header = StreamHeader(
                type=StreamType.WEBTRANSPORT_UNI_STREAM, id=self.request_session_id
            ).to_bytes()
            try:
                self.stream.write(header)
            except Exception:
                self.close()
                raise
            self.header_written = True
        written = self.stream.write(data)
        return len(data) if written is None else written

    def close(self) -> None:
        """Close the underlying stream."""
        self.stream.close()