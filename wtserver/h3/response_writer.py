"""Writing an HTTP/3 response onto a request stream."""

from __future__ import annotations

from typing import Any
from wsgiref.headers import Headers

from wtserver.h3.frames import Frame, FrameType
from wtserver.h3.qpack import encode_headers

_BUFFER_SIZE = 4096


class BodyNotAllowedError(Exception):
    """Raised when writing a body for a status that forbids one."""

    def __init__(self) -> None:
        super().__init__("http: request method or response status code does not allow body")


def body_allowed_for_status(status: int) -> bool:
    """Report whether a response with *status* may carry a body."""
    return not (100 <= status <= 199 or status in (204, 304))


class ResponseWriter:
    """Buffered writer of HEADERS and DATA frames to a stream.

    Nothing reaches the stream until :meth:`flush` is called, an
    informational (1xx) header is written, or the buffer fills up.
    """

    def __init__(self, stream: Any) -> None:
        self.stream = stream
        self.headers = Headers()
        self.status = 0
        self.header_written = False
        self.data_stream_used = False
        self._buffer = bytearray()

    def _buffered_write(self, payload: bytes) -> None:
        self._buffer += payload
        if len(self._buffer) >= _BUFFER_SIZE:
            self.flush()

    def write_header(self, status: int) -> None:
        """Send a HEADERS frame with *status* and the current headers.

        Ignored once a final (non-1xx) status has been written.
        """
        if self.header_written:
            return
        if status < 100 or status >= 200:
            self.header_written = True
        self.status = status

        fields = [(":status", str(status))]
        fields.extend((name.lower(), value) for name, value in self.headers.items())
        block = encode_headers(fields)
        self._buffered_write(Frame(type=FrameType.HEADERS, length=len(block), data=block).to_bytes())

        if not self.header_written:
            self.flush()

    def write(self, data: bytes) -> int:
        """Send *data* as one DATA frame and return the frame's size.

        Writes a 200 header first if no final header has been written.
        """
        if not self.header_written:
            self.write_header(200)
        if not body_allowed_for_status(self.status):
            raise BodyNotAllowedError()
        payload = Frame(type=FrameType.DATA, length=len(data), data=bytes(data)).to_bytes()
        self._buffered_write(payload)
        return len(payload)

    def flush(self) -> None:
        """Write everything buffered to the stream."""
        if self._buffer:
            self.stream.write(bytes(self._buffer))
            self._buffer.clear()

    def data_stream(self) -> Any:
        """Flush and hand the underlying stream over to the caller."""
        self.data_stream_used = True
        self.flush()
        return self.stream