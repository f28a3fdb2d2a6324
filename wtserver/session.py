"""WebTransport sessions and their datagrams."""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable
from dataclasses import dataclass, field
from typing import Any, TypeVar

from wtserver import quicvarint
from wtserver.h3.frames import Frame, FrameType, read_frame
from wtserver.h3.response_writer import ResponseWriter
from wtserver.stream import ReceiveStream, SendStream

_T = TypeVar("_T")


class StreamClosedError(Exception):
    """Raised when a blocking session call is cut short by the session closing."""

    def __init__(self) -> None:
        super().__init__("webtransport stream closed")


@dataclass(eq=False)
class Session:
    """A WebTransport session: the request stream, its connection and control streams.

    Blocking operations end with StreamClosedError once the session is closed.
    """

    stream: Any
    connection: Any
    client_control_stream: Any = None
    server_control_stream: Any = None
    response_writer: ResponseWriter | None = None
    context: dict[str, Any] = field(default_factory=dict)
    _cancelled: asyncio.Event = field(default_factory=asyncio.Event, init=False, repr=False)

    def __post_init__(self) -> None:
        if self.response_writer is None:
            self.response_writer = ResponseWriter(self.stream)

    @property
    def stream_id(self) -> int:
        """ID of the request stream."""
        return self.stream.stream_id

    @property
    def closed(self) -> bool:
        """Whether the session has been closed."""
        return self._cancelled.is_set()

    async def _until_closed(self, awaitable: Awaitable[_T]) -> _T:
        task = asyncio.ensure_future(awaitable)
        if self._cancelled.is_set():
            task.cancel()
            raise StreamClosedError()
        waiter = asyncio.ensure_future(self._cancelled.wait())
        try:
            done, _ = await asyncio.wait({task, waiter}, return_when=asyncio.FIRST_COMPLETED)
        finally:
            waiter.cancel()
            if not task.done():
                task.cancel()
        if task in done:
            return task.result()
        raise StreamClosedError()

    def accept_session(self) -> None:
        """Accept the session by answering the request with 200."""
        self.response_writer.write_header(200)
        self.response_writer.flush()

    def reject_session(self, error_code: int) -> None:
        """Reject the session with *error_code* and close it."""
        self.response_writer.write_header(error_code)
        self.response_writer.flush()
        self.close_session()

    async def accept_stream(self) -> Any:
        """Wait for a client-initiated bidirectional stream and consume its header."""
        stream = await self._until_closed(self.connection.accept_stream())
        read_frame(stream)
        return stream

    async def accept_uni_stream(self) -> ReceiveStream:
        """Wait for a client-initiated unidirectional stream."""
        stream = await self._until_closed(self.connection.accept_uni_stream())
        return ReceiveStream(stream, read_header_before_data=True, header_read=False)

    def _prepare_stream(self, stream: Any) -> Any:
        header = Frame(type=FrameType.WEBTRANSPORT_STREAM, session_id=self.stream_id).to_bytes()
        try:
            stream.write(header)
        except Exception:
            stream.close()
            raise
        return stream

    def open_stream(self) -> Any:
        """Open a server-initiated bidirectional stream without waiting."""
        return self._prepare_stream(self.connection.open_stream())

    async def open_stream_sync(self) -> Any:
        """Open a server-initiated bidirectional stream, waiting for a free slot."""
        stream = await self._until_closed(self.connection.open_stream_sync())
        return self._prepare_stream(stream)

    def _wrap_send_stream(self, stream: Any) -> SendStream:
        return SendStream(
            stream,
            write_header_before_data=True,
            header_written=False,
            request_session_id=self.stream_id,
        )

    def open_uni_stream(self) -> SendStream:
        """Open a server-initiated unidirectional stream without waiting."""
        return self._wrap_send_stream(self.connection.open_uni_stream())

    async def open_uni_stream_sync(self) -> SendStream:
        """Open a server-initiated unidirectional stream, waiting for a free slot."""
        stream = await self._until_closed(self.connection.open_uni_stream_sync())
        return self._wrap_send_stream(stream)

    def close_session(self) -> None:
        """Cancel pending operations and close the request stream."""
        self._cancelled.set()
        self.stream.close()

    def close_with_error(self, code: int, reason: str) -> None:
        """Close the connection with an application error code and reason."""
        self.connection.close_with_error(code, reason)

    def send_datagram(self, msg: bytes) -> None:
        """Send *msg* as a datagram prefixed with the quarter stream ID."""
        self.connection.send_datagram(quicvarint.encode(self.stream_id // 4) + bytes(msg))

    async def receive_datagram(self) -> bytes:
        """Wait for a datagram and return it without its quarter stream ID."""
        msg = bytes(await self._until_closed(self.connection.receive_datagram()))
        _, consumed = quicvarint.decode(msg)
        return msg[consumed:]