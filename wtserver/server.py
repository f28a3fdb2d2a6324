"""WebTransport-over-HTTP/3 server."""

from __future__ import annotations

import asyncio
import inspect
import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any
from urllib.parse import urlsplit

from wtserver import quicvarint
from wtserver.h3.frames import FrameType, read_frame
from wtserver.h3.qpack import decode_headers
from wtserver.h3.request_reader import Request, request_from_headers
from wtserver.h3.response_writer import ResponseWriter
from wtserver.h3.settings import SettingID, SettingsMap
from wtserver.h3.streams import StreamHeader, StreamType
from wtserver.session import Session
from wtserver.tlsconfig import CertFile, make_tls_context

logger = logging.getLogger(__name__)

Handler = Callable[[ResponseWriter, Request], Any]

_DRAIN_CHUNK = 1024


@dataclass
class QuicConfig:
    """Parameters passed on to the QUIC listener."""

    handshake_idle_timeout: float | None = None
    max_idle_timeout: float | None = None
    max_incoming_streams: int | None = None
    max_incoming_uni_streams: int | None = None
    keep_alive_period: float | None = None
    enable_datagrams: bool = False


def _not_found(writer: ResponseWriter, request: Request) -> None:
    writer.headers["Content-Type"] = "text/plain; charset=utf-8"
    writer.headers["X-Content-Type-Options"] = "nosniff"
    writer.write_header(404)
    writer.write(b"404 page not found\n")
    writer.flush()


def _drain(stream: Any) -> None:
    while True:
        try:
            chunk = stream.read(_DRAIN_CHUNK)
        except Exception:
            return
        if not chunk:
            return


@dataclass(eq=False)
class Server:
    """A WebTransport server.

    ``handler`` is called with the response writer and the request for every
    WebTransport session; the request's ``body`` is the :class:`Session`.
    A handler may be a plain function or a coroutine function.
    """

    handler: Handler | None = None
    listen_addr: str = ""
    tls_cert: CertFile = field(default_factory=CertFile)
    tls_key: CertFile = field(default_factory=CertFile)
    allowed_origins: list[str] | None = None
    quic_config: QuicConfig | None = None

    async def run(self, listener: Any) -> None:
        """Accept connections from *listener* until cancelled or accept fails.

        *listener* is an object with an awaitable ``accept()`` and ``close()``,
        or a factory called with the listen address, the TLS context built
        from the server's certificate and key, and the QUIC configuration.
        The listener is closed when the loop ends.
        """
        if self.handler is None:
            self.handler = _not_found
        if self.quic_config is None:
            self.quic_config = QuicConfig()
        self.quic_config.enable_datagrams = True

        if not hasattr(listener, "accept"):
            tls_context = make_tls_context(self.tls_cert, self.tls_key)
            listener = listener(self.listen_addr, tls_context, self.quic_config)

        sessions: set[asyncio.Task[None]] = set()
        try:
            while True:
                connection = await listener.accept()
                task = asyncio.ensure_future(self.handle_session(connection))
                sessions.add(task)
                task.add_done_callback(sessions.discard)
        finally:
            listener.close()

    async def handle_session(self, connection: Any) -> None:
        """Run the control-stream exchange and the request on one connection."""
        try:
            server_control_stream = connection.open_uni_stream()
        except Exception:
            return

        StreamHeader(type=StreamType.CONTROL).write(server_control_stream)
        SettingsMap(
            {SettingID.H3_DATAGRAM_05: 1, SettingID.ENABLE_WEBTRANSPORT: 1}
        ).to_frame().write(server_control_stream)

        try:
            client_control_stream = await connection.accept_uni_stream()
        except Exception as exc:
            logger.info("%s", exc)
            return

        try:
            quicvarint.read(client_control_stream)
            settings_frame = read_frame(client_control_stream)
        except (EOFError, ValueError):
            return
        if settings_frame.type != FrameType.SETTINGS:
            return

        try:
            request_stream = await connection.accept_stream()
        except Exception:
            return

        context = {
            "server": self,
            "local_addr": getattr(connection, "local_addr", None),
        }

        try:
            headers_frame = read_frame(request_stream)
            if headers_frame.type != FrameType.HEADERS:
                raise ValueError(f"unexpected frame type {headers_frame.type}")
            fields = decode_headers(headers_frame.data)
            request, protocol = request_from_headers(fields)
        except (EOFError, ValueError):
            request_stream.close()
            return
        request.remote_addr = str(getattr(connection, "remote_addr", ""))

        writer = ResponseWriter(request_stream)
        writer.headers.add_header("sec-webtransport-http3-draft", "draft02")
        session = Session(
            stream=request_stream,
            connection=connection,
            client_control_stream=client_control_stream,
            server_control_stream=server_control_stream,
            response_writer=writer,
            context=context,
        )
        request.body = session

        if protocol != "webtransport" or not self.validate_origin(
            request.headers.get("origin") or ""
        ):
            session.reject_session(400)
            return

        asyncio.ensure_future(self._close_when_drained(session))

        handler = self.handler or _not_found
        result = handler(writer, request)
        if inspect.isawaitable(result):
            await result

    @staticmethod
    async def _close_when_drained(session: Session) -> None:
        await asyncio.to_thread(_drain, session.stream)
        session.close_session()

    def validate_origin(self, origin: str) -> bool:
        """Report whether *origin* may open a session.

        With no allowed origins configured every origin is accepted;
        otherwise the origin's host (and port) must be listed.
        """
        if self.allowed_origins is None:
            return True
        try:
            parts = urlsplit(origin)
            parts.port  # noqa: B018 - validates the port
        except ValueError:
            return False
        host = parts.netloc.rpartition("@")[2]
        return host in self.allowed_origins