# wtserver

The HTTP/3 and WebTransport layers of a WebTransport server, written to
run on top of a QUIC connection object that you supply.

## What it does not do

The package has no QUIC or UDP transport of its own and no command-line
program. `Server.run` needs a listener that hands out QUIC connections;
everything above the connection (control streams, SETTINGS, the CONNECT
request, origin checks, sessions, streams and datagrams) is done here.

The QPACK support uses the static table only: the encoder writes static
references and plain literals (never Huffman-coded), and the decoder
raises `QpackError` for field sections that refer to a dynamic table.

## Modules

- `wtserver.quicvarint`: QUIC variable-length integers: `encode`,
  `decode` (returns the value and the bytes used), `read` (from a
  file-like object, `EOFError` on a short stream) and `varint_len`.
  Negative, too-large or truncated input raises `VarintError`.
- `wtserver.h3.frames`: `Frame`, `FrameType` and `read_frame`. A
  `WEBTRANSPORT_STREAM` frame carries a session ID where other frames
  carry their payload length.
- `wtserver.h3.settings`: `SettingsMap` (a `dict` with `from_frame` and
  `to_frame`), `SettingID` and `setting_name`. Frames larger than 8 KiB,
  truncated frames and duplicate settings raise `SettingsError`.
- `wtserver.h3.streams`: unidirectional stream headers: `StreamHeader`,
  `StreamType` and `read_stream_header`. `PUSH` and
  `WEBTRANSPORT_UNI_STREAM` headers carry an ID; unknown types raise
  `UnknownStreamTypeError`.
- `wtserver.h3.qpack`: `encode_headers`, `decode_headers` and
  `huffman_decode` over `(name, value)` pairs.
- `wtserver.h3.request_reader`: `request_from_headers` builds a
  `Request` (method, `url` as a `urllib.parse.SplitResult`, headers as
  `wsgiref.headers.Headers`, content length, host, request URI, remote
  address and body) and returns it with the `:protocol` value, `"h3"`
  when absent. Repeated `cookie` fields are joined with `"; "`. A
  non-CONNECT request without `:path`, `:authority` or `:method` raises
  `PathAuthorityMethodEmptyError`; a bad URL or content length raises
  `RequestError`.
- `wtserver.h3.response_writer`: `ResponseWriter` writes a HEADERS frame
  and then DATA frames into a buffer that reaches the stream on
  `flush()`, on a 1xx header, or when 4096 bytes are pending. `write`
  sends a 200 header first if none was written, and raises
  `BodyNotAllowedError` for 1xx, 204 and 304 responses
  (`body_allowed_for_status`). `data_stream()` flushes and returns the
  stream.
- `wtserver.stream`: `ReceiveStream` reads and checks the WebTransport
  stream header before the first data (`WrongStreamTypeError` for another
  stream type) and keeps its `request_session_id`; `SendStream` writes
  that header before the first data and closes the stream if the header
  cannot be written.
- `wtserver.session`: `Session`, the WebTransport session.
- `wtserver.tlsconfig`: `CertFile` (a `path` or PEM `data`) and
  `make_tls_context`, which returns an `ssl.SSLContext` offering the
  `h3`, `h3-32`, `h3-31`, `h3-30` and `h3-29` ALPN protocols. Files are
  loaded when both certificate and key have a path, otherwise both are
  taken from their data.
- `wtserver.server`: `Server` and `QuicConfig`.

## Building a SETTINGS frame

```python
import io

from wtserver.h3.frames import read_frame
from wtserver.h3.settings import SettingID, SettingsMap

settings = SettingsMap({
    SettingID.H3_DATAGRAM_05: 1,
    SettingID.ENABLE_WEBTRANSPORT: 1,
})
out = io.BytesIO()
settings.to_frame().write(out)

frame = read_frame(io.BytesIO(out.getvalue()))
assert SettingsMap().from_frame(frame) == settings
```

## The connection and listener you supply

`Server.run(listener)` is a coroutine. `listener` is either an object
with an awaitable `accept()` returning a connection and a `close()`
method, or a factory called as `factory(listen_addr, tls_context,
quic_config)` that returns such an object; the TLS context is built
from `tls_cert` and `tls_key`, and `quic_config.enable_datagrams` is
set to `True`. The loop runs until `accept()` raises or the task is
cancelled, and closes the listener when it ends.

A connection provides `open_uni_stream()`, `open_stream()`,
`send_datagram(data)` and `close_with_error(code, reason)`, the
awaitables `accept_uni_stream()`, `accept_stream()`,
`open_stream_sync()`, `open_uni_stream_sync()` and `receive_datagram()`,
and optionally `local_addr` and `remote_addr`. Streams are file-like
objects with `read(n)`, `write(data)` and `close()`; the request stream
also has a `stream_id`.

## Serving sessions

For each connection `Server.handle_session` writes the server control
stream with a SETTINGS frame enabling H3 datagrams and WebTransport,
reads the client's SETTINGS, then reads and decodes the request on the
first bidirectional stream. The response gets the header
`sec-webtransport-http3-draft: draft02`. A request whose `:protocol` is
not `webtransport`, or whose origin is not allowed, is rejected with
400.

Otherwise `handler(writer, request)` is called; it may be a plain
function or a coroutine function, and `request.body` is the `Session`.
With no handler the server answers 404 with `404 page not found`. The
session is closed when the client finishes the request stream.

```python
from wtserver.server import Server
from wtserver.tlsconfig import CertFile

async def handler(writer, request):
    session = request.body
    session.accept_session()
    data = await session.receive_datagram()
    session.send_datagram(data)

server = Server(
    handler=handler,
    listen_addr=":4433",
    tls_cert=CertFile(path="cert.pem"),
    tls_key=CertFile(path="key.pem"),
    allowed_origins=["localhost:8080"],
)
# await server.run(listener_factory)
```

`Session.accept_session()` answers 200; `reject_session(code)` answers
with `code` and closes the session. `open_stream()` and
`open_uni_stream()` return at once; `accept_stream()`,
`accept_uni_stream()`, `open_stream_sync()`, `open_uni_stream_sync()`
and `receive_datagram()` are coroutines that raise `StreamClosedError`
if the session is closed while they wait. Bidirectional streams opened
by the server start with a `WEBTRANSPORT_STREAM` frame naming the
session; those accepted from the client have theirs consumed.
`close_session()` closes the request stream; `close_with_error(code,
reason)` closes the connection.

Datagrams are prefixed with the quarter stream ID (the request stream
ID divided by four); `receive_datagram()` strips that prefix.

`Server.validate_origin(origin)` accepts every origin when
`allowed_origins` is `None`; otherwise the origin's host, with its port
if it has one, must be in the list.