import io

import pytest

from wtserver import quicvarint
from wtserver.h3.frames import Frame, FrameType, read_frame


@pytest.mark.parametrize(
    "frame,wire",
    [
        (Frame(type=FrameType.DATA, data=b""), b"\x00\x00"),
        (Frame(type=FrameType.HEADERS, data=b""), b"\x01\x00"),
        (Frame(type=FrameType.SETTINGS, data=b""), b"\x04\x00"),
        (Frame(type=FrameType.WEBTRANSPORT_STREAM, session_id=0), b"\x40\x41\x00"),
    ],
)
def test_frame_type_values_from_spec(frame, wire):
    assert frame.to_bytes() == wire


def test_headers_frame_wire_form():
    frame = Frame(type=FrameType.HEADERS, data=b"abc")
    assert frame.to_bytes() == b"\x01\x03abc"


def test_length_defaults_to_data_length():
    frame = Frame(type=FrameType.DATA, data=b"hello")
    assert frame.length == len(b"hello")


def test_explicit_length_is_written_verbatim():
    frame = Frame(type=FrameType.DATA, length=2, data=b"xy")
    wire = frame.to_bytes()
    stream = io.BytesIO(wire)
    assert quicvarint.read(stream) == FrameType.DATA
    assert quicvarint.read(stream) == 2
    assert stream.read() == b"xy"


@pytest.mark.parametrize(
    "frame_type,data",
    [
        (FrameType.DATA, b""),
        (FrameType.DATA, b"payload"),
        (FrameType.HEADERS, bytes(range(256)) * 2),
        (FrameType.GOAWAY, b"\x00"),
        (0x21, b"unknown type"),
    ],
)
def test_round_trip(frame_type, data):
    frame = Frame(type=frame_type, data=data)
    parsed = read_frame(io.BytesIO(frame.to_bytes()))
    assert parsed == frame


def test_webtransport_stream_frame_round_trip():
    frame = Frame(type=FrameType.WEBTRANSPORT_STREAM, session_id=16384)
    assert frame.length == 0
    stream = io.BytesIO(frame.to_bytes() + b"stream data")
    parsed = read_frame(stream)
    assert parsed.type == FrameType.WEBTRANSPORT_STREAM
    assert parsed.session_id == 16384
    assert parsed.length == 0
    assert parsed.data == b""
    assert stream.read() == b"stream data"


def test_write_returns_byte_count():
    frame = Frame(type=FrameType.HEADERS, data=b"header block")
    sink = io.BytesIO()
    written = frame.write(sink)
    assert written == len(sink.getvalue())
    assert sink.getvalue() == frame.to_bytes()


def test_read_consecutive_frames():
    first = Frame(type=FrameType.HEADERS, data=b"h")
    second = Frame(type=FrameType.DATA, data=b"body")
    stream = io.BytesIO(first.to_bytes() + second.to_bytes())
    assert read_frame(stream) == first
    assert read_frame(stream) == second


def test_read_truncated_payload():
    wire = Frame(type=FrameType.DATA, data=b"0123456789").to_bytes()
    with pytest.raises(EOFError):
        read_frame(io.BytesIO(wire[:-3]))


def test_read_missing_length():
    with pytest.raises(EOFError):
        read_frame(io.BytesIO(quicvarint.encode(FrameType.DATA)))


def test_read_empty():
    with pytest.raises(EOFError):
        read_frame(io.BytesIO(b""))