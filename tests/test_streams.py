import io

import pytest

from wtserver import quicvarint
from wtserver.h3.streams import (
    StreamHeader,
    StreamType,
    UnknownStreamTypeError,
    read_stream_header,
)


@pytest.mark.parametrize(
    "header,wire",
    [
        (StreamHeader(type=StreamType.CONTROL), b"\x00"),
        (StreamHeader(type=StreamType.PUSH, id=4), b"\x01\x04"),
        (StreamHeader(type=StreamType.WEBTRANSPORT_UNI_STREAM, id=0), b"\x40\x54\x00"),
    ],
)
def test_stream_type_values(header, wire):
    assert header.to_bytes() == wire


def test_control_header_is_single_byte():
    assert StreamHeader(type=StreamType.CONTROL).to_bytes() == b"\x00"


def test_type_only_header_ignores_id():
    header = StreamHeader(type=StreamType.QPACK_DECODER, id=99)
    assert header.to_bytes() == quicvarint.encode(StreamType.QPACK_DECODER)


@pytest.mark.parametrize(
    "stream_type", [StreamType.CONTROL, StreamType.QPACK_ENCODER, StreamType.QPACK_DECODER]
)
def test_round_trip_type_only(stream_type):
    header = StreamHeader(type=stream_type)
    assert read_stream_header(io.BytesIO(header.to_bytes())) == header


@pytest.mark.parametrize("stream_type", [StreamType.PUSH, StreamType.WEBTRANSPORT_UNI_STREAM])
@pytest.mark.parametrize("stream_id", [0, 4, 16384, 1 << 40])
def test_round_trip_with_id(stream_type, stream_id):
    header = StreamHeader(type=stream_type, id=stream_id)
    assert read_stream_header(io.BytesIO(header.to_bytes())) == header


def test_read_leaves_data_after_header():
    header = StreamHeader(type=StreamType.WEBTRANSPORT_UNI_STREAM, id=8)
    stream = io.BytesIO(header.to_bytes() + b"payload")
    assert read_stream_header(stream).id == 8
    assert stream.read() == b"payload"


def test_write_returns_byte_count():
    header = StreamHeader(type=StreamType.WEBTRANSPORT_UNI_STREAM, id=300)
    sink = io.BytesIO()
    assert header.write(sink) == len(sink.getvalue())
    assert sink.getvalue() == header.to_bytes()


def test_unknown_type_on_write():
    sink = io.BytesIO()
    with pytest.raises(UnknownStreamTypeError, match="unknown stream type"):
        StreamHeader(type=0x21).write(sink)
    assert sink.getvalue() == b""


def test_unknown_type_on_read():
    with pytest.raises(UnknownStreamTypeError) as info:
        read_stream_header(io.BytesIO(quicvarint.encode(0x21)))
    assert info.value.stream_type == 0x21


def test_read_missing_id():
    wire = quicvarint.encode(StreamType.WEBTRANSPORT_UNI_STREAM)
    with pytest.raises(EOFError):
        read_stream_header(io.BytesIO(wire))


def test_read_empty():
    with pytest.raises(EOFError):
        read_stream_header(io.BytesIO(b""))