import io

import pytest

from wtserver import quicvarint
from wtserver.h3.streams import StreamHeader, StreamType, UnknownStreamTypeError
from wtserver.stream import ReceiveStream, SendStream, WrongStreamTypeError


class FailingWriter:
    def __init__(self):
        self.closed = False

    def write(self, data):
        raise OSError("write failed")

    def close(self):
        self.closed = True


def test_send_then_receive_round_trip():
    sink = io.BytesIO()
    sender = SendStream(sink, request_session_id=8)
    assert sender.write(b"hello") == 5
    receiver = ReceiveStream(io.BytesIO(sink.getvalue()))
    assert receiver.read(5) == b"hello"
    assert receiver.request_session_id == 8
    assert receiver.header_read is True


def test_send_header_wire_bytes():
    sink = io.BytesIO()
    SendStream(sink, request_session_id=4).write(b"")
    assert sink.getvalue() == b"\x40\x54\x04"


def test_header_written_once():
    sink = io.BytesIO()
    sender = SendStream(sink, request_session_id=8)
    sender.write(b"ab")
    sender.write(b"cd")
    header = StreamHeader(type=StreamType.WEBTRANSPORT_UNI_STREAM, id=8).to_bytes()
    assert sink.getvalue() == header + b"abcd"
    assert sender.header_written is True


def test_send_without_header():
    sink = io.BytesIO()
    sender = SendStream(sink, write_header_before_data=False)
    sender.write(b"raw")
    assert sink.getvalue() == b"raw"


def test_header_write_failure_closes_stream():
    writer = FailingWriter()
    sender = SendStream(writer, request_session_id=1)
    with pytest.raises(OSError):
        sender.write(b"data")
    assert writer.closed is True
    assert sender.header_written is False


def test_header_read_once():
    data = StreamHeader(type=StreamType.WEBTRANSPORT_UNI_STREAM, id=12).to_bytes() + b"abcde"
    receiver = ReceiveStream(io.BytesIO(data))
    assert receiver.read(2) == b"ab"
    assert receiver.read(3) == b"cde"
    assert receiver.request_session_id == 12


def test_receive_wrong_stream_type():
    data = StreamHeader(type=StreamType.PUSH, id=1).to_bytes() + b"x"
    receiver = ReceiveStream(io.BytesIO(data))
    with pytest.raises(WrongStreamTypeError):
        receiver.read(1)
    assert receiver.header_read is False


def test_receive_unknown_stream_type():
    receiver = ReceiveStream(io.BytesIO(quicvarint.encode(0x21) + b"x"))
    with pytest.raises(UnknownStreamTypeError):
        receiver.read(1)


def test_receive_truncated_header():
    receiver = ReceiveStream(io.BytesIO(quicvarint.encode(StreamType.WEBTRANSPORT_UNI_STREAM)))
    with pytest.raises(EOFError):
        receiver.read(1)


def test_receive_without_header():
    receiver = ReceiveStream(io.BytesIO(b"plain"), read_header_before_data=False)
    assert receiver.read() == b"plain"
    assert receiver.request_session_id == 0


def test_attribute_delegation():
    sink = io.BytesIO()
    sender = SendStream(sink, write_header_before_data=False)
    sender.write(b"xyz")
    assert sender.getvalue() == b"xyz"