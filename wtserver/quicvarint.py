"""QUIC variable-length integer encoding (RFC 9000, section 16)."""

from __future__ import annotations

from typing import Protocol

MAX_VALUE = (1 << 62) - 1

_LENGTH_BY_PREFIX = {0: 1, 1: 2, 2: 4, 3: 8}
_LIMITS = ((1, (1 << 6) - 1), (2, (1 << 14) - 1), (4, (1 << 30) - 1), (8, MAX_VALUE))


class VarintError(ValueError):
    """Raised for values that cannot be encoded or buffers that cannot be decoded."""


class _Reader(Protocol):
    def read(self, size: int = -1) -> bytes: ...


def varint_len(value: int) -> int:
    """Return the number of bytes needed to encode *value*."""
    if value < 0:
        raise VarintError(f"value {value} is negative")
    for length, limit in _LIMITS:
        if value <= limit:
            return length
    raise VarintError(f"value {value} does not fit into 62 bits")


def encode(value: int) -> bytes:
    """Encode *value* as a QUIC variable-length integer."""
    length = varint_len(value)
    prefix = {1: 0, 2: 1, 4: 2, 8: 3}[length]
    raw = bytearray(value.to_bytes(length, "big"))
    raw[0] |= prefix << 6
    return bytes(raw)


def _value_from(raw: bytes) -> int:
    head = raw[0] & 0x3F
    return int.from_bytes(bytes([head]) + raw[1:], "big")


def decode(data: bytes) -> tuple[int, int]:
    """Decode a varint from the start of *data*.

    Returns the value and the number of bytes it took up.
    """
    data = bytes(data[:8])
    if not data:
        raise VarintError("empty buffer")
    length = _LENGTH_BY_PREFIX[data[0] >> 6]
    if len(data) < length:
        raise VarintError(f"truncated varint: need {length} bytes, have {len(data)}")
    return _value_from(data[:length]), length


def _read_exact(reader: _Reader, size: int) -> bytes:
    chunks = bytearray()
    while len(chunks) < size:
        chunk = reader.read(size - len(chunks))
        if not chunk:
            raise EOFError(f"unexpected end of stream: needed {size} bytes, got {len(chunks)}")
        chunks += chunk
    return bytes(chunks)


def read(reader: _Reader) -> int:
    """Read one varint from a file-like *reader*.

    Raises EOFError when the stream ends before the varint is complete.
    """
    first = _read_exact(reader, 1)
    length = _LENGTH_BY_PREFIX[first[0] >> 6]
    rest = _read_exact(reader, length - 1) if length > 1 else b""
    return _value_from(first + rest)