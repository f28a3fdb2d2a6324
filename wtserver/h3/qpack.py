"""A static-table-only QPACK encoder and decoder (RFC 9204).

The dynamic table is never used: the encoder emits only static references
and literals, and the decoder rejects field sections that refer to a
dynamic table.
"""

from __future__ import annotations

from collections.abc import Iterable

_STATIC_TABLE: tuple[tuple[str, str], ...] = (
    (":authority", ""),
    (":path", "/"),
    ("age", "0"),
    ("content-disposition", ""),
    ("content-length", "0"),
    ("cookie", ""),
    ("date", ""),
    ("etag", ""),
    ("if-modified-since", ""),
    ("if-none-match", ""),
    ("last-modified", ""),
    ("link", ""),
    ("location", ""),
    ("referer", ""),
    ("set-cookie", ""),
    (":method", "CONNECT"),
    (":method", "DELETE"),
    (":method", "GET"),
    (":method", "HEAD"),
    (":method", "OPTIONS"),
    (":method", "POST"),
    (":method", "PUT"),
    (":scheme", "http"),
    (":scheme", "https"),
    (":status", "103"),
    (":status", "200"),
    (":status", "304"),
    (":status", "404"),
    (":status", "503"),
    ("accept", "*/*"),
    ("accept", "application/dns-message"),
    ("accept-encoding", "gzip, deflate, br"),
    ("accept-ranges", "bytes"),
    ("access-control-allow-headers", "cache-control"),
    ("access-control-allow-headers", "content-type"),
    ("access-control-allow-origin", "*"),
    ("cache-control", "max-age=0"),
    ("cache-control", "max-age=2592000"),
    ("cache-control", "max-age=604800"),
    ("cache-control", "no-cache"),
    ("cache-control", "no-store"),
    ("cache-control", "public, max-age=31536000"),
    ("content-encoding", "br"),
    ("content-encoding", "gzip"),
    ("content-type", "application/dns-message"),
    ("content-type", "application/javascript"),
    ("content-type", "application/json"),
    ("content-type", "application/x-www-form-urlencoded"),
    ("content-type", "image/gif"),
    ("content-type", "image/jpeg"),
    ("content-type", "image/png"),
    ("content-type", "text/css"),
    ("content-type", "text/html; charset=utf-8"),
    ("content-type", "text/plain"),
    ("content-type", "text/plain;charset=utf-8"),
    ("range", "bytes=0-"),
    ("strict-transport-security", "max-age=31536000"),
    ("strict-transport-security", "max-age=31536000; includesubdomains"),
    ("strict-transport-security", "max-age=31536000; includesubdomains; preload"),
    ("vary", "accept-encoding"),
    ("vary", "origin"),
    ("x-content-type-options", "nosniff"),
    ("x-xss-protection", "1; mode=block"),
    (":status", "100"),
    (":status", "204"),
    (":status", "206"),
    (":status", "302"),
    (":status", "400"),
    (":status", "403"),
    (":status", "421"),
    (":status", "425"),
    (":status", "500"),
    ("accept-language", ""),
    ("access-control-allow-credentials", "FALSE"),
    ("access-control-allow-credentials", "TRUE"),
    ("access-control-allow-headers", "*"),
    ("access-control-allow-methods", "get"),
    ("access-control-allow-methods", "get, post, options"),
    ("access-control-allow-methods", "options"),
    ("access-control-expose-headers", "content-length"),
    ("access-control-request-headers", "content-type"),
    ("access-control-request-method", "get"),
    ("access-control-request-method", "post"),
    ("alt-svc", "clear"),
    ("authorization", ""),
    ("content-security-policy", "script-src 'none'; object-src 'none'; base-uri 'none'"),
    ("early-data", "1"),
    ("expect-ct", ""),
    ("forwarded", ""),
    ("if-range", ""),
    ("origin", ""),
    ("purpose", "prefetch"),
    ("server", ""),
    ("timing-allow-origin", "*"),
    ("upgrade-insecure-requests", "1"),
    ("user-agent", ""),
    ("x-forwarded-for", ""),
    ("x-frame-options", "deny"),
    ("x-frame-options", "sameorigin"),
)

_STATIC_EXACT: dict[tuple[str, str], int] = {}
_STATIC_NAME: dict[str, int] = {}
for _index, (_name, _value) in enumerate(_STATIC_TABLE):
    _STATIC_EXACT.setdefault((_name, _value), _index)
    _STATIC_NAME.setdefault(_name, _index)

# Code lengths of the canonical HPACK Huffman code (RFC 7541, Appendix B),
# indexed by symbol; symbol 256 is EOS.
_HUFFMAN_LENGTHS: tuple[int, ...] = (
    13, 23, 28, 28, 28, 28, 28, 28, 28, 24, 30, 28, 28, 30, 28, 28,
    28, 28, 28, 28, 28, 28, 30, 28, 28, 28, 28, 28, 28, 28, 28, 28,
    6, 10, 10, 12, 13, 6, 8, 11, 10, 10, 8, 11, 8, 6, 6, 6,
    5, 5, 5, 6, 6, 6, 6, 6, 6, 6, 7, 8, 15, 6, 12, 10,
    13, 6, 7, 7, 7, 7, 7, 7, 7, 7, 7, 7, 7, 7, 7, 7,
    7, 7, 7, 7, 7, 7, 7, 7, 8, 7, 8, 13, 19, 13, 14, 6,
    15, 5, 6, 5, 6, 5, 6, 6, 6, 5, 7, 7, 6, 6, 6, 5,
    6, 7, 6, 5, 5, 6, 7, 7, 7, 7, 7, 15, 11, 14, 13, 28,
    20, 22, 20, 20, 22, 22, 22, 23, 22, 23, 23, 23, 23, 23, 24, 23,
    24, 24, 22, 23, 24, 23, 23, 23, 23, 21, 22, 23, 22, 23, 23, 24,
    22, 21, 20, 22, 22, 23, 23, 21, 23, 22, 22, 24, 21, 22, 23, 23,
    21, 21, 22, 21, 23, 22, 23, 23, 20, 22, 22, 22, 23, 22, 22, 23,
    26, 26, 20, 19, 22, 23, 22, 25, 26, 26, 26, 27, 27, 26, 24, 25,
    19, 21, 26, 27, 27, 26, 27, 24, 21, 21, 26, 26, 28, 27, 27, 27,
    20, 24, 20, 21, 22, 21, 21, 23, 22, 22, 25, 25, 24, 24, 26, 23,
    26, 27, 26, 26, 27, 27, 27, 27, 27, 28, 27, 27, 27, 27, 27, 26,
    30,
)
_EOS = 256
_MAX_CODE_LENGTH = 30


def _build_huffman_table() -> dict[tuple[int, int], int]:
    table: dict[tuple[int, int], int] = {}
    code = 0
    previous_length = 0
    for symbol in sorted(range(len(_HUFFMAN_LENGTHS)), key=lambda s: (_HUFFMAN_LENGTHS[s], s)):
        length = _HUFFMAN_LENGTHS[symbol]
        code <<= length - previous_length
        table[(length, code)] = symbol
        code += 1
        previous_length = length
    return table


_HUFFMAN_DECODE = _build_huffman_table()


class QpackError(ValueError):
    """Raised for a field section that cannot be decoded."""


def huffman_decode(data: bytes) -> bytes:
    """Decode a Huffman-coded string literal."""
    out = bytearray()
    code = 0
    bits = 0
    for byte in bytes(data):
        for shift in range(7, -1, -1):
            code = (code << 1) | ((byte >> shift) & 1)
            bits += 1
            symbol = _HUFFMAN_DECODE.get((bits, code))
            if symbol is not None:
                if symbol == _EOS:
                    raise QpackError("EOS symbol in Huffman-coded string")
                out.append(symbol)
                code = 0
                bits = 0
            elif bits >= _MAX_CODE_LENGTH:
                raise QpackError("invalid Huffman code")
    if bits > 7 or code != (1 << bits) - 1:
        raise QpackError("invalid Huffman padding")
    return bytes(out)


def _encode_int(value: int, prefix_bits: int, flags: int) -> bytes:
    limit = (1 << prefix_bits) - 1
    if value < limit:
        return bytes([flags | value])
    out = bytearray([flags | limit])
    value -= limit
    while value >= 0x80:
        out.append((value & 0x7F) | 0x80)
        value >>= 7
    out.append(value)
    return bytes(out)


def _encode_string(text: str, prefix_bits: int, flags: int) -> bytes:
    raw = text.encode("utf-8", "surrogateescape")
    return _encode_int(len(raw), prefix_bits, flags) + raw


def _encode_field(name: str, value: str) -> bytes:
    exact = _STATIC_EXACT.get((name, value))
    if exact is not None:
        return _encode_int(exact, 6, 0xC0)
    by_name = _STATIC_NAME.get(name)
    if by_name is not None:
        return _encode_int(by_name, 4, 0x50) + _encode_string(value, 7, 0x00)
    return _encode_string(name, 3, 0x20) + _encode_string(value, 7, 0x00)


def encode_headers(fields: Iterable[tuple[str, str]]) -> bytes:
    """Encode (name, value) pairs as a QPACK field section."""
    return b"\x00\x00" + b"".join(_encode_field(name, value) for name, value in fields)


def _decode_int(data: bytes, pos: int, prefix_bits: int) -> tuple[int, int]:
    if pos >= len(data):
        raise QpackError("truncated integer")
    limit = (1 << prefix_bits) - 1
    value = data[pos] & limit
    pos += 1
    if value < limit:
        return value, pos
    shift = 0
    while True:
        if pos >= len(data):
            raise QpackError("truncated integer")
        byte = data[pos]
        pos += 1
        value += (byte & 0x7F) << shift
        shift += 7
        if not byte & 0x80:
            return value, pos
        if shift > 62:
            raise QpackError("integer overflow")


def _decode_string(data: bytes, pos: int, prefix_bits: int) -> tuple[str, int]:
    if pos >= len(data):
        raise QpackError("truncated string literal")
    huffman = bool(data[pos] & (1 << prefix_bits))
    length, pos = _decode_int(data, pos, prefix_bits)
    end = pos + length
    if end > len(data):
        raise QpackError("truncated string literal")
    raw = data[pos:end]
    if huffman:
        raw = huffman_decode(raw)
    return raw.decode("utf-8", "surrogateescape"), end


def _static_entry(index: int) -> tuple[str, str]:
    if index >= len(_STATIC_TABLE):
        raise QpackError(f"invalid static table index: {index}")
    return _STATIC_TABLE[index]


def decode_headers(data: bytes) -> list[tuple[str, str]]:
    """Decode a complete QPACK field section into (name, value) pairs."""
    data = bytes(data)
    required_insert_count, pos = _decode_int(data, 0, 8)
    if required_insert_count != 0:
        raise QpackError("dynamic table references are not supported")
    _, pos = _decode_int(data, pos, 7)

    fields: list[tuple[str, str]] = []
    while pos < len(data):
        first = data[pos]
        if first & 0x80:
            if not first & 0x40:
                raise QpackError("dynamic table references are not supported")
            index, pos = _decode_int(data, pos, 6)
            fields.append(_static_entry(index))
        elif first & 0x40:
            if not first & 0x10:
                raise QpackError("dynamic table references are not supported")
            index, pos = _decode_int(data, pos, 4)
            name = _static_entry(index)[0]
            value, pos = _decode_string(data, pos, 7)
            fields.append((name, value))
        elif first & 0x20:
            name, pos = _decode_string(data, pos, 3)
            value, pos = _decode_string(data, pos, 7)
            fields.append((name, value))
        else:
            raise QpackError("post-base references are not supported")
    return fields