"""Building a request from decoded HTTP/3 header fields."""

from __future__ import annotations

import re
from collections.abc import Iterable
from dataclasses import dataclass
from typing import Any
from urllib.parse import SplitResult, urlsplit
from wsgiref.headers import Headers

_INT64_MAX = (1 << 63) - 1
_INT64_MIN = -(1 << 63)
_DECIMAL = re.compile(r"[+-]?[0-9]+")
_CONTROL = re.compile(r"[\x00-\x1f\x7f]")


class RequestError(ValueError):
    """Raised when header fields do not form a valid request."""


class PathAuthorityMethodEmptyError(RequestError):
    """Raised when a non-CONNECT request lacks :path, :authority or :method."""

    def __init__(self) -> None:
        super().__init__(":path, :authority and :method must not be empty")


@dataclass
class Request:
    """An HTTP/3 request as seen by a handler."""

    method: str
    url: SplitResult
    headers: Headers
    content_length: int
    host: str
    request_uri: str
    proto: str = "HTTP/3"
    proto_major: int = 3
    proto_minor: int = 0
    remote_addr: str = ""
    body: Any = None


def _parse_url(raw: str, *, absolute_only: bool) -> SplitResult:
    if _CONTROL.search(raw):
        raise RequestError(f"invalid control character in URL: {raw!r}")
    if not absolute_only and raw == "*":
        return SplitResult("", "", "*", "", "")
    try:
        url = urlsplit(raw)
        url.port  # noqa: B018 - validates the port
    except ValueError as exc:
        raise RequestError(f"invalid URL {raw!r}: {exc}") from exc
    if not url.scheme and not raw.startswith("/"):
        raise RequestError(f"invalid URI for request: {raw!r}")
    return url


def _parse_content_length(raw: str) -> int:
    if not _DECIMAL.fullmatch(raw):
        raise RequestError(f"invalid content-length: {raw!r}")
    value = int(raw)
    if not _INT64_MIN <= value <= _INT64_MAX:
        raise RequestError(f"content-length out of range: {raw!r}")
    return value


def request_from_headers(headers: Iterable[tuple[str, str]]) -> tuple[Request, str]:
    """Build a request from (name, value) pairs.

    Returns the request and the value of the :protocol pseudo-header,
    which defaults to "h3".
    """
    path = authority = method = protocol = content_length_raw = ""
    http_headers = Headers()

    for name, value in headers:
        if name == ":path":
            path = value
        elif name == ":method":
            method = value
        elif name == ":authority":
            authority = value
        elif name == ":protocol":
            protocol = value
        elif name == "content-length":
            content_length_raw = value
        elif not name.startswith(":"):
            http_headers.add_header(name, value)

    cookies = http_headers.get_all("Cookie")
    if cookies:
        http_headers["Cookie"] = "; ".join(cookies)

    if method == "CONNECT":
        url = _parse_url("https://" + authority + path, absolute_only=True)
    else:
        if not path or not authority or not method:
            raise PathAuthorityMethodEmptyError()
        url = _parse_url(path, absolute_only=False)

    content_length = _parse_content_length(content_length_raw) if content_length_raw else 0

    request = Request(
        method=method,
        url=url,
        headers=http_headers,
        content_length=content_length,
        host=authority,
        request_uri=path,
    )
    return request, protocol or "h3"