"""TLS configuration for the WebTransport server."""

from __future__ import annotations

import ssl
import tempfile
from dataclasses import dataclass
from pathlib import Path

ALPN_PROTOCOLS = ("h3", "h3-32", "h3-31", "h3-30", "h3-29")


@dataclass(frozen=True)
class CertFile:
    """A certificate or key given either as a file path or as PEM data."""

    path: str = ""
    data: bytes = b""

    def is_file_path(self) -> bool:
        """Report whether this refers to a file path."""
        return self.path != ""


def make_tls_context(cert: CertFile, key: CertFile) -> ssl.SSLContext:
    """Build a server TLS context offering the supported HTTP/3 ALPN protocols.

    Files are used when both *cert* and *key* name a path; otherwise
    both are taken from their data.
    """
    context = ssl.SSLContext(ssl.PROTOCOL_TLS_SERVER)
    context.set_alpn_protocols(list(ALPN_PROTOCOLS))
    if cert.is_file_path() and key.is_file_path():
        context.load_cert_chain(cert.path, key.path)
        return context
    with tempfile.TemporaryDirectory() as tmp:
        cert_path = Path(tmp) / "cert.pem"
        key_path = Path(tmp) / "key.pem"
        cert_path.write_bytes(cert.data)
        key_path.write_bytes(key.data)
        context.load_cert_chain(cert_path, key_path)
    return context