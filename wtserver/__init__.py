"""WebTransport-over-HTTP/3 server layer: sessions, streams, datagrams and TLS setup."""

__version__ = "0.1.0"
__all__ = ["quicvarint", "stream", "session", "tlsconfig", "server", "h3"]