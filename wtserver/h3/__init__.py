"""HTTP/3 wire pieces: frames, settings, stream headers, QPACK, requests and responses."""

__all__ = ["frames", "settings", "streams", "qpack", "request_reader", "response_writer"]