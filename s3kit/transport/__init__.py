"""HTTP transport."""

from s3kit.transport.resilient import ResilientTransport, new_http_client
from s3kit.transport.streams import FileChunks, encode_payload

__all__ = ["FileChunks", "ResilientTransport", "encode_payload", "new_http_client"]
