"""Request body streams."""

from collections.abc import Iterator
from typing import BinaryIO

import httpx

DEFAULT_CHUNK_SIZE = 64 * 1024


class FileChunks:
    """Iterable over at most `length` bytes of a file.

    Seekable files are rewound on every iteration, so the body can be sent again
    when a transport retries the request.
    """

    def __init__(self, file: BinaryIO, length: int, chunk_size: int = DEFAULT_CHUNK_SIZE) -> None:
        """Initialize the iterable."""
        self._file = file
        self._length = length
        self._chunk_size = chunk_size
        self._start = file.tell() if file.seekable() else None

    def __iter__(self) -> Iterator[bytes]:
        """Iterate over the chunks of the file."""
        if self._start is not None:
            self._file.seek(self._start)
        remaining = self._length
        while remaining > 0:
            chunk = self._file.read(min(self._chunk_size, remaining))
            if not chunk:
                break
            remaining -= len(chunk)
            yield chunk


def encode_payload(
    payload: bytes | BinaryIO | None,
    content_length: int | None,
    headers: httpx.Headers,
) -> bytes | FileChunks | None:
    """Prepare a payload to be sent by httpx with an explicit length.

    The length is set on the outgoing headers, so httpx frames the body with
    ``Content-Length`` instead of chunked transfer encoding.

    Args:
        payload: Body of the request.
        content_length: Length declared by the caller, if any.
        headers: Outgoing headers, updated in place.

    Returns:
        Content to hand to httpx.

    """
    if payload is None:
        if content_length is not None:
            headers["Content-Length"] = str(content_length)
        return None

    if isinstance(payload, bytes):
        body = payload if content_length is None else payload[:content_length]
        headers["Content-Length"] = str(len(body))
        return body

    if content_length is None:
        body = payload.read()
        headers["Content-Length"] = str(len(body))
        return body

    headers["Content-Length"] = str(content_length)
    return FileChunks(payload, content_length)
