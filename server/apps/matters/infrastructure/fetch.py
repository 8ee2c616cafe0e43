"""Remote fetch of crawled urls."""

import io
import logging
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Final, final, override

import requests
from django.conf import settings

_CHUNK_SIZE: Final = 64 * 1024  # 64KB chunks for body downloads

logger = logging.getLogger(__name__)


def _get_timeout() -> int:
    """Get remote fetch timeout in seconds.

    Returns:
        Timeout from settings or default of 30 seconds.
    """
    return getattr(settings, 'MATTER_CRAWL_TIMEOUT', 30)


@final
class ResponseStream(io.RawIOBase):
    """Read-only binary stream over a streamed ``requests`` response.

    Transport failures while reading surface as
    ``requests.RequestException`` (an ``OSError``), like failures
    while connecting.
    """

    def __init__(self, response: requests.Response) -> None:
        """Initialize ResponseStream.

        Args:
            response: Response opened with ``stream=True``.
        """
        super().__init__()
        self._chunks = response.iter_content(_CHUNK_SIZE)
        self._buffer = b''

    @override
    def readable(self) -> bool:
        return True

    @override
    def readinto(self, buffer: bytearray | memoryview) -> int:  # type: ignore[override]
        while not self._buffer:
            chunk = next(self._chunks, None)
            if chunk is None:
                return 0
            self._buffer = chunk

        size = min(len(buffer), len(self._buffer))
        buffer[:size] = self._buffer[:size]
        self._buffer = self._buffer[size:]
        return size


@contextmanager
def open_remote_stream(url: str) -> Iterator[io.RawIOBase]:
    """Open the body of a remote resource as a binary stream.

    The connection is closed when the context exits.

    Args:
        url: http(s) url of the resource.

    Yields:
        Readable stream of the decoded response body.

    Raises:
        requests.RequestException: If the request fails or the server
            answers with an error status.
    """
    logger.info('Fetching remote resource: %s', url)
    response = requests.get(url, stream=True, timeout=_get_timeout())
    try:
        response.raise_for_status()
        yield ResponseStream(response)
    finally:
        response.close()
