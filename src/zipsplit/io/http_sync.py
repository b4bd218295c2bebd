"""HTTP segments read with Range requests using requests."""

import io
import logging
from typing import Optional

import requests

from .base import RangeNotSupportedError, HTTP_TIMEOUT

logger = logging.getLogger(__name__)

# Module-level session for connection pooling
_session = None


def _get_session():
    """Get or create the global requests session."""
    global _session
    if _session is None:
        _session = requests.Session()
    return _session


class HTTPSegment:
    """Read-only segment served over HTTP, one Range request per read."""

    def __init__(self, url: str):
        self.url = url
        self.name = url
        self.bytes_fetched = 0
        self.requests_made = 0
        self.content_length: Optional[int] = None
        self._accept_ranges = False
        self._position = 0
        self._closed = False
        self._session = _get_session()

        # Perform HEAD request immediately
        self._perform_head()

    def _perform_head(self):
        """Perform HEAD request to learn the segment size and range support."""
        try:
            self.requests_made += 1
            response = self._session.head(self.url, timeout=HTTP_TIMEOUT)
            if response.status_code >= 400:
                raise IOError(f"HEAD request failed with status {response.status_code}")

            content_length_header = response.headers.get('content-length')
            if content_length_header is None:
                raise IOError(f"HEAD response for {self.url} has no Content-Length")
            self.content_length = int(content_length_header)

            accept_ranges = response.headers.get('accept-ranges', '').lower()
            self._accept_ranges = accept_ranges == 'bytes'

        except requests.RequestException as e:
            raise IOError(f"HEAD request failed: {e}")

        logger.debug("opened http segment %s (%d bytes, ranges=%s)",
                     self.url, self.content_length, self._accept_ranges)

    def _fetch_range(self, start: int, length: int, retry_count: int = 0) -> bytes:
        """Fetch a specific byte range."""
        end = start + length - 1
        headers = {'Range': f'bytes={start}-{end}'}

        try:
            self.requests_made += 1
            response = self._session.get(self.url, headers=headers, timeout=HTTP_TIMEOUT)

            if response.status_code == 206:
                data = response.content

                # Server might return less than requested - handle this
                if len(data) < length and retry_count == 0:
                    remaining = length - len(data)
                    self.bytes_fetched += len(data)
                    return data + self._fetch_range(start + len(data), remaining, retry_count + 1)

                self.bytes_fetched += len(data)
                return data

            elif response.status_code == 200:
                raise RangeNotSupportedError(f"Server ignored Range request for {self.url}")

            else:
                raise IOError(f"Range request failed with status {response.status_code}")

        except requests.RequestException as e:
            if retry_count == 0:
                # One automatic retry
                return self._fetch_range(start, length, retry_count + 1)
            raise IOError(f"Range request failed: {e}")

    @property
    def size(self) -> int:
        return self.content_length

    @property
    def closed(self) -> bool:
        return self._closed

    def _check_open(self):
        if self._closed:
            raise ValueError(f"I/O operation on closed segment {self.url}")

    def fetch(self, start: int, length: int) -> bytes:
        """Return exactly `length` bytes starting at absolute offset `start`."""
        self._check_open()
        if start < 0:
            raise IOError("Start offset cannot be negative")

        if length <= 0:
            raise IOError("Length must be positive")

        if start + length > self.content_length:
            raise IOError(f"Not enough data: requested {length} bytes at offset {start}, "
                          f"but segment only has {self.content_length} bytes")

        if not self._accept_ranges:
            raise RangeNotSupportedError(f"Server doesn't support ranges for {self.url}")

        data = self._fetch_range(start, length)
        if len(data) != length:
            raise IOError(f"Not enough data: requested {length} bytes at offset {start}, got {len(data)}")
        return data

    def read(self, size: int = -1) -> bytes:
        self._check_open()
        remaining = self.content_length - self._position
        if size is None or size < 0 or size > remaining:
            size = remaining
        if size <= 0:
            return b''
        data = self.fetch(self._position, size)
        self._position += len(data)
        return data

    def seek(self, offset: int, whence: int = io.SEEK_SET) -> int:
        self._check_open()
        if whence == io.SEEK_SET:
            new_position = offset
        elif whence == io.SEEK_CUR:
            new_position = self._position + offset
        elif whence == io.SEEK_END:
            new_position = self.content_length + offset
        else:
            raise ValueError(f"Invalid whence: {whence}")

        if new_position < 0:
            raise ValueError("Seek position cannot be negative")
        self._position = new_position
        return self._position

    def tell(self) -> int:
        self._check_open()
        return self._position

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

    def close(self):
        # Session is shared, don't close it here
        self._closed = True


def open_http_segment(url: str) -> HTTPSegment:
    """Open a URL as a segment."""
    return HTTPSegment(url)
