"""Local file segments."""

import io
import logging
from pathlib import Path
from typing import BinaryIO, Union

from .base import SeekableSource

logger = logging.getLogger(__name__)


class LocalSegment:
    """Read-only segment backed by a local file or a binary file object."""

    def __init__(self, source: Union[Path, str, BinaryIO]):
        self.bytes_fetched = 0
        self.requests_made = 0

        if hasattr(source, 'read'):
            # BinaryIO object, owned by the segment from now on
            if not source.seekable():
                raise IOError("File is not seekable, cannot use it as a segment")
            self._file = source
            self.name = str(getattr(source, "name", "<stream>"))
        else:
            # Path or str
            self._file = open(source, 'rb')
            self.name = str(source)
            logger.debug("opened local segment %s", self.name)

        current_pos = self._file.tell()
        self._size = self._file.seek(0, io.SEEK_END)
        self._file.seek(current_pos)

    @property
    def size(self) -> int:
        """Return the total size of the segment in bytes."""
        return self._size

    @property
    def closed(self) -> bool:
        return self._file is None or self._file.closed

    def _check_open(self):
        if self._file is None:
            raise ValueError(f"I/O operation on closed segment {self.name}")

    def read(self, size: int = -1) -> bytes:
        self._check_open()
        self.requests_made += 1
        data = self._file.read(size)
        self.bytes_fetched += len(data)
        return data

    def seek(self, offset: int, whence: int = io.SEEK_SET) -> int:
        self._check_open()
        return self._file.seek(offset, whence)

    def tell(self) -> int:
        self._check_open()
        return self._file.tell()

    def fetch(self, start: int, length: int) -> bytes:
        """Return exactly `length` bytes starting at absolute offset `start`."""
        if start < 0:
            raise IOError("Start offset cannot be negative")

        if start + length > self._size:
            raise IOError(f"Not enough data: requested {length} bytes at offset {start}, "
                          f"but segment only has {self._size} bytes")

        self.seek(start)
        return self.read(length)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

    def close(self):
        """Close the underlying file."""
        if self._file is not None:
            self._file.close()
            logger.debug("closed local segment %s", self.name)
            self._file = None


def open_local_segment(source: Union[Path, str, BinaryIO]) -> LocalSegment:
    """Open a local path or binary file object as a segment."""
    return LocalSegment(source)


def as_segment(source) -> SeekableSource:
    """Return `source` when it already is a segment, else wrap it as a LocalSegment."""
    if isinstance(source, SeekableSource):
        return source
    return LocalSegment(source)
