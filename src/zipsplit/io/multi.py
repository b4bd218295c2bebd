"""Concatenation of several segments into one seekable channel."""

from __future__ import annotations

import bisect
import io
import logging
import threading
from typing import Iterable, List, Sequence, Tuple

from ..core.model import SegmentCloseError, SegmentInfo, SegmentOutOfRangeError
from .base import SeekableSource

logger = logging.getLogger(__name__)


class MultiSegmentChannel:
    """Read-only view over an ordered list of segments as one byte stream.

    The channel owns the segments: closing it closes every one of them.
    All cursor-affecting operations run under a single re-entrant lock, so
    a read always starts where the last completed seek or read left the
    cursor.
    """

    def __init__(self, segments: Iterable[SeekableSource]):
        self._segments: Tuple[SeekableSource, ...] = tuple(segments)
        if not self._segments:
            raise ValueError("At least one segment is required")

        # sizes are fixed once a segment is opened
        self._sizes: Tuple[int, ...] = tuple(s.size for s in self._segments)
        self._starts: List[int] = []
        offset = 0
        for size in self._sizes:
            self._starts.append(offset)
            offset += size
        self._total_size = offset

        self._position = 0
        self._closed = False
        self._lock = threading.RLock()
        self.bytes_fetched = 0
        self.requests_made = 0

    # ------------------------------------------------------------------ #
    @property
    def segments(self) -> Tuple[SeekableSource, ...]:
        return self._segments

    @property
    def segment_sizes(self) -> Tuple[int, ...]:
        return self._sizes

    @property
    def segment_count(self) -> int:
        return len(self._segments)

    @property
    def size(self) -> int:
        """Return the sum of all segment sizes."""
        return self._total_size

    @property
    def lock(self) -> threading.RLock:
        """Lock guarding the shared cursor; hold it to chain several operations."""
        return self._lock

    @property
    def closed(self) -> bool:
        return self._closed

    def _check_open(self):
        if self._closed:
            raise ValueError("I/O operation on closed channel")

    def readable(self) -> bool:
        return True

    def seekable(self) -> bool:
        return True

    def writable(self) -> bool:
        return False

    # ------------------------------------------------------------------ #
    def locate(self, position: int) -> Tuple[int, int]:
        """Return (segment index, local offset) for a global position.

        The end of the stream maps onto the end of the last segment.
        """
        if not 0 <= position <= self._total_size:
            raise SegmentOutOfRangeError(
                f"Position {position} outside channel of {self._total_size} bytes")
        if position == self._total_size:
            last = len(self._sizes) - 1
            return last, self._sizes[last]
        index = bisect.bisect_right(self._starts, position) - 1
        return index, position - self._starts[index]

    def describe(self) -> List[SegmentInfo]:
        """Return one SegmentInfo per segment, in disk order."""
        return [
            SegmentInfo(i, str(getattr(seg, "name", f"segment-{i}")), size, start)
            for i, (seg, size, start) in enumerate(zip(self._segments, self._sizes, self._starts))
        ]

    # ------------------------------------------------------------------ #
    def tell(self) -> int:
        with self._lock:
            self._check_open()
            return self._position

    def seek(self, offset: int, whence: int = io.SEEK_SET) -> int:
        """Move the global cursor; positions outside [0, size] are rejected."""
        with self._lock:
            self._check_open()
            if whence == io.SEEK_SET:
                new_position = offset
            elif whence == io.SEEK_CUR:
                new_position = self._position + offset
            elif whence == io.SEEK_END:
                new_position = self._total_size + offset
            else:
                raise ValueError(f"Invalid whence: {whence}")

            if not 0 <= new_position <= self._total_size:
                raise SegmentOutOfRangeError(
                    f"Seek position {new_position} outside channel of {self._total_size} bytes")

            self._position = new_position
            return self._position

    def read(self, size: int = -1) -> bytes:
        """Read bytes from the current position across segment boundaries."""
        with self._lock:
            self._check_open()
            if size is None or size < 0:
                requested = self._total_size - self._position
            else:
                requested = min(size, self._total_size - self._position)

            remaining = requested
            chunks: list[bytes] = []

            while remaining > 0:
                index, local_offset = self.locate(self._position)
                segment_remaining = self._sizes[index] - local_offset
                if segment_remaining <= 0:
                    break

                segment = self._segments[index]
                segment.seek(local_offset)
                data = segment.read(min(remaining, segment_remaining))
                if not data:
                    # segment is shorter than the size it reported
                    logger.warning("segment %d returned no data at local offset %d", index, local_offset)
                    break

                chunks.append(data)
                self._position += len(data)
                remaining -= len(data)

            self.requests_made += 1
            result = b"".join(chunks)
            self.bytes_fetched += len(result)
            return result

    def readinto(self, buffer) -> int:
        view = memoryview(buffer).cast("B")
        data = self.read(len(view))
        view[:len(data)] = data
        return len(data)

    def fetch(self, start: int, length: int) -> bytes:
        """Return exactly `length` bytes starting at absolute offset `start`."""
        with self._lock:
            if start < 0:
                raise IOError("Start offset cannot be negative")
            if start + length > self._total_size:
                raise IOError(f"Not enough data: requested {length} bytes at offset {start}, "
                              f"but channel only has {self._total_size} bytes")
            self.seek(start)
            data = self.read(length)
            if len(data) != length:
                raise IOError(f"Not enough data: requested {length} bytes at offset {start}, got {len(data)}")
            return data

    # ------------------------------------------------------------------ #
    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

    def close(self):
        """Close every segment; failures are collected and raised together."""
        with self._lock:
            if self._closed:
                return
            self._closed = True
            errors = close_all(self._segments)
        if errors:
            raise SegmentCloseError(errors)


def close_all(segments: Sequence[SeekableSource]) -> List[BaseException]:
    """Attempt to close every segment, returning the errors raised on the way."""
    errors: List[BaseException] = []
    for i, segment in enumerate(segments):
        try:
            segment.close()
        except Exception as e:
            logger.warning("failed to close segment %d: %s", i, e)
            errors.append(e)
    logger.debug("closed %d segment(s), %d error(s)", len(segments), len(errors))
    return errors
