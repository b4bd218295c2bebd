"""Split zip archives (.z01, .z02, ..., .zip) read as a single seekable channel."""

from __future__ import annotations

import io
import logging
from pathlib import Path
from typing import BinaryIO, Iterable, List, Sequence, Tuple, Union

from .core.model import MalformedSegmentError, SegmentInfo, SegmentOpenError
from .core.util import SPLIT_SIGNATURE_LENGTH, is_split_signature, to_global_position
from .discovery import SiblingLister, discover_segments
from .io import open_segment
from .io.base import SeekableSource
from .io.local import as_segment
from .io.multi import MultiSegmentChannel, close_all

logger = logging.getLogger(__name__)

SegmentSource = Union[SeekableSource, BinaryIO]


def verify_split_signatures(segments: Sequence[SeekableSource]) -> None:
    """Check that every segment starts with the split zip signature (0x08074B50).

    Every segment is left at local offset 0, whether the check passes or not.
    """
    try:
        for i, segment in enumerate(segments):
            # the split signature is always at the beginning of the segment
            try:
                segment.seek(0)
                head = segment.read(SPLIT_SIGNATURE_LENGTH)
            finally:
                segment.seek(0)
            if not is_split_signature(head):
                raise MalformedSegmentError(i + 1)
    except BaseException:
        _rewind(segments)
        raise
    logger.debug("verified split signature of %d segment(s)", len(segments))


def _rewind(segments: Sequence[SeekableSource]) -> None:
    for i, segment in enumerate(segments):
        try:
            segment.seek(0)
        except Exception as e:
            logger.warning("failed to rewind segment %d: %s", i, e)


class SplitZipChannel:
    """Split zip segments presented as one read-only seekable channel.

    Segments must be given in ascending order with the `.zip` segment last
    (.z01, .z02, ... .z99, .zip). Every segment has to begin with the split
    signature; this is checked once, here. The signature bytes stay part of
    the stream, as the archive's offsets count them.
    """

    def __init__(self, segments: Iterable[SeekableSource]):
        segments = tuple(segments)
        if not segments:
            raise ValueError("At least one segment is required")
        verify_split_signatures(segments)
        self._channel = MultiSegmentChannel(segments)

    # --- coordinate translation ---
    def seek_to_disk_offset(self, disk_number: int, relative_offset: int) -> int:
        """Seek to `relative_offset` inside the segment with `disk_number`.

        Returns the resulting global position.
        """
        with self._channel.lock:
            global_position = to_global_position(self._channel.segment_sizes, disk_number, relative_offset)
            return self._channel.seek(global_position)

    # ZIP readers name this after the central directory fields
    position = seek_to_disk_offset

    def disk_coordinate(self, position: int | None = None) -> Tuple[int, int]:
        """Return (disk number, relative offset) of `position` (the cursor by default)."""
        with self._channel.lock:
            if position is None:
                position = self._channel.tell()
            return self._channel.locate(position)

    # --- delegated channel operations ---
    @property
    def size(self) -> int:
        return self._channel.size

    @property
    def segments(self) -> Tuple[SeekableSource, ...]:
        return self._channel.segments

    @property
    def segment_count(self) -> int:
        return self._channel.segment_count

    @property
    def bytes_fetched(self) -> int:
        return self._channel.bytes_fetched

    @property
    def lock(self):
        """Lock guarding the shared cursor; hold it to chain a seek and a read."""
        return self._channel.lock

    @property
    def closed(self) -> bool:
        return self._channel.closed

    def describe(self) -> List[SegmentInfo]:
        return self._channel.describe()

    def readable(self) -> bool:
        return True

    def seekable(self) -> bool:
        return True

    def writable(self) -> bool:
        return False

    def read(self, size: int = -1) -> bytes:
        return self._channel.read(size)

    def readinto(self, buffer) -> int:
        return self._channel.readinto(buffer)

    def fetch(self, start: int, length: int) -> bytes:
        """Return exactly `length` bytes starting at absolute offset `start`."""
        return self._channel.fetch(start, length)

    def seek(self, offset: int, whence: int = io.SEEK_SET) -> int:
        return self._channel.seek(offset, whence)

    def tell(self) -> int:
        return self._channel.tell()

    def close(self):
        self._channel.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()


# ---------------------------------------------------------------------- #
def for_segments(
    segments: Iterable[SegmentSource],
    *,
    last_segment: SegmentSource | None = None,
) -> SeekableSource:
    """Concatenate already opened segments.

    `segments` must be in disk order. When `last_segment` (the `.zip` part)
    is given it is appended after them. A single segment is returned as is,
    without wrapping or signature check: a lone file is trusted like any
    non-split archive.
    """
    if segments is None:
        raise TypeError("segments must not be None")
    items = [as_segment(s) for s in segments]
    if last_segment is not None:
        items.append(as_segment(last_segment))
    if not items:
        raise ValueError("At least one segment is required")
    if len(items) == 1:
        return items[0]
    return SplitZipChannel(items)


def for_files(
    paths: Iterable[Union[str, Path]],
    *,
    last_segment: Union[str, Path, None] = None,
) -> SeekableSource:
    """Open the given paths (or URLs) read-only, in order, and concatenate them.

    If any of them cannot be opened, or the split signature check fails,
    the segments opened so far are closed before the error propagates.
    """
    if paths is None:
        raise TypeError("paths must not be None")
    paths = list(paths)
    if last_segment is not None:
        paths.append(last_segment)
    if not paths:
        raise ValueError("At least one file is required")

    opened: List[SeekableSource] = []
    try:
        for path in paths:
            try:
                opened.append(open_segment(path))
            except (OSError, ValueError) as e:
                raise SegmentOpenError(path, e) from e
        if len(opened) == 1:
            return opened[0]
        return SplitZipChannel(opened)
    except BaseException:
        if opened:
            logger.debug("assembly failed, closing %d opened segment(s)", len(opened))
            close_all(opened)
        raise


def for_last_segment(
    terminal_path: Union[str, Path],
    *,
    lister: SiblingLister | None = None,
) -> SeekableSource:
    """Find every part of the split archive ending in `terminal_path` (.zip) and concatenate them."""
    return for_files(discover_segments(terminal_path, lister=lister))
