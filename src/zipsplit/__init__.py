"""zipsplit - read split zip archives (.z01, .z02, ..., .zip) as one seekable stream."""

import asyncio
from pathlib import Path

from .core.model import (                                              # re-export
    Result, SegmentInfo, SplitArchiveError, MalformedSegmentError,
    InvalidTerminalSegmentError, SegmentOpenError, SegmentOutOfRangeError,
    SegmentCloseError,
)
from .core.util import ZIP_SPLIT_SIGNATURE, TERMINAL_EXTENSION
from .discovery import DirectorySiblingLister, discover_segments
from .io import AsyncChannel, LocalSegment, MultiSegmentChannel, SeekableSource, open_segment
from .split import SplitZipChannel, for_files, for_last_segment, for_segments, verify_split_signatures


def open_split(source):
    """Open a split archive from a terminal path, a list of parts, or a file object."""
    if hasattr(source, 'read'):  # BinaryIO
        return for_segments([source])

    if isinstance(source, (list, tuple)):
        if source and all(hasattr(s, 'read') for s in source):
            return for_segments(source)
        return for_files(source)

    source_str = str(source)
    if source_str.startswith(('http://', 'https://')):
        return for_files([source_str])
    if Path(source_str).suffix == f".{TERMINAL_EXTENSION}":
        return for_last_segment(source_str)
    return for_files([source_str])


async def open_split_async(source) -> AsyncChannel:
    """Open a split archive like open_split and wrap it for use from coroutines."""
    channel = await asyncio.to_thread(open_split, source)
    return AsyncChannel(channel)


__all__ = [
    "open_split", "open_split_async",
    "for_segments", "for_files", "for_last_segment", "discover_segments",
    "SplitZipChannel", "MultiSegmentChannel", "AsyncChannel", "LocalSegment",
    "SeekableSource", "DirectorySiblingLister", "verify_split_signatures", "open_segment",
    "Result", "SegmentInfo", "SplitArchiveError", "MalformedSegmentError",
    "InvalidTerminalSegmentError", "SegmentOpenError", "SegmentOutOfRangeError",
    "SegmentCloseError", "ZIP_SPLIT_SIGNATURE",
]
