from __future__ import annotations
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List


@dataclass(slots=True)
class Result:
    success: bool
    data: Dict[str, Any] | None
    error: str | None
    bytes_fetched: int         # filled by the channel that served the bytes


@dataclass(frozen=True, slots=True)
class SegmentInfo:
    index: int                 # 0-based disk number
    name: str
    size: int
    start: int                 # global offset of the segment's first byte


class SplitArchiveError(OSError):
    """Base class for errors raised while assembling or reading a split archive."""


class MalformedSegmentError(SplitArchiveError):
    """Raised when a segment does not begin with the split signature."""

    def __init__(self, index: int):
        self.index = index     # 1-based
        super().__init__(f"No.{index} split zip segment does not begin with the split zip signature")


class InvalidTerminalSegmentError(SplitArchiveError, ValueError):
    """Raised when the last segment does not carry the full archive extension."""

    def __init__(self, path: str | Path, extension: str = "zip"):
        self.path = Path(path)
        super().__init__(f"The extension of the last split zip segment should be .{extension}: {self.path}")


class SegmentOpenError(SplitArchiveError):
    """Raised when one of the segments cannot be opened."""

    def __init__(self, path: str | Path, cause: BaseException):
        self.path = str(path)
        self.cause = cause
        super().__init__(f"Cannot open segment {self.path}: {cause}")


class SegmentOutOfRangeError(SplitArchiveError, ValueError):
    """Raised when a disk number or global position falls outside the channel."""


class SegmentCloseError(SplitArchiveError):
    """Raised after close() when one or more segments failed to close."""

    def __init__(self, errors: List[BaseException]):
        self.errors = list(errors)
        detail = "; ".join(str(e) for e in self.errors)
        super().__init__(f"{len(self.errors)} segment(s) failed to close: {detail}")
