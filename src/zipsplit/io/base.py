"""Base protocols and shared types for I/O layer."""

import io
from typing import Protocol, runtime_checkable


class RangeNotSupportedError(RuntimeError):
    """Raised when an HTTP server rejects Range requests for a segment."""


HTTP_TIMEOUT = 30  # seconds


@runtime_checkable
class SeekableSource(Protocol):
    """Protocol for a read-only, seekable byte source of fixed size.

    Segments and the channels composed from them both satisfy it, so a
    composite can be handed anywhere a single segment is expected.
    """

    size: int  # total bytes, fixed once opened

    def read(self, size: int = -1) -> bytes:
        """Read up to `size` bytes from the current position (all when negative)."""
        ...

    def seek(self, offset: int, whence: int = io.SEEK_SET) -> int:
        """Move the cursor and return the new absolute position."""
        ...

    def tell(self) -> int:
        ...

    def close(self) -> None:
        ...
