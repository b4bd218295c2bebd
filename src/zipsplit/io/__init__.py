"""I/O layer for zipsplit - segments and the channels composed from them."""

# Re-export these for import convenience
from .base import SeekableSource, RangeNotSupportedError
from .local import LocalSegment, open_local_segment
from .http_sync import HTTPSegment, open_http_segment
from .multi import MultiSegmentChannel
from .threaded import AsyncChannel


def open_segment(source):
    """Factory function to open the appropriate segment based on source type."""
    if hasattr(source, 'read'):  # BinaryIO
        return open_local_segment(source)

    source_str = str(source)
    if source_str.startswith(('http://', 'https://')):
        return open_http_segment(source_str)
    else:
        return open_local_segment(source)
