from __future__ import annotations
import re
import struct
from pathlib import Path
from typing import Any, Dict, Iterable, Sequence

from .model import Result, SegmentOutOfRangeError

ZIP_SPLIT_SIGNATURE = 0x08074B50       # "PK\x07\x08", little-endian on disk
SPLIT_SIGNATURE_LENGTH = 4
TERMINAL_EXTENSION = "zip"

_SPLIT_SUFFIX_RE = re.compile(r"\.z(?P<number>[0-9]+)\Z")


def is_split_signature(head: bytes) -> bool:
    """True when `head` is exactly the 4-byte split signature."""
    if len(head) != SPLIT_SIGNATURE_LENGTH:
        return False
    return struct.unpack("<I", head)[0] == ZIP_SPLIT_SIGNATURE


def to_global_position(sizes: Sequence[int], disk_number: int, relative_offset: int) -> int:
    """Map a ZIP (disk number, relative offset) pair onto the concatenated stream.

    The resulting position is not checked against the total size; the
    channel's absolute seek does that.
    """
    if not 0 <= disk_number < len(sizes):
        raise SegmentOutOfRangeError(
            f"Disk number {disk_number} out of range: archive has {len(sizes)} segments")
    if relative_offset < 0:
        raise SegmentOutOfRangeError(f"Relative offset cannot be negative: {relative_offset}")

    global_position = relative_offset
    for i in range(disk_number):
        global_position += sizes[i]
    return global_position


def get_extension(path: str | Path) -> str:
    """Return the final extension without the dot ('' when there is none)."""
    return Path(path).suffix[1:]


def get_base_name(path: str | Path) -> str:
    """Return the file name without its final extension."""
    return Path(path).stem


def split_pattern(base_name: str) -> re.Pattern:
    """Pattern matching `<base_name>.z<digits>` sibling names."""
    return re.compile(re.escape(base_name) + r"\.z[0-9]+")


def split_number(name: str) -> int | None:
    """Numeric part of a `.z<digits>` suffix, or None when `name` has none."""
    m = _SPLIT_SUFFIX_RE.search(name)
    if m is None:
        return None
    return int(m.group("number"))


def result_asdict(res: Result, *, fields: Iterable[str] | None = None) -> Dict[str, Any]:
    """Return a JSON-serialisable dict (skip None) optionally filtered."""
    if not res.success or res.data is None:
        return {"success": False, "error": res.error, "bytes_fetched": res.bytes_fetched}
    payload = {k: v for k, v in res.data.items() if v is not None}
    if fields:
        wanted = set(fields)
        payload = {k: v for k, v in payload.items() if k in wanted}
    payload.update({"success": True, "bytes_fetched": res.bytes_fetched})
    return payload
