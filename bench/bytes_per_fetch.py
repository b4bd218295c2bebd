"""Sanity benchmark for split zip channels.

Builds a split archive of many small segments in a temporary directory and
checks how many bytes are read to reach the end-of-central-directory area
through disk coordinates. Meant for manual runs.
"""

import sys
import tempfile
import time
from pathlib import Path

# Add src to path for development
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from zipsplit import for_last_segment

SIG = b"PK\x07\x08"


def build_archive(directory: Path, parts: int, part_size: int) -> Path:
    for i in range(1, parts):
        (directory / f"bench.z{i:02d}").write_bytes(SIG + b"\0" * (part_size - len(SIG)))
    terminal = directory / "bench.zip"
    terminal.write_bytes(SIG + b"\0" * (part_size - len(SIG)))
    return terminal


def test_tail_efficiency(parts: int = 99, part_size: int = 64 * 1024):
    """Reading the last 22 bytes must not touch the other segments' data."""
    with tempfile.TemporaryDirectory() as tmp:
        terminal = build_archive(Path(tmp), parts, part_size)

        started = time.perf_counter()
        with for_last_segment(terminal) as channel:
            channel.seek_to_disk_offset(parts - 1, part_size - 22)
            channel.read(22)
            elapsed = time.perf_counter() - started

            print(f"Segments: {channel.segment_count}, total size: {channel.size} bytes")
            print(f"Total bytes fetched: {channel.bytes_fetched}")
            print(f"Open + validate + tail read: {elapsed * 1000:.1f} ms")
            assert channel.bytes_fetched == 22, f"Too many bytes: {channel.bytes_fetched}"


if __name__ == "__main__":
    print("zipsplit Split Channel Benchmark")
    print("=" * 40)

    test_tail_efficiency()

    print("\nBenchmark complete!")
