"""Asynchronous facade over blocking channels - thin wrapper that uses worker threads."""

import asyncio
import io

from .base import SeekableSource


class AsyncChannel:
    """Run each blocking channel call in a worker thread.

    The wrapped channel keeps its own lock, so concurrent coroutines see
    the same ordering guarantees as concurrent threads.
    """

    def __init__(self, channel: SeekableSource):
        self._channel = channel

    @property
    def channel(self) -> SeekableSource:
        return self._channel

    @property
    def size(self) -> int:
        return self._channel.size

    @property
    def bytes_fetched(self) -> int:
        return getattr(self._channel, "bytes_fetched", 0)

    async def tell(self) -> int:
        # the channel lock is held for the whole of a read running in a worker
        return await asyncio.to_thread(self._channel.tell)

    async def read(self, size: int = -1) -> bytes:
        return await asyncio.to_thread(self._channel.read, size)

    async def seek(self, offset: int, whence: int = io.SEEK_SET) -> int:
        return await asyncio.to_thread(self._channel.seek, offset, whence)

    async def fetch(self, start: int, length: int) -> bytes:
        """Return exactly `length` bytes starting at absolute offset `start`."""
        return await asyncio.to_thread(self._channel.fetch, start, length)

    async def seek_to_disk_offset(self, disk_number: int, relative_offset: int) -> int:
        if not hasattr(self._channel, "seek_to_disk_offset"):
            raise TypeError(f"{type(self._channel).__name__} has no disk coordinates")
        return await asyncio.to_thread(self._channel.seek_to_disk_offset, disk_number, relative_offset)

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    async def close(self):
        """Close the wrapped channel."""
        await asyncio.to_thread(self._channel.close)
