"""Awaited twin of BufferedRangeReader."""

from __future__ import annotations

import logging
from typing import AsyncIterator, Optional

from .core.model import TransportError, UnsupportedOperationError
from .core.window import DEFAULT_BUFFER_SIZE, RangeBuffer, clip_body, fetch_window
from .io.base import AsyncStorageClient

LOG = logging.getLogger("gcsstream.reader_async")


class AsyncBufferedRangeReader:
    """Forward-only buffered reader whose fetches are awaited.

    Same buffering rules as BufferedRangeReader. Create it with
    `open_object_async`, which performs the metadata lookup.
    """

    def __init__(
        self,
        client: AsyncStorageClient,
        bucket: str,
        key: str,
        buffer_size: int = DEFAULT_BUFFER_SIZE,
    ) -> None:
        if buffer_size <= 0:
            raise ValueError(f"buffer_size must be positive, got {buffer_size}")
        self._client = client
        self.bucket = bucket
        self.key = key
        self.buffer_size = buffer_size
        self.bytes_fetched = 0
        self.requests_made = 0
        self._position = 0
        self._size: Optional[int] = None
        self._buffer: Optional[RangeBuffer] = None
        self._closed = False

    async def _ensure_initialized(self) -> None:
        """Look up the object size if not already done."""
        if self._size is not None:
            return
        info = await self._client.get_object_info(self.bucket, self.key)
        self._size = info.size if info.size is not None else 0
        LOG.debug("Opened gs://%s/%s (%d bytes)", self.bucket, self.key, self._size)

    async def _fetch(self, start: int) -> RangeBuffer:
        start, end = fetch_window(start, self.buffer_size, self._size)
        self.requests_made += 1
        body = clip_body(await self._client.fetch_range(self.bucket, self.key, start, end), start, end)
        if not body:
            raise TransportError(
                f"Empty body for gs://{self.bucket}/{self.key} bytes={start}-{end}"
            )
        if len(body) < end - start + 1:
            LOG.warning(
                "Short range body for gs://%s/%s: wanted %d bytes at %d, got %d",
                self.bucket, self.key, end - start + 1, start, len(body),
            )
        self.bytes_fetched += len(body)
        return RangeBuffer(start, body)

    async def readinto(self, b) -> int:
        """Read up to ``len(b)`` bytes into `b`; return the count, 0 at EOF."""
        self._check_open()
        await self._ensure_initialized()
        if self._position >= self._size:
            return 0

        view = memoryview(b).cast("B")
        count = min(len(view), self._size - self._position)
        if count == 0:
            return 0

        buffered = self._buffer.remaining if self._buffer is not None else 0
        fresh = None
        if buffered < count:
            fresh = await self._fetch(self._position + buffered)

        n = 0
        if buffered:
            n = self._buffer.copy_into(view, count)
        if fresh is not None:
            self._buffer = fresh
            n += fresh.copy_into(view[n:], count - n)

        self._position += n
        return n

    async def read(self, size: int = -1) -> bytes:
        if size is None or size < 0:
            return await self.readall()
        self._check_open()
        await self._ensure_initialized()
        buffered = self._buffer.remaining if self._buffer is not None else 0
        buf = bytearray(min(size, max(self._size - self._position, 0), buffered + self.buffer_size))
        if not buf:
            return b""
        n = await self.readinto(buf)
        del buf[n:]
        return bytes(buf)

    async def readall(self) -> bytes:
        chunks = []
        async for chunk in self.iter_chunks():
            chunks.append(chunk)
        return b"".join(chunks)

    async def iter_chunks(self) -> AsyncIterator[bytes]:
        while True:
            chunk = await self.read(self.buffer_size)
            if not chunk:
                return
            yield chunk

    def __aiter__(self) -> AsyncIterator[bytes]:
        return self.iter_chunks()

    @property
    def size(self) -> int:
        if self._size is None:
            raise ValueError("Reader not initialized; use open_object_async()")
        return self._size

    def length(self) -> int:
        return self.size

    @property
    def position(self) -> int:
        return self._position

    @position.setter
    def position(self, value: int) -> None:
        raise UnsupportedOperationError("AsyncBufferedRangeReader position cannot be set")

    def tell(self) -> int:
        return self._position

    def readable(self) -> bool:
        return True

    def seekable(self) -> bool:
        return False

    def writable(self) -> bool:
        return False

    def seek(self, offset: int, whence: int = 0, /) -> int:
        raise UnsupportedOperationError("AsyncBufferedRangeReader does not support seek")

    def truncate(self, size: Optional[int] = None, /) -> int:
        raise UnsupportedOperationError("AsyncBufferedRangeReader does not support truncate")

    def write(self, b, /) -> int:
        raise UnsupportedOperationError("AsyncBufferedRangeReader is read-only")

    def flush(self) -> None:
        raise UnsupportedOperationError("AsyncBufferedRangeReader does not support flush")

    @property
    def closed(self) -> bool:
        return self._closed

    def _check_open(self) -> None:
        if self._closed:
            raise ValueError("I/O operation on closed reader")

    async def close(self) -> None:
        """Release the read-ahead buffer."""
        self._buffer = None
        self._closed = True

    async def __aenter__(self) -> "AsyncBufferedRangeReader":
        await self._ensure_initialized()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()


async def open_object_async(
    client: AsyncStorageClient,
    bucket: str,
    key: str,
    buffer_size: int = DEFAULT_BUFFER_SIZE,
) -> AsyncBufferedRangeReader:
    """Create an async buffered reader and look up the object size."""
    reader = AsyncBufferedRangeReader(client, bucket, key, buffer_size=buffer_size)
    await reader._ensure_initialized()
    return reader


__all__ = ["AsyncBufferedRangeReader", "open_object_async"]
