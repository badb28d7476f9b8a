"""Buffered, forward-only reader over a remote object."""

from __future__ import annotations

import logging
from typing import Iterator, Optional

from .core.model import TransportError, UnsupportedOperationError
from .core.window import DEFAULT_BUFFER_SIZE, RangeBuffer, clip_body, fetch_window
from .io.base import StorageClient

LOG = logging.getLogger("gcsstream.reader")


class BufferedRangeReader:
    """
    A read-only, non-seekable file-like view of one storage object.

    The object size is looked up once at construction. Reads are served from
    a single read-ahead buffer of `buffer_size` bytes; once it runs short the
    buffer is replaced by one ranged GET covering the next window. A single
    `readinto` / `read(n)` call performs at most one such refill, so it may
    return fewer bytes than asked for.

    One reader must not be shared between threads without external locking.

    Parameters
    ----------
    client
        Storage client providing `get_object_info` and `fetch_range`.
    bucket
        Bucket holding the object.
    key
        Object name within the bucket.
    buffer_size
        Bytes fetched per range request.
    """

    def __init__(
        self,
        client: StorageClient,
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
        self._buffer: Optional[RangeBuffer] = None
        self._closed = False

        info = client.get_object_info(bucket, key)
        self._size = info.size if info.size is not None else 0
        LOG.debug("Opened gs://%s/%s (%d bytes)", bucket, key, self._size)

    # ------------------------------------------------------------------ #
    def _fetch(self, start: int) -> RangeBuffer:
        """Fetch the window starting at `start` without touching the current buffer."""
        start, end = fetch_window(start, self.buffer_size, self._size)
        self.requests_made += 1
        body = clip_body(self._client.fetch_range(self.bucket, self.key, start, end), start, end)
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

    def readinto(self, b) -> int:
        """Read up to ``len(b)`` bytes into `b`; return the count, 0 at EOF.

        Whatever is left in the buffer is used first. If that is not enough
        (or nothing is buffered) one window is fetched from the end of the
        buffered bytes. The fetch happens before anything is copied, so a
        failed fetch leaves `b` and the position untouched.
        """
        self._check_open()
        if self._position >= self._size:
            return 0

        view = memoryview(b).cast("B")
        count = min(len(view), self._size - self._position)
        if count == 0:
            return 0

        buffered = self._buffer.remaining if self._buffer is not None else 0
        fresh = None
        if buffered < count:
            fresh = self._fetch(self._position + buffered)

        n = 0
        if buffered:
            n = self._buffer.copy_into(view, count)
        if fresh is not None:
            self._buffer = fresh
            n += fresh.copy_into(view[n:], count - n)

        self._position += n
        return n

    def read(self, size: int = -1, /) -> bytes:
        """
        Read up to `size` bytes.

        A non-negative `size` performs at most one refill and may return a
        short result; a negative `size` reads to the end of the object.
        """
        if size is None or size < 0:
            return self.readall()
        self._check_open()
        if size == 0:
            return b""
        # at most the buffered tail plus one fresh window can come back
        buffered = self._buffer.remaining if self._buffer is not None else 0
        buf = bytearray(min(size, max(self._size - self._position, 0), buffered + self.buffer_size))
        if not buf:
            return b""
        n = self.readinto(buf)
        del buf[n:]
        return bytes(buf)

    def readall(self) -> bytes:
        """Read from the current position to the end of the object."""
        self._check_open()
        chunks = []
        while True:
            chunk = self.read(self.buffer_size)
            if not chunk:
                break
            chunks.append(chunk)
        return b"".join(chunks)

    def iter_chunks(self) -> Iterator[bytes]:
        """Yield the rest of the object, one buffer-sized read at a time."""
        while True:
            chunk = self.read(self.buffer_size)
            if not chunk:
                return
            yield chunk

    def __iter__(self) -> Iterator[bytes]:
        return self.iter_chunks()

    # ------------------------------------------------------------------ #
    @property
    def size(self) -> int:
        """Total object size in bytes."""
        return self._size

    def length(self) -> int:
        return self._size

    @property
    def position(self) -> int:
        """Current read offset; read-only."""
        return self._position

    @position.setter
    def position(self, value: int) -> None:
        raise UnsupportedOperationError("BufferedRangeReader position cannot be set")

    def tell(self) -> int:
        return self._position

    def readable(self) -> bool:
        return True

    def seekable(self) -> bool:
        return False

    def writable(self) -> bool:
        return False

    def seek(self, offset: int, whence: int = 0, /) -> int:
        raise UnsupportedOperationError("BufferedRangeReader does not support seek")

    def truncate(self, size: Optional[int] = None, /) -> int:
        raise UnsupportedOperationError("BufferedRangeReader does not support truncate")

    def write(self, b, /) -> int:
        raise UnsupportedOperationError("BufferedRangeReader is read-only")

    def flush(self) -> None:
        raise UnsupportedOperationError("BufferedRangeReader does not support flush")

    # ------------------------------------------------------------------ #
    @property
    def closed(self) -> bool:
        return self._closed

    def _check_open(self) -> None:
        if self._closed:
            raise ValueError("I/O operation on closed reader")

    def close(self) -> None:
        """Release the read-ahead buffer."""
        self._buffer = None
        self._closed = True

    def __enter__(self) -> "BufferedRangeReader":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    def __repr__(self) -> str:
        return (f"{type(self).__name__}(bucket={self.bucket!r}, key={self.key!r}, "
                f"position={self._position}, size={self._size})")


def open_object(
    client: StorageClient,
    bucket: str,
    key: str,
    buffer_size: int = DEFAULT_BUFFER_SIZE,
) -> BufferedRangeReader:
    """Create a buffered reader over ``gs://bucket/key``."""
    return BufferedRangeReader(client, bucket, key, buffer_size=buffer_size)


__all__ = ["BufferedRangeReader", "open_object"]
