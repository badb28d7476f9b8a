"""Read-ahead buffer and fetch-window arithmetic shared by the sync and async readers."""

from __future__ import annotations

DEFAULT_BUFFER_SIZE = 10 * 1024 * 1024  # 10 MiB


def fetch_window(cursor: int, capacity: int, object_size: int) -> tuple[int, int]:
    """Return the inclusive byte range ``(start, end)`` of the next refill.

    The window starts at `cursor` and never extends past `object_size`.
    Callers must only ask for a window while ``cursor < object_size``.
    """
    if cursor >= object_size:
        raise ValueError(f"No bytes left to fetch at offset {cursor} (size {object_size})")
    end = min(cursor + capacity, object_size)
    return cursor, end - 1


class RangeBuffer:
    """One contiguous slice of the object with its own read offset.

    The buffer is replaced wholesale on every refill; nothing outside this
    class touches the backing bytes.
    """

    __slots__ = ("start", "_data", "_offset")

    def __init__(self, start: int, data: bytes):
        self.start = start
        self._data = data
        self._offset = 0

    def __len__(self) -> int:
        return len(self._data)

    @property
    def end(self) -> int:
        """Absolute offset one past the last buffered byte."""
        return self.start + len(self._data)

    @property
    def remaining(self) -> int:
        return len(self._data) - self._offset

    @property
    def exhausted(self) -> bool:
        return self._offset >= len(self._data)

    def copy_into(self, destination, count: int) -> int:
        """Copy up to `count` bytes into `destination` and advance; return bytes copied."""
        n = min(count, self.remaining, len(destination))
        if n <= 0:
            return 0
        destination[:n] = self._data[self._offset:self._offset + n]
        self._offset += n
        return n


def clip_body(body: bytes, start: int, end: int) -> bytes:
    """Trim a fetched body to at most the requested inclusive window."""
    length = end - start + 1
    if len(body) > length:
        return body[:length]
    return body
