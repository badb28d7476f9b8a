"""Base protocols and shared constants for the storage layer."""

from typing import Optional, Protocol, runtime_checkable

from ..core.model import ObjectInfo, TransportError


DEFAULT_BASE_URI = "https://storage.googleapis.com/storage/v1"
READ_ONLY_SCOPE = "https://www.googleapis.com/auth/devstorage.read_only"


class RangeNotSupportedError(TransportError):
    """Raised when the server ignores Range and the object is >= RANGE_FALLBACK_MAX."""


RANGE_FALLBACK_MAX = 10 * 1024 * 1024  # 10 MB


@runtime_checkable
class TokenProvider(Protocol):
    """Produces a bearer token valid for the read-only storage scope."""

    def get_token(self) -> Optional[str]:
        """Return a bearer token, or None to send no Authorization header.
        Any failure → raise TransportError.
        """
        ...


@runtime_checkable
class StorageClient(Protocol):
    """Protocol for synchronous storage clients."""

    bytes_fetched: int  # running total
    requests_made: int

    def get_object_info(self, bucket: str, key: str) -> ObjectInfo:
        """Look up object metadata. Missing object → raise ObjectNotFoundError."""
        ...

    def fetch_range(self, bucket: str, key: str, start: int, end: int) -> bytes:
        """Return bytes `start`..`end` (both inclusive) of the object.
        The body may be shorter than requested near the end of the object.
        """
        ...


@runtime_checkable
class AsyncStorageClient(Protocol):
    """Protocol for asynchronous storage clients."""

    bytes_fetched: int  # running total
    requests_made: int

    async def get_object_info(self, bucket: str, key: str) -> ObjectInfo:
        ...

    async def fetch_range(self, bucket: str, key: str, start: int, end: int) -> bytes:
        ...


def range_header(start: int, end: int) -> str:
    """Build an inclusive HTTP Range header value, e.g. bytes=0-99 for 100 bytes."""
    return f"bytes={start}-{end}"
