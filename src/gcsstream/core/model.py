from __future__ import annotations
import io
from dataclasses import dataclass


@dataclass(slots=True)
class ObjectInfo:
    bucket: str
    key: str
    size: int | None             # None when the backend omits it
    generation: str | None = None
    content_type: str | None = None


class GcsStreamError(Exception):
    """Base class for all gcsstream errors."""
    pass


class ObjectNotFoundError(GcsStreamError, FileNotFoundError):
    """Raised when the object (or the range target) does not exist."""
    pass


class UnsupportedOperationError(GcsStreamError, io.UnsupportedOperation):
    """Raised for seek/write/truncate/flush on a read-only forward stream."""
    pass


class TransportError(GcsStreamError, IOError):
    """Raised when a request fails for any reason other than not-found."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code
