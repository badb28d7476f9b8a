"""gcsstream - buffered sequential reads of cloud storage objects over ranged GETs."""

from .core.model import (                                             # re-export
    ObjectInfo, GcsStreamError, ObjectNotFoundError, UnsupportedOperationError, TransportError,
)
from .core.window import DEFAULT_BUFFER_SIZE
from .io import RangeNotSupportedError, open_storage_client, open_storage_client_async, parse_object_url
from .reader import BufferedRangeReader, open_object
from .reader_async import AsyncBufferedRangeReader, open_object_async


def _resolve_settings(settings, client, buffer_size):
    """Load settings from the environment when none were passed and something needs them."""
    if settings is None and (client is None or buffer_size is None):
        from .config import load_settings_from_env
        settings = load_settings_from_env()
    return settings


def open_url(url: str, *, client=None, buffer_size: int | None = None, settings=None) -> BufferedRangeReader:
    """Open a ``gs://bucket/key`` URL for buffered sequential reading."""
    bucket, key = parse_object_url(url)
    settings = _resolve_settings(settings, client, buffer_size)
    if client is None:
        client = open_storage_client(settings)
    if buffer_size is None:
        buffer_size = settings.buffer_size
    return open_object(client, bucket, key, buffer_size=buffer_size)


async def open_url_async(url: str, *, client=None, buffer_size: int | None = None,
                         settings=None) -> AsyncBufferedRangeReader:
    """Async counterpart of `open_url`."""
    bucket, key = parse_object_url(url)
    settings = _resolve_settings(settings, client, buffer_size)
    if client is None:
        client = open_storage_client_async(settings)
    if buffer_size is None:
        buffer_size = settings.buffer_size
    return await open_object_async(client, bucket, key, buffer_size=buffer_size)


__all__ = [
    "open_url", "open_url_async", "open_object", "open_object_async",
    "BufferedRangeReader", "AsyncBufferedRangeReader",
    "ObjectInfo", "GcsStreamError", "ObjectNotFoundError",
    "UnsupportedOperationError", "TransportError", "RangeNotSupportedError",
]
