"""Storage layer for gcsstream - metadata lookups and ranged fetches."""

# Re-export these for import convenience
from .base import (
    StorageClient, AsyncStorageClient, TokenProvider, RangeNotSupportedError,
    DEFAULT_BASE_URI, READ_ONLY_SCOPE,
)
from .local import LocalStorageClient, LocalAsyncStorageClient
from .http_sync import GcsHttpClient
from .http_async import AsyncGcsHttpClient, close_global_client


def parse_object_url(url: str) -> tuple[str, str]:
    """Split ``gs://bucket/key`` into ``(bucket, key)``."""
    if not url.startswith("gs://"):
        raise ValueError(f"Not a gs:// URL: {url!r}")
    bucket, _, key = url[len("gs://"):].partition("/")
    if not bucket or not key:
        raise ValueError(f"URL must name a bucket and an object: {url!r}")
    return bucket, key


def open_storage_client(settings=None, local_root=None):
    """Factory function to create a StorageClient from settings or a local root."""
    if local_root is not None:
        return LocalStorageClient(local_root)

    from ..auth import token_provider_from_settings
    from ..config import load_settings_from_env

    settings = settings or load_settings_from_env()
    return GcsHttpClient(
        base_uri=settings.base_uri,
        token_provider=token_provider_from_settings(settings),
        timeout=settings.timeout,
    )


def open_storage_client_async(settings=None, local_root=None):
    """Factory function to create an AsyncStorageClient from settings or a local root."""
    if local_root is not None:
        return LocalAsyncStorageClient(local_root)

    from ..auth import token_provider_from_settings
    from ..config import load_settings_from_env

    settings = settings or load_settings_from_env()
    return AsyncGcsHttpClient(
        base_uri=settings.base_uri,
        token_provider=token_provider_from_settings(settings),
        timeout=settings.timeout,
    )
