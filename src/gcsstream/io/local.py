"""Local directory storage clients: ``root/bucket/key`` files stand in for objects."""

import asyncio
import logging
from pathlib import Path
from typing import Union

from ..core.model import ObjectInfo, ObjectNotFoundError


LOG = logging.getLogger("gcsstream.io.local")


class LocalStorageClient:
    """Synchronous storage client reading files below a root directory."""

    def __init__(self, root: Union[Path, str]):
        self.root = Path(root).resolve()
        self.bytes_fetched = 0
        self.requests_made = 0

    def _resolve(self, bucket: str, key: str) -> Path:
        bucket_dir = (self.root / bucket).resolve()
        path = (bucket_dir / key).resolve()
        # Keys like "../other/x" must not escape the bucket directory
        if bucket_dir.parent != self.root or not path.is_relative_to(bucket_dir):
            raise ObjectNotFoundError(f"gs://{bucket}/{key} not found")
        if not path.is_file():
            raise ObjectNotFoundError(f"gs://{bucket}/{key} not found")
        return path

    def get_object_info(self, bucket: str, key: str) -> ObjectInfo:
        """Return metadata from the file's stat."""
        self.requests_made += 1
        path = self._resolve(bucket, key)
        return ObjectInfo(bucket=bucket, key=key, size=path.stat().st_size)

    def fetch_range(self, bucket: str, key: str, start: int, end: int) -> bytes:
        """Return bytes `start`..`end` inclusive; short at end of file."""
        if start < 0 or end < start:
            raise ValueError(f"Invalid byte range {start}-{end}")
        self.requests_made += 1
        path = self._resolve(bucket, key)
        with open(path, "rb") as f:
            f.seek(start)
            data = f.read(end - start + 1)
        LOG.debug("Read %d bytes at %d from %s", len(data), start, path)
        self.bytes_fetched += len(data)
        return data


class LocalAsyncStorageClient:
    """Asynchronous local client - thin wrapper around the sync client."""

    def __init__(self, root: Union[Path, str]):
        self._sync_client = LocalStorageClient(root)

    @property
    def root(self) -> Path:
        return self._sync_client.root

    @property
    def bytes_fetched(self) -> int:
        return self._sync_client.bytes_fetched

    @property
    def requests_made(self) -> int:
        return self._sync_client.requests_made

    async def get_object_info(self, bucket: str, key: str) -> ObjectInfo:
        return await asyncio.to_thread(self._sync_client.get_object_info, bucket, key)

    async def fetch_range(self, bucket: str, key: str, start: int, end: int) -> bytes:
        return await asyncio.to_thread(self._sync_client.fetch_range, bucket, key, start, end)
