"""Shared in-memory storage clients for tests."""

from __future__ import annotations

from gcsstream.core.model import ObjectInfo, ObjectNotFoundError


class MemoryStorageClient:
    """A StorageClient over a dict of ``(bucket, key) -> bytes`` that records every fetch."""

    def __init__(self, objects: dict | None = None, *, report_size: bool = True, short_by: int = 0,
                 empty_bodies: bool = False):
        self.objects = dict(objects or {})
        self.report_size = report_size
        self.short_by = short_by     # drop this many bytes from bodies longer than that
        self.empty_bodies = empty_bodies
        self.fetches: list[tuple[int, int]] = []
        self.info_calls = 0
        self.bytes_fetched = 0
        self.requests_made = 0

    def put(self, bucket: str, key: str, data: bytes) -> None:
        self.objects[(bucket, key)] = data

    def delete(self, bucket: str, key: str) -> None:
        del self.objects[(bucket, key)]

    def get_object_info(self, bucket: str, key: str) -> ObjectInfo:
        self.info_calls += 1
        self.requests_made += 1
        if (bucket, key) not in self.objects:
            raise ObjectNotFoundError(f"gs://{bucket}/{key} not found")
        size = len(self.objects[(bucket, key)]) if self.report_size else None
        return ObjectInfo(bucket=bucket, key=key, size=size)

    def fetch_range(self, bucket: str, key: str, start: int, end: int) -> bytes:
        self.fetches.append((start, end))
        self.requests_made += 1
        if (bucket, key) not in self.objects:
            raise ObjectNotFoundError(f"gs://{bucket}/{key} not found")
        data = self.objects[(bucket, key)][start:end + 1]
        if self.empty_bodies:
            data = b""
        elif len(data) > self.short_by:
            data = data[:len(data) - self.short_by]
        self.bytes_fetched += len(data)
        return data


class FailingStorageClient(MemoryStorageClient):
    """Raise the given exception from the next `fail_times` range fetches."""

    def __init__(self, objects: dict, exc: Exception, fail_times: int = 1):
        super().__init__(objects)
        self.exc = exc
        self.fail_times = fail_times

    def fetch_range(self, bucket: str, key: str, start: int, end: int) -> bytes:
        if self.fail_times > 0:
            self.fail_times -= 1
            self.fetches.append((start, end))
            raise self.exc
        return super().fetch_range(bucket, key, start, end)


class AsyncMemoryStorageClient:
    """Async wrapper around MemoryStorageClient."""

    def __init__(self, objects: dict | None = None, **kwargs):
        self.sync = MemoryStorageClient(objects, **kwargs)

    @property
    def fetches(self):
        return self.sync.fetches

    @property
    def bytes_fetched(self) -> int:
        return self.sync.bytes_fetched

    @property
    def requests_made(self) -> int:
        return self.sync.requests_made

    async def get_object_info(self, bucket: str, key: str) -> ObjectInfo:
        return self.sync.get_object_info(bucket, key)

    async def fetch_range(self, bucket: str, key: str, start: int, end: int) -> bytes:
        return self.sync.fetch_range(bucket, key, start, end)


class HugeStorageClient:
    """Reports an object far larger than memory and synthesises each requested range."""

    def __init__(self, size: int = 1 << 50):
        self.size = size
        self.fetches: list[tuple[int, int]] = []
        self.bytes_fetched = 0
        self.requests_made = 0

    def get_object_info(self, bucket: str, key: str) -> ObjectInfo:
        return ObjectInfo(bucket=bucket, key=key, size=self.size)

    def fetch_range(self, bucket: str, key: str, start: int, end: int) -> bytes:
        self.fetches.append((start, end))
        self.requests_made += 1
        data = b"x" * (end - start + 1)
        self.bytes_fetched += len(data)
        return data


class AsyncHugeStorageClient:
    """Async wrapper around HugeStorageClient."""

    def __init__(self, size: int = 1 << 50):
        self.sync = HugeStorageClient(size)

    @property
    def fetches(self):
        return self.sync.fetches

    async def get_object_info(self, bucket: str, key: str) -> ObjectInfo:
        return self.sync.get_object_info(bucket, key)

    async def fetch_range(self, bucket: str, key: str, start: int, end: int) -> bytes:
        return self.sync.fetch_range(bucket, key, start, end)
