"""Asynchronous GCS JSON-API storage client using httpx."""

import asyncio
import logging
import httpx
from typing import Optional
from contextlib import asynccontextmanager

from ..core.model import ObjectInfo, ObjectNotFoundError, TransportError
from .base import (
    DEFAULT_BASE_URI, RANGE_FALLBACK_MAX, RangeNotSupportedError, TokenProvider, range_header,
)
from .http_sync import object_url, parse_object_info


LOG = logging.getLogger("gcsstream.io.http_async")

# Global async client
_client: Optional[httpx.AsyncClient] = None


@asynccontextmanager
async def _get_client():
    """Get or create the global httpx AsyncClient."""
    global _client
    if _client is None:
        _client = httpx.AsyncClient(timeout=60.0)

    try:
        yield _client
    finally:
        # Don't close the client here - it's shared
        pass


async def _auth_headers(token_provider: Optional[TokenProvider]) -> dict:
    if token_provider is None:
        return {}
    # google-auth refreshes block on network I/O
    try:
        token = await asyncio.to_thread(token_provider.get_token)
    except TransportError:
        raise
    except Exception as e:
        raise TransportError(f"Cannot obtain bearer token: {e}") from e
    if not token:
        return {}
    return {"Authorization": f"Bearer {token}"}


class AsyncGcsHttpClient:
    """Asynchronous storage client speaking the GCS JSON API."""

    def __init__(self, base_uri: str = DEFAULT_BASE_URI,
                 token_provider: Optional[TokenProvider] = None,
                 timeout: Optional[float] = 60.0,
                 client: Optional[httpx.AsyncClient] = None):
        self.base_uri = base_uri.rstrip("/")
        self.token_provider = token_provider
        self.timeout = timeout
        self.bytes_fetched = 0
        self.requests_made = 0
        self._client = client

    async def _get(self, url: str, headers: dict, params: Optional[dict] = None) -> httpx.Response:
        headers = {**headers, **await _auth_headers(self.token_provider)}
        self.requests_made += 1
        try:
            if self._client is not None:
                return await self._client.get(url, headers=headers, params=params, timeout=self.timeout)
            async with _get_client() as client:
                return await client.get(url, headers=headers, params=params, timeout=self.timeout)
        except httpx.HTTPError as e:
            raise TransportError(f"GET {url} failed: {e}") from e

    async def get_object_info(self, bucket: str, key: str) -> ObjectInfo:
        """Fetch the object resource and return its metadata."""
        url = object_url(self.base_uri, bucket, key)
        response = await self._get(url, headers={"Accept": "application/json"})

        if response.status_code == 404:
            raise ObjectNotFoundError(f"gs://{bucket}/{key} not found")
        if response.status_code >= 400:
            raise TransportError(
                f"Metadata request failed with status {response.status_code}",
                status_code=response.status_code,
            )
        try:
            payload = response.json()
        except ValueError as e:
            raise TransportError(f"Invalid metadata response for gs://{bucket}/{key}") from e
        return parse_object_info(bucket, key, payload)

    async def fetch_range(self, bucket: str, key: str, start: int, end: int) -> bytes:
        """Fetch bytes `start`..`end` inclusive with a ranged media download."""
        if start < 0 or end < start:
            raise ValueError(f"Invalid byte range {start}-{end}")

        url = object_url(self.base_uri, bucket, key)
        LOG.debug("GET gs://%s/%s bytes=%d-%d", bucket, key, start, end)
        response = await self._get(url, headers={"Range": range_header(start, end)},
                                   params={"alt": "media"})

        if response.status_code == 206:
            data = response.content
        elif response.status_code == 200:
            # Server ignored Range and sent the whole object
            body = response.content
            if len(body) >= RANGE_FALLBACK_MAX:
                raise RangeNotSupportedError(
                    f"Server doesn't support ranges and gs://{bucket}/{key} is too large ({len(body)} bytes)"
                )
            LOG.debug("Range ignored for gs://%s/%s, slicing full body", bucket, key)
            data = body[start:end + 1]
        elif response.status_code == 404:
            raise ObjectNotFoundError(f"gs://{bucket}/{key} not found")
        else:
            raise TransportError(
                f"Range request failed with status {response.status_code}",
                status_code=response.status_code,
            )

        self.bytes_fetched += len(data)
        return data

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        # Client is shared, don't close it here
        pass


async def close_global_client():
    """Close the global httpx client. Call this at application shutdown."""
    global _client
    if _client is not None:
        await _client.aclose()
        _client = None
