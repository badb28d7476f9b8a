"""Synchronous GCS JSON-API storage client using requests."""

import logging
import requests
from typing import Optional
from urllib.parse import quote

from ..core.model import ObjectInfo, ObjectNotFoundError, TransportError
from .base import (
    DEFAULT_BASE_URI, RANGE_FALLBACK_MAX, RangeNotSupportedError, TokenProvider, range_header,
)


LOG = logging.getLogger("gcsstream.io.http_sync")

# Module-level session for connection pooling
_session = None


def _get_session():
    """Get or create the global requests session."""
    global _session
    if _session is None:
        _session = requests.Session()
    return _session


def object_url(base_uri: str, bucket: str, key: str) -> str:
    """Return the JSON-API URL of an object; the key is fully percent-encoded."""
    return f"{base_uri.rstrip('/')}/b/{quote(bucket, safe='')}/o/{quote(key, safe='')}"


def parse_object_info(bucket: str, key: str, payload: dict) -> ObjectInfo:
    """Build ObjectInfo from a JSON-API object resource (size is a decimal string)."""
    size = payload.get("size")
    return ObjectInfo(
        bucket=bucket,
        key=key,
        size=int(size) if size is not None else None,
        generation=payload.get("generation"),
        content_type=payload.get("contentType"),
    )


def _auth_headers(token_provider: Optional[TokenProvider]) -> dict:
    if token_provider is None:
        return {}
    try:
        token = token_provider.get_token()
    except TransportError:
        raise
    except Exception as e:
        raise TransportError(f"Cannot obtain bearer token: {e}") from e
    if not token:
        return {}
    return {"Authorization": f"Bearer {token}"}


class GcsHttpClient:
    """Synchronous storage client speaking the GCS JSON API."""

    def __init__(self, base_uri: str = DEFAULT_BASE_URI,
                 token_provider: Optional[TokenProvider] = None,
                 timeout: Optional[float] = 60.0,
                 session: Optional[requests.Session] = None):
        self.base_uri = base_uri.rstrip("/")
        self.token_provider = token_provider
        self.timeout = timeout
        self.bytes_fetched = 0
        self.requests_made = 0
        self._session = session if session is not None else _get_session()

    def _get(self, url: str, headers: dict, params: Optional[dict] = None) -> requests.Response:
        headers = {**headers, **_auth_headers(self.token_provider)}
        self.requests_made += 1
        try:
            return self._session.get(url, headers=headers, params=params, timeout=self.timeout)
        except requests.RequestException as e:
            raise TransportError(f"GET {url} failed: {e}") from e

    def get_object_info(self, bucket: str, key: str) -> ObjectInfo:
        """Fetch the object resource and return its metadata."""
        url = object_url(self.base_uri, bucket, key)
        response = self._get(url, headers={"Accept": "application/json"})

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

    def fetch_range(self, bucket: str, key: str, start: int, end: int) -> bytes:
        """Fetch bytes `start`..`end` inclusive with a ranged media download."""
        if start < 0 or end < start:
            raise ValueError(f"Invalid byte range {start}-{end}")

        url = object_url(self.base_uri, bucket, key)
        LOG.debug("GET gs://%s/%s bytes=%d-%d", bucket, key, start, end)
        response = self._get(url, headers={"Range": range_header(start, end)},
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

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        # Session is shared, don't close it here
        pass
