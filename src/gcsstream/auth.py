"""Bearer-token providers for the GCS storage clients.

Each provider implements ``get_token() -> str | None``. The storage clients
call it once per request; failures surface as TransportError.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING, Optional

import google.auth
from google.auth import exceptions as google_exceptions
from google.auth.transport.requests import Request
from google.oauth2 import service_account

from .core.model import TransportError
from .io.base import READ_ONLY_SCOPE, TokenProvider

if TYPE_CHECKING:
    from .config import StreamSettings

LOG = logging.getLogger("gcsstream.auth")


class StaticTokenProvider:
    """Access-token passthrough: always returns the token it was given."""

    def __init__(self, token: str):
        if not token:
            raise ValueError("Access token must not be empty")
        self._token = token

    def get_token(self) -> Optional[str]:
        return self._token


class AnonymousTokenProvider:
    """No credentials; requests go out without an Authorization header."""

    def get_token(self) -> Optional[str]:
        return None


class GoogleCredentialsTokenProvider:
    """Derive tokens from any google-auth credentials object.

    Credentials that still need scopes are narrowed to the read-only storage
    scope; expired or never-refreshed credentials are refreshed on demand.
    """

    def __init__(self, credentials, request: Optional[Request] = None):
        if getattr(credentials, "requires_scopes", False):
            credentials = credentials.with_scopes([READ_ONLY_SCOPE])
        self.credentials = credentials
        self._request = request

    @classmethod
    def from_service_account_file(cls, path: str | Path) -> "GoogleCredentialsTokenProvider":
        """Build a provider from a service-account JSON key file."""
        try:
            credentials = service_account.Credentials.from_service_account_file(
                str(path), scopes=[READ_ONLY_SCOPE]
            )
        except (OSError, ValueError) as e:
            raise TransportError(f"Cannot load service account key {path}: {e}") from e
        return cls(credentials)

    @classmethod
    def from_default(cls) -> "GoogleCredentialsTokenProvider":
        """Build a provider from application default credentials."""
        try:
            credentials, project = google.auth.default(scopes=[READ_ONLY_SCOPE])
        except google_exceptions.DefaultCredentialsError as e:
            raise TransportError(f"No default credentials available: {e}") from e
        LOG.debug("Using application default credentials (project=%s)", project)
        return cls(credentials)

    def get_token(self) -> Optional[str]:
        if not self.credentials.valid:
            LOG.debug("Refreshing %s", type(self.credentials).__name__)
            if self._request is None:
                self._request = Request()
            try:
                self.credentials.refresh(self._request)
            except google_exceptions.GoogleAuthError as e:
                raise TransportError(f"Token refresh failed: {e}") from e
        return self.credentials.token


def token_provider_from_settings(settings: "StreamSettings") -> TokenProvider:
    """Pick a token provider: anonymous, static token, key file, then ADC."""
    if settings.anonymous:
        return AnonymousTokenProvider()
    if settings.access_token:
        return StaticTokenProvider(settings.access_token)
    if settings.credentials_file is not None:
        return GoogleCredentialsTokenProvider.from_service_account_file(settings.credentials_file)
    return GoogleCredentialsTokenProvider.from_default()
