"""Environment-driven settings for gcsstream."""

from __future__ import annotations

from pathlib import Path

from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .core.window import DEFAULT_BUFFER_SIZE
from .io.base import DEFAULT_BASE_URI


class StreamSettings(BaseSettings):
    """Configuration for storage clients and readers."""

    model_config = SettingsConfigDict(
        env_prefix="", case_sensitive=False, extra="ignore", populate_by_name=True
    )

    base_uri: str = Field(
        default=DEFAULT_BASE_URI,
        validation_alias="GCSSTREAM_BASE_URI",
    )
    buffer_size: int = Field(
        default=DEFAULT_BUFFER_SIZE,
        gt=0,
        validation_alias="GCSSTREAM_BUFFER_SIZE",
    )
    timeout: float | None = Field(
        default=60.0,
        validation_alias="GCSSTREAM_TIMEOUT",
    )
    access_token: str | None = Field(
        default=None,
        validation_alias="GCSSTREAM_ACCESS_TOKEN",
    )
    credentials_file: Path | None = Field(
        default=None,
        validation_alias=AliasChoices(
            "GCSSTREAM_CREDENTIALS_FILE",
            "GOOGLE_APPLICATION_CREDENTIALS",
        ),
    )
    anonymous: bool = Field(
        default=False,
        validation_alias="GCSSTREAM_ANONYMOUS",
    )

    @field_validator("base_uri")
    @classmethod
    def _strip_base_uri(cls, value: str) -> str:
        value = value.strip().rstrip("/")
        if not value.startswith(("http://", "https://")):
            msg = f"Base URI must be an http(s) URL: {value!r}"
            raise ValueError(msg)
        return value


def load_settings_from_env() -> StreamSettings:
    """Load settings from environment variables."""
    return StreamSettings()
