"""Tests for settings loading."""

import pytest
from pydantic import ValidationError

from gcsstream.config import StreamSettings, load_settings_from_env
from gcsstream.core.window import DEFAULT_BUFFER_SIZE
from gcsstream.io.base import DEFAULT_BASE_URI


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    for name in ("GCSSTREAM_BASE_URI", "GCSSTREAM_BUFFER_SIZE", "GCSSTREAM_TIMEOUT",
                 "GCSSTREAM_ACCESS_TOKEN", "GCSSTREAM_CREDENTIALS_FILE",
                 "GOOGLE_APPLICATION_CREDENTIALS", "GCSSTREAM_ANONYMOUS"):
        monkeypatch.delenv(name, raising=False)


def test_defaults():
    """Defaults target the public JSON API with a 10 MiB buffer."""
    settings = load_settings_from_env()
    assert settings.base_uri == DEFAULT_BASE_URI
    assert settings.buffer_size == DEFAULT_BUFFER_SIZE == 10 * 1024 * 1024
    assert settings.timeout == 60.0
    assert settings.access_token is None
    assert settings.credentials_file is None
    assert settings.anonymous is False


def test_from_environment(monkeypatch, tmp_path):
    """GCSSTREAM_* variables populate the settings."""
    monkeypatch.setenv("GCSSTREAM_BASE_URI", "http://localhost:4443/storage/v1/")
    monkeypatch.setenv("GCSSTREAM_BUFFER_SIZE", "4096")
    monkeypatch.setenv("GCSSTREAM_TIMEOUT", "5.5")
    monkeypatch.setenv("GCSSTREAM_ANONYMOUS", "true")
    monkeypatch.setenv("GCSSTREAM_ACCESS_TOKEN", "tok")

    settings = load_settings_from_env()
    assert settings.base_uri == "http://localhost:4443/storage/v1"
    assert settings.buffer_size == 4096
    assert settings.timeout == 5.5
    assert settings.anonymous is True
    assert settings.access_token == "tok"


def test_google_application_credentials_alias(monkeypatch, tmp_path):
    """The standard GOOGLE_APPLICATION_CREDENTIALS variable is honoured."""
    key_file = tmp_path / "key.json"
    monkeypatch.setenv("GOOGLE_APPLICATION_CREDENTIALS", str(key_file))
    assert load_settings_from_env().credentials_file == key_file


@pytest.mark.parametrize("value", ["0", "-5"])
def test_buffer_size_must_be_positive(monkeypatch, value):
    """Zero or negative buffer sizes are rejected."""
    monkeypatch.setenv("GCSSTREAM_BUFFER_SIZE", value)
    with pytest.raises(ValidationError):
        load_settings_from_env()


def test_base_uri_must_be_http():
    """Non-HTTP base URIs are rejected."""
    with pytest.raises(ValidationError):
        StreamSettings(base_uri="ftp://example.com")
