"""Tests for the CLI implementation."""

import json

import pytest
from typer.testing import CliRunner

from gcsstream.cli import app


class TestCLI:
    """Test the CLI against a local bucket directory."""

    @pytest.fixture
    def runner(self):
        """CLI test runner."""
        return CliRunner()

    @pytest.fixture
    def root(self, tmp_path):
        """Local root with one bucket and a 2.5 KB object."""
        bucket = tmp_path / "bkt"
        bucket.mkdir()
        (bucket / "data.bin").write_bytes(bytes(range(250)) * 10)
        return tmp_path

    def test_cat_to_file(self, runner, root, tmp_path):
        """cat copies the object to the output file."""
        out = tmp_path / "out.bin"
        result = runner.invoke(app, ["cat", "gs://bkt/data.bin", "--local-root", str(root),
                                     "--buffer-size", "1000", "-o", str(out)])

        assert result.exit_code == 0, result.output
        assert out.read_bytes() == bytes(range(250)) * 10

    def test_cat_to_stdout(self, runner, root):
        """Without -o the bytes go to stdout."""
        result = runner.invoke(app, ["cat", "gs://bkt/data.bin", "--local-root", str(root)])

        assert result.exit_code == 0
        assert result.stdout_bytes == bytes(range(250)) * 10

    def test_cat_stats(self, runner, root, tmp_path):
        """--stats reports transfer counters as JSON."""
        out = tmp_path / "out.bin"
        result = runner.invoke(app, ["cat", "gs://bkt/data.bin", "--local-root", str(root),
                                     "--buffer-size", "1000", "-o", str(out), "--stats"])

        assert result.exit_code == 0
        stats = json.loads(result.output.strip().splitlines()[-1])
        assert stats == {"bytes": 2500, "bytes_fetched": 2500, "requests_made": 3}

    def test_cat_missing(self, runner, root):
        """A missing object exits with code 1."""
        result = runner.invoke(app, ["cat", "gs://bkt/nope", "--local-root", str(root)])

        assert result.exit_code == 1
        assert "not found" in result.output

    def test_bad_url(self, runner, root):
        """Non gs:// URLs are rejected."""
        result = runner.invoke(app, ["cat", "s3://bkt/data.bin", "--local-root", str(root)])

        assert result.exit_code == 2
        assert "gs://" in result.output

    def test_stat(self, runner, root):
        """stat prints object metadata as JSON."""
        result = runner.invoke(app, ["stat", "gs://bkt/data.bin", "--local-root", str(root)])

        assert result.exit_code == 0
        payload = json.loads(result.stdout)
        assert payload == {"bucket": "bkt", "key": "data.bin", "size": 2500}

    def test_stat_missing(self, runner, root):
        """stat on a missing object exits with code 1."""
        result = runner.invoke(app, ["stat", "gs://bkt/nope", "--local-root", str(root)])

        assert result.exit_code == 1

    @pytest.mark.parametrize("command", ["cat", "stat"])
    @pytest.mark.parametrize("name,value", [
        ("GCSSTREAM_BUFFER_SIZE", "0"),
        ("GCSSTREAM_BASE_URI", "ftp://example.com"),
    ])
    def test_invalid_environment(self, runner, root, monkeypatch, command, name, value):
        """Bad settings in the environment are reported on stderr, not as a traceback."""
        monkeypatch.setenv(name, value)
        result = runner.invoke(app, [command, "gs://bkt/data.bin", "--local-root", str(root)])

        assert result.exit_code == 1
        assert isinstance(result.exception, SystemExit)
        assert "Invalid configuration" in result.output
        assert name.lower().removeprefix("gcsstream_") in result.output.lower()
