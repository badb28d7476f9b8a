"""CLI implementation for gcsstream."""

import json
import logging
import sys
from dataclasses import asdict
from pathlib import Path
from typing import Optional

import typer
from pydantic import ValidationError

from .config import load_settings_from_env
from .core.model import GcsStreamError
from .io import open_storage_client, parse_object_url
from .reader import open_object

app = typer.Typer(add_completion=False, help="Stream Cloud Storage objects with buffered range reads.")


def _setup_logging(verbose: bool) -> None:
    if verbose:
        logging.basicConfig(level=logging.DEBUG, stream=sys.stderr,
                            format="%(asctime)s %(name)s %(levelname)s %(message)s")


def _split_url(url: str) -> tuple[str, str]:
    try:
        return parse_object_url(url)
    except ValueError as e:
        typer.echo(str(e), err=True)
        raise typer.Exit(code=2)


def _load_settings():
    try:
        return load_settings_from_env()
    except ValidationError as e:
        typer.echo(f"Invalid configuration: {e}", err=True)
        raise typer.Exit(code=1)


@app.command()
def cat(
    url: str = typer.Argument(..., help="Object to read, as gs://bucket/key"),
    output: Optional[Path] = typer.Option(None, "-o", "--output", help="Write to PATH instead of stdout"),
    buffer_size: Optional[int] = typer.Option(None, "--buffer-size", min=1, help="Bytes fetched per range request"),
    local_root: Optional[Path] = typer.Option(None, "--local-root", help="Serve buckets from subdirectories of DIR"),
    stats: bool = typer.Option(False, "--stats", help="Print transfer statistics as JSON on stderr"),
    verbose: bool = typer.Option(False, "-v", "--verbose", help="Enable debug logging"),
):
    """Copy one object to stdout or a file."""
    _setup_logging(verbose)
    bucket, key = _split_url(url)
    settings = _load_settings()
    size = buffer_size or settings.buffer_size

    written = 0
    try:
        client = open_storage_client(settings, local_root=local_root)
        with open_object(client, bucket, key, buffer_size=size) as reader:
            # open output sink
            sink = open(output, "wb") if output else sys.stdout.buffer
            try:
                for chunk in reader:
                    sink.write(chunk)
                    written += len(chunk)
            finally:
                if output:
                    sink.close()
                else:
                    sink.flush()
            requests_made, bytes_fetched = reader.requests_made, reader.bytes_fetched
    except GcsStreamError as e:
        typer.echo(f"{url}: {e}", err=True)
        raise typer.Exit(code=1)

    if stats:
        typer.echo(json.dumps({
            "bytes": written,
            "bytes_fetched": bytes_fetched,
            "requests_made": requests_made,
        }), err=True)


@app.command()
def stat(
    url: str = typer.Argument(..., help="Object to describe, as gs://bucket/key"),
    local_root: Optional[Path] = typer.Option(None, "--local-root", help="Serve buckets from subdirectories of DIR"),
    verbose: bool = typer.Option(False, "-v", "--verbose", help="Enable debug logging"),
):
    """Print object metadata as JSON."""
    _setup_logging(verbose)
    bucket, key = _split_url(url)
    try:
        client = open_storage_client(_load_settings(), local_root=local_root)
        info = client.get_object_info(bucket, key)
    except GcsStreamError as e:
        typer.echo(f"{url}: {e}", err=True)
        raise typer.Exit(code=1)

    typer.echo(json.dumps({k: v for k, v in asdict(info).items() if v is not None}, indent=2))


if __name__ == "__main__":
    app()
