"""Helpers shared by the CLI commands: settings overrides and store construction."""

from __future__ import annotations

from typing import Any

import typer
from pydantic import ValidationError
from rich.markup import escape

from s3channel.cli.console import console
from s3channel.config import ServiceSettings
from s3channel.core.blob_store import BlobStore, S3BlobStore


def load_settings(**overrides: Any) -> ServiceSettings:
    """Build settings from env/.env with non-``None`` CLI options on top."""
    try:
        settings = ServiceSettings(**{k: v for k, v in overrides.items() if v is not None})
    except ValidationError as exc:
        console.print(f"[bold red]Invalid configuration:[/bold red] {escape(str(exc))}")
        raise typer.Exit(code=1)

    if not settings.bucket:
        console.print(
            "[bold red]No bucket configured.[/bold red] "
            "Pass --bucket or set S3CHANNEL_BUCKET."
        )
        raise typer.Exit(code=1)
    return settings


def open_store(settings: ServiceSettings) -> BlobStore:
    """Open the bucket named in *settings*."""
    return S3BlobStore(
        settings.bucket,
        endpoint_url=settings.s3_endpoint_url,
        region=settings.s3_region,
        force_path_style=settings.s3_force_path_style,
    )
