"""``s3-nix-channel serve``: run the directory service.

The channel configuration is loaded synchronously before the listener
opens, so the service never answers requests without a configuration.
"""

from __future__ import annotations

from pathlib import Path

import typer
from rich.markup import escape

from s3channel.cli.commands import _common
from s3channel.cli.console import configure_logging, console
from s3channel.core.auth import JwtGate
from s3channel.core.directory import ChannelDirectory
from s3channel.core.errors import AuthConfigError, ChannelsLoadError
from s3channel.core.refresher import ConfigRefresher
from s3channel.core.resolver import ChannelResolver
from s3channel.server.app import create_app, run_server


def serve_cmd(
    bucket: str = typer.Option(None, "--bucket", "-b", help="The S3 bucket to serve the content from."),
    base_url: str = typer.Option(
        None,
        "--base-url",
        help="Public base URL of the service, e.g. https://foo.com to serve https://foo.com/permanent/123.tar.xz.",
    ),
    config_update_seconds: int = typer.Option(
        None,
        "--config-update-seconds",
        help="Interval for reloading channels.json from the bucket [default: 3600].",
    ),
    host: str = typer.Option(None, "--host", help="Address to listen on [default: 127.0.0.1]."),
    port: int = typer.Option(None, "--port", "-p", help="Port to listen on [default: 3000]."),
    jwt_pem: Path = typer.Option(
        None,
        "--jwt-pem",
        help="RSA public key (PEM). Enables JWT authentication via the Basic auth password.",
    ),
) -> None:
    """Serve the bucket via the Lockable HTTP Tarball Protocol."""
    settings = _common.load_settings(
        bucket=bucket,
        base_url=base_url,
        config_update_seconds=config_update_seconds,
        host=host,
        port=port,
        jwt_pem=jwt_pem,
    )
    if not settings.base_url:
        console.print(
            "[bold red]No base URL configured.[/bold red] "
            "Pass --base-url or set S3CHANNEL_BASE_URL."
        )
        raise typer.Exit(code=1)
    configure_logging(settings.log_level)

    gate = None
    if settings.auth_enabled:
        try:
            gate = JwtGate.from_pem_file(settings.jwt_pem)
        except AuthConfigError as exc:
            console.print(f"[bold red]Authentication setup failed:[/bold red] {escape(str(exc))}")
            raise typer.Exit(code=1)

    store = _common.open_store(settings)
    try:
        directory = ChannelDirectory.load(store)
    except ChannelsLoadError as exc:
        console.print(f"[bold red]Failed to load channel configuration:[/bold red] {escape(str(exc))}")
        raise typer.Exit(code=1)

    resolver = ChannelResolver(
        directory,
        store,
        settings.base_url,
        presign_ttl=settings.presign_ttl_seconds,
    )
    refresher = ConfigRefresher(directory, store, settings.config_update_seconds)
    app = create_app(resolver, refresher=refresher, gate=gate)

    run_server(
        app,
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
    )
