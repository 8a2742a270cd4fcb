"""``s3-nix-channel channels`` / ``show``: inspect the bucket's configuration."""

from __future__ import annotations

import typer
from rich.markup import escape
from rich.table import Table

from s3channel.cli.commands import _common
from s3channel.cli.console import configure_logging, console
from s3channel.core.directory import load_channels_config
from s3channel.core.errors import ChannelsLoadError
from s3channel.models.channels import ChannelsConfig, artifact_key


def _load(bucket: str | None) -> ChannelsConfig:
    settings = _common.load_settings(bucket=bucket)
    configure_logging(settings.log_level)
    try:
        return load_channels_config(_common.open_store(settings))
    except ChannelsLoadError as exc:
        console.print(f"[bold red]Failed to load channel configuration:[/bold red] {escape(str(exc))}")
        raise typer.Exit(code=1)


def channels_cmd(
    bucket: str = typer.Option(None, "--bucket", "-b", help="The S3 bucket holding the channels."),
) -> None:
    """List all channels and the tarball each one points to."""
    config = _load(bucket)
    if not len(config):
        console.print("[dim]No channels configured.[/dim]")
        return

    table = Table(title="Channels")
    table.add_column("Channel", style="cyan")
    table.add_column("Latest", style="green")
    table.add_column("Previous", justify="right")
    for name in config.channels():
        descriptor = config.channel(name)
        table.add_row(name, descriptor.latest, str(len(descriptor.previous)))
    console.print(table)


def show_cmd(
    channel: str = typer.Argument(..., help="The channel to show."),
    bucket: str = typer.Option(None, "--bucket", "-b", help="The S3 bucket holding the channels."),
) -> None:
    """Show the latest tarball and the full history of one channel."""
    descriptor = _load(bucket).channel(channel)
    if descriptor is None:
        console.print(f"[bold red]Channel {channel} does not exist.[/bold red]")
        raise typer.Exit(code=1)

    console.print(f"[bold]{channel}[/bold] -> [green]{artifact_key(descriptor.latest)}[/green]")
    for position, identifier in enumerate(reversed(descriptor.previous), start=1):
        console.print(f"  [dim]-{position}[/dim] {artifact_key(identifier)}")
