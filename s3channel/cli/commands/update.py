"""``s3-nix-channel update CHANNEL FILE``: publish a tarball to a channel.

Uploads the tarball, then points the channel at it and archives the old
latest.  Updates are not safe to run concurrently: run one at a time.
"""

from __future__ import annotations

from pathlib import Path

import typer
from rich.markup import escape
from rich.panel import Panel

from s3channel.cli.commands import _common
from s3channel.cli.console import configure_logging, console
from s3channel.core.errors import ChannelServiceError, LeakedArtifactError
from s3channel.core.publisher import update_channel


def update_cmd(
    channel: str = typer.Argument(..., help="The channel to update."),
    file: Path = typer.Argument(..., help="The .tar.xz tarball to publish."),
    bucket: str = typer.Option(None, "--bucket", "-b", help="The S3 bucket holding the channels."),
) -> None:
    """Upload a tarball and make it the channel's latest."""
    settings = _common.load_settings(bucket=bucket)
    configure_logging(settings.log_level)
    store = _common.open_store(settings)

    try:
        result = update_channel(store, channel, file)
    except LeakedArtifactError as exc:
        console.print(
            Panel(
                "\n".join([
                    f"[bold red]Channel {exc.channel_name} was not updated.[/bold red]",
                    "",
                    f"The tarball [bold]{exc.object_key}[/bold] was uploaded but no",
                    "channel points to it. Remove it manually, if this is an issue.",
                    "",
                    f"[dim]{escape(str(exc))}[/dim]",
                ]),
                title="[bold]Leaked tarball[/bold]",
                border_style="red",
                padding=(1, 2),
            )
        )
        raise typer.Exit(code=2)
    except ChannelServiceError as exc:
        console.print(f"[bold red]Update failed:[/bold red] {escape(str(exc))}")
        raise typer.Exit(code=1)

    console.print(
        f"Updating channel {result.channel_name} from "
        f"{result.previous_latest} to {result.object_key}."
    )
    console.print(
        f"[green]Channel {result.channel_name} now serves {result.object_key}[/green] "
        f"[dim]({len(result.descriptor.previous)} previous)[/dim]"
    )
