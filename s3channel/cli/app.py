"""Main Typer application: imports and registers all CLI commands.

Entry point: ``s3-nix-channel`` (configured via pyproject.toml scripts).
"""

from __future__ import annotations

import typer

from s3channel.cli.commands.listing import channels_cmd, show_cmd
from s3channel.cli.commands.serve import serve_cmd
from s3channel.cli.commands.update import update_cmd

app = typer.Typer(
    name="s3-nix-channel",
    help="Serve an S3 bucket via the Nix Lockable HTTP Tarball Protocol.",
    no_args_is_help=True,
    rich_markup_mode="rich",
    add_completion=False,
)

# Register subcommands
app.command(name="serve", help="Run the channel directory service.")(serve_cmd)
app.command(name="update", help="Publish a tarball as the latest of a channel.")(update_cmd)
app.command(name="channels", help="List configured channels.")(channels_cmd)
app.command(name="show", help="Show one channel and its history.")(show_cmd)


def main() -> None:
    """CLI entry point."""
    app()


if __name__ == "__main__":
    main()
