"""s3channel CLI: Typer-based command-line interface.

Provides the ``s3-nix-channel`` command with subcommands for serving the
directory, publishing tarballs and inspecting channels.

All output uses Rich for formatted terminal display.
"""
