"""s3channel: serve an S3 bucket via the Nix Lockable HTTP Tarball Protocol.

Named channels point at immutable ``<id>.tar.xz`` tarballs in a bucket.
Requests for a channel are redirected to a short-lived presigned URL of
its latest tarball, together with a ``Link`` header naming the permanent,
immutable location of that tarball.
"""

__version__ = "0.1.0"
__description__ = "Serve an S3 bucket via the Nix Lockable HTTP Tarball Protocol"

from s3channel.core.directory import ChannelDirectory, load_channels_config
from s3channel.core.publisher import update_channel
from s3channel.core.resolver import ChannelResolver

__all__ = [
    "ChannelDirectory",
    "ChannelResolver",
    "load_channels_config",
    "update_channel",
    "__version__",
]
