"""Request resolution for the Lockable HTTP Tarball Protocol.

A channel URL (``/channel/<name>.tar.xz``) is mutable and must be resolved
on every request.  The answer is a temporary redirect to a presigned URL
plus a ``Link`` header naming the immutable ``/permanent/<id>.tar.xz``
location, which clients may lock to.

See https://nix.dev/manual/nix/2.25/protocols/tarball-fetcher
"""

from __future__ import annotations

import asyncio
import logging

from pydantic import BaseModel, ConfigDict

from s3channel.core.blob_store import BlobStore
from s3channel.core.directory import ChannelDirectory
from s3channel.core.errors import InvalidFileError, NoSuchChannelError
from s3channel.models.channels import ARTIFACT_SUFFIX, artifact_key

logger = logging.getLogger(__name__)

DEFAULT_PRESIGN_TTL_SECONDS = 600


class Redirect(BaseModel):
    """A resolved request: where to send the client and the optional Link."""

    model_config = ConfigDict(frozen=True)

    location: str
    object_key: str
    link: str | None = None

    def headers(self) -> dict[str, str]:
        """Extra response headers besides ``Location``."""
        return {"Link": self.link} if self.link else {}


def immutable_link(base_url: str, identifier: str) -> str:
    """Build the ``Link`` header value pointing at the permanent URL."""
    return f'<{base_url}/permanent/{artifact_key(identifier)}>; rel="immutable"'


class ChannelResolver:
    """Turns channel and permanent paths into signed redirects.

    Parameters
    ----------
    directory:
        Source of the current configuration snapshot.
    store:
        Store used to presign artifact URLs.
    base_url:
        Public base URL of this service, used in the ``Link`` header.
    presign_ttl:
        Lifetime of presigned URLs, in seconds.
    """

    def __init__(
        self,
        directory: ChannelDirectory,
        store: BlobStore,
        base_url: str,
        presign_ttl: int = DEFAULT_PRESIGN_TTL_SECONDS,
    ) -> None:
        self.directory = directory
        self._store = store
        self.base_url = base_url.rstrip("/")
        self.presign_ttl = presign_ttl

    async def _presign(self, object_key: str) -> str:
        return await asyncio.to_thread(self._store.presign_get, object_key, self.presign_ttl)

    async def resolve_channel(self, path: str) -> Redirect:
        """Redirect to the latest tarball of the requested channel.

        Raises
        ------
        InvalidFileError
            If *path* does not end in ``.tar.xz``.
        NoSuchChannelError
            If the channel is not in the current snapshot.
        PresignError
            If the store cannot sign the URL.
        """
        if not path.endswith(ARTIFACT_SUFFIX):
            raise InvalidFileError(path)
        channel_name = path[: -len(ARTIFACT_SUFFIX)]

        # One snapshot per request; a concurrent refresh may replace it.
        descriptor = self.directory.snapshot().channel(channel_name)
        if descriptor is None:
            raise NoSuchChannelError(channel_name)
        identifier = descriptor.latest

        object_key = artifact_key(identifier)
        location = await self._presign(object_key)
        logger.debug("Channel %s resolved to %s", channel_name, object_key)
        return Redirect(
            location=location,
            object_key=object_key,
            link=immutable_link(self.base_url, identifier),
        )

    async def resolve_permanent(self, path: str) -> Redirect:
        """Redirect to a presigned URL for an artifact path, no lookup."""
        if not path.endswith(ARTIFACT_SUFFIX):
            raise InvalidFileError(path)
        return Redirect(location=await self._presign(path), object_key=path)
