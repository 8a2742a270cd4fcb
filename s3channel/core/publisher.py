"""Publishing a new artifact to a channel.

The update is a read-modify-write spread over several store calls with no
transaction around it.  It is **not** safe for concurrent use: callers
must serialize updates (one writer at a time), otherwise two updates of
the same channel can race and lose an entry of the ``previous`` trail.

The running service does not see an update until its next refresh.
"""

from __future__ import annotations

import logging
from pathlib import Path

from pydantic import BaseModel, ConfigDict

from s3channel.core.blob_store import BlobStore
from s3channel.core.directory import load_channels_config
from s3channel.core.errors import (
    ArtifactReadError,
    BlobStoreError,
    InvalidFileError,
    LeakedArtifactError,
    NoSuchChannelError,
    UploadError,
)
from s3channel.models.channels import ARTIFACT_SUFFIX, ChannelDescriptor, descriptor_key

logger = logging.getLogger(__name__)


class ChannelUpdate(BaseModel):
    """Outcome of a successful ``update_channel`` call."""

    model_config = ConfigDict(frozen=True)

    channel_name: str
    object_key: str
    previous_latest: str
    descriptor: ChannelDescriptor


def update_channel(store: BlobStore, channel_name: str, file: Path | str) -> ChannelUpdate:
    """Upload *file* and point *channel_name* at it.

    Steps: validate the suffix, load the configuration fresh from the
    store, upload the tarball, archive the old ``latest`` into
    ``previous``, write the new descriptor.

    Raises
    ------
    InvalidFileError
        If *file* does not end in ``.tar.xz``.  Nothing was written.
    NoSuchChannelError
        If the channel is not configured.  Nothing was written.
    ArtifactReadError, UploadError
        If the tarball could not be read or uploaded.  The channel is untouched.
    LeakedArtifactError
        If the tarball was uploaded but the descriptor write failed.
    """
    file = Path(file)
    if not str(file).endswith(ARTIFACT_SUFFIX):
        raise InvalidFileError(str(file))

    config = load_channels_config(store)
    current = config.channel(channel_name)
    if current is None:
        raise NoSuchChannelError(channel_name)

    object_key = file.name
    identifier = object_key[: -len(ARTIFACT_SUFFIX)]

    try:
        data = file.read_bytes()
    except OSError as exc:
        raise ArtifactReadError(f"Failed to read input file {file}: {exc}") from exc

    try:
        store.put_object(object_key, data)
    except BlobStoreError as exc:
        raise UploadError(f"Failed to upload file {file}: {exc}") from exc

    logger.info(
        "Updating channel %s from %s to %s.", channel_name, current.latest, object_key
    )
    updated = current.advanced_to(identifier)

    try:
        store.put_object(descriptor_key(channel_name), updated.to_json_bytes())
    except BlobStoreError as exc:
        raise LeakedArtifactError(channel_name, object_key, str(exc)) from exc

    return ChannelUpdate(
        channel_name=channel_name,
        object_key=object_key,
        previous_latest=current.latest,
        descriptor=updated,
    )
