"""Channel directory: loading the configuration and holding the live snapshot.

Loading is two-phase.  The channels index is load-bearing: if it cannot be
read or parsed the whole load fails.  Individual channel descriptors are
not: a missing or malformed ``<channel>.json`` is logged and that channel
is left out, so one broken channel never takes the others down.

``ChannelDirectory`` owns the current snapshot.  The snapshot is replaced
by a single reference assignment and never mutated, so a reader that took
it once sees either the old or the new configuration in full.
"""

from __future__ import annotations

import logging

from pydantic import ValidationError

from s3channel.core.blob_store import BlobStore
from s3channel.core.errors import BlobStoreError, ChannelsLoadError
from s3channel.models.channels import (
    CHANNELS_INDEX_KEY,
    ChannelDescriptor,
    ChannelsConfig,
    ChannelsIndex,
    descriptor_key,
)

logger = logging.getLogger(__name__)


def _load_index(store: BlobStore) -> ChannelsIndex:
    try:
        raw = store.get_object(CHANNELS_INDEX_KEY)
    except BlobStoreError as exc:
        raise ChannelsLoadError(f"Failed to read {CHANNELS_INDEX_KEY}: {exc}") from exc
    try:
        return ChannelsIndex.model_validate_json(raw)
    except ValidationError as exc:
        raise ChannelsLoadError(
            f"Failed to deserialize {CHANNELS_INDEX_KEY}: {exc}"
        ) from exc


def _load_descriptor(store: BlobStore, channel_name: str) -> ChannelDescriptor:
    return ChannelDescriptor.model_validate_json(
        store.get_object(descriptor_key(channel_name))
    )


def load_channels_config(store: BlobStore) -> ChannelsConfig:
    """Build a fresh ``ChannelsConfig`` from the bucket.

    Raises
    ------
    ChannelsLoadError
        If ``channels.json`` is missing, unreadable or malformed.
    """
    index = _load_index(store)
    logger.debug("Loaded channel index: %s", list(index.channels))

    entries: dict[str, ChannelDescriptor] = {}
    for channel_name in index.channels:
        try:
            descriptor = _load_descriptor(store, channel_name)
        except (BlobStoreError, ValidationError) as exc:
            logger.error(
                "Configured channel %r has no usable %s in the bucket. Ignoring! (%s)",
                channel_name,
                descriptor_key(channel_name),
                exc,
            )
            continue
        logger.info("Channel %s points to: %s", channel_name, descriptor.latest)
        entries[channel_name] = descriptor

    return ChannelsConfig(entries=entries)


class ChannelDirectory:
    """Holds the currently published ``ChannelsConfig``.

    Single writer (the refresher), many readers (request handlers).
    Readers call ``snapshot()`` once per operation and work on that value.

    Parameters
    ----------
    initial:
        The configuration to serve until the first refresh.
    """

    def __init__(self, initial: ChannelsConfig) -> None:
        self._current = initial

    @classmethod
    def load(cls, store: BlobStore) -> ChannelDirectory:
        """Load the configuration synchronously and wrap it.

        Used at startup: the service must not accept requests without a
        configuration, so load errors propagate.
        """
        return cls(load_channels_config(store))

    def snapshot(self) -> ChannelsConfig:
        """Return the current configuration snapshot."""
        return self._current

    def publish(self, config: ChannelsConfig) -> None:
        """Replace the current snapshot wholesale."""
        self._current = config
