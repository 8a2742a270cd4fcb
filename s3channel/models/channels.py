"""Channel configuration models: the persisted documents and the snapshot.

Bucket layout::

    channels.json      {"channels": ["stable", "unstable"]}
    <channel>.json     {"latest": "<id>", "previous": ["<id>", ...]}
    <id>.tar.xz        the artifact itself

All models are frozen.  A ``ChannelsConfig`` is built once per load and
shared read-only afterwards, so handing out its descriptors is safe.
"""

from __future__ import annotations

from collections.abc import Mapping
from types import MappingProxyType

from pydantic import BaseModel, ConfigDict, Field, field_serializer, field_validator

ARTIFACT_SUFFIX = ".tar.xz"
CHANNELS_INDEX_KEY = "channels.json"


def descriptor_key(channel_name: str) -> str:
    """Object key of the descriptor document for *channel_name*."""
    return f"{channel_name}.json"


def artifact_key(identifier: str) -> str:
    """Object key of the artifact named by *identifier*."""
    return f"{identifier}{ARTIFACT_SUFFIX}"


class ChannelsIndex(BaseModel):
    """The persistent ``channels.json`` document.

    Every listed channel needs a corresponding ``<channel>.json`` in the
    bucket.
    """

    model_config = ConfigDict(frozen=True)

    channels: tuple[str, ...]


class ChannelDescriptor(BaseModel):
    """The persistent configuration of a single channel."""

    model_config = ConfigDict(frozen=True)

    latest: str
    previous: tuple[str, ...] = ()

    def advanced_to(self, identifier: str) -> ChannelDescriptor:
        """Return a descriptor pointing at *identifier*, archiving ``latest``."""
        return ChannelDescriptor(
            latest=identifier,
            previous=(*self.previous, self.latest),
        )

    def to_json_bytes(self) -> bytes:
        """Serialize to the pretty-printed JSON stored in the bucket."""
        return self.model_dump_json(indent=2).encode("utf-8")


class ChannelsConfig(BaseModel):
    """Immutable snapshot mapping channel names to their descriptors.

    ``entries`` is stored as a read-only mapping, so a snapshot shared
    across request handlers cannot be changed through it.
    """

    model_config = ConfigDict(frozen=True)

    entries: Mapping[str, ChannelDescriptor] = Field(default_factory=dict)

    @field_validator("entries", mode="after")
    @classmethod
    def _read_only(cls, value: Mapping[str, ChannelDescriptor]) -> Mapping[str, ChannelDescriptor]:
        return MappingProxyType(dict(value))

    @field_serializer("entries")
    def _serialize_entries(self, entries: Mapping[str, ChannelDescriptor]) -> dict[str, ChannelDescriptor]:
        return dict(entries)

    def channels(self) -> list[str]:
        """Return the configured channel names in sorted order."""
        return sorted(self.entries)

    def channel(self, channel_name: str) -> ChannelDescriptor | None:
        """Return the descriptor for *channel_name*, or ``None``."""
        return self.entries.get(channel_name)

    def __len__(self) -> int:
        return len(self.entries)

    def __contains__(self, channel_name: object) -> bool:
        return channel_name in self.entries
