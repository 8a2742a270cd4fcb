"""Channel directory data models: all Pydantic v2, all frozen (immutable)."""

from s3channel.models.channels import (
    ARTIFACT_SUFFIX,
    CHANNELS_INDEX_KEY,
    ChannelDescriptor,
    ChannelsConfig,
    ChannelsIndex,
    artifact_key,
    descriptor_key,
)
