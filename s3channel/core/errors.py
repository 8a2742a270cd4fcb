"""Error taxonomy for the channel directory service.

Every error carries a stable ``code``, an HTTP-style ``status_code`` and a
``public_message`` that is safe to return to a caller.  The full ``str()``
of an error may contain internal detail (object keys, store messages) and
is meant for logs and for the operator-facing CLI only.

Families
--------
- store: ``BlobStoreError``, ``ObjectNotFoundError``
- load: ``ChannelsLoadError``
- resolution: ``InvalidFileError``, ``NoSuchChannelError``, ``PresignError``
- update: ``ArtifactReadError``, ``UploadError``, ``LeakedArtifactError``
- auth: ``AuthConfigError``
"""

from __future__ import annotations


class ChannelServiceError(RuntimeError):
    """Base class for all service errors."""

    code: str = "internal_error"
    status_code: int = 500
    public_message: str = "Internal server error"


# ---------------------------------------------------------------------------
# Store
# ---------------------------------------------------------------------------


class BlobStoreError(ChannelServiceError):
    """Raised when a read or write against the object store fails."""

    code = "store_error"


class ObjectNotFoundError(BlobStoreError):
    """Raised when a requested object key does not exist in the bucket."""

    code = "object_not_found"
    status_code = 404
    public_message = "Not found"

    def __init__(self, object_key: str) -> None:
        super().__init__(f"Object not found: {object_key}")
        self.object_key = object_key


# ---------------------------------------------------------------------------
# Load
# ---------------------------------------------------------------------------


class ChannelsLoadError(ChannelServiceError):
    """Raised when the channels index cannot be read or parsed."""

    code = "config_load_failed"


# ---------------------------------------------------------------------------
# Resolution
# ---------------------------------------------------------------------------


class InvalidFileError(ChannelServiceError):
    """Raised when a path does not name a ``.tar.xz`` artifact."""

    code = "invalid_file"
    status_code = 404

    def __init__(self, file_name: str) -> None:
        super().__init__(f"Invalid file ending. Only .tar.xz is supported: {file_name}")
        self.file_name = file_name

    @property
    def public_message(self) -> str:  # type: ignore[override]
        return f"Invalid file: {self.file_name}"


class NoSuchChannelError(ChannelServiceError):
    """Raised when a channel is not present in the configuration."""

    code = "no_such_channel"
    status_code = 404

    def __init__(self, channel_name: str) -> None:
        super().__init__(f"Channel {channel_name} does not exist")
        self.channel_name = channel_name

    @property
    def public_message(self) -> str:  # type: ignore[override]
        return f"No such channel: {self.channel_name}"


class PresignError(ChannelServiceError):
    """Raised when the store cannot produce a presigned URL."""

    code = "presign_failed"
    public_message = "Failed to sign request"

    def __init__(self, object_key: str, reason: str = "") -> None:
        detail = f"Failed to presign {object_key}"
        if reason:
            detail = f"{detail}: {reason}"
        super().__init__(detail)
        self.object_key = object_key


# ---------------------------------------------------------------------------
# Update
# ---------------------------------------------------------------------------


class ArtifactReadError(ChannelServiceError):
    """Raised when the local artifact file cannot be read."""

    code = "artifact_read_failed"


class UploadError(ChannelServiceError):
    """Raised when uploading an artifact fails.  The channel is untouched."""

    code = "upload_failed"


class LeakedArtifactError(ChannelServiceError):
    """Raised when an artifact was uploaded but the channel was not advanced.

    The object at ``object_key`` now exists in the bucket without any
    channel pointing at it.  Only manual cleanup removes it.
    """

    code = "artifact_leaked"

    def __init__(self, channel_name: str, object_key: str, reason: str = "") -> None:
        detail = (
            f"Failed to update channel {channel_name}. This leaked the tarball "
            f"{object_key}! Remove it manually, if this is an issue."
        )
        if reason:
            detail = f"{detail} ({reason})"
        super().__init__(detail)
        self.channel_name = channel_name
        self.object_key = object_key


# ---------------------------------------------------------------------------
# Auth
# ---------------------------------------------------------------------------


class AuthConfigError(ChannelServiceError):
    """Raised when the configured JWT verification key cannot be loaded."""

    code = "auth_config_invalid"
