"""Service configuration: env-driven via pydantic-settings.

Reads from a ``.env`` file and ``S3CHANNEL_*`` environment variables.
Command-line options of ``s3-nix-channel`` override these values.

AWS credentials are not part of this model: boto3 picks them up from its
usual sources (``AWS_ACCESS_KEY_ID``, ``AWS_SECRET_ACCESS_KEY``,
``AWS_REGION``, ``AWS_ENDPOINT_URL``, shared config files, ...).
"""

from __future__ import annotations

from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class ServiceSettings(BaseSettings):
    """Settings for the directory service and the update tool.

    Examples
    --------
    Override via environment::

        export S3CHANNEL_BUCKET=nix-channels
        export S3CHANNEL_BASE_URL=https://channels.example.com
        export S3CHANNEL_JWT_PEM=/etc/s3channel/jwt.pem
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="S3CHANNEL_",
        env_file_encoding="utf-8",
    )

    # Bucket
    bucket: str = ""
    s3_endpoint_url: str | None = None
    s3_region: str | None = None
    s3_force_path_style: bool = True

    # Serving
    # If artifacts should be served from https://foo.com/permanent/123.tar.xz,
    # the base URL is https://foo.com
    base_url: str = ""
    host: str = "127.0.0.1"
    port: int = 3000
    config_update_seconds: int = Field(default=3600, gt=0)
    presign_ttl_seconds: int = Field(default=600, gt=0)

    # Authentication, RSA public key (PEM); unset means an open service
    jwt_pem: Path | None = None

    # Observability
    log_level: str = "INFO"

    @field_validator("base_url")
    @classmethod
    def _strip_trailing_slash(cls, value: str) -> str:
        return value.rstrip("/")

    @property
    def auth_enabled(self) -> bool:
        """Whether requests must carry a valid JWT."""
        return self.jwt_pem is not None
