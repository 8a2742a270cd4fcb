"""Tests for service settings: env-driven configuration."""

from __future__ import annotations

from pathlib import Path

import pytest
from pydantic import ValidationError

from s3channel.config import ServiceSettings


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch, tmp_path):
    for name in (
        "S3CHANNEL_BUCKET",
        "S3CHANNEL_BASE_URL",
        "S3CHANNEL_CONFIG_UPDATE_SECONDS",
        "S3CHANNEL_JWT_PEM",
        "S3CHANNEL_PORT",
    ):
        monkeypatch.delenv(name, raising=False)
    # keep a developer's .env out of the picture
    monkeypatch.chdir(tmp_path)


class TestServiceSettings:
    def test_defaults(self):
        settings = ServiceSettings()
        assert settings.bucket == ""
        assert settings.base_url == ""
        assert settings.config_update_seconds == 3600
        assert settings.presign_ttl_seconds == 600
        assert settings.port == 3000
        assert settings.s3_force_path_style is True

    def test_auth_disabled_by_default(self):
        assert ServiceSettings().auth_enabled is False

    def test_auth_enabled_with_key(self):
        settings = ServiceSettings(jwt_pem=Path("/etc/s3channel/jwt.pem"))
        assert settings.auth_enabled is True

    def test_env_overrides(self, monkeypatch):
        monkeypatch.setenv("S3CHANNEL_BUCKET", "nix-channels")
        monkeypatch.setenv("S3CHANNEL_CONFIG_UPDATE_SECONDS", "60")
        settings = ServiceSettings()
        assert settings.bucket == "nix-channels"
        assert settings.config_update_seconds == 60

    def test_dotenv_file(self, tmp_path):
        (tmp_path / ".env").write_text("S3CHANNEL_BUCKET=from-dotenv\n")
        assert ServiceSettings().bucket == "from-dotenv"

    def test_init_kwargs_beat_env(self, monkeypatch):
        monkeypatch.setenv("S3CHANNEL_BUCKET", "from-env")
        assert ServiceSettings(bucket="from-cli").bucket == "from-cli"

    def test_base_url_trailing_slash_stripped(self):
        settings = ServiceSettings(base_url="https://foo.com/")
        assert settings.base_url == "https://foo.com"

    def test_interval_must_be_positive(self):
        with pytest.raises(ValidationError):
            ServiceSettings(config_update_seconds=0)
