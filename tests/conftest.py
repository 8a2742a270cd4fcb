"""Shared test fixtures for s3channel."""

from __future__ import annotations

import json
from collections.abc import Callable
from typing import Any

import pytest
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import rsa

from s3channel.core.directory import ChannelDirectory
from s3channel.core.errors import BlobStoreError, ObjectNotFoundError, PresignError
from s3channel.core.resolver import ChannelResolver

BASE_URL = "https://channels.example.com"


class MemoryBlobStore:
    """In-memory ``BlobStore`` with failure injection and call recording."""

    def __init__(self, objects: dict[str, bytes] | None = None) -> None:
        self.objects: dict[str, bytes] = dict(objects or {})
        self.reads: list[str] = []
        self.writes: list[str] = []
        self.presigned: list[tuple[str, int]] = []
        self.fail_reads: set[str] = set()
        self.fail_writes: set[str] = set()
        self.fail_presign = False

    def get_object(self, object_key: str) -> bytes:
        self.reads.append(object_key)
        if object_key in self.fail_reads:
            raise BlobStoreError(f"Failed to read: {object_key}: connection reset")
        try:
            return self.objects[object_key]
        except KeyError:
            raise ObjectNotFoundError(object_key) from None

    def put_object(self, object_key: str, data: bytes) -> None:
        if object_key in self.fail_writes:
            raise BlobStoreError(f"Failed to upload: {object_key}: access denied")
        self.objects[object_key] = bytes(data)
        self.writes.append(object_key)

    def presign_get(self, object_key: str, ttl_seconds: int) -> str:
        if self.fail_presign:
            raise PresignError(object_key, "credentials expired")
        self.presigned.append((object_key, ttl_seconds))
        return (
            f"https://bucket.s3.example.com/{object_key}"
            f"?X-Amz-Expires={ttl_seconds}&X-Amz-Signature=deadbeef"
        )

    def descriptor(self, channel_name: str) -> dict[str, Any]:
        """Decode the stored ``<channel>.json``."""
        return json.loads(self.objects[f"{channel_name}.json"])


def seed_bucket(store: MemoryBlobStore, channels: dict[str, dict[str, Any]]) -> None:
    """Write ``channels.json`` and one descriptor per channel."""
    store.objects["channels.json"] = json.dumps({"channels": list(channels)}).encode()
    for name, descriptor in channels.items():
        store.objects[f"{name}.json"] = json.dumps(descriptor).encode()


@pytest.fixture
def make_store() -> Callable[..., MemoryBlobStore]:
    """Factory fixture: a bucket seeded with the given channels."""

    def _factory(channels: dict[str, dict[str, Any]] | None = None) -> MemoryBlobStore:
        store = MemoryBlobStore()
        seed_bucket(store, channels or {})
        return store

    return _factory


@pytest.fixture
def store(make_store: Callable[..., MemoryBlobStore]) -> MemoryBlobStore:
    """A bucket with two healthy channels."""
    return make_store(
        {
            "stable": {"latest": "nixexprs-2", "previous": ["nixexprs-1"]},
            "unstable": {"latest": "nixexprs-5"},
        }
    )


@pytest.fixture
def directory(store: MemoryBlobStore) -> ChannelDirectory:
    """A directory loaded from the default bucket."""
    return ChannelDirectory.load(store)


@pytest.fixture
def resolver(directory: ChannelDirectory, store: MemoryBlobStore) -> ChannelResolver:
    """A resolver over the default bucket."""
    return ChannelResolver(directory, store, BASE_URL)


# ---------------------------------------------------------------------------
# JWT key material
# ---------------------------------------------------------------------------


@pytest.fixture(scope="session")
def rsa_private_key() -> rsa.RSAPrivateKey:
    return rsa.generate_private_key(public_exponent=65537, key_size=2048)


@pytest.fixture(scope="session")
def rsa_public_pem(rsa_private_key: rsa.RSAPrivateKey) -> bytes:
    return rsa_private_key.public_key().public_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PublicFormat.SubjectPublicKeyInfo,
    )
