"""Object store access: the small capability surface the directory needs.

The abstraction is deliberately narrow: read a small object, write an
object, presign a GET.  ``S3BlobStore`` implements it on top of boto3 and
works against AWS S3 as well as S3-compatible servers such as MinIO.
"""

from __future__ import annotations

import logging
from typing import Protocol, runtime_checkable

import boto3
from botocore.config import Config as BotoConfig
from botocore.exceptions import BotoCoreError, ClientError

from s3channel.core.errors import BlobStoreError, ObjectNotFoundError, PresignError

logger = logging.getLogger(__name__)

_NOT_FOUND_CODES = frozenset({"NoSuchKey", "404", "NotFound"})


@runtime_checkable
class BlobStore(Protocol):
    """Protocol every object store backend must implement.

    Calls are blocking.  Async callers run them via ``asyncio.to_thread``.
    """

    def get_object(self, object_key: str) -> bytes:
        """Read a whole object into memory.  Only meant for small objects.

        Raises
        ------
        ObjectNotFoundError
            If the key does not exist.
        BlobStoreError
            For any other failure.
        """
        ...

    def put_object(self, object_key: str, data: bytes) -> None:
        """Write *data* under *object_key*, replacing any existing object."""
        ...

    def presign_get(self, object_key: str, ttl_seconds: int) -> str:
        """Return a presigned GET URL for *object_key* valid for *ttl_seconds*.

        Raises
        ------
        PresignError
            If no URL can be produced.
        """
        ...


class S3BlobStore:
    """boto3-backed ``BlobStore`` for a single bucket.

    Parameters
    ----------
    bucket:
        Name of the bucket to serve.
    endpoint_url:
        Custom endpoint (MinIO, Ceph, ...).  ``None`` uses AWS defaults.
    region:
        Region name.  ``None`` defers to the environment.
    force_path_style:
        Address the bucket as ``<endpoint>/<bucket>/<key>`` instead of
        virtual-hosted style.  Required by most MinIO setups.
    client:
        Pre-built boto3 S3 client.  Mostly useful for tests.
    """

    def __init__(
        self,
        bucket: str,
        *,
        endpoint_url: str | None = None,
        region: str | None = None,
        force_path_style: bool = True,
        client=None,
    ) -> None:
        self.bucket = bucket
        if client is None:
            config = BotoConfig(
                signature_version="s3v4",
                s3={"addressing_style": "path" if force_path_style else "auto"},
            )
            client = boto3.session.Session().client(
                "s3",
                region_name=region,
                endpoint_url=endpoint_url,
                config=config,
            )
        self._client = client

    # ------------------------------------------------------------------
    # Read / write
    # ------------------------------------------------------------------

    def get_object(self, object_key: str) -> bytes:
        try:
            response = self._client.get_object(Bucket=self.bucket, Key=object_key)
            return response["Body"].read()
        except ClientError as exc:
            code = exc.response.get("Error", {}).get("Code", "")
            if code in _NOT_FOUND_CODES:
                raise ObjectNotFoundError(object_key) from exc
            raise BlobStoreError(f"Failed to read: {object_key}: {exc}") from exc
        except BotoCoreError as exc:
            raise BlobStoreError(f"Failed to read: {object_key}: {exc}") from exc

    def put_object(self, object_key: str, data: bytes) -> None:
        try:
            self._client.put_object(Bucket=self.bucket, Key=object_key, Body=data)
        except (ClientError, BotoCoreError) as exc:
            raise BlobStoreError(f"Failed to upload: {object_key}: {exc}") from exc
        logger.debug("Wrote %d bytes to s3://%s/%s", len(data), self.bucket, object_key)

    # ------------------------------------------------------------------
    # Presign
    # ------------------------------------------------------------------

    def presign_get(self, object_key: str, ttl_seconds: int) -> str:
        if ttl_seconds <= 0:
            raise PresignError(object_key, f"invalid expiry {ttl_seconds}s")
        try:
            return self._client.generate_presigned_url(
                "get_object",
                Params={"Bucket": self.bucket, "Key": object_key},
                ExpiresIn=ttl_seconds,
            )
        except (ClientError, BotoCoreError) as exc:
            raise PresignError(object_key, str(exc)) from exc
