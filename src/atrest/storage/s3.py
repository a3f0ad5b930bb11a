"""
S3 storage backend.

Wraps a boto3 S3 client that the caller owns and injects. boto3 is
blocking, so every client call runs in the default executor.
"""

from __future__ import annotations

import asyncio
import functools
import posixpath
from typing import TYPE_CHECKING, Any

from botocore.exceptions import BotoCoreError, ClientError
from loguru import logger

from .base import (
    StorageBackend,
    StorageKeyError,
    StoragePermissionError,
    StorageUnavailableError,
    StoredObject,
    normalize_key,
)

if TYPE_CHECKING:
    from atrest.config_schema import S3Config

_NOT_FOUND_CODES = {"NoSuchKey", "NotFound", "404"}
_DENIED_CODES = {"AccessDenied", "Forbidden", "403", "InvalidAccessKeyId", "SignatureDoesNotMatch"}

# boto names for the signature versions accepted in configuration
_SIGNATURE_VERSIONS = {"v4": "s3v4", "v2": "s3"}


def create_s3_client(config: S3Config):
    """Build a boto3 S3 client from configuration.

    Missing credentials fall through to boto3's default credential chain.
    """
    import boto3
    from botocore.config import Config as BotoConfig

    signature = _SIGNATURE_VERSIONS.get(config.signature_version, config.signature_version)
    return boto3.client(
        "s3",
        region_name=config.region or None,
        aws_access_key_id=config.access_key_id or None,
        aws_secret_access_key=config.secret_access_key or None,
        use_ssl=config.ssl_enabled,
        endpoint_url=config.endpoint_url,
        config=BotoConfig(signature_version=signature),
    )


class S3Storage(StorageBackend):
    """S3 bucket storage backend.

    Object names are the full normalized key, so ``notes/a.txt`` and
    ``drafts/a.txt`` are distinct objects. With ``flatten_keys`` only the
    final segment is used and both keys map to the same object ``a.txt``.
    """

    name = "s3"

    def __init__(self, client: Any, bucket: str, acl: str | None = "private", flatten_keys: bool = False):
        self.client = client
        self.bucket = bucket
        self.acl = acl
        self.flatten_keys = flatten_keys

    def _object_name(self, key: str) -> str:
        name = normalize_key(key)
        if self.flatten_keys:
            return posixpath.basename(name)
        return name

    async def _call(self, key: str, method: str, **params) -> dict:
        loop = asyncio.get_running_loop()
        call = functools.partial(getattr(self.client, method), Bucket=self.bucket, **params)
        try:
            return await loop.run_in_executor(None, call)
        except ClientError as e:
            code = str(e.response.get("Error", {}).get("Code", ""))
            if code in _NOT_FOUND_CODES:
                raise StorageKeyError(f"Key not found: {key}") from e
            if code in _DENIED_CODES:
                raise StoragePermissionError(f"S3 {method} denied for {key}: {code}") from e
            raise StorageUnavailableError(f"S3 {method} failed for {key}: {e}") from e
        except BotoCoreError as e:
            raise StorageUnavailableError(f"S3 {method} failed for {key}: {e}") from e

    async def put(self, key: str, data: bytes) -> StoredObject:
        name = self._object_name(key)
        params: dict[str, Any] = {"Key": name, "Body": bytes(data)}
        if self.acl:
            params["ACL"] = self.acl
        await self._call(key, "put_object", **params)

        logger.debug(f"s3 put {self.bucket}/{name} ({len(data)} bytes)")
        return StoredObject(key=normalize_key(key), size=len(data), location=f"s3://{self.bucket}/{name}")

    async def get(self, key: str) -> bytes:
        name = self._object_name(key)
        response = await self._call(key, "get_object", Key=name)

        body = response["Body"]
        loop = asyncio.get_running_loop()
        try:
            data = await loop.run_in_executor(None, body.read)
        except BotoCoreError as e:
            raise StorageUnavailableError(f"S3 read failed for {key}: {e}") from e
        finally:
            body.close()

        logger.debug(f"s3 get {self.bucket}/{name} ({len(data)} bytes)")
        return data

    async def delete(self, key: str) -> None:
        # S3 deletes of missing objects succeed silently; surface them instead
        if not await self.exists(key):
            raise StorageKeyError(f"Key not found: {key}")
        name = self._object_name(key)
        await self._call(key, "delete_object", Key=name)
        logger.debug(f"s3 delete {self.bucket}/{name}")

    async def exists(self, key: str) -> bool:
        try:
            await self._call(key, "head_object", Key=self._object_name(key))
        except StorageKeyError:
            return False
        return True
