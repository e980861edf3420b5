"""AWS S3 storage backend.

Objects are written with boto3. The blocking client calls run in a worker
thread through ``asyncio.to_thread`` so they do not stall the event loop.
"""

import asyncio
import logging
from typing import Any, Dict, Optional

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from crudkit.exceptions import StorageProviderError

from .base import StorageService

logger = logging.getLogger(__name__)


class S3StorageService(StorageService):
    """Upload storage on AWS S3 or an S3-compatible service.

    Stored objects live at ``{prefix}{key}`` in ``bucket_name`` and are
    published as ``{cdn_url}/{prefix}{key}``.

    Args:
        bucket_name: Target bucket
        cdn_url: Public base URL of the bucket (CDN or website endpoint)
        region_name: AWS region
        access_key_id: AWS access key ID
        secret_access_key: AWS secret access key
        endpoint_url: Custom endpoint URL (DigitalOcean Spaces, MinIO, ...)
        prefix: Key prefix prepended to every object key
        acl: Default canned ACL for uploads
        client: Preconfigured boto3 S3 client

    Example:
        >>> storage = S3StorageService(
        ...     bucket_name="assets",
        ...     cdn_url="https://cdn.example.com",
        ...     region_name="eu-west-1",
        ... )
        >>> url = await storage.upload_file(b"...", "textures/wood.png")
    """

    def __init__(
        self,
        bucket_name: str,
        cdn_url: str,
        region_name: Optional[str] = None,
        access_key_id: Optional[str] = None,
        secret_access_key: Optional[str] = None,
        endpoint_url: Optional[str] = None,
        prefix: str = "",
        acl: str = "public-read",
        client: Any = None,
    ):
        if not bucket_name:
            raise ValueError("S3 storage requires a bucket_name")
        if not cdn_url:
            raise ValueError("S3 storage requires a cdn_url")

        self.bucket_name = bucket_name
        self.cdn_url = cdn_url.rstrip("/")
        self.prefix = prefix or ""
        self.acl = acl

        if client is None:
            client_kwargs: Dict[str, Any] = {}
            if region_name:
                client_kwargs["region_name"] = region_name
            if endpoint_url:
                client_kwargs["endpoint_url"] = endpoint_url
            if access_key_id:
                client_kwargs["aws_access_key_id"] = access_key_id
            if secret_access_key:
                client_kwargs["aws_secret_access_key"] = secret_access_key
            client = boto3.client("s3", **client_kwargs)

        self.client = client
        logger.info(f"S3 storage initialized: bucket={bucket_name}")

    def _object_key(self, key: str) -> str:
        return f"{self.prefix}{key}"

    async def upload_file(
        self, body: bytes, key: str, acl: Optional[str] = None
    ) -> str:
        object_key = self._object_key(key)
        try:
            await asyncio.to_thread(
                self.client.put_object,
                Bucket=self.bucket_name,
                Key=object_key,
                Body=body,
                ACL=acl or self.acl,
            )
        except (BotoCoreError, ClientError) as e:
            logger.error(f"Error uploading {object_key} to S3: {e}")
            raise StorageProviderError(
                f"Failed to upload {object_key}: {e}", provider="s3", operation="upload"
            ) from e

        return f"{self.cdn_url}/{object_key}"

    async def delete_file(self, key: str) -> None:
        object_key = self._object_key(key)
        try:
            await asyncio.to_thread(
                self.client.delete_object, Bucket=self.bucket_name, Key=object_key
            )
        except (BotoCoreError, ClientError) as e:
            logger.error(f"Error deleting {object_key} from S3: {e}")
            raise StorageProviderError(
                f"Failed to delete {object_key}: {e}", provider="s3", operation="delete"
            ) from e

    def parse_key(self, url: str) -> str:
        key = url
        base = f"{self.cdn_url}/"
        if key.startswith(base):
            key = key[len(base) :]
        if self.prefix and key.startswith(self.prefix):
            key = key[len(self.prefix) :]
        return key
