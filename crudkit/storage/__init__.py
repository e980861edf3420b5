"""Upload storage for generated operation sets.

Example:
    >>> from crudkit.storage import get_storage_service
    >>> storage = get_storage_service(options.upload)
    >>> url = await storage.upload_file(content, "materials/foam.png")
"""

import logging
from typing import Any, Optional

from crudkit.config import CrudKitConfig, get_config
from crudkit.exceptions import ConfigurationError

from .files import UploadedFile, file_extension, read_upload
from .interfaces import S3StorageService, StorageService

logger = logging.getLogger(__name__)

__all__ = [
    "get_storage_service",
    "StorageService",
    "S3StorageService",
    "UploadedFile",
    "file_extension",
    "read_upload",
]


def get_storage_service(upload: Any, config: Optional[CrudKitConfig] = None) -> Any:
    """Create the storage backend for an upload configuration.

    A ``custom_service`` is returned as is. Otherwise an ``S3StorageService``
    is built from the ``s3`` settings, with unset values taken from the
    process configuration.

    Args:
        upload: ``UploadOptions`` of an operation set
        config: Configuration to fall back on (default: from environment)

    Returns:
        Storage backend

    Raises:
        ConfigurationError: If no backend can be built
    """
    if upload.custom_service is not None:
        logger.info(
            f"Using custom storage service: {type(upload.custom_service).__name__}"
        )
        return upload.custom_service

    if upload.s3 is None:
        raise ConfigurationError("Upload configuration has no storage backend")

    config = config or get_config()
    s3 = upload.s3

    bucket_name = s3.bucket_name or config.s3_bucket_name
    cdn_url = s3.cdn_url or config.s3_cdn_url
    if not bucket_name or not cdn_url:
        raise ConfigurationError(
            "S3 storage requires bucket_name and cdn_url",
            details={"bucket_name": bucket_name, "cdn_url": cdn_url},
        )

    return S3StorageService(
        bucket_name=bucket_name,
        cdn_url=cdn_url,
        region_name=s3.region_name or config.s3_region,
        access_key_id=s3.access_key_id or config.s3_access_key,
        secret_access_key=s3.secret_access_key or config.s3_secret_key,
        endpoint_url=s3.endpoint_url or config.s3_endpoint_url,
        prefix=s3.prefix if s3.prefix is not None else config.s3_prefix,
        acl=s3.acl or config.s3_acl,
    )
