"""Process-wide configuration for crudkit.

Defaults for generated operations and storage backends are read from the
environment. Values given explicitly in per-entity options always win.

Environment Variables:
    CRUDKIT_DEFAULT_LIMIT: Page size when neither request nor options set one
    CRUDKIT_DEFAULT_PAGE: Page when neither request nor options set one
    CRUDKIT_S3_BUCKET_NAME: S3 bucket for uploads
    CRUDKIT_S3_REGION: AWS region
    CRUDKIT_S3_ACCESS_KEY: AWS access key ID
    CRUDKIT_S3_SECRET_KEY: AWS secret access key
    CRUDKIT_S3_ENDPOINT_URL: Custom endpoint (S3-compatible services)
    CRUDKIT_S3_CDN_URL: Public base URL of uploaded objects
    CRUDKIT_S3_PREFIX: Key prefix for uploaded objects
    CRUDKIT_S3_ACL: Canned ACL for uploaded objects
"""

import os
from typing import Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field


class CrudKitConfig(BaseModel):
    """crudkit configuration model."""

    model_config = ConfigDict(populate_by_name=True)

    # Pagination defaults
    default_limit: int = Field(
        default=10, gt=0, validation_alias="CRUDKIT_DEFAULT_LIMIT"
    )
    default_page: int = Field(
        default=1, gt=0, validation_alias="CRUDKIT_DEFAULT_PAGE"
    )

    # S3 Configuration
    s3_bucket_name: Optional[str] = Field(
        default=None, validation_alias="CRUDKIT_S3_BUCKET_NAME"
    )
    s3_region: Optional[str] = Field(default=None, validation_alias="CRUDKIT_S3_REGION")
    s3_access_key: Optional[str] = Field(
        default=None, validation_alias="CRUDKIT_S3_ACCESS_KEY"
    )
    s3_secret_key: Optional[str] = Field(
        default=None, validation_alias="CRUDKIT_S3_SECRET_KEY"
    )
    s3_endpoint_url: Optional[str] = Field(
        default=None, validation_alias="CRUDKIT_S3_ENDPOINT_URL"
    )
    s3_cdn_url: Optional[str] = Field(
        default=None, validation_alias="CRUDKIT_S3_CDN_URL"
    )
    s3_prefix: str = Field(default="", validation_alias="CRUDKIT_S3_PREFIX")
    s3_acl: str = Field(default="public-read", validation_alias="CRUDKIT_S3_ACL")


def get_config(environ: Optional[Mapping[str, str]] = None) -> CrudKitConfig:
    """Build the configuration from environment variables.

    Args:
        environ: Mapping to read instead of ``os.environ``

    Returns:
        CrudKitConfig instance
    """
    source = os.environ if environ is None else environ
    values = {key: value for key, value in source.items() if key.startswith("CRUDKIT_")}
    return CrudKitConfig.model_validate(values)
