"""Storage backend implementations."""

from .base import StorageService
from .s3 import S3StorageService

__all__ = ["StorageService", "S3StorageService"]
