"""Abstract base class for upload storage backends.

Generated create/update/destroy operations store uploaded files through a
``StorageService``. Any object providing the same four methods can be passed
as ``upload.custom_service``; subclassing is optional.
"""

from abc import ABC, abstractmethod
from typing import Optional


class StorageService(ABC):
    """Storage backend for uploaded files.

    Stored objects are addressed by a key. Upload methods return the public
    URL of the stored object, which is what gets saved on the record;
    ``parse_key`` maps such a URL back to its key.

    Example:
        >>> class MyStorage(StorageService):
        ...     async def upload_file(self, body, key, acl=None):
        ...         ...
    """

    @abstractmethod
    async def upload_file(
        self, body: bytes, key: str, acl: Optional[str] = None
    ) -> str:
        """Store a new object.

        Args:
            body: File content
            key: Object key
            acl: Optional backend specific access control setting

        Returns:
            Public URL of the stored object

        Raises:
            StorageProviderError: If the upload fails
        """
        pass

    async def update_file(
        self, body: bytes, key: str, acl: Optional[str] = None
    ) -> str:
        """Replace the content of an existing object.

        Defaults to overwriting through ``upload_file``.
        """
        return await self.upload_file(body, key, acl)

    @abstractmethod
    async def delete_file(self, key: str) -> None:
        """Delete an object.

        Raises:
            StorageProviderError: If the deletion fails
        """
        pass

    @abstractmethod
    def parse_key(self, url: str) -> str:
        """Return the object key for a URL produced by ``upload_file``."""
        pass
