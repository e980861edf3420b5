"""Generated server-side operation sets."""

from .crud import CrudService
from .find_all import FindAllRequest
from .options import (
    CreateOptions,
    FindAllOptions,
    FindOptions,
    S3Config,
    ServiceOptions,
    UpdateOptions,
    UploadOptions,
)

__all__ = [
    "CrudService",
    "FindAllRequest",
    "ServiceOptions",
    "FindOptions",
    "FindAllOptions",
    "CreateOptions",
    "UpdateOptions",
    "UploadOptions",
    "S3Config",
]
