"""HTTP client operation sets mirroring ``CrudService``."""

from .api import CrudAPI
from .auth import AuthorizationOptions
from .options import ClientOptions, derive_client_options
from .utils import get_include_string, get_where_string

__all__ = [
    "AuthorizationOptions",
    "ClientOptions",
    "CrudAPI",
    "derive_client_options",
    "get_include_string",
    "get_where_string",
]
