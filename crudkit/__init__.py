"""
crudkit - Declarative CRUD operation sets for async Python services.

crudkit turns a model, a primary key name and an options object into a set
of async find/find_all/create/update/destroy operations, mounts them as
FastAPI routes, and mirrors them as an httpx client.

Key Features:
- Association path language for eager loading (``Texture,Image.Author``)
- Whitelisted search, where-filters, pagination and DTO projection
- File uploads to S3 or a custom storage service
- Serializable client operation sets and SDK bundles

Main Exports (Import from top level):
    Operation sets:
        - CrudService: Server-side operation set
        - RestController: FastAPI routes for an operation set
        - CrudAPI: HTTP client operation set

    Parameters:
        - ParamsBuilder: Fluent request parameter pipeline
        - parse, encode, resolve_one: Association path handling
        - InclusionNode: Resolved association tree node

    Data:
        - MemoryModel: In-memory reference model
        - Association: Association registry entry

    SDK:
        - build_sdk: Write a client bundle
        - load_sdk: Rebuild clients from a bundle

Example:
    >>> from crudkit import CrudService, MemoryModel
    >>>
    >>> Material = MemoryModel("Material", primary_key="uuid")
    >>> service = CrudService(Material, "uuid", {
    ...     "find": {},
    ...     "create": {"properties": ["name"]},
    ... })
    >>> material = await service.create({"name": "Foam"})
"""

__version__ = "0.1.0"

from . import exceptions
from .api import APIErrorHandler, RestController, register_exception_handlers
from .client import AuthorizationOptions, ClientOptions, CrudAPI
from .config import CrudKitConfig, get_config
from .core import (
    Association,
    InclusionNode,
    ParamsBuilder,
    encode,
    parse,
    resolve_one,
)
from .db import MemoryModel
from .sdk import build_sdk, load_sdk
from .service import CrudService, FindAllRequest, ServiceOptions
from .storage import S3StorageService, StorageService, UploadedFile

__all__ = [
    "__version__",
    "exceptions",
    # Operation sets
    "CrudService",
    "FindAllRequest",
    "ServiceOptions",
    "RestController",
    "CrudAPI",
    "ClientOptions",
    "AuthorizationOptions",
    # Parameters
    "ParamsBuilder",
    "InclusionNode",
    "parse",
    "encode",
    "resolve_one",
    # Data
    "Association",
    "MemoryModel",
    # Storage
    "StorageService",
    "S3StorageService",
    "UploadedFile",
    # API
    "APIErrorHandler",
    "register_exception_handlers",
    # Config
    "CrudKitConfig",
    "get_config",
    # SDK
    "build_sdk",
    "load_sdk",
]
