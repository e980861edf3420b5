"""Declarative CRUD operation sets.

``CrudService`` turns a model, a primary key name and an options object into
async ``find``, ``find_all``, ``create``, ``update`` and ``destroy``
operations. An operation whose options key is absent is not generated: the
attribute is ``None`` instead of a callable.

Example:
    >>> service = CrudService(Material, "uuid", {
    ...     "find": {"dto": ["uuid", "name"]},
    ...     "findAll": {"searchProperties": ["name"], "defaultLimit": 10},
    ...     "create": {"properties": ["name"]},
    ...     "delete": True,
    ... })
    >>> material = await service.create({"name": "Foam"})
    >>> await service.find(material["uuid"])
    {'uuid': '...', 'name': 'Foam'}
    >>> service.update is None
    True
"""

import logging
import uuid
from typing import Any, Awaitable, Callable, Dict, Iterable, List, Mapping, Optional

from crudkit.config import CrudKitConfig, get_config
from crudkit.core.associations import model_name
from crudkit.core.params import ParamsBuilder, is_missing
from crudkit.core.paths import InclusionNode
from crudkit.db.model import row_to_dict
from crudkit.exceptions import (
    ConfigurationError,
    EntityNotFoundError,
    MissingFieldError,
    MissingKeyError,
    UploadNotConfiguredError,
)
from crudkit.storage import file_extension, get_storage_service, read_upload

from .find_all import FindAllRequest
from .options import (
    OptionsInput,
    ServiceOptions,
    load_service_options,
    strip_route_keys,
)

logger = logging.getLogger(__name__)

Operation = Callable[..., Awaitable[Any]]


class CrudService:
    """Operation set for one model.

    Args:
        model: Model implementing the ``EntityModel`` contract
        pk_name: Primary key field name
        options: ``ServiceOptions`` or an equivalent mapping
        storage: Storage backend overriding the one built from
            ``options.upload``
        config: Process configuration (default: from environment)

    Attributes:
        find: ``find(key, include=None)`` or None
        find_all: ``find_all(limit=None, page=None, q=None, where=None,
            include=None)`` or None
        create: ``create(params, response_include=None, files=None)`` or None
        update: ``update(key, params, response_include=None, files=None)``
            or None
        destroy: ``destroy(key)`` or None
    """

    def __init__(
        self,
        model: Any,
        pk_name: str,
        options: OptionsInput = None,
        storage: Any = None,
        config: Optional[CrudKitConfig] = None,
    ):
        if model is None:
            raise ConfigurationError("No model provided.")
        if not pk_name:
            raise ConfigurationError("No primary key name provided.")

        self.model = model
        self.pk_name = pk_name
        self.options: ServiceOptions = load_service_options(options)
        self.config = config or get_config()
        self.entity_name = model_name(model)

        self.storage = storage
        if self.storage is None and self.options.upload is not None:
            self.storage = get_storage_service(self.options.upload, self.config)

        self.find: Optional[Operation] = (
            self._find if self.options.find is not None else None
        )
        self.find_all: Optional[Operation] = (
            self._find_all if self.options.find_all is not None else None
        )
        self.create: Optional[Operation] = (
            self._create if self.options.create is not None else None
        )
        self.update: Optional[Operation] = (
            self._update if self.options.update is not None else None
        )
        self.destroy: Optional[Operation] = (
            self._destroy if self.options.delete else None
        )

    def has_operation(self, name: str) -> bool:
        """Whether ``name`` (find, find_all, create, update, destroy) exists."""
        return getattr(self, name, None) is not None

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    async def _find(self, key: Any, include: Optional[str] = None) -> Dict[str, Any]:
        if is_missing(key):
            raise MissingKeyError(self.pk_name)

        params = (
            ParamsBuilder({"include": include})
            .resolve_one_association(self.model, include, skip=lambda: not include)
            .build()
        )

        query: Dict[str, Any] = {"where": {self.pk_name: key}}
        if "include" in params:
            query["include"] = params["include"]

        self._trace(f"find {self.entity_name}: {query}")
        row = await self.model.find_one(query)
        if row is None:
            raise EntityNotFoundError(self.entity_name, self.pk_name, key)

        return self._present(row, self.options.find.dto)

    async def _find_all(
        self,
        limit: Any = None,
        page: Any = None,
        q: Optional[str] = None,
        where: Any = None,
        include: Optional[str] = None,
    ) -> Dict[str, Any]:
        request = FindAllRequest(
            self.model,
            {"limit": limit, "page": page, "q": q, "where": where, "include": include},
            self.options.find_all,
            self.config,
        )
        query, props = await request.get_result()

        self._trace(f"find_all {self.entity_name}: {query}")
        rows = await self.model.find_all(query)

        dto = self.options.find_all.dto
        return {
            "count": props["count"],
            "pages": props["pages"],
            "rows": [self._present(row, dto) for row in rows],
        }

    async def _create(
        self,
        params: Optional[Mapping[str, Any]],
        response_include: Optional[str] = None,
        files: Optional[Mapping[str, Any]] = None,
    ) -> Dict[str, Any]:
        options = self.options.create
        files = self._check_files(files)

        required = [prop for prop in options.properties if prop not in files]
        fields = (
            ParamsBuilder(params, required).select_fields(options.properties).build()
        )
        tree = self._response_tree(response_include)

        self._trace(f"create {self.entity_name}: {sorted(fields)}")
        row = await self.model.create(fields)

        if files:
            row = await self._store_files(row, files, replace=False)

        if tree:
            row = await self._refetch(row, tree)

        return self._present(row, options.dto)

    async def _update(
        self,
        key: Any,
        params: Optional[Mapping[str, Any]],
        response_include: Optional[str] = None,
        files: Optional[Mapping[str, Any]] = None,
    ) -> Dict[str, Any]:
        if is_missing(key):
            raise MissingKeyError(self.pk_name)

        options = self.options.update
        params = params or {}
        files = self._check_files(files)

        for prop in options.required_properties or []:
            if prop not in params and prop not in files:
                raise MissingFieldError(prop)

        fields = {
            prop: params[prop]
            for prop in options.properties
            if params.get(prop) is not None
        }
        tree = self._response_tree(response_include)

        row = await self.model.find_one({"where": {self.pk_name: key}})
        if row is None:
            raise EntityNotFoundError(self.entity_name, self.pk_name, key)

        self._trace(f"update {self.entity_name} {key}: {sorted(fields)}")
        if fields:
            row = await row.update(fields) or row

        if files:
            row = await self._store_files(row, files, replace=True)

        if tree:
            row = await self._refetch(row, tree)

        return self._present(row, options.dto)

    async def _destroy(self, key: Any) -> None:
        if is_missing(key):
            raise MissingKeyError(self.pk_name)

        row = await self.model.find_one({"where": {self.pk_name: key}})
        if row is None:
            raise EntityNotFoundError(self.entity_name, self.pk_name, key)

        if self.options.upload is not None:
            await self._delete_files(row)

        self._trace(f"destroy {self.entity_name} {key}")
        await row.destroy()

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _trace(self, message: str) -> None:
        if self.options.debug:
            logger.info(message)
        else:
            logger.debug(message)

    def _present(self, row: Any, dto: Optional[List[str]]) -> Dict[str, Any]:
        data = row_to_dict(row)
        if dto:
            return self.to_dto(dto, data)
        return data

    def _response_tree(self, response_include: Any) -> List[InclusionNode]:
        if not response_include:
            return []
        params = (
            ParamsBuilder({"response_include": response_include})
            .resolve_associations(self.model, "response_include")
            .build()
        )
        return params["response_include"]

    async def _refetch(self, row: Any, tree: List[InclusionNode]) -> Any:
        key = row_to_dict(row).get(self.pk_name)
        refetched = await self.model.find_one(
            {"where": {self.pk_name: key}, "include": tree}
        )
        return refetched if refetched is not None else row

    def _check_files(self, files: Optional[Mapping[str, Any]]) -> Dict[str, Any]:
        if not files:
            return {}
        if self.options.upload is None or self.storage is None:
            raise UploadNotConfiguredError(files.keys())
        fields = self.options.upload.fields
        return {field: files[field] for field in fields if field in files}

    def _new_key(self, field: str, filename: Optional[str]) -> str:
        return (
            f"{self.entity_name.lower()}/{field}/{uuid.uuid4().hex}"
            f"{file_extension(filename)}"
        )

    async def _store_files(
        self, row: Any, files: Mapping[str, Any], replace: bool
    ) -> Any:
        """Upload files in configured field order and save their URLs.

        With ``replace``, a field that already holds a URL is overwritten
        under the same storage key.
        """
        current = row_to_dict(row)
        urls: Dict[str, str] = {}

        for field in self.options.upload.fields:
            upload = files.get(field)
            if upload is None:
                continue

            body, filename = await read_upload(upload)
            stored_url = current.get(field) if replace else None
            if stored_url:
                urls[field] = await self.storage.update_file(
                    body, self.storage.parse_key(stored_url)
                )
            else:
                urls[field] = await self.storage.upload_file(
                    body, self._new_key(field, filename)
                )
            self._trace(f"stored {self.entity_name}.{field}: {urls[field]}")

        if urls:
            row = await row.update(urls) or row
        return row

    async def _delete_files(self, row: Any) -> None:
        """Delete stored files of every upload field, one after the other.

        A failing deletion is logged and does not stop the remaining ones.
        """
        current = row_to_dict(row)
        for field in self.options.upload.fields:
            url = current.get(field)
            if not url:
                continue
            try:
                await self.storage.delete_file(self.storage.parse_key(url))
            except Exception as e:
                logger.warning(
                    f"Failed to delete stored file for {self.entity_name}.{field}: {e}"
                )

    # ------------------------------------------------------------------
    # Static helpers
    # ------------------------------------------------------------------

    @staticmethod
    def to_dto(fields: Iterable[str], obj: Any) -> Dict[str, Any]:
        """Narrow ``obj`` to ``fields``; fields missing on ``obj`` are omitted."""
        data = row_to_dict(obj)
        return {field: data[field] for field in fields if field in data}

    @staticmethod
    def build_options(options: OptionsInput) -> ServiceOptions:
        """Service options from combined controller options.

        Route-only settings (dependencies, service_only, includes) are
        dropped.
        """
        if isinstance(options, ServiceOptions):
            return options
        return ServiceOptions.model_validate(strip_route_keys(options or {}))
