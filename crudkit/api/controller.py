"""REST routes for a generated operation set.

``RestController`` builds a ``CrudService`` from combined options and mounts
one FastAPI route per configured operation:

    GET    {endpoint}/{pk}                     find
    GET    {endpoint}/{pk}/{include_endpoint}  find with an association
    GET    {endpoint}                          find_all
    POST   {endpoint}                          create
    PUT    {endpoint}                          update
    DELETE {endpoint}                          destroy

Besides the service options, each operation section may carry route-only
keys: ``dependencies`` (FastAPI dependencies run before the handler),
``service_only`` (generate the service method but no route) and
``includes`` (association routes for find, allowed aliases for find_all;
without it find_all rejects every ``include``).

Example:
    >>> controller = RestController("/materials", "uuid", Material, {
    ...     "find": {"includes": [{"endpoint": "texture", "model": "Texture"}]},
    ...     "findAll": {"searchProperties": ["name"], "includes": ["Texture"]},
    ...     "create": {"properties": ["name"], "dependencies": [require_admin]},
    ...     "delete": {"dependencies": [require_admin]},
    ... })
    >>> app = FastAPI()
    >>> controller.install(app)
"""

import json
import logging
from typing import Any, Callable, Dict, List, Mapping, Optional, Tuple

from fastapi import APIRouter, Depends, FastAPI, Request, Response
from starlette.datastructures import UploadFile

from crudkit.client import CrudAPI
from crudkit.config import CrudKitConfig
from crudkit.core.paths import GROUP_SEPARATOR, SEGMENT_SEPARATOR
from crudkit.exceptions import ConfigurationError, InvalidAssociationError
from crudkit.service import CrudService
from crudkit.service.options import delete_enabled

from .error_handler import register_exception_handlers

logger = logging.getLogger(__name__)

RESPONSE_INCLUDE_KEYS = ("responseInclude", "response_include")


def _section(options: Mapping[str, Any], key: str, alias: str) -> Optional[Dict]:
    value = options.get(key, options.get(alias))
    if value is True:
        return {}
    return dict(value) if isinstance(value, Mapping) else None


def _route_enabled(section: Optional[Mapping[str, Any]]) -> bool:
    if section is None:
        return False
    return not (section.get("service_only") or section.get("serviceOnly"))


def _top_level_aliases(include: str) -> List[str]:
    return [
        segment.partition(GROUP_SEPARATOR)[0]
        for segment in include.split(SEGMENT_SEPARATOR)
    ]


async def read_request_body(request: Request) -> Tuple[Dict[str, Any], Dict[str, Any]]:
    """Split a request body into ``(params, files)``.

    JSON bodies yield no files. Multipart and urlencoded forms yield their
    text fields as params and their file parts as files.
    """
    content_type = request.headers.get("content-type", "")
    if content_type.startswith(
        ("multipart/form-data", "application/x-www-form-urlencoded")
    ):
        form = await request.form()
        params: Dict[str, Any] = {}
        files: Dict[str, Any] = {}
        for key, value in form.multi_items():
            if isinstance(value, UploadFile):
                files[key] = value
            else:
                params[key] = value
        return params, files

    raw = await request.body()
    if not raw:
        return {}, {}
    data = json.loads(raw)
    return (data if isinstance(data, dict) else {}), {}


class RestController:
    """Routes and service for one resource.

    Args:
        endpoint: Resource path, e.g. ``/materials``
        pk_name: Primary key field name
        model: Model implementing the ``EntityModel`` contract
        options: Combined service and route options
        storage: Storage backend passed on to the service
        config: Process configuration passed on to the service

    Attributes:
        router: FastAPI router holding the generated routes
        service: The generated ``CrudService``
    """

    def __init__(
        self,
        endpoint: str,
        pk_name: str,
        model: Any,
        options: Optional[Mapping[str, Any]] = None,
        storage: Any = None,
        config: Optional[CrudKitConfig] = None,
    ):
        if not endpoint:
            raise ConfigurationError("No endpoint provided.")
        if not pk_name:
            raise ConfigurationError("No primary key name provided.")
        if model is None:
            raise ConfigurationError("No model provided.")
        if options is None:
            raise ConfigurationError("No options provided.")

        self.endpoint = endpoint
        self.pk_name = pk_name
        self.model = model
        self.options: Dict[str, Any] = dict(options)
        self.service = CrudService(
            model,
            pk_name,
            CrudService.build_options(self.options),
            storage=storage,
            config=config,
        )
        self.router = APIRouter()
        self._mount_routes()

    def add_route(
        self,
        path: str,
        endpoint: Callable[..., Any],
        methods: List[str],
        section: Mapping[str, Any],
        **kwargs: Any,
    ) -> None:
        """Add a route guarded by the section's dependencies."""
        dependencies = [Depends(dep) for dep in section.get("dependencies") or []]
        self.router.add_api_route(
            path=path,
            endpoint=endpoint,
            methods=methods,
            dependencies=dependencies,
            **kwargs,
        )

    def _mount_routes(self) -> None:
        find = _section(self.options, "find", "find")
        if _route_enabled(find):
            self._mount_find(find)

        find_all = _section(self.options, "find_all", "findAll")
        if _route_enabled(find_all):
            self._mount_find_all(find_all)

        create = _section(self.options, "create", "create")
        if _route_enabled(create):
            self._mount_create(create)

        update = _section(self.options, "update", "update")
        if _route_enabled(update):
            self._mount_update(update)

        delete = self.options.get("delete")
        if delete_enabled(delete):
            self._mount_delete(delete if isinstance(delete, Mapping) else {})

        logger.debug(
            f"Mounted {len(self.router.routes)} routes for {self.endpoint}"
        )

    def _mount_find(self, section: Mapping[str, Any]) -> None:
        service = self.service
        pk_name = self.pk_name

        async def find_entity(request: Request) -> Any:
            return await service.find(request.path_params[pk_name])

        self.add_route(
            f"{self.endpoint}/{{{pk_name}}}", find_entity, ["GET"], section
        )

        for include in section.get("includes") or []:
            include_endpoint = include["endpoint"]
            include_model = include["model"]

            def make_handler(alias: str) -> Callable[..., Any]:
                async def find_with_association(request: Request) -> Any:
                    return await service.find(
                        request.path_params[pk_name], include=alias
                    )

                return find_with_association

            self.add_route(
                f"{self.endpoint}/{{{pk_name}}}/{include_endpoint}",
                make_handler(include_model),
                ["GET"],
                section,
            )

    def _mount_find_all(self, section: Mapping[str, Any]) -> None:
        service = self.service
        allowed = section.get("includes")

        async def find_all_entities(request: Request) -> Any:
            query = request.query_params
            include = query.get("include")
            if include:
                for alias in _top_level_aliases(include):
                    if allowed is None or alias not in allowed:
                        raise InvalidAssociationError(
                            alias,
                            valid=allowed,
                            message=f"No allowed association found with name {alias}.",
                        )

            return await service.find_all(
                limit=query.get("limit"),
                page=query.get("page"),
                q=query.get("q"),
                where=query.get("where"),
                include=include,
            )

        self.add_route(self.endpoint, find_all_entities, ["GET"], section)

    def _mount_create(self, section: Mapping[str, Any]) -> None:
        service = self.service

        async def create_entity(request: Request) -> Any:
            params, files = await read_request_body(request)
            response_include = _pop_response_include(params)
            return await service.create(
                params, response_include=response_include, files=files
            )

        self.add_route(self.endpoint, create_entity, ["POST"], section)

    def _mount_update(self, section: Mapping[str, Any]) -> None:
        service = self.service
        pk_name = self.pk_name

        async def update_entity(request: Request) -> Any:
            params, files = await read_request_body(request)
            response_include = _pop_response_include(params)
            return await service.update(
                params.get(pk_name),
                params,
                response_include=response_include,
                files=files,
            )

        self.add_route(self.endpoint, update_entity, ["PUT"], section)

    def _mount_delete(self, section: Mapping[str, Any]) -> None:
        if section.get("service_only") or section.get("serviceOnly"):
            return
        service = self.service
        pk_name = self.pk_name

        async def delete_entity(request: Request) -> Response:
            params, _ = await read_request_body(request)
            await service.destroy(params.get(pk_name))
            return Response(status_code=204)

        self.add_route(self.endpoint, delete_entity, ["DELETE"], section)

    def generate_crud_api(
        self, server_url: str, authorization: Optional[Any] = None
    ) -> CrudAPI:
        """Client operation set matching the mounted routes.

        Args:
            server_url: Base URL the routes are served from
            authorization: Credential source for operations with dependencies
        """
        options = CrudAPI.build_options(self.options, authorization)
        return CrudAPI(server_url, self.endpoint, self.pk_name, options)

    def install(self, app: FastAPI) -> None:
        """Include the router in ``app`` and register error handlers."""
        app.include_router(self.router)
        register_exception_handlers(app)


def _pop_response_include(params: Dict[str, Any]) -> Optional[str]:
    value = None
    for key in RESPONSE_INCLUDE_KEYS:
        if key in params:
            value = params.pop(key) or value
    return value
