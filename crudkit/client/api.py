"""HTTP client mirror of ``CrudService``.

``CrudAPI`` calls the routes mounted by ``RestController`` with the same
contract as the server-side operations: the same presence rules, the same
association path and where-filter encodings.

Example:
    >>> api = CrudAPI("http://localhost:8000", "/materials", "uuid", {
    ...     "authorization": {"storage": "memory", "token": "YOUR_TOKEN"},
    ...     "find": {"auth": True},
    ...     "findAll": {},
    ... })
    >>> material = await api.find("a1b2", include="Texture")
    >>> page = await api.find_all(limit=10, where={"name": "Foam"})
    >>> api.create is None
    True
"""

import json
import logging
from typing import Any, Awaitable, Callable, Dict, Mapping, Optional, Union

import httpx

from crudkit.core.params import is_missing
from crudkit.exceptions import APIRequestError, MissingKeyError, MissingParameterError
from crudkit.storage.files import read_upload

from .auth import AuthorizationOptions
from .options import ClientOptions, derive_client_options
from .utils import get_include_string, get_where_string

logger = logging.getLogger(__name__)

Operation = Callable[..., Awaitable[Any]]
RESPONSE_INCLUDE_KEYS = ("responseInclude", "response_include")


class CrudAPI:
    """Client operation set for one REST resource.

    Args:
        server_url: Base URL of the server
        endpoint: Resource path, e.g. ``/materials``
        pk_name: Primary key field name
        options: ``ClientOptions`` or an equivalent mapping
        transport: Optional httpx transport (tests, custom networking)
        timeout: Request timeout in seconds
    """

    def __init__(
        self,
        server_url: str,
        endpoint: str,
        pk_name: str,
        options: Union[ClientOptions, Mapping[str, Any], None] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        timeout: Optional[float] = 30.0,
    ):
        self._server_url = server_url
        self._endpoint = endpoint
        self.pk_name = pk_name
        self.options = (
            options
            if isinstance(options, ClientOptions)
            else ClientOptions.model_validate(dict(options or {}))
        )
        self._authorization: Optional[AuthorizationOptions] = self.options.authorization
        self._transport = transport
        self._timeout = timeout

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
            self._destroy if self.options.delete is not None else None
        )

    # ------------------------------------------------------------------
    # Configuration
    # ------------------------------------------------------------------

    @property
    def url(self) -> str:
        return f"{self._server_url.rstrip('/')}{self._endpoint}"

    def set_server_url(self, server_url: str) -> None:
        self._server_url = server_url

    def set_endpoint(self, endpoint: str) -> None:
        self._endpoint = endpoint

    def set_authorization(
        self, authorization: Union[AuthorizationOptions, Mapping[str, Any], None]
    ) -> None:
        """Replace the credential source of this client."""
        if authorization is None or isinstance(authorization, AuthorizationOptions):
            self._authorization = authorization
        else:
            self._authorization = AuthorizationOptions.model_validate(
                dict(authorization)
            )

    def has_operation(self, name: str) -> bool:
        return getattr(self, name, None) is not None

    # ------------------------------------------------------------------
    # Serialization
    # ------------------------------------------------------------------

    def get_constructor_options(self) -> Dict[str, Any]:
        """Constructor arguments of this client as plain data."""
        options = self.options.model_dump(by_alias=True, exclude_none=True)
        if self._authorization is not None:
            options["authorization"] = self._authorization.model_dump(exclude_none=True)
        else:
            options.pop("authorization", None)
        return {
            "server_url": self._server_url,
            "endpoint": self._endpoint,
            "pk_name": self.pk_name,
            "options": options,
        }

    def to_json(self) -> str:
        return json.dumps(self.get_constructor_options())

    @classmethod
    def from_json(cls, data: Union[str, Mapping[str, Any]], **kwargs: Any) -> "CrudAPI":
        """Rebuild a client from ``to_json`` output.

        Args:
            data: JSON string or already decoded dict
            **kwargs: Extra constructor arguments (transport, timeout)
        """
        parsed = json.loads(data) if isinstance(data, str) else dict(data)
        return cls(
            parsed["server_url"],
            parsed["endpoint"],
            parsed["pk_name"],
            parsed.get("options") or {},
            **kwargs,
        )

    @staticmethod
    def build_options(
        options: Mapping[str, Any], authorization: Optional[Any] = None
    ) -> ClientOptions:
        """Client options from combined controller options."""
        return derive_client_options(options, authorization)

    # ------------------------------------------------------------------
    # Requests
    # ------------------------------------------------------------------

    def _headers(self, use_auth: bool) -> Dict[str, str]:
        headers: Dict[str, str] = {}
        if use_auth and self._authorization is not None:
            token = self._authorization.get_token()
            if token:
                headers["Authorization"] = f"Bearer {token}"
        return headers

    async def _request(
        self, method: str, url: str, use_auth: bool, **kwargs: Any
    ) -> httpx.Response:
        headers = self._headers(use_auth)
        async with httpx.AsyncClient(
            transport=self._transport, timeout=self._timeout
        ) as client:
            response = await client.request(method, url, headers=headers, **kwargs)

        if response.is_error:
            try:
                body = response.json()
            except ValueError:
                body = response.text
            message = body.get("message") if isinstance(body, dict) else None
            logger.debug(f"{method} {url} failed with {response.status_code}")
            raise APIRequestError(
                response.status_code,
                message or f"{method} {url} returned {response.status_code}",
                body,
            )
        return response

    async def _body_kwargs(
        self, params: Mapping[str, Any], files: Optional[Mapping[str, Any]]
    ) -> Dict[str, Any]:
        payload = dict(params)
        for key in RESPONSE_INCLUDE_KEYS:
            if payload.get(key):
                payload[key] = get_include_string(payload[key])

        if not files:
            return {"json": payload}

        multipart = {}
        for field, upload in files.items():
            content, filename = await read_upload(upload)
            multipart[field] = (filename or field, content)
        data = {
            key: value if isinstance(value, str) else json.dumps(value)
            for key, value in payload.items()
            if value is not None
        }
        return {"data": data, "files": multipart}

    async def _find(
        self,
        key: Any,
        include: Optional[str] = None,
        custom_params: Optional[Mapping[str, Any]] = None,
    ) -> Any:
        if is_missing(key):
            raise MissingKeyError(self.pk_name)

        url = f"{self.url}/{key}"
        if include:
            url += f"/{include}"

        response = await self._request(
            "GET", url, self.options.find.auth, params=custom_params or None
        )
        return response.json()

    async def _find_all(
        self,
        limit: Any = None,
        page: Any = None,
        q: Optional[str] = None,
        where: Optional[Mapping[str, Any]] = None,
        include: Any = None,
        custom_params: Optional[Mapping[str, Any]] = None,
    ) -> Any:
        if is_missing(limit):
            raise MissingParameterError("limit", "No limit parameter provided.")

        params: Dict[str, Any] = {"limit": limit}
        if where:
            params["where"] = get_where_string(where)
        if include:
            params["include"] = get_include_string(include)
        if page:
            params["page"] = page
        if q:
            params["q"] = q
        params.update(custom_params or {})

        response = await self._request(
            "GET", self.url, self.options.find_all.auth, params=params
        )
        return response.json()

    async def _create(
        self, params: Mapping[str, Any], files: Optional[Mapping[str, Any]] = None
    ) -> Any:
        params = params or {}
        files = files or {}
        for key in self.options.create.properties:
            if key not in files and is_missing(params.get(key)):
                raise MissingParameterError(key)

        body = await self._body_kwargs(params, files)
        response = await self._request(
            "POST", self.url, self.options.create.auth, **body
        )
        return response.json()

    async def _update(
        self, params: Mapping[str, Any], files: Optional[Mapping[str, Any]] = None
    ) -> Any:
        params = params or {}
        files = files or {}
        for key in self.options.update.required_properties or []:
            if key not in files and is_missing(params.get(key)):
                raise MissingParameterError(key)

        if is_missing(params.get(self.pk_name)):
            raise MissingKeyError(self.pk_name)

        body = await self._body_kwargs(params, files)
        response = await self._request(
            "PUT", self.url, self.options.update.auth, **body
        )
        return response.json()

    async def _destroy(self, key: Any) -> bool:
        if is_missing(key):
            raise MissingKeyError(self.pk_name)

        response = await self._request(
            "DELETE", self.url, self.options.delete.auth, json={self.pk_name: key}
        )
        return response.status_code == 204
