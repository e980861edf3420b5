"""Option models for client operation sets."""

from typing import Any, List, Mapping, Optional

from pydantic import Field, field_validator

from crudkit.service.options import OptionsModel, delete_enabled

from .auth import AuthorizationOptions


class ClientOperationOptions(OptionsModel):
    auth: bool = False


class ClientCreateOptions(ClientOperationOptions):
    properties: List[str] = Field(default_factory=list)


class ClientUpdateOptions(ClientOperationOptions):
    properties: List[str] = Field(default_factory=list)
    required_properties: Optional[List[str]] = None


class ClientOptions(OptionsModel):
    """Options of a ``CrudAPI``.

    Absent operation keys mean the operation is not generated, exactly as for
    ``CrudService``.
    """

    authorization: Optional[AuthorizationOptions] = None
    find: Optional[ClientOperationOptions] = None
    find_all: Optional[ClientOperationOptions] = None
    create: Optional[ClientCreateOptions] = None
    update: Optional[ClientUpdateOptions] = None
    delete: Optional[ClientOperationOptions] = None

    @field_validator("find", "find_all", "create", "update", "delete", mode="before")
    @classmethod
    def _enable_with_true(cls, value: Any) -> Any:
        if value is True:
            return {}
        if value is False:
            return None
        return value


def _uses_auth(operation: Mapping[str, Any]) -> bool:
    return bool(operation.get("dependencies"))


def derive_client_options(
    options: Mapping[str, Any], authorization: Optional[Any] = None
) -> ClientOptions:
    """Client options mirroring combined controller options.

    An operation requires authorization when its route has dependencies.
    """

    def section(key: str, alias: str) -> Any:
        value = options.get(key, options.get(alias))
        if value is True:
            return {}
        return value if isinstance(value, Mapping) else None

    data: dict = {}
    if authorization is not None:
        data["authorization"] = authorization

    find = section("find", "find")
    if find is not None:
        data["find"] = {"auth": _uses_auth(find)}

    find_all = section("find_all", "findAll")
    if find_all is not None:
        data["find_all"] = {"auth": _uses_auth(find_all)}

    create = section("create", "create")
    if create is not None:
        data["create"] = {
            "auth": _uses_auth(create),
            "properties": list(create.get("properties", [])),
        }

    update = section("update", "update")
    if update is not None:
        data["update"] = {
            "auth": _uses_auth(update),
            "properties": list(update.get("properties", [])),
            "required_properties": update.get(
                "required_properties", update.get("requiredProperties")
            ),
        }

    delete = options.get("delete")
    if delete_enabled(delete):
        uses_auth = isinstance(delete, Mapping) and _uses_auth(delete)
        data["delete"] = {"auth": uses_auth}

    return ClientOptions.model_validate(data)
