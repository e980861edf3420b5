"""Option models for generated operation sets.

Options are a closed schema: unknown keys are rejected. Each operation key
that is absent means the operation is not generated at all. Keys may be
given in snake_case (``find_all``, ``search_properties``) or camelCase
(``findAll``, ``searchProperties``).

Example:
    >>> options = ServiceOptions.model_validate({
    ...     "find": {"dto": ["uuid", "name"]},
    ...     "findAll": {"searchProperties": ["name"], "defaultLimit": 20},
    ...     "create": {"properties": ["name"]},
    ...     "delete": True,
    ... })
    >>> options.update is None
    True
"""

from typing import Any, Dict, List, Mapping, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

OPERATIONS = ("find", "find_all", "create", "update", "delete")

# Keys only meaningful to RestController routes
ROUTE_KEYS = ("dependencies", "service_only", "serviceOnly", "includes")


def delete_enabled(value: Any) -> bool:
    """Whether a ``delete`` option value enables the delete operation.

    ``True`` and any mapping, including an empty one, enable it.
    """
    return isinstance(value, Mapping) or bool(value)


class OptionsModel(BaseModel):
    """Base for all option models: closed, immutable, camelCase aware."""

    model_config = ConfigDict(
        extra="forbid",
        frozen=True,
        populate_by_name=True,
        alias_generator=to_camel,
        arbitrary_types_allowed=True,
    )


class FindOptions(OptionsModel):
    dto: Optional[List[str]] = None


class FindAllOptions(OptionsModel):
    search_properties: Optional[List[str]] = None
    where_properties: Optional[List[str]] = None
    default_limit: Optional[int] = Field(default=None, gt=0)
    default_page: Optional[int] = Field(default=None, gt=0)
    dto: Optional[List[str]] = None


class CreateOptions(OptionsModel):
    properties: List[str] = Field(default_factory=list)
    dto: Optional[List[str]] = None


class UpdateOptions(OptionsModel):
    properties: List[str] = Field(default_factory=list)
    required_properties: Optional[List[str]] = None
    dto: Optional[List[str]] = None


class S3Config(OptionsModel):
    """S3 settings; unset values fall back to ``CrudKitConfig``."""

    bucket_name: Optional[str] = None
    cdn_url: Optional[str] = None
    region_name: Optional[str] = None
    access_key_id: Optional[str] = None
    secret_access_key: Optional[str] = None
    endpoint_url: Optional[str] = None
    prefix: Optional[str] = None
    acl: Optional[str] = None


class UploadOptions(OptionsModel):
    """File upload settings.

    Attributes:
        fields: Record fields that hold uploaded file URLs
        custom_service: Object implementing the ``StorageService`` methods
        s3: S3 settings used when no custom service is given
    """

    fields: List[str]
    custom_service: Optional[Any] = None
    s3: Optional[S3Config] = None

    @model_validator(mode="after")
    def _require_backend(self) -> "UploadOptions":
        if self.custom_service is None and self.s3 is None:
            raise ValueError("upload requires either custom_service or s3")
        return self


class ServiceOptions(OptionsModel):
    """Options of a ``CrudService``."""

    find: Optional[FindOptions] = None
    find_all: Optional[FindAllOptions] = None
    create: Optional[CreateOptions] = None
    update: Optional[UpdateOptions] = None
    delete: bool = False
    upload: Optional[UploadOptions] = None
    debug: bool = False

    @field_validator("find", "find_all", "create", "update", mode="before")
    @classmethod
    def _enable_with_true(cls, value: Any) -> Any:
        # ``find: True`` enables the operation with default settings
        if value is True:
            return {}
        if value is False:
            return None
        return value

    @field_validator("delete", mode="before")
    @classmethod
    def _delete_flag(cls, value: Any) -> Any:
        return delete_enabled(value)

    def has_operation(self, name: str) -> bool:
        """Whether the operation ``name`` is configured."""
        if name in ("delete", "destroy"):
            return self.delete
        return getattr(self, name, None) is not None


def strip_route_keys(options: Mapping[str, Any]) -> Dict[str, Any]:
    """Drop route-only settings from combined controller options."""
    result: Dict[str, Any] = {}
    for key, value in options.items():
        if isinstance(value, Mapping):
            value = {k: v for k, v in value.items() if k not in ROUTE_KEYS}
        result[key] = value
    return result


OptionsInput = Union[ServiceOptions, Mapping[str, Any], None]


def load_service_options(options: OptionsInput) -> ServiceOptions:
    """Validate service options given as a model or a mapping."""
    if isinstance(options, ServiceOptions):
        return options
    return ServiceOptions.model_validate(dict(options or {}))
