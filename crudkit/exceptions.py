"""Exception hierarchy for crudkit.

All errors raised by crudkit derive from ``CrudKitError``. Errors that are
meant to reach an API caller derive from ``CrudKitAPIException`` and carry an
HTTP status code, a stable error code and a ``details`` dict naming the
offending key and the valid alternatives, so that a client can correct the
request without guessing.

Example:
    >>> from crudkit.exceptions import InvalidAssociationError
    >>> try:
    ...     raise InvalidAssociationError("Textures", valid=["Texture", "Image"])
    ... except InvalidAssociationError as e:
    ...     print(e.details["valid"])
    ['Texture', 'Image']
"""

from typing import Any, Dict, Iterable, Optional


class CrudKitError(Exception):
    """Base exception for all crudkit errors.

    Attributes:
        message: Human readable error message
        details: Structured error details
    """

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        return self.message


class ConfigurationError(CrudKitError):
    """Raised when an operation set or collaborator is misconfigured."""


class CrudKitAPIException(CrudKitError):
    """Base class for errors that are surfaced to API callers.

    Attributes:
        status_code: HTTP status code used when the error reaches a route
        error_code: Stable machine readable error identifier
    """

    status_code: int = 500
    error_code: str = "internal_error"

    def __init__(
        self,
        message: str,
        details: Optional[Dict[str, Any]] = None,
        status_code: Optional[int] = None,
    ):
        super().__init__(message, details)
        if status_code is not None:
            self.status_code = status_code

    async def to_dict(self) -> Dict[str, Any]:
        """Serialize the error for a JSON response body."""
        data: Dict[str, Any] = {
            "error_code": self.error_code,
            "message": self.message,
            "status_code": self.status_code,
        }
        if self.details:
            data["details"] = self.details
        return data


class MissingParameterError(CrudKitAPIException):
    """A required input is absent or falsy."""

    status_code = 400
    error_code = "missing_parameter"

    def __init__(self, key: str, message: Optional[str] = None):
        super().__init__(message or f"No {key} provided.", details={"key": key})
        self.key = key


class MissingKeyError(MissingParameterError):
    """The primary key of the target row was not provided."""

    error_code = "missing_key"


class MissingFieldError(MissingParameterError):
    """A field listed as required for an update was not provided."""

    error_code = "missing_field"


class InvalidAssociationError(CrudKitAPIException):
    """An association alias does not exist in the current scope."""

    status_code = 400
    error_code = "invalid_association"

    def __init__(
        self,
        alias: str,
        valid: Optional[Iterable[str]] = None,
        message: Optional[str] = None,
    ):
        valid_list = list(valid) if valid is not None else []
        if message is None:
            message = f"Invalid association: {alias}"
            if valid_list:
                message += f". Possible associations are: {', '.join(valid_list)}"
        super().__init__(message, details={"alias": alias, "valid": valid_list})
        self.alias = alias
        self.valid = valid_list


class InvalidFilterError(CrudKitAPIException):
    """A where-filter references a field outside the configured whitelist."""

    status_code = 400
    error_code = "invalid_filter"

    def __init__(self, fields: Iterable[str], allowed: Iterable[str]):
        self.fields = list(fields)
        self.allowed = list(allowed)
        super().__init__(
            f"Invalid where properties: {', '.join(self.fields)}. "
            f"Possible properties are: {', '.join(self.allowed)}",
            details={"fields": self.fields, "valid": self.allowed},
        )


class SearchNotConfiguredError(CrudKitAPIException):
    """A search query was sent but no searchable fields are configured."""

    status_code = 400
    error_code = "search_not_configured"

    def __init__(self, message: str = "No search properties are defined."):
        super().__init__(message)


class UploadNotConfiguredError(CrudKitAPIException):
    """Files were sent but the operation set has no upload configuration."""

    status_code = 400
    error_code = "upload_not_configured"

    def __init__(self, fields: Optional[Iterable[str]] = None):
        field_list = list(fields or [])
        super().__init__(
            "File uploads are not configured for this resource.",
            details={"fields": field_list},
        )


class EntityNotFoundError(CrudKitAPIException):
    """The key does not resolve to an existing row."""

    status_code = 404
    error_code = "not_found"

    def __init__(self, entity_type: str, key_name: str, key: Any):
        super().__init__(
            f"No {entity_type} found with {key_name} {key}.",
            details={"entity_type": entity_type, "key_name": key_name, "key": key},
        )
        self.entity_type = entity_type
        self.key = key


class StorageProviderError(CrudKitAPIException):
    """A file storage backend failed."""

    status_code = 500
    error_code = "storage_error"

    def __init__(
        self,
        message: str,
        provider: Optional[str] = None,
        operation: Optional[str] = None,
    ):
        super().__init__(
            message, details={"provider": provider, "operation": operation}
        )
        self.provider = provider
        self.operation = operation


class APIRequestError(CrudKitAPIException):
    """A remote crudkit endpoint answered with an error status."""

    error_code = "api_request_error"

    def __init__(self, status_code: int, message: str, body: Any = None):
        super().__init__(
            message, details={"body": body} if body is not None else None
        )
        self.status_code = status_code
        self.body = body


__all__ = [
    "CrudKitError",
    "ConfigurationError",
    "CrudKitAPIException",
    "MissingParameterError",
    "MissingKeyError",
    "MissingFieldError",
    "InvalidAssociationError",
    "InvalidFilterError",
    "SearchNotConfiguredError",
    "UploadNotConfiguredError",
    "EntityNotFoundError",
    "StorageProviderError",
    "APIRequestError",
]
