"""FastAPI routes for generated operation sets."""

from .controller import RestController, read_request_body
from .error_handler import APIErrorHandler, register_exception_handlers

__all__ = [
    "APIErrorHandler",
    "RestController",
    "read_request_body",
    "register_exception_handlers",
]
