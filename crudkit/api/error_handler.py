"""Error handling for crudkit routes.

Maps crudkit exceptions and request validation failures onto JSON error
responses with a stable shape::

    {"error_code": "...", "message": "...", "details": {...}, "path": "..."}
"""

import logging
from datetime import datetime, timezone
from typing import Any, Dict, List

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from crudkit.exceptions import CrudKitAPIException, CrudKitError

logger = logging.getLogger(__name__)


def _validation_details(exc: Any) -> List[Dict[str, Any]]:
    details = []
    for err in exc.errors():
        details.append(
            {
                "field": " -> ".join(str(loc) for loc in err.get("loc", [])),
                "type": err.get("type", "validation_error"),
                "message": err.get("msg", "Validation failed"),
            }
        )
    return details


class APIErrorHandler:
    """Turns exceptions raised by routes into JSON responses."""

    @staticmethod
    async def handle_exception(request: Request, exc: Exception) -> JSONResponse:
        """Build the error response for ``exc``.

        Args:
            request: FastAPI request object
            exc: Exception that occurred

        Returns:
            JSONResponse with error details
        """
        timestamp = datetime.now(timezone.utc).isoformat()

        if isinstance(exc, CrudKitAPIException):
            if exc.status_code >= 500:
                logger.error(
                    f"API Error [{exc.error_code}]: {exc.message}",
                    exc_info=True,
                    extra={
                        "error_code": exc.error_code,
                        "status_code": exc.status_code,
                        "path": request.url.path,
                        "method": request.method,
                        "details": exc.details,
                    },
                )
            else:
                # Client errors stay at DEBUG
                logger.debug(
                    f"API Error [{exc.error_code}]: {exc.message}",
                    extra={
                        "error_code": exc.error_code,
                        "status_code": exc.status_code,
                        "path": request.url.path,
                        "method": request.method,
                    },
                )

            response_data = await exc.to_dict()
            response_data["timestamp"] = timestamp
            response_data["path"] = request.url.path
            return JSONResponse(status_code=exc.status_code, content=response_data)

        if isinstance(exc, (ValidationError, RequestValidationError)):
            logger.debug(f"Validation error: {exc}")
            details = _validation_details(exc)
            message = "Validation failed"
            if details:
                message += ": " + "; ".join(
                    f"{d['field']}: {d['message']}" for d in details
                )
            return JSONResponse(
                status_code=422,
                content={
                    "error_code": "validation_error",
                    "message": message,
                    "details": details or None,
                    "timestamp": timestamp,
                    "path": request.url.path,
                },
            )

        if isinstance(exc, CrudKitError):
            logger.error(f"crudkit error: {exc.message}", exc_info=True)
            return JSONResponse(
                status_code=500,
                content={
                    "error_code": "internal_error",
                    "message": exc.message,
                    "timestamp": timestamp,
                    "path": request.url.path,
                },
            )

        logger.error(
            f"Unhandled error on {request.method} {request.url.path}: {exc}",
            exc_info=True,
        )
        return JSONResponse(
            status_code=500,
            content={
                "error_code": "internal_error",
                "message": "An unexpected error occurred",
                "timestamp": timestamp,
                "path": request.url.path,
            },
        )


def register_exception_handlers(app: FastAPI) -> None:
    """Install ``APIErrorHandler`` on ``app``."""
    handler = APIErrorHandler.handle_exception
    app.add_exception_handler(CrudKitError, handler)
    app.add_exception_handler(RequestValidationError, handler)
    app.add_exception_handler(ValidationError, handler)
    app.add_exception_handler(Exception, handler)
