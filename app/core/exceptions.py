"""
Error hierarchy and the single classifier that turns failures into responses.

Handlers never build error responses themselves: they raise one of the
``CatalogError`` variants (or let something unexpected escape) and
``to_error_response`` renders it.
"""
import logging
from typing import Any, Dict, List, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware


logger = logging.getLogger(__name__)


class CatalogError(Exception):
    """Base class for every failure with a stable HTTP mapping."""

    status_code: int = 500
    message: str = "Unexpected server error"

    def __init__(self, message: Optional[str] = None):
        super().__init__(message or self.message)
        if message:
            self.message = message

    def to_body(self) -> Dict[str, Any]:
        return {"code": self.status_code, "msg": self.message, "data": None}


class ValidationFailed(CatalogError):
    status_code = 400
    message = "Validation failed"

    def __init__(self, details: List[Dict[str, Any]], message: Optional[str] = None):
        super().__init__(message)
        self.details = details

    @classmethod
    def for_field(cls, field: str, message: str, type_: str = "value_error") -> "ValidationFailed":
        return cls([{"field": field, "message": message, "type": type_}])

    @classmethod
    def from_pydantic(cls, errors, skip_locations=("body", "query", "path", "form")) -> "ValidationFailed":
        details = []
        for error in errors:
            loc = [str(part) for part in error.get("loc", ()) if part not in skip_locations]
            details.append({
                "field": ".".join(loc) or "__root__",
                "message": error.get("msg", "Invalid value"),
                "type": error.get("type", "value_error"),
            })
        return cls(details)

    def to_body(self) -> Dict[str, Any]:
        body = super().to_body()
        body["details"] = self.details
        return body


class StorageUnavailable(CatalogError):
    status_code = 503
    message = "Database is unavailable. Check DATABASE_URL and run the migrations."


class RecordConflict(CatalogError):
    status_code = 409
    message = "Record already exists"


class MissingReference(CatalogError):
    status_code = 400
    message = "Referenced record is missing. Seed demo records first."


class RecordNotFound(CatalogError):
    status_code = 404
    message = "Record not found"


class InternalError(CatalogError):
    status_code = 500
    message = "Unexpected server error"


def to_error_response(request: Request, exc: Exception) -> JSONResponse:
    """Map any exception to a JSON response. Unknown errors never leak detail."""
    if isinstance(exc, RequestValidationError):
        exc = ValidationFailed.from_pydantic(exc.errors())

    if not isinstance(exc, CatalogError) or isinstance(exc, InternalError):
        logger.exception(
            "Unhandled error on %s %s", request.method, request.url.path, exc_info=exc
        )
        exc = InternalError()
    elif isinstance(exc, StorageUnavailable):
        logger.error("Storage unavailable on %s %s: %s", request.method, request.url.path, exc.__cause__ or exc)
    else:
        logger.info("%s on %s %s: %s", type(exc).__name__, request.method, request.url.path, exc.message)

    return JSONResponse(status_code=exc.status_code, content=exc.to_body())


async def catalog_error_handler(request: Request, exc: Exception) -> JSONResponse:
    return to_error_response(request, exc)


class ErrorHandlingMiddleware(BaseHTTPMiddleware):
    """Last line of defence: anything that escaped the routers becomes an opaque 500."""

    async def dispatch(self, request: Request, call_next):
        try:
            return await call_next(request)
        except Exception as e:
            return to_error_response(request, e)


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(CatalogError, catalog_error_handler)
    app.add_exception_handler(RequestValidationError, catalog_error_handler)
    app.add_middleware(ErrorHandlingMiddleware)
