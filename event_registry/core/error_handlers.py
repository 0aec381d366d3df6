"""
Translate errors into HTTP responses.

Domain errors are mapped by kind through ``STATUS_BY_KIND``; routes never
pick status codes for failures themselves.  All error bodies share one
envelope::

    {"status": "error", "code": "...", "message": "...", "errors": [...]}
"""

import logging
import traceback

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from event_registry.core.errors import DomainError, ErrorKind, FieldError, InternalError

logger = logging.getLogger(__name__)

STATUS_BY_KIND = {
    ErrorKind.VALIDATION: status.HTTP_400_BAD_REQUEST,
    ErrorKind.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorKind.CONFLICT: status.HTTP_409_CONFLICT,
    ErrorKind.CAPACITY_EXCEEDED: status.HTTP_409_CONFLICT,
    ErrorKind.INTERNAL: status.HTTP_500_INTERNAL_SERVER_ERROR,
}

# Leading locations FastAPI adds to pydantic error paths
_LOCATION_PREFIXES = {"body", "query", "path", "header", "cookie"}


def error_body(message: str, *, code: str | None = None, errors: list[FieldError] | None = None) -> dict:
    body = {"status": "error", "message": message}
    if code:
        body["code"] = code
    if errors:
        body["errors"] = [jsonable_encoder(vars(e)) for e in errors]
    return body


def _field_errors(exc: RequestValidationError) -> list[FieldError]:
    errors = []
    for err in exc.errors():
        loc = [str(part) for part in err.get("loc", ())]
        if loc and loc[0] in _LOCATION_PREFIXES:
            loc = loc[1:]
        message = err.get("msg", "Invalid value").removeprefix("Value error, ")
        value = err.get("input")
        if isinstance(value, dict):
            # Missing fields report the whole body as input
            value = None
        errors.append(FieldError(".".join(loc) or "body", message, value))
    return errors


async def domain_error_handler(request: Request, exc: DomainError) -> JSONResponse:
    status_code = STATUS_BY_KIND[exc.kind]
    if status_code >= 500:
        logger.error("Internal error on %s %s: %s", request.method, request.url.path, exc.message)
    return JSONResponse(
        status_code=status_code,
        content=error_body(exc.message, code=exc.kind.value, errors=exc.errors),
    )


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    return JSONResponse(
        status_code=STATUS_BY_KIND[ErrorKind.VALIDATION],
        content=error_body("Validation failed", code=ErrorKind.VALIDATION.value, errors=_field_errors(exc)),
    )


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content=error_body(str(exc.detail)),
        headers=getattr(exc, "headers", None),
    )


def register_error_handlers(app: FastAPI, *, debug: bool = False) -> None:
    async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        error = InternalError()
        body = error_body(error.message, code=error.kind.value)
        if debug:
            body["error"] = str(exc)
            body["stack"] = "".join(traceback.format_exception(exc))
        return JSONResponse(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, content=body)

    app.add_exception_handler(DomainError, domain_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
