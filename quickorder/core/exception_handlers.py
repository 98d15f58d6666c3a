"""Exception handlers for the FastAPI app.

Every error body has the same shape: ``{"error": CODE, "message": ...}``
plus ``details`` when the failure carries structured context. Storefront
exceptions map to a status by their error code.
"""

import logging
from typing import Any

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from quickorder.core.config import get_settings
from quickorder.domain.exceptions import QuickOrderException

logger = logging.getLogger(__name__)

ERROR_CODE_STATUS: dict[str, int] = {
    "VALIDATION_ERROR": 400,
    "AUTHENTICATION_ERROR": 401,
    "LOGIN_REQUIRED": 401,
    "PERMISSION_DENIED": 403,
    "RESOURCE_NOT_FOUND": 404,
    "SESSION_NOT_FOUND": 404,
    "INVALID_TRANSITION": 409,
    "STORE_ALREADY_EXISTS": 409,
    "STORE_CLOSED": 409,
    "BACKEND_UNAVAILABLE": 503,
}


def _request_id(request: Request) -> str | None:
    return getattr(request.state, "request_id", None)


def jsonable_errors(exc: RequestValidationError) -> list[dict[str, Any]]:
    """Pydantic errors without the non-serializable ctx objects."""
    return [
        {k: v for k, v in err.items() if k in ("type", "loc", "msg")}
        for err in exc.errors()
    ]


def _quickorder_exception_handler(request: Request, exc: QuickOrderException) -> JSONResponse:
    status = ERROR_CODE_STATUS.get(exc.error_code, 400)
    if status >= 500:
        logger.error(
            "%s on %s [%s]: %s %s",
            exc.error_code,
            request.url.path,
            _request_id(request),
            exc.message,
            exc.details,
        )
    else:
        logger.debug("%s on %s: %s", exc.error_code, request.url.path, exc.message)
    return JSONResponse(status_code=status, content=exc.to_dict())


def _validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    return JSONResponse(
        status_code=422,
        content={
            "error": "VALIDATION_ERROR",
            "message": "Request validation failed",
            "details": jsonable_errors(exc),
        },
    )


def _http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": "HTTP_ERROR", "message": exc.detail},
        headers=getattr(exc, "headers", None),
    )


def _generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """500; the exception text is exposed only in debug mode."""
    logger.exception("Unhandled error on %s [%s]", request.url.path, _request_id(request))
    message = str(exc) if get_settings().debug else "Internal server error"
    return JSONResponse(status_code=500, content={"error": "INTERNAL_ERROR", "message": message})


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(QuickOrderException, _quickorder_exception_handler)
    app.add_exception_handler(RequestValidationError, _validation_exception_handler)
    app.add_exception_handler(StarletteHTTPException, _http_exception_handler)
    app.add_exception_handler(Exception, _generic_exception_handler)
