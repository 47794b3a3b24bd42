"""
Global error handlers.

Client errors (HTTPException subclasses) are returned with their own
status and message. Anything else is logged with its traceback and
returned as a generic 500.
"""

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from common.utils.responses import error_response
from config.messages import ErrorMessages

logger = logging.getLogger(__name__)


def setup_error_handlers(app: FastAPI) -> None:
    """Register global exception handlers."""

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        detail = exc.detail
        if isinstance(detail, dict):
            content = error_response(
                detail.get("message", "Error"),
                code=detail.get("code"),
                details=detail.get("details"),
            )
        else:
            content = error_response(str(detail))

        if exc.status_code >= 500:
            logger.error(f"{request.method} {request.url.path} -> {exc.status_code}: {detail}")
        else:
            logger.warning(f"{request.method} {request.url.path} -> {exc.status_code}: {detail}")

        return JSONResponse(
            status_code=exc.status_code,
            content=content,
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        fields = {}
        for error in exc.errors():
            location = [str(part) for part in error.get("loc", ()) if part != "body"]
            fields[".".join(location) or "body"] = error.get("msg", ErrorMessages.PARSE)

        logger.warning(f"{request.method} {request.url.path} -> 400: invalid request {sorted(fields)}")
        return JSONResponse(
            status_code=400,
            content=error_response(ErrorMessages.MISSING_FIELDS, code="VALIDATION_ERROR", details=fields),
        )

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.error(
            f"Unhandled exception on {request.method} {request.url.path}: {exc}",
            exc_info=exc,
        )
        return JSONResponse(
            status_code=500,
            content=error_response(ErrorMessages.INTERNAL, code="INTERNAL_ERROR"),
        )
