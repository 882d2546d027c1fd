"""Centralized mapping from failures to HTTP responses."""

from __future__ import annotations

import structlog
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from src.core.errors import FieldError, ServiceError, ValidationFailed

logger = structlog.get_logger(__name__)


def validation_response(errors: list[FieldError]) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"status": "error", "errors": [error.as_dict() for error in errors]},
    )


def _request_field(location: tuple[str | int, ...]) -> str:
    # Drop the "body"/"query"/"path" prefix FastAPI adds to every location.
    parts = [str(part) for part in location[1:]] or [str(part) for part in location]
    return ".".join(parts)


def register_error_handlers(app: FastAPI) -> None:
    """Register the global error handlers on the FastAPI app."""

    @app.exception_handler(ValidationFailed)
    async def validation_failed_handler(request: Request, exc: ValidationFailed) -> JSONResponse:
        logger.info("request_validation_failed", path=request.url.path, fields=exc.fields)
        return validation_response(exc.errors)

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        errors = [
            FieldError(field=_request_field(tuple(error["loc"])), message=error["msg"])
            for error in exc.errors()
        ]
        logger.info(
            "request_validation_failed",
            path=request.url.path,
            fields=[error.field for error in errors],
        )
        return validation_response(errors)

    @app.exception_handler(ServiceError)
    async def service_error_handler(request: Request, exc: ServiceError) -> JSONResponse:
        log = logger.error if exc.status_code >= 500 else logger.info
        log(
            "request_failed",
            path=request.url.path,
            status_code=exc.status_code,
            error=type(exc).__name__,
            message=exc.message,
        )
        return JSONResponse(status_code=exc.status_code, content={"message": exc.message})

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.error("request_unhandled_error", path=request.url.path, exc_info=exc)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"message": "Something went wrong"},
        )
