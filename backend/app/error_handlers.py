"""
Exception handlers mapping domain errors to HTTP responses.

Security:
- Request IDs are logged server-side for tracing but NOT exposed in bodies
- Generic error messages for 500 errors to prevent information disclosure
"""

import structlog
from fastapi import FastAPI, HTTPException, Request, status
from fastapi.responses import JSONResponse

from core.exceptions import NotFound, StoreFailure, Unauthorized, ValidationFailed
from core.logging import get_logger

logger = get_logger("backend.errors")

SERVER_ERROR_MESSAGE = "Server Error"


def _get_request_id() -> str:
    """Current request ID from the logging context, for server-side logs only."""
    ctx = structlog.contextvars.get_contextvars()
    return ctx.get("request_id", "-")


def _response_payload(detail: str, status_code: int) -> dict:
    return {
        "detail": detail,
        "status_code": status_code,
    }


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(HTTPException)
    async def http_exception_handler(request: Request, exc: HTTPException):
        logger.warning(
            "http_exception",
            detail=exc.detail,
            status_code=exc.status_code,
            request_id=_get_request_id(),
        )
        return JSONResponse(
            status_code=exc.status_code,
            content=_response_payload(str(exc.detail), exc.status_code),
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(Unauthorized)
    async def unauthorized_handler(request: Request, exc: Unauthorized):
        logger.info("unauthorized", detail=exc.message, request_id=_get_request_id())
        return JSONResponse(
            status_code=status.HTTP_401_UNAUTHORIZED,
            content=_response_payload(exc.message, status.HTTP_401_UNAUTHORIZED),
            headers={"WWW-Authenticate": "Bearer"},
        )

    @app.exception_handler(ValidationFailed)
    async def validation_failed_handler(request: Request, exc: ValidationFailed):
        errors = exc.to_list()
        logger.info(
            "validation_failed",
            fields=[error["param"] for error in errors],
            request_id=_get_request_id(),
        )
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={
                **_response_payload(exc.message, status.HTTP_400_BAD_REQUEST),
                "errors": errors,
            },
        )

    @app.exception_handler(NotFound)
    async def not_found_handler(request: Request, exc: NotFound):
        logger.info("not_found", detail=exc.message, request_id=_get_request_id())
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content=_response_payload(exc.message, status.HTTP_400_BAD_REQUEST),
        )

    @app.exception_handler(StoreFailure)
    async def store_failure_handler(request: Request, exc: StoreFailure):
        # Details were logged where the failure was caught
        logger.error(
            "store_failure_response",
            operation=exc.operation,
            request_id=_get_request_id(),
        )
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=_response_payload(SERVER_ERROR_MESSAGE, 500),
        )

    @app.exception_handler(Exception)
    async def generic_exception_handler(request: Request, exc: Exception):
        logger.exception(
            "unhandled_exception",
            error=str(exc),
            error_type=type(exc).__name__,
            request_id=_get_request_id(),
        )
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=_response_payload(SERVER_ERROR_MESSAGE, 500),
        )
