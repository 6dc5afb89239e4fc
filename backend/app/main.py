"""
DevConnector API entry point.

Run with ``uvicorn backend.app.main:app``. Every endpoint is served under
``settings.api_prefix`` except the health probes.
"""

import time
from typing import Callable

from fastapi import FastAPI, Request, Response, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from core.config import get_settings, running_in_production
from core.db import db
from core.logging import RequestLoggingMiddleware, configure_logging, get_logger

from .error_handlers import register_exception_handlers
from .middleware.request_id import RequestIDMiddleware
from .routers import auth as auth_router
from .routers import profile as profile_router

settings = get_settings()
configure_logging(level="DEBUG" if settings.debug else "INFO")
logger = get_logger("api")


class RequestSizeLimitMiddleware(BaseHTTPMiddleware):
    """Reject bodies whose declared Content-Length exceeds the limit."""

    def __init__(self, app, max_size_mb: int = 10):
        super().__init__(app)
        self.max_size_mb = max_size_mb
        self.max_size = max_size_mb * 1024 * 1024

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        declared = request.headers.get("content-length", "")
        if declared.isdigit() and int(declared) > self.max_size:
            logger.warning("request_too_large", content_length=int(declared), path=request.url.path)
            code = status.HTTP_413_REQUEST_ENTITY_TOO_LARGE
            return JSONResponse(
                status_code=code,
                content={"detail": f"Maximum request size is {self.max_size_mb}MB", "status_code": code},
            )
        return await call_next(request)


def wait_for_database(max_retries: int = 3, retry_delay: float = 2.0) -> None:
    """
    Block until the database answers ``SELECT 1``.

    Raises:
        RuntimeError: If it still fails after ``max_retries`` attempts
    """
    for attempt in range(1, max_retries + 1):
        result = db.health_check()
        if result["healthy"]:
            logger.info("database_health_check_passed", attempt=attempt, latency_ms=result["latency_ms"])
            return
        logger.warning(
            "database_health_check_failed",
            attempt=attempt,
            max_retries=max_retries,
            error=result["error"],
        )
        if attempt < max_retries:
            time.sleep(retry_delay * attempt)

    raise RuntimeError(
        f"Database unreachable after {max_retries} attempts. Check DATABASE_URL."
    )


def _check_config() -> None:
    errors, advisories = settings.validate_production_config()
    for message in advisories:
        logger.warning("config_warning", message=message)
    if not running_in_production():
        return
    for message in errors:
        logger.error("config_error", message=message)
    if errors:
        raise RuntimeError("Invalid production configuration")


def _add_middleware(app: FastAPI) -> None:
    app.add_middleware(RequestSizeLimitMiddleware, max_size_mb=settings.max_request_size_mb)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=[
            "Authorization",
            "Content-Type",
            "Accept",
            "Origin",
            "X-Auth-Token",
            "X-Request-ID",
        ],
    )
    app.add_middleware(GZipMiddleware, minimum_size=500)
    # Outermost last: the request id is bound before the logging middleware reads it
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)


def _add_health_routes(app: FastAPI) -> None:
    @app.get("/health", tags=["health"])
    def health_check():
        """Liveness probe."""
        return {"status": "ok"}

    @app.get("/health/ready", tags=["health"])
    def readiness_check():
        """Readiness probe: 503 while the database does not answer."""
        if not db.health_check()["healthy"]:
            return JSONResponse(
                status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
                content={"status": "not_ready", "checks": {"database": False}},
            )
        return {"status": "ready", "checks": {"database": True}}


def create_app() -> FastAPI:
    app = FastAPI(title=settings.app_name, debug=settings.debug)

    _add_middleware(app)
    register_exception_handlers(app)

    @app.on_event("startup")
    async def startup_event():
        logger.info("app_startup", app_name=settings.app_name)
        _check_config()

        db.initialize(settings.database_url)
        logger.info("database_initialized", sqlite=settings.is_sqlite)
        if settings.auto_create_tables:
            db.create_all_tables()
            logger.info("database_tables_created")

        wait_for_database()

    @app.on_event("shutdown")
    async def shutdown_event():
        logger.info("app_shutdown")

    _add_health_routes(app)
    app.include_router(auth_router.router, prefix=settings.api_prefix)
    app.include_router(profile_router.router, prefix=settings.api_prefix)

    return app


app = create_app()
