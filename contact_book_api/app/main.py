"""
Main entrypoint for the Contact Book API.

This module assembles the FastAPI application, sets up logging,
registers the error handlers and includes versioned routers.  The
``create_app`` function builds and configures the app, which is then
instantiated at module import time as ``app``, e.g.::

    uvicorn contact_book_api.app.main:app --reload

Errors are reported to clients as ``{"error": "<message>"}``; request
validation failures additionally carry a ``details`` list with one
``{"field", "message"}`` entry per invalid field and use HTTP 400.
"""

import logging
import sqlite3
from typing import Any, Dict, List

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.middleware.cors import CORSMiddleware

from .api.v1.router import router as v1_router
from .core.config import settings
from .core.db import init_db
from .core.exceptions import ContactBookError, ContactValidationError, StoreUnavailableError
from .core.logging_config import setup_logging

logger = logging.getLogger(__name__)

_LOCATION_PREFIXES = {"body", "query", "path"}


def _validation_details(errors: List[Dict[str, Any]]) -> List[Dict[str, str]]:
    details = []
    for error in errors:
        loc = [str(part) for part in error.get("loc", ()) if part not in _LOCATION_PREFIXES]
        details.append({"field": ".".join(loc), "message": error.get("msg", "")})
    return details


def register_exception_handlers(app: FastAPI) -> None:
    """Map domain and store errors onto ``{"error": ...}`` responses."""

    @app.exception_handler(ContactValidationError)
    async def contact_validation_error_handler(request: Request, exc: ContactValidationError) -> JSONResponse:
        return JSONResponse(
            status_code=exc.status_code,
            content={"error": exc.message, "details": exc.details},
        )

    @app.exception_handler(ContactBookError)
    async def contact_book_error_handler(request: Request, exc: ContactBookError) -> JSONResponse:
        return JSONResponse(status_code=exc.status_code, content={"error": exc.message})

    @app.exception_handler(RequestValidationError)
    async def request_validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"error": "Validation failed", "details": _validation_details(exc.errors())},
        )

    @app.exception_handler(sqlite3.OperationalError)
    async def store_error_handler(request: Request, exc: sqlite3.OperationalError) -> JSONResponse:
        logger.error("Store error on %s %s", request.method, request.url.path, exc_info=exc)
        unavailable = StoreUnavailableError()
        return JSONResponse(status_code=unavailable.status_code, content={"error": unavailable.message})


def create_app() -> FastAPI:
    """Create and configure a FastAPI application.

    Returns
    -------
    FastAPI
        A configured FastAPI application instance.
    """
    # Logging first so that everything below may log.
    setup_logging(
        settings.log_level,
        settings.log_file or None,
        max_bytes=settings.log_max_bytes,
        backup_count=settings.log_backup_count,
    )

    app = FastAPI(title=settings.project_name, version=settings.api_version, debug=settings.debug)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origin_list,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_exception_handlers(app)

    app.include_router(v1_router, prefix="/api/v1")

    @app.get("/", include_in_schema=False)
    async def root() -> Dict[str, str]:
        return {
            "service": settings.project_name,
            "version": settings.api_version,
            "docs": "/docs",
            "api": "/api/v1",
            "health": "/api/v1/health",
        }

    @app.on_event("startup")
    async def startup_event() -> None:
        # Creates the database file if needed and applies migrations.
        init_db()
        logger.info("%s %s started", settings.project_name, settings.api_version)

    return app


# Create the application instance at import time so that tools such as
# uvicorn can discover it without calling create_app manually.
app = create_app()
