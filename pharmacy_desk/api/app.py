"""
FastAPI application for the pharmacy back office.

The API provides endpoints for:
- Admin login and session checks
- Refill and consultation requests (list, submit, status updates)
- Backups of the document store to Google Sheets
- Test emails through the configured provider
- File uploads, served back under /uploads
- Health checks

Settings are loaded once in ``create_app`` and reach every route through
the dependency container stored on ``app.state``.
"""

import logging
import os
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles

from pharmacy_desk.api.dependencies import DependencyContainer
from pharmacy_desk.api.routers import (
    auth_router,
    backup_router,
    email_router,
    requests_router,
    system_router,
    uploads_router,
)
from pharmacy_desk.api.routers.system import API_VERSION
from pharmacy_desk.config import Settings, setup_logging

logger = logging.getLogger(__name__)


async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Malformed bodies are a client error in the API's own error shape."""
    logger.info(
        "Request validation failed",
        extra={"path": request.url.path, "errors": len(exc.errors())},
    )
    return JSONResponse(
        status_code=400,
        content={
            "success": False,
            "error": "Validation error",
            "details": jsonable_encoder(exc.errors()),
        },
    )


async def unhandled_exception_handler(
    request: Request, exc: Exception
) -> JSONResponse:
    logger.error(
        "Unhandled error",
        exc_info=exc,
        extra={"path": request.url.path, "error_type": type(exc).__name__},
    )
    return JSONResponse(
        status_code=500,
        content={"success": False, "error": "Internal server error"},
    )


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """
    Build the application.

    Args:
        settings: Loaded settings; read from the environment when omitted
    """
    if settings is None:
        settings = Settings.from_env()
    setup_logging(settings)

    app = FastAPI(
        title="Pharmacy Desk API",
        description="Back office API for pharmacy requests and operations",
        version=API_VERSION,
        docs_url="/docs",
        redoc_url="/redoc",
    )
    app.state.container = DependencyContainer(settings)

    app.add_exception_handler(
        RequestValidationError,
        validation_exception_handler,  # type: ignore[arg-type]
    )
    app.add_exception_handler(Exception, unhandled_exception_handler)

    app.include_router(system_router, tags=["System"])
    app.include_router(auth_router)
    app.include_router(requests_router)
    app.include_router(backup_router)
    app.include_router(email_router)
    app.include_router(uploads_router)

    os.makedirs(settings.uploads_dir, exist_ok=True)
    app.mount(
        settings.uploads_url_prefix,
        StaticFiles(directory=settings.uploads_dir),
        name="uploads",
    )

    logger.info(
        "Application created",
        extra={
            "app_env": settings.app_env,
            "store_backend": settings.store_backend,
            "uploads_dir": settings.uploads_dir,
        },
    )
    return app


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "pharmacy_desk.api.app:create_app",
        factory=True,
        host="0.0.0.0",
        port=8000,
        reload=True,
        log_level="info",
    )
