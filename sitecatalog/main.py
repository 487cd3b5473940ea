"""SiteCatalog API main application module.

This module initializes the FastAPI application and configures
core middleware, routers, and startup/shutdown events.
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

import structlog
from fastapi import FastAPI, HTTPException, Request, status
from fastapi.responses import JSONResponse

from sitecatalog.api.categories import router as categories_router
from sitecatalog.api.health import router as health_router
from sitecatalog.api.middleware import setup_middleware
from sitecatalog.api.products import router as products_router
from sitecatalog.domain.exceptions import (
    CategoryNotFoundError,
    DomainError,
    InvalidArgumentError,
)
from sitecatalog.infrastructure.config import settings
from sitecatalog.infrastructure.database import init_db

structlog.configure(
    wrapper_class=structlog.make_filtering_bound_logger(
        logging.getLevelName(settings.log_level.upper())
    ),
)

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Handle application startup and shutdown events.

    Args:
        app: The FastAPI application instance.

    Yields:
        None after startup, cleanup happens after yield.
    """
    logger.info(
        "Starting SiteCatalog API",
        version=settings.api_version,
        storage_backend=settings.storage_backend,
        debug=settings.debug,
    )

    if settings.storage_backend == "sql":
        init_db()
        logger.info("Database tables ready")

    yield

    logger.info("Shutting down SiteCatalog API")


app = FastAPI(
    title="SiteCatalog API",
    description="Multi-site product category catalog",
    version=settings.api_version,
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
)

# Setup custom middleware (request ID, error handling)
setup_middleware(app)

# Include routers
app.include_router(health_router, tags=["Health"])
app.include_router(categories_router)
app.include_router(products_router)


# ============================================================================
# Custom Exception Handlers
# ============================================================================


@app.exception_handler(HTTPException)
async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    """Handle HTTP exceptions with consistent format."""
    request_id = getattr(request.state, "request_id", None)

    detail = exc.detail
    if isinstance(detail, dict):
        error_code = detail.get("error_code", "ERROR")
        message = detail.get("message", str(detail))
        details = detail.get("details", [])
    else:
        error_code = "ERROR"
        message = str(detail)
        details = []

    return JSONResponse(
        status_code=exc.status_code,
        content={
            "error_code": error_code,
            "message": message,
            "details": details,
            "request_id": request_id,
        },
    )


@app.exception_handler(DomainError)
async def domain_exception_handler(request: Request, exc: DomainError) -> JSONResponse:
    """Map domain errors onto the standard error format."""
    request_id = getattr(request.state, "request_id", None)

    if isinstance(exc, CategoryNotFoundError):
        status_code, error_code = status.HTTP_404_NOT_FOUND, "CATEGORY_NOT_FOUND"
    elif isinstance(exc, InvalidArgumentError):
        status_code, error_code = status.HTTP_422_UNPROCESSABLE_ENTITY, "INVALID_ARGUMENT"
    else:
        logger.error(
            "Domain error in handler",
            path=request.url.path,
            error=exc.message,
            details=exc.details,
        )
        status_code, error_code = status.HTTP_500_INTERNAL_SERVER_ERROR, "DOMAIN_ERROR"

    return JSONResponse(
        status_code=status_code,
        content={
            "error_code": error_code,
            "message": exc.message,
            "details": [],
            "request_id": request_id,
        },
    )
