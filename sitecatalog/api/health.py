"""Liveness and readiness endpoints.

``/health`` answers without touching storage and reports the state of
the process-wide category cache. ``/ready`` checks the configured record
stores and answers 503 while they cannot be read.
"""

import structlog
from fastapi import APIRouter, status
from fastapi.responses import JSONResponse
from pydantic import BaseModel
from sqlalchemy import text

from sitecatalog.infrastructure.cache import get_cache_manager
from sitecatalog.infrastructure.config import settings
from sitecatalog.infrastructure.database import session_scope
from sitecatalog.infrastructure.repositories import get_memory_stores

logger = structlog.get_logger()

router = APIRouter()


class CacheStats(BaseModel):
    """Category cache occupancy and hit counters."""

    entries: int
    max_entries: int
    hits: int
    misses: int


class HealthResponse(BaseModel):
    """Liveness response."""

    status: str
    version: str
    cache: CacheStats


class ReadinessResponse(BaseModel):
    """Readiness response for the configured storage backend."""

    status: str
    storage_backend: str
    category_count: int | None = None


@router.get("/health", response_model=HealthResponse)
async def health_check() -> HealthResponse:
    """Report liveness and cache statistics."""
    cache = get_cache_manager()
    return HealthResponse(
        status="healthy",
        version=settings.api_version,
        cache=CacheStats(
            entries=len(cache),
            max_entries=cache.maxsize,
            hits=cache.hits,
            misses=cache.misses,
        ),
    )


@router.get(
    "/ready",
    response_model=ReadinessResponse,
    responses={503: {"model": ReadinessResponse}},
)
def readiness_check() -> ReadinessResponse | JSONResponse:
    """Check that the record stores can be read.

    The in-memory backend is always ready and reports its category count;
    the SQL backend must answer a trivial query.
    """
    if settings.storage_backend != "sql":
        return ReadinessResponse(
            status="ready",
            storage_backend=settings.storage_backend,
            category_count=len(get_memory_stores().categories.all()),
        )

    try:
        with session_scope() as session:
            session.execute(text("SELECT 1"))
    except Exception as e:
        logger.warning("Record stores not ready", storage_backend="sql", error=str(e))
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content=ReadinessResponse(status="unavailable", storage_backend="sql").model_dump(),
        )

    return ReadinessResponse(status="ready", storage_backend="sql")
