"""Shared FastAPI dependencies.

Builds the request-scoped pieces of the category service: the actor's
roles from ``X-Role-Ids`` (comma-separated role IDs), the site from
``X-Site-Id`` and the record stores for the configured backend.
"""

from collections.abc import Generator
from typing import Annotated

from fastapi import Depends, Header, HTTPException, Request, status

from sitecatalog.application.category_service import CategoryService, get_category_service
from sitecatalog.catalog.context import SiteContext, WorkContext
from sitecatalog.infrastructure.config import settings
from sitecatalog.infrastructure.database import session_scope
from sitecatalog.infrastructure.repositories import (
    RecordStores,
    build_sql_stores,
    get_memory_stores,
)


def get_work_context(
    x_role_ids: Annotated[str | None, Header()] = None,
    x_user_id: Annotated[int, Header()] = 0,
) -> WorkContext:
    """Build the work context from request headers."""
    if not x_role_ids:
        return WorkContext(user_id=x_user_id)

    try:
        role_ids = [int(part) for part in x_role_ids.split(",") if part.strip()]
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={
                "error_code": "INVALID_ROLE_IDS",
                "message": "X-Role-Ids must be a comma-separated list of integers",
            },
        ) from None
    return WorkContext.for_roles(*role_ids, user_id=x_user_id)


def get_site_context(
    x_site_id: Annotated[int | None, Header()] = None,
) -> SiteContext:
    """Build the site context, falling back to the default site."""
    return SiteContext(site_id=x_site_id if x_site_id is not None else settings.default_site_id)


def get_stores() -> Generator[RecordStores, None, None]:
    """Get record stores for the configured backend.

    SQL stores live for one request and commit when it succeeds.
    """
    if settings.storage_backend == "sql":
        with session_scope() as session:
            yield build_sql_stores(session)
    else:
        yield get_memory_stores()


def get_service(
    request: Request,
    work_context: Annotated[WorkContext, Depends(get_work_context)],
    site_context: Annotated[SiteContext, Depends(get_site_context)],
    stores: Annotated[RecordStores, Depends(get_stores)],
) -> CategoryService:
    """Get category service with request ID."""
    request_id = getattr(request.state, "request_id", None)
    return get_category_service(
        work_context,
        site_context,
        stores=stores,
        request_id=request_id,
    )


ServiceDep = Annotated[CategoryService, Depends(get_service)]
