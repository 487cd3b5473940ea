"""Category API endpoints.

Provides endpoints for browsing the category tree and for creating,
updating and deleting categories.
"""

from typing import Annotated

from fastapi import APIRouter, Query, Response, status

from sitecatalog.api.dependencies import ServiceDep
from sitecatalog.api.schemas import (
    CategoryCreateRequest,
    CategoryListResponse,
    CategoryResponse,
    CategoryUpdateRequest,
    CategoryUpdateResponse,
    ErrorResponse,
)
from sitecatalog.application.category_service import CategoryService
from sitecatalog.catalog.paging import PaginationParams
from sitecatalog.domain.entities import Category
from sitecatalog.domain.exceptions import CategoryNotFoundError

router = APIRouter(prefix="/categories", tags=["Categories"])


# ============================================================================
# Converters
# ============================================================================


def category_to_response(category: Category) -> CategoryResponse:
    """Convert Category entity to response schema."""
    return CategoryResponse(
        id=category.id,
        parent_category_id=category.parent_category_id,
        name=category.name,
        full_name=category.full_name,
        alias=category.alias,
        display_order=category.display_order,
        published=category.published,
        deleted=category.deleted,
        subject_to_acl=category.subject_to_acl,
        limited_to_sites=category.limited_to_sites,
        show_on_home_page=category.show_on_home_page,
        has_discounts_applied=category.has_discounts_applied,
        applied_discount_ids=list(category.applied_discount_ids),
    )


def _require_category(service: CategoryService, category_id: int) -> Category:
    category = service.get_category_by_id(category_id)
    if category is None:
        raise CategoryNotFoundError(category_id)
    return category


# ============================================================================
# Endpoints
# ============================================================================


@router.get(
    "",
    response_model=CategoryListResponse,
    summary="List categories",
    description="List visible categories in tree order, parents before children.",
)
def list_categories(
    service: ServiceDep,
    name: Annotated[str, Query(description="Substring of name or full name")] = "",
    alias: Annotated[str | None, Query(description="Substring of alias")] = None,
    page: Annotated[int, Query(ge=1)] = 1,
    page_size: Annotated[int, Query(ge=1, le=1000)] = 100,
    show_hidden: bool = False,
) -> CategoryListResponse:
    """List categories in tree order."""
    result = service.get_all_categories(
        category_name=name,
        alias=alias,
        pagination=PaginationParams(page=page, page_size=page_size),
        show_hidden=show_hidden,
    )
    return CategoryListResponse(
        items=[category_to_response(c) for c in result.items],
        total=result.total,
        page=result.page,
        page_size=result.page_size,
        total_pages=result.total_pages,
    )


@router.get(
    "/home-page",
    response_model=list[CategoryResponse],
    summary="List home page categories",
)
def list_home_page_categories(service: ServiceDep) -> list[CategoryResponse]:
    """List published categories shown on the home page."""
    return [
        category_to_response(c) for c in service.get_all_categories_displayed_on_home_page()
    ]


@router.get(
    "/{category_id}",
    response_model=CategoryResponse,
    responses={404: {"model": ErrorResponse}},
    summary="Get category",
)
def get_category(category_id: int, service: ServiceDep) -> CategoryResponse:
    """Get a category by ID.

    Raises:
        CategoryNotFoundError: If category not found.
    """
    return category_to_response(_require_category(service, category_id))


@router.get(
    "/{category_id}/children",
    response_model=list[CategoryResponse],
    summary="List child categories",
)
def list_children(
    category_id: int,
    service: ServiceDep,
    show_hidden: bool = False,
) -> list[CategoryResponse]:
    """List the direct children of a category, ``0`` for root categories."""
    children = service.get_all_categories_by_parent_category_id(category_id, show_hidden)
    return [category_to_response(c) for c in children]


@router.post(
    "",
    response_model=CategoryResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create category",
)
def create_category(
    body: CategoryCreateRequest, service: ServiceDep
) -> CategoryResponse:
    """Create a category."""
    category = Category(**body.model_dump())
    category.has_discounts_applied = len(category.applied_discount_ids) > 0
    service.insert_category(category)
    return category_to_response(category)


@router.put(
    "/{category_id}",
    response_model=CategoryUpdateResponse,
    responses={404: {"model": ErrorResponse}},
    summary="Update category",
    description=(
        "Replace the editable fields of a category. A parent that would make "
        "the category its own ancestor is replaced by the root and reported "
        "through `parent_reset`."
    ),
)
def update_category(
    category_id: int,
    body: CategoryUpdateRequest,
    service: ServiceDep,
) -> CategoryUpdateResponse:
    """Update a category.

    Raises:
        CategoryNotFoundError: If category not found.
    """
    category = _require_category(service, category_id)
    for field_name, value in body.model_dump().items():
        setattr(category, field_name, value)

    result = service.update_has_discounts_applied(category)

    return CategoryUpdateResponse(
        category=category_to_response(result.category),
        parent_reset=result.parent_reset,
        requested_parent_id=result.requested_parent_id,
    )


@router.delete(
    "/{category_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    responses={404: {"model": ErrorResponse}},
    summary="Delete category",
    description=(
        "Soft-delete a category. Descendants are soft-deleted too when "
        "`delete_children` is set, otherwise they are moved to the root."
    ),
)
def delete_category(
    category_id: int,
    service: ServiceDep,
    delete_children: bool = False,
) -> Response:
    """Delete a category.

    Raises:
        CategoryNotFoundError: If category not found.
    """
    category = _require_category(service, category_id)
    service.delete_category(category, delete_children=delete_children)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
