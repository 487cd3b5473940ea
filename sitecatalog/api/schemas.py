"""API schemas for SiteCatalog API.

Pydantic models for request/response validation and serialization.
"""

from pydantic import BaseModel, Field


# ============================================================================
# Common Schemas
# ============================================================================


class ErrorDetail(BaseModel):
    """Detailed error information."""

    field: str | None = Field(default=None, description="Field that caused the error")
    message: str = Field(..., description="Error message")


class ErrorResponse(BaseModel):
    """Standard error response.

    All API errors follow this format for consistency.
    """

    error_code: str = Field(..., description="Machine-readable error code")
    message: str = Field(..., description="Human-readable error message")
    details: list[ErrorDetail] = Field(
        default_factory=list, description="Additional error details"
    )
    request_id: str | None = Field(
        default=None, description="Request ID for correlation"
    )


# ============================================================================
# Category Schemas
# ============================================================================


class CategoryFields(BaseModel):
    """Editable category fields."""

    parent_category_id: int = Field(default=0, ge=0, description="Parent ID, 0 for root")
    name: str = Field(..., min_length=1, max_length=400)
    full_name: str = Field(default="", max_length=400)
    alias: str = Field(default="", max_length=100)
    display_order: int = Field(default=0)
    published: bool = Field(default=True)
    subject_to_acl: bool = Field(default=False)
    limited_to_sites: bool = Field(default=False)
    show_on_home_page: bool = Field(default=False)
    applied_discount_ids: list[int] = Field(default_factory=list)


class CategoryCreateRequest(CategoryFields):
    """Request to create a category."""


class CategoryUpdateRequest(CategoryFields):
    """Request to replace the editable fields of a category."""


class CategoryResponse(BaseModel):
    """Category as returned by the API."""

    id: int
    parent_category_id: int
    name: str
    full_name: str
    alias: str
    display_order: int
    published: bool
    deleted: bool
    subject_to_acl: bool
    limited_to_sites: bool
    show_on_home_page: bool
    has_discounts_applied: bool
    applied_discount_ids: list[int]


class CategoryListResponse(BaseModel):
    """Page of categories in tree order."""

    items: list[CategoryResponse]
    total: int
    page: int
    page_size: int
    total_pages: int


class CategoryUpdateResponse(BaseModel):
    """Result of a category update.

    ``parent_reset`` is set when the requested parent would have made the
    category its own ancestor and the category was moved to the root.
    """

    category: CategoryResponse
    parent_reset: bool
    requested_parent_id: int


# ============================================================================
# Product Schemas
# ============================================================================


class CategoryPathResponse(BaseModel):
    """Breadcrumb path of a product's first category."""

    product_id: int
    path: str
