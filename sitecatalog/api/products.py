"""Product API endpoints.

Provides the breadcrumb path of a product's category.
"""

from fastapi import APIRouter, HTTPException, status

from sitecatalog.api.dependencies import ServiceDep
from sitecatalog.api.schemas import CategoryPathResponse, ErrorResponse

router = APIRouter(prefix="/products", tags=["Products"])


@router.get(
    "/{product_id}/category-path",
    response_model=CategoryPathResponse,
    responses={404: {"model": ErrorResponse}},
    summary="Get product category path",
    description="Breadcrumb of the product's first visible category, e.g. `Electronics > Phones`.",
)
def get_category_path(
    product_id: int,
    service: ServiceDep,
    language_id: int | None = None,
) -> CategoryPathResponse:
    """Get the category path of a product.

    Raises:
        HTTPException: If product not found.
    """
    product = service.stores.products.get_by_id(product_id)
    if product is None or product.deleted:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail={
                "error_code": "PRODUCT_NOT_FOUND",
                "message": f"Product not found: {product_id}",
            },
        )

    path = service.get_category_path(product, language_id=language_id)
    return CategoryPathResponse(product_id=product_id, path=path)
