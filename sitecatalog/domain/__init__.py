"""Domain layer - Catalog entities, change events and exceptions.

- **Entities**: Category, Product, ProductCategory, AclRecord, SiteMapping, UserRole
- **Domain Events**: EntityInserted, EntityUpdated, EntityDeleted
- **Exceptions**: Domain-specific errors

Example usage:
    from sitecatalog.domain import Category

    phones = Category(id=2, parent_category_id=1, name="Phones")
    assert not phones.is_root
"""

from sitecatalog.domain.base import DomainEvent, Entity
from sitecatalog.domain.entities import (
    ROOT_CATEGORY_ID,
    AclRecord,
    Category,
    Product,
    ProductCategory,
    SiteMapping,
    UserRole,
)
from sitecatalog.domain.events import (
    EntityDeleted,
    EntityInserted,
    EntityUpdated,
)
from sitecatalog.domain.exceptions import (
    CacheInvalidationError,
    CategoryNotFoundError,
    DomainError,
    InvalidArgumentError,
)

__all__ = [
    # Base
    "DomainEvent",
    "Entity",
    # Entities
    "ROOT_CATEGORY_ID",
    "AclRecord",
    "Category",
    "Product",
    "ProductCategory",
    "SiteMapping",
    "UserRole",
    # Events
    "EntityDeleted",
    "EntityInserted",
    "EntityUpdated",
    # Exceptions
    "CacheInvalidationError",
    "CategoryNotFoundError",
    "DomainError",
    "InvalidArgumentError",
]
