"""Catalog entities.

Plain records shared by the record stores, the category service and the
visibility filter. Relations between them are expressed through integer
identifiers only; nothing here holds a reference to another entity.
"""

from dataclasses import dataclass, field
from typing import ClassVar

from sitecatalog.domain.base import Entity

ROOT_CATEGORY_ID = 0


@dataclass(kw_only=True, eq=False)
class Category(Entity):
    """A node of the category tree.

    Attributes:
        parent_category_id: Parent category ID, ``0`` for a root category.
        name: Display name.
        full_name: Long display name.
        alias: URL-friendly alias.
        display_order: Sort position among siblings.
        published: Whether the category is visible in the storefront.
        deleted: Soft-delete flag; categories are never physically removed.
        subject_to_acl: Whether visibility is restricted by ACL records.
        limited_to_sites: Whether visibility is restricted by site mappings.
        show_on_home_page: Whether the category is listed on the home page.
        has_discounts_applied: Cached flag derived from applied discounts.
        applied_discount_ids: Discounts applied to this category.
    """

    entity_name: ClassVar[str] = "Category"

    parent_category_id: int = ROOT_CATEGORY_ID
    name: str = ""
    full_name: str = ""
    alias: str = ""
    display_order: int = 0
    published: bool = True
    deleted: bool = False
    subject_to_acl: bool = False
    limited_to_sites: bool = False
    show_on_home_page: bool = False
    has_discounts_applied: bool = False
    applied_discount_ids: list[int] = field(default_factory=list)

    @property
    def is_root(self) -> bool:
        """Check if the category has no parent."""
        return self.parent_category_id == ROOT_CATEGORY_ID


@dataclass(kw_only=True, eq=False)
class Product(Entity):
    """A product that can be placed into categories."""

    entity_name: ClassVar[str] = "Product"

    name: str = ""
    published: bool = True
    deleted: bool = False


@dataclass(kw_only=True, eq=False)
class ProductCategory(Entity):
    """Many-to-many mapping between a product and a category.

    Attributes:
        product_id: Mapped product.
        category_id: Mapped category.
        display_order: Sort position of the product within the category.
    """

    entity_name: ClassVar[str] = "ProductCategory"

    product_id: int = 0
    category_id: int = 0
    display_order: int = 0


@dataclass(kw_only=True, eq=False)
class AclRecord(Entity):
    """Grants a user role visibility over an ACL-restricted entity."""

    entity_name: ClassVar[str] = "AclRecord"

    entity_id: int = 0
    entity_type: str = "Category"
    user_role_id: int = 0


@dataclass(kw_only=True, eq=False)
class SiteMapping(Entity):
    """Grants a site visibility over a site-restricted entity."""

    entity_name: ClassVar[str] = "SiteMapping"

    entity_id: int = 0
    entity_type: str = "Category"
    site_id: int = 0


@dataclass(kw_only=True, eq=False)
class UserRole(Entity):
    """A role held by the acting user."""

    entity_name: ClassVar[str] = "UserRole"

    name: str = ""
    active: bool = True
