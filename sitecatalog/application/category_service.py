"""Category application service.

Owns cached lookups and every mutation of categories and product-category
mappings. Cached collections are keyed by coarse string patterns and any
mutation flushes the whole category and product-category namespaces, so
no derived entry can outlive the write that made it stale.
"""

import copy
from collections.abc import Sequence
from dataclasses import dataclass

import structlog

from sitecatalog.application.path_resolver import (
    CategoryLookup,
    CategoryPathResolver,
    Localizer,
    PathLookup,
    PathStore,
)
from sitecatalog.catalog.context import SiteContext, WorkContext
from sitecatalog.catalog.paging import PaginatedResult, PaginationParams
from sitecatalog.catalog.tree import display_key, sort_categories_for_tree
from sitecatalog.catalog.visibility import (
    AclService,
    NavigationFilter,
    QuerySettings,
    SiteMappingService,
    VisibilityFilter,
)
from sitecatalog.domain.entities import ROOT_CATEGORY_ID, Category, Product, ProductCategory
from sitecatalog.domain.exceptions import CacheInvalidationError, InvalidArgumentError
from sitecatalog.infrastructure.cache import CacheManager, get_cache_manager
from sitecatalog.infrastructure.config import settings
from sitecatalog.infrastructure.events import EventPublisher, get_event_publisher
from sitecatalog.infrastructure.repositories import RecordStores, get_memory_stores

logger = structlog.get_logger()


# ============================================================================
# Cache Keys
# ============================================================================

CATEGORIES_BY_ID_KEY = "catalog.category.id-{0}"
CATEGORIES_BY_PARENT_CATEGORY_ID_KEY = "catalog.category.byparent-{0}-{1}-{2}-{3}"
PRODUCTCATEGORIES_ALLBYCATEGORYID_KEY = "catalog.productcategory.allbycategoryid-{0}-{1}-{2}-{3}-{4}-{5}"
PRODUCTCATEGORIES_ALLBYPRODUCTID_KEY = "catalog.productcategory.allbyproductid-{0}-{1}-{2}-{3}"
CATEGORIES_PATTERN_KEY = "catalog.category."
PRODUCTCATEGORIES_PATTERN_KEY = "catalog.productcategory."


def _mapping_key(mapping: ProductCategory) -> tuple[int, int]:
    return (mapping.display_order, mapping.id)


# ============================================================================
# Service Result Types
# ============================================================================


@dataclass
class CategoryUpdateResult:
    """Result of updating a category.

    Attributes:
        category: The persisted category.
        parent_reset: Whether the requested parent would have closed a
            cycle and was replaced by the root.
        requested_parent_id: Parent ID the caller asked for.
    """

    category: Category
    parent_reset: bool = False
    requested_parent_id: int = ROOT_CATEGORY_ID


# ============================================================================
# Category Service
# ============================================================================


class CategoryService:
    """Service for category and product-category operations.

    One instance serves one request: the work and site contexts describe
    the caller, while the cache, record stores and event publisher are
    shared by the whole process.

    Example usage:
        service = get_category_service(
            WorkContext.for_roles(1),
            SiteContext(site_id=1),
        )
        phones = service.get_category_by_id(2)
        children = service.get_all_categories_by_parent_category_id(phones.id)
    """

    def __init__(
        self,
        stores: RecordStores,
        cache: CacheManager,
        event_publisher: EventPublisher,
        work_context: WorkContext,
        site_context: SiteContext,
        navigation_filters: Sequence[NavigationFilter] = (),
        query_settings: QuerySettings | None = None,
        localizer: Localizer | None = None,
        request_id: str | None = None,
    ) -> None:
        """Initialize service.

        Args:
            stores: Record stores for all catalog entities.
            cache: Process-wide cache provider.
            event_publisher: Change notifier.
            work_context: Acting user and roles.
            site_context: Current site.
            navigation_filters: Extra listing filters, applied in order.
            query_settings: Switches disabling visibility steps.
            localizer: Source of localized category names.
            request_id: Request ID for log correlation.
        """
        self.stores = stores
        self.cache = cache
        self.event_publisher = event_publisher
        self.work_context = work_context
        self.site_context = site_context
        self.navigation_filters = list(navigation_filters)
        self.query_settings = query_settings or QuerySettings.from_settings(settings)
        self.localizer = localizer
        self.log = logger.bind(request_id=request_id, site_id=site_context.site_id)

        self.visibility = VisibilityFilter(
            stores.acl_records, stores.site_mappings, self.query_settings
        )
        self.acl_service = AclService(stores.acl_records, work_context, self.query_settings)
        self.site_mapping_service = SiteMappingService(
            stores.site_mappings, site_context, self.query_settings
        )

    # ------------------------------------------------------------------
    # Category reads
    # ------------------------------------------------------------------

    def get_category_by_id(self, category_id: int) -> Category | None:
        """Get a category.

        Args:
            category_id: Category ID.

        Returns:
            A copy of the category, or None for ``0`` and unknown IDs.
        """
        category = self._lookup(category_id)
        return copy.deepcopy(category) if category is not None else None

    def _lookup(self, category_id: int) -> Category | None:
        """Get the cached category instance without copying it."""
        if category_id == ROOT_CATEGORY_ID:
            return None

        key = CATEGORIES_BY_ID_KEY.format(category_id)
        return self.cache.get(key, lambda: self.stores.categories.get_by_id(category_id))

    def get_all_categories_by_parent_category_id(
        self,
        parent_category_id: int,
        show_hidden: bool = False,
    ) -> list[Category]:
        """Get the direct children of a category.

        Args:
            parent_category_id: Parent category ID, ``0`` for roots.
            show_hidden: Include unpublished and invisible categories.

        Returns:
            Non-deleted children ordered by display order.
        """
        key = CATEGORIES_BY_PARENT_CATEGORY_ID_KEY.format(
            parent_category_id,
            show_hidden,
            self.work_context.role_key,
            self.site_context.site_id,
        )

        def acquire() -> list[Category]:
            categories = [
                c
                for c in self.stores.categories.all()
                if c.parent_category_id == parent_category_id
                and not c.deleted
                and (show_hidden or c.published)
            ]
            categories.sort(key=display_key)

            if not show_hidden:
                categories = self.visibility.filter_categories(
                    categories,
                    self.work_context.active_role_ids,
                    self.site_context.site_id,
                )
                categories.sort(key=display_key)

            return categories

        return copy.deepcopy(self.cache.get(key, acquire))

    def get_all_categories(
        self,
        category_name: str = "",
        alias: str | None = None,
        pagination: PaginationParams | None = None,
        show_hidden: bool = False,
        apply_navigation_filters: bool = True,
        ignore_categories_without_existing_parent: bool | None = None,
    ) -> PaginatedResult[Category]:
        """Get all categories in tree order.

        Args:
            category_name: Substring of ``name`` or ``full_name``.
            alias: Substring of ``alias``.
            pagination: Page to return, everything when None.
            show_hidden: Include unpublished and invisible categories.
            apply_navigation_filters: Run the registered navigation filters.
                Never applied when ``show_hidden`` is set.
            ignore_categories_without_existing_parent: Drop categories
                whose parent is not part of the result. Defaults to the
                configured policy.

        Returns:
            Page of categories, parents before children.
        """
        if ignore_categories_without_existing_parent is None:
            ignore_categories_without_existing_parent = (
                settings.ignore_categories_without_existing_parent
            )

        name_filter = category_name.casefold() if category_name and category_name.strip() else None
        alias_filter = alias.casefold() if alias and alias.strip() else None

        categories = []
        for category in self.stores.categories.all():
            if category.deleted or not (show_hidden or category.published):
                continue
            if name_filter and not (
                name_filter in category.name.casefold()
                or name_filter in category.full_name.casefold()
            ):
                continue
            if alias_filter and alias_filter not in category.alias.casefold():
                continue
            categories.append(category)

        def tree_key(c: Category) -> tuple[int, int, int]:
            return (c.parent_category_id, c.display_order, c.id)

        categories.sort(key=tree_key)

        if not show_hidden:
            categories = self.visibility.filter_categories(
                categories,
                self.work_context.active_role_ids,
                self.site_context.site_id,
                self.navigation_filters if apply_navigation_filters else (),
            )
            categories.sort(key=tree_key)

        sorted_categories = sort_categories_for_tree(
            categories,
            ignore_categories_without_existing_parent=ignore_categories_without_existing_parent,
        )

        return PaginatedResult.from_sequence(
            sorted_categories, pagination or PaginationParams.everything()
        )

    def get_all_categories_displayed_on_home_page(self) -> list[Category]:
        """Get published categories flagged for the home page.

        Returns:
            Categories ordered by display order.
        """
        categories = [
            c
            for c in self.stores.categories.all()
            if c.published and not c.deleted and c.show_on_home_page
        ]
        categories.sort(key=display_key)
        return categories

    # ------------------------------------------------------------------
    # Category mutations
    # ------------------------------------------------------------------

    def insert_category(self, category: Category) -> Category:
        """Insert a category.

        Args:
            category: Category to insert; its ID is assigned in place.

        Returns:
            The inserted category.

        Raises:
            InvalidArgumentError: If category is None.
            CacheInvalidationError: If the cache could not be flushed.
        """
        if category is None:
            raise InvalidArgumentError("category")

        self.stores.categories.insert(category)

        self._clear_cache()

        self.event_publisher.entity_inserted(category)
        self.log.info(
            "Category inserted",
            category_id=category.id,
            parent_category_id=category.parent_category_id,
        )
        return category

    def update_category(self, category: Category) -> CategoryUpdateResult:
        """Update a category.

        Before persisting, the ancestor chain of the requested parent is
        walked. If it leads back to the category itself, the parent is
        reset to the root so the hierarchy stays acyclic. The reset is
        reported on the result rather than raised.

        Args:
            category: Category to update.

        Returns:
            Update result with the persisted category.

        Raises:
            InvalidArgumentError: If category is None.
            CacheInvalidationError: If the cache could not be flushed.
        """
        if category is None:
            raise InvalidArgumentError("category")

        requested_parent_id = category.parent_category_id
        parent_reset = self._closes_cycle(category)
        if parent_reset:
            category.parent_category_id = ROOT_CATEGORY_ID
            self.log.warning(
                "Category parent reset to break a cycle",
                category_id=category.id,
                requested_parent_id=requested_parent_id,
            )

        self.stores.categories.update(category)

        self._clear_cache()

        self.event_publisher.entity_updated(category)
        self.log.info("Category updated", category_id=category.id)

        return CategoryUpdateResult(
            category=category,
            parent_reset=parent_reset,
            requested_parent_id=requested_parent_id,
        )

    def _closes_cycle(self, category: Category) -> bool:
        """Check whether the category is among its requested ancestors."""
        walked: set[int] = set()
        parent = self._lookup(category.parent_category_id)
        while parent is not None and parent.id not in walked:
            if parent.id == category.id:
                return True
            walked.add(parent.id)
            parent = self._lookup(parent.parent_category_id)
        return False

    def update_has_discounts_applied(self, category: Category) -> CategoryUpdateResult:
        """Refresh the cached discount flag of a category and persist it.

        Raises:
            InvalidArgumentError: If category is None.
        """
        if category is None:
            raise InvalidArgumentError("category")

        category.has_discounts_applied = len(category.applied_discount_ids) > 0
        return self.update_category(category)

    def delete_category(self, category: Category, delete_children: bool = False) -> None:
        """Soft-delete a category and cascade to its descendants.

        Args:
            category: Category to delete.
            delete_children: Soft-delete descendants too; otherwise they
                are moved to the root.

        Raises:
            InvalidArgumentError: If category is None.
        """
        if category is None:
            raise InvalidArgumentError("category")

        category.deleted = True
        self.update_category(category)

        children = self.get_all_categories_by_parent_category_id(category.id, show_hidden=True)
        processed = self._cascade(category, children, delete_children)

        self.log.info(
            "Category deleted",
            category_id=category.id,
            delete_children=delete_children,
            descendants_processed=processed,
        )

    def _cascade(self, category: Category, children: list[Category], delete: bool) -> int:
        """Soft-delete or reparent a subtree, depth first.

        Each category is processed at most once per cascade, so a residual
        cycle cannot keep the walk going.

        Returns:
            Number of descendants processed.
        """
        processed: set[int] = {category.id}
        pending = list(reversed(children))

        while pending:
            child = pending.pop()
            if child.id in processed:
                continue
            processed.add(child.id)

            if delete:
                child.deleted = True
            else:
                child.parent_category_id = ROOT_CATEGORY_ID
            self.update_category(child)

            grandchildren = self.get_all_categories_by_parent_category_id(
                child.id, show_hidden=True
            )
            pending.extend(reversed(grandchildren))

        return len(processed) - 1

    # ------------------------------------------------------------------
    # Product-category mappings
    # ------------------------------------------------------------------

    def get_product_category_by_id(self, product_category_id: int) -> ProductCategory | None:
        """Get a product-category mapping, None for ``0`` and unknown IDs."""
        if product_category_id == 0:
            return None

        return self.stores.product_categories.get_by_id(product_category_id)

    def get_product_categories_by_category_id(
        self,
        category_id: int,
        pagination: PaginationParams | None = None,
        show_hidden: bool = False,
    ) -> PaginatedResult[ProductCategory]:
        """Get the product mappings of a category.

        Args:
            category_id: Category ID.
            pagination: Page to return, everything when None.
            show_hidden: Include unpublished products and invisible categories.

        Returns:
            Page of mappings ordered by display order.
        """
        pagination = pagination or PaginationParams.everything()
        if category_id == ROOT_CATEGORY_ID:
            return PaginatedResult(
                items=[], total=0, page=pagination.page, page_size=pagination.page_size
            )

        key = PRODUCTCATEGORIES_ALLBYCATEGORYID_KEY.format(
            show_hidden,
            category_id,
            pagination.page,
            pagination.page_size,
            self.work_context.role_key,
            self.site_context.site_id,
        )

        def acquire() -> PaginatedResult[ProductCategory]:
            products = {p.id: p for p in self.stores.products.all()}

            mappings = []
            for mapping in self.stores.product_categories.all():
                if mapping.category_id != category_id:
                    continue
                product = products.get(mapping.product_id)
                if product is None or product.deleted or not (show_hidden or product.published):
                    continue
                mappings.append(mapping)
            mappings.sort(key=_mapping_key)

            if not show_hidden:
                categories = {c.id: c for c in self.stores.categories.all()}
                mappings = self.visibility.filter_product_categories(
                    mappings,
                    categories,
                    self.work_context.active_role_ids,
                    self.site_context.site_id,
                )
                mappings.sort(key=_mapping_key)

            return PaginatedResult.from_sequence(mappings, pagination)

        return copy.deepcopy(self.cache.get(key, acquire))

    def get_product_categories_by_product_id(
        self,
        product_id: int,
        show_hidden: bool = False,
    ) -> list[ProductCategory]:
        """Get the category mappings of a product.

        Args:
            product_id: Product ID.
            show_hidden: Include unpublished and invisible categories.

        Returns:
            Mappings ordered by display order.
        """
        if product_id == 0:
            return []

        key = PRODUCTCATEGORIES_ALLBYPRODUCTID_KEY.format(
            show_hidden,
            product_id,
            self.work_context.role_key,
            self.site_context.site_id,
        )

        def acquire() -> list[ProductCategory]:
            categories = {c.id: c for c in self.stores.categories.all()}
            mappings = sorted(
                (pc for pc in self.stores.product_categories.all() if pc.product_id == product_id),
                key=_mapping_key,
            )

            result = []
            for mapping in mappings:
                category = categories.get(mapping.category_id)
                if category is None or category.deleted:
                    continue
                if show_hidden:
                    result.append(mapping)
                    continue
                if not category.published:
                    continue
                if self.acl_service.authorize(category) and self.site_mapping_service.authorize(
                    category
                ):
                    result.append(mapping)
            return result

        return copy.deepcopy(self.cache.get(key, acquire))

    def insert_product_category(self, product_category: ProductCategory) -> ProductCategory:
        """Insert a product-category mapping.

        Raises:
            InvalidArgumentError: If product_category is None.
        """
        if product_category is None:
            raise InvalidArgumentError("product_category")

        self.stores.product_categories.insert(product_category)

        self._clear_cache()

        self.event_publisher.entity_inserted(product_category)
        return product_category

    def update_product_category(self, product_category: ProductCategory) -> ProductCategory:
        """Update a product-category mapping.

        Raises:
            InvalidArgumentError: If product_category is None.
        """
        if product_category is None:
            raise InvalidArgumentError("product_category")

        self.stores.product_categories.update(product_category)

        self._clear_cache()

        self.event_publisher.entity_updated(product_category)
        return product_category

    def delete_product_category(self, product_category: ProductCategory) -> None:
        """Delete a product-category mapping.

        Raises:
            InvalidArgumentError: If product_category is None.
        """
        if product_category is None:
            raise InvalidArgumentError("product_category")

        self.stores.product_categories.delete(product_category)

        self._clear_cache()

        self.event_publisher.entity_deleted(product_category)

    # ------------------------------------------------------------------
    # Paths
    # ------------------------------------------------------------------

    def get_category_path(
        self,
        product: Product | None,
        language_id: int | None = None,
        path_lookup: PathLookup | None = None,
        add_path_to_cache: PathStore | None = None,
        category_lookup: CategoryLookup | None = None,
    ) -> str:
        """Get the breadcrumb path of a product's first category.

        See ``CategoryPathResolver.resolve`` for the hook semantics.

        Returns:
            Path such as ``"Electronics > Phones"``, or an empty string.
        """
        resolver = CategoryPathResolver(
            mappings_for_product=self.get_product_categories_by_product_id,
            category_lookup=self._lookup,
            localizer=self.localizer,
        )
        return resolver.resolve(
            product,
            language_id=language_id,
            path_lookup=path_lookup,
            add_path_to_cache=add_path_to_cache,
            category_lookup=category_lookup,
        )

    # ------------------------------------------------------------------
    # Cache
    # ------------------------------------------------------------------

    def _clear_cache(self) -> None:
        """Flush the category and product-category namespaces.

        Raises:
            CacheInvalidationError: If a flush raised.
        """
        for prefix in (CATEGORIES_PATTERN_KEY, PRODUCTCATEGORIES_PATTERN_KEY):
            try:
                self.cache.remove_by_prefix(prefix)
            except Exception as e:
                self.log.error("Cache invalidation failed", prefix=prefix, error=str(e))
                raise CacheInvalidationError(prefix, str(e)) from e


# ============================================================================
# Navigation Filter Registry
# ============================================================================


_navigation_filters: list[NavigationFilter] = []


def register_navigation_filter(navigation_filter: NavigationFilter) -> None:
    """Register a navigation filter for all future services.

    Filters run in registration order.
    """
    _navigation_filters.append(navigation_filter)


def get_navigation_filters() -> list[NavigationFilter]:
    """Get registered navigation filters in registration order."""
    return list(_navigation_filters)


def clear_navigation_filters() -> None:
    """Forget all registered navigation filters."""
    _navigation_filters.clear()


# ============================================================================
# Service Factory
# ============================================================================


def get_category_service(
    work_context: WorkContext,
    site_context: SiteContext,
    stores: RecordStores | None = None,
    request_id: str | None = None,
) -> CategoryService:
    """Get category service instance.

    Args:
        work_context: Acting user and roles.
        site_context: Current site.
        stores: Record stores, the in-memory singleton when None.
        request_id: Request ID for correlation.

    Returns:
        CategoryService instance.
    """
    return CategoryService(
        stores=stores or get_memory_stores(),
        cache=get_cache_manager(),
        event_publisher=get_event_publisher(),
        work_context=work_context,
        site_context=site_context,
        navigation_filters=get_navigation_filters(),
        request_id=request_id,
    )


__all__ = [
    "CATEGORIES_BY_ID_KEY",
    "CATEGORIES_BY_PARENT_CATEGORY_ID_KEY",
    "CATEGORIES_PATTERN_KEY",
    "PRODUCTCATEGORIES_ALLBYCATEGORYID_KEY",
    "PRODUCTCATEGORIES_ALLBYPRODUCTID_KEY",
    "PRODUCTCATEGORIES_PATTERN_KEY",
    "CategoryService",
    "CategoryUpdateResult",
    "clear_navigation_filters",
    "get_category_service",
    "get_navigation_filters",
    "register_navigation_filter",
]
