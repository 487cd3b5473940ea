"""Breadcrumb paths for products.

Turns the first category of a product into a ``"Parent > Child > Leaf"``
string by walking parent links upwards. The walk stops at the root, at a
deleted or unpublished ancestor, or when an ID repeats, so a corrupted
hierarchy yields a shorter path rather than an endless loop.
"""

from collections.abc import Callable
from typing import Protocol

import structlog

from sitecatalog.domain.entities import Category, Product, ProductCategory

logger = structlog.get_logger()

PATH_SEPARATOR = " > "

PathLookup = Callable[[int], str | None]
PathStore = Callable[[int, str], None]
CategoryLookup = Callable[[int], Category | None]


class Localizer(Protocol):
    """Resolves localized values of entity fields."""

    def get_localized(self, entity: Category, field: str, language_id: int) -> str:
        """Return the value of ``field`` in the given language."""
        ...


class DefaultLocalizer:
    """Localizer that always returns the default-language value."""

    def get_localized(self, entity: Category, field: str, language_id: int) -> str:
        return getattr(entity, field)


class CategoryPathResolver:
    """Builds breadcrumb paths over the category hierarchy.

    Example usage:
        resolver = CategoryPathResolver(
            mappings_for_product=service.get_product_categories_by_product_id,
            category_lookup=service.get_category_by_id,
        )
        resolver.resolve(product)  # "Electronics > Phones > Smartphones"
    """

    def __init__(
        self,
        mappings_for_product: Callable[[int], list[ProductCategory]],
        category_lookup: CategoryLookup,
        localizer: Localizer | None = None,
    ) -> None:
        """Initialize resolver.

        Args:
            mappings_for_product: Returns a product's visible mappings,
                lowest display order first.
            category_lookup: Default category lookup by ID.
            localizer: Source of localized names.
        """
        self.mappings_for_product = mappings_for_product
        self.category_lookup = category_lookup
        self.localizer = localizer or DefaultLocalizer()

    def resolve(
        self,
        product: Product | None,
        language_id: int | None = None,
        path_lookup: PathLookup | None = None,
        add_path_to_cache: PathStore | None = None,
        category_lookup: CategoryLookup | None = None,
    ) -> str:
        """Resolve the category path of a product.

        Args:
            product: Product whose first category is used.
            language_id: Language for names, default language when None.
            path_lookup: External cache read, keyed by leaf category ID.
                A non-empty result is returned without walking.
            add_path_to_cache: External cache write, called after a walk.
            category_lookup: Overrides the default category lookup.

        Returns:
            Path joined with ``" > "``, or an empty string when the product
            has no category.
        """
        if product is None:
            return ""

        mappings = self.mappings_for_product(product.id)
        if not mappings:
            return ""

        mapping = mappings[0]
        category = self.category_lookup(mapping.category_id)
        if category is None:
            return ""

        if path_lookup is not None:
            cached = path_lookup(mapping.category_id)
            if cached:
                return cached

        lookup = category_lookup or self.category_lookup

        path = [self._name(category, language_id)]
        visited = {category.id}

        current = lookup(category.parent_category_id)
        while current is not None and not current.deleted and current.published:
            if current.id in visited:
                logger.warning(
                    "Category path walk stopped at a repeated category",
                    product_id=product.id,
                    category_id=current.id,
                )
                break
            path.append(self._name(current, language_id))
            visited.add(current.id)
            current = lookup(current.parent_category_id)

        path.reverse()
        result = PATH_SEPARATOR.join(path)

        if add_path_to_cache is not None:
            add_path_to_cache(mapping.category_id, result)

        return result

    def _name(self, category: Category, language_id: int | None) -> str:
        if language_id is None:
            return category.name
        return self.localizer.get_localized(category, "name", language_id)
