"""Tests for CategoryPathResolver."""

import pytest

from sitecatalog.application.path_resolver import CategoryPathResolver
from sitecatalog.domain.entities import Category, Product, ProductCategory
from tests.factories import electronics_tree, make_category

PIXEL = Product(id=100, name="Pixel")


class GermanLocalizer:
    """Localizer with German names for some categories."""

    names = {1: "Elektronik", 2: "Telefone"}

    def get_localized(self, entity: Category, field: str, language_id: int) -> str:
        if language_id == 2:
            return self.names.get(entity.id, getattr(entity, field))
        return getattr(entity, field)


def build_resolver(categories: list[Category], leaf_id: int = 4, localizer=None):
    """Create a resolver mapping product 100 to ``leaf_id``."""
    by_id = {c.id: c for c in categories}

    def mappings_for_product(product_id: int) -> list[ProductCategory]:
        if product_id != PIXEL.id:
            return []
        return [ProductCategory(id=1, product_id=product_id, category_id=leaf_id)]

    return CategoryPathResolver(
        mappings_for_product=mappings_for_product,
        category_lookup=by_id.get,
        localizer=localizer,
    )


@pytest.fixture
def tree() -> list[Category]:
    """The electronics tree."""
    return electronics_tree()


class TestResolve:
    """Tests for path walking."""

    def test_full_path(self, tree) -> None:
        """Names are joined root first."""
        assert build_resolver(tree).resolve(PIXEL) == "Electronics > Phones > Smartphones"

    def test_root_leaf(self, tree) -> None:
        """A root category yields just its name."""
        assert build_resolver(tree, leaf_id=1).resolve(PIXEL) == "Electronics"

    def test_none_product(self, tree) -> None:
        """None yields an empty path."""
        assert build_resolver(tree).resolve(None) == ""

    def test_product_without_mapping(self, tree) -> None:
        """A product without categories yields an empty path."""
        assert build_resolver(tree).resolve(Product(id=7)) == ""

    def test_missing_leaf(self, tree) -> None:
        """A mapping to an unknown category yields an empty path."""
        assert build_resolver(tree, leaf_id=99).resolve(PIXEL) == ""

    def test_stops_at_unpublished_ancestor(self, tree) -> None:
        """The walk stops below an unpublished ancestor."""
        tree[0].published = False
        assert build_resolver(tree).resolve(PIXEL) == "Phones > Smartphones"

    def test_stops_at_deleted_ancestor(self, tree) -> None:
        """The walk stops below a deleted ancestor."""
        tree[1].deleted = True
        assert build_resolver(tree).resolve(PIXEL) == "Smartphones"

    def test_cycle_terminates_with_partial_path(self) -> None:
        """A cycle ends the walk with what was collected so far."""
        categories = [
            make_category(1, 3, "A"),
            make_category(2, 1, "B"),
            make_category(3, 2, "C"),
        ]
        assert build_resolver(categories, leaf_id=3).resolve(PIXEL) == "A > B > C"

    def test_self_parent(self) -> None:
        """A self-referencing category yields its own name once."""
        categories = [make_category(5, 5, "Loop")]
        assert build_resolver(categories, leaf_id=5).resolve(PIXEL) == "Loop"


class TestHooks:
    """Tests for the external path cache hooks."""

    def test_lookup_hit_skips_walk(self, tree) -> None:
        """A non-empty external value is returned as is."""
        stored = []
        result = build_resolver(tree).resolve(
            PIXEL,
            path_lookup=lambda category_id: "Cached > Path",
            add_path_to_cache=lambda category_id, path: stored.append(path),
        )
        assert result == "Cached > Path"
        assert stored == []

    def test_lookup_miss_walks_and_stores(self, tree) -> None:
        """On a miss the walked path is handed to the store hook."""
        stored = {}
        result = build_resolver(tree).resolve(
            PIXEL,
            path_lookup=lambda category_id: "",
            add_path_to_cache=stored.__setitem__,
        )
        assert result == "Electronics > Phones > Smartphones"
        assert stored == {4: "Electronics > Phones > Smartphones"}

    def test_category_lookup_override(self, tree) -> None:
        """A custom lookup is used for ancestors."""
        renamed = {c.id: c for c in electronics_tree()}
        renamed[1].name = "Gadgets"
        result = build_resolver(tree).resolve(PIXEL, category_lookup=renamed.get)
        assert result == "Gadgets > Phones > Smartphones"


class TestLocalization:
    """Tests for localized names."""

    def test_localized_names(self, tree) -> None:
        """Names come from the localizer for the requested language."""
        resolver = build_resolver(tree, localizer=GermanLocalizer())
        assert resolver.resolve(PIXEL, language_id=2) == "Elektronik > Telefone > Smartphones"

    def test_default_language(self, tree) -> None:
        """Without a language the default names are used."""
        resolver = build_resolver(tree, localizer=GermanLocalizer())
        assert resolver.resolve(PIXEL) == "Electronics > Phones > Smartphones"

    def test_default_localizer(self, tree) -> None:
        """Without a localizer any language falls back to default names."""
        assert build_resolver(tree).resolve(PIXEL, language_id=2) == (
            "Electronics > Phones > Smartphones"
        )
