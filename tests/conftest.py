"""Shared fixtures for catalog tests."""

import pytest

from sitecatalog.application.category_service import CategoryService
from sitecatalog.catalog.context import SiteContext, WorkContext
from sitecatalog.catalog.visibility import QuerySettings
from sitecatalog.domain.entities import Product, ProductCategory
from sitecatalog.infrastructure.cache import InMemoryCacheManager
from sitecatalog.infrastructure.events import EventPublisher
from sitecatalog.infrastructure.repositories import RecordStores, build_memory_stores
from tests.factories import electronics_tree


# ============================================================================
# Fixtures
# ============================================================================


@pytest.fixture
def stores() -> RecordStores:
    """In-memory stores seeded with the electronics tree and one product."""
    stores = build_memory_stores()
    for category in electronics_tree():
        stores.categories.insert(category)
    stores.products.insert(Product(id=100, name="Pixel"))
    stores.product_categories.insert(ProductCategory(id=1, product_id=100, category_id=4))
    return stores


@pytest.fixture
def cache() -> InMemoryCacheManager:
    """Fresh cache."""
    return InMemoryCacheManager()


@pytest.fixture
def publisher() -> EventPublisher:
    """Fresh event publisher."""
    return EventPublisher()


@pytest.fixture
def work_context() -> WorkContext:
    """Guest actor holding role 1."""
    return WorkContext.for_roles(1)


@pytest.fixture
def site_context() -> SiteContext:
    """Site 1."""
    return SiteContext(site_id=1)


@pytest.fixture
def service(
    stores: RecordStores,
    cache: InMemoryCacheManager,
    publisher: EventPublisher,
    work_context: WorkContext,
    site_context: SiteContext,
) -> CategoryService:
    """Category service over the seeded stores."""
    return CategoryService(
        stores=stores,
        cache=cache,
        event_publisher=publisher,
        work_context=work_context,
        site_context=site_context,
        query_settings=QuerySettings(),
    )
