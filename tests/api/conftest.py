"""Shared fixtures for API tests."""

import pytest
from fastapi.testclient import TestClient

from sitecatalog.domain.entities import Product, ProductCategory
from sitecatalog.infrastructure import cache, events, repositories
from sitecatalog.infrastructure.repositories import RecordStores, get_memory_stores
from sitecatalog.main import app
from tests.factories import electronics_tree


@pytest.fixture(autouse=True)
def fresh_singletons(monkeypatch: pytest.MonkeyPatch) -> None:
    """Give every test its own stores, cache and publisher."""
    monkeypatch.setattr(repositories, "_memory_stores", None)
    monkeypatch.setattr(cache, "_cache_manager", None)
    monkeypatch.setattr(events, "_event_publisher", None)


@pytest.fixture
def stores() -> RecordStores:
    """Process stores seeded with the electronics tree and one product."""
    stores = get_memory_stores()
    for category in electronics_tree():
        stores.categories.insert(category)
    stores.products.insert(Product(id=100, name="Pixel"))
    stores.product_categories.insert(ProductCategory(id=1, product_id=100, category_id=4))
    return stores


@pytest.fixture
def client(stores: RecordStores) -> TestClient:
    """Create test client over the seeded stores."""
    return TestClient(app)
