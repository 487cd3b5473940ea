"""Tests for the record stores."""

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import Session

from sitecatalog.domain.entities import AclRecord, Category, Product, ProductCategory
from sitecatalog.infrastructure.database import init_db
from sitecatalog.infrastructure.repositories import (
    InMemoryRepository,
    SqlAlchemyRepository,
    build_sql_stores,
)
from sitecatalog.infrastructure.models import CategoryModel
from tests.factories import electronics_tree


# ============================================================================
# Fixtures
# ============================================================================


@pytest.fixture
def session():
    """Session over a fresh in-memory SQLite database."""
    engine = create_engine("sqlite://")
    init_db(engine)
    with Session(engine) as session:
        yield session
    engine.dispose()


@pytest.fixture(params=["memory", "sql"])
def repo(request, session):
    """Category store of each kind."""
    if request.param == "memory":
        return InMemoryRepository[Category]()
    return SqlAlchemyRepository(session, Category, CategoryModel)


# ============================================================================
# Shared Behaviour
# ============================================================================


class TestCategoryRepository:
    """Behaviour shared by both category stores."""

    def test_insert_assigns_id(self, repo) -> None:
        """Zero IDs are replaced on insert."""
        category = repo.insert(Category(name="Electronics"))
        assert category.id == 1
        assert repo.get_by_id(1).name == "Electronics"

    def test_insert_keeps_explicit_id(self, repo) -> None:
        """Explicit IDs are kept."""
        repo.insert(Category(id=7, name="Cameras"))
        assert repo.get_by_id(7).name == "Cameras"

    def test_all_in_id_order(self, repo) -> None:
        """Records come back in ID order."""
        for category in reversed(electronics_tree()):
            repo.insert(category)
        assert [c.id for c in repo.all()] == [1, 2, 3, 4]

    def test_get_unknown(self, repo) -> None:
        """Unknown IDs return None."""
        assert repo.get_by_id(99) is None

    def test_update(self, repo) -> None:
        """Update overwrites every field."""
        category = repo.insert(Category(name="Phones"))
        category.published = False
        category.applied_discount_ids = [3, 4]
        repo.update(category)

        stored = repo.get_by_id(category.id)
        assert stored.published is False
        assert stored.applied_discount_ids == [3, 4]

    def test_update_unknown_raises(self, repo) -> None:
        """Updating a record that was never inserted fails."""
        with pytest.raises(KeyError):
            repo.update(Category(id=42))

    def test_returned_records_are_copies(self, repo) -> None:
        """Mutating a returned record does not change storage."""
        repo.insert(Category(name="Laptops", applied_discount_ids=[1]))
        copy = repo.get_by_id(1)
        copy.name = "Changed"
        copy.applied_discount_ids.append(2)

        stored = repo.get_by_id(1)
        assert stored.name == "Laptops"
        assert stored.applied_discount_ids == [1]

    def test_delete(self, repo) -> None:
        """Deleted records are gone."""
        category = repo.insert(Category(name="Old"))
        repo.delete(category)
        assert repo.get_by_id(category.id) is None


class TestInMemoryRepository:
    """In-memory specifics."""

    def test_duplicate_id_rejected(self) -> None:
        """Inserting an existing ID fails."""
        repo = InMemoryRepository[Category]([Category(id=1)])
        with pytest.raises(KeyError):
            repo.insert(Category(id=1))

    def test_len(self) -> None:
        """The store reports its record count."""
        repo = InMemoryRepository[Category](electronics_tree())
        assert len(repo) == 4


class TestSqlStores:
    """SQL store bundle."""

    def test_all_stores_share_session(self, session) -> None:
        """Every store of the bundle works against the same session."""
        stores = build_sql_stores(session)
        stores.products.insert(Product(name="Pixel"))
        stores.product_categories.insert(ProductCategory(product_id=1, category_id=4))
        stores.acl_records.insert(AclRecord(entity_id=4, user_role_id=2))

        assert stores.products.get_by_id(1).name == "Pixel"
        assert stores.product_categories.all()[0].category_id == 4
        assert stores.acl_records.all()[0].entity_type == "Category"
