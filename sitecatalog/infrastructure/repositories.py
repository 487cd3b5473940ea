"""Record stores for catalog entities.

Two implementations of the same small interface:

- ``InMemoryRepository`` keeps entities in a dictionary. It is the
  default backend and the one used by most tests.
- ``SqlAlchemyRepository`` maps entities onto the ORM models in
  ``models.py`` through a synchronous SQLAlchemy session.

Both hand out copies, so mutating a returned entity never changes stored
state until it is passed back to ``update``.
"""

import copy
from dataclasses import dataclass, fields
from typing import Any, Generic, Protocol, TypeVar

from sqlalchemy import select
from sqlalchemy.orm import Session

from sitecatalog.domain.base import Entity
from sitecatalog.domain.entities import (
    AclRecord,
    Category,
    Product,
    ProductCategory,
    SiteMapping,
)
from sitecatalog.infrastructure.models import (
    AclRecordModel,
    CategoryModel,
    ProductCategoryModel,
    ProductModel,
    SiteMappingModel,
)

E = TypeVar("E", bound=Entity)


class Repository(Protocol[E]):
    """Record store consumed by the category service."""

    def all(self) -> list[E]:
        """Return every stored record."""
        ...

    def get_by_id(self, entity_id: int) -> E | None:
        """Return a record by ID, or None."""
        ...

    def insert(self, entity: E) -> E:
        """Store a new record and assign its ID."""
        ...

    def update(self, entity: E) -> E:
        """Overwrite a stored record."""
        ...

    def delete(self, entity: E) -> None:
        """Remove a record."""
        ...


# ============================================================================
# In-Memory Repository
# ============================================================================


class InMemoryRepository(Generic[E]):
    """In-memory repository keyed by entity ID.

    Records are returned in ascending ID order, the same order a table
    scan on the primary key would produce.
    """

    def __init__(self, entities: list[E] | None = None) -> None:
        """Initialize repository, optionally seeded.

        Args:
            entities: Records to insert up front.
        """
        self._records: dict[int, E] = {}
        self._next_id = 1
        for entity in entities or []:
            self.insert(entity)

    def all(self) -> list[E]:
        """Get copies of all records in ID order."""
        return [copy.deepcopy(self._records[key]) for key in sorted(self._records)]

    def get_by_id(self, entity_id: int) -> E | None:
        """Get a copy of a record by ID."""
        record = self._records.get(entity_id)
        return copy.deepcopy(record) if record is not None else None

    def insert(self, entity: E) -> E:
        """Insert a record.

        A zero ID is replaced by the next free identifier; explicit IDs
        are kept.

        Args:
            entity: Record to insert.

        Returns:
            The same record with its ID assigned.
        """
        if not entity.id:
            entity.id = self._next_id
        if entity.id in self._records:
            raise KeyError(f"{entity.entity_name} {entity.id} already exists")
        self._next_id = max(self._next_id, entity.id + 1)
        self._records[entity.id] = copy.deepcopy(entity)
        return entity

    def update(self, entity: E) -> E:
        """Overwrite a stored record.

        Raises:
            KeyError: If the record was never inserted.
        """
        if entity.id not in self._records:
            raise KeyError(f"{entity.entity_name} {entity.id} does not exist")
        self._records[entity.id] = copy.deepcopy(entity)
        return entity

    def delete(self, entity: E) -> None:
        """Remove a record if present."""
        self._records.pop(entity.id, None)

    def __len__(self) -> int:
        return len(self._records)


# ============================================================================
# SQLAlchemy Repository
# ============================================================================


class SqlAlchemyRepository(Generic[E]):
    """Repository backed by an ORM model with matching column names.

    Example usage:
        with session_scope() as session:
            repo = SqlAlchemyRepository(session, Category, CategoryModel)
            phones = repo.get_by_id(2)
    """

    def __init__(self, session: Session, entity_cls: type[E], model: type[Any]) -> None:
        """Initialize repository.

        Args:
            session: SQLAlchemy session.
            entity_cls: Domain entity type.
            model: ORM model type.
        """
        self.session = session
        self.entity_cls = entity_cls
        self.model = model
        self._columns = [f.name for f in fields(entity_cls)]

    def _to_entity(self, row: Any) -> E:
        values = {name: copy.deepcopy(getattr(row, name)) for name in self._columns}
        return self.entity_cls(**values)

    def _apply(self, row: Any, entity: E) -> None:
        for name in self._columns:
            if name == "id":
                continue
            setattr(row, name, copy.deepcopy(getattr(entity, name)))

    def all(self) -> list[E]:
        """Get all records ordered by ID."""
        result = self.session.execute(select(self.model).order_by(self.model.id))
        return [self._to_entity(row) for row in result.scalars().all()]

    def get_by_id(self, entity_id: int) -> E | None:
        """Get a record by ID."""
        row = self.session.get(self.model, entity_id)
        return self._to_entity(row) if row is not None else None

    def insert(self, entity: E) -> E:
        """Insert a record and copy back the generated ID."""
        row = self.model()
        if entity.id:
            row.id = entity.id
        self._apply(row, entity)
        self.session.add(row)
        self.session.flush()
        entity.id = row.id
        return entity

    def update(self, entity: E) -> E:
        """Overwrite a stored record.

        Raises:
            KeyError: If the record does not exist.
        """
        row = self.session.get(self.model, entity.id)
        if row is None:
            raise KeyError(f"{entity.entity_name} {entity.id} does not exist")
        self._apply(row, entity)
        self.session.flush()
        return entity

    def delete(self, entity: E) -> None:
        """Delete a record if present."""
        row = self.session.get(self.model, entity.id)
        if row is not None:
            self.session.delete(row)
            self.session.flush()


# ============================================================================
# Store Bundle
# ============================================================================


@dataclass
class RecordStores:
    """The record stores the category service works against."""

    categories: Repository[Category]
    product_categories: Repository[ProductCategory]
    products: Repository[Product]
    acl_records: Repository[AclRecord]
    site_mappings: Repository[SiteMapping]


def build_memory_stores() -> RecordStores:
    """Create an empty set of in-memory stores."""
    return RecordStores(
        categories=InMemoryRepository[Category](),
        product_categories=InMemoryRepository[ProductCategory](),
        products=InMemoryRepository[Product](),
        acl_records=InMemoryRepository[AclRecord](),
        site_mappings=InMemoryRepository[SiteMapping](),
    )


def build_sql_stores(session: Session) -> RecordStores:
    """Create stores bound to a database session.

    Args:
        session: Session shared by all five stores.

    Returns:
        RecordStores over the SQL tables.
    """
    return RecordStores(
        categories=SqlAlchemyRepository(session, Category, CategoryModel),
        product_categories=SqlAlchemyRepository(session, ProductCategory, ProductCategoryModel),
        products=SqlAlchemyRepository(session, Product, ProductModel),
        acl_records=SqlAlchemyRepository(session, AclRecord, AclRecordModel),
        site_mappings=SqlAlchemyRepository(session, SiteMapping, SiteMappingModel),
    )


# Global in-memory stores
_memory_stores: RecordStores | None = None


def get_memory_stores() -> RecordStores:
    """Get the process-wide in-memory stores singleton."""
    global _memory_stores
    if _memory_stores is None:
        _memory_stores = build_memory_stores()
    return _memory_stores
