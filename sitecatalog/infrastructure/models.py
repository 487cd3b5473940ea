"""SQLAlchemy models for database tables.

Provides ORM models for categories, products, product-category
mappings, ACL records and site mappings. Column names mirror the
fields of the matching domain entities one to one.
"""

from sqlalchemy import JSON, Boolean, Column, Integer, String

from sitecatalog.infrastructure.database import Base


class CategoryModel(Base):
    """Category model for database persistence."""

    __tablename__ = "categories"

    id = Column(Integer, primary_key=True, autoincrement=True)
    parent_category_id = Column(Integer, nullable=False, default=0, index=True)
    name = Column(String(400), nullable=False, default="")
    full_name = Column(String(400), nullable=False, default="")
    alias = Column(String(100), nullable=False, default="")
    display_order = Column(Integer, nullable=False, default=0)
    published = Column(Boolean, nullable=False, default=True)
    deleted = Column(Boolean, nullable=False, default=False, index=True)
    subject_to_acl = Column(Boolean, nullable=False, default=False)
    limited_to_sites = Column(Boolean, nullable=False, default=False)
    show_on_home_page = Column(Boolean, nullable=False, default=False)
    has_discounts_applied = Column(Boolean, nullable=False, default=False)
    applied_discount_ids = Column(JSON, nullable=False, default=list)


class ProductModel(Base):
    """Product model for database persistence."""

    __tablename__ = "products"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(400), nullable=False, default="")
    published = Column(Boolean, nullable=False, default=True)
    deleted = Column(Boolean, nullable=False, default=False)


class ProductCategoryModel(Base):
    """Product-category mapping model for database persistence."""

    __tablename__ = "product_categories"

    id = Column(Integer, primary_key=True, autoincrement=True)
    product_id = Column(Integer, nullable=False, index=True)
    category_id = Column(Integer, nullable=False, index=True)
    display_order = Column(Integer, nullable=False, default=0)


class AclRecordModel(Base):
    """ACL record model for database persistence."""

    __tablename__ = "acl_records"

    id = Column(Integer, primary_key=True, autoincrement=True)
    entity_id = Column(Integer, nullable=False, index=True)
    entity_type = Column(String(400), nullable=False)
    user_role_id = Column(Integer, nullable=False)


class SiteMappingModel(Base):
    """Site mapping model for database persistence."""

    __tablename__ = "site_mappings"

    id = Column(Integer, primary_key=True, autoincrement=True)
    entity_id = Column(Integer, nullable=False, index=True)
    entity_type = Column(String(400), nullable=False)
    site_id = Column(Integer, nullable=False)
