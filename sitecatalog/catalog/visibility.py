"""Visibility rules for categories.

A category is visible to a request when both hold:

- it is not subject to ACL, or one of the actor's active roles is
  granted through an ACL record;
- it is not limited to sites, or a site mapping grants the current site.

Bulk filtering reproduces a left join against the ACL and site mapping
tables. Such a join yields one row per matching grant, so the result is
collapsed back to one row per ID afterwards. Single-entity checks go
through ``AclService`` and ``SiteMappingService`` instead.
"""

from collections.abc import Callable, Iterable, Iterator, Sequence
from dataclasses import dataclass
from typing import Protocol, TypeVar

from sitecatalog.catalog.context import SiteContext, WorkContext
from sitecatalog.domain.entities import AclRecord, Category, ProductCategory, SiteMapping
from sitecatalog.infrastructure.config import Settings
from sitecatalog.infrastructure.repositories import Repository

R = TypeVar("R")

CATEGORY_ENTITY = Category.entity_name


@dataclass(frozen=True)
class QuerySettings:
    """Switches that disable parts of the visibility filter.

    Attributes:
        ignore_acl: Skip the ACL step entirely.
        ignore_multi_site: Skip the site mapping step entirely.
    """

    ignore_acl: bool = False
    ignore_multi_site: bool = False

    @classmethod
    def from_settings(cls, settings: Settings) -> "QuerySettings":
        """Build query settings from application settings."""
        return cls(
            ignore_acl=settings.ignore_acl,
            ignore_multi_site=settings.ignore_multi_site,
        )


class NavigationFilter(Protocol):
    """Pluggable narrowing step applied after the visibility filter."""

    def apply(self, categories: list[Category]) -> list[Category]:
        """Return the subset of categories to keep."""
        ...


def distinct_by_id(rows: Iterable[R], key: Callable[[R], int]) -> list[R]:
    """Collapse rows to one per ID.

    The first row seen for each ID is kept and the result is ordered by
    ID, so repeated calls over the same input pick the same rows.

    Args:
        rows: Rows possibly containing duplicates.
        key: Function extracting the ID.

    Returns:
        One row per ID, in ascending ID order.
    """
    first: dict[int, R] = {}
    for row in rows:
        first.setdefault(key(row), row)
    return [first[row_id] for row_id in sorted(first)]


class VisibilityFilter:
    """Applies ACL and site mapping rules to candidate sets.

    Example usage:
        visibility = VisibilityFilter(stores.acl_records, stores.site_mappings)
        visible = visibility.filter_categories(
            candidates,
            role_ids=frozenset({1, 3}),
            site_id=2,
        )
    """

    def __init__(
        self,
        acl_records: Repository[AclRecord],
        site_mappings: Repository[SiteMapping],
        query_settings: QuerySettings | None = None,
    ) -> None:
        """Initialize filter.

        Args:
            acl_records: ACL record store.
            site_mappings: Site mapping store.
            query_settings: Switches disabling filter steps.
        """
        self.acl_records = acl_records
        self.site_mappings = site_mappings
        self.query_settings = query_settings or QuerySettings()

    def filter_categories(
        self,
        categories: Iterable[Category],
        role_ids: frozenset[int],
        site_id: int,
        navigation_filters: Sequence[NavigationFilter] = (),
    ) -> list[Category]:
        """Narrow categories to the visible ones.

        Args:
            categories: Candidate categories. Not modified.
            role_ids: Active role IDs of the actor.
            site_id: Current site ID.
            navigation_filters: Extra filters applied in order afterwards.

        Returns:
            Visible categories, one per ID, ordered by ID.
        """
        visible = distinct_by_id(
            self._visible_rows(categories, lambda c: c, role_ids, site_id),
            key=lambda c: c.id,
        )

        for navigation_filter in navigation_filters:
            visible = list(navigation_filter.apply(visible))

        return visible

    def filter_product_categories(
        self,
        mappings: Iterable[ProductCategory],
        categories_by_id: dict[int, Category],
        role_ids: frozenset[int],
        site_id: int,
    ) -> list[ProductCategory]:
        """Narrow product-category mappings by the visibility of their category.

        Mappings whose category is unknown are dropped.

        Args:
            mappings: Candidate mappings. Not modified.
            categories_by_id: Categories the mappings point at.
            role_ids: Active role IDs of the actor.
            site_id: Current site ID.

        Returns:
            Visible mappings, one per mapping ID, ordered by ID.
        """
        return distinct_by_id(
            self._visible_rows(
                mappings,
                lambda pc: categories_by_id.get(pc.category_id),
                role_ids,
                site_id,
            ),
            key=lambda pc: pc.id,
        )

    def _visible_rows(
        self,
        rows: Iterable[R],
        category_of: Callable[[R], Category | None],
        role_ids: frozenset[int],
        site_id: int,
    ) -> Iterator[R]:
        """Yield joined rows that pass both rules, duplicates included."""
        joined: Iterable[tuple[R, Category]] = (
            (row, category) for row in rows if (category := category_of(row)) is not None
        )

        if not self.query_settings.ignore_acl:
            joined = self._join_acl(joined, role_ids)

        if not self.query_settings.ignore_multi_site:
            joined = self._join_site_mappings(joined, site_id)

        for row, _ in joined:
            yield row

    def _join_acl(
        self, joined: Iterable[tuple[R, Category]], role_ids: frozenset[int]
    ) -> Iterator[tuple[R, Category]]:
        grants = _index_by_entity(self.acl_records.all())
        for row, category in joined:
            for acl in grants.get(category.id) or [None]:
                if not category.subject_to_acl or (
                    acl is not None and acl.user_role_id in role_ids
                ):
                    yield row, category

    def _join_site_mappings(
        self, joined: Iterable[tuple[R, Category]], site_id: int
    ) -> Iterator[tuple[R, Category]]:
        grants = _index_by_entity(self.site_mappings.all())
        for row, category in joined:
            for mapping in grants.get(category.id) or [None]:
                if not category.limited_to_sites or (
                    mapping is not None and mapping.site_id == site_id
                ):
                    yield row, category


def _index_by_entity(records: Iterable[R]) -> dict[int, list[R]]:
    """Group category grants by the entity they apply to."""
    index: dict[int, list[R]] = {}
    for record in records:
        if record.entity_type == CATEGORY_ENTITY:
            index.setdefault(record.entity_id, []).append(record)
    return index


# ============================================================================
# Single-Entity Authorization
# ============================================================================


class AclService:
    """Checks ACL visibility of a single category for the current actor."""

    def __init__(
        self,
        acl_records: Repository[AclRecord],
        work_context: WorkContext,
        query_settings: QuerySettings | None = None,
    ) -> None:
        self.acl_records = acl_records
        self.work_context = work_context
        self.query_settings = query_settings or QuerySettings()

    def authorize(self, category: Category | None) -> bool:
        """Check whether the actor may see the category.

        Args:
            category: Category to check; None is never authorized.

        Returns:
            True if visible under ACL rules.
        """
        if category is None:
            return False
        if self.query_settings.ignore_acl or not category.subject_to_acl:
            return True

        role_ids = self.work_context.active_role_ids
        return any(
            record.entity_type == CATEGORY_ENTITY
            and record.entity_id == category.id
            and record.user_role_id in role_ids
            for record in self.acl_records.all()
        )


class SiteMappingService:
    """Checks site visibility of a single category for the current site."""

    def __init__(
        self,
        site_mappings: Repository[SiteMapping],
        site_context: SiteContext,
        query_settings: QuerySettings | None = None,
    ) -> None:
        self.site_mappings = site_mappings
        self.site_context = site_context
        self.query_settings = query_settings or QuerySettings()

    def authorize(self, category: Category | None) -> bool:
        """Check whether the category is available on the current site.

        Args:
            category: Category to check; None is never authorized.

        Returns:
            True if visible under site mapping rules.
        """
        if category is None:
            return False
        if self.query_settings.ignore_multi_site or not category.limited_to_sites:
            return True

        return any(
            mapping.entity_type == CATEGORY_ENTITY
            and mapping.entity_id == category.id
            and mapping.site_id == self.site_context.site_id
            for mapping in self.site_mappings.all()
        )
