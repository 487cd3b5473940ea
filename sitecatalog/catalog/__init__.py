"""Catalog algorithms.

Visibility filtering, tree ordering, paging and the request context they
are evaluated against. Nothing here touches the cache; the category
service composes these pieces.
"""

from sitecatalog.catalog.context import SiteContext, WorkContext
from sitecatalog.catalog.paging import PaginatedResult, PaginationParams
from sitecatalog.catalog.tree import display_key, sort_categories_for_tree
from sitecatalog.catalog.visibility import (
    AclService,
    NavigationFilter,
    QuerySettings,
    SiteMappingService,
    VisibilityFilter,
    distinct_by_id,
)

__all__ = [
    # Context
    "SiteContext",
    "WorkContext",
    # Paging
    "PaginatedResult",
    "PaginationParams",
    # Tree
    "display_key",
    "sort_categories_for_tree",
    # Visibility
    "AclService",
    "NavigationFilter",
    "QuerySettings",
    "SiteMappingService",
    "VisibilityFilter",
    "distinct_by_id",
]
