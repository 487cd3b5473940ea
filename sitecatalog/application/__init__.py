"""Application layer module.

Contains the category service (cached reads, mutations, cascades) and
the breadcrumb path resolver it delegates to.
"""

from sitecatalog.application.category_service import (
    CategoryService,
    CategoryUpdateResult,
    get_category_service,
    register_navigation_filter,
)
from sitecatalog.application.path_resolver import (
    PATH_SEPARATOR,
    CategoryPathResolver,
    DefaultLocalizer,
)

__all__ = [
    "CategoryService",
    "CategoryUpdateResult",
    "get_category_service",
    "register_navigation_filter",
    "PATH_SEPARATOR",
    "CategoryPathResolver",
    "DefaultLocalizer",
]
