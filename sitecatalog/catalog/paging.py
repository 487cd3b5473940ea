"""Paging helpers for catalog listings."""

import sys
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Generic, TypeVar

T = TypeVar("T")


@dataclass
class PaginationParams:
    """Pagination parameters.

    Attributes:
        page: Page number (1-indexed).
        page_size: Items per page.
    """

    page: int = 1
    page_size: int = 20

    @classmethod
    def everything(cls) -> "PaginationParams":
        """A single page large enough to hold any result."""
        return cls(page=1, page_size=sys.maxsize)

    @property
    def offset(self) -> int:
        """Calculate offset from page number."""
        return (self.page - 1) * self.page_size

    @property
    def limit(self) -> int:
        """Get limit (alias for page_size)."""
        return self.page_size


@dataclass
class PaginatedResult(Generic[T]):
    """Paginated result container.

    Attributes:
        items: List of items.
        total: Total count.
        page: Current page.
        page_size: Items per page.
    """

    items: list[T]
    total: int
    page: int
    page_size: int

    @classmethod
    def from_sequence(
        cls, source: Sequence[T], pagination: PaginationParams
    ) -> "PaginatedResult[T]":
        """Cut one page out of a fully materialized sequence.

        Args:
            source: All items, already in their final order.
            pagination: Page to extract.

        Returns:
            Page of items plus the total count.
        """
        start = pagination.offset
        return cls(
            items=list(source[start : start + pagination.limit]),
            total=len(source),
            page=pagination.page,
            page_size=pagination.page_size,
        )

    @property
    def total_pages(self) -> int:
        """Calculate total pages."""
        return (self.total + self.page_size - 1) // self.page_size

    @property
    def has_next(self) -> bool:
        """Check if there's a next page."""
        return self.page < self.total_pages

    @property
    def has_prev(self) -> bool:
        """Check if there's a previous page."""
        return self.page > 1
