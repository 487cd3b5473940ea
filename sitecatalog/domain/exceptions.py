"""Domain exceptions.

All domain-level errors raised by the catalog. Missing records and
cycles in the category graph are not errors: lookups return ``None`` and
walks stop early. What remains are caller mistakes and failures that
would leave the cache incoherent.
"""

from typing import Any


class DomainError(Exception):
    """Base class for all domain exceptions.

    All domain errors should inherit from this class to allow
    catching domain-specific errors at the application layer.
    """

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        """Initialize domain error.

        Args:
            message: Human-readable error message.
            details: Optional dictionary with additional error context.
        """
        super().__init__(message)
        self.message = message
        self.details = details or {}


class InvalidArgumentError(DomainError, ValueError):
    """Raised when a required record argument is missing.

    Mutating operations raise this before touching storage or cache.
    """

    def __init__(self, argument: str) -> None:
        """Initialize invalid argument error.

        Args:
            argument: Name of the offending argument.
        """
        super().__init__(
            f"Argument '{argument}' is required",
            details={"argument": argument},
        )


class CategoryNotFoundError(DomainError):
    """Raised by callers that require a category to exist."""

    def __init__(self, category_id: int) -> None:
        """Initialize category not found error.

        Args:
            category_id: ID of the missing category.
        """
        super().__init__(
            f"Category {category_id} not found",
            details={"category_id": category_id},
        )


class CacheInvalidationError(DomainError):
    """Raised when a cache flush after a mutation could not be confirmed.

    The mutation has already been persisted; stale entries may remain
    under the given prefix, so the operation is reported as failed.
    """

    def __init__(self, prefix: str, reason: str) -> None:
        """Initialize cache invalidation error.

        Args:
            prefix: Cache key prefix that failed to flush.
            reason: Underlying failure message.
        """
        super().__init__(
            f"Failed to invalidate cache entries under '{prefix}': {reason}",
            details={"prefix": prefix, "reason": reason},
        )
