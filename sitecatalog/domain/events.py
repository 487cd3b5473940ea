"""Domain events for the catalog.

Every persisted change of a catalog record produces one of the events
below. They are handed to the change notifier, which fans them out to
subscribers (audit logging, search indexing, outbound webhooks).
"""

from dataclasses import dataclass, field
from typing import Any, ClassVar

from sitecatalog.domain.base import DomainEvent, Entity


@dataclass(frozen=True)
class EntityInserted(DomainEvent):
    """Event raised when a record is inserted."""

    event_type: ClassVar[str] = "entity.inserted"

    snapshot: dict[str, Any] = field(default_factory=dict)

    def _payload(self) -> dict[str, Any]:
        """Get event-specific payload."""
        return {"snapshot": dict(self.snapshot)}


@dataclass(frozen=True)
class EntityUpdated(DomainEvent):
    """Event raised when a record is updated."""

    event_type: ClassVar[str] = "entity.updated"

    snapshot: dict[str, Any] = field(default_factory=dict)

    def _payload(self) -> dict[str, Any]:
        """Get event-specific payload."""
        return {"snapshot": dict(self.snapshot)}


@dataclass(frozen=True)
class EntityDeleted(DomainEvent):
    """Event raised when a record is physically deleted."""

    event_type: ClassVar[str] = "entity.deleted"

    def _payload(self) -> dict[str, Any]:
        """Get event-specific payload."""
        return {}


def snapshot_of(entity: Entity) -> dict[str, Any]:
    """Take a shallow field snapshot of an entity.

    Args:
        entity: Entity to snapshot.

    Returns:
        Mapping of field name to value.
    """
    return {
        name: list(value) if isinstance(value, list) else value
        for name, value in vars(entity).items()
        if not name.startswith("_")
    }
