"""Base classes for domain layer.

Provides foundational abstractions for catalog entities and the
change notifications emitted when they are persisted.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, ClassVar
from uuid import UUID, uuid4


# ============================================================================
# Entity Base
# ============================================================================


@dataclass(kw_only=True, eq=False)
class Entity(ABC):
    """Base class for catalog entities.

    Entities have identity that persists across state changes.
    Two entities are equal if they have the same type and identifier,
    regardless of their other attributes.

    An identifier of ``0`` means the entity has not been persisted yet;
    record stores assign the real identifier on insert.

    Attributes:
        id: Unique integer identifier for this entity.
    """

    entity_name: ClassVar[str]

    id: int = 0

    def __eq__(self, other: object) -> bool:
        """Compare entities by identity.

        Args:
            other: Object to compare with.

        Returns:
            True if other is same type with same id.
        """
        if not isinstance(other, self.__class__):
            return False
        return self.id == other.id

    def __hash__(self) -> int:
        """Hash entity by type and identity.

        Returns:
            Hash of the entity name and id.
        """
        return hash((self.entity_name, self.id))


# ============================================================================
# Domain Event Base
# ============================================================================


@dataclass(frozen=True)
class DomainEvent(ABC):
    """Base class for domain events.

    Domain events represent something significant that happened
    to a catalog record. They are immutable and contain all information
    about what happened.

    Attributes:
        event_id: Unique identifier for this event instance.
        event_type: String identifier for the event type (set by subclass).
        occurred_at: Timestamp when the event occurred.
        entity_id: ID of the entity the event is about.
        entity_name: Type name of the entity.
    """

    event_type: ClassVar[str]

    event_id: UUID = field(default_factory=uuid4)
    occurred_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    entity_id: int = field(default=0)
    entity_name: str = field(default="")

    def to_dict(self) -> dict[str, Any]:
        """Convert event to dictionary for serialization.

        Returns:
            Dictionary representation of the event.
        """
        return {
            "event_id": str(self.event_id),
            "event_type": self.event_type,
            "occurred_at": self.occurred_at.isoformat(),
            "entity_id": self.entity_id,
            "entity_name": self.entity_name,
            "payload": self._payload(),
        }

    @abstractmethod
    def _payload(self) -> dict[str, Any]:
        """Get event-specific payload data.

        Returns:
            Dictionary with event-specific data.
        """
        pass
