"""Change notifier.

Turns record changes into domain events and hands them to subscribers.
Publishing is fire-and-forget: subscriber failures are logged and never
reach the mutating operation that triggered them.
"""

from collections import deque
from collections.abc import Callable

import structlog

from sitecatalog.domain.base import DomainEvent, Entity
from sitecatalog.domain.events import (
    EntityDeleted,
    EntityInserted,
    EntityUpdated,
    snapshot_of,
)

logger = structlog.get_logger()

EventHandler = Callable[[DomainEvent], None]


class EventPublisher:
    """Publishes entity change events to registered handlers.

    Example usage:
        publisher = EventPublisher()
        publisher.subscribe(lambda event: print(event.to_dict()))
        publisher.entity_inserted(category)
    """

    def __init__(self, history_size: int = 1000) -> None:
        """Initialize publisher without subscribers.

        Args:
            history_size: Number of recent events kept in ``published``.
        """
        self._handlers: list[EventHandler] = []
        self.published: deque[DomainEvent] = deque(maxlen=history_size)

    def subscribe(self, handler: EventHandler) -> None:
        """Register an event handler.

        Args:
            handler: Callable receiving each published event.
        """
        self._handlers.append(handler)

    def entity_inserted(self, entity: Entity) -> None:
        """Publish an insert notification."""
        self.publish(
            EntityInserted(
                entity_id=entity.id,
                entity_name=entity.entity_name,
                snapshot=snapshot_of(entity),
            )
        )

    def entity_updated(self, entity: Entity) -> None:
        """Publish an update notification."""
        self.publish(
            EntityUpdated(
                entity_id=entity.id,
                entity_name=entity.entity_name,
                snapshot=snapshot_of(entity),
            )
        )

    def entity_deleted(self, entity: Entity) -> None:
        """Publish a delete notification."""
        self.publish(EntityDeleted(entity_id=entity.id, entity_name=entity.entity_name))

    def publish(self, event: DomainEvent) -> None:
        """Record an event and dispatch it to every handler.

        Args:
            event: Event to publish.
        """
        self.published.append(event)
        logger.debug(
            "Publishing catalog event",
            event_type=event.event_type,
            entity_name=event.entity_name,
            entity_id=event.entity_id,
        )

        for handler in self._handlers:
            try:
                handler(event)
            except Exception as e:
                logger.error(
                    "Event handler failed",
                    event_type=event.event_type,
                    entity_id=event.entity_id,
                    error=str(e),
                )

    def clear(self) -> None:
        """Forget recorded events."""
        self.published.clear()


# Global publisher instance
_event_publisher: EventPublisher | None = None


def get_event_publisher() -> EventPublisher:
    """Get the process-wide event publisher.

    Returns:
        EventPublisher singleton.
    """
    global _event_publisher
    if _event_publisher is None:
        _event_publisher = EventPublisher()
    return _event_publisher
