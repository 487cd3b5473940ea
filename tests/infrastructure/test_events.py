"""Tests for the event publisher."""

from sitecatalog.domain.entities import Category
from sitecatalog.domain.events import EntityDeleted, EntityInserted, EntityUpdated
from sitecatalog.infrastructure.events import EventPublisher


class TestEventPublisher:
    """Tests for EventPublisher."""

    def test_handlers_receive_events(self) -> None:
        """Subscribers get every event in order."""
        publisher = EventPublisher()
        received = []
        publisher.subscribe(received.append)

        category = Category(id=1, name="Electronics")
        publisher.entity_inserted(category)
        publisher.entity_updated(category)
        publisher.entity_deleted(category)

        assert [type(e) for e in received] == [EntityInserted, EntityUpdated, EntityDeleted]
        assert all(e.entity_id == 1 for e in received)

    def test_handler_failure_does_not_propagate(self) -> None:
        """A failing subscriber neither raises nor stops other subscribers."""
        publisher = EventPublisher()
        received = []

        def broken(event) -> None:
            raise RuntimeError("index offline")

        publisher.subscribe(broken)
        publisher.subscribe(received.append)

        publisher.entity_updated(Category(id=2))

        assert len(received) == 1

    def test_history_bounded(self) -> None:
        """Only the most recent events are kept."""
        publisher = EventPublisher(history_size=2)
        for category_id in (1, 2, 3):
            publisher.entity_deleted(Category(id=category_id))

        assert [e.entity_id for e in publisher.published] == [2, 3]

        publisher.clear()
        assert len(publisher.published) == 0
