"""
Domain events base classes and infrastructure.

Domain events represent something that happened in the domain.
They are used for decoupling modules and enabling event-driven architecture.
"""

import uuid
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Any, Dict, Optional


class DomainEvent(ABC):
    """
    Base class for all domain events.

    Domain events are value objects that represent
    something that happened in the domain.
    """

    def __init__(
        self,
        aggregate_id: str,
        actor_id: Optional[str] = None,
        occurred_at: Optional[datetime] = None,
        event_id: Optional[uuid.UUID] = None,
    ):
        """
        Initialize a domain event.

        Args:
            aggregate_id: Identifier of the entity the event is about
            actor_id: User who caused the event, if any
            occurred_at: When the event occurred
            event_id: Event UUID (generated if not provided)
        """
        self.event_id = event_id or uuid.uuid4()
        self.occurred_at = occurred_at or datetime.now(timezone.utc)
        self.aggregate_id = aggregate_id
        self.actor_id = actor_id

    @property
    def event_type(self) -> str:
        """Event type name, taken from the class name."""
        return self.__class__.__name__

    def payload(self) -> Dict[str, Any]:
        """Event-specific fields. Subclasses extend this."""
        return {}

    def to_dict(self) -> Dict[str, Any]:
        """Convert event to dictionary for serialization."""
        return {
            "event_id": str(self.event_id),
            "occurred_at": self.occurred_at.isoformat(),
            "aggregate_id": self.aggregate_id,
            "actor_id": self.actor_id,
            "event_type": self.event_type,
            "data": self.payload(),
        }


class EventHandler(ABC):
    """
    Base class for event handlers.

    Event handlers process domain events asynchronously.
    """

    @abstractmethod
    async def handle(self, event: DomainEvent) -> None:
        """
        Handle a domain event.

        Args:
            event: The domain event to handle
        """
        pass


class EventBus(ABC):
    """
    Abstract event bus for publishing and subscribing to domain events.
    """

    @abstractmethod
    async def publish(self, event: DomainEvent) -> None:
        """
        Publish a domain event.

        Args:
            event: The domain event to publish
        """
        pass

    @abstractmethod
    def subscribe(self, event_type: type, handler: EventHandler) -> None:
        """
        Subscribe to a domain event type.

        Args:
            event_type: The type of event to subscribe to
            handler: The handler to call when event is published
        """
        pass
