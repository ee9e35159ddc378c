"""
Domain events base classes and infrastructure.

Domain events represent something that happened in the domain.
They decouple the key and group modules from side effects such as
audit logging and metrics.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict
from uuid import UUID


@dataclass(frozen=True)
class DomainEvent(ABC):
    """
    Base class for all domain events.

    Subclasses pass the base fields to ``super().__init__`` and then
    attach their own attributes; ``payload()`` lists those attributes.
    """

    event_id: UUID
    occurred_at: datetime
    aggregate_id: str
    event_type: str

    def __init_subclass__(cls, **kwargs):
        """Automatically set event_type for subclasses."""
        super().__init_subclass__(**kwargs)
        cls.event_type = cls.__name__

    def payload(self) -> Dict[str, Any]:
        """Event-specific attributes, JSON friendly."""
        return {}

    def to_dict(self) -> Dict[str, Any]:
        """Convert event to dictionary for serialization."""
        return {
            "event_id": str(self.event_id),
            "occurred_at": self.occurred_at.isoformat(),
            "aggregate_id": self.aggregate_id,
            "event_type": self.event_type,
            "data": self.payload(),
        }


class EventHandler(ABC):
    """Reacts to published domain events (audit log, metrics)."""

    @abstractmethod
    async def handle(self, event: DomainEvent) -> None:
        """Process one event. The bus logs any exception raised here."""


class EventBus(ABC):
    """Routes each published event to the handlers subscribed to its type."""

    @abstractmethod
    async def publish(self, event: DomainEvent) -> None:
        """Deliver ``event`` to its subscribers."""

    @abstractmethod
    def subscribe(self, event_type: type, handler: EventHandler) -> None:
        """Register ``handler`` for events of ``event_type``."""
