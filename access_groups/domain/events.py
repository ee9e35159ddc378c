"""
Group domain events.
"""

import uuid
from datetime import datetime, timezone
from typing import List, Optional

from core.domain.events import DomainEvent


class GroupCreated(DomainEvent):
    """Event raised when a group is created."""

    def __init__(
        self,
        group_id: int,
        name: str,
        allowed_tabs: List[str],
        occurred_at: Optional[datetime] = None,
    ):
        super().__init__(
            event_id=uuid.uuid4(),
            occurred_at=occurred_at or datetime.now(timezone.utc),
            aggregate_id=str(group_id),
            event_type="GroupCreated",
        )
        self.group_id = group_id
        self.name = name
        self.allowed_tabs = allowed_tabs

    def payload(self):
        return {"group_id": self.group_id, "name": self.name, "allowed_tabs": self.allowed_tabs}


class GroupTabsChanged(DomainEvent):
    """Event raised when a group's allowed tab set is replaced."""

    def __init__(
        self,
        group_id: int,
        previous_tabs: List[str],
        allowed_tabs: List[str],
        occurred_at: Optional[datetime] = None,
    ):
        """
        Initialize GroupTabsChanged event.

        Args:
            group_id: Group id
            previous_tabs: Tab set before the change
            allowed_tabs: Tab set after the change
            occurred_at: When the event occurred
        """
        super().__init__(
            event_id=uuid.uuid4(),
            occurred_at=occurred_at or datetime.now(timezone.utc),
            aggregate_id=str(group_id),
            event_type="GroupTabsChanged",
        )
        self.group_id = group_id
        self.previous_tabs = previous_tabs
        self.allowed_tabs = allowed_tabs

    def payload(self):
        return {
            "group_id": self.group_id,
            "previous_tabs": self.previous_tabs,
            "allowed_tabs": self.allowed_tabs,
        }


class GroupDeleted(DomainEvent):
    """Event raised when a group is deleted."""

    def __init__(self, group_id: int, name: str, occurred_at: Optional[datetime] = None):
        super().__init__(
            event_id=uuid.uuid4(),
            occurred_at=occurred_at or datetime.now(timezone.utc),
            aggregate_id=str(group_id),
            event_type="GroupDeleted",
        )
        self.group_id = group_id
        self.name = name

    def payload(self):
        return {"group_id": self.group_id, "name": self.name}
