"""
Account domain events.
"""

import uuid
from datetime import datetime, timezone
from typing import Optional

from core.domain.events import DomainEvent


class PrincipalGroupChanged(DomainEvent):
    """Event raised when a principal is moved to another group."""

    def __init__(
        self,
        principal_id: uuid.UUID,
        previous_group_id: int,
        group_id: int,
        reason: str,
        occurred_at: Optional[datetime] = None,
    ):
        """
        Initialize PrincipalGroupChanged event.

        Args:
            principal_id: Principal UUID
            previous_group_id: Group before the change
            group_id: Group after the change
            reason: ``assigned`` or ``subscription_expired``
            occurred_at: When the event occurred
        """
        super().__init__(
            event_id=uuid.uuid4(),
            occurred_at=occurred_at or datetime.now(timezone.utc),
            aggregate_id=str(principal_id),
            event_type="PrincipalGroupChanged",
        )
        self.principal_id = principal_id
        self.previous_group_id = previous_group_id
        self.group_id = group_id
        self.reason = reason

    def payload(self):
        return {
            "principal_id": str(self.principal_id),
            "previous_group_id": self.previous_group_id,
            "group_id": self.group_id,
            "reason": self.reason,
        }


class PrincipalRegistered(DomainEvent):
    """Event raised when a user signs up."""

    def __init__(
        self,
        principal_id: uuid.UUID,
        username: str,
        group_id: int,
        occurred_at: Optional[datetime] = None,
    ):
        super().__init__(
            event_id=uuid.uuid4(),
            occurred_at=occurred_at or datetime.now(timezone.utc),
            aggregate_id=str(principal_id),
            event_type="PrincipalRegistered",
        )
        self.principal_id = principal_id
        self.username = username
        self.group_id = group_id

    def payload(self):
        return {
            "principal_id": str(self.principal_id),
            "username": self.username,
            "group_id": self.group_id,
        }
