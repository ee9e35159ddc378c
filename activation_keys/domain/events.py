"""
Activation key domain events.

Domain events represent something that happened to activation keys.
"""

import uuid
from datetime import datetime, timezone
from typing import List, Optional

from core.domain.events import DomainEvent


class ActivationKeysIssued(DomainEvent):
    """Event raised when a batch of keys is issued."""

    def __init__(
        self,
        key_ids: List[int],
        duration_days: int,
        note: Optional[str] = None,
        occurred_at: Optional[datetime] = None,
    ):
        """
        Initialize ActivationKeysIssued event.

        Args:
            key_ids: Ids of the new keys
            duration_days: Days each key grants
            note: Annotation shared by the batch
            occurred_at: When the event occurred
        """
        super().__init__(
            event_id=uuid.uuid4(),
            occurred_at=occurred_at or datetime.now(timezone.utc),
            aggregate_id=str(key_ids[0]) if key_ids else "",
            event_type="ActivationKeysIssued",
        )
        self.key_ids = key_ids
        self.duration_days = duration_days
        self.note = note

    def payload(self):
        return {
            "key_ids": list(self.key_ids),
            "count": len(self.key_ids),
            "duration_days": self.duration_days,
            "note": self.note,
        }


class ActivationKeyRedeemed(DomainEvent):
    """Event raised when a key is redeemed and the subscription extended."""

    def __init__(
        self,
        key_id: int,
        principal_id: uuid.UUID,
        duration_days: int,
        subscription_expires_at: datetime,
        occurred_at: Optional[datetime] = None,
    ):
        super().__init__(
            event_id=uuid.uuid4(),
            occurred_at=occurred_at or datetime.now(timezone.utc),
            aggregate_id=str(key_id),
            event_type="ActivationKeyRedeemed",
        )
        self.key_id = key_id
        self.principal_id = principal_id
        self.duration_days = duration_days
        self.subscription_expires_at = subscription_expires_at

    def payload(self):
        return {
            "key_id": self.key_id,
            "principal_id": str(self.principal_id),
            "duration_days": self.duration_days,
            "subscription_expires_at": self.subscription_expires_at.isoformat(),
        }


class ActivationKeyRevoked(DomainEvent):
    """Event raised when a key is revoked."""

    def __init__(self, key_id: int, occurred_at: Optional[datetime] = None):
        super().__init__(
            event_id=uuid.uuid4(),
            occurred_at=occurred_at or datetime.now(timezone.utc),
            aggregate_id=str(key_id),
            event_type="ActivationKeyRevoked",
        )
        self.key_id = key_id

    def payload(self):
        return {"key_id": self.key_id}


class ActivationGrantFailed(DomainEvent):
    """
    Event raised when a key was consumed but the grant did not apply.

    Recorded in the audit log for manual reconciliation.
    """

    def __init__(
        self,
        key_id: int,
        principal_id: uuid.UUID,
        duration_days: int,
        reason: str,
        occurred_at: Optional[datetime] = None,
    ):
        super().__init__(
            event_id=uuid.uuid4(),
            occurred_at=occurred_at or datetime.now(timezone.utc),
            aggregate_id=str(key_id),
            event_type="ActivationGrantFailed",
        )
        self.key_id = key_id
        self.principal_id = principal_id
        self.duration_days = duration_days
        self.reason = reason

    def payload(self):
        return {
            "key_id": self.key_id,
            "principal_id": str(self.principal_id),
            "duration_days": self.duration_days,
            "reason": self.reason,
        }
