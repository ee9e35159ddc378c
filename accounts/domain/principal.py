"""
Principal domain entity.

A principal is an account that belongs to exactly one group and may hold
a subscription that redeemed activation keys extend.
"""

import uuid
from dataclasses import dataclass, replace
from datetime import datetime, timedelta, timezone
from typing import Optional

from core.domain.exceptions import InvalidArgumentError


@dataclass(frozen=True)
class Principal:
    """
    Principal domain entity.

    This is a pure domain object with no framework dependencies.
    """

    id: uuid.UUID
    username: str
    group_id: int
    subscription_expires_at: Optional[datetime]
    is_super_admin: bool
    created_at: datetime

    def __post_init__(self):
        """Validate principal entity."""
        if not self.username or len(self.username.strip()) == 0:
            raise InvalidArgumentError("Username cannot be empty")
        if len(self.username) > 150:
            raise InvalidArgumentError("Username too long")
        if self.group_id is None:
            raise InvalidArgumentError("Principal must belong to a group")

    @classmethod
    def create(cls, username: str, group_id: int, is_super_admin: bool = False) -> "Principal":
        """
        Create a new Principal.

        Args:
            username: Unique login name
            group_id: Group the principal starts in
            is_super_admin: Whether the principal may edit group permissions

        Returns:
            Principal entity instance
        """
        return cls(
            id=uuid.uuid4(),
            username=(username or "").strip(),
            group_id=group_id,
            subscription_expires_at=None,
            is_super_admin=is_super_admin,
            created_at=datetime.now(timezone.utc),
        )

    def has_active_subscription(self, now: Optional[datetime] = None) -> bool:
        """Check whether the subscription runs past ``now``."""
        now = now or datetime.now(timezone.utc)
        return self.subscription_expires_at is not None and self.subscription_expires_at > now

    def extended_expiry(self, days: int, now: datetime) -> datetime:
        """
        Compute the expiry after adding ``days``.

        Remaining time is stacked: the extension starts from the later of
        ``now`` and the current expiry.
        """
        if days <= 0:
            raise InvalidArgumentError("Extension must be a positive number of days")
        start = now
        if self.subscription_expires_at is not None and self.subscription_expires_at > now:
            start = self.subscription_expires_at
        return start + timedelta(days=days)

    def in_group(self, group_id: int) -> "Principal":
        """Return a copy assigned to ``group_id``."""
        return replace(self, group_id=group_id)
