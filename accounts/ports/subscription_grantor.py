"""
Subscription grantor port (interface).

Redemption hands the subscription extension to this port once the key
transition has committed.
"""
import uuid
from abc import ABC, abstractmethod
from datetime import datetime

from accounts.domain.principal import Principal


class SubscriptionGrantor(ABC):
    """Applies a redeemed key's days to a principal's subscription."""

    @abstractmethod
    async def grant(self, principal_id: uuid.UUID, days: int, now: datetime) -> Principal:
        """
        Extend a principal's subscription.

        The new expiry is ``max(now, current expiry) + days``. A principal
        still in the default group moves to the subscriber group.

        Args:
            principal_id: Principal UUID
            days: Days to add
            now: Redemption time

        Returns:
            Updated principal

        Raises:
            PrincipalNotFoundError: If the principal disappeared
            StorageFailureError: If the update could not be written
        """
        pass
