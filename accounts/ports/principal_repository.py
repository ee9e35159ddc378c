"""
Principal repository port (interface).

This defines the contract for principal persistence operations.
Implementations are in the infrastructure layer.
"""
import uuid
from abc import ABC, abstractmethod
from datetime import datetime
from typing import List, Optional

from accounts.domain.principal import Principal


class PrincipalRepository(ABC):
    """
    Abstract repository for Principal entities.

    The accounts module owns principal records; other modules read them
    and change group membership only through ``set_group`` and
    ``downgrade_if_expired``.
    """

    @abstractmethod
    async def save(self, principal: Principal) -> Principal:
        """
        Save a principal entity.

        Args:
            principal: Principal entity to save

        Returns:
            Saved principal entity
        """
        pass

    @abstractmethod
    async def find_by_id(self, principal_id: uuid.UUID) -> Optional[Principal]:
        """
        Find a principal by ID.

        Args:
            principal_id: Principal UUID

        Returns:
            Principal entity or None if not found
        """
        pass

    @abstractmethod
    async def find_by_username(self, username: str) -> Optional[Principal]:
        """
        Find a principal by username.

        Args:
            username: Login name

        Returns:
            Principal entity or None if not found
        """
        pass

    @abstractmethod
    async def list_all(self) -> List[Principal]:
        """
        List all principals, oldest first.

        Returns:
            List of Principal entities
        """
        pass

    @abstractmethod
    async def set_group(self, principal_id: uuid.UUID, group_id: int) -> Optional[Principal]:
        """
        Move a principal to another group.

        Args:
            principal_id: Principal UUID
            group_id: Target group id, which must exist

        Returns:
            Updated principal or None if the principal does not exist
        """
        pass

    @abstractmethod
    async def count_in_group(self, group_id: int) -> int:
        """
        Count principals that belong to a group.

        Args:
            group_id: Group id

        Returns:
            Number of members
        """
        pass

    @abstractmethod
    async def find_expired_in_group(self, group_id: int, now: datetime) -> List[Principal]:
        """
        Find members of a group whose subscription ended before ``now``.

        Args:
            group_id: Group id
            now: Reference time

        Returns:
            List of Principal entities
        """
        pass

    @abstractmethod
    async def downgrade_if_expired(
        self,
        principal_id: uuid.UUID,
        from_group_id: int,
        to_group_id: int,
        now: datetime,
    ) -> Optional[Principal]:
        """
        Move a principal from one group to another only while it is still
        a member of ``from_group_id`` with a subscription ended before ``now``.

        Args:
            principal_id: Principal UUID
            from_group_id: Group the principal must still be in
            to_group_id: Group to move it to
            now: Reference time

        Returns:
            Updated principal, or None if the conditions no longer hold
        """
        pass
