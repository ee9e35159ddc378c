"""
Group repository port (interface).

This defines the contract for group persistence operations.
Implementations are in the infrastructure layer.
"""
from abc import ABC, abstractmethod
from typing import FrozenSet, List, Optional

from access_groups.domain.group import Group
from core.domain.value_objects import FeatureTab


class GroupRepository(ABC):
    """
    Abstract repository for Group entities.

    This is a port in hexagonal architecture - it defines
    what operations are available, not how they're implemented.
    """

    @abstractmethod
    async def save(self, group: Group) -> Group:
        """
        Insert a new group.

        Args:
            group: Unsaved Group entity

        Returns:
            Saved group with its id assigned

        Raises:
            GroupNameTakenError: If the name is already used
        """
        pass

    @abstractmethod
    async def find_by_id(self, group_id: int) -> Optional[Group]:
        """
        Find a group by ID.

        Args:
            group_id: Group id

        Returns:
            Group entity or None if not found
        """
        pass

    @abstractmethod
    async def find_by_name(self, name: str) -> Optional[Group]:
        """
        Find a group by name.

        Args:
            name: Group name

        Returns:
            Group entity or None if not found
        """
        pass

    @abstractmethod
    async def list_all(self) -> List[Group]:
        """
        List all groups ordered by id.

        Returns:
            List of Group entities
        """
        pass

    @abstractmethod
    async def replace_allowed_tabs(
        self, group_id: int, tabs: FrozenSet[FeatureTab]
    ) -> Optional[Group]:
        """
        Overwrite a group's allowed tab set.

        Args:
            group_id: Group id
            tabs: The complete new tab set

        Returns:
            Updated group or None if the group does not exist
        """
        pass

    @abstractmethod
    async def delete(self, group_id: int) -> bool:
        """
        Delete a group.

        Args:
            group_id: Group id

        Returns:
            True if a group was deleted, False if it did not exist

        Raises:
            GroupInUseError: If principals still reference the group
        """
        pass
