"""
Group domain services.

GroupRegistry owns group records: their tab sets, their creation and
deletion, and the administrative reassignment of principals.
"""

import logging
import uuid
from typing import Iterable, List, Optional

from accounts.domain.events import PrincipalGroupChanged
from accounts.domain.principal import Principal
from accounts.ports.principal_repository import PrincipalRepository
from access_groups.domain.events import GroupCreated, GroupDeleted, GroupTabsChanged
from access_groups.domain.group import Group
from access_groups.ports.group_repository import GroupRepository
from core.domain.events import EventBus
from core.domain.exceptions import (
    GroupInUseError,
    GroupNotFoundError,
    PrincipalNotFoundError,
)
from core.domain.value_objects import FeatureTab

logger = logging.getLogger(__name__)


class GroupRegistry:
    """
    Named permission sets.

    Groups named in ``protected_group_names`` (the default and subscriber
    groups) can never be deleted, since redemption and expiry depend on them.
    """

    def __init__(
        self,
        group_repository: GroupRepository,
        principal_repository: PrincipalRepository,
        event_bus: Optional[EventBus] = None,
        protected_group_names: Iterable[str] = (),
    ):
        self.group_repository = group_repository
        self.principal_repository = principal_repository
        self.event_bus = event_bus
        self.protected_group_names = frozenset(protected_group_names)

    async def _publish(self, event) -> None:
        if self.event_bus:
            await self.event_bus.publish(event)

    async def list_groups(self) -> List[Group]:
        """Return all groups with their current tab sets, ordered by id."""
        return await self.group_repository.list_all()

    async def get_group(self, group_id: int) -> Group:
        """
        Get a group by id.

        Raises:
            GroupNotFoundError: If the group does not exist
        """
        group = await self.group_repository.find_by_id(group_id)
        if group is None:
            raise GroupNotFoundError(f"Group {group_id} not found")
        return group

    async def set_allowed_tabs(self, group_id: int, tabs: Iterable) -> Group:
        """
        Replace the full allowed tab set of a group.

        The new set is not merged with the old one.

        Args:
            group_id: Group id
            tabs: Tab tags; every tag must belong to the FeatureTab enumeration

        Returns:
            Updated group

        Raises:
            InvalidArgumentError: If any tag is unknown
            GroupNotFoundError: If the group does not exist
        """
        new_tabs = FeatureTab.parse_many(tabs)
        previous = await self.get_group(group_id)
        updated = await self.group_repository.replace_allowed_tabs(group_id, new_tabs)
        if updated is None:
            raise GroupNotFoundError(f"Group {group_id} not found")

        logger.info(f"Group {updated.name} tabs set to {updated.sorted_tabs()}")
        await self._publish(
            GroupTabsChanged(
                group_id=group_id,
                previous_tabs=previous.sorted_tabs(),
                allowed_tabs=updated.sorted_tabs(),
            )
        )
        return updated

    async def create_group(self, name: str, tabs: Iterable = ()) -> Group:
        """
        Create a group.

        Raises:
            InvalidArgumentError: If the name is empty or a tag is unknown
            GroupNameTakenError: If the name is already used
        """
        group = await self.group_repository.save(Group.create(name, tabs))
        logger.info(f"Created group {group.name} ({group.id})")
        await self._publish(
            GroupCreated(group_id=group.id, name=group.name, allowed_tabs=group.sorted_tabs())
        )
        return group

    async def delete_group(self, group_id: int) -> None:
        """
        Delete a group that has no members.

        Raises:
            GroupNotFoundError: If the group does not exist
            GroupInUseError: If the group has members or is a protected group
        """
        group = await self.get_group(group_id)
        if group.name in self.protected_group_names:
            raise GroupInUseError(f"Group '{group.name}' is required and cannot be deleted")
        members = await self.principal_repository.count_in_group(group_id)
        if members:
            raise GroupInUseError(f"Group '{group.name}' still has {members} member(s)")

        if not await self.group_repository.delete(group_id):
            raise GroupNotFoundError(f"Group {group_id} not found")
        logger.info(f"Deleted group {group.name} ({group_id})")
        await self._publish(GroupDeleted(group_id=group_id, name=group.name))

    async def assign_principal(self, principal_id: uuid.UUID, group_id: int) -> Principal:
        """
        Move a principal to another group.

        Raises:
            PrincipalNotFoundError: If the principal does not exist
            GroupNotFoundError: If the target group does not exist
        """
        principal = await self.principal_repository.find_by_id(principal_id)
        if principal is None:
            raise PrincipalNotFoundError(f"Principal {principal_id} not found")
        await self.get_group(group_id)

        updated = await self.principal_repository.set_group(principal_id, group_id)
        if updated is None:
            raise PrincipalNotFoundError(f"Principal {principal_id} not found")

        if principal.group_id != group_id:
            await self._publish(
                PrincipalGroupChanged(
                    principal_id=principal_id,
                    previous_group_id=principal.group_id,
                    group_id=group_id,
                    reason="assigned",
                )
            )
        return updated
