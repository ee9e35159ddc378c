"""
Group handlers.

Handlers for group commands and queries, on top of GroupRegistry.
"""

from typing import List

from access_groups.application.commands.group_commands import (
    AssignPrincipalGroupCommand,
    CreateGroupCommand,
    DeleteGroupCommand,
    SetAllowedTabsCommand,
)
from access_groups.application.dto.group_dto import GroupDTO, PrincipalDTO
from access_groups.domain.services import GroupRegistry


class GroupCommandHandler:
    """Handler for group commands and the group list query."""

    def __init__(self, registry: GroupRegistry):
        """Initialize handler with the registry."""
        self.registry = registry

    async def list_groups(self) -> List[GroupDTO]:
        """Return all groups ordered by id."""
        return [GroupDTO.from_entity(g) for g in await self.registry.list_groups()]

    async def set_allowed_tabs(self, command: SetAllowedTabsCommand) -> GroupDTO:
        """
        Handle set allowed tabs command.

        Raises:
            InvalidArgumentError: If a tag is unknown
            GroupNotFoundError: If the group does not exist
        """
        group = await self.registry.set_allowed_tabs(command.group_id, command.allowed_tabs)
        return GroupDTO.from_entity(group)

    async def create_group(self, command: CreateGroupCommand) -> GroupDTO:
        """Handle create group command."""
        group = await self.registry.create_group(command.name, command.allowed_tabs)
        return GroupDTO.from_entity(group)

    async def delete_group(self, command: DeleteGroupCommand) -> None:
        """Handle delete group command."""
        await self.registry.delete_group(command.group_id)


class PrincipalQueryHandler:
    """Lists principals and reassigns their group."""

    def __init__(self, registry: GroupRegistry):
        self.registry = registry

    async def list_principals(self) -> List[PrincipalDTO]:
        groups = {g.id: g for g in await self.registry.list_groups()}
        principals = await self.registry.principal_repository.list_all()
        return [PrincipalDTO.from_entity(p, groups.get(p.group_id)) for p in principals]

    async def assign_group(self, command: AssignPrincipalGroupCommand) -> PrincipalDTO:
        """
        Handle assign principal group command.

        Raises:
            PrincipalNotFoundError: If the principal does not exist
            GroupNotFoundError: If the group does not exist
        """
        principal = await self.registry.assign_principal(command.principal_id, command.group_id)
        group = await self.registry.get_group(principal.group_id)
        return PrincipalDTO.from_entity(principal, group)
