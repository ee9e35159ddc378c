"""
Django implementation of GroupRepository port.

This adapter converts between domain entities and Django ORM models.
"""

from typing import FrozenSet, List, Optional

from asgiref.sync import sync_to_async
from django.db import IntegrityError, transaction
from django.db.models import ProtectedError

from access_groups.domain.group import Group
from access_groups.infrastructure.models import AccessGroup as AccessGroupModel
from access_groups.ports.group_repository import GroupRepository
from core.domain.exceptions import GroupInUseError, GroupNameTakenError
from core.domain.value_objects import FeatureTab


class DjangoGroupRepository(GroupRepository):
    """
    Django ORM implementation of GroupRepository.

    Tab sets are written as sorted lists and read back as frozensets;
    a stored tag outside the enumeration fails loudly on read.
    """

    def _to_domain(self, model: AccessGroupModel) -> Group:
        """
        Convert Django model to domain entity.

        Args:
            model: Django AccessGroup model

        Returns:
            Group domain entity
        """
        return Group(
            id=model.id,
            name=model.name,
            allowed_tabs=FeatureTab.parse_many(model.allowed_tabs or []),
        )

    async def save(self, group: Group) -> Group:
        """
        Insert a new group.

        Args:
            group: Unsaved Group entity

        Returns:
            Saved group with its id assigned
        """

        def _create():
            if AccessGroupModel.objects.filter(name=group.name).exists():  # pylint: disable=no-member
                raise GroupNameTakenError(f"Group name '{group.name}' is already taken")
            try:
                with transaction.atomic():
                    # pylint: disable=no-member
                    return AccessGroupModel.objects.create(
                        name=group.name,
                        allowed_tabs=group.sorted_tabs(),
                    )
            except IntegrityError as e:
                raise GroupNameTakenError(f"Group name '{group.name}' is already taken") from e

        model = await sync_to_async(_create)()
        return self._to_domain(model)

    async def find_by_id(self, group_id: int) -> Optional[Group]:
        """
        Find a group by ID.

        Args:
            group_id: Group id

        Returns:
            Group entity or None if not found
        """
        try:
            # pylint: disable=no-member
            model = await sync_to_async(AccessGroupModel.objects.get)(id=group_id)
            return self._to_domain(model)
        except AccessGroupModel.DoesNotExist:  # pylint: disable=no-member
            return None

    async def find_by_name(self, name: str) -> Optional[Group]:
        """
        Find a group by name.

        Args:
            name: Group name

        Returns:
            Group entity or None if not found
        """
        try:
            # pylint: disable=no-member
            model = await sync_to_async(AccessGroupModel.objects.get)(name=name)
            return self._to_domain(model)
        except AccessGroupModel.DoesNotExist:  # pylint: disable=no-member
            return None

    async def list_all(self) -> List[Group]:
        """
        List all groups ordered by id.

        Returns:
            List of Group entities
        """
        # pylint: disable=no-member
        models = await sync_to_async(list)(AccessGroupModel.objects.order_by("id"))
        return [self._to_domain(m) for m in models]

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
        stored = [tab.value for tab in FeatureTab if tab in tabs]

        def _replace():
            # pylint: disable=no-member
            updated = AccessGroupModel.objects.filter(id=group_id).update(allowed_tabs=stored)
            if not updated:
                return None
            return AccessGroupModel.objects.get(id=group_id)

        model = await sync_to_async(_replace)()
        return self._to_domain(model) if model else None

    async def delete(self, group_id: int) -> bool:
        """
        Delete a group.

        Args:
            group_id: Group id

        Returns:
            True if a group was deleted, False if it did not exist
        """

        def _delete():
            try:
                with transaction.atomic():
                    # pylint: disable=no-member
                    deleted, _ = AccessGroupModel.objects.filter(id=group_id).delete()
            except ProtectedError as e:
                raise GroupInUseError(f"Group {group_id} still has members") from e
            return deleted > 0

        return await sync_to_async(_delete)()
