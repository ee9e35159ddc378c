"""
Django implementation of PrincipalRepository port.

This adapter converts between domain entities and Django ORM models.
"""

import uuid
from datetime import datetime
from typing import List, Optional

from asgiref.sync import sync_to_async
from django.core.exceptions import ValidationError
from django.db import transaction

from accounts.domain.principal import Principal
from accounts.infrastructure.models import Principal as PrincipalModel
from accounts.ports.principal_repository import PrincipalRepository
from access_groups.infrastructure.models import AccessGroup as AccessGroupModel
from core.domain.exceptions import GroupNotFoundError


def principal_to_domain(model: PrincipalModel) -> Principal:
    """
    Convert Django model to domain entity.

    Args:
        model: Django Principal model

    Returns:
        Principal domain entity
    """
    return Principal(
        id=model.id,
        username=model.username,
        group_id=model.group_id,
        subscription_expires_at=model.subscription_expires_at,
        is_super_admin=model.is_super_admin,
        created_at=model.created_at,
    )


class DjangoPrincipalRepository(PrincipalRepository):
    """Django ORM implementation of PrincipalRepository."""

    def _to_domain(self, model: PrincipalModel) -> Principal:
        return principal_to_domain(model)

    async def save(self, principal: Principal) -> Principal:
        """
        Save a principal entity.

        Args:
            principal: Principal entity to save

        Returns:
            Saved principal entity
        """

        def _save():
            # pylint: disable=no-member
            if not AccessGroupModel.objects.filter(id=principal.group_id).exists():
                raise GroupNotFoundError(f"Group {principal.group_id} not found")
            model, _ = PrincipalModel.objects.update_or_create(
                id=principal.id,
                defaults={
                    "username": principal.username,
                    "group_id": principal.group_id,
                    "subscription_expires_at": principal.subscription_expires_at,
                    "is_super_admin": principal.is_super_admin,
                },
            )
            return model

        model = await sync_to_async(_save)()
        return self._to_domain(model)

    async def find_by_id(self, principal_id: uuid.UUID) -> Optional[Principal]:
        """
        Find a principal by ID.

        Args:
            principal_id: Principal UUID

        Returns:
            Principal entity or None if not found
        """
        try:
            # pylint: disable=no-member
            model = await sync_to_async(PrincipalModel.objects.get)(id=principal_id)
            return self._to_domain(model)
        except (PrincipalModel.DoesNotExist, ValidationError):  # pylint: disable=no-member
            return None

    async def find_by_username(self, username: str) -> Optional[Principal]:
        """
        Find a principal by username.

        Args:
            username: Login name

        Returns:
            Principal entity or None if not found
        """
        try:
            # pylint: disable=no-member
            model = await sync_to_async(PrincipalModel.objects.get)(username=username)
            return self._to_domain(model)
        except PrincipalModel.DoesNotExist:  # pylint: disable=no-member
            return None

    async def list_all(self) -> List[Principal]:
        """
        List all principals, oldest first.

        Returns:
            List of Principal entities
        """
        # pylint: disable=no-member
        models = await sync_to_async(list)(PrincipalModel.objects.order_by("created_at"))
        return [self._to_domain(m) for m in models]

    async def set_group(self, principal_id: uuid.UUID, group_id: int) -> Optional[Principal]:
        """
        Move a principal to another group.

        Args:
            principal_id: Principal UUID
            group_id: Target group id

        Returns:
            Updated principal or None if the principal does not exist

        Raises:
            GroupNotFoundError: If the target group does not exist
        """

        def _set_group():
            with transaction.atomic():
                # pylint: disable=no-member
                if not AccessGroupModel.objects.select_for_update().filter(id=group_id).exists():
                    raise GroupNotFoundError(f"Group {group_id} not found")
                updated = PrincipalModel.objects.filter(id=principal_id).update(group_id=group_id)
                if not updated:
                    return None
                return PrincipalModel.objects.get(id=principal_id)

        model = await sync_to_async(_set_group)()
        return self._to_domain(model) if model else None

    async def count_in_group(self, group_id: int) -> int:
        """
        Count principals that belong to a group.

        Args:
            group_id: Group id

        Returns:
            Number of members
        """
        # pylint: disable=no-member
        return await sync_to_async(PrincipalModel.objects.filter(group_id=group_id).count)()

    async def find_expired_in_group(self, group_id: int, now: datetime) -> List[Principal]:
        """
        Find members of a group whose subscription ended before ``now``.

        Members without any expiry are not included.

        Args:
            group_id: Group id
            now: Reference time

        Returns:
            List of Principal entities
        """
        # pylint: disable=no-member
        queryset = PrincipalModel.objects.filter(
            group_id=group_id,
            subscription_expires_at__isnull=False,
            subscription_expires_at__lte=now,
        ).order_by("subscription_expires_at")
        models = await sync_to_async(list)(queryset)
        return [self._to_domain(m) for m in models]

    async def downgrade_if_expired(
        self,
        principal_id: uuid.UUID,
        from_group_id: int,
        to_group_id: int,
        now: datetime,
    ) -> Optional[Principal]:
        """
        Conditionally move an expired member to another group.

        A single UPDATE guarded on group and expiry, so a redemption that
        committed after the expired list was read keeps the principal in
        place.

        Args:
            principal_id: Principal UUID
            from_group_id: Group the principal must still be in
            to_group_id: Group to move it to
            now: Reference time

        Returns:
            Updated principal, or None if nothing matched
        """

        def _downgrade():
            # pylint: disable=no-member
            updated = PrincipalModel.objects.filter(
                id=principal_id,
                group_id=from_group_id,
                subscription_expires_at__isnull=False,
                subscription_expires_at__lte=now,
            ).update(group_id=to_group_id)
            if not updated:
                return None
            return PrincipalModel.objects.get(id=principal_id)

        model = await sync_to_async(_downgrade)()
        return self._to_domain(model) if model else None
