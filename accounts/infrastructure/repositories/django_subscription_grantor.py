"""
Django implementation of SubscriptionGrantor port.
"""

import logging
import uuid
from datetime import datetime
from typing import Optional

from asgiref.sync import sync_to_async
from django.conf import settings
from django.db import DatabaseError, transaction

from accounts.domain.principal import Principal
from accounts.infrastructure.models import Principal as PrincipalModel
from accounts.infrastructure.repositories.django_principal_repository import (
    principal_to_domain,
)
from accounts.ports.subscription_grantor import SubscriptionGrantor
from access_groups.infrastructure.models import AccessGroup as AccessGroupModel
from core.domain.exceptions import (
    GroupNotFoundError,
    PrincipalNotFoundError,
    StorageFailureError,
)

logger = logging.getLogger(__name__)


class DjangoSubscriptionGrantor(SubscriptionGrantor):
    """
    Extends subscriptions with a row lock on the principal.

    Runs in its own transaction, after the key transition has committed.
    """

    def __init__(
        self,
        default_group_name: Optional[str] = None,
        subscriber_group_name: Optional[str] = None,
    ):
        self.default_group_name = default_group_name or settings.DEFAULT_GROUP_NAME
        self.subscriber_group_name = subscriber_group_name or settings.SUBSCRIBER_GROUP_NAME

    def _group_id(self, name: str) -> Optional[int]:
        # pylint: disable=no-member
        return AccessGroupModel.objects.filter(name=name).values_list("id", flat=True).first()

    async def grant(self, principal_id: uuid.UUID, days: int, now: datetime) -> Principal:
        """
        Extend a principal's subscription.

        Args:
            principal_id: Principal UUID
            days: Days to add
            now: Redemption time

        Returns:
            Updated principal
        """

        def _grant():
            with transaction.atomic():
                try:
                    # pylint: disable=no-member
                    model = PrincipalModel.objects.select_for_update().get(id=principal_id)
                except PrincipalModel.DoesNotExist as e:  # pylint: disable=no-member
                    raise PrincipalNotFoundError(f"Principal {principal_id} not found") from e

                current = principal_to_domain(model)
                model.subscription_expires_at = current.extended_expiry(days, now)
                update_fields = ["subscription_expires_at"]

                if model.group_id == self._group_id(self.default_group_name):
                    subscriber_id = self._group_id(self.subscriber_group_name)
                    if subscriber_id is None:
                        raise GroupNotFoundError(
                            f"Subscriber group '{self.subscriber_group_name}' not found"
                        )
                    model.group_id = subscriber_id
                    update_fields.append("group")
                    logger.info(
                        f"Promoting principal {principal_id} to group "
                        f"{self.subscriber_group_name}"
                    )

                model.save(update_fields=update_fields)
                return model

        try:
            model = await sync_to_async(_grant)()
        except DatabaseError as e:
            raise StorageFailureError(f"Could not extend subscription: {e}") from e
        return principal_to_domain(model)
