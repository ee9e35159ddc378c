"""
Celery tasks for background processing.

Periodic subscription maintenance.
"""
import logging

from asgiref.sync import async_to_sync
from django.conf import settings

from AccessKeyService.celery import app

logger = logging.getLogger(__name__)


@app.task(bind=True, max_retries=3)
def downgrade_expired_subscriptions_task(self):
    """
    Move principals whose subscription has expired back to the default group.

    Returns:
        Number of principals downgraded
    """
    from accounts.domain.services import SubscriptionService
    from accounts.infrastructure.repositories.django_principal_repository import (
        DjangoPrincipalRepository,
    )
    from access_groups.infrastructure.repositories.django_group_repository import (
        DjangoGroupRepository,
    )
    from core.infrastructure.events import event_bus

    service = SubscriptionService(
        principal_repository=DjangoPrincipalRepository(),
        group_repository=DjangoGroupRepository(),
        default_group_name=settings.DEFAULT_GROUP_NAME,
        subscriber_group_name=settings.SUBSCRIBER_GROUP_NAME,
        event_bus=event_bus,
    )
    try:
        downgraded = async_to_sync(service.downgrade_expired)()
    except Exception as exc:
        logger.error(f"Subscription downgrade failed: {exc}", exc_info=True)
        raise self.retry(exc=exc, countdown=2 ** self.request.retries)

    logger.info(f"Downgraded {len(downgraded)} expired subscription(s)")
    return len(downgraded)
