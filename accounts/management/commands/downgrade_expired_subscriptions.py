"""
Django management command to downgrade expired subscriptions.

Run periodically (cron) when the Celery beat schedule is not used.
"""

import logging

from asgiref.sync import async_to_sync
from django.conf import settings
from django.core.management.base import BaseCommand, CommandError

from accounts.domain.services import SubscriptionService
from accounts.infrastructure.repositories.django_principal_repository import (
    DjangoPrincipalRepository,
)
from access_groups.infrastructure.repositories.django_group_repository import (
    DjangoGroupRepository,
)
from core.domain.exceptions import GroupNotFoundError
from core.infrastructure.events import event_bus

logger = logging.getLogger(__name__)


class Command(BaseCommand):
    """Command to move expired subscribers back to the default group."""

    help = "Move principals with an expired subscription back to the default group"

    def add_arguments(self, parser):
        """Add command arguments."""
        parser.add_argument(
            "--dry-run",
            action="store_true",
            help="Dry run mode - list the principals without changing them",
        )

    def handle(self, *args, **options):
        """Execute the command."""
        dry_run = options["dry_run"]
        service = SubscriptionService(
            principal_repository=DjangoPrincipalRepository(),
            group_repository=DjangoGroupRepository(),
            default_group_name=settings.DEFAULT_GROUP_NAME,
            subscriber_group_name=settings.SUBSCRIBER_GROUP_NAME,
            event_bus=event_bus,
        )

        try:
            principals = async_to_sync(service.downgrade_expired)(dry_run=dry_run)
        except GroupNotFoundError as e:
            raise CommandError(str(e)) from e

        if dry_run:
            # pylint: disable=no-member
            self.stdout.write(self.style.WARNING("DRY RUN - No changes will be made"))
            self.stdout.write(f"Found {len(principals)} expired subscription(s)")
            for principal in principals[:10]:
                self.stdout.write(
                    f"  - {principal.username} expired at {principal.subscription_expires_at}"
                )
            return

        # pylint: disable=no-member
        self.stdout.write(
            self.style.SUCCESS(f"Downgraded {len(principals)} expired subscription(s)")
        )
