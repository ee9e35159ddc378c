"""
Django management command to create a principal and a session token.

Users sign up through the API; operators use this command to bootstrap
principals such as the first super-admin.
"""

from asgiref.sync import async_to_sync
from django.conf import settings
from django.core.management.base import BaseCommand, CommandError

from accounts.domain.principal import Principal
from accounts.infrastructure.models import Session
from accounts.infrastructure.repositories.django_credential_store import DjangoCredentialStore
from accounts.infrastructure.repositories.django_principal_repository import (
    DjangoPrincipalRepository,
)
from access_groups.infrastructure.repositories.django_group_repository import (
    DjangoGroupRepository,
)
from core.domain.exceptions import DomainException


class Command(BaseCommand):
    """Command to create a principal, or issue a new token for an existing one."""

    help = "Create a principal (if needed) and print a new session token"

    def add_arguments(self, parser):
        """Add command arguments."""
        parser.add_argument("username", help="Unique username")
        parser.add_argument(
            "--group",
            default=None,
            help="Group name for a new principal (defaults to DEFAULT_GROUP_NAME)",
        )
        parser.add_argument(
            "--password",
            default=None,
            help="Password for a new principal, so it can also log in through the API",
        )
        parser.add_argument(
            "--super-admin",
            action="store_true",
            help="Allow the principal to edit group permissions",
        )

    def handle(self, *args, **options):
        """Execute the command."""
        principal_repo = DjangoPrincipalRepository()
        group_repo = DjangoGroupRepository()
        group_name = options["group"] or settings.DEFAULT_GROUP_NAME

        principal = async_to_sync(principal_repo.find_by_username)(options["username"])
        if principal is None:
            group = async_to_sync(group_repo.find_by_name)(group_name)
            if group is None:
                raise CommandError(f"Group '{group_name}' does not exist")
            try:
                new_principal = Principal.create(
                    username=options["username"],
                    group_id=group.id,
                    is_super_admin=options["super_admin"],
                )
                if options["password"]:
                    principal = async_to_sync(DjangoCredentialStore().create_account)(
                        new_principal, options["password"]
                    )
                else:
                    principal = async_to_sync(principal_repo.save)(new_principal)
            except DomainException as e:
                raise CommandError(e.message) from e
            # pylint: disable=no-member
            self.stdout.write(
                self.style.SUCCESS(f"Created principal {principal.username} in group {group.name}")
            )
        else:
            self.stdout.write(f"Principal {principal.username} already exists")

        # pylint: disable=no-member
        session = Session.objects.create(principal_id=principal.id)
        # pylint: disable=protected-access
        self.stdout.write(f"Session token: {session._raw_token}")
