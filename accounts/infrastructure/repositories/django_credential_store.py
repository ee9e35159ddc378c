"""
Django implementation of CredentialStore port.

Passwords go through Django's configured password hashers.
"""

import logging
import uuid
from typing import Optional

from asgiref.sync import sync_to_async
from django.contrib.auth.hashers import check_password, make_password
from django.db import IntegrityError, transaction

from accounts.domain.principal import Principal
from accounts.infrastructure.models import Principal as PrincipalModel
from accounts.infrastructure.models import Session
from accounts.infrastructure.repositories.django_principal_repository import (
    principal_to_domain,
)
from accounts.ports.credential_store import CredentialStore
from access_groups.infrastructure.models import AccessGroup as AccessGroupModel
from core.domain.exceptions import GroupNotFoundError, UsernameTakenError

logger = logging.getLogger(__name__)


class DjangoCredentialStore(CredentialStore):
    """Django ORM implementation of CredentialStore."""

    async def create_account(self, principal: Principal, raw_password: str) -> Principal:
        """
        Insert a principal with a hashed password.

        Args:
            principal: Unsaved Principal entity
            raw_password: Password as typed by the user

        Returns:
            Saved principal

        Raises:
            UsernameTakenError: If the username is already used
            GroupNotFoundError: If the group does not exist
        """

        def _create():
            # pylint: disable=no-member
            if not AccessGroupModel.objects.filter(id=principal.group_id).exists():
                raise GroupNotFoundError(f"Group {principal.group_id} not found")
            try:
                with transaction.atomic():
                    return PrincipalModel.objects.create(
                        id=principal.id,
                        username=principal.username,
                        password=make_password(raw_password),
                        group_id=principal.group_id,
                        subscription_expires_at=principal.subscription_expires_at,
                        is_super_admin=principal.is_super_admin,
                    )
            except IntegrityError as e:
                raise UsernameTakenError(
                    f"Username '{principal.username}' is already taken"
                ) from e

        model = await sync_to_async(_create)()
        return principal_to_domain(model)

    async def authenticate(self, username: str, raw_password: str) -> Optional[Principal]:
        """
        Check a username and password.

        Principals without a password (created by an operator) never match.
        """

        def _authenticate():
            # pylint: disable=no-member
            model = PrincipalModel.objects.filter(username=username).first()
            if model is None or not model.password:
                # unknown usernames still pay one hash
                make_password(raw_password)
                return None
            if not check_password(raw_password, model.password):
                return None
            return model

        model = await sync_to_async(_authenticate)()
        return principal_to_domain(model) if model else None

    async def open_session(self, principal_id: uuid.UUID) -> str:
        """
        Issue a new bearer session.

        Returns:
            The raw session token
        """
        # pylint: disable=no-member
        session = await sync_to_async(Session.objects.create)(principal_id=principal_id)
        return session._raw_token  # pylint: disable=protected-access

    async def close_session(self, raw_token: str) -> bool:
        """
        Delete the session for a raw token.

        Returns:
            True if a session was deleted
        """
        # pylint: disable=no-member
        queryset = Session.objects.filter(token_hash=Session.hash_token(raw_token))
        deleted, _ = await sync_to_async(queryset.delete)()
        return deleted > 0
