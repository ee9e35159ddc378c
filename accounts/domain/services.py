"""
Account domain services.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import List, Optional

from accounts.domain.events import PrincipalGroupChanged, PrincipalRegistered
from accounts.domain.principal import Principal
from accounts.ports.credential_store import CredentialStore
from accounts.ports.principal_repository import PrincipalRepository
from access_groups.ports.group_repository import GroupRepository
from core.domain.events import EventBus
from core.domain.exceptions import (
    GroupNotFoundError,
    InvalidArgumentError,
    InvalidCredentialsError,
)

logger = logging.getLogger(__name__)


class SubscriptionService:
    """
    Moves principals whose subscription ran out back to the default group.

    Only members of the subscriber group are touched; administrators and
    custom groups keep their membership when their subscription ends.
    """

    def __init__(
        self,
        principal_repository: PrincipalRepository,
        group_repository: GroupRepository,
        default_group_name: str,
        subscriber_group_name: str,
        event_bus: Optional[EventBus] = None,
    ):
        self.principal_repository = principal_repository
        self.group_repository = group_repository
        self.default_group_name = default_group_name
        self.subscriber_group_name = subscriber_group_name
        self.event_bus = event_bus

    async def downgrade_expired(
        self, now: Optional[datetime] = None, dry_run: bool = False
    ) -> List[Principal]:
        """
        Downgrade expired subscribers.

        Args:
            now: Reference time, defaults to the current time
            dry_run: Report the principals without changing them

        Returns:
            The principals that were (or would be) downgraded

        Raises:
            GroupNotFoundError: If the default or subscriber group is missing
        """
        now = now or datetime.now(timezone.utc)
        default_group = await self.group_repository.find_by_name(self.default_group_name)
        if default_group is None:
            raise GroupNotFoundError(f"Default group '{self.default_group_name}' not found")
        subscriber_group = await self.group_repository.find_by_name(self.subscriber_group_name)
        if subscriber_group is None:
            raise GroupNotFoundError(
                f"Subscriber group '{self.subscriber_group_name}' not found"
            )

        expired = await self.principal_repository.find_expired_in_group(subscriber_group.id, now)
        if dry_run:
            return expired

        downgraded = []
        for principal in expired:
            updated = await self.principal_repository.downgrade_if_expired(
                principal.id, subscriber_group.id, default_group.id, now
            )
            if updated is None:
                logger.info(
                    f"Skipped downgrade of {principal.username}: "
                    f"subscription renewed or group changed"
                )
                continue
            downgraded.append(updated)
            logger.info(
                f"Subscription of {principal.username} expired at "
                f"{principal.subscription_expires_at}; moved to group {default_group.name}"
            )
            if self.event_bus:
                await self.event_bus.publish(
                    PrincipalGroupChanged(
                        principal_id=principal.id,
                        previous_group_id=subscriber_group.id,
                        group_id=default_group.id,
                        reason="subscription_expired",
                    )
                )
        return downgraded


MIN_USERNAME_LENGTH = 2
MIN_PASSWORD_LENGTH = 4


@dataclass(frozen=True)
class SignedIn:
    """A principal together with a freshly opened session token."""

    principal: Principal
    token: str


class AccountService:
    """
    Self-service sign-up and sign-in.

    New principals always start in the default group. Signing in opens a
    new bearer session; an expired subscriber is moved back to the
    default group first, as the scheduled downgrade would.
    """

    def __init__(
        self,
        principal_repository: PrincipalRepository,
        group_repository: GroupRepository,
        credential_store: CredentialStore,
        default_group_name: str,
        subscriber_group_name: str,
        event_bus: Optional[EventBus] = None,
    ):
        self.principal_repository = principal_repository
        self.group_repository = group_repository
        self.credential_store = credential_store
        self.default_group_name = default_group_name
        self.subscriber_group_name = subscriber_group_name
        self.event_bus = event_bus

    async def register(self, username: str, password: str) -> SignedIn:
        """
        Create a principal in the default group and sign it in.

        Raises:
            InvalidArgumentError: If the username or password is too short
            UsernameTakenError: If the username is already used
            GroupNotFoundError: If the default group is missing
        """
        username = (username or "").strip()
        if len(username) < MIN_USERNAME_LENGTH:
            raise InvalidArgumentError(
                f"Username must be at least {MIN_USERNAME_LENGTH} characters"
            )
        if not password or len(password) < MIN_PASSWORD_LENGTH:
            raise InvalidArgumentError(
                f"Password must be at least {MIN_PASSWORD_LENGTH} characters"
            )

        default_group = await self.group_repository.find_by_name(self.default_group_name)
        if default_group is None:
            raise GroupNotFoundError(f"Default group '{self.default_group_name}' not found")

        principal = await self.credential_store.create_account(
            Principal.create(username, group_id=default_group.id), password
        )
        token = await self.credential_store.open_session(principal.id)
        logger.info(f"Registered principal {principal.username}")

        if self.event_bus:
            await self.event_bus.publish(
                PrincipalRegistered(
                    principal_id=principal.id,
                    username=principal.username,
                    group_id=principal.group_id,
                )
            )
        return SignedIn(principal=principal, token=token)

    async def login(self, username: str, password: str) -> SignedIn:
        """
        Check credentials and open a new session.

        Raises:
            InvalidCredentialsError: If the pair does not match, with the
                same message for unknown usernames and wrong passwords
        """
        principal = await self.credential_store.authenticate((username or "").strip(), password)
        if principal is None:
            logger.warning(f"Failed login for {username!r}")
            raise InvalidCredentialsError()

        principal = await self._downgrade_if_expired(principal)
        token = await self.credential_store.open_session(principal.id)
        return SignedIn(principal=principal, token=token)

    async def logout(self, token: str) -> bool:
        """Invalidate a session token. Unknown tokens are ignored."""
        return await self.credential_store.close_session(token)

    async def _downgrade_if_expired(self, principal: Principal) -> Principal:
        now = datetime.now(timezone.utc)
        if principal.has_active_subscription(now):
            return principal
        subscriber_group = await self.group_repository.find_by_name(self.subscriber_group_name)
        default_group = await self.group_repository.find_by_name(self.default_group_name)
        if subscriber_group is None or default_group is None:
            return principal

        updated = await self.principal_repository.downgrade_if_expired(
            principal.id, subscriber_group.id, default_group.id, now
        )
        if updated is None:
            return principal
        if self.event_bus:
            await self.event_bus.publish(
                PrincipalGroupChanged(
                    principal_id=principal.id,
                    previous_group_id=subscriber_group.id,
                    group_id=default_group.id,
                    reason="subscription_expired",
                )
            )
        return updated
