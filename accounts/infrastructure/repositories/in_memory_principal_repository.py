"""
In-memory implementations of the principal ports.

Used as test doubles for domain services.
"""

import secrets
import threading
import uuid
from datetime import datetime
from typing import Dict, List, Optional

from django.contrib.auth.hashers import check_password, make_password

from accounts.domain.principal import Principal
from accounts.ports.credential_store import CredentialStore
from accounts.ports.principal_repository import PrincipalRepository
from accounts.ports.subscription_grantor import SubscriptionGrantor
from access_groups.ports.group_repository import GroupRepository
from core.domain.exceptions import (
    GroupNotFoundError,
    PrincipalNotFoundError,
    UsernameTakenError,
)


class InMemoryPrincipalRepository(PrincipalRepository):
    """
    Dictionary-backed principal repository.

    When a group repository is given, group references are checked the
    way the database foreign key checks them.
    """

    def __init__(self, group_repository: Optional[GroupRepository] = None):
        self._principals: Dict[uuid.UUID, Principal] = {}
        self.group_repository = group_repository
        self.lock = threading.Lock()

    async def _require_group(self, group_id: int) -> None:
        if self.group_repository and not await self.group_repository.find_by_id(group_id):
            raise GroupNotFoundError(f"Group {group_id} not found")

    def count_in_group_now(self, group_id: int) -> int:
        """Synchronous member count, usable as a group repository member counter."""
        return sum(1 for p in self._principals.values() if p.group_id == group_id)

    async def save(self, principal: Principal) -> Principal:
        await self._require_group(principal.group_id)
        with self.lock:
            self._principals[principal.id] = principal
        return principal

    async def find_by_id(self, principal_id: uuid.UUID) -> Optional[Principal]:
        return self._principals.get(principal_id)

    async def find_by_username(self, username: str) -> Optional[Principal]:
        for principal in self._principals.values():
            if principal.username == username:
                return principal
        return None

    async def list_all(self) -> List[Principal]:
        return sorted(self._principals.values(), key=lambda p: p.created_at)

    async def set_group(self, principal_id: uuid.UUID, group_id: int) -> Optional[Principal]:
        await self._require_group(group_id)
        with self.lock:
            principal = self._principals.get(principal_id)
            if principal is None:
                return None
            updated = principal.in_group(group_id)
            self._principals[principal_id] = updated
            return updated

    async def count_in_group(self, group_id: int) -> int:
        return self.count_in_group_now(group_id)

    async def find_expired_in_group(self, group_id: int, now: datetime) -> List[Principal]:
        return [
            p
            for p in self._principals.values()
            if p.group_id == group_id
            and p.subscription_expires_at is not None
            and p.subscription_expires_at <= now
        ]

    async def downgrade_if_expired(
        self,
        principal_id: uuid.UUID,
        from_group_id: int,
        to_group_id: int,
        now: datetime,
    ) -> Optional[Principal]:
        with self.lock:
            principal = self._principals.get(principal_id)
            if (
                principal is None
                or principal.group_id != from_group_id
                or principal.subscription_expires_at is None
                or principal.subscription_expires_at > now
            ):
                return None
            updated = principal.in_group(to_group_id)
            self._principals[principal_id] = updated
            return updated


class InMemorySubscriptionGrantor(SubscriptionGrantor):
    """Grantor over an InMemoryPrincipalRepository."""

    def __init__(
        self,
        principal_repository: InMemoryPrincipalRepository,
        default_group_id: Optional[int] = None,
        subscriber_group_id: Optional[int] = None,
    ):
        self.principal_repository = principal_repository
        self.default_group_id = default_group_id
        self.subscriber_group_id = subscriber_group_id

    async def grant(self, principal_id: uuid.UUID, days: int, now: datetime) -> Principal:
        repo = self.principal_repository
        with repo.lock:
            principal = repo._principals.get(principal_id)  # pylint: disable=protected-access
            if principal is None:
                raise PrincipalNotFoundError(f"Principal {principal_id} not found")
            group_id = principal.group_id
            if self.default_group_id is not None and group_id == self.default_group_id:
                group_id = self.subscriber_group_id
            updated = Principal(
                id=principal.id,
                username=principal.username,
                group_id=group_id,
                subscription_expires_at=principal.extended_expiry(days, now),
                is_super_admin=principal.is_super_admin,
                created_at=principal.created_at,
            )
            repo._principals[principal_id] = updated  # pylint: disable=protected-access
            return updated


class InMemoryCredentialStore(CredentialStore):
    """Credential store over an InMemoryPrincipalRepository."""

    def __init__(self, principal_repository: InMemoryPrincipalRepository):
        self.principal_repository = principal_repository
        self.passwords: Dict[uuid.UUID, str] = {}
        self.sessions: Dict[str, uuid.UUID] = {}

    async def create_account(self, principal: Principal, raw_password: str) -> Principal:
        if await self.principal_repository.find_by_username(principal.username):
            raise UsernameTakenError(f"Username '{principal.username}' is already taken")
        saved = await self.principal_repository.save(principal)
        self.passwords[saved.id] = make_password(raw_password)
        return saved

    async def authenticate(self, username: str, raw_password: str) -> Optional[Principal]:
        principal = await self.principal_repository.find_by_username(username)
        if principal is None or principal.id not in self.passwords:
            return None
        if not check_password(raw_password, self.passwords[principal.id]):
            return None
        return principal

    async def open_session(self, principal_id: uuid.UUID) -> str:
        token = secrets.token_urlsafe(32)
        self.sessions[token] = principal_id
        return token

    async def close_session(self, raw_token: str) -> bool:
        return self.sessions.pop(raw_token, None) is not None
