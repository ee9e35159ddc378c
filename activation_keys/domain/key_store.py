"""
KeyStore domain service.

Durable record of activation keys and their lifecycle state, over an
injected ActivationKeyRepository.
"""

import logging
import uuid
from dataclasses import dataclass
from datetime import datetime
from typing import List

from activation_keys.domain.activation_key import ActivationKey
from activation_keys.ports.activation_key_repository import ActivationKeyRepository
from core.domain.exceptions import (
    ActivationKeyNotFoundError,
    AlreadyRevokedError,
    InvalidArgumentError,
    KeyAlreadyConsumedError,
    KeyRevokedError,
    StorageFailureError,
)
from core.domain.value_objects import KeyState

logger = logging.getLogger(__name__)

DEFAULT_LIST_LIMIT = 500
MAX_LIST_LIMIT = 2000


@dataclass(frozen=True)
class KeyStats:
    """Key counts per state."""

    total: int
    active: int
    used: int
    revoked: int


class KeyStore:
    """
    Reads keys and applies the two terminal transitions.

    A transition that loses a race re-reads the key and fails according
    to the state the winner left behind.
    """

    def __init__(self, repository: ActivationKeyRepository):
        self.repository = repository

    async def get(self, key_id: int) -> ActivationKey:
        """
        Get a key by id.

        Raises:
            ActivationKeyNotFoundError: If no key has that id
        """
        key = await self.repository.find_by_id(key_id)
        if key is None:
            raise ActivationKeyNotFoundError(f"Activation key {key_id} not found")
        return key

    async def list(self, limit: int = DEFAULT_LIST_LIMIT) -> List[ActivationKey]:
        """
        List keys newest first.

        ``limit`` above the maximum is clamped; below 1 is rejected.
        """
        if isinstance(limit, bool) or not isinstance(limit, int) or limit < 1:
            raise InvalidArgumentError("limit must be a positive integer")
        return await self.repository.list_recent(min(limit, MAX_LIST_LIMIT))

    async def save_batch(self, keys: List[ActivationKey]) -> List[ActivationKey]:
        """Persist a batch of new keys, all or nothing."""
        return await self.repository.save_batch(keys)

    async def mark_used(
        self, key_id: int, principal_id: uuid.UUID, at: datetime
    ) -> ActivationKey:
        """
        Transition a key from active to used.

        Raises:
            ActivationKeyNotFoundError: If no key has that id
            KeyAlreadyConsumedError: If the key is already used
            KeyRevokedError: If the key is revoked
        """
        updated = await self.repository.transition_from_active(
            key_id, KeyState.USED, at, principal_id=principal_id
        )
        if updated is not None:
            logger.info(f"Activation key {key_id} used by {principal_id}")
            return updated

        current = await self.get(key_id)
        if current.state is KeyState.USED:
            raise KeyAlreadyConsumedError(f"Activation key {key_id} has already been used")
        if current.state is KeyState.REVOKED:
            raise KeyRevokedError(f"Activation key {key_id} has been revoked")
        raise StorageFailureError(f"Activation key {key_id} could not be marked used")

    async def revoke(self, key_id: int, at: datetime) -> ActivationKey:
        """
        Transition a key from active to revoked.

        Raises:
            ActivationKeyNotFoundError: If no key has that id
            KeyAlreadyConsumedError: If the key is already used
            AlreadyRevokedError: If the key is already revoked
        """
        updated = await self.repository.transition_from_active(key_id, KeyState.REVOKED, at)
        if updated is not None:
            logger.info(f"Activation key {key_id} revoked")
            return updated

        current = await self.get(key_id)
        if current.state is KeyState.USED:
            raise KeyAlreadyConsumedError(
                f"Activation key {key_id} has already been used and cannot be revoked"
            )
        if current.state is KeyState.REVOKED:
            raise AlreadyRevokedError(f"Activation key {key_id} is already revoked")
        raise StorageFailureError(f"Activation key {key_id} could not be revoked")

    async def stats(self) -> KeyStats:
        """Count keys per state."""
        counts = await self.repository.count_by_state()
        active = counts.get(KeyState.ACTIVE, 0)
        used = counts.get(KeyState.USED, 0)
        revoked = counts.get(KeyState.REVOKED, 0)
        return KeyStats(total=active + used + revoked, active=active, used=used, revoked=revoked)
