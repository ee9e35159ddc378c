"""
Activation key repository port (interface).

This defines the contract for activation key persistence operations.
Implementations are in the infrastructure layer.
"""
import uuid
from abc import ABC, abstractmethod
from datetime import datetime
from typing import Dict, Iterable, List, Optional, Set

from activation_keys.domain.activation_key import ActivationKey
from core.domain.value_objects import KeyState


class ActivationKeyRepository(ABC):
    """
    Abstract repository for ActivationKey entities.

    State transitions are conditional: they apply only while the stored
    key is still active, in one atomic step.
    """

    @abstractmethod
    async def save_batch(self, keys: List[ActivationKey]) -> List[ActivationKey]:
        """
        Insert a batch of new keys atomically.

        Args:
            keys: Unsaved ActivationKey entities

        Returns:
            Saved keys, with ids, in the order given

        Raises:
            StorageFailureError: If any key could not be written; nothing is kept
        """
        pass

    @abstractmethod
    async def find_by_id(self, key_id: int) -> Optional[ActivationKey]:
        """
        Find a key by ID.

        Args:
            key_id: Key id

        Returns:
            ActivationKey entity or None if not found
        """
        pass

    @abstractmethod
    async def find_by_secret_hash(self, secret_hash: str) -> Optional[ActivationKey]:
        """
        Find a key by the hash of its secret.

        Args:
            secret_hash: SHA-256 hex digest of the normalized secret

        Returns:
            ActivationKey entity or None if not found
        """
        pass

    @abstractmethod
    async def find_existing_secret_hashes(self, secret_hashes: Iterable[str]) -> Set[str]:
        """
        Return which of the given hashes already belong to a stored key.

        Keys in every state count, so secrets are never reused.
        """
        pass

    @abstractmethod
    async def list_recent(self, limit: int) -> List[ActivationKey]:
        """
        List keys newest first.

        Args:
            limit: Maximum number of keys

        Returns:
            List of ActivationKey entities
        """
        pass

    @abstractmethod
    async def transition_from_active(
        self,
        key_id: int,
        target: KeyState,
        at: datetime,
        principal_id: Optional[uuid.UUID] = None,
    ) -> Optional[ActivationKey]:
        """
        Move a key out of ``active`` if, and only if, it is still active.

        Args:
            key_id: Key id
            target: KeyState.USED or KeyState.REVOKED
            at: Transition time
            principal_id: Redeeming principal, for KeyState.USED

        Returns:
            Updated key, or None when no active key with that id exists
        """
        pass

    @abstractmethod
    async def count_by_state(self) -> Dict[KeyState, int]:
        """
        Count keys per state.

        Returns:
            Mapping with an entry for every KeyState
        """
        pass
