"""
In-memory implementation of ActivationKeyRepository port.

The check and the set of a transition happen under one lock, which gives
the same at-most-once guarantee as the conditional UPDATE.
"""

import threading
import uuid
from datetime import datetime
from itertools import count
from typing import Dict, Iterable, List, Optional, Set

from activation_keys.domain.activation_key import ActivationKey
from activation_keys.ports.activation_key_repository import ActivationKeyRepository
from core.domain.exceptions import InvalidArgumentError, StorageFailureError
from core.domain.value_objects import KeyState


class InMemoryActivationKeyRepository(ActivationKeyRepository):
    """Dictionary-backed activation key repository."""

    def __init__(self):
        self._keys: Dict[int, ActivationKey] = {}
        self._ids = count(1)
        self._lock = threading.Lock()

    async def save_batch(self, keys: List[ActivationKey]) -> List[ActivationKey]:
        with self._lock:
            stored_hashes = {k.secret_hash for k in self._keys.values()}
            batch_hashes = [k.secret_hash for k in keys]
            if len(set(batch_hashes)) != len(batch_hashes) or stored_hashes & set(batch_hashes):
                raise StorageFailureError("Duplicate activation key secret")
            saved = []
            for key in keys:
                stored = ActivationKey(
                    id=next(self._ids),
                    secret=key.secret,
                    secret_hash=key.secret_hash,
                    duration_days=key.duration_days,
                    note=key.note,
                    created_at=key.created_at,
                    state=key.state,
                )
                saved.append(stored)
            self._keys.update({k.id: k for k in saved})
            return saved

    async def find_by_id(self, key_id: int) -> Optional[ActivationKey]:
        return self._keys.get(key_id)

    async def find_by_secret_hash(self, secret_hash: str) -> Optional[ActivationKey]:
        for key in self._keys.values():
            if key.secret_hash == secret_hash:
                return key
        return None

    async def find_existing_secret_hashes(self, secret_hashes: Iterable[str]) -> Set[str]:
        stored = {k.secret_hash for k in self._keys.values()}
        return stored & set(secret_hashes)

    async def list_recent(self, limit: int) -> List[ActivationKey]:
        ordered = sorted(self._keys.values(), key=lambda k: (k.created_at, k.id), reverse=True)
        return ordered[:limit]

    async def transition_from_active(
        self,
        key_id: int,
        target: KeyState,
        at: datetime,
        principal_id: Optional[uuid.UUID] = None,
    ) -> Optional[ActivationKey]:
        with self._lock:
            key = self._keys.get(key_id)
            if key is None or key.state is not KeyState.ACTIVE:
                return None
            if target is KeyState.USED:
                if principal_id is None:
                    raise InvalidArgumentError("A used key needs the redeeming principal")
                updated = key.mark_used(principal_id, at)
            elif target is KeyState.REVOKED:
                updated = key.revoke(at)
            else:
                raise InvalidArgumentError(f"Cannot transition a key to {target}")
            self._keys[key_id] = updated
            return updated

    async def count_by_state(self) -> Dict[KeyState, int]:
        counts = {state: 0 for state in KeyState}
        for key in self._keys.values():
            counts[key.state] += 1
        return counts
