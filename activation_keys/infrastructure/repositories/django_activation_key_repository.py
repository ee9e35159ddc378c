"""
Django implementation of ActivationKeyRepository port.

This adapter converts between domain entities and Django ORM models.
"""

import uuid
from datetime import datetime
from typing import Dict, Iterable, List, Optional, Set

from asgiref.sync import sync_to_async
from django.db import DatabaseError, transaction
from django.db.models import Count

from activation_keys.domain.activation_key import ActivationKey
from activation_keys.infrastructure.models import ActivationKey as ActivationKeyModel
from activation_keys.ports.activation_key_repository import ActivationKeyRepository
from core.domain.exceptions import InvalidArgumentError, StorageFailureError
from core.domain.value_objects import KeyState


class DjangoActivationKeyRepository(ActivationKeyRepository):
    """
    Django ORM implementation of ActivationKeyRepository.

    Transitions are a single ``UPDATE ... WHERE state = 'active'``, so two
    racing requests cannot both move the same key.
    """

    def _to_domain(self, model: ActivationKeyModel) -> ActivationKey:
        """
        Convert Django model to domain entity.

        Args:
            model: Django ActivationKey model

        Returns:
            ActivationKey domain entity
        """
        return ActivationKey(
            id=model.id,
            secret=model.secret,
            secret_hash=model.secret_hash,
            duration_days=model.duration_days,
            note=model.note,
            created_at=model.created_at,
            state=KeyState(model.state),
            used_by_principal_id=model.used_by_principal_id,
            used_at=model.used_at,
            revoked_at=model.revoked_at,
        )

    async def save_batch(self, keys: List[ActivationKey]) -> List[ActivationKey]:
        """
        Insert a batch of new keys in one transaction.

        Args:
            keys: Unsaved ActivationKey entities

        Returns:
            Saved keys in the order given
        """

        def _save():
            with transaction.atomic():
                return [
                    # pylint: disable=no-member
                    ActivationKeyModel.objects.create(
                        secret=key.secret,
                        secret_hash=key.secret_hash,
                        duration_days=key.duration_days,
                        note=key.note,
                        state=key.state.value,
                        created_at=key.created_at,
                    )
                    for key in keys
                ]

        try:
            models = await sync_to_async(_save)()
        except DatabaseError as e:
            raise StorageFailureError(f"Could not store activation keys: {e}") from e
        return [self._to_domain(m) for m in models]

    async def find_by_id(self, key_id: int) -> Optional[ActivationKey]:
        """
        Find a key by ID.

        Args:
            key_id: Key id

        Returns:
            ActivationKey entity or None if not found
        """
        try:
            # pylint: disable=no-member
            model = await sync_to_async(ActivationKeyModel.objects.get)(id=key_id)
            return self._to_domain(model)
        except ActivationKeyModel.DoesNotExist:  # pylint: disable=no-member
            return None

    async def find_by_secret_hash(self, secret_hash: str) -> Optional[ActivationKey]:
        """
        Find a key by the hash of its secret.

        Args:
            secret_hash: SHA-256 hex digest

        Returns:
            ActivationKey entity or None if not found
        """
        try:
            # pylint: disable=no-member
            model = await sync_to_async(ActivationKeyModel.objects.get)(secret_hash=secret_hash)
            return self._to_domain(model)
        except ActivationKeyModel.DoesNotExist:  # pylint: disable=no-member
            return None

    async def find_existing_secret_hashes(self, secret_hashes: Iterable[str]) -> Set[str]:
        """Return which of the given hashes are already stored."""
        hashes = list(secret_hashes)
        # pylint: disable=no-member
        queryset = ActivationKeyModel.objects.filter(secret_hash__in=hashes).values_list(
            "secret_hash", flat=True
        )
        return set(await sync_to_async(list)(queryset))

    async def list_recent(self, limit: int) -> List[ActivationKey]:
        """
        List keys newest first.

        Args:
            limit: Maximum number of keys

        Returns:
            List of ActivationKey entities
        """
        # pylint: disable=no-member
        queryset = ActivationKeyModel.objects.order_by("-created_at", "-id")[:limit]
        models = await sync_to_async(list)(queryset)
        return [self._to_domain(m) for m in models]

    async def transition_from_active(
        self,
        key_id: int,
        target: KeyState,
        at: datetime,
        principal_id: Optional[uuid.UUID] = None,
    ) -> Optional[ActivationKey]:
        """
        Conditionally move a key out of ``active``.

        Args:
            key_id: Key id
            target: KeyState.USED or KeyState.REVOKED
            at: Transition time
            principal_id: Redeeming principal, for KeyState.USED

        Returns:
            Updated key, or None when no active key with that id exists
        """
        if target is KeyState.USED:
            if principal_id is None:
                raise InvalidArgumentError("A used key needs the redeeming principal")
            changes = {"state": target.value, "used_at": at, "used_by_principal_id": principal_id}
        elif target is KeyState.REVOKED:
            changes = {"state": target.value, "revoked_at": at}
        else:
            raise InvalidArgumentError(f"Cannot transition a key to {target}")

        def _transition():
            # pylint: disable=no-member
            updated = ActivationKeyModel.objects.filter(
                id=key_id, state=KeyState.ACTIVE.value
            ).update(**changes)
            if not updated:
                return None
            return ActivationKeyModel.objects.get(id=key_id)

        try:
            model = await sync_to_async(_transition)()
        except DatabaseError as e:
            raise StorageFailureError(f"Could not update activation key {key_id}: {e}") from e
        return self._to_domain(model) if model else None

    async def count_by_state(self) -> Dict[KeyState, int]:
        """
        Count keys per state.

        Returns:
            Mapping with an entry for every KeyState
        """
        # pylint: disable=no-member
        queryset = ActivationKeyModel.objects.values("state").annotate(n=Count("id"))
        rows = await sync_to_async(list)(queryset.order_by())
        counts = {state: 0 for state in KeyState}
        for row in rows:
            counts[KeyState(row["state"])] = row["n"]
        return counts
