"""
KeyIssuer domain service.

Mints batches of activation keys under administrator command.
"""

import logging
from typing import Callable, Dict, List, Optional

from activation_keys.domain.activation_key import (
    MAX_NOTE_LENGTH,
    ActivationKey,
    generate_activation_secret,
    hash_secret,
    validate_duration_days,
)
from activation_keys.domain.key_store import KeyStore
from core.domain.exceptions import InvalidArgumentError, StorageFailureError

logger = logging.getLogger(__name__)

MAX_BATCH_SIZE = 100
MAX_SECRET_ATTEMPTS = 8


class KeyIssuer:
    """
    Generates unique secrets and persists them as one batch.

    Each secret is checked against every stored key and against the rest
    of the batch. Only a colliding secret is regenerated.
    """

    def __init__(
        self,
        key_store: KeyStore,
        prefix: str = "",
        secret_factory: Optional[Callable[[str], str]] = None,
        max_attempts: int = MAX_SECRET_ATTEMPTS,
    ):
        self.key_store = key_store
        self.prefix = prefix
        self.secret_factory = secret_factory or generate_activation_secret
        self.max_attempts = max_attempts

    @staticmethod
    def _validate(duration_days, count, note: Optional[str]) -> Optional[str]:
        validate_duration_days(duration_days)
        if isinstance(count, bool) or not isinstance(count, int):
            raise InvalidArgumentError("count must be an integer")
        if not 1 <= count <= MAX_BATCH_SIZE:
            raise InvalidArgumentError(f"count must be between 1 and {MAX_BATCH_SIZE}")
        if note is not None:
            note = note.strip() or None
        if note is not None and len(note) > MAX_NOTE_LENGTH:
            raise InvalidArgumentError(f"note must be at most {MAX_NOTE_LENGTH} characters")
        return note

    async def _unique_secrets(self, count: int) -> List[str]:
        # slot index -> candidate secret
        pending: Dict[int, str] = {i: self.secret_factory(self.prefix) for i in range(count)}
        accepted: Dict[int, str] = {}
        accepted_hashes = set()

        for _ in range(self.max_attempts):
            hashes = {slot: hash_secret(secret) for slot, secret in pending.items()}
            taken = await self.key_store.repository.find_existing_secret_hashes(hashes.values())

            retry = []
            for slot, secret in pending.items():
                secret_hash = hashes[slot]
                if secret_hash in taken or secret_hash in accepted_hashes:
                    retry.append(slot)
                    continue
                accepted[slot] = secret
                accepted_hashes.add(secret_hash)

            if not retry:
                return [accepted[i] for i in range(count)]
            logger.warning(f"Regenerating {len(retry)} colliding activation secret(s)")
            pending = {slot: self.secret_factory(self.prefix) for slot in retry}

        raise StorageFailureError("Could not generate unique activation secrets")

    async def generate(
        self, duration_days: int, count: int, note: Optional[str] = None
    ) -> List[ActivationKey]:
        """
        Mint ``count`` new active keys.

        Args:
            duration_days: Days each key grants (1..3650)
            count: Number of keys (1..100)
            note: Optional annotation shared by the batch

        Returns:
            The saved keys, in generation order

        Raises:
            InvalidArgumentError: If a bound is violated; nothing is written
            StorageFailureError: If the batch could not be stored; nothing is written
        """
        note = self._validate(duration_days, count, note)
        secrets_ = await self._unique_secrets(count)
        keys = [ActivationKey.create(secret, duration_days, note) for secret in secrets_]
        saved = await self.key_store.save_batch(keys)
        logger.info(f"Issued {len(saved)} activation key(s) for {duration_days} day(s)")
        return saved
