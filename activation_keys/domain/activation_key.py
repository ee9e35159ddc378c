"""
ActivationKey domain entity.

A key moves from ``active`` to exactly one terminal state, ``used`` or
``revoked``, and never changes again.
"""

import hashlib
import secrets
import string
import uuid
from dataclasses import dataclass, replace
from datetime import datetime, timezone
from typing import Callable, Optional

from core.domain.exceptions import (
    AlreadyRevokedError,
    InvalidArgumentError,
    KeyAlreadyConsumedError,
    KeyRevokedError,
)
from core.domain.value_objects import KeyState

MIN_DURATION_DAYS = 1
MAX_DURATION_DAYS = 3650
MAX_NOTE_LENGTH = 500

SECRET_ALPHABET = string.ascii_uppercase + string.digits
SECRET_GROUPS = 4
SECRET_GROUP_LENGTH = 4


def generate_activation_secret(
    prefix: str, choice: Callable[[str], str] = secrets.choice
) -> str:
    """
    Generate a random activation secret.

    Format: PREFIX-XXXX-XXXX-XXXX-XXXX, drawn from A-Z and 0-9 with a
    cryptographically secure source.

    Args:
        prefix: Leading segment, e.g. "SIG"
        choice: Random choice function

    Returns:
        Secret string
    """
    parts = [
        "".join(choice(SECRET_ALPHABET) for _ in range(SECRET_GROUP_LENGTH))
        for _ in range(SECRET_GROUPS)
    ]
    if prefix:
        parts.insert(0, prefix.upper())
    return "-".join(parts)


def normalize_secret(raw: Optional[str]) -> str:
    """Trim and upper-case a presented secret."""
    return (raw or "").strip().upper()


def hash_secret(secret: str) -> str:
    """SHA-256 hex digest of a normalized secret, used for lookups."""
    return hashlib.sha256(normalize_secret(secret).encode()).hexdigest()


def validate_duration_days(duration_days) -> int:
    """
    Check the duration bounds.

    Raises:
        InvalidArgumentError: If not an integer in 1..3650
    """
    if isinstance(duration_days, bool) or not isinstance(duration_days, int):
        raise InvalidArgumentError("duration_days must be an integer")
    if not MIN_DURATION_DAYS <= duration_days <= MAX_DURATION_DAYS:
        raise InvalidArgumentError(
            f"duration_days must be between {MIN_DURATION_DAYS} and {MAX_DURATION_DAYS}"
        )
    return duration_days


@dataclass(frozen=True)
class ActivationKey:
    """
    ActivationKey domain entity.

    ``state`` is authoritative. The timestamps record when the terminal
    transition happened and must agree with it.
    """

    id: Optional[int]
    secret: str
    secret_hash: str
    duration_days: int
    note: Optional[str]
    created_at: datetime
    state: KeyState
    used_by_principal_id: Optional[uuid.UUID] = None
    used_at: Optional[datetime] = None
    revoked_at: Optional[datetime] = None

    def __post_init__(self):
        """Validate activation key entity."""
        if not self.secret:
            raise InvalidArgumentError("Secret cannot be empty")
        validate_duration_days(self.duration_days)
        if self.note is not None and len(self.note) > MAX_NOTE_LENGTH:
            raise InvalidArgumentError(f"Note must be at most {MAX_NOTE_LENGTH} characters")
        try:
            derived = KeyState.from_timestamps(self.used_at, self.revoked_at)
        except ValueError as e:
            raise InvalidArgumentError(str(e)) from e
        if derived is not self.state:
            raise InvalidArgumentError(
                f"Key state {self.state} does not match its timestamps ({derived})"
            )
        if (self.used_by_principal_id is None) != (self.used_at is None):
            raise InvalidArgumentError("used_by_principal_id and used_at must be set together")

    @classmethod
    def create(
        cls,
        secret: str,
        duration_days: int,
        note: Optional[str] = None,
        created_at: Optional[datetime] = None,
    ) -> "ActivationKey":
        """
        Create a new, unsaved active key.

        Args:
            secret: Generated secret
            duration_days: Days granted on redemption
            note: Optional annotation
            created_at: Creation time, defaults to now

        Returns:
            ActivationKey entity instance
        """
        secret = normalize_secret(secret)
        return cls(
            id=None,
            secret=secret,
            secret_hash=hash_secret(secret),
            duration_days=duration_days,
            note=note or None,
            created_at=created_at or datetime.now(timezone.utc),
            state=KeyState.ACTIVE,
        )

    def verify_secret(self, raw: str) -> bool:
        """Constant-time comparison of the stored secret with a presented one."""
        return secrets.compare_digest(self.secret, normalize_secret(raw))

    def mark_used(self, principal_id: uuid.UUID, at: datetime) -> "ActivationKey":
        """
        Transition active -> used.

        Raises:
            KeyAlreadyConsumedError: If the key was already used
            KeyRevokedError: If the key was revoked
        """
        if self.state is KeyState.USED:
            raise KeyAlreadyConsumedError(f"Activation key {self.id} has already been used")
        if self.state is KeyState.REVOKED:
            raise KeyRevokedError(f"Activation key {self.id} has been revoked")
        return replace(
            self, state=KeyState.USED, used_by_principal_id=principal_id, used_at=at
        )

    def revoke(self, at: datetime) -> "ActivationKey":
        """
        Transition active -> revoked.

        Raises:
            KeyAlreadyConsumedError: If the key was already used
            AlreadyRevokedError: If the key was already revoked
        """
        if self.state is KeyState.USED:
            raise KeyAlreadyConsumedError(
                f"Activation key {self.id} has already been used and cannot be revoked"
            )
        if self.state is KeyState.REVOKED:
            raise AlreadyRevokedError(f"Activation key {self.id} is already revoked")
        return replace(self, state=KeyState.REVOKED, revoked_at=at)
