"""
Activation key DTOs for API responses.
"""
import uuid
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from activation_keys.domain.activation_key import ActivationKey


@dataclass
class ActivationKeyDTO:
    """DTO for activation key information."""

    id: int
    secret: str
    duration_days: int
    note: Optional[str]
    state: str
    created_at: datetime
    used_by_principal_id: Optional[uuid.UUID]
    used_at: Optional[datetime]
    revoked_at: Optional[datetime]

    @classmethod
    def from_entity(cls, key: ActivationKey) -> "ActivationKeyDTO":
        return cls(
            id=key.id,
            secret=key.secret,
            duration_days=key.duration_days,
            note=key.note,
            state=key.state.value,
            created_at=key.created_at,
            used_by_principal_id=key.used_by_principal_id,
            used_at=key.used_at,
            revoked_at=key.revoked_at,
        )


@dataclass
class KeyStatsDTO:
    """DTO for the key summary counts."""

    total: int
    active: int
    used: int
    revoked: int


@dataclass
class RedemptionDTO:
    """DTO for a successful redemption."""

    duration_days: int
    subscription_expires_at: datetime
