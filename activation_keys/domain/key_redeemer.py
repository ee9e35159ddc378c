"""
KeyRedeemer domain service.

Consumes an activation key exactly once and extends the redeeming
principal's subscription.
"""

import logging
import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Callable, Optional

from accounts.ports.principal_repository import PrincipalRepository
from accounts.ports.subscription_grantor import SubscriptionGrantor
from activation_keys.domain.activation_key import hash_secret, normalize_secret
from activation_keys.domain.events import ActivationGrantFailed, ActivationKeyRedeemed
from activation_keys.domain.key_store import KeyStore
from core.domain.events import EventBus
from core.domain.exceptions import (
    ActivationKeyNotFoundError,
    GrantFailedError,
    InvalidArgumentError,
    PrincipalNotFoundError,
)

logger = logging.getLogger(__name__)

# Same message for every lookup miss, so responses do not hint at near matches.
INVALID_KEY_MESSAGE = "Activation key is not valid"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class RedemptionResult:
    """Outcome of a successful redemption."""

    key_id: int
    duration_days: int
    subscription_expires_at: datetime
    group_id: int


class KeyRedeemer:
    """
    Redeems activation keys.

    The key transition commits first. The subscription grant runs after
    it; if the grant fails the key stays used and GrantFailedError is
    raised for manual reconciliation.
    """

    def __init__(
        self,
        key_store: KeyStore,
        principal_repository: PrincipalRepository,
        subscription_grantor: SubscriptionGrantor,
        event_bus: Optional[EventBus] = None,
        clock: Callable[[], datetime] = _utcnow,
    ):
        self.key_store = key_store
        self.principal_repository = principal_repository
        self.subscription_grantor = subscription_grantor
        self.event_bus = event_bus
        self.clock = clock

    async def redeem(self, secret: str, principal_id: uuid.UUID) -> RedemptionResult:
        """
        Redeem a secret for a principal.

        Args:
            secret: Presented secret (case and surrounding space ignored)
            principal_id: Acting principal

        Returns:
            RedemptionResult with the granted days and the new expiry

        Raises:
            InvalidArgumentError: If the secret is empty
            PrincipalNotFoundError: If the principal does not exist
            ActivationKeyNotFoundError: If no key has this secret
            KeyAlreadyConsumedError: If the key was already used
            KeyRevokedError: If the key was revoked
            GrantFailedError: If the key was consumed but the grant failed
        """
        normalized = normalize_secret(secret)
        if not normalized:
            raise InvalidArgumentError("Activation key is required")

        principal = await self.principal_repository.find_by_id(principal_id)
        if principal is None:
            raise PrincipalNotFoundError(f"Principal {principal_id} not found")

        key = await self.key_store.repository.find_by_secret_hash(hash_secret(normalized))
        if key is None or not key.verify_secret(normalized):
            logger.info(f"Redemption with unknown activation key by {principal_id}")
            raise ActivationKeyNotFoundError(INVALID_KEY_MESSAGE)

        now = self.clock()
        used = await self.key_store.mark_used(key.id, principal.id, now)

        try:
            updated = await self.subscription_grantor.grant(principal.id, used.duration_days, now)
        except Exception as e:
            logger.error(
                f"Activation key {used.id} consumed but grant to {principal.id} failed: {e}",
                exc_info=True,
            )
            if self.event_bus:
                await self.event_bus.publish(
                    ActivationGrantFailed(
                        key_id=used.id,
                        principal_id=principal.id,
                        duration_days=used.duration_days,
                        reason=str(e),
                    )
                )
            raise GrantFailedError(
                f"Activation key {used.id} was consumed but the subscription "
                f"could not be extended",
                key_id=used.id,
                principal_id=principal.id,
            ) from e

        if self.event_bus:
            await self.event_bus.publish(
                ActivationKeyRedeemed(
                    key_id=used.id,
                    principal_id=principal.id,
                    duration_days=used.duration_days,
                    subscription_expires_at=updated.subscription_expires_at,
                )
            )
        return RedemptionResult(
            key_id=used.id,
            duration_days=used.duration_days,
            subscription_expires_at=updated.subscription_expires_at,
            group_id=updated.group_id,
        )
