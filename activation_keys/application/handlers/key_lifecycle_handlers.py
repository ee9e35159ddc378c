"""
Activation key lifecycle handlers.

Handlers for the redeem and revoke commands.
"""

from datetime import datetime, timezone

from activation_keys.application.commands.redeem_key import RedeemActivationKeyCommand
from activation_keys.application.commands.revoke_key import RevokeActivationKeyCommand
from activation_keys.application.dto.activation_key_dto import ActivationKeyDTO, RedemptionDTO
from activation_keys.domain.events import ActivationKeyRevoked
from activation_keys.domain.key_redeemer import KeyRedeemer
from activation_keys.domain.key_store import KeyStore
from core.domain.exceptions import DomainException
from core.infrastructure.events import event_bus
from core.metrics import redemption_failures_total


class RedeemActivationKeyHandler:
    """Handler for RedeemActivationKeyCommand."""

    def __init__(self, key_redeemer: KeyRedeemer):
        """Initialize handler with the redeemer."""
        self.key_redeemer = key_redeemer

    async def handle(self, command: RedeemActivationKeyCommand) -> RedemptionDTO:
        """
        Handle redeem activation key command.

        Args:
            command: RedeemActivationKeyCommand

        Returns:
            RedemptionDTO with granted days and new expiry
        """
        try:
            result = await self.key_redeemer.redeem(command.secret, command.principal_id)
        except DomainException as e:
            redemption_failures_total.labels(reason=e.code.lower()).inc()
            raise

        return RedemptionDTO(
            duration_days=result.duration_days,
            subscription_expires_at=result.subscription_expires_at,
        )


class RevokeActivationKeyHandler:
    """Handler for RevokeActivationKeyCommand."""

    def __init__(self, key_store: KeyStore):
        """Initialize handler with the key store."""
        self.key_store = key_store

    async def handle(self, command: RevokeActivationKeyCommand) -> ActivationKeyDTO:
        """
        Handle revoke activation key command.

        Args:
            command: RevokeActivationKeyCommand

        Returns:
            DTO of the revoked key

        Raises:
            ActivationKeyNotFoundError: If key not found
            KeyAlreadyConsumedError: If the key was already used
            AlreadyRevokedError: If the key was already revoked
        """
        revoked = await self.key_store.revoke(command.key_id, datetime.now(timezone.utc))
        await event_bus.publish(ActivationKeyRevoked(key_id=revoked.id))
        return ActivationKeyDTO.from_entity(revoked)
