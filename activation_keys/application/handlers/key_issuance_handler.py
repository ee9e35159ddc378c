"""
GenerateActivationKeysHandler.

Handles the generate activation keys command.
"""

from typing import List

from activation_keys.application.commands.generate_keys import GenerateActivationKeysCommand
from activation_keys.application.dto.activation_key_dto import ActivationKeyDTO
from activation_keys.domain.events import ActivationKeysIssued
from activation_keys.domain.key_issuer import KeyIssuer
from core.infrastructure.events import event_bus


class GenerateActivationKeysHandler:
    """Handler for GenerateActivationKeysCommand."""

    def __init__(self, key_issuer: KeyIssuer):
        """Initialize handler with the issuer."""
        self.key_issuer = key_issuer

    async def handle(self, command: GenerateActivationKeysCommand) -> List[ActivationKeyDTO]:
        """
        Handle generate activation keys command.

        Args:
            command: GenerateActivationKeysCommand

        Returns:
            DTOs of the new keys

        Raises:
            InvalidArgumentError: If duration or count is out of bounds
            StorageFailureError: If the batch could not be stored
        """
        keys = await self.key_issuer.generate(
            duration_days=command.duration_days,
            count=command.count,
            note=command.note,
        )

        await event_bus.publish(
            ActivationKeysIssued(
                key_ids=[key.id for key in keys],
                duration_days=command.duration_days,
                note=keys[0].note if keys else None,
            )
        )

        return [ActivationKeyDTO.from_entity(key) for key in keys]
