"""
Activation key query handlers.
"""

from typing import List

from activation_keys.application.dto.activation_key_dto import ActivationKeyDTO, KeyStatsDTO
from activation_keys.application.queries.list_keys import ListActivationKeysQuery
from activation_keys.domain.key_store import KeyStore
from core.metrics import activation_keys_by_state


class ListActivationKeysHandler:
    """Handler for ListActivationKeysQuery."""

    def __init__(self, key_store: KeyStore):
        self.key_store = key_store

    async def handle(self, query: ListActivationKeysQuery) -> List[ActivationKeyDTO]:
        """
        Handle list activation keys query.

        Args:
            query: ListActivationKeysQuery

        Returns:
            Keys newest first
        """
        keys = await self.key_store.list(query.limit)
        return [ActivationKeyDTO.from_entity(key) for key in keys]


class ActivationKeyStatsHandler:
    """Returns key counts per state and refreshes the state gauge."""

    def __init__(self, key_store: KeyStore):
        self.key_store = key_store

    async def handle(self) -> KeyStatsDTO:
        stats = await self.key_store.stats()
        activation_keys_by_state.labels(state="active").set(stats.active)
        activation_keys_by_state.labels(state="used").set(stats.used)
        activation_keys_by_state.labels(state="revoked").set(stats.revoked)
        return KeyStatsDTO(
            total=stats.total, active=stats.active, used=stats.used, revoked=stats.revoked
        )
