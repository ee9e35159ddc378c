"""
Credential store port (interface).

Passwords and bearer sessions of principals. Hashing is left to the
implementation.
"""
import uuid
from abc import ABC, abstractmethod
from typing import Optional

from accounts.domain.principal import Principal


class CredentialStore(ABC):
    """Abstract store for principal passwords and session tokens."""

    @abstractmethod
    async def create_account(self, principal: Principal, raw_password: str) -> Principal:
        """
        Insert a new principal together with its password.

        Args:
            principal: Unsaved Principal entity
            raw_password: Password as typed by the user

        Returns:
            Saved principal

        Raises:
            UsernameTakenError: If the username is already used
            GroupNotFoundError: If the principal's group does not exist
        """
        pass

    @abstractmethod
    async def authenticate(self, username: str, raw_password: str) -> Optional[Principal]:
        """
        Check a username and password.

        Args:
            username: Login name
            raw_password: Password as typed by the user

        Returns:
            The principal, or None if the pair does not match
        """
        pass

    @abstractmethod
    async def open_session(self, principal_id: uuid.UUID) -> str:
        """
        Issue a new bearer session.

        Args:
            principal_id: Principal UUID

        Returns:
            The raw session token, shown once
        """
        pass

    @abstractmethod
    async def close_session(self, raw_token: str) -> bool:
        """
        Invalidate a bearer session.

        Args:
            raw_token: Raw session token

        Returns:
            True if a session was deleted
        """
        pass
