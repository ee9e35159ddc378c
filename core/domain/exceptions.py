"""
Domain exceptions.

Domain exceptions represent business rule violations
and domain-specific error conditions.
"""
import uuid
from typing import Optional


class DomainException(Exception):
    """Base exception for all domain exceptions."""

    def __init__(self, message: str, code: str = None):
        """
        Initialize domain exception.

        Args:
            message: Human-readable error message
            code: Machine-readable error code
        """
        super().__init__(message)
        self.message = message
        self.code = code or self.__class__.__name__


class InvalidArgumentError(DomainException):
    """Raised when caller input is out of bounds or malformed."""

    def __init__(self, message: str = "Invalid argument"):
        super().__init__(message, code="INVALID_ARGUMENT")


class NotFoundError(DomainException):
    """Base exception for missing entities."""

    def __init__(self, message: str = "Not found", code: str = "NOT_FOUND"):
        super().__init__(message, code=code)


class StorageFailureError(DomainException):
    """Raised when the persistence backend fails."""

    def __init__(self, message: str = "Storage failure"):
        super().__init__(message, code="STORAGE_FAILURE")


class ActivationKeyException(DomainException):
    """Base exception for activation-key errors."""

    pass


class ActivationKeyNotFoundError(NotFoundError, ActivationKeyException):
    """Raised when no key matches an id or a presented secret."""

    def __init__(self, message: str = "Activation key not found"):
        super().__init__(message, code="ACTIVATION_KEY_NOT_FOUND")


class KeyAlreadyConsumedError(ActivationKeyException):
    """Raised when a key has already been redeemed."""

    def __init__(self, message: str = "Activation key has already been used"):
        super().__init__(message, code="KEY_ALREADY_CONSUMED")


class KeyRevokedError(ActivationKeyException):
    """Raised when redeeming a revoked key."""

    def __init__(self, message: str = "Activation key has been revoked"):
        super().__init__(message, code="KEY_REVOKED")


class AlreadyRevokedError(ActivationKeyException):
    """Raised when revoking a key that is already revoked."""

    def __init__(self, message: str = "Activation key is already revoked"):
        super().__init__(message, code="ALREADY_REVOKED")


class GrantFailedError(ActivationKeyException):
    """
    Raised when the subscription grant fails after a key was consumed.

    The key stays used; the failure needs manual reconciliation.
    """

    def __init__(
        self,
        message: str = "Subscription grant failed after key redemption",
        key_id: Optional[int] = None,
        principal_id: Optional[uuid.UUID] = None,
    ):
        super().__init__(message, code="GRANT_FAILED")
        self.key_id = key_id
        self.principal_id = principal_id


class GroupException(DomainException):
    """Base exception for group-related errors."""

    pass


class GroupNotFoundError(NotFoundError, GroupException):
    """Raised when a group is not found."""

    def __init__(self, message: str = "Group not found"):
        super().__init__(message, code="GROUP_NOT_FOUND")


class GroupNameTakenError(GroupException):
    """Raised when creating a group with a name already in use."""

    def __init__(self, message: str = "Group name already exists"):
        super().__init__(message, code="GROUP_NAME_TAKEN")


class GroupInUseError(GroupException):
    """Raised when deleting a group that still has members or is reserved."""

    def __init__(self, message: str = "Group is in use"):
        super().__init__(message, code="GROUP_IN_USE")


class PrincipalNotFoundError(NotFoundError):
    """Raised when a principal is not found."""

    def __init__(self, message: str = "Principal not found"):
        super().__init__(message, code="PRINCIPAL_NOT_FOUND")


class AccessDeniedError(DomainException):
    """Raised when a principal may not use a feature."""

    def __init__(self, message: str = "Access denied"):
        super().__init__(message, code="ACCESS_DENIED")


class UsernameTakenError(DomainException):
    """Raised when registering a username that already exists."""

    def __init__(self, message: str = "Username already exists"):
        super().__init__(message, code="USERNAME_TAKEN")


class InvalidCredentialsError(DomainException):
    """Raised when a login does not match a principal's password."""

    def __init__(self, message: str = "Invalid username or password"):
        super().__init__(message, code="INVALID_CREDENTIALS")
