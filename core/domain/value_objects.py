"""
Value objects for the domain.

Value objects are immutable objects that are defined by their attributes
rather than their identity. They have no identity and are compared by value.
"""
from datetime import datetime
from enum import Enum
from typing import FrozenSet, Iterable, Optional

from core.domain.exceptions import InvalidArgumentError


class KeyState(Enum):
    """Activation key lifecycle state."""

    ACTIVE = "active"
    USED = "used"
    REVOKED = "revoked"

    def __str__(self) -> str:
        """Return state as string."""
        return self.value

    @property
    def is_terminal(self) -> bool:
        """Used and revoked keys never change again."""
        return self is not KeyState.ACTIVE

    @classmethod
    def from_timestamps(
        cls, used_at: Optional[datetime], revoked_at: Optional[datetime]
    ) -> "KeyState":
        """
        Derive the state from the transition timestamps.

        Args:
            used_at: When the key was redeemed
            revoked_at: When the key was revoked

        Returns:
            The matching KeyState

        Raises:
            ValueError: If both timestamps are set
        """
        if used_at is not None and revoked_at is not None:
            raise ValueError("A key cannot be both used and revoked")
        if used_at is not None:
            return cls.USED
        if revoked_at is not None:
            return cls.REVOKED
        return cls.ACTIVE


class FeatureTab(Enum):
    """Application surfaces that group membership can unlock."""

    DASHBOARD = "dashboard"
    SIGNALS = "signals"
    CHART = "chart"
    DEMO = "demo"
    AUTOTRADE = "autotrade"
    SCANNER = "scanner"
    PNL = "pnl"
    SETTINGS = "settings"
    ADMIN = "admin"
    ACTIVATE = "activate"

    def __str__(self) -> str:
        """Return tab as string."""
        return self.value

    @classmethod
    def parse(cls, value) -> "FeatureTab":
        """
        Parse a single tab tag.

        Args:
            value: Tag string or FeatureTab

        Returns:
            FeatureTab member

        Raises:
            InvalidArgumentError: If the tag is not a known tab
        """
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            raise InvalidArgumentError(f"Unknown tab: {value!r}") from None

    @classmethod
    def parse_many(cls, values: Iterable) -> FrozenSet["FeatureTab"]:
        """
        Parse a collection of tab tags into a set.

        Every tag is validated; one unknown tag rejects the whole collection.
        """
        if isinstance(values, (str, bytes)):
            raise InvalidArgumentError("Tabs must be a list of tab names")
        return frozenset(cls.parse(value) for value in values)


ALWAYS_ALLOWED_TABS = frozenset({FeatureTab.ACTIVATE})
