"""
Group domain entity.

A group is a named permission set: the feature tabs its members may use.
"""

from dataclasses import dataclass
from typing import FrozenSet, Iterable, List, Optional

from core.domain.exceptions import InvalidArgumentError
from core.domain.value_objects import FeatureTab

MAX_GROUP_NAME_LENGTH = 100


@dataclass(frozen=True)
class Group:
    """
    Group domain entity.

    ``id`` is None until the group has been persisted.
    """

    id: Optional[int]
    name: str
    allowed_tabs: FrozenSet[FeatureTab]

    def __post_init__(self):
        """Validate group entity."""
        if not self.name or len(self.name.strip()) == 0:
            raise InvalidArgumentError("Group name cannot be empty")
        if len(self.name) > MAX_GROUP_NAME_LENGTH:
            raise InvalidArgumentError("Group name too long")
        if not all(isinstance(tab, FeatureTab) for tab in self.allowed_tabs):
            raise InvalidArgumentError("Allowed tabs must be FeatureTab members")

    @classmethod
    def create(cls, name: str, tabs: Iterable = ()) -> "Group":
        """
        Create a new, unsaved Group.

        Args:
            name: Unique display label
            tabs: Tab tags (strings or FeatureTab)

        Returns:
            Group entity instance
        """
        return cls(
            id=None,
            name=(name or "").strip(),
            allowed_tabs=FeatureTab.parse_many(tabs),
        )

    def with_allowed_tabs(self, tabs: Iterable) -> "Group":
        """
        Return a copy whose tab set is replaced by ``tabs``.

        Replacement, not union: tabs absent from ``tabs`` are dropped.
        """
        return Group(id=self.id, name=self.name, allowed_tabs=FeatureTab.parse_many(tabs))

    def allows(self, tab: FeatureTab) -> bool:
        """Check whether the group's own set contains ``tab``."""
        return tab in self.allowed_tabs

    def sorted_tabs(self) -> List[str]:
        """Tab tags in enumeration order, for storage and display."""
        return [tab.value for tab in FeatureTab if tab in self.allowed_tabs]
