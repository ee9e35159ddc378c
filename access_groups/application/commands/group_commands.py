"""
Group commands.
"""

import uuid
from dataclasses import dataclass, field
from typing import List


@dataclass
class SetAllowedTabsCommand:
    """Replace the allowed tab set of a group."""

    group_id: int
    allowed_tabs: List[str]


@dataclass
class CreateGroupCommand:
    """Create a new group."""

    name: str
    allowed_tabs: List[str] = field(default_factory=list)


@dataclass
class DeleteGroupCommand:
    """Delete a group without members."""

    group_id: int


@dataclass
class AssignPrincipalGroupCommand:
    """Move a principal to another group."""

    principal_id: uuid.UUID
    group_id: int
