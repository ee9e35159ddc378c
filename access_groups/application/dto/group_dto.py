"""
Group and principal DTOs for API responses.
"""
import uuid
from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional

from accounts.domain.principal import Principal
from access_groups.domain.group import Group


@dataclass
class GroupDTO:
    """DTO for group information."""

    id: int
    name: str
    allowed_tabs: List[str]

    @classmethod
    def from_entity(cls, group: Group) -> "GroupDTO":
        return cls(id=group.id, name=group.name, allowed_tabs=group.sorted_tabs())


@dataclass
class PrincipalDTO:
    """DTO for principal information."""

    id: uuid.UUID
    username: str
    group_id: int
    group_name: Optional[str]
    subscription_expires_at: Optional[datetime]
    is_super_admin: bool
    created_at: datetime

    @classmethod
    def from_entity(cls, principal: Principal, group: Optional[Group]) -> "PrincipalDTO":
        return cls(
            id=principal.id,
            username=principal.username,
            group_id=principal.group_id,
            group_name=group.name if group else None,
            subscription_expires_at=principal.subscription_expires_at,
            is_super_admin=principal.is_super_admin,
            created_at=principal.created_at,
        )


@dataclass
class ProfileDTO:
    """DTO for the acting principal's own profile."""

    principal: PrincipalDTO
    allowed_tabs: List[str]
    has_active_subscription: bool
