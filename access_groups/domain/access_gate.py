"""
Access gate.

Answers whether a principal may use a feature tab. Every privileged
request asks the gate; it reads current state and never caches.
"""

import uuid
from typing import FrozenSet, Optional

from accounts.ports.principal_repository import PrincipalRepository
from access_groups.domain.group import Group
from access_groups.ports.group_repository import GroupRepository
from core.domain.exceptions import InvalidArgumentError
from core.domain.value_objects import ALWAYS_ALLOWED_TABS, FeatureTab


class AccessGate:
    """
    Resolves principal -> group -> allowed tabs.

    Fails closed: an unknown principal, a dangling group reference or an
    unknown tab tag all answer ``False``.
    """

    def __init__(
        self,
        principal_repository: PrincipalRepository,
        group_repository: GroupRepository,
    ):
        self.principal_repository = principal_repository
        self.group_repository = group_repository

    async def _group_of(self, principal_id) -> Optional[Group]:
        try:
            principal_id = uuid.UUID(str(principal_id))
        except ValueError:
            return None
        principal = await self.principal_repository.find_by_id(principal_id)
        if principal is None:
            return None
        return await self.group_repository.find_by_id(principal.group_id)

    async def allowed_tabs_for(self, principal_id) -> FrozenSet[FeatureTab]:
        """
        Effective tab set of a principal.

        Args:
            principal_id: Principal UUID (or its string form)

        Returns:
            The group's tabs plus the always-open tabs, or an empty set
            when the principal or its group cannot be resolved
        """
        group = await self._group_of(principal_id)
        if group is None:
            return frozenset()
        return group.allowed_tabs | ALWAYS_ALLOWED_TABS

    async def is_allowed(self, principal_id, tab) -> bool:
        """
        Check whether a principal may use a tab.

        Args:
            principal_id: Principal UUID (or its string form)
            tab: Tab tag or FeatureTab

        Returns:
            True if the principal's current group allows the tab
        """
        try:
            feature = FeatureTab.parse(tab)
        except InvalidArgumentError:
            return False
        group = await self._group_of(principal_id)
        if group is None:
            return False
        return feature in ALWAYS_ALLOWED_TABS or group.allows(feature)
