"""
In-memory implementation of GroupRepository port.

Used as the test double for domain services and by the in-process wiring
when no database is configured.
"""

import threading
from itertools import count
from typing import Callable, Dict, FrozenSet, List, Optional

from access_groups.domain.group import Group
from access_groups.ports.group_repository import GroupRepository
from core.domain.exceptions import GroupInUseError, GroupNameTakenError
from core.domain.value_objects import FeatureTab


class InMemoryGroupRepository(GroupRepository):
    """
    Dictionary-backed group repository.

    ``member_counter`` reports how many principals reference a group id, so
    deletion can be refused the way the database PROTECT rule refuses it.
    """

    def __init__(self, member_counter: Optional[Callable[[int], int]] = None):
        self._groups: Dict[int, Group] = {}
        self._ids = count(1)
        self._lock = threading.Lock()
        self.member_counter = member_counter

    async def save(self, group: Group) -> Group:
        with self._lock:
            if any(g.name == group.name for g in self._groups.values()):
                raise GroupNameTakenError(f"Group name '{group.name}' is already taken")
            saved = Group(id=next(self._ids), name=group.name, allowed_tabs=group.allowed_tabs)
            self._groups[saved.id] = saved
            return saved

    async def find_by_id(self, group_id: int) -> Optional[Group]:
        return self._groups.get(group_id)

    async def find_by_name(self, name: str) -> Optional[Group]:
        for group in self._groups.values():
            if group.name == name:
                return group
        return None

    async def list_all(self) -> List[Group]:
        return [self._groups[group_id] for group_id in sorted(self._groups)]

    async def replace_allowed_tabs(
        self, group_id: int, tabs: FrozenSet[FeatureTab]
    ) -> Optional[Group]:
        with self._lock:
            group = self._groups.get(group_id)
            if group is None:
                return None
            updated = group.with_allowed_tabs(tabs)
            self._groups[group_id] = updated
            return updated

    async def delete(self, group_id: int) -> bool:
        with self._lock:
            if group_id not in self._groups:
                return False
            if self.member_counter and self.member_counter(group_id) > 0:
                raise GroupInUseError(f"Group {group_id} still has members")
            del self._groups[group_id]
            return True
