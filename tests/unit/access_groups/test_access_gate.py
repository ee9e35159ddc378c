"""
Unit tests for AccessGate.
"""

import uuid
from dataclasses import replace

import pytest

from access_groups.domain.access_gate import AccessGate
from access_groups.domain.services import GroupRegistry
from core.domain.value_objects import FeatureTab


@pytest.fixture
def gate(memory_principal_repository, memory_group_repository):
    return AccessGate(memory_principal_repository, memory_group_repository)


@pytest.mark.asyncio
class TestAccessGate:
    """Tests for AccessGate."""

    async def test_allowed_tab(self, gate, basic_principal):
        assert await gate.is_allowed(basic_principal.id, "dashboard") is True

    async def test_denied_tab(self, gate, basic_principal):
        assert await gate.is_allowed(basic_principal.id, FeatureTab.ADMIN) is False

    async def test_activate_always_allowed(self, gate, basic_principal):
        """Test that every resolvable principal may reach redemption."""
        assert await gate.is_allowed(basic_principal.id, "activate") is True

    async def test_unknown_tab_is_denied(self, gate, basic_principal):
        assert await gate.is_allowed(basic_principal.id, "billing") is False

    async def test_unknown_principal_is_denied(self, gate, seeded_groups):
        assert await gate.is_allowed(uuid.uuid4(), "dashboard") is False
        assert await gate.is_allowed("not-a-uuid", "activate") is False

    async def test_dangling_group_is_denied(
        self, gate, basic_principal, memory_principal_repository
    ):
        """Test that an unresolvable group fails closed."""
        memory_principal_repository.group_repository = None
        await memory_principal_repository.save(replace(basic_principal, group_id=999))

        assert await gate.allowed_tabs_for(basic_principal.id) == frozenset()
        assert await gate.is_allowed(basic_principal.id, "activate") is False

    async def test_tab_changes_apply_immediately(
        self, gate, basic_principal, seeded_groups, memory_group_repository,
        memory_principal_repository,
    ):
        """Test that the next check sees a group edit without any cache."""
        registry = GroupRegistry(memory_group_repository, memory_principal_repository)
        assert await gate.is_allowed(basic_principal.id, "chart") is False

        await registry.set_allowed_tabs(seeded_groups["user"].id, ["chart"])

        assert await gate.is_allowed(basic_principal.id, "chart") is True
        assert await gate.is_allowed(basic_principal.id, "dashboard") is False

    async def test_membership_changes_apply_immediately(
        self, gate, basic_principal, seeded_groups, memory_group_repository,
        memory_principal_repository,
    ):
        registry = GroupRegistry(memory_group_repository, memory_principal_repository)

        await registry.assign_principal(basic_principal.id, seeded_groups["admin"].id)

        assert await gate.is_allowed(basic_principal.id, "admin") is True

    async def test_allowed_tabs_for(self, gate, basic_principal):
        tabs = await gate.allowed_tabs_for(str(basic_principal.id))
        assert tabs == frozenset({FeatureTab.DASHBOARD, FeatureTab.SETTINGS, FeatureTab.ACTIVATE})
