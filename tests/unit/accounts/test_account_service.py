"""
Unit tests for AccountService.
"""

from dataclasses import replace
from datetime import datetime, timedelta, timezone

import pytest

from accounts.domain.events import PrincipalGroupChanged, PrincipalRegistered
from accounts.domain.services import AccountService
from core.domain.exceptions import (
    InvalidArgumentError,
    InvalidCredentialsError,
    UsernameTakenError,
)


@pytest.fixture
def accounts(
    memory_principal_repository, memory_group_repository, memory_credential_store, event_recorder
):
    return AccountService(
        principal_repository=memory_principal_repository,
        group_repository=memory_group_repository,
        credential_store=memory_credential_store,
        default_group_name="user",
        subscriber_group_name="pro",
        event_bus=event_recorder,
    )


@pytest.mark.asyncio
class TestAccountService:
    """Tests for AccountService."""

    async def test_register_starts_in_default_group(
        self, accounts, seeded_groups, memory_credential_store, event_recorder
    ):
        """Test that a new principal joins the default group with an open session."""
        signed_in = await accounts.register("  alice ", "secret-pass")

        assert signed_in.principal.username == "alice"
        assert signed_in.principal.group_id == seeded_groups["user"].id
        assert signed_in.principal.subscription_expires_at is None
        assert not signed_in.principal.is_super_admin
        assert memory_credential_store.sessions[signed_in.token] == signed_in.principal.id
        assert memory_credential_store.passwords[signed_in.principal.id] != "secret-pass"
        [event] = event_recorder.of_type(PrincipalRegistered)
        assert event.username == "alice"

    async def test_register_duplicate_username(self, accounts, seeded_groups):
        await accounts.register("alice", "secret-pass")

        with pytest.raises(UsernameTakenError):
            await accounts.register("alice", "other-pass")

    @pytest.mark.parametrize(
        "username,password",
        [("a", "secret-pass"), ("  ", "secret-pass"), ("alice", "abc"), ("alice", None)],
    )
    async def test_register_rejects_short_input(
        self, accounts, seeded_groups, memory_principal_repository, username, password
    ):
        with pytest.raises(InvalidArgumentError):
            await accounts.register(username, password)

        assert await memory_principal_repository.list_all() == []

    async def test_login(self, accounts, seeded_groups, memory_credential_store):
        registered = await accounts.register("alice", "secret-pass")

        signed_in = await accounts.login("alice", "secret-pass")

        assert signed_in.principal.id == registered.principal.id
        assert signed_in.token != registered.token
        assert len(memory_credential_store.sessions) == 2

    @pytest.mark.parametrize("username,password", [("alice", "wrong"), ("bob", "secret-pass")])
    async def test_login_failure_is_uniform(self, accounts, seeded_groups, username, password):
        """Test that unknown users and wrong passwords get the same error."""
        await accounts.register("alice", "secret-pass")

        with pytest.raises(InvalidCredentialsError) as exc_info:
            await accounts.login(username, password)

        assert exc_info.value.message == "Invalid username or password"

    async def test_login_downgrades_expired_subscriber(
        self, accounts, seeded_groups, memory_principal_repository, event_recorder
    ):
        registered = await accounts.register("alice", "secret-pass")
        await memory_principal_repository.save(
            replace(
                registered.principal,
                group_id=seeded_groups["pro"].id,
                subscription_expires_at=datetime.now(timezone.utc) - timedelta(days=1),
            )
        )

        signed_in = await accounts.login("alice", "secret-pass")

        assert signed_in.principal.group_id == seeded_groups["user"].id
        [event] = event_recorder.of_type(PrincipalGroupChanged)
        assert event.reason == "subscription_expired"

    async def test_login_keeps_active_subscriber(
        self, accounts, seeded_groups, memory_principal_repository
    ):
        registered = await accounts.register("alice", "secret-pass")
        await memory_principal_repository.save(
            replace(
                registered.principal,
                group_id=seeded_groups["pro"].id,
                subscription_expires_at=datetime.now(timezone.utc) + timedelta(days=5),
            )
        )

        signed_in = await accounts.login("alice", "secret-pass")

        assert signed_in.principal.group_id == seeded_groups["pro"].id

    async def test_logout(self, accounts, seeded_groups, memory_credential_store):
        signed_in = await accounts.register("alice", "secret-pass")

        assert await accounts.logout(signed_in.token) is True
        assert await accounts.logout(signed_in.token) is False
        assert memory_credential_store.sessions == {}
