"""
Unit tests for KeyRedeemer.
"""

import asyncio
import uuid
from dataclasses import replace
from datetime import datetime, timedelta, timezone

import pytest

from activation_keys.domain.events import ActivationGrantFailed, ActivationKeyRedeemed
from activation_keys.domain.key_issuer import KeyIssuer
from activation_keys.domain.key_redeemer import INVALID_KEY_MESSAGE, KeyRedeemer
from core.domain.exceptions import (
    ActivationKeyNotFoundError,
    GrantFailedError,
    InvalidArgumentError,
    KeyAlreadyConsumedError,
    KeyRevokedError,
    PrincipalNotFoundError,
    StorageFailureError,
)
from core.domain.value_objects import KeyState

NOW = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)


class FailingGrantor:
    """Grantor whose backing store is down."""

    async def grant(self, principal_id, days, now):
        raise StorageFailureError("database unavailable")


@pytest.fixture
def redeemer(memory_key_store, memory_principal_repository, memory_grantor, event_recorder):
    """KeyRedeemer over in-memory adapters with a fixed clock."""
    return KeyRedeemer(
        key_store=memory_key_store,
        principal_repository=memory_principal_repository,
        subscription_grantor=memory_grantor,
        event_bus=event_recorder,
        clock=lambda: NOW,
    )


async def issue_key(key_store, duration_days=30):
    [key] = await KeyIssuer(key_store, prefix="SIG").generate(duration_days=duration_days, count=1)
    return key


@pytest.mark.asyncio
class TestKeyRedeemer:
    """Tests for KeyRedeemer service."""

    async def test_redeem_without_subscription(
        self, redeemer, memory_key_store, basic_principal, seeded_groups
    ):
        """Test that a fresh redemption starts from now and promotes the principal."""
        key = await issue_key(memory_key_store, duration_days=30)

        result = await redeemer.redeem(key.secret, basic_principal.id)

        assert result.key_id == key.id
        assert result.duration_days == 30
        assert result.subscription_expires_at == NOW + timedelta(days=30)
        assert result.group_id == seeded_groups["pro"].id

        stored = await memory_key_store.get(key.id)
        assert stored.state is KeyState.USED
        assert stored.used_by_principal_id == basic_principal.id
        assert stored.used_at == NOW

    async def test_redeem_stacks_on_remaining_time(
        self, redeemer, memory_key_store, memory_principal_repository, basic_principal
    ):
        """Test that remaining subscription time is kept."""
        current_expiry = NOW + timedelta(days=10)
        await memory_principal_repository.save(
            replace(basic_principal, subscription_expires_at=current_expiry)
        )
        key = await issue_key(memory_key_store, duration_days=30)

        result = await redeemer.redeem(key.secret, basic_principal.id)

        assert result.subscription_expires_at == current_expiry + timedelta(days=30)

    async def test_redeem_after_expiry_starts_from_now(
        self, redeemer, memory_key_store, memory_principal_repository, basic_principal
    ):
        await memory_principal_repository.save(
            replace(basic_principal, subscription_expires_at=NOW - timedelta(days=3))
        )
        key = await issue_key(memory_key_store, duration_days=7)

        result = await redeemer.redeem(key.secret, basic_principal.id)

        assert result.subscription_expires_at == NOW + timedelta(days=7)

    async def test_non_default_group_is_kept(
        self, redeemer, memory_key_store, memory_principal_repository, basic_principal,
        seeded_groups,
    ):
        """Test that redemption never demotes an administrator."""
        await memory_principal_repository.save(
            replace(basic_principal, group_id=seeded_groups["admin"].id)
        )
        key = await issue_key(memory_key_store)

        result = await redeemer.redeem(key.secret, basic_principal.id)

        assert result.group_id == seeded_groups["admin"].id

    async def test_secret_is_case_insensitive(self, redeemer, memory_key_store, basic_principal):
        key = await issue_key(memory_key_store)

        result = await redeemer.redeem(f"  {key.secret.lower()} ", basic_principal.id)

        assert result.key_id == key.id

    async def test_unknown_secret(self, redeemer, basic_principal):
        """Test that an unknown secret gets the generic message."""
        with pytest.raises(ActivationKeyNotFoundError) as exc_info:
            await redeemer.redeem("SIG-ZZZZ-ZZZZ-ZZZZ-ZZZZ", basic_principal.id)

        assert exc_info.value.message == INVALID_KEY_MESSAGE

    async def test_hash_match_with_different_secret(
        self, redeemer, memory_key_store, basic_principal, monkeypatch
    ):
        """Test that a lookup hit is rejected when the stored secret differs."""
        key = await issue_key(memory_key_store)
        other = replace(key, secret="SIG-0000-0000-0000-0000")

        async def find_other(secret_hash):
            return other

        monkeypatch.setattr(memory_key_store.repository, "find_by_secret_hash", find_other)

        with pytest.raises(ActivationKeyNotFoundError) as exc_info:
            await redeemer.redeem(key.secret, basic_principal.id)

        assert exc_info.value.message == INVALID_KEY_MESSAGE
        assert (await memory_key_store.get(key.id)).state is KeyState.ACTIVE

    @pytest.mark.parametrize("secret", ["", "   ", None])
    async def test_empty_secret(self, redeemer, basic_principal, secret):
        with pytest.raises(InvalidArgumentError):
            await redeemer.redeem(secret, basic_principal.id)

    async def test_unknown_principal(self, redeemer, memory_key_store):
        """Test that the key is left untouched for an unknown principal."""
        key = await issue_key(memory_key_store)

        with pytest.raises(PrincipalNotFoundError):
            await redeemer.redeem(key.secret, uuid.uuid4())

        assert (await memory_key_store.get(key.id)).state is KeyState.ACTIVE

    async def test_second_redemption_fails(self, redeemer, memory_key_store, basic_principal):
        """Test that a key works exactly once."""
        key = await issue_key(memory_key_store)
        first = await redeemer.redeem(key.secret, basic_principal.id)

        with pytest.raises(KeyAlreadyConsumedError):
            await redeemer.redeem(key.secret, basic_principal.id)

        principal = await redeemer.principal_repository.find_by_id(basic_principal.id)
        assert principal.subscription_expires_at == first.subscription_expires_at

    async def test_revoked_key_fails(self, redeemer, memory_key_store, basic_principal):
        key = await issue_key(memory_key_store)
        await memory_key_store.revoke(key.id, NOW)

        with pytest.raises(KeyRevokedError):
            await redeemer.redeem(key.secret, basic_principal.id)

    async def test_concurrent_redemptions_grant_once(
        self, redeemer, memory_key_store, memory_principal_repository, seeded_groups,
        basic_principal,
    ):
        """Test that concurrent redemptions of one key extend exactly one subscription."""
        from accounts.domain.principal import Principal

        others = [
            await memory_principal_repository.save(
                Principal.create(f"racer-{i}", group_id=seeded_groups["user"].id)
            )
            for i in range(4)
        ]
        principals = [basic_principal] + others
        key = await issue_key(memory_key_store, duration_days=30)

        results = await asyncio.gather(
            *[redeemer.redeem(key.secret, p.id) for p in principals],
            return_exceptions=True,
        )

        successes = [r for r in results if not isinstance(r, Exception)]
        failures = [r for r in results if isinstance(r, KeyAlreadyConsumedError)]
        assert len(successes) == 1
        assert len(failures) == len(principals) - 1

        extended = [
            p
            for p in await memory_principal_repository.list_all()
            if p.subscription_expires_at is not None
        ]
        assert len(extended) == 1

    async def test_grant_failure_keeps_key_used(
        self, memory_key_store, memory_principal_repository, basic_principal, event_recorder
    ):
        """Test that a failed grant is surfaced and recorded for reconciliation."""
        redeemer = KeyRedeemer(
            key_store=memory_key_store,
            principal_repository=memory_principal_repository,
            subscription_grantor=FailingGrantor(),
            event_bus=event_recorder,
            clock=lambda: NOW,
        )
        key = await issue_key(memory_key_store)

        with pytest.raises(GrantFailedError) as exc_info:
            await redeemer.redeem(key.secret, basic_principal.id)

        assert exc_info.value.key_id == key.id
        assert (await memory_key_store.get(key.id)).state is KeyState.USED
        [failed] = event_recorder.of_type(ActivationGrantFailed)
        assert failed.key_id == key.id
        assert failed.principal_id == basic_principal.id
        assert event_recorder.of_type(ActivationKeyRedeemed) == []

    async def test_success_publishes_event(
        self, redeemer, memory_key_store, basic_principal, event_recorder
    ):
        key = await issue_key(memory_key_store, duration_days=14)

        await redeemer.redeem(key.secret, basic_principal.id)

        [event] = event_recorder.of_type(ActivationKeyRedeemed)
        assert event.key_id == key.id
        assert event.duration_days == 14
        assert event.payload()["principal_id"] == str(basic_principal.id)
