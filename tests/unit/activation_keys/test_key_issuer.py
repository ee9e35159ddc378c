"""
Unit tests for KeyIssuer.
"""

import itertools

import pytest

from activation_keys.domain.activation_key import ActivationKey
from activation_keys.domain.key_issuer import MAX_BATCH_SIZE, KeyIssuer
from core.domain.exceptions import InvalidArgumentError, StorageFailureError
from core.domain.value_objects import KeyState


def scripted_secrets(*values):
    """Secret factory that returns the given secrets in order."""
    supply = iter(values)
    return lambda prefix: next(supply)


@pytest.mark.asyncio
class TestKeyIssuer:
    """Tests for KeyIssuer service."""

    async def test_generate_batch(self, memory_key_store):
        """Test minting a batch of keys."""
        issuer = KeyIssuer(memory_key_store, prefix="SIG")

        keys = await issuer.generate(duration_days=30, count=5, note="launch")

        assert len(keys) == 5
        assert len({k.secret for k in keys}) == 5
        assert all(k.id is not None for k in keys)
        assert all(k.state is KeyState.ACTIVE for k in keys)
        assert all(k.duration_days == 30 and k.note == "launch" for k in keys)
        assert all(k.secret.startswith("SIG-") for k in keys)

    @pytest.mark.parametrize(
        "duration_days,count",
        [(0, 1), (3651, 1), (30, 0), (30, MAX_BATCH_SIZE + 1)],
    )
    async def test_bounds_write_nothing(self, memory_key_store, duration_days, count):
        """Test that out-of-bounds requests fail without writing."""
        issuer = KeyIssuer(memory_key_store)

        with pytest.raises(InvalidArgumentError):
            await issuer.generate(duration_days=duration_days, count=count)

        assert await memory_key_store.list() == []

    async def test_blank_note_is_dropped(self, memory_key_store):
        keys = await KeyIssuer(memory_key_store).generate(duration_days=1, count=1, note="   ")
        assert keys[0].note is None

    async def test_collision_with_stored_key_is_regenerated(self, memory_key_store):
        """Test that a secret colliding with a stored key is replaced."""
        await memory_key_store.save_batch(
            [ActivationKey.create("SIG-AAAA-AAAA-AAAA-AAAA", duration_days=1)]
        )
        issuer = KeyIssuer(
            memory_key_store,
            secret_factory=scripted_secrets(
                "SIG-AAAA-AAAA-AAAA-AAAA", "SIG-BBBB-BBBB-BBBB-BBBB"
            ),
        )

        keys = await issuer.generate(duration_days=10, count=1)

        assert keys[0].secret == "SIG-BBBB-BBBB-BBBB-BBBB"

    async def test_collision_within_batch_is_regenerated(self, memory_key_store):
        """Test that only the duplicate slot is regenerated."""
        issuer = KeyIssuer(
            memory_key_store,
            secret_factory=scripted_secrets(
                "SIG-CCCC-CCCC-CCCC-CCCC",
                "SIG-CCCC-CCCC-CCCC-CCCC",
                "SIG-DDDD-DDDD-DDDD-DDDD",
            ),
        )

        keys = await issuer.generate(duration_days=10, count=2)

        assert [k.secret for k in keys] == [
            "SIG-CCCC-CCCC-CCCC-CCCC",
            "SIG-DDDD-DDDD-DDDD-DDDD",
        ]

    async def test_gives_up_after_max_attempts(self, memory_key_store):
        """Test that persistent collisions fail the whole batch."""
        await memory_key_store.save_batch(
            [ActivationKey.create("SIG-EEEE-EEEE-EEEE-EEEE", duration_days=1)]
        )
        issuer = KeyIssuer(
            memory_key_store,
            secret_factory=lambda prefix: "SIG-EEEE-EEEE-EEEE-EEEE",
            max_attempts=3,
        )

        with pytest.raises(StorageFailureError):
            await issuer.generate(duration_days=10, count=2)

        assert len(await memory_key_store.list()) == 1

    async def test_storage_failure_writes_nothing(self, memory_key_store):
        """Test all-or-nothing when the store rejects the batch."""

        class FailingStore:
            repository = memory_key_store.repository

            async def save_batch(self, keys):
                raise StorageFailureError("disk full")

        counter = itertools.count()
        issuer = KeyIssuer(
            FailingStore(), secret_factory=lambda prefix: f"SIG-{next(counter):04d}-AAAA-AAAA-AAAA"
        )

        with pytest.raises(StorageFailureError):
            await issuer.generate(duration_days=10, count=3)

        assert await memory_key_store.list() == []
