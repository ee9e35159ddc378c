"""
Unit tests for ActivationKey entity.
"""

import re
import uuid
from datetime import datetime, timezone

import pytest

from activation_keys.domain.activation_key import (
    ActivationKey,
    generate_activation_secret,
    hash_secret,
    normalize_secret,
)
from core.domain.exceptions import (
    AlreadyRevokedError,
    InvalidArgumentError,
    KeyAlreadyConsumedError,
    KeyRevokedError,
)
from core.domain.value_objects import KeyState

SECRET_PATTERN = re.compile(r"^SIG(-[A-Z0-9]{4}){4}$")


class TestSecretGeneration:
    """Tests for secret helpers."""

    def test_secret_format(self):
        """Test generated secret format."""
        secret = generate_activation_secret("sig")
        assert SECRET_PATTERN.match(secret)

    def test_secret_without_prefix(self):
        secret = generate_activation_secret("")
        assert re.match(r"^[A-Z0-9]{4}(-[A-Z0-9]{4}){3}$", secret)

    def test_secrets_differ(self):
        secrets = {generate_activation_secret("SIG") for _ in range(50)}
        assert len(secrets) == 50

    def test_hash_ignores_case_and_whitespace(self):
        """Test that lookups match regardless of case and surrounding space."""
        assert hash_secret(" sig-abcd-efgh ") == hash_secret("SIG-ABCD-EFGH")
        assert normalize_secret(None) == ""


class TestActivationKey:
    """Tests for ActivationKey entity."""

    def test_create_key(self):
        """Test creating a key."""
        key = ActivationKey.create("sig-aaaa-bbbb-cccc-dddd", duration_days=30, note="promo")

        assert key.id is None
        assert key.secret == "SIG-AAAA-BBBB-CCCC-DDDD"
        assert key.state is KeyState.ACTIVE
        assert key.note == "promo"
        assert key.used_at is None
        assert key.verify_secret("sig-aaaa-bbbb-cccc-dddd")
        assert not key.verify_secret("SIG-AAAA-BBBB-CCCC-DDDE")

    def test_empty_note_is_stored_as_none(self):
        key = ActivationKey.create("SIG-AAAA-BBBB-CCCC-DDDD", duration_days=30, note="")
        assert key.note is None

    @pytest.mark.parametrize("days", [0, -1, 3651])
    def test_duration_out_of_bounds(self, days):
        """Test that the duration must be within 1..3650."""
        with pytest.raises(InvalidArgumentError):
            ActivationKey.create("SIG-AAAA-BBBB-CCCC-DDDD", duration_days=days)

    def test_mark_used(self):
        """Test active -> used."""
        key = ActivationKey.create("SIG-AAAA-BBBB-CCCC-DDDD", duration_days=7)
        principal_id = uuid.uuid4()
        now = datetime.now(timezone.utc)

        used = key.mark_used(principal_id, now)

        assert used.state is KeyState.USED
        assert used.used_by_principal_id == principal_id
        assert used.used_at == now
        assert key.state is KeyState.ACTIVE

    def test_used_key_cannot_be_used_again(self):
        key = ActivationKey.create("SIG-AAAA-BBBB-CCCC-DDDD", duration_days=7)
        used = key.mark_used(uuid.uuid4(), datetime.now(timezone.utc))

        with pytest.raises(KeyAlreadyConsumedError):
            used.mark_used(uuid.uuid4(), datetime.now(timezone.utc))

    def test_used_key_cannot_be_revoked(self):
        key = ActivationKey.create("SIG-AAAA-BBBB-CCCC-DDDD", duration_days=7)
        used = key.mark_used(uuid.uuid4(), datetime.now(timezone.utc))

        with pytest.raises(KeyAlreadyConsumedError):
            used.revoke(datetime.now(timezone.utc))

    def test_revoked_key(self):
        """Test active -> revoked and what a revoked key refuses."""
        key = ActivationKey.create("SIG-AAAA-BBBB-CCCC-DDDD", duration_days=7)
        revoked = key.revoke(datetime.now(timezone.utc))

        assert revoked.state is KeyState.REVOKED
        with pytest.raises(KeyRevokedError):
            revoked.mark_used(uuid.uuid4(), datetime.now(timezone.utc))
        with pytest.raises(AlreadyRevokedError):
            revoked.revoke(datetime.now(timezone.utc))

    def test_state_must_match_timestamps(self):
        now = datetime.now(timezone.utc)
        with pytest.raises(InvalidArgumentError):
            ActivationKey(
                id=1,
                secret="SIG-AAAA-BBBB-CCCC-DDDD",
                secret_hash=hash_secret("SIG-AAAA-BBBB-CCCC-DDDD"),
                duration_days=7,
                note=None,
                created_at=now,
                state=KeyState.ACTIVE,
                used_at=now,
                used_by_principal_id=uuid.uuid4(),
            )
