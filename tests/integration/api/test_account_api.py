"""
Integration tests for Account API endpoints.
"""

import uuid
from datetime import timedelta

import pytest
from django.test import override_settings
from django.urls import reverse
from django.utils import timezone

from accounts.infrastructure.models import Principal
from access_groups.infrastructure.models import AccessGroup
from activation_keys.infrastructure.models import ActivationKey
from core.infrastructure.models import AuditLog


def mint_key(make_principal, auth_client, duration_days=30):
    """Mint one key through the admin API and return its JSON."""
    _, admin_token = make_principal("admin")
    response = auth_client(admin_token).post(
        reverse("admin_api:generate-keys"),
        {"duration_days": duration_days, "count": 1},
        format="json",
    )
    assert response.status_code == 201
    return response.json()["keys"][0]


@pytest.mark.django_db
@pytest.mark.integration
class TestRedeemAPI:
    """Integration tests for activation key redemption."""

    def test_redeem_extends_and_promotes(self, make_principal, auth_client):
        """Test a first redemption by a principal in the default group."""
        key = mint_key(make_principal, auth_client, duration_days=30)
        member, token = make_principal("user")
        before = timezone.now()

        response = auth_client(token).post(
            reverse("account:redeem"), {"secret": key["secret"]}, format="json"
        )

        assert response.status_code == 200
        assert response.json()["duration_days"] == 30
        member.refresh_from_db()
        assert member.group.name == "pro"
        assert member.subscription_expires_at >= before + timedelta(days=30)
        stored = ActivationKey.objects.get(id=key["id"])
        assert stored.state == "used"
        assert stored.used_by_principal_id == member.id
        assert AuditLog.objects.filter(
            event_type="ActivationKeyRedeemed", aggregate_id=str(key["id"])
        ).exists()

    def test_redeem_stacks_remaining_time(self, make_principal, auth_client):
        key = mint_key(make_principal, auth_client, duration_days=10)
        expiry = timezone.now() + timedelta(days=20)
        member, token = make_principal("pro", subscription_expires_at=expiry)

        response = auth_client(token).post(
            reverse("account:redeem"), {"secret": key["secret"]}, format="json"
        )

        assert response.status_code == 200
        member.refresh_from_db()
        assert member.subscription_expires_at == expiry + timedelta(days=10)

    def test_redeem_is_case_insensitive(self, make_principal, auth_client):
        key = mint_key(make_principal, auth_client)
        _, token = make_principal("user")

        response = auth_client(token).post(
            reverse("account:redeem"), {"secret": f" {key['secret'].lower()} "}, format="json"
        )

        assert response.status_code == 200

    def test_redeem_twice(self, make_principal, auth_client):
        """Test that a second redemption fails and grants nothing."""
        key = mint_key(make_principal, auth_client)
        member, token = make_principal("user")
        client = auth_client(token)
        client.post(reverse("account:redeem"), {"secret": key["secret"]}, format="json")
        member.refresh_from_db()
        first_expiry = member.subscription_expires_at

        response = client.post(reverse("account:redeem"), {"secret": key["secret"]}, format="json")

        assert response.status_code == 409
        assert response.json()["error"]["code"] == "KEY_ALREADY_CONSUMED"
        member.refresh_from_db()
        assert member.subscription_expires_at == first_expiry

    def test_redeem_revoked_key(self, make_principal, auth_client):
        key = mint_key(make_principal, auth_client)
        _, admin_token = make_principal("admin")
        auth_client(admin_token).post(reverse("admin_api:revoke-key", kwargs={"key_id": key["id"]}))
        _, token = make_principal("user")

        response = auth_client(token).post(
            reverse("account:redeem"), {"secret": key["secret"]}, format="json"
        )

        assert response.status_code == 409
        assert response.json()["error"]["code"] == "KEY_REVOKED"

    def test_redeem_unknown_key(self, make_principal, auth_client):
        _, token = make_principal("user")

        response = auth_client(token).post(
            reverse("account:redeem"), {"secret": "TEST-ZZZZ-ZZZZ-ZZZZ-ZZZZ"}, format="json"
        )

        assert response.status_code == 404
        assert response.json()["error"]["message"] == "Activation key is not valid"

    def test_redeem_empty_secret(self, make_principal, auth_client):
        _, token = make_principal("user")

        response = auth_client(token).post(reverse("account:redeem"), {"secret": ""}, format="json")

        assert response.status_code == 400

    def test_redeem_requires_token(self, api_client):
        response = api_client.post(
            reverse("account:redeem"), {"secret": "TEST-AAAA-AAAA-AAAA-AAAA"}, format="json"
        )
        assert response.status_code == 401

    def test_redeem_invalid_token(self, auth_client):
        response = auth_client("not-a-real-token").post(
            reverse("account:redeem"), {"secret": "TEST-AAAA-AAAA-AAAA-AAAA"}, format="json"
        )
        assert response.status_code == 401

    @override_settings(REDEEM_RATE_LIMIT=3)
    def test_redeem_rate_limit(self, make_principal, auth_client):
        """Test that repeated guesses are throttled per session."""
        _, token = make_principal("user")
        client = auth_client(token)

        statuses = [
            client.post(
                reverse("account:redeem"), {"secret": f"TEST-GUESS-{i:04d}"}, format="json"
            ).status_code
            for i in range(4)
        ]

        assert statuses[:3] == [404, 404, 404]
        assert statuses[3] == 429


@pytest.mark.django_db
@pytest.mark.integration
class TestProfileAndAccessAPI:
    """Integration tests for profile and access checks."""

    def test_me(self, make_principal, auth_client):
        member, token = make_principal("user")

        response = auth_client(token).get(reverse("account:me"))

        assert response.status_code == 200
        data = response.json()
        assert data["principal"]["username"] == member.username
        assert data["principal"]["group_name"] == "user"
        assert data["allowed_tabs"] == ["dashboard", "settings", "activate"]
        assert data["has_active_subscription"] is False

    def test_access_check_own(self, make_principal, auth_client):
        _, token = make_principal("viewer")
        client = auth_client(token)

        assert client.get(reverse("account:access-check"), {"tab": "chart"}).json() == {
            "allowed": True
        }
        assert client.get(reverse("account:access-check"), {"tab": "admin"}).json() == {
            "allowed": False
        }
        assert client.get(reverse("account:access-check"), {"tab": "unknown"}).json() == {
            "allowed": False
        }

    def test_access_check_other_principal_requires_admin(self, make_principal, auth_client):
        other, _ = make_principal("viewer")
        _, token = make_principal("user")

        response = auth_client(token).get(
            reverse("account:access-check"), {"tab": "chart", "principal_id": str(other.id)}
        )

        assert response.status_code == 403
        assert response.json()["error"]["code"] == "ACCESS_DENIED"

    def test_access_check_other_principal_as_admin(self, make_principal, auth_client):
        other, _ = make_principal("viewer")
        _, token = make_principal("admin")

        response = auth_client(token).get(
            reverse("account:access-check"), {"tab": "chart", "principal_id": str(other.id)}
        )

        assert response.json() == {"allowed": True}

    def test_access_check_unknown_principal(self, make_principal, auth_client):
        _, token = make_principal("admin")

        response = auth_client(token).get(
            reverse("account:access-check"), {"tab": "chart", "principal_id": str(uuid.uuid4())}
        )

        assert response.json() == {"allowed": False}

    def test_membership_change_takes_effect_next_request(self, make_principal, auth_client):
        """Test that moving a principal is seen without re-login."""
        member, token = make_principal("user")
        client = auth_client(token)
        assert client.get(reverse("account:access-check"), {"tab": "chart"}).json() == {
            "allowed": False
        }

        viewer_group = AccessGroup.objects.get(name="viewer")
        Principal.objects.filter(id=member.id).update(group=viewer_group)

        assert client.get(reverse("account:access-check"), {"tab": "chart"}).json() == {
            "allowed": True
        }


@pytest.mark.django_db
@pytest.mark.integration
class TestAuthAPI:
    """Integration tests for register, login and logout."""

    def register(self, client, username="alice", password="secret-pass"):
        return client.post(
            reverse("account:register"),
            {"username": username, "password": password},
            format="json",
        )

    def test_register_then_redeem(self, api_client, make_principal, auth_client):
        """Test that a self-registered user can redeem a key with their session."""
        response = self.register(api_client)

        assert response.status_code == 201
        data = response.json()
        assert data["profile"]["principal"]["group_name"] == "user"
        assert data["profile"]["allowed_tabs"] == ["dashboard", "settings", "activate"]
        stored = Principal.objects.get(username="alice")
        assert stored.password and stored.password != "secret-pass"
        assert AuditLog.objects.filter(
            event_type="PrincipalRegistered", aggregate_id=str(stored.id)
        ).exists()

        key = mint_key(make_principal, auth_client)
        redeemed = auth_client(data["token"]).post(
            reverse("account:redeem"), {"secret": key["secret"]}, format="json"
        )

        assert redeemed.status_code == 200
        stored.refresh_from_db()
        assert stored.group.name == "pro"

    def test_register_duplicate_username(self, api_client):
        self.register(api_client)

        response = self.register(api_client, password="another-pass")

        assert response.status_code == 409
        assert response.json()["error"]["code"] == "USERNAME_TAKEN"

    def test_register_short_password(self, api_client):
        response = self.register(api_client, password="abc")

        assert response.status_code == 400
        assert response.json()["error"]["code"] == "INVALID_ARGUMENT"
        assert not Principal.objects.filter(username="alice").exists()

    def test_login(self, api_client):
        self.register(api_client)

        response = api_client.post(
            reverse("account:login"),
            {"username": "alice", "password": "secret-pass"},
            format="json",
        )

        assert response.status_code == 200
        api_client.credentials(HTTP_AUTHORIZATION=f"Bearer {response.json()['token']}")
        me = api_client.get(reverse("account:me"))
        assert me.json()["principal"]["username"] == "alice"

    @pytest.mark.parametrize("username,password", [("alice", "wrong-pass"), ("bob", "secret-pass")])
    def test_login_rejected(self, api_client, username, password):
        self.register(api_client)

        response = api_client.post(
            reverse("account:login"),
            {"username": username, "password": password},
            format="json",
        )

        assert response.status_code == 401
        assert response.json()["error"] == {
            "code": "INVALID_CREDENTIALS",
            "message": "Invalid username or password",
        }

    def test_operator_created_principal_cannot_login(self, api_client, make_principal):
        member, _ = make_principal("user")

        response = api_client.post(
            reverse("account:login"),
            {"username": member.username, "password": ""},
            format="json",
        )

        assert response.status_code == 400

        response = api_client.post(
            reverse("account:login"),
            {"username": member.username, "password": "anything"},
            format="json",
        )

        assert response.status_code == 401

    def test_logout_invalidates_session(self, api_client, auth_client):
        token = self.register(api_client).json()["token"]
        client = auth_client(token)

        assert client.post(reverse("account:logout")).status_code == 200
        assert client.get(reverse("account:me")).status_code == 401

    def test_logout_requires_session(self, api_client):
        assert api_client.post(reverse("account:logout")).status_code == 401
