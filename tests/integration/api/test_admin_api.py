"""
Integration tests for Admin API endpoints.
"""

import pytest
from django.urls import reverse

from access_groups.infrastructure.models import AccessGroup
from activation_keys.infrastructure.models import ActivationKey
from core.infrastructure.models import AuditLog


@pytest.mark.django_db
@pytest.mark.integration
class TestActivationKeyAdminAPI:
    """Integration tests for activation key administration."""

    def test_generate_keys(self, make_principal, auth_client):
        """Test minting keys as an administrator."""
        _, token = make_principal("admin")
        client = auth_client(token)

        response = client.post(
            reverse("admin_api:generate-keys"),
            {"duration_days": 30, "count": 3, "note": "spring promo"},
            format="json",
        )

        assert response.status_code == 201
        keys = response.json()["keys"]
        assert len(keys) == 3
        assert all(k["secret"].startswith("TEST-") for k in keys)
        assert all(k["state"] == "active" and k["duration_days"] == 30 for k in keys)
        assert ActivationKey.objects.count() == 3

    def test_generate_requires_token(self, api_client):
        response = api_client.post(
            reverse("admin_api:generate-keys"),
            {"duration_days": 30, "count": 1},
            format="json",
        )

        assert response.status_code == 401
        assert response.json()["error"]["code"] == "UNAUTHORIZED"

    def test_generate_requires_admin_tab(self, make_principal, auth_client):
        """Test that a principal without the admin tab is refused."""
        _, token = make_principal("pro")

        response = auth_client(token).post(
            reverse("admin_api:generate-keys"),
            {"duration_days": 30, "count": 1},
            format="json",
        )

        assert response.status_code == 403
        assert response.json()["error"]["code"] == "ACCESS_DENIED"
        assert ActivationKey.objects.count() == 0

    @pytest.mark.parametrize(
        "payload",
        [
            {"duration_days": 0, "count": 1},
            {"duration_days": 3651, "count": 1},
            {"duration_days": 30, "count": 0},
            {"duration_days": 30, "count": 101},
        ],
    )
    def test_generate_out_of_bounds(self, make_principal, auth_client, payload):
        _, token = make_principal("admin")

        response = auth_client(token).post(
            reverse("admin_api:generate-keys"), payload, format="json"
        )

        assert response.status_code == 400
        assert response.json()["error"]["code"] == "INVALID_ARGUMENT"
        assert ActivationKey.objects.count() == 0

    def test_list_keys_newest_first(self, make_principal, auth_client):
        _, token = make_principal("admin")
        client = auth_client(token)
        client.post(
            reverse("admin_api:generate-keys"), {"duration_days": 7, "count": 2}, format="json"
        )
        client.post(
            reverse("admin_api:generate-keys"), {"duration_days": 90, "count": 1}, format="json"
        )

        response = client.get(reverse("admin_api:list-keys"), {"limit": 2})

        assert response.status_code == 200
        keys = response.json()
        assert len(keys) == 2
        assert keys[0]["duration_days"] == 90

    def test_revoke_key(self, make_principal, auth_client):
        """Test revoking an active key, then revoking it again."""
        _, token = make_principal("admin")
        client = auth_client(token)
        created = client.post(
            reverse("admin_api:generate-keys"), {"duration_days": 7, "count": 1}, format="json"
        ).json()["keys"][0]
        url = reverse("admin_api:revoke-key", kwargs={"key_id": created["id"]})

        response = client.post(url)

        assert response.status_code == 200
        assert response.json() == {}
        assert ActivationKey.objects.get(id=created["id"]).state == "revoked"
        assert AuditLog.objects.filter(event_type="ActivationKeyRevoked").exists()

        again = client.post(url)
        assert again.status_code == 409
        assert again.json()["error"]["code"] == "ALREADY_REVOKED"

    def test_revoke_missing_key(self, make_principal, auth_client):
        _, token = make_principal("admin")

        response = auth_client(token).post(
            reverse("admin_api:revoke-key", kwargs={"key_id": 999999})
        )

        assert response.status_code == 404

    def test_key_stats(self, make_principal, auth_client):
        _, token = make_principal("admin")
        client = auth_client(token)
        client.post(
            reverse("admin_api:generate-keys"), {"duration_days": 7, "count": 4}, format="json"
        )

        response = client.get(reverse("admin_api:key-stats"))

        assert response.status_code == 200
        assert response.json() == {"total": 4, "active": 4, "used": 0, "revoked": 0}


@pytest.mark.django_db
@pytest.mark.integration
class TestGroupAdminAPI:
    """Integration tests for group administration."""

    def test_list_groups(self, make_principal, auth_client):
        _, token = make_principal("admin")

        response = auth_client(token).get(reverse("admin_api:groups"))

        assert response.status_code == 200
        names = [g["name"] for g in response.json()]
        assert {"user", "viewer", "admin", "pro"} <= set(names)

    def test_set_group_tabs_applies_immediately(self, make_principal, auth_client):
        """Test that a tab edit is seen by the very next access check."""
        _, admin_token = make_principal("admin", is_super_admin=True)
        _, viewer_token = make_principal("viewer")
        viewer_group = AccessGroup.objects.get(name="viewer")

        check = auth_client(viewer_token).get(reverse("account:access-check"), {"tab": "pnl"})
        assert check.json() == {"allowed": False}

        response = auth_client(admin_token).put(
            reverse("admin_api:group-detail", kwargs={"group_id": viewer_group.id}),
            {"allowed_tabs": ["pnl", "chart"]},
            format="json",
        )
        assert response.status_code == 200
        assert response.json() == {}

        viewer_group.refresh_from_db()
        assert viewer_group.allowed_tabs == ["chart", "pnl"]

        check = auth_client(viewer_token).get(reverse("account:access-check"), {"tab": "pnl"})
        assert check.json() == {"allowed": True}
        check = auth_client(viewer_token).get(reverse("account:access-check"), {"tab": "signals"})
        assert check.json() == {"allowed": False}

    def test_set_group_tabs_requires_super_admin(self, make_principal, auth_client):
        _, token = make_principal("admin")
        viewer_group = AccessGroup.objects.get(name="viewer")

        response = auth_client(token).put(
            reverse("admin_api:group-detail", kwargs={"group_id": viewer_group.id}),
            {"allowed_tabs": ["pnl"]},
            format="json",
        )

        assert response.status_code == 403
        viewer_group.refresh_from_db()
        assert "pnl" not in viewer_group.allowed_tabs

    def test_set_group_tabs_unknown_tab(self, make_principal, auth_client):
        _, token = make_principal("admin", is_super_admin=True)
        viewer_group = AccessGroup.objects.get(name="viewer")

        response = auth_client(token).put(
            reverse("admin_api:group-detail", kwargs={"group_id": viewer_group.id}),
            {"allowed_tabs": ["chart", "billing"]},
            format="json",
        )

        assert response.status_code == 400
        viewer_group.refresh_from_db()
        assert viewer_group.allowed_tabs == ["dashboard", "signals", "chart"]

    def test_set_group_tabs_missing_group(self, make_principal, auth_client):
        _, token = make_principal("admin", is_super_admin=True)

        response = auth_client(token).put(
            reverse("admin_api:group-detail", kwargs={"group_id": 999999}),
            {"allowed_tabs": ["chart"]},
            format="json",
        )

        assert response.status_code == 404

    def test_create_and_delete_group(self, make_principal, auth_client):
        _, token = make_principal("admin", is_super_admin=True)
        client = auth_client(token)

        created = client.post(
            reverse("admin_api:groups"),
            {"name": "analyst", "allowed_tabs": ["scanner", "chart"]},
            format="json",
        )
        assert created.status_code == 201
        assert created.json()["allowed_tabs"] == ["chart", "scanner"]

        deleted = client.delete(
            reverse("admin_api:group-detail", kwargs={"group_id": created.json()["id"]})
        )
        assert deleted.status_code == 204
        assert not AccessGroup.objects.filter(name="analyst").exists()

    def test_delete_group_in_use(self, make_principal, auth_client):
        _, token = make_principal("admin", is_super_admin=True)
        make_principal("viewer")
        viewer_group = AccessGroup.objects.get(name="viewer")

        response = auth_client(token).delete(
            reverse("admin_api:group-detail", kwargs={"group_id": viewer_group.id})
        )

        assert response.status_code == 409
        assert response.json()["error"]["code"] == "GROUP_IN_USE"

    def test_assign_principal_group(self, make_principal, auth_client):
        _, token = make_principal("admin", is_super_admin=True)
        member, _ = make_principal("user")
        viewer_group = AccessGroup.objects.get(name="viewer")

        response = auth_client(token).put(
            reverse("admin_api:principal-group", kwargs={"principal_id": member.id}),
            {"group_id": viewer_group.id},
            format="json",
        )

        assert response.status_code == 200
        assert response.json()["group_name"] == "viewer"
        member.refresh_from_db()
        assert member.group_id == viewer_group.id

    def test_list_principals(self, make_principal, auth_client):
        admin, token = make_principal("admin")

        response = auth_client(token).get(reverse("admin_api:principals"))

        assert response.status_code == 200
        assert str(admin.id) in [p["id"] for p in response.json()]
