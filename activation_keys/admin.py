"""
Django admin configuration for activation_keys app.
"""
from datetime import datetime, timezone

from asgiref.sync import async_to_sync
from django.contrib import admin, messages
from django.utils.html import format_html

from activation_keys.domain.events import ActivationKeyRevoked
from activation_keys.domain.key_store import KeyStore
from activation_keys.infrastructure.models import ActivationKey
from activation_keys.infrastructure.repositories.django_activation_key_repository import (
    DjangoActivationKeyRepository,
)
from core.domain.exceptions import DomainException
from core.infrastructure.events import event_bus


@admin.register(ActivationKey)
class ActivationKeyAdmin(admin.ModelAdmin):
    """
    Admin interface for ActivationKey model.

    Keys are minted through the API and are read-only here; state only
    changes through the revoke action, which goes through KeyStore.
    """

    list_display = [
        "secret",
        "duration_days",
        "state_display",
        "note",
        "used_by_principal_id",
        "used_at",
        "created_at",
    ]
    list_filter = ["state", "duration_days", "created_at"]
    search_fields = ["secret", "note", "used_by_principal_id"]
    readonly_fields = [
        "id",
        "secret",
        "duration_days",
        "note",
        "state",
        "used_by_principal_id",
        "used_at",
        "revoked_at",
        "created_at",
    ]
    exclude = ["secret_hash"]
    actions = ["revoke_selected"]

    def state_display(self, obj):
        """Display state with color."""
        colors = {"active": "green", "used": "#999", "revoked": "red"}
        return format_html(
            '<span style="color: {};">{}</span>',
            colors.get(obj.state, "black"),
            obj.get_state_display(),
        )

    state_display.short_description = "State"

    def has_add_permission(self, request):
        """Keys are minted through the admin API."""
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False

    @admin.action(description="Revoke selected keys")
    def revoke_selected(self, request, queryset):
        """Revoke every selected key that is still active."""
        key_store = KeyStore(DjangoActivationKeyRepository())
        revoked = 0
        for key_id in queryset.values_list("id", flat=True):
            try:
                async_to_sync(key_store.revoke)(key_id, datetime.now(timezone.utc))
            except DomainException as e:
                self.message_user(request, f"Key {key_id}: {e.message}", level=messages.WARNING)
                continue
            async_to_sync(event_bus.publish)(ActivationKeyRevoked(key_id=key_id))
            revoked += 1
        self.message_user(request, f"Revoked {revoked} key(s)", level=messages.SUCCESS)
