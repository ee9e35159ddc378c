"""
Django admin configuration for accounts app.
"""
from django.contrib import admin
from django.utils import timezone
from django.utils.html import format_html

from accounts.infrastructure.models import Principal, Session


@admin.register(Principal)
class PrincipalAdmin(admin.ModelAdmin):
    """Admin interface for Principal model."""

    list_display = [
        "username",
        "group",
        "subscription_display",
        "is_super_admin",
        "created_at",
    ]
    list_filter = ["group", "is_super_admin", "created_at"]
    search_fields = ["username"]
    readonly_fields = ["id", "created_at"]
    exclude = ["password"]

    def subscription_display(self, obj):
        """Display subscription expiry with color."""
        if obj.subscription_expires_at is None:
            return "-"
        color = "green" if obj.subscription_expires_at > timezone.now() else "red"
        return format_html(
            '<span style="color: {};">{}</span>', color, obj.subscription_expires_at
        )

    subscription_display.short_description = "Subscription Expires"

    def get_queryset(self, request):
        """Optimize queryset."""
        return super().get_queryset(request).select_related("group")


@admin.register(Session)
class SessionAdmin(admin.ModelAdmin):
    """Admin interface for Session model."""

    list_display = ["principal", "token_prefix_display", "created_at", "last_used_at"]
    search_fields = ["principal__username", "token_prefix"]
    readonly_fields = ["id", "principal", "token_prefix", "created_at", "last_used_at"]
    exclude = ["token_hash"]

    def token_prefix_display(self, obj):
        """Display token prefix with ellipsis."""
        return f"{obj.token_prefix}..."

    token_prefix_display.short_description = "Token"

    def has_add_permission(self, request):
        """Tokens are issued with the create_principal command."""
        return False

    def get_queryset(self, request):
        return super().get_queryset(request).select_related("principal")
