"""
Django admin configuration for access_groups app.
"""
from django.contrib import admin

from access_groups.infrastructure.models import AccessGroup


@admin.register(AccessGroup)
class AccessGroupAdmin(admin.ModelAdmin):
    """Admin interface for AccessGroup model."""

    list_display = ["name", "allowed_tabs", "member_count", "updated_at"]
    search_fields = ["name"]
    readonly_fields = ["id", "created_at", "updated_at"]
    fieldsets = (
        (
            "Basic Information",
            {
                "fields": ("id", "name", "allowed_tabs"),
                "description": "Allowed tabs is a list of tab names, e.g. [\"dashboard\", \"chart\"].",
            },
        ),
        (
            "Timestamps",
            {
                "fields": ("created_at", "updated_at"),
                "classes": ("collapse",),
            },
        ),
    )

    def member_count(self, obj):
        """Display number of principals in this group."""
        return obj.principals.count()

    member_count.short_description = "Members"
