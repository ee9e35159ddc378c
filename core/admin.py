"""
Django admin configuration for core app.
"""
import json

from django.contrib import admin
from django.utils.html import format_html

from core.infrastructure.models import AuditLog


@admin.register(AuditLog)
class AuditLogAdmin(admin.ModelAdmin):
    """Admin interface for AuditLog model."""

    list_display = [
        "event_type",
        "aggregate_id",
        "requires_reconciliation",
        "occurred_at",
    ]
    list_filter = ["event_type", "requires_reconciliation", "occurred_at"]
    search_fields = ["aggregate_id", "event_type"]
    readonly_fields = [
        "id",
        "event_id",
        "event_type",
        "aggregate_id",
        "data_display",
        "requires_reconciliation",
        "occurred_at",
        "created_at",
    ]
    exclude = ["data"]

    def data_display(self, obj):
        """Display event data in a formatted way."""
        if obj.data:
            return format_html(
                '<pre style="background: #f5f5f5; padding: 10px; '
                'border-radius: 4px; overflow-x: auto;">{}</pre>',
                json.dumps(obj.data, indent=2),
            )
        return "-"

    data_display.short_description = "Data"

    def has_add_permission(self, request):
        """Audit logs are read-only."""
        return False

    def has_change_permission(self, request, obj=None):
        return False
