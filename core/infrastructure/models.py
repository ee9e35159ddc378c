"""
Audit log model.
"""

import uuid

from django.db import models


class AuditLog(models.Model):
    """
    Immutable audit trail of key, group and membership changes.

    Rows with ``requires_reconciliation`` set record keys that were consumed
    without the subscription being extended.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    event_id = models.UUIDField(unique=True, editable=False)
    event_type = models.CharField(max_length=100)
    aggregate_id = models.CharField(max_length=100, blank=True)
    data = models.JSONField(default=dict, help_text="Event details")
    requires_reconciliation = models.BooleanField(default=False)
    occurred_at = models.DateTimeField()
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        app_label = "core"
        db_table = "audit_logs"
        ordering = ["-occurred_at"]
        indexes = [
            models.Index(fields=["event_type", "aggregate_id"], name="audit_logs_event_idx"),
            models.Index(fields=["requires_reconciliation"], name="audit_logs_reconcile_idx"),
        ]

    def __str__(self):
        return f"{self.event_type} - {self.aggregate_id}"
