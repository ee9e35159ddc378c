import uuid

from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="AuditLog",
            fields=[
                (
                    "id",
                    models.UUIDField(
                        default=uuid.uuid4, editable=False, primary_key=True, serialize=False
                    ),
                ),
                ("event_id", models.UUIDField(editable=False, unique=True)),
                ("event_type", models.CharField(max_length=100)),
                ("aggregate_id", models.CharField(blank=True, max_length=100)),
                ("data", models.JSONField(default=dict, help_text="Event details")),
                ("requires_reconciliation", models.BooleanField(default=False)),
                ("occurred_at", models.DateTimeField()),
                ("created_at", models.DateTimeField(auto_now_add=True)),
            ],
            options={
                "db_table": "audit_logs",
                "ordering": ["-occurred_at"],
                "indexes": [
                    models.Index(
                        fields=["event_type", "aggregate_id"], name="audit_logs_event_idx"
                    ),
                    models.Index(
                        fields=["requires_reconciliation"], name="audit_logs_reconcile_idx"
                    ),
                ],
            },
        ),
    ]
