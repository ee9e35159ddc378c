import django.utils.timezone
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="ActivationKey",
            fields=[
                (
                    "id",
                    models.BigAutoField(
                        auto_created=True, primary_key=True, serialize=False, verbose_name="ID"
                    ),
                ),
                ("secret", models.CharField(editable=False, max_length=64, unique=True)),
                (
                    "secret_hash",
                    models.CharField(
                        editable=False,
                        help_text="SHA-256 of the secret, used for redemption lookups",
                        max_length=64,
                        unique=True,
                    ),
                ),
                (
                    "duration_days",
                    models.PositiveIntegerField(help_text="Subscription days granted"),
                ),
                ("note", models.CharField(blank=True, max_length=500, null=True)),
                (
                    "state",
                    models.CharField(
                        choices=[("active", "Active"), ("used", "Used"), ("revoked", "Revoked")],
                        default="active",
                        max_length=10,
                    ),
                ),
                ("used_by_principal_id", models.UUIDField(blank=True, null=True)),
                ("used_at", models.DateTimeField(blank=True, null=True)),
                ("revoked_at", models.DateTimeField(blank=True, null=True)),
                ("created_at", models.DateTimeField(default=django.utils.timezone.now)),
            ],
            options={
                "db_table": "activation_keys",
                "ordering": ["-created_at", "-id"],
                "indexes": [
                    models.Index(fields=["state"], name="activation_keys_state_idx"),
                    models.Index(fields=["-created_at"], name="activation_keys_created_idx"),
                ],
            },
        ),
    ]
