from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="AccessGroup",
            fields=[
                (
                    "id",
                    models.BigAutoField(
                        auto_created=True, primary_key=True, serialize=False, verbose_name="ID"
                    ),
                ),
                (
                    "name",
                    models.CharField(
                        help_text="Group display label", max_length=100, unique=True
                    ),
                ),
                (
                    "allowed_tabs",
                    models.JSONField(
                        blank=True,
                        default=list,
                        help_text="Feature tabs members of this group may use",
                    ),
                ),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={
                "db_table": "groups",
                "ordering": ["id"],
            },
        ),
    ]
