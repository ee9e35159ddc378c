from django.db import migrations, models


class Migration(migrations.Migration):

    dependencies = [
        ("accounts", "0001_initial"),
    ]

    operations = [
        migrations.AddField(
            model_name="principal",
            name="password",
            field=models.CharField(
                blank=True,
                default="",
                help_text="Django password hash; empty for operator-created principals",
                max_length=128,
            ),
        ),
    ]
