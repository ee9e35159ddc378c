from django.db import migrations

# Tabs are listed in enumeration order.
SEED_GROUPS = {
    "user": ["dashboard", "settings"],
    "viewer": ["dashboard", "signals", "chart"],
    "admin": [
        "dashboard",
        "signals",
        "chart",
        "demo",
        "autotrade",
        "scanner",
        "pnl",
        "settings",
        "admin",
    ],
    "pro": [
        "dashboard",
        "signals",
        "chart",
        "demo",
        "autotrade",
        "scanner",
        "pnl",
        "settings",
        "activate",
    ],
}


def seed_groups(apps, schema_editor):
    AccessGroup = apps.get_model("access_groups", "AccessGroup")
    for name, tabs in SEED_GROUPS.items():
        AccessGroup.objects.get_or_create(name=name, defaults={"allowed_tabs": tabs})


def remove_groups(apps, schema_editor):
    AccessGroup = apps.get_model("access_groups", "AccessGroup")
    AccessGroup.objects.filter(name__in=list(SEED_GROUPS)).delete()


class Migration(migrations.Migration):

    dependencies = [
        ("access_groups", "0001_initial"),
    ]

    operations = [
        migrations.RunPython(seed_groups, remove_groups),
    ]
