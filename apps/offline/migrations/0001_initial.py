import django.utils.timezone
from django.db import migrations, models


def mirrored_entity_fields():
    return [
        ("id", models.CharField(max_length=255, primary_key=True, serialize=False)),
        ("data", models.JSONField()),
        ("stored_at", models.DateTimeField(default=django.utils.timezone.now)),
    ]


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="PendingSyncItem",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("url", models.CharField(db_index=True, max_length=2048)),
                (
                    "method",
                    models.CharField(
                        choices=[("POST", "POST"), ("PUT", "PUT"), ("PATCH", "PATCH"), ("DELETE", "DELETE")],
                        max_length=10,
                    ),
                ),
                ("headers", models.JSONField(default=dict)),
                ("data", models.JSONField(blank=True, null=True)),
                ("timestamp", models.DateTimeField(db_index=True, default=django.utils.timezone.now)),
                ("retry_count", models.PositiveIntegerField(default=0)),
            ],
            options={
                "db_table": "offline_pending_sync",
                "ordering": ["id"],
            },
        ),
        migrations.CreateModel(
            name="CacheEntry",
            fields=[
                ("key", models.CharField(max_length=512, primary_key=True, serialize=False)),
                ("value", models.JSONField(null=True)),
                ("timestamp", models.DateTimeField(db_index=True, default=django.utils.timezone.now)),
                ("expires_at", models.DateTimeField(blank=True, db_index=True, null=True)),
            ],
            options={
                "db_table": "offline_cache",
            },
        ),
        migrations.CreateModel(
            name="OfflineEvent",
            fields=mirrored_entity_fields(),
            options={
                "db_table": "offline_events",
                "ordering": ["id"],
                "abstract": False,
            },
        ),
        migrations.CreateModel(
            name="OfflineTask",
            fields=mirrored_entity_fields(),
            options={
                "db_table": "offline_tasks",
                "ordering": ["id"],
                "abstract": False,
            },
        ),
        migrations.CreateModel(
            name="OfflineProtocol",
            fields=mirrored_entity_fields(),
            options={
                "db_table": "offline_protocols",
                "ordering": ["id"],
                "abstract": False,
            },
        ),
    ]
