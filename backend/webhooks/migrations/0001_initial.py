import django.core.serializers.json
import django.db.models.deletion
from django.db import migrations, models


ROLE_CHOICES = [
    ("ADMIN", "Administrator"),
    ("ACCOUNTANT", "Accountant"),
    ("PROJECT_MANAGER", "Project manager"),
    ("RESIDENT", "Resident"),
]


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="WebhookApiKey",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("name", models.CharField(max_length=100)),
                ("prefix", models.CharField(db_index=True, max_length=12)),
                ("key_hash", models.CharField(max_length=64, unique=True)),
                ("role", models.CharField(choices=ROLE_CHOICES, max_length=20)),
                ("is_active", models.BooleanField(default=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("last_used_at", models.DateTimeField(blank=True, null=True)),
            ],
            options={
                "ordering": ["name"],
            },
        ),
        migrations.CreateModel(
            name="WebhookLog",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("source", models.CharField(max_length=50)),
                ("event_type", models.CharField(max_length=50)),
                ("endpoint", models.CharField(blank=True, default="", max_length=255)),
                ("method", models.CharField(blank=True, default="", max_length=10)),
                ("status", models.CharField(choices=[("success", "Success"), ("error", "Error")], max_length=10)),
                ("status_code", models.PositiveSmallIntegerField(blank=True, null=True)),
                ("payload", models.JSONField(blank=True, encoder=django.core.serializers.json.DjangoJSONEncoder, null=True)),
                ("response", models.JSONField(blank=True, encoder=django.core.serializers.json.DjangoJSONEncoder, null=True)),
                ("error_message", models.TextField(blank=True, default="")),
                ("ip_address", models.CharField(blank=True, default="", max_length=64)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("api_key", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="logs", to="webhooks.webhookapikey")),
            ],
            options={
                "ordering": ["-created_at"],
                "indexes": [models.Index(fields=["event_type", "created_at"], name="webhook_log_event_idx")],
            },
        ),
    ]
