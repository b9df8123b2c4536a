import uuid

import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


STATUS_CHOICES = [
    ("NEW", "New"),
    ("IN_PROGRESS", "In progress"),
    ("RESOLVED", "Resolved"),
    ("CLOSED", "Closed"),
]


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("properties", "0001_initial"),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Ticket",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("public_id", models.UUIDField(default=uuid.uuid4, editable=False, unique=True)),
                ("title", models.CharField(max_length=100)),
                ("description", models.TextField()),
                ("status", models.CharField(choices=STATUS_CHOICES, default="NEW", max_length=20)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("priority", models.CharField(default="Normal", max_length=20)),
                ("assigned_to", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="assigned_tickets", to=settings.AUTH_USER_MODEL)),
                ("resident", models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name="tickets", to="properties.resident")),
                ("unit", models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name="tickets", to="properties.operationalunit")),
            ],
            options={
                "ordering": ["-created_at"],
                "abstract": False,
            },
        ),
        migrations.CreateModel(
            name="DeliveryOrder",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("public_id", models.UUIDField(default=uuid.uuid4, editable=False, unique=True)),
                ("title", models.CharField(max_length=100)),
                ("description", models.TextField()),
                ("status", models.CharField(choices=STATUS_CHOICES, default="NEW", max_length=20)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("assigned_to", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="assigned_deliveryorders", to=settings.AUTH_USER_MODEL)),
                ("resident", models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name="deliveryorders", to="properties.resident")),
                ("unit", models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name="deliveryorders", to="properties.operationalunit")),
            ],
            options={
                "ordering": ["-created_at"],
                "abstract": False,
            },
        ),
    ]
