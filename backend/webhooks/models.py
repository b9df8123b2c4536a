# webhooks/models.py
import hashlib
import secrets

from django.core.serializers.json import DjangoJSONEncoder
from django.db import models

from accounts.models import User


def hash_api_key(raw_key: str) -> str:
    return hashlib.sha256(raw_key.encode("utf-8")).hexdigest()


class WebhookApiKey(models.Model):
    """
    Credential for an automation caller.

    Only the sha256 of the key is stored; the raw key is shown once,
    when issued. `role` limits what the caller may do.
    """

    name = models.CharField(max_length=100)
    prefix = models.CharField(max_length=12, db_index=True)
    key_hash = models.CharField(max_length=64, unique=True)
    role = models.CharField(max_length=20, choices=User.Role.choices)
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    last_used_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        ordering = ["name"]

    def __str__(self):
        return f"{self.name} ({self.prefix}…)"

    @classmethod
    def issue(cls, name: str, role: str):
        """Create a key and return (api_key, raw_key)."""
        raw_key = secrets.token_urlsafe(32)
        api_key = cls.objects.create(
            name=name,
            prefix=raw_key[:8],
            key_hash=hash_api_key(raw_key),
            role=role,
        )
        return api_key, raw_key


class WebhookLog(models.Model):
    """One row per webhook outcome worth keeping (errors, API-key calls)."""

    class Status(models.TextChoices):
        SUCCESS = "success", "Success"
        ERROR = "error", "Error"

    source = models.CharField(max_length=50)
    event_type = models.CharField(max_length=50)
    endpoint = models.CharField(max_length=255, blank=True, default="")
    method = models.CharField(max_length=10, blank=True, default="")
    status = models.CharField(max_length=10, choices=Status.choices)
    status_code = models.PositiveSmallIntegerField(null=True, blank=True)
    payload = models.JSONField(null=True, blank=True, encoder=DjangoJSONEncoder)
    response = models.JSONField(null=True, blank=True, encoder=DjangoJSONEncoder)
    error_message = models.TextField(blank=True, default="")
    ip_address = models.CharField(max_length=64, blank=True, default="")
    api_key = models.ForeignKey(
        WebhookApiKey,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="logs",
    )
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["event_type", "created_at"], name="webhook_log_event_idx"),
        ]

    def __str__(self):
        return f"{self.event_type} {self.status_code or self.status}"
