# servicedesk/models.py
"""
Resident requests.

Ticket: a complaint or maintenance request.
DeliveryOrder: a delivery request, same lifecycle without a priority.

Both carry a public_id (UUID) for references given out over WhatsApp,
so internal ids are never exposed to residents.
"""

import uuid

from django.conf import settings
from django.db import models

from properties.models import OperationalUnit, Resident


TITLE_MAX_LENGTH = 100


class RequestStatus(models.TextChoices):
    NEW = "NEW", "New"
    IN_PROGRESS = "IN_PROGRESS", "In progress"
    RESOLVED = "RESOLVED", "Resolved"
    CLOSED = "CLOSED", "Closed"


class ResidentRequest(models.Model):
    public_id = models.UUIDField(default=uuid.uuid4, unique=True, editable=False)
    resident = models.ForeignKey(
        Resident,
        on_delete=models.PROTECT,
        related_name="%(class)ss",
    )
    unit = models.ForeignKey(
        OperationalUnit,
        on_delete=models.PROTECT,
        related_name="%(class)ss",
    )
    title = models.CharField(max_length=TITLE_MAX_LENGTH)
    description = models.TextField()
    status = models.CharField(
        max_length=20,
        choices=RequestStatus.choices,
        default=RequestStatus.NEW,
    )
    assigned_to = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="assigned_%(class)ss",
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        abstract = True
        ordering = ["-created_at"]

    def __str__(self):
        return self.title


class Ticket(ResidentRequest):
    priority = models.CharField(max_length=20, default="Normal")

    class Meta(ResidentRequest.Meta):
        pass

    @property
    def ticket_number(self) -> str:
        return f"TICK-{self.public_id.hex[:8].upper()}"


class DeliveryOrder(ResidentRequest):
    class Meta(ResidentRequest.Meta):
        pass
