# properties/models.py
from django.db import models


class Project(models.Model):
    name = models.CharField(max_length=255)
    code = models.CharField(max_length=50, unique=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["name"]

    def __str__(self):
        return self.name


class OperationalUnit(models.Model):
    """A unit inside a project; webhooks address it by (code, project)."""

    project = models.ForeignKey(
        Project,
        on_delete=models.PROTECT,
        related_name="units",
    )
    code = models.CharField(max_length=50)
    name = models.CharField(max_length=255, blank=True, default="")
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        constraints = [
            models.UniqueConstraint(
                fields=["code", "project"],
                name="uniq_unit_code_per_project",
            ),
        ]
        ordering = ["project_id", "code"]

    def __str__(self):
        return f"{self.code} - {self.name}" if self.name else self.code

    @property
    def label(self) -> str:
        return str(self)


class OwnerAssociation(models.Model):
    """Billing entity of a unit. Claim invoices cannot exist without it."""

    unit = models.OneToOneField(
        OperationalUnit,
        on_delete=models.CASCADE,
        related_name="owner_association",
    )
    name = models.CharField(max_length=255)
    created_at = models.DateTimeField(auto_now_add=True)

    def __str__(self):
        return self.name


class Resident(models.Model):
    class Status(models.TextChoices):
        ACTIVE = "ACTIVE", "Active"
        INACTIVE = "INACTIVE", "Inactive"

    unit = models.ForeignKey(
        OperationalUnit,
        on_delete=models.CASCADE,
        related_name="residents",
    )
    name = models.CharField(max_length=255)
    email = models.EmailField(blank=True, null=True)
    phone = models.CharField(max_length=32, blank=True, null=True, db_index=True)
    whatsapp_phone = models.CharField(max_length=32, blank=True, null=True, db_index=True)
    status = models.CharField(max_length=10, choices=Status.choices, default=Status.ACTIVE)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["name"]

    def __str__(self):
        return self.name
