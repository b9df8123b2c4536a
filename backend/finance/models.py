# finance/models.py
"""
Finance write models.

Models:
- DocumentSequence: named counters for document numbers (invoice numbers)
- PMAdvance: cash float issued to a project manager, drawn down by expenses
- Invoice: claim or monthly-service invoice with running payment balance
- UnitExpense: money spent against a unit
- AccountingNote: a pending monetary claim raised by a project manager

All mutations go through finance/commands.py. Model.save() only enforces
TRUE INVARIANTS (balance arithmetic); workflow rules (who may convert a
note, which transitions are legal) live in finance/policies.py.

Money is DecimalField everywhere; nothing here touches float.
"""

from decimal import Decimal

from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import models
from django.db.models import F, Q
from django.utils import timezone

from properties.models import OperationalUnit, OwnerAssociation, Project


MONEY_Q = Decimal("0.01")
ZERO = Decimal("0.00")


def money_field(**kwargs):
    kwargs.setdefault("max_digits", 14)
    kwargs.setdefault("decimal_places", 2)
    return models.DecimalField(**kwargs)


class DocumentSequence(models.Model):
    """
    Named counters for sequential document numbers.

    Allocated by commands under select_for_update so that two
    concurrent requests never draw the same value.
    """

    name = models.CharField(max_length=100, unique=True)
    next_value = models.BigIntegerField(default=1)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"{self.name}={self.next_value}"


class PMAdvance(models.Model):
    """
    Cash float issued to a project manager for one project.

    remaining_amount only goes down, from amount to zero, as expenses
    are drawn against it.
    """

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="pm_advances",
    )
    project = models.ForeignKey(
        Project,
        on_delete=models.PROTECT,
        related_name="pm_advances",
    )
    amount = money_field()
    remaining_amount = money_field()
    description = models.CharField(max_length=255, blank=True, default="")
    issued_at = models.DateTimeField(default=timezone.now)
    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="+",
    )

    class Meta:
        ordering = ["-issued_at"]
        constraints = [
            models.CheckConstraint(
                condition=Q(amount__gt=0),
                name="pm_advance_amount_positive",
            ),
            models.CheckConstraint(
                condition=Q(remaining_amount__gte=0) & Q(remaining_amount__lte=F("amount")),
                name="pm_advance_remaining_in_range",
            ),
        ]

    def __str__(self):
        return f"Advance #{self.pk} ({self.remaining_amount}/{self.amount})"


class Invoice(models.Model):
    """
    Invoice with a running payment balance.

    Invariants (checked in save()):
    - remaining_balance == amount - total_paid
    - is_paid == (amount > 0 and remaining_balance <= 0)

    A freshly opened claim invoice has amount 0 and is open: it exists
    so the unit's next claim expenses have somewhere to land.
    At most one open CLAIM invoice per unit (partial unique constraint).
    """

    class Type(models.TextChoices):
        MONTHLY_SERVICE = "MONTHLY_SERVICE", "Monthly service"
        CLAIM = "CLAIM", "Claim"

    invoice_number = models.CharField(max_length=32, unique=True)
    type = models.CharField(max_length=20, choices=Type.choices, default=Type.CLAIM)
    unit = models.ForeignKey(
        OperationalUnit,
        on_delete=models.PROTECT,
        related_name="invoices",
    )
    owner_association = models.ForeignKey(
        OwnerAssociation,
        on_delete=models.PROTECT,
        related_name="invoices",
    )
    amount = money_field(default=ZERO)
    total_paid = money_field(default=ZERO)
    remaining_balance = money_field(default=ZERO)
    is_paid = models.BooleanField(default=False)
    issued_at = models.DateTimeField(default=timezone.now)
    paid_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        ordering = ["-issued_at"]
        constraints = [
            models.UniqueConstraint(
                fields=["unit"],
                condition=Q(type="CLAIM", is_paid=False),
                name="uniq_open_claim_invoice_per_unit",
            ),
            models.CheckConstraint(
                condition=Q(total_paid__gte=0),
                name="invoice_total_paid_non_negative",
            ),
        ]
        indexes = [
            models.Index(fields=["unit", "type", "is_paid"], name="invoice_unit_type_paid_idx"),
        ]

    def __str__(self):
        return self.invoice_number

    def refresh_balance(self) -> None:
        """Derive remaining_balance and is_paid from amount and total_paid."""
        self.remaining_balance = self.amount - self.total_paid
        self.is_paid = self.amount > 0 and self.remaining_balance <= 0

    def clean(self):
        if self.remaining_balance != self.amount - self.total_paid:
            raise ValidationError(
                f"Invoice {self.invoice_number}: remaining_balance must equal amount - total_paid."
            )
        if self.is_paid != (self.amount > 0 and self.remaining_balance <= 0):
            raise ValidationError(
                f"Invoice {self.invoice_number}: is_paid does not match the balance."
            )
        if self.total_paid < 0:
            raise ValidationError("total_paid cannot be negative.")

    def save(self, *args, **kwargs):
        self.clean()
        super().save(*args, **kwargs)


class UnitExpense(models.Model):
    """
    Money spent against a unit.

    Linked to at most one funding source: a PM advance or a claim invoice.
    When it comes from a converted accounting note it points back at it;
    the one-to-one link means a note can produce at most one expense.
    """

    class SourceType(models.TextChoices):
        OFFICE_FUND = "OFFICE_FUND", "Office fund"
        PM_ADVANCE = "PM_ADVANCE", "PM advance"
        OTHER = "OTHER", "Other"

    unit = models.ForeignKey(
        OperationalUnit,
        on_delete=models.PROTECT,
        related_name="expenses",
    )
    description = models.TextField()
    amount = money_field()
    source_type = models.CharField(max_length=20, choices=SourceType.choices)
    date = models.DateField(default=timezone.localdate)
    recorded_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="recorded_expenses",
    )
    pm_advance = models.ForeignKey(
        PMAdvance,
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="expenses",
    )
    claim_invoice = models.ForeignKey(
        Invoice,
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="expenses",
    )
    from_accounting_note = models.OneToOneField(
        "AccountingNote",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="expense",
    )
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-date", "-id"]
        constraints = [
            models.CheckConstraint(
                condition=Q(amount__gt=0),
                name="unit_expense_amount_positive",
            ),
            models.CheckConstraint(
                condition=Q(pm_advance__isnull=True) | Q(claim_invoice__isnull=True),
                name="unit_expense_single_funding_source",
            ),
        ]

    def __str__(self):
        return f"{self.unit_id}: {self.amount}"


class AccountingNote(models.Model):
    """
    A monetary claim a project manager raises against a unit.

    PENDING -> CONVERTED (an expense was recorded from it)
    PENDING -> REJECTED
    Both outcomes are terminal. converted_at holds the decision time for
    either outcome.
    """

    class Status(models.TextChoices):
        PENDING = "PENDING", "Pending"
        CONVERTED = "CONVERTED", "Converted"
        REJECTED = "REJECTED", "Rejected"

    project = models.ForeignKey(
        Project,
        on_delete=models.PROTECT,
        related_name="accounting_notes",
    )
    unit = models.ForeignKey(
        OperationalUnit,
        on_delete=models.PROTECT,
        related_name="accounting_notes",
    )
    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="accounting_notes",
    )
    description = models.TextField()
    amount = money_field()
    status = models.CharField(max_length=20, choices=Status.choices, default=Status.PENDING)
    created_at = models.DateTimeField(auto_now_add=True)
    converted_at = models.DateTimeField(null=True, blank=True)
    converted_to_expense = models.OneToOneField(
        UnitExpense,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="+",
    )

    class Meta:
        ordering = ["-created_at"]
        constraints = [
            models.CheckConstraint(
                condition=Q(amount__gt=0),
                name="accounting_note_amount_positive",
            ),
        ]
        indexes = [
            models.Index(fields=["project", "status"], name="note_project_status_idx"),
        ]

    def __str__(self):
        return f"Note #{self.pk} ({self.status})"

    @property
    def is_pending(self) -> bool:
        return self.status == self.Status.PENDING
