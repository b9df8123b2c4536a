# finance/serializers.py
"""
Serializers for the finance API.

Input serializers only check shape (types, required keys). Amount
positivity, state transitions and scope are decided in finance/commands.py
so the webhook adapters and the dashboard API get the same answers.
"""

from rest_framework import serializers

from accounts.serializers import UserSummarySerializer
from properties.serializers import UnitSummarySerializer
from .models import AccountingNote, Invoice, PMAdvance, UnitExpense


def _amount_field(**kwargs):
    return serializers.DecimalField(max_digits=14, decimal_places=2, **kwargs)


# =============================================================================
# Output
# =============================================================================

class UnitExpenseSerializer(serializers.ModelSerializer):
    unit = UnitSummarySerializer(read_only=True)
    recorded_by = UserSummarySerializer(read_only=True)
    from_accounting_note_id = serializers.IntegerField(read_only=True)

    class Meta:
        model = UnitExpense
        fields = (
            "id",
            "unit",
            "description",
            "amount",
            "source_type",
            "date",
            "recorded_by",
            "pm_advance_id",
            "claim_invoice_id",
            "from_accounting_note_id",
            "created_at",
        )
        read_only_fields = fields


class AccountingNoteSerializer(serializers.ModelSerializer):
    unit = UnitSummarySerializer(read_only=True)
    created_by = UserSummarySerializer(read_only=True)
    converted_to_expense = UnitExpenseSerializer(read_only=True)

    class Meta:
        model = AccountingNote
        fields = (
            "id",
            "project_id",
            "unit",
            "created_by",
            "description",
            "amount",
            "status",
            "created_at",
            "converted_at",
            "converted_to_expense",
        )
        read_only_fields = fields


class InvoiceExpenseSerializer(serializers.ModelSerializer):
    """Line item on an invoice."""

    class Meta:
        model = UnitExpense
        fields = ("id", "description", "amount", "date", "from_accounting_note_id")
        read_only_fields = fields


class InvoiceSerializer(serializers.ModelSerializer):
    unit = UnitSummarySerializer(read_only=True)
    owner_association_name = serializers.CharField(source="owner_association.name", read_only=True)
    expenses = InvoiceExpenseSerializer(many=True, read_only=True)

    class Meta:
        model = Invoice
        fields = (
            "id",
            "invoice_number",
            "type",
            "unit",
            "owner_association_id",
            "owner_association_name",
            "amount",
            "total_paid",
            "remaining_balance",
            "is_paid",
            "issued_at",
            "paid_at",
            "expenses",
        )
        read_only_fields = fields


class PMAdvanceSerializer(serializers.ModelSerializer):
    user = UserSummarySerializer(read_only=True)
    project_name = serializers.CharField(source="project.name", read_only=True)

    class Meta:
        model = PMAdvance
        fields = (
            "id",
            "user",
            "project_id",
            "project_name",
            "amount",
            "remaining_amount",
            "description",
            "issued_at",
        )
        read_only_fields = fields


# =============================================================================
# Input
# =============================================================================

class AccountingNoteCreateSerializer(serializers.Serializer):
    project_id = serializers.IntegerField()
    unit_code = serializers.CharField(max_length=50)
    amount = _amount_field()
    description = serializers.CharField()
    notes = serializers.CharField(required=False, allow_blank=True, default="")


class NoteDecisionSerializer(serializers.Serializer):
    status = serializers.CharField()


class ConvertToExpenseSerializer(serializers.Serializer):
    pm_advance_id = serializers.IntegerField()


class InvoicePaymentSerializer(serializers.Serializer):
    action = serializers.CharField()
    amount = _amount_field(required=False, allow_null=True, default=None)


class PMAdvanceCreateSerializer(serializers.Serializer):
    user_id = serializers.IntegerField()
    project_id = serializers.IntegerField()
    amount = _amount_field()
    description = serializers.CharField(required=False, allow_blank=True, default="")


class OperationalExpenseCreateSerializer(serializers.Serializer):
    unit_id = serializers.IntegerField()
    description = serializers.CharField()
    amount = _amount_field()
    source_type = serializers.CharField()
    pm_advance_id = serializers.IntegerField(required=False, allow_null=True, default=None)
    date = serializers.DateField(required=False, allow_null=True, default=None)


class ListFilterSerializer(serializers.Serializer):
    """Query-string ids accepted by the finance list endpoints."""
    project_id = serializers.IntegerField(required=False)
    unit_id = serializers.IntegerField(required=False)
    user_id = serializers.IntegerField(required=False)
