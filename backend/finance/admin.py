# finance/admin.py
"""
Django admin configuration for finance models.

Balances (invoice remaining_balance, advance remaining_amount) and note
status only change through finance/commands.py, which locks the rows
involved. The admin shows them but does not edit them.
"""

from django.contrib import admin

from .models import AccountingNote, DocumentSequence, Invoice, PMAdvance, UnitExpense


class ReadOnlyModelAdmin(admin.ModelAdmin):
    """Viewing only; use the API to make changes."""

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False


class UnitExpenseInline(admin.TabularInline):
    model = UnitExpense
    fk_name = "claim_invoice"
    extra = 0
    can_delete = False
    fields = ("date", "description", "amount", "source_type")
    readonly_fields = fields

    def has_add_permission(self, request, obj=None):
        return False


@admin.register(AccountingNote)
class AccountingNoteAdmin(ReadOnlyModelAdmin):
    list_display = ("id", "project", "unit", "amount", "status", "created_by", "created_at")
    list_filter = ("status", "project")
    search_fields = ("description", "unit__code")


@admin.register(Invoice)
class InvoiceAdmin(ReadOnlyModelAdmin):
    list_display = (
        "invoice_number",
        "type",
        "unit",
        "amount",
        "total_paid",
        "remaining_balance",
        "is_paid",
        "issued_at",
    )
    list_filter = ("type", "is_paid")
    search_fields = ("invoice_number", "unit__code")
    inlines = [UnitExpenseInline]


@admin.register(PMAdvance)
class PMAdvanceAdmin(ReadOnlyModelAdmin):
    list_display = ("id", "user", "project", "amount", "remaining_amount", "issued_at")
    list_filter = ("project",)


@admin.register(UnitExpense)
class UnitExpenseAdmin(ReadOnlyModelAdmin):
    list_display = ("id", "unit", "amount", "source_type", "date", "recorded_by")
    list_filter = ("source_type",)
    search_fields = ("description", "unit__code")


@admin.register(DocumentSequence)
class DocumentSequenceAdmin(ReadOnlyModelAdmin):
    list_display = ("name", "next_value", "updated_at")
