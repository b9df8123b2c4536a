# tests/test_note_workflow.py
"""
Tests for the accounting note workflow.

Tests cover:
- Raising notes (scope, unit resolution, amount validation)
- Conversion against a PM advance
- Conversion onto the unit's open claim invoice
- Rejection and deletion
- Terminal states: a decided note cannot be decided again
"""

import logging
from decimal import Decimal

import pytest
from django.core.exceptions import PermissionDenied

from facilitydesk.commands import ErrorCode
from finance.commands import (
    convert_note_via_advance,
    convert_note_via_invoice,
    create_accounting_note,
    decide_note,
    delete_note,
    reject_note,
)
from finance.models import AccountingNote, Invoice, PMAdvance, UnitExpense


# =============================================================================
# Raising notes
# =============================================================================

@pytest.mark.django_db
class TestCreateAccountingNote:

    def test_assigned_manager_raises_pending_note(self, pm_actor, project, unit):
        result = create_accounting_note(pm_actor, project.pk, "A-101", "250.50", "Elevator repair")

        assert result.success, result.error
        note = result.data
        assert note.status == AccountingNote.Status.PENDING
        assert note.amount == Decimal("250.50")
        assert note.unit == unit
        assert note.converted_at is None
        assert note.converted_to_expense is None

    def test_extra_notes_are_appended_to_description(self, pm_actor, project, unit):
        result = create_accounting_note(
            pm_actor, project.pk, "A-101", 80, "Paint", notes="Second floor corridor"
        )

        assert result.success
        assert result.data.description.startswith("Paint")
        assert "Second floor corridor" in result.data.description

    def test_unassigned_project_is_forbidden(self, pm_actor, other_project, other_unit):
        result = create_accounting_note(pm_actor, other_project.pk, "V-7", 100, "Gate motor")

        assert not result.success
        assert result.code == ErrorCode.FORBIDDEN
        assert AccountingNote.objects.count() == 0

    def test_manager_with_all_projects_flag_may_raise_anywhere(self, pm_user, other_project, other_unit):
        from accounts.authz import actor_for_user

        pm_user.can_view_all_projects = True
        pm_user.save()

        result = create_accounting_note(actor_for_user(pm_user), other_project.pk, "V-7", 100, "Gate motor")

        assert result.success

    def test_unknown_unit_code_is_not_found(self, pm_actor, project, unit):
        result = create_accounting_note(pm_actor, project.pk, "Z-999", 100, "Leak")

        assert not result.success
        assert result.code == ErrorCode.NOT_FOUND

    @pytest.mark.parametrize("amount", [0, "-5", "abc", None, "NaN", "Infinity", "1e30", "1000000000000"])
    def test_non_positive_or_non_numeric_amount_is_invalid(self, pm_actor, project, unit, amount):
        result = create_accounting_note(pm_actor, project.pk, "A-101", amount, "Leak")

        assert not result.success
        assert result.code == ErrorCode.INVALID
        assert AccountingNote.objects.count() == 0

    def test_largest_money_amount_is_accepted(self, pm_actor, project, unit):
        result = create_accounting_note(pm_actor, project.pk, "A-101", "999999999999.99", "Tower refit")

        assert result.success, result.error
        assert result.data.amount == Decimal("999999999999.99")

    def test_accountant_cannot_raise_notes(self, accountant_actor, project, unit):
        result = create_accounting_note(accountant_actor, project.pk, "A-101", 100, "Leak")

        assert not result.success
        assert result.code == ErrorCode.FORBIDDEN


# =============================================================================
# Conversion via PM advance
# =============================================================================

@pytest.mark.django_db
class TestConvertViaAdvance:

    def test_conversion_draws_down_the_advance(self, accountant_actor, make_note, pm_advance):
        note = make_note(amount="300.00")

        result = convert_note_via_advance(accountant_actor, note.pk, pm_advance.pk)

        assert result.success, result.error
        note.refresh_from_db()
        pm_advance.refresh_from_db()
        expense = result.data["expense"]

        assert pm_advance.remaining_amount == Decimal("700.00")
        assert note.status == AccountingNote.Status.CONVERTED
        assert note.converted_at is not None
        assert note.converted_to_expense_id == expense.pk
        assert expense.amount == Decimal("300.00")
        assert expense.pm_advance_id == pm_advance.pk
        assert expense.claim_invoice_id is None
        assert expense.from_accounting_note_id == note.pk
        assert expense.unit_id == note.unit_id
        assert expense.description == note.description

    def test_over_draw_clamps_at_zero_and_warns(self, accountant_actor, make_note, pm_advance, caplog):
        pm_advance.remaining_amount = Decimal("100.00")
        pm_advance.save()
        note = make_note(amount="300.00")

        # App loggers do not propagate to root; listen on "finance" directly.
        finance_logger = logging.getLogger("finance")
        finance_logger.addHandler(caplog.handler)
        try:
            result = convert_note_via_advance(accountant_actor, note.pk, pm_advance.pk)
        finally:
            finance_logger.removeHandler(caplog.handler)

        assert result.success
        pm_advance.refresh_from_db()
        assert pm_advance.remaining_amount == Decimal("0.00")
        assert any("clamped" in r.getMessage() for r in caplog.records)

    def test_advance_from_another_project_is_refused(
        self, accountant_actor, make_note, pm_user, other_project, accountant
    ):
        foreign = PMAdvance.objects.create(
            user=pm_user,
            project=other_project,
            amount=Decimal("500.00"),
            remaining_amount=Decimal("500.00"),
            created_by=accountant,
        )
        note = make_note()

        result = convert_note_via_advance(accountant_actor, note.pk, foreign.pk)

        assert not result.success
        assert result.code == ErrorCode.INVALID
        note.refresh_from_db()
        foreign.refresh_from_db()
        assert note.status == AccountingNote.Status.PENDING
        assert foreign.remaining_amount == Decimal("500.00")
        assert UnitExpense.objects.count() == 0

    def test_missing_advance_is_not_found(self, accountant_actor, make_note):
        note = make_note()

        result = convert_note_via_advance(accountant_actor, note.pk, 424242)

        assert result.code == ErrorCode.NOT_FOUND

    def test_missing_note_is_not_found(self, accountant_actor, pm_advance):
        result = convert_note_via_advance(accountant_actor, 424242, pm_advance.pk)

        assert result.code == ErrorCode.NOT_FOUND

    def test_project_manager_cannot_convert(self, pm_actor, make_note, pm_advance):
        note = make_note()

        with pytest.raises(PermissionDenied):
            convert_note_via_advance(pm_actor, note.pk, pm_advance.pk)


# =============================================================================
# Conversion via claim invoice
# =============================================================================

@pytest.mark.django_db
class TestConvertViaInvoice:

    def test_opens_claim_invoice_when_none_exists(self, accountant_actor, make_note, owner_association, unit):
        note = make_note(amount="150.00")

        result = convert_note_via_invoice(accountant_actor, note.pk)

        assert result.success, result.error
        invoice = Invoice.objects.get(unit=unit)
        assert invoice.type == Invoice.Type.CLAIM
        assert invoice.invoice_number == "INV-000001"
        assert invoice.amount == Decimal("150.00")
        assert invoice.remaining_balance == Decimal("150.00")
        assert invoice.is_paid is False

        expense = UnitExpense.objects.get()
        assert expense.claim_invoice_id == invoice.pk
        assert expense.pm_advance_id is None
        assert expense.from_accounting_note_id == note.pk

        note.refresh_from_db()
        assert note.status == AccountingNote.Status.CONVERTED
        assert note.converted_to_expense_id == expense.pk

    def test_adds_to_existing_open_invoice(self, accountant_actor, make_note, make_invoice, unit):
        invoice = make_invoice("500.00", total_paid="200.00")
        note = make_note(amount="150.00")

        result = convert_note_via_invoice(accountant_actor, note.pk)

        assert result.success
        invoice.refresh_from_db()
        assert invoice.amount == Decimal("650.00")
        assert invoice.total_paid == Decimal("200.00")
        assert invoice.remaining_balance == Decimal("450.00")
        assert Invoice.objects.filter(unit=unit, type=Invoice.Type.CLAIM, is_paid=False).count() == 1

    def test_second_note_lands_on_same_invoice(self, accountant_actor, make_note, owner_association, unit):
        first = make_note(amount="100.00")
        second = make_note(amount="40.00")

        convert_note_via_invoice(accountant_actor, first.pk)
        convert_note_via_invoice(accountant_actor, second.pk)

        invoice = Invoice.objects.get(unit=unit)
        assert invoice.amount == Decimal("140.00")
        assert invoice.expenses.count() == 2

    def test_unit_without_owner_association_is_not_found(self, accountant_actor, make_note):
        note = make_note()

        result = convert_note_via_invoice(accountant_actor, note.pk)

        assert result.code == ErrorCode.NOT_FOUND
        note.refresh_from_db()
        assert note.status == AccountingNote.Status.PENDING
        assert Invoice.objects.count() == 0
        assert UnitExpense.objects.count() == 0


# =============================================================================
# Terminal states
# =============================================================================

@pytest.mark.django_db
class TestConversionRollsBack:
    """A failure part-way through a conversion leaves nothing behind."""

    def test_failed_advance_draw_keeps_note_pending(self, accountant_actor, make_note, pm_advance, monkeypatch):
        note = make_note(amount="300.00")

        def fail_draw(advance, amount):
            raise RuntimeError("ledger unavailable")

        monkeypatch.setattr("finance.commands.draw_advance", fail_draw)

        with pytest.raises(RuntimeError):
            convert_note_via_advance(accountant_actor, note.pk, pm_advance.pk)

        note.refresh_from_db()
        pm_advance.refresh_from_db()
        assert note.status == AccountingNote.Status.PENDING
        assert note.converted_to_expense_id is None
        assert UnitExpense.objects.count() == 0
        assert pm_advance.remaining_amount == Decimal("1000.00")

    def test_failed_invoice_save_keeps_note_pending(self, accountant_actor, make_note, make_invoice, monkeypatch):
        invoice = make_invoice("500.00")
        note = make_note(amount="150.00")

        def fail_save(self, *args, **kwargs):
            raise RuntimeError("invoice write failed")

        monkeypatch.setattr(Invoice, "save", fail_save)

        with pytest.raises(RuntimeError):
            convert_note_via_invoice(accountant_actor, note.pk)

        monkeypatch.undo()
        note.refresh_from_db()
        invoice.refresh_from_db()
        assert note.status == AccountingNote.Status.PENDING
        assert UnitExpense.objects.count() == 0
        assert invoice.amount == Decimal("500.00")


@pytest.mark.django_db
class TestDecisionsAreFinal:

    def test_reject_records_decision_without_expense(self, accountant_actor, make_note):
        note = make_note()

        result = reject_note(accountant_actor, note.pk)

        assert result.success
        note.refresh_from_db()
        assert note.status == AccountingNote.Status.REJECTED
        assert note.converted_at is not None
        assert note.converted_to_expense is None
        assert UnitExpense.objects.count() == 0

    def test_double_conversion_yields_one_expense(self, accountant_actor, make_note, pm_advance):
        note = make_note(amount="300.00")

        first = convert_note_via_advance(accountant_actor, note.pk, pm_advance.pk)
        second = convert_note_via_advance(accountant_actor, note.pk, pm_advance.pk)

        assert first.success
        assert not second.success
        assert second.code == ErrorCode.CONFLICT
        assert UnitExpense.objects.filter(from_accounting_note=note).count() == 1
        pm_advance.refresh_from_db()
        assert pm_advance.remaining_amount == Decimal("700.00")

    def test_rejected_note_cannot_be_converted(self, accountant_actor, make_note, pm_advance, owner_association):
        note = make_note()
        reject_note(accountant_actor, note.pk)

        via_advance = convert_note_via_advance(accountant_actor, note.pk, pm_advance.pk)
        via_invoice = convert_note_via_invoice(accountant_actor, note.pk)

        assert via_advance.code == ErrorCode.CONFLICT
        assert via_invoice.code == ErrorCode.CONFLICT
        assert UnitExpense.objects.count() == 0

    def test_converted_note_cannot_be_rejected(self, accountant_actor, make_note, owner_association):
        note = make_note()
        convert_note_via_invoice(accountant_actor, note.pk)

        result = reject_note(accountant_actor, note.pk)

        assert result.code == ErrorCode.CONFLICT
        note.refresh_from_db()
        assert note.status == AccountingNote.Status.CONVERTED

    def test_decide_note_rejects_unknown_status(self, accountant_actor, make_note):
        note = make_note()

        result = decide_note(accountant_actor, note.pk, "PENDING")

        assert result.code == ErrorCode.INVALID
        note.refresh_from_db()
        assert note.status == AccountingNote.Status.PENDING


@pytest.mark.django_db
class TestDeleteNote:

    def test_admin_deletes_pending_note(self, admin_actor, make_note):
        note = make_note()

        result = delete_note(admin_actor, note.pk)

        assert result.success
        assert not AccountingNote.objects.filter(pk=note.pk).exists()

    def test_decided_note_is_kept(self, admin_actor, make_note):
        note = make_note()
        reject_note(admin_actor, note.pk)

        result = delete_note(admin_actor, note.pk)

        assert result.code == ErrorCode.CONFLICT
        assert AccountingNote.objects.filter(pk=note.pk).exists()

    def test_accountant_cannot_delete(self, accountant_actor, make_note):
        note = make_note()

        with pytest.raises(PermissionDenied):
            delete_note(accountant_actor, note.pk)
