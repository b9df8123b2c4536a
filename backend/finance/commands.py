# finance/commands.py
"""
Command layer for finance operations.

Accounting notes, claim invoices, payments and PM advances all change
through the functions here. Each multi-row change runs in one
transaction.atomic block; the rows whose state decides the outcome
(note status, invoice balance, advance remaining amount) are re-read
with select_for_update inside that block and checked there, so a
second concurrent request waits for the first and then sees its result.

Lock order is always note -> unit -> invoice / advance.
"""

import logging
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP

from django.db import IntegrityError, transaction
from django.utils import timezone

from accounts.authz import ActorContext, require_role
from accounts.models import User
from facilitydesk.commands import CommandResult, ErrorCode
from finance.models import (
    MONEY_Q,
    ZERO,
    AccountingNote,
    DocumentSequence,
    Invoice,
    PMAdvance,
    UnitExpense,
)
from finance.policies import (
    can_decide_note,
    can_delete_note,
    can_draw_from_advance,
    can_raise_note,
    validate_payment,
)
from properties.models import OperationalUnit, OwnerAssociation, Project

logger = logging.getLogger(__name__)

FINANCE_ROLES = (User.Role.ADMIN, User.Role.ACCOUNTANT)

INVOICE_SEQUENCE = "invoice_number"

# money_field(): max_digits=14, decimal_places=2
MAX_INTEGER_DIGITS = 12


class PaymentAction:
    MARK_PAID = "mark-paid"
    PAY = "pay"

    ALL = (MARK_PAID, PAY)


def parse_positive_amount(value):
    """
    Convert user input to a money Decimal, or None if it is not a
    positive finite number that fits a money column.
    """
    if value is None or value == "" or isinstance(value, bool):
        return None
    try:
        amount = value if isinstance(value, Decimal) else Decimal(str(value).strip())
        if not amount.is_finite() or amount <= 0:
            return None
        amount = amount.quantize(MONEY_Q, rounding=ROUND_HALF_UP)
    except (InvalidOperation, ValueError, TypeError):
        return None
    if amount <= 0 or amount.adjusted() >= MAX_INTEGER_DIGITS:
        return None
    return amount


def _next_sequence_value(name: str) -> int:
    """
    Allocate the next value of a named sequence.
    Uses select_for_update to avoid concurrent duplicates.
    """
    try:
        seq = DocumentSequence.objects.select_for_update().get(name=name)
    except DocumentSequence.DoesNotExist:
        try:
            with transaction.atomic():
                seq = DocumentSequence.objects.create(name=name, next_value=1)
        except IntegrityError:
            seq = DocumentSequence.objects.select_for_update().get(name=name)

    value = seq.next_value
    seq.next_value = value + 1
    seq.save(update_fields=["next_value", "updated_at"])
    return value


def next_invoice_number() -> str:
    return f"INV-{_next_sequence_value(INVOICE_SEQUENCE):06d}"


# =============================================================================
# Ledger primitives (callers hold the row locks)
# =============================================================================

def draw_advance(advance: PMAdvance, amount: Decimal) -> PMAdvance:
    """
    Take `amount` out of an advance.

    remaining_amount never drops below zero; an over-draw is clamped
    and the discarded excess is logged.
    """
    remaining = advance.remaining_amount - amount
    if remaining < ZERO:
        logger.warning(
            "PM advance over-drawn, remaining amount clamped at zero",
            extra={
                "pm_advance_id": advance.pk,
                "requested": str(amount),
                "excess": str(-remaining),
            },
        )
        remaining = ZERO
    advance.remaining_amount = remaining
    advance.save(update_fields=["remaining_amount"])
    return advance


def find_or_create_open_claim_invoice(unit: OperationalUnit, owner_association: OwnerAssociation = None):
    """
    Return (invoice, created) for the unit's single open CLAIM invoice.

    owner_association defaults to the unit's own association.

    The caller must hold a lock on the unit row. The partial unique
    constraint on (unit, open claim) backs this up: if another writer
    slipped in, the IntegrityError is absorbed in a savepoint and the
    winner's invoice is returned.
    """
    invoice = (
        Invoice.objects.select_for_update()
        .filter(unit=unit, type=Invoice.Type.CLAIM, is_paid=False)
        .first()
    )
    if invoice:
        return invoice, False

    if owner_association is None:
        owner_association = OwnerAssociation.objects.get(unit=unit)

    try:
        with transaction.atomic():
            invoice = Invoice.objects.create(
                invoice_number=next_invoice_number(),
                type=Invoice.Type.CLAIM,
                unit=unit,
                owner_association=owner_association,
                amount=ZERO,
                total_paid=ZERO,
                remaining_balance=ZERO,
                is_paid=False,
            )
    except IntegrityError:
        invoice = Invoice.objects.select_for_update().get(
            unit=unit, type=Invoice.Type.CLAIM, is_paid=False
        )
        return invoice, False

    logger.info(
        "Opened claim invoice",
        extra={"invoice_id": invoice.pk, "invoice_number": invoice.invoice_number, "unit_id": unit.pk},
    )
    return invoice, True


def _lock_note(note_id):
    try:
        return AccountingNote.objects.select_for_update().get(pk=note_id)
    except AccountingNote.DoesNotExist:
        return None


# =============================================================================
# Accounting Note Commands
# =============================================================================

@transaction.atomic
def create_accounting_note(
    actor: ActorContext,
    project_id: int,
    unit_code: str,
    amount,
    description: str,
    notes: str = "",
) -> CommandResult:
    """
    Raise a PENDING accounting note against a unit.

    Args:
        actor: The project manager (or admin) raising the note
        project_id: Project the unit belongs to
        unit_code: Unit code, unique within the project
        amount: Positive amount
        description: Reason for the note
        notes: Optional extra details appended to the description

    Returns:
        CommandResult with the created AccountingNote or error
    """
    parsed_amount = parse_positive_amount(amount)
    if parsed_amount is None:
        return CommandResult.fail("Amount must be a positive number.")

    reason = (description or "").strip()
    if not reason:
        return CommandResult.fail("Description is required.")

    project = Project.objects.filter(pk=project_id).first()
    if not project:
        return CommandResult.fail("Project not found.", ErrorCode.NOT_FOUND)

    allowed, why = can_raise_note(actor, project.pk)
    if not allowed:
        return CommandResult.fail(why, ErrorCode.FORBIDDEN)

    unit = OperationalUnit.objects.filter(code=unit_code, project=project).first()
    if not unit:
        return CommandResult.fail(
            "Operational unit not found for the given code and project.",
            ErrorCode.NOT_FOUND,
        )

    extra = (notes or "").strip()
    if extra:
        reason = f"{reason}\n\nملاحظات إضافية:\n{extra}"

    note = AccountingNote.objects.create(
        project=project,
        unit=unit,
        created_by=actor.user,
        description=reason,
        amount=parsed_amount,
        status=AccountingNote.Status.PENDING,
    )
    logger.info(
        "Accounting note created",
        extra={"note_id": note.pk, "unit_id": unit.pk, "actor_id": actor.user_id},
    )
    return CommandResult.ok(note)


@transaction.atomic
def convert_note_via_advance(actor: ActorContext, note_id: int, pm_advance_id: int) -> CommandResult:
    """
    Convert a PENDING note into an expense paid from a PM advance.

    One transaction: create the expense, mark the note CONVERTED,
    draw the advance down by the note amount.

    Returns:
        CommandResult with {"note": AccountingNote, "expense": UnitExpense}
    """
    require_role(actor, *FINANCE_ROLES)

    if not pm_advance_id:
        return CommandResult.fail("PM Advance ID is required.")

    note = _lock_note(note_id)
    if not note:
        return CommandResult.fail("Accounting note not found.", ErrorCode.NOT_FOUND)

    allowed, reason = can_decide_note(note)
    if not allowed:
        return CommandResult.fail(reason, ErrorCode.CONFLICT)

    try:
        advance = PMAdvance.objects.select_for_update().get(pk=pm_advance_id)
    except PMAdvance.DoesNotExist:
        return CommandResult.fail("PM Advance not found.", ErrorCode.NOT_FOUND)

    allowed, reason = can_draw_from_advance(advance, note.project_id)
    if not allowed:
        return CommandResult.fail(reason)

    now = timezone.now()
    expense = UnitExpense.objects.create(
        unit_id=note.unit_id,
        pm_advance=advance,
        date=timezone.localdate(now),
        description=note.description,
        amount=note.amount,
        source_type=UnitExpense.SourceType.OTHER,
        recorded_by=actor.user,
        from_accounting_note=note,
    )

    note.status = AccountingNote.Status.CONVERTED
    note.converted_at = now
    note.converted_to_expense = expense
    note.save(update_fields=["status", "converted_at", "converted_to_expense"])

    draw_advance(advance, note.amount)

    logger.info(
        "Accounting note converted against PM advance",
        extra={
            "note_id": note.pk,
            "expense_id": expense.pk,
            "pm_advance_id": advance.pk,
            "actor_id": actor.user_id,
        },
    )
    return CommandResult.ok({"note": note, "expense": expense})


@transaction.atomic
def convert_note_via_invoice(actor: ActorContext, note_id: int) -> CommandResult:
    """
    Convert a PENDING note into an expense billed on the unit's open
    claim invoice (opened on demand).

    Returns:
        CommandResult with {"note", "expense", "invoice"}
    """
    require_role(actor, *FINANCE_ROLES)

    note = _lock_note(note_id)
    if not note:
        return CommandResult.fail("Accounting note not found.", ErrorCode.NOT_FOUND)

    allowed, reason = can_decide_note(note)
    if not allowed:
        return CommandResult.fail(reason, ErrorCode.CONFLICT)

    unit = OperationalUnit.objects.select_for_update().get(pk=note.unit_id)
    owner_association = OwnerAssociation.objects.filter(unit=unit).first()
    if not owner_association:
        return CommandResult.fail(
            "Owner association not found for this unit.",
            ErrorCode.NOT_FOUND,
        )

    invoice, _ = find_or_create_open_claim_invoice(unit, owner_association)

    now = timezone.now()
    expense = UnitExpense.objects.create(
        unit=unit,
        claim_invoice=invoice,
        date=timezone.localdate(now),
        description=note.description,
        amount=note.amount,
        source_type=UnitExpense.SourceType.OTHER,
        recorded_by=actor.user,
        from_accounting_note=note,
    )

    invoice.amount += note.amount
    invoice.refresh_balance()
    invoice.save(update_fields=["amount", "remaining_balance", "is_paid"])

    note.status = AccountingNote.Status.CONVERTED
    note.converted_at = now
    note.converted_to_expense = expense
    note.save(update_fields=["status", "converted_at", "converted_to_expense"])

    logger.info(
        "Accounting note converted onto claim invoice",
        extra={
            "note_id": note.pk,
            "expense_id": expense.pk,
            "invoice_id": invoice.pk,
            "actor_id": actor.user_id,
        },
    )
    return CommandResult.ok({"note": note, "expense": expense, "invoice": invoice})


@transaction.atomic
def reject_note(actor: ActorContext, note_id: int) -> CommandResult:
    """Mark a PENDING note REJECTED. No expense, no balance change."""
    require_role(actor, *FINANCE_ROLES)

    note = _lock_note(note_id)
    if not note:
        return CommandResult.fail("Accounting note not found.", ErrorCode.NOT_FOUND)

    allowed, reason = can_decide_note(note)
    if not allowed:
        return CommandResult.fail(reason, ErrorCode.CONFLICT)

    note.status = AccountingNote.Status.REJECTED
    note.converted_at = timezone.now()
    note.save(update_fields=["status", "converted_at"])

    logger.info(
        "Accounting note rejected",
        extra={"note_id": note.pk, "actor_id": actor.user_id},
    )
    return CommandResult.ok({"note": note})


def decide_note(actor: ActorContext, note_id: int, status: str) -> CommandResult:
    """Dispatch a status decision: CONVERTED (via claim invoice) or REJECTED."""
    require_role(actor, *FINANCE_ROLES)

    if status == AccountingNote.Status.CONVERTED:
        return convert_note_via_invoice(actor, note_id)
    if status == AccountingNote.Status.REJECTED:
        return reject_note(actor, note_id)
    return CommandResult.fail("Invalid status. Use CONVERTED or REJECTED.")


@transaction.atomic
def delete_note(actor: ActorContext, note_id: int) -> CommandResult:
    """Admin-only removal of a note that is still PENDING."""
    require_role(actor, User.Role.ADMIN)

    note = _lock_note(note_id)
    if not note:
        return CommandResult.fail("Accounting note not found.", ErrorCode.NOT_FOUND)

    allowed, reason = can_delete_note(note)
    if not allowed:
        return CommandResult.fail(reason, ErrorCode.CONFLICT)

    note.delete()
    logger.info(
        "Accounting note deleted",
        extra={"note_id": note_id, "actor_id": actor.user_id},
    )
    return CommandResult.ok()


# =============================================================================
# Invoice Commands
# =============================================================================

@transaction.atomic
def apply_invoice_payment(
    actor: ActorContext,
    invoice_id: int,
    action: str,
    amount=None,
) -> CommandResult:
    """
    Apply a payment to an invoice.

    Args:
        action: "mark-paid" settles the full remaining balance,
                "pay" applies `amount`
        amount: Payment amount for "pay"

    When the payment settles the invoice, the unit's next open claim
    invoice is opened in the same transaction.

    Returns:
        CommandResult with the updated Invoice
    """
    require_role(actor, *FINANCE_ROLES)

    if action not in PaymentAction.ALL:
        return CommandResult.fail("Invalid action.")

    unit_id = Invoice.objects.filter(pk=invoice_id).values_list("unit_id", flat=True).first()
    if unit_id is None:
        return CommandResult.fail("Invoice not found.", ErrorCode.NOT_FOUND)

    unit = OperationalUnit.objects.select_for_update().get(pk=unit_id)
    invoice = Invoice.objects.select_for_update().get(pk=invoice_id)

    if action == PaymentAction.MARK_PAID:
        payment = invoice.remaining_balance
    else:
        payment = parse_positive_amount(amount)

    allowed, reason = validate_payment(invoice, payment)
    if not allowed:
        return CommandResult.fail(reason)

    was_paid = invoice.is_paid
    invoice.total_paid += payment
    invoice.refresh_balance()
    if invoice.is_paid and not was_paid:
        invoice.paid_at = timezone.now()
    invoice.save(update_fields=["total_paid", "remaining_balance", "is_paid", "paid_at"])

    logger.info(
        "Invoice payment applied",
        extra={
            "invoice_id": invoice.pk,
            "payment": str(payment),
            "remaining_balance": str(invoice.remaining_balance),
            "actor_id": actor.user_id,
        },
    )

    if invoice.is_paid and not was_paid:
        find_or_create_open_claim_invoice(unit, invoice.owner_association)

    return CommandResult.ok(invoice)


# =============================================================================
# PM Advance / Operational Expense Commands
# =============================================================================

@transaction.atomic
def create_pm_advance(
    actor: ActorContext,
    user_id: int,
    project_id: int,
    amount,
    description: str = "",
) -> CommandResult:
    """Issue a cash float to a project manager for one project."""
    require_role(actor, *FINANCE_ROLES)

    parsed_amount = parse_positive_amount(amount)
    if parsed_amount is None:
        return CommandResult.fail("Amount must be a positive number.")

    manager = User.objects.filter(pk=user_id).first()
    if not manager:
        return CommandResult.fail("User not found.", ErrorCode.NOT_FOUND)
    if manager.role != User.Role.PROJECT_MANAGER:
        return CommandResult.fail("Advances can only be issued to project managers.")

    project = Project.objects.filter(pk=project_id).first()
    if not project:
        return CommandResult.fail("Project not found.", ErrorCode.NOT_FOUND)

    advance = PMAdvance.objects.create(
        user=manager,
        project=project,
        amount=parsed_amount,
        remaining_amount=parsed_amount,
        description=description or "",
        created_by=actor.user,
    )
    logger.info(
        "PM advance issued",
        extra={"pm_advance_id": advance.pk, "user_id": manager.pk, "actor_id": actor.user_id},
    )
    return CommandResult.ok(advance)


@transaction.atomic
def record_operational_expense(
    actor: ActorContext,
    unit_id: int,
    description: str,
    amount,
    source_type: str,
    pm_advance_id: int = None,
    date=None,
) -> CommandResult:
    """
    Record an expense paid from the office fund or from a PM advance.

    A PM_ADVANCE expense draws the advance down in the same transaction.
    """
    require_role(actor, *FINANCE_ROLES)

    parsed_amount = parse_positive_amount(amount)
    if parsed_amount is None:
        return CommandResult.fail("Amount must be a positive number.")

    if not (description or "").strip():
        return CommandResult.fail("Description is required.")

    if source_type not in (UnitExpense.SourceType.OFFICE_FUND, UnitExpense.SourceType.PM_ADVANCE):
        return CommandResult.fail("Source type must be OFFICE_FUND or PM_ADVANCE.")

    unit = OperationalUnit.objects.filter(pk=unit_id).first()
    if not unit:
        return CommandResult.fail("Operational unit not found.", ErrorCode.NOT_FOUND)

    advance = None
    if source_type == UnitExpense.SourceType.PM_ADVANCE:
        if not pm_advance_id:
            return CommandResult.fail("PM Advance ID is required for PM_ADVANCE expenses.")
        try:
            advance = PMAdvance.objects.select_for_update().get(pk=pm_advance_id)
        except PMAdvance.DoesNotExist:
            return CommandResult.fail("PM Advance not found.", ErrorCode.NOT_FOUND)
        allowed, reason = can_draw_from_advance(advance, unit.project_id)
        if not allowed:
            return CommandResult.fail(reason)

    expense = UnitExpense.objects.create(
        unit=unit,
        description=description.strip(),
        amount=parsed_amount,
        source_type=source_type,
        date=date or timezone.localdate(),
        recorded_by=actor.user,
        pm_advance=advance,
    )
    if advance is not None:
        draw_advance(advance, parsed_amount)

    logger.info(
        "Operational expense recorded",
        extra={
            "expense_id": expense.pk,
            "unit_id": unit.pk,
            "source_type": source_type,
            "actor_id": actor.user_id,
        },
    )
    return CommandResult.ok(expense)
