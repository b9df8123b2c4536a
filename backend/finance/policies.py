# finance/policies.py
"""
Business policy functions for finance operations.

Policies answer: "Is this action allowed given the current state?"
They do NOT perform the action; that is the command's job.

Each policy returns (allowed, reason). Commands check note and advance
policies against the row they re-read under select_for_update, so a
request that lost a race sees the winner's state.
"""

from decimal import Decimal

from accounts.models import User
from finance.models import AccountingNote, Invoice, PMAdvance


def can_raise_note(actor, project_id) -> tuple[bool, str]:
    """
    Project managers raise notes on projects they are assigned to
    (or on any project with can_view_all_projects). Admins may too.
    """
    if actor.is_admin:
        return True, ""
    if actor.role != User.Role.PROJECT_MANAGER:
        return False, "Only project managers can raise accounting notes."
    if not actor.can_access_project(project_id):
        return False, "Project Manager is not assigned to this project."
    return True, ""


def can_decide_note(note: AccountingNote) -> tuple[bool, str]:
    """Only PENDING notes can be converted or rejected."""
    if not note.is_pending:
        return False, f"Only pending notes can be decided; this note is {note.status}."
    return True, ""


def can_delete_note(note: AccountingNote) -> tuple[bool, str]:
    """A decided note carries history (an expense, a rejection); keep it."""
    if not note.is_pending:
        return False, f"Only pending notes can be deleted; this note is {note.status}."
    return True, ""


def can_draw_from_advance(advance: PMAdvance, project_id) -> tuple[bool, str]:
    if advance.project_id != project_id:
        return False, "PM Advance does not belong to this project."
    return True, ""


def validate_payment(invoice: Invoice, amount) -> tuple[bool, str]:
    """
    A payment must be positive and must not exceed what is still owed.
    """
    if amount is None or amount <= Decimal("0"):
        return False, "Invalid payment amount."
    if amount > invoice.remaining_balance:
        return False, "Payment exceeds remaining balance."
    return True, ""
