# finance/views.py
"""
Thin views that delegate to the commands layer.

Views handle: HTTP parsing, authentication, response formatting.
Commands handle: business rules, validation, locking.

All mutations go through finance/commands.py. Views never call .save()
on finance models.
"""

from django.shortcuts import get_object_or_404
from rest_framework import status
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from accounts.authz import require_project_access, require_role, resolve_actor, scope_to_projects
from accounts.models import User
from .commands import (
    FINANCE_ROLES,
    apply_invoice_payment,
    convert_note_via_advance,
    create_accounting_note,
    create_pm_advance,
    decide_note,
    delete_note,
    record_operational_expense,
)
from .models import AccountingNote, Invoice, PMAdvance, UnitExpense
from .serializers import (
    AccountingNoteCreateSerializer,
    AccountingNoteSerializer,
    ConvertToExpenseSerializer,
    InvoicePaymentSerializer,
    InvoiceSerializer,
    ListFilterSerializer,
    NoteDecisionSerializer,
    OperationalExpenseCreateSerializer,
    PMAdvanceCreateSerializer,
    PMAdvanceSerializer,
    UnitExpenseSerializer,
)


def _error(result):
    return Response(result.error_body(), status=result.http_status)


def _id_filters(request) -> dict:
    """Validated integer ids from the query string; absent or blank ones are omitted."""
    serializer = ListFilterSerializer(data=request.query_params)
    serializer.is_valid(raise_exception=True)
    return serializer.validated_data


def _truthy(value) -> bool:
    return str(value).lower() in ("1", "true", "yes")


def _note_queryset():
    return AccountingNote.objects.select_related(
        "project",
        "unit__project",
        "created_by",
        "converted_to_expense__unit__project",
        "converted_to_expense__recorded_by",
    )


def _invoice_queryset():
    return Invoice.objects.select_related(
        "unit__project", "owner_association"
    ).prefetch_related("expenses")


# =============================================================================
# Accounting Note Views
# =============================================================================

class AccountingNoteListCreateView(APIView):
    """
    GET /api/accounting-notes/ -> list notes (managers: assigned projects only)
    POST /api/accounting-notes/ -> raise a note
    """
    permission_classes = [IsAuthenticated]

    def get(self, request):
        actor = resolve_actor(request)
        require_role(actor, User.Role.ADMIN, User.Role.ACCOUNTANT, User.Role.PROJECT_MANAGER)

        ids = _id_filters(request)
        notes = scope_to_projects(actor, _note_queryset())

        params = request.query_params
        if params.get("status"):
            notes = notes.filter(status=params["status"])
        if "project_id" in ids:
            notes = notes.filter(project_id=ids["project_id"])
        if "unit_id" in ids:
            notes = notes.filter(unit_id=ids["unit_id"])

        serializer = AccountingNoteSerializer(notes.order_by("-created_at"), many=True)
        return Response(serializer.data)

    def post(self, request):
        actor = resolve_actor(request)

        input_serializer = AccountingNoteCreateSerializer(data=request.data)
        input_serializer.is_valid(raise_exception=True)

        result = create_accounting_note(actor, **input_serializer.validated_data)
        if not result.success:
            return _error(result)

        note = _note_queryset().get(pk=result.data.pk)
        return Response(AccountingNoteSerializer(note).data, status=status.HTTP_201_CREATED)


class AccountingNoteDetailView(APIView):
    """
    GET /api/accounting-notes/<pk>/ -> retrieve
    PATCH /api/accounting-notes/<pk>/ -> {status: CONVERTED|REJECTED}
    DELETE /api/accounting-notes/<pk>/ -> remove a pending note (admin)
    """
    permission_classes = [IsAuthenticated]

    def get(self, request, pk):
        actor = resolve_actor(request)
        require_role(actor, User.Role.ADMIN, User.Role.ACCOUNTANT, User.Role.PROJECT_MANAGER)

        note = get_object_or_404(_note_queryset(), pk=pk)
        require_project_access(actor, note.project_id)
        return Response(AccountingNoteSerializer(note).data)

    def patch(self, request, pk):
        actor = resolve_actor(request)

        input_serializer = NoteDecisionSerializer(data=request.data)
        input_serializer.is_valid(raise_exception=True)

        result = decide_note(actor, pk, input_serializer.validated_data["status"])
        if not result.success:
            return _error(result)

        note = _note_queryset().get(pk=pk)
        return Response(AccountingNoteSerializer(note).data)

    def delete(self, request, pk):
        actor = resolve_actor(request)

        result = delete_note(actor, pk)
        if not result.success:
            return _error(result)
        return Response(status=status.HTTP_204_NO_CONTENT)


class AccountingNoteConvertView(APIView):
    """
    POST /api/accounting-notes/<pk>/convert-to-expense/ -> {pm_advance_id}

    Records the expense against the manager's advance.
    """
    permission_classes = [IsAuthenticated]

    def post(self, request, pk):
        actor = resolve_actor(request)

        input_serializer = ConvertToExpenseSerializer(data=request.data)
        input_serializer.is_valid(raise_exception=True)

        result = convert_note_via_advance(
            actor, pk, input_serializer.validated_data["pm_advance_id"]
        )
        if not result.success:
            return _error(result)

        note = _note_queryset().get(pk=pk)
        return Response(
            {
                "success": True,
                "note": AccountingNoteSerializer(note).data,
                "expense": UnitExpenseSerializer(result.data["expense"]).data,
            }
        )


# =============================================================================
# Invoice Views
# =============================================================================

class InvoiceListView(APIView):
    """
    GET /api/invoices/ -> newest first; filters: unit_id, is_paid
    """
    permission_classes = [IsAuthenticated]

    def get(self, request):
        actor = resolve_actor(request)
        require_role(actor, *FINANCE_ROLES)

        ids = _id_filters(request)
        invoices = _invoice_queryset()
        params = request.query_params
        if "unit_id" in ids:
            invoices = invoices.filter(unit_id=ids["unit_id"])
        if params.get("is_paid") not in (None, ""):
            invoices = invoices.filter(is_paid=_truthy(params["is_paid"]))

        serializer = InvoiceSerializer(invoices.order_by("-issued_at", "-id"), many=True)
        return Response(serializer.data)


class InvoiceDetailView(APIView):
    """
    GET /api/invoices/<pk>/ -> retrieve with expense line items
    PATCH /api/invoices/<pk>/ -> {action: "mark-paid"} or {action: "pay", amount}
    """
    permission_classes = [IsAuthenticated]

    def get(self, request, pk):
        actor = resolve_actor(request)
        require_role(actor, *FINANCE_ROLES)

        invoice = get_object_or_404(_invoice_queryset(), pk=pk)
        return Response(InvoiceSerializer(invoice).data)

    def patch(self, request, pk):
        actor = resolve_actor(request)

        input_serializer = InvoicePaymentSerializer(data=request.data)
        input_serializer.is_valid(raise_exception=True)
        data = input_serializer.validated_data

        result = apply_invoice_payment(actor, pk, data["action"], data.get("amount"))
        if not result.success:
            return _error(result)

        invoice = _invoice_queryset().get(pk=pk)
        return Response(InvoiceSerializer(invoice).data)


# =============================================================================
# PM Advance / Operational Expense Views
# =============================================================================

class PMAdvanceListCreateView(APIView):
    """
    GET /api/pm-advances/ -> filters: project_id, user_id, has_balance
    POST /api/pm-advances/ -> issue an advance
    """
    permission_classes = [IsAuthenticated]

    def get(self, request):
        actor = resolve_actor(request)
        require_role(actor, User.Role.ADMIN, User.Role.ACCOUNTANT, User.Role.PROJECT_MANAGER)

        advances = PMAdvance.objects.select_related("user", "project")
        if actor.role == User.Role.PROJECT_MANAGER:
            advances = advances.filter(user=actor.user)

        ids = _id_filters(request)
        if "project_id" in ids:
            advances = advances.filter(project_id=ids["project_id"])
        if "user_id" in ids:
            advances = advances.filter(user_id=ids["user_id"])
        if _truthy(request.query_params.get("has_balance", "")):
            advances = advances.filter(remaining_amount__gt=0)

        serializer = PMAdvanceSerializer(advances.order_by("-issued_at"), many=True)
        return Response(serializer.data)

    def post(self, request):
        actor = resolve_actor(request)

        input_serializer = PMAdvanceCreateSerializer(data=request.data)
        input_serializer.is_valid(raise_exception=True)

        result = create_pm_advance(actor, **input_serializer.validated_data)
        if not result.success:
            return _error(result)
        return Response(PMAdvanceSerializer(result.data).data, status=status.HTTP_201_CREATED)


class OperationalExpenseListCreateView(APIView):
    """
    GET /api/operational-expenses/ -> office fund and advance expenses
    POST /api/operational-expenses/ -> record one
    """
    permission_classes = [IsAuthenticated]

    def get(self, request):
        actor = resolve_actor(request)
        require_role(actor, *FINANCE_ROLES)

        expenses = UnitExpense.objects.select_related("unit__project", "recorded_by").filter(
            source_type__in=[UnitExpense.SourceType.OFFICE_FUND, UnitExpense.SourceType.PM_ADVANCE]
        )
        ids = _id_filters(request)
        params = request.query_params
        if "unit_id" in ids:
            expenses = expenses.filter(unit_id=ids["unit_id"])
        if params.get("source_type"):
            expenses = expenses.filter(source_type=params["source_type"])

        return Response(UnitExpenseSerializer(expenses, many=True).data)

    def post(self, request):
        actor = resolve_actor(request)

        input_serializer = OperationalExpenseCreateSerializer(data=request.data)
        input_serializer.is_valid(raise_exception=True)

        result = record_operational_expense(actor, **input_serializer.validated_data)
        if not result.success:
            return _error(result)
        return Response(UnitExpenseSerializer(result.data).data, status=status.HTTP_201_CREATED)
