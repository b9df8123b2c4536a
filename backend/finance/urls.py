"""
URL configuration for the finance API.

Endpoints:
- /accounting-notes/ - notes raised by project managers, decisions
- /invoices/ - claim invoices and payments
- /pm-advances/ - cash floats issued to project managers
- /operational-expenses/ - office fund and advance expenses
"""

from django.urls import path

from .views import (
    AccountingNoteConvertView,
    AccountingNoteDetailView,
    AccountingNoteListCreateView,
    InvoiceDetailView,
    InvoiceListView,
    OperationalExpenseListCreateView,
    PMAdvanceListCreateView,
)

app_name = "finance"

urlpatterns = [
    path("accounting-notes/", AccountingNoteListCreateView.as_view(), name="accounting-note-list-create"),
    path("accounting-notes/<int:pk>/", AccountingNoteDetailView.as_view(), name="accounting-note-detail"),
    path(
        "accounting-notes/<int:pk>/convert-to-expense/",
        AccountingNoteConvertView.as_view(),
        name="accounting-note-convert",
    ),
    path("invoices/", InvoiceListView.as_view(), name="invoice-list"),
    path("invoices/<int:pk>/", InvoiceDetailView.as_view(), name="invoice-detail"),
    path("pm-advances/", PMAdvanceListCreateView.as_view(), name="pm-advance-list-create"),
    path(
        "operational-expenses/",
        OperationalExpenseListCreateView.as_view(),
        name="operational-expense-list-create",
    ),
]
