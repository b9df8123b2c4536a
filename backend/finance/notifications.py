# finance/notifications.py
"""
Message text relayed back to WhatsApp for finance events.

The automation layer forwards these strings verbatim, so they are
plain text with newlines, in Arabic.
"""

from django.conf import settings
from django.utils import timezone


def format_amount(amount) -> str:
    currency = getattr(settings, "NOTIFICATION_CURRENCY", "SAR")
    return f"{amount:,.2f} {currency}"


def accounting_note_message(note) -> str:
    unit = note.unit
    created_at = timezone.localtime(note.created_at).strftime("%Y-%m-%d %H:%M")
    created_by = note.created_by.name or note.created_by.email

    lines = [
        "📌 ملاحظة محاسبية جديدة",
        f"رقم الملاحظة: {note.pk}",
        f"التاريخ: {created_at}",
        f"المشروع: {unit.project.name}",
        f"الوحدة: {unit.label}",
        f"القيمة: {format_amount(note.amount)}",
        "",
        "التفاصيل:",
        note.description,
        "",
        f"أُنشئت بواسطة: {created_by}",
    ]
    return "\n".join(lines).strip()
