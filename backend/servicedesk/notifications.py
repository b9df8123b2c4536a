# servicedesk/notifications.py
"""WhatsApp message text for service desk events."""


def ticket_message(ticket) -> str:
    unit = ticket.unit
    return (
        f"شكوى جديدة من الساكن {ticket.resident.name}\n"
        f"في المشروع {unit.project.name}\n"
        f"الوحدة {unit.name or unit.code}\n"
        f"الشكوى\n"
        f"{ticket.description}"
    )


def delivery_order_message(order) -> str:
    unit = order.unit
    return (
        f"طلب توصيل جديد من الساكن {order.resident.name}\n"
        f"في المشروع {unit.project.name}\n"
        f"الوحدة {unit.name or unit.code}\n"
        f"الطلب\n"
        f"{order.description}"
    )
