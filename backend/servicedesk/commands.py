# servicedesk/commands.py
"""
Command layer for tickets and delivery orders.

Residents are identified by phone (WhatsApp) or, for API-key callers,
by name within a unit. Lookups return None when nothing matches; the
*_from_phone commands turn that into a not_found CommandResult.
"""

import logging

from django.db import transaction
from django.db.models import Q

from accounts.phone import build_phone_variants
from facilitydesk.commands import CommandResult, ErrorCode
from properties.models import OperationalUnit, Resident
from .models import TITLE_MAX_LENGTH, DeliveryOrder, Ticket

logger = logging.getLogger(__name__)

DEFAULT_PRIORITY = "Normal"


def resolve_unit(project_id, unit_code):
    return OperationalUnit.objects.select_related("project").filter(
        project_id=project_id, code=unit_code
    ).first()


def resolve_resident_by_phone(unit, phone):
    """Find a resident of `unit` whose phone or WhatsApp number matches any variant."""
    variants = build_phone_variants(phone)
    if not variants:
        return None
    return (
        Resident.objects.select_related("unit__project")
        .filter(unit=unit)
        .filter(Q(phone__in=variants) | Q(whatsapp_phone__in=variants))
        .first()
    )


def create_ticket(resident, description, title=None, priority=DEFAULT_PRIORITY):
    ticket = Ticket.objects.create(
        resident=resident,
        unit_id=resident.unit_id,
        title=(title or description)[:TITLE_MAX_LENGTH],
        description=description,
        priority=priority or DEFAULT_PRIORITY,
    )
    logger.info(
        "Ticket created",
        extra={"ticket_id": ticket.pk, "unit_id": ticket.unit_id, "resident_id": resident.pk},
    )
    return ticket


def create_delivery_order(resident, order_text):
    order = DeliveryOrder.objects.create(
        resident=resident,
        unit_id=resident.unit_id,
        title=order_text[:TITLE_MAX_LENGTH],
        description=order_text,
    )
    logger.info(
        "Delivery order created",
        extra={"order_id": order.pk, "unit_id": order.unit_id, "resident_id": resident.pk},
    )
    return order


def _resolve_resident(project_id, unit_code, phone):
    unit = resolve_unit(project_id, unit_code)
    if not unit:
        return None, CommandResult.fail(
            "Unit not found for the given code and project.", ErrorCode.NOT_FOUND
        )
    resident = resolve_resident_by_phone(unit, phone)
    if not resident:
        return None, CommandResult.fail(
            "Resident not found for the given phone in this unit.", ErrorCode.NOT_FOUND
        )
    return resident, None


@transaction.atomic
def open_ticket_from_phone(project_id, unit_code, phone, description, priority=DEFAULT_PRIORITY):
    """Returns CommandResult with the Ticket."""
    resident, failure = _resolve_resident(project_id, unit_code, phone)
    if failure:
        return failure
    return CommandResult.ok(create_ticket(resident, description, priority=priority))


@transaction.atomic
def open_delivery_order_from_phone(project_id, unit_code, phone, order_text):
    """Returns CommandResult with the DeliveryOrder."""
    resident, failure = _resolve_resident(project_id, unit_code, phone)
    if failure:
        return failure
    return CommandResult.ok(create_delivery_order(resident, order_text))


@transaction.atomic
def open_ticket_for_named_resident(
    unit_code,
    resident_name,
    title,
    description,
    priority=DEFAULT_PRIORITY,
    email=None,
    phone=None,
):
    """
    Ticket intake for API-key callers that know the resident by name.

    The resident is matched by (name, unit code) and created in the first
    unit with that code when missing. Provided email/phone overwrite the
    stored contact details.

    Returns:
        CommandResult with {"ticket": Ticket, "resident": Resident}
    """
    resident = (
        Resident.objects.select_related("unit")
        .filter(name=resident_name, unit__code=unit_code)
        .first()
    )
    if not resident:
        unit = OperationalUnit.objects.filter(code=unit_code).order_by("id").first()
        if not unit:
            return CommandResult.fail(f"Unit with code {unit_code} not found", ErrorCode.NOT_FOUND)
        resident = Resident.objects.create(
            unit=unit,
            name=resident_name,
            email=email or None,
            phone=phone or None,
            status=Resident.Status.ACTIVE,
        )
        logger.info("Resident created from ticket intake", extra={"resident_id": resident.pk})

    update_fields = []
    if email:
        resident.email = email
        update_fields.append("email")
    if phone:
        resident.phone = phone
        update_fields.append("phone")
    if update_fields:
        resident.save(update_fields=update_fields)

    ticket = create_ticket(resident, description, title=title, priority=priority)
    return CommandResult.ok({"ticket": ticket, "resident": resident})
