# webhooks/views.py
"""
Webhook endpoints called by the WhatsApp automation layer.

These views skip JWT authentication: signed endpoints authenticate the
body with HMAC, the intake endpoint with an API key. Both checks run
before anything is read from or written to the database.

Field names follow the automation payloads (camelCase, with aliases).
"""

import logging

from django.db.models import Q
from rest_framework import status
from rest_framework.exceptions import APIException, ParseError
from rest_framework.permissions import AllowAny
from rest_framework.response import Response
from rest_framework.views import APIView

from accounts.authz import actor_for_user
from accounts.models import User
from accounts.phone import build_phone_variants
from facilitydesk.commands import CommandResult, ErrorCode
from finance.commands import create_accounting_note, parse_positive_amount
from finance.notifications import accounting_note_message
from finance.serializers import AccountingNoteSerializer
from servicedesk.commands import (
    DEFAULT_PRIORITY,
    open_delivery_order_from_phone,
    open_ticket_for_named_resident,
    open_ticket_from_phone,
)
from servicedesk.notifications import delivery_order_message, ticket_message
from servicedesk.serializers import DeliveryOrderSerializer, TicketSerializer
from .audit import log_webhook_event
from .auth import verify_api_key
from .signature import read_signed_json

logger = logging.getLogger(__name__)

WHATSAPP = "WhatsApp"
N8N = "n8n"


def _first(body, *keys):
    """Value of the first alias present with a non-empty value."""
    for key in keys:
        value = body.get(key)
        if value not in (None, ""):
            return value
    return None


def _as_id(value):
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def _missing(fields):
    return CommandResult.fail(f"Missing required fields: {', '.join(fields)}")


class SignedWebhookView(APIView):
    """
    Base for HMAC-signed webhooks.

    Subclasses implement handle(body) -> (CommandResult, success payload
    builder). Non-success outcomes and unexpected errors are recorded in
    WebhookLog when `log_failures` is set.
    """
    authentication_classes = []
    permission_classes = [AllowAny]

    event_type = ""
    log_failures = True

    def post(self, request):
        body = read_signed_json(request)

        try:
            response = self.handle(body)
        except APIException:
            raise
        except Exception as exc:
            logger.exception("Webhook processing failed", extra={"event_type": self.event_type})
            if self.log_failures:
                log_webhook_event(
                    source=WHATSAPP,
                    event_type=self.event_type,
                    status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                    request=request,
                    payload=body,
                    error_message=str(exc),
                )
            raise

        if response.status_code >= 400 and self.log_failures:
            log_webhook_event(
                source=WHATSAPP,
                event_type=self.event_type,
                status_code=response.status_code,
                request=request,
                payload=body,
                response=response.data,
                error_message=response.data.get("detail", ""),
            )
        return response

    def handle(self, body) -> Response:
        raise NotImplementedError

    @staticmethod
    def error(result: CommandResult) -> Response:
        return Response(result.error_body(), status=result.http_status)


class TicketWebhookView(SignedWebhookView):
    """POST /api/webhooks/ticket/ -> open a ticket for a resident identified by phone"""
    event_type = "Ticket"

    def handle(self, body):
        phone = _first(body, "residentPhone", "senderPhone", "from")
        unit_code = _first(body, "unitCode", "unit")
        description = _first(body, "description", "text", "message")
        project_id = _as_id(body.get("projectId"))
        priority = body.get("priority") or DEFAULT_PRIORITY

        if not (phone and unit_code and description and project_id):
            return self.error(_missing(["residentPhone", "unitCode", "description", "projectId"]))

        result = open_ticket_from_phone(project_id, str(unit_code), str(phone), str(description), priority)
        if not result.success:
            return self.error(result)

        ticket = result.data
        return Response(
            {
                "success": True,
                "ticket_id": ticket.pk,
                "message": "Ticket created successfully",
                "whatsapp_message": ticket_message(ticket),
                "ticket": TicketSerializer(ticket).data,
            },
            status=status.HTTP_201_CREATED,
        )


class DeliveryOrderWebhookView(SignedWebhookView):
    """POST /api/webhooks/delivery-order/ -> open a delivery order for a resident identified by phone"""
    event_type = "DeliveryOrder"

    def handle(self, body):
        phone = _first(body, "residentPhone", "senderPhone", "from")
        unit_code = _first(body, "unitCode", "unit")
        order_text = _first(body, "orderText", "text", "message")
        project_id = _as_id(body.get("projectId"))

        if not (phone and unit_code and order_text and project_id):
            return self.error(_missing(["residentPhone", "unitCode", "orderText", "projectId"]))

        result = open_delivery_order_from_phone(project_id, str(unit_code), str(phone), str(order_text))
        if not result.success:
            return self.error(result)

        order = result.data
        return Response(
            {
                "success": True,
                "order_id": order.pk,
                "message": "Delivery order created successfully",
                "whatsapp_message": delivery_order_message(order),
                "order": DeliveryOrderSerializer(order).data,
            },
            status=status.HTTP_201_CREATED,
        )


class AccountingNoteWebhookView(SignedWebhookView):
    """
    POST /api/webhooks/accounting-note/ -> a project manager raises a note

    The manager is identified by WhatsApp number (any stored variant) or
    by email.
    """
    event_type = "AccountingNote"

    def handle(self, body):
        contact = _first(body, "pmPhone", "senderPhone", "from")
        unit_code = _first(body, "unitCode", "unit")
        amount = body.get("amount")
        reason = _first(body, "reason", "description")
        project_id = _as_id(body.get("projectId"))
        notes = body.get("notes") or ""

        if not (contact and unit_code and reason and project_id) or amount in (None, ""):
            return self.error(_missing(["pmPhone", "unitCode", "amount", "reason", "projectId"]))

        if parse_positive_amount(amount) is None:
            return self.error(CommandResult.fail("Amount must be a positive number."))

        contact = str(contact)
        manager = (
            User.objects.filter(role=User.Role.PROJECT_MANAGER, is_active=True)
            .filter(Q(whatsapp_phone__in=build_phone_variants(contact)) | Q(email__iexact=contact))
            .first()
        )
        if not manager:
            return self.error(
                CommandResult.fail("Project Manager not found for the given contact.", ErrorCode.NOT_FOUND)
            )

        result = create_accounting_note(
            actor_for_user(manager),
            project_id,
            str(unit_code),
            amount,
            str(reason),
            notes=str(notes),
        )
        if not result.success:
            return self.error(result)

        note = result.data
        return Response(
            {
                "success": True,
                "note_id": note.pk,
                "message": "Accounting note created successfully",
                "accounting_note": AccountingNoteSerializer(note).data,
                "whatsapp_message": accounting_note_message(note),
            },
            status=status.HTTP_201_CREATED,
        )


class ApiKeyTicketWebhookView(APIView):
    """
    POST /api/webhooks/tickets/ -> ticket intake for API-key callers

    Only keys with the RESIDENT role may create tickets. Every outcome
    after the key check is written to WebhookLog.
    """
    authentication_classes = []
    permission_classes = [AllowAny]

    event_type = "TICKET_CREATED"

    def post(self, request):
        api_key = verify_api_key(request)
        body = None

        try:
            body = request.data
            if not isinstance(body, dict):
                raise ParseError("Request body must be a JSON object.")
            payload, status_code, error_message = self._intake(api_key, body)
        except APIException as exc:
            self._log(request, api_key, body, exc.status_code, {"detail": str(exc.detail)}, str(exc.detail))
            raise
        except Exception as exc:
            logger.exception("Ticket intake failed", extra={"api_key_id": api_key.pk})
            self._log(
                request,
                api_key,
                body,
                status.HTTP_500_INTERNAL_SERVER_ERROR,
                {"detail": "Internal server error."},
                str(exc),
            )
            raise

        self._log(request, api_key, body, status_code, payload, error_message)
        return Response(payload, status=status_code)

    def _intake(self, api_key, body):
        if api_key.role != User.Role.RESIDENT:
            result = CommandResult.fail("Only residents can create tickets.", ErrorCode.FORBIDDEN)
            return result.error_body(), result.http_status, result.error

        resident_name = body.get("residentName")
        unit_code = body.get("unitCode")
        title = body.get("title")
        description = body.get("description")
        if not (resident_name and unit_code and title and description):
            result = _missing(["residentName", "unitCode", "title", "description"])
            return result.error_body(), result.http_status, result.error

        result = open_ticket_for_named_resident(
            str(unit_code),
            str(resident_name),
            str(title),
            str(description),
            priority=body.get("priority") or DEFAULT_PRIORITY,
            email=body.get("residentEmail"),
            phone=body.get("residentPhone"),
        )
        if not result.success:
            return result.error_body(), result.http_status, result.error

        ticket = result.data["ticket"]
        resident = result.data["resident"]
        payload = {
            "success": True,
            "ticket_id": ticket.pk,
            "ticket_number": ticket.ticket_number,
            "resident": {
                "id": resident.pk,
                "name": resident.name,
                "email": resident.email,
                "phone": resident.phone,
                "unit_code": resident.unit.code,
            },
            "message": "Ticket created successfully",
        }
        return payload, status.HTTP_201_CREATED, ""

    def _log(self, request, api_key, body, status_code, response, error_message):
        log_webhook_event(
            source=N8N,
            event_type=self.event_type,
            status_code=status_code,
            request=request,
            payload=body if isinstance(body, dict) else None,
            response=response,
            error_message=error_message,
            api_key=api_key,
        )
