# tests/test_webhooks.py
"""
Tests for the webhook ingest endpoints.

Tests cover:
- Signature checks happen before any persistence
- Alias field names from the automation payloads
- Resident and project manager lookup by phone variants
- API-key ticket intake and its audit trail
"""

from decimal import Decimal

import pytest

from finance.models import AccountingNote
from properties.models import Resident
from servicedesk.models import DeliveryOrder, Ticket
from webhooks.models import WebhookApiKey, WebhookLog


TICKET_URL = "/api/webhooks/ticket/"
DELIVERY_URL = "/api/webhooks/delivery-order/"
NOTE_URL = "/api/webhooks/accounting-note/"
INTAKE_URL = "/api/webhooks/tickets/"


# =============================================================================
# Signatures
# =============================================================================

@pytest.mark.django_db
class TestSignedWebhookAuth:

    def test_wrong_signature_is_unauthorized_and_writes_nothing(self, signed_post, project, unit, resident):
        payload = {"residentPhone": "0501234567", "unitCode": "A-101", "description": "Leak", "projectId": project.pk}

        response = signed_post(TICKET_URL, payload, secret="not-the-secret")

        assert response.status_code == 401
        assert response.json()["code"] == "unauthorized"
        assert Ticket.objects.count() == 0
        assert WebhookLog.objects.count() == 0

    def test_missing_signature_is_unauthorized(self, signed_post, project):
        response = signed_post(NOTE_URL, {"projectId": project.pk}, signature="")

        assert response.status_code == 401
        assert AccountingNote.objects.count() == 0

    def test_unconfigured_secret_rejects_everything(self, signed_post, settings, project):
        settings.WHATSAPP_WEBHOOK_SECRET = ""

        response = signed_post(DELIVERY_URL, {"projectId": project.pk})

        assert response.status_code == 401
        assert DeliveryOrder.objects.count() == 0


# =============================================================================
# Ticket / Delivery order
# =============================================================================

@pytest.mark.django_db
class TestTicketWebhook:

    def test_creates_ticket_for_resident_found_by_phone(self, signed_post, project, unit, resident):
        payload = {
            "senderPhone": "+966 50 123 4567",
            "unit": "A-101",
            "text": "The water heater in the kitchen stopped working this morning",
            "projectId": project.pk,
        }

        response = signed_post(TICKET_URL, payload)

        assert response.status_code == 201, response.content
        body = response.json()
        assert body["success"] is True
        ticket = Ticket.objects.get(pk=body["ticket_id"])
        assert ticket.resident == resident
        assert ticket.unit == unit
        assert ticket.status == "NEW"
        assert ticket.priority == "Normal"
        assert resident.name in body["whatsapp_message"]

    def test_long_text_is_truncated_for_title(self, signed_post, project, unit, resident):
        text = "x" * 250
        payload = {"from": "0501234567", "unitCode": "A-101", "message": text, "projectId": project.pk}

        response = signed_post(TICKET_URL, payload)

        ticket = Ticket.objects.get(pk=response.json()["ticket_id"])
        assert len(ticket.title) == 100
        assert ticket.description == text

    def test_missing_fields_are_invalid_and_logged(self, signed_post, project):
        response = signed_post(TICKET_URL, {"unitCode": "A-101", "projectId": project.pk})

        assert response.status_code == 400
        assert "residentPhone" in response.json()["detail"]
        log = WebhookLog.objects.get()
        assert log.event_type == "Ticket"
        assert log.status == WebhookLog.Status.ERROR
        assert log.status_code == 400

    def test_unknown_resident_is_not_found(self, signed_post, project, unit, resident):
        payload = {"residentPhone": "0559999999", "unitCode": "A-101", "description": "Noise", "projectId": project.pk}

        response = signed_post(TICKET_URL, payload)

        assert response.status_code == 404
        assert Ticket.objects.count() == 0

    def test_resident_of_another_unit_is_not_matched(self, signed_post, project, unit, resident):
        from properties.models import OperationalUnit

        OperationalUnit.objects.create(project=project, code="A-102")
        payload = {"residentPhone": "0501234567", "unitCode": "A-102", "description": "Noise", "projectId": project.pk}

        response = signed_post(TICKET_URL, payload)

        assert response.status_code == 404

    def test_delivery_order(self, signed_post, project, unit, resident):
        payload = {"residentPhone": "966501234567", "unitCode": "A-101", "orderText": "Two water bottles", "projectId": project.pk}

        response = signed_post(DELIVERY_URL, payload)

        assert response.status_code == 201, response.content
        order = DeliveryOrder.objects.get(pk=response.json()["order_id"])
        assert order.resident == resident
        assert order.title == "Two water bottles"


# =============================================================================
# Accounting note
# =============================================================================

@pytest.mark.django_db
class TestAccountingNoteWebhook:

    def _payload(self, project, **overrides):
        payload = {
            "pmPhone": "0551112222",
            "unitCode": "A-101",
            "amount": "320.75",
            "reason": "Replaced the lobby door lock",
            "projectId": project.pk,
        }
        payload.update(overrides)
        return payload

    def test_manager_found_by_phone_variant_raises_note(self, signed_post, project, unit, pm_user):
        response = signed_post(NOTE_URL, self._payload(project, notes="Receipt sent separately"))

        assert response.status_code == 201, response.content
        body = response.json()
        note = AccountingNote.objects.get(pk=body["note_id"])
        assert note.status == AccountingNote.Status.PENDING
        assert note.amount == Decimal("320.75")
        assert note.created_by == pm_user
        assert "Receipt sent separately" in note.description
        assert "ملاحظة محاسبية جديدة" in body["whatsapp_message"]
        assert unit.code in body["whatsapp_message"]

    def test_manager_found_by_email(self, signed_post, project, unit, pm_user):
        response = signed_post(NOTE_URL, self._payload(project, pmPhone="pm@test.com"))

        assert response.status_code == 201

    def test_unknown_manager_is_not_found(self, signed_post, project, unit, pm_user):
        response = signed_post(NOTE_URL, self._payload(project, pmPhone="0500000000"))

        assert response.status_code == 404
        assert AccountingNote.objects.count() == 0

    def test_unassigned_project_is_forbidden(self, signed_post, other_project, other_unit, pm_user):
        response = signed_post(NOTE_URL, self._payload(other_project, unitCode="V-7"))

        assert response.status_code == 403
        assert AccountingNote.objects.count() == 0

    @pytest.mark.parametrize("amount", ["-1", "0", "abc", "1e30", "123456789012345.00"])
    def test_bad_amount_is_invalid(self, signed_post, project, unit, pm_user, amount):
        response = signed_post(NOTE_URL, self._payload(project, amount=amount))

        assert response.status_code == 400
        assert AccountingNote.objects.count() == 0

    def test_unknown_unit_is_not_found(self, signed_post, project, unit, pm_user):
        response = signed_post(NOTE_URL, self._payload(project, unitCode="Z-1"))

        assert response.status_code == 404


# =============================================================================
# API-key ticket intake
# =============================================================================

@pytest.mark.django_db
class TestApiKeyTicketIntake:

    @pytest.fixture
    def resident_key(self, db):
        return WebhookApiKey.issue("n8n residents", "RESIDENT")

    def _payload(self, **overrides):
        payload = {
            "residentName": "Fahad Al-Otaibi",
            "unitCode": "A-101",
            "title": "AC not cooling",
            "description": "Bedroom AC blows warm air",
        }
        payload.update(overrides)
        return payload

    def test_missing_key_is_unauthorized(self, api_client, unit):
        response = api_client.post(INTAKE_URL, self._payload(), format="json")

        assert response.status_code == 401
        assert Ticket.objects.count() == 0

    def test_existing_resident_gets_ticket(self, api_client, resident_key, unit, resident):
        api_key, raw_key = resident_key

        response = api_client.post(
            INTAKE_URL, self._payload(priority="High"), format="json", HTTP_X_API_KEY=raw_key
        )

        assert response.status_code == 201, response.content
        body = response.json()
        ticket = Ticket.objects.get(pk=body["ticket_id"])
        assert ticket.resident == resident
        assert ticket.priority == "High"
        assert body["ticket_number"] == "TICK-" + ticket.public_id.hex[:8].upper()
        assert body["resident"]["unit_code"] == "A-101"

        log = WebhookLog.objects.get()
        assert log.status_code == 201
        assert log.api_key == api_key
        api_key.refresh_from_db()
        assert api_key.last_used_at is not None

    def test_unknown_resident_is_created_in_unit(self, api_client, resident_key, unit):
        _, raw_key = resident_key

        response = api_client.post(
            INTAKE_URL,
            self._payload(residentName="Sara", residentPhone="0507654321", residentEmail="sara@example.com"),
            format="json",
            HTTP_AUTHORIZATION=f"Bearer {raw_key}",
        )

        assert response.status_code == 201
        created = Resident.objects.get(name="Sara")
        assert created.unit == unit
        assert created.phone == "0507654321"
        assert created.email == "sara@example.com"

    def test_unknown_unit_is_not_found_and_logged(self, api_client, resident_key):
        _, raw_key = resident_key

        response = api_client.post(INTAKE_URL, self._payload(unitCode="Q-1"), format="json", HTTP_X_API_KEY=raw_key)

        assert response.status_code == 404
        assert WebhookLog.objects.get().status_code == 404

    def test_missing_fields_are_invalid_and_logged(self, api_client, resident_key, unit):
        _, raw_key = resident_key

        response = api_client.post(INTAKE_URL, {"residentName": "Sara"}, format="json", HTTP_X_API_KEY=raw_key)

        assert response.status_code == 400
        assert WebhookLog.objects.get().status_code == 400

    def test_non_resident_key_is_forbidden_and_logged(self, api_client, unit):
        _, raw_key = WebhookApiKey.issue("n8n staff", "PROJECT_MANAGER")

        response = api_client.post(INTAKE_URL, self._payload(), format="json", HTTP_X_API_KEY=raw_key)

        assert response.status_code == 403
        assert Ticket.objects.count() == 0
        assert WebhookLog.objects.get().status_code == 403

    def test_deactivated_key_is_unauthorized(self, api_client, resident_key, unit):
        api_key, raw_key = resident_key
        api_key.is_active = False
        api_key.save()

        response = api_client.post(INTAKE_URL, self._payload(), format="json", HTTP_X_API_KEY=raw_key)

        assert response.status_code == 401
