# tests/conftest.py
"""
Pytest fixtures for the facility back office tests.

Users come in the four roles; the project manager is assigned to
`project` only. `unit` belongs to `project` and has an owner
association, so claim invoices can be opened for it.
"""

import json
from decimal import Decimal

import pytest
from django.contrib.auth import get_user_model
from rest_framework.test import APIClient

from accounts.authz import actor_for_user
from accounts.models import ProjectAssignment
from finance.models import Invoice, PMAdvance
from properties.models import OperationalUnit, OwnerAssociation, Project, Resident
from webhooks.signature import compute_signature


User = get_user_model()

WEBHOOK_SECRET = "test-webhook-secret"


@pytest.fixture(autouse=True)
def _webhook_settings(settings):
    settings.WHATSAPP_WEBHOOK_SECRET = WEBHOOK_SECRET
    settings.WEBHOOK_SIGNATURE_HEADER = "X-Webhook-Signature"
    settings.DEFAULT_PHONE_COUNTRY_CODE = "966"


# =============================================================================
# Projects & Units
# =============================================================================

@pytest.fixture
def project(db):
    return Project.objects.create(name="Al Narjis Towers", code="NRJ")


@pytest.fixture
def other_project(db):
    return Project.objects.create(name="Al Yasmin Villas", code="YSM")


@pytest.fixture
def unit(db, project):
    return OperationalUnit.objects.create(project=project, code="A-101", name="شقة 101")


@pytest.fixture
def owner_association(db, unit):
    return OwnerAssociation.objects.create(unit=unit, name="Owners of A-101")


@pytest.fixture
def other_unit(db, other_project):
    unit = OperationalUnit.objects.create(project=other_project, code="V-7", name="Villa 7")
    OwnerAssociation.objects.create(unit=unit, name="Owners of V-7")
    return unit


@pytest.fixture
def resident(db, unit):
    return Resident.objects.create(
        unit=unit,
        name="Fahad Al-Otaibi",
        phone="0501234567",
        whatsapp_phone="+966501234567",
    )


# =============================================================================
# Users & Actors
# =============================================================================

@pytest.fixture
def admin_user(db):
    return User.objects.create_user(
        email="admin@test.com", password="testpass123", name="Admin", role=User.Role.ADMIN
    )


@pytest.fixture
def accountant(db):
    return User.objects.create_user(
        email="accountant@test.com",
        password="testpass123",
        name="Accountant",
        role=User.Role.ACCOUNTANT,
    )


@pytest.fixture
def pm_user(db, project):
    user = User.objects.create_user(
        email="pm@test.com",
        password="testpass123",
        name="Project Manager",
        role=User.Role.PROJECT_MANAGER,
        whatsapp_phone="966551112222",
    )
    ProjectAssignment.objects.create(user=user, project=project)
    return user


@pytest.fixture
def resident_user(db):
    return User.objects.create_user(
        email="resident@test.com", password="testpass123", name="Resident"
    )


@pytest.fixture
def admin_actor(admin_user):
    return actor_for_user(admin_user)


@pytest.fixture
def accountant_actor(accountant):
    return actor_for_user(accountant)


@pytest.fixture
def pm_actor(pm_user):
    return actor_for_user(pm_user)


# =============================================================================
# Finance
# =============================================================================

@pytest.fixture
def pm_advance(db, pm_user, project, accountant):
    return PMAdvance.objects.create(
        user=pm_user,
        project=project,
        amount=Decimal("1000.00"),
        remaining_amount=Decimal("1000.00"),
        created_by=accountant,
    )


@pytest.fixture
def make_note(db, project, unit, pm_user):
    from finance.models import AccountingNote

    def _make(amount="150.00", description="Water pump repair", **kwargs):
        kwargs.setdefault("project", project)
        kwargs.setdefault("unit", unit)
        kwargs.setdefault("created_by", pm_user)
        return AccountingNote.objects.create(
            amount=Decimal(amount), description=description, **kwargs
        )

    return _make


@pytest.fixture
def make_invoice(db, unit, owner_association):
    counter = {"n": 900}

    def _make(amount, total_paid="0.00", type=Invoice.Type.CLAIM):
        counter["n"] += 1
        invoice = Invoice(
            invoice_number=f"INV-T{counter['n']}",
            type=type,
            unit=unit,
            owner_association=owner_association,
            amount=Decimal(amount),
            total_paid=Decimal(total_paid),
        )
        invoice.refresh_balance()
        invoice.save()
        return invoice

    return _make


# =============================================================================
# API Client Fixtures
# =============================================================================

@pytest.fixture
def api_client():
    """Create a DRF API client."""
    return APIClient()


@pytest.fixture
def client_for(api_client):
    """Authenticate the API client as the given user."""
    def _client(user):
        api_client.force_authenticate(user=user)
        return api_client
    return _client


@pytest.fixture
def signed_post(api_client):
    """POST a JSON body signed with the shared webhook secret."""
    def _post(url, payload, secret=WEBHOOK_SECRET, signature=None):
        body = json.dumps(payload).encode("utf-8")
        if signature is None:
            signature = "sha256=" + compute_signature(body, secret)
        return api_client.generic(
            "POST",
            url,
            body,
            content_type="application/json",
            HTTP_X_WEBHOOK_SIGNATURE=signature,
        )
    return _post
