# webhooks/auth.py
"""API-key authentication for automation callers."""

import logging

from django.utils import timezone
from rest_framework import status
from rest_framework.exceptions import APIException

from .models import WebhookApiKey, hash_api_key

logger = logging.getLogger(__name__)


class InvalidApiKey(APIException):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_detail = "Invalid or missing API key."
    default_code = "unauthorized"


def extract_api_key(request) -> str:
    """`X-API-Key: <key>` or `Authorization: Bearer <key>`."""
    key = request.headers.get("X-API-Key", "").strip()
    if key:
        return key
    auth = request.headers.get("Authorization", "")
    if auth.lower().startswith("bearer "):
        return auth[7:].strip()
    return ""


def verify_api_key(request) -> WebhookApiKey:
    """
    Resolve the active key presented by the request and stamp last_used_at.

    Raises:
        InvalidApiKey: no key, unknown key, or deactivated key
    """
    raw_key = extract_api_key(request)
    if not raw_key:
        raise InvalidApiKey()

    api_key = WebhookApiKey.objects.filter(
        key_hash=hash_api_key(raw_key), is_active=True
    ).first()
    if not api_key:
        logger.warning("Rejected webhook API key", extra={"prefix": raw_key[:8]})
        raise InvalidApiKey()

    now = timezone.now()
    WebhookApiKey.objects.filter(pk=api_key.pk).update(last_used_at=now)
    api_key.last_used_at = now
    return api_key
