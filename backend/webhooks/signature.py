# webhooks/signature.py
"""
HMAC-SHA256 request signing.

The caller signs the raw request body with the shared secret and sends
`sha256=<hex digest>` in the signature header. Verification happens on
the raw bytes before anything is parsed or written.
"""

import hashlib
import hmac
import json
import logging

from django.conf import settings
from rest_framework import status
from rest_framework.exceptions import APIException, ParseError

logger = logging.getLogger(__name__)

SIGNATURE_PREFIX = "sha256="


class InvalidSignature(APIException):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_detail = "Unauthorized"
    default_code = "unauthorized"


def compute_signature(body: bytes, secret: str) -> str:
    return hmac.new(secret.encode("utf-8"), body, hashlib.sha256).hexdigest()


def verify_signature(body: bytes, signature: str, secret: str) -> bool:
    if not secret or not signature:
        return False
    if signature.startswith(SIGNATURE_PREFIX):
        signature = signature[len(SIGNATURE_PREFIX):]
    return hmac.compare_digest(compute_signature(body, secret), signature.strip().lower())


def read_signed_json(request, secret: str = None) -> dict:
    """
    Verify the request signature and return the decoded JSON object.

    Raises:
        InvalidSignature: missing secret, missing or wrong signature (401)
        ParseError: body is not a JSON object (400)
    """
    if secret is None:
        secret = settings.WHATSAPP_WEBHOOK_SECRET
    if not secret:
        logger.error("Signed webhook rejected: WHATSAPP_WEBHOOK_SECRET is not configured")
        raise InvalidSignature()

    body = request.body
    header = request.headers.get(settings.WEBHOOK_SIGNATURE_HEADER, "")
    if not verify_signature(body, header, secret):
        logger.warning(
            "Invalid webhook signature",
            extra={"path": request.path, "has_signature": bool(header)},
        )
        raise InvalidSignature()

    try:
        data = json.loads(body.decode("utf-8") or "{}")
    except (UnicodeDecodeError, ValueError):
        raise ParseError("Request body is not valid JSON.")
    if not isinstance(data, dict):
        raise ParseError("Request body must be a JSON object.")
    return data
