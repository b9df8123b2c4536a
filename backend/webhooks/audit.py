# webhooks/audit.py
import logging

from .models import WebhookLog

logger = logging.getLogger(__name__)


def client_ip(request) -> str:
    forwarded = request.META.get("HTTP_X_FORWARDED_FOR", "")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.META.get("REMOTE_ADDR", "") or "unknown"


def log_webhook_event(
    *,
    source: str,
    event_type: str,
    status_code: int,
    request=None,
    payload=None,
    response=None,
    error_message: str = "",
    api_key=None,
):
    """
    Write a WebhookLog row.

    Best-effort: a failure here is logged and swallowed so it never
    replaces the error being reported to the caller.
    """
    try:
        return WebhookLog.objects.create(
            source=source,
            event_type=event_type,
            endpoint=request.path if request is not None else "",
            method=request.method if request is not None else "",
            status=WebhookLog.Status.SUCCESS if status_code < 400 else WebhookLog.Status.ERROR,
            status_code=status_code,
            payload=payload,
            response=response,
            error_message=error_message or "",
            ip_address=client_ip(request) if request is not None else "",
            api_key=api_key,
        )
    except Exception:
        logger.exception(
            "Failed to write webhook log",
            extra={"event_type": event_type, "status_code": status_code},
        )
        return None
