"""
REST framework exception handler.

Every error body has the same shape: {"detail": <message>, "code": <category>}.
Serializer errors keep their per-field messages under "errors".
Anything DRF does not recognise is logged with the view and request path
and answered with a generic 500.
"""
import logging

from rest_framework import status
from rest_framework.exceptions import ValidationError
from rest_framework.response import Response
from rest_framework.views import exception_handler

logger = logging.getLogger(__name__)


STATUS_CODES = {
    status.HTTP_400_BAD_REQUEST: "invalid",
    status.HTTP_401_UNAUTHORIZED: "unauthorized",
    status.HTTP_403_FORBIDDEN: "forbidden",
    status.HTTP_404_NOT_FOUND: "not_found",
    status.HTTP_405_METHOD_NOT_ALLOWED: "method_not_allowed",
    status.HTTP_409_CONFLICT: "conflict",
}


def api_exception_handler(exc, context):
    response = exception_handler(exc, context)

    if response is None:
        view = context.get("view")
        request = context.get("request")
        logger.exception(
            "Unhandled API error",
            extra={
                "view": view.__class__.__name__ if view else None,
                "path": getattr(request, "path", None),
            },
        )
        return Response(
            {"detail": "Internal server error.", "code": "internal"},
            status=status.HTTP_500_INTERNAL_SERVER_ERROR,
        )

    code = STATUS_CODES.get(response.status_code, "error")
    if isinstance(exc, ValidationError):
        response.data = {
            "detail": "Invalid input.",
            "code": code,
            "errors": response.data,
        }
    elif isinstance(response.data, dict) and "detail" in response.data:
        response.data = {"detail": str(response.data["detail"]), "code": code}
    return response
