"""
Health check endpoints for operations monitoring.

Checks:
- Database connectivity (all configured databases)
- Webhook configuration (signing secret present)
- Claim invoice consistency (at most one open claim invoice per unit)

Endpoints:
- /_health/live    - liveness probe (is the process running?)
- /_health/ready   - readiness probe (can we serve traffic?)
- /_health/full    - full health report (for debugging/dashboards)
"""
import logging
import time
from typing import Dict, Any

from django.conf import settings
from django.db import connections
from django.db.models import Count
from django.http import JsonResponse
from django.views import View

logger = logging.getLogger(__name__)


class HealthCheck:
    """Health check implementation."""

    @staticmethod
    def check_database(alias: str = "default") -> Dict[str, Any]:
        """Check database connectivity."""
        start = time.time()
        try:
            conn = connections[alias]
            conn.ensure_connection()
            with conn.cursor() as cursor:
                cursor.execute("SELECT 1")
                cursor.fetchone()
            duration_ms = (time.time() - start) * 1000
            return {
                "status": "healthy",
                "alias": alias,
                "duration_ms": round(duration_ms, 2),
            }
        except Exception as e:
            logger.warning("Database health check failed", extra={"alias": alias})
            duration_ms = (time.time() - start) * 1000
            return {
                "status": "unhealthy",
                "alias": alias,
                "error": str(e),
                "duration_ms": round(duration_ms, 2),
            }

    @staticmethod
    def check_all_databases() -> Dict[str, Any]:
        """Check all configured databases."""
        results = {}
        all_healthy = True

        for alias in settings.DATABASES.keys():
            result = HealthCheck.check_database(alias)
            results[alias] = result
            if result["status"] != "healthy":
                all_healthy = False

        return {
            "status": "healthy" if all_healthy else "degraded",
            "databases": results,
        }

    @staticmethod
    def check_webhook_config() -> Dict[str, Any]:
        """Signed webhooks are rejected outright while no secret is configured."""
        if getattr(settings, "WHATSAPP_WEBHOOK_SECRET", ""):
            return {"status": "healthy"}
        return {
            "status": "degraded",
            "error": "WHATSAPP_WEBHOOK_SECRET is not set; signed webhooks are rejected",
        }

    @staticmethod
    def check_open_claim_invoices() -> Dict[str, Any]:
        """Find units holding more than one open claim invoice."""
        try:
            from finance.models import Invoice

            duplicates = list(
                Invoice.objects.filter(type=Invoice.Type.CLAIM, is_paid=False)
                .values("unit_id")
                .annotate(open_count=Count("id"))
                .filter(open_count__gt=1)
                .values_list("unit_id", flat=True)[:10]
            )
            if duplicates:
                return {
                    "status": "unhealthy",
                    "units": duplicates,
                    "error": "Units with more than one open claim invoice",
                }
            return {"status": "healthy"}
        except Exception as e:
            return {
                "status": "error",
                "error": str(e),
            }

    @staticmethod
    def get_full_health() -> Dict[str, Any]:
        """Get comprehensive health report."""
        checks = {
            "databases": HealthCheck.check_all_databases(),
            "webhooks": HealthCheck.check_webhook_config(),
            "claim_invoices": HealthCheck.check_open_claim_invoices(),
        }

        statuses = [c.get("status", "unknown") for c in checks.values()]
        if all(s == "healthy" or s == "skipped" for s in statuses):
            overall = "healthy"
        elif any(s == "unhealthy" for s in statuses):
            overall = "unhealthy"
        else:
            overall = "degraded"

        return {
            "status": overall,
            "checks": checks,
            "version": getattr(settings, "VERSION", "unknown"),
            "environment": "production" if not settings.DEBUG else "development",
        }


class LivenessView(View):
    """
    Liveness probe.

    Returns 200 if the process is running.
    Does not touch external dependencies.
    """

    def get(self, request):
        return JsonResponse({"status": "alive"})


class ReadinessView(View):
    """
    Readiness probe.

    Returns 200 if the database answers.
    """

    def get(self, request):
        db_check = HealthCheck.check_database("default")

        if db_check["status"] == "healthy":
            return JsonResponse({
                "status": "ready",
                "database": db_check,
            })
        else:
            return JsonResponse({
                "status": "not_ready",
                "database": db_check,
            }, status=503)


class FullHealthView(View):
    """
    Full health check for debugging and dashboards.

    Should be protected in production (internal network only).
    """

    def get(self, request):
        health = HealthCheck.get_full_health()

        status_code = 200 if health["status"] == "healthy" else 503
        return JsonResponse(health, status=status_code)
