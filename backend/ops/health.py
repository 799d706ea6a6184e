"""
Health check endpoints for operations monitoring.

Checks:
- Database connectivity (all configured databases)
- Ledger balance: total debits equal total credits per company

Endpoints:
- /_health/live    - liveness probe (is the process running?)
- /_health/ready   - readiness probe (can we serve traffic?)
- /_health/full    - full health report (for debugging/dashboards)
"""
import logging
import time
from decimal import Decimal
from typing import Dict, Any

from django.conf import settings
from django.db import DatabaseError, connections
from django.db.models import Sum
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
        except DatabaseError as e:
            logger.warning("Database %s unreachable: %s", alias, e)
            return {
                "status": "unhealthy",
                "alias": alias,
                "error": str(e),
                "duration_ms": round((time.time() - start) * 1000, 2),
            }
        return {
            "status": "healthy",
            "alias": alias,
            "duration_ms": round((time.time() - start) * 1000, 2),
        }

    @staticmethod
    def check_all_databases() -> Dict[str, Any]:
        results = {alias: HealthCheck.check_database(alias) for alias in settings.DATABASES}
        all_healthy = all(r["status"] == "healthy" for r in results.values())
        return {
            "status": "healthy" if all_healthy else "degraded",
            "databases": results,
        }

    @staticmethod
    def check_ledger_balance() -> Dict[str, Any]:
        """Every company's ledger must net to zero."""
        from accounting.models import LedgerTransaction

        try:
            rows = (
                LedgerTransaction.objects.order_by()
                .values("company__slug")
                .annotate(debit=Sum("debit"), credit=Sum("credit"))
            )
            unbalanced = [
                {
                    "company": row["company__slug"],
                    "debit": str(row["debit"] or Decimal("0")),
                    "credit": str(row["credit"] or Decimal("0")),
                }
                for row in rows
                if (row["debit"] or 0) != (row["credit"] or 0)
            ]
        except DatabaseError as e:
            return {"status": "error", "error": str(e)}

        if unbalanced:
            logger.error("Unbalanced ledger detected", extra={"companies": unbalanced})
            return {"status": "unhealthy", "unbalanced": unbalanced[:10]}
        return {"status": "healthy"}

    @staticmethod
    def get_full_health() -> Dict[str, Any]:
        checks = {
            "databases": HealthCheck.check_all_databases(),
            "ledger": HealthCheck.check_ledger_balance(),
        }

        statuses = [c.get("status", "unknown") for c in checks.values()]
        if all(s == "healthy" for s in statuses):
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
    """Returns 200 while the process is running. No external checks."""

    def get(self, request):
        return JsonResponse({"status": "alive"})


class ReadinessView(View):
    """Returns 200 when the default database answers, 503 otherwise."""

    def get(self, request):
        db_check = HealthCheck.check_database("default")

        if db_check["status"] == "healthy":
            return JsonResponse({"status": "ready", "database": db_check})
        return JsonResponse({"status": "not_ready", "database": db_check}, status=503)


class FullHealthView(View):
    """
    Full health check for debugging and dashboards.

    Should be protected in production (internal network only).
    """

    def get(self, request):
        health = HealthCheck.get_full_health()

        status_code = 200 if health["status"] == "healthy" else 503
        return JsonResponse(health, status=status_code)
