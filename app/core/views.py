"""
Core views providing infrastructure endpoints and error translation.
"""

import logging

from django.core.cache import cache
from django.db import connection
from django.http import JsonResponse
from rest_framework.response import Response

from core.exceptions import BaseApplicationError

logger = logging.getLogger(__name__)


def error_response(exc: BaseApplicationError) -> Response:
    """
    Translate a domain error into a DRF Response.

    The status comes from the exception class (400 validation, 404 not
    found, 409 configuration/conflict, 502 gateway).
    """
    return Response(exc.to_dict(), status=exc.status_code)


def health_check(request):
    """
    Health check endpoint for Docker, Kubernetes probes and load balancers.

    HTTP Status Codes:
        200: Database reachable
        503: Database unreachable

    Cache failures are reported but never fail the check.

    Example Response:
        {
            "status": "healthy",
            "database": "connected",
            "cache": "connected"
        }
    """
    health_status = {
        "status": "healthy",
        "database": "unknown",
        "cache": "unknown",
    }
    is_healthy = True

    try:
        with connection.cursor() as cursor:
            cursor.execute("SELECT 1")
            cursor.fetchone()
        health_status["database"] = "connected"
    except Exception:
        logger.exception("Health check database probe failed")
        health_status["database"] = "disconnected"
        health_status["status"] = "unhealthy"
        is_healthy = False

    try:
        cache.set("health_check", "ok", timeout=1)
        if cache.get("health_check") == "ok":
            health_status["cache"] = "connected"
        else:
            health_status["cache"] = "disconnected"
    except Exception:
        logger.warning("Health check cache probe failed", exc_info=True)
        health_status["cache"] = "disconnected"

    return JsonResponse(health_status, status=200 if is_healthy else 503)
