"""Health check endpoints for container orchestration."""

from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import AllowAny
from rest_framework.response import Response
from rest_framework import status
from django.db import connection
from complaints.models import Badge
import logging

logger = logging.getLogger(__name__)


@api_view(["GET"])
@permission_classes([AllowAny])
def health_check(request):
    """
    Liveness check: the database must be reachable.

    Returns:
        200 OK: Service is healthy
        503 Service Unavailable: Service has issues
    """
    health_status = {"status": "healthy", "checks": {}}

    try:
        connection.ensure_connection()
        health_status["checks"]["database"] = "ok"
    except Exception as e:
        logger.error(f"Database health check failed: {str(e)}")
        health_status["checks"]["database"] = "error"
        health_status["status"] = "unhealthy"

    if health_status["status"] == "healthy":
        return Response(health_status, status=status.HTTP_200_OK)
    return Response(health_status, status=status.HTTP_503_SERVICE_UNAVAILABLE)


@api_view(["GET"])
@permission_classes([AllowAny])
def readiness_check(request):
    """
    Readiness check: ready once the badge catalog has been seeded.
    """
    try:
        seeded = Badge.objects.exists()
    except Exception as e:
        logger.error(f"Readiness check failed: {str(e)}")
        seeded = False

    if seeded:
        return Response({"status": "ready"}, status=status.HTTP_200_OK)
    return Response(
        {"status": "not_ready", "reason": "badge catalog not seeded"},
        status=status.HTTP_503_SERVICE_UNAVAILABLE,
    )
