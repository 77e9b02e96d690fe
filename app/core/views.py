"""
Infrastructure endpoints that sit outside the API version prefix.
"""

import logging
import os

from django.conf import settings
from django.db import DatabaseError, connection
from django.http import JsonResponse

logger = logging.getLogger(__name__)


def _database_reachable() -> bool:
    try:
        with connection.cursor() as cursor:
            cursor.execute("SELECT 1")
            cursor.fetchone()
    except DatabaseError:
        logger.exception("Health check could not reach the database")
        return False
    return True


def _storage_writable() -> bool:
    directories = (settings.CONTENT_BLOBS_DIR, settings.CONTENT_PREVIEWS_DIR)
    return all(os.path.isdir(d) and os.access(d, os.W_OK) for d in directories)


def health_check(request):
    """
    GET /health/ for load balancers and container orchestration.

    Reports whether the catalog database answers and whether both the blob
    and preview directories exist and are writable.

    Returns:
        200 {"status": "healthy", "database": "connected", "storage": "writable"}
        503 with "unhealthy" and the failing component marked
        ("disconnected" / "unavailable")
    """
    database_ok = _database_reachable()
    storage_ok = _storage_writable()
    healthy = database_ok and storage_ok

    return JsonResponse(
        {
            "status": "healthy" if healthy else "unhealthy",
            "database": "connected" if database_ok else "disconnected",
            "storage": "writable" if storage_ok else "unavailable",
        },
        status=200 if healthy else 503,
    )
