"""
API exception handling.

Translates every exception escaping a DRF view into the JSON error shape
produced by BaseApplicationError.to_dict():

    {"error": "Content not found.", "error_code": "MISSING_CONTENT"}

- BaseApplicationError subclasses keep their own code and status.
- DRF's own exceptions (method not allowed, parse errors, ...) keep their
  status but are reshaped to the same body.
- Anything else becomes SERVER_ERROR (500) and is logged with its traceback.

Configured via REST_FRAMEWORK["EXCEPTION_HANDLER"] in settings.
"""

from __future__ import annotations

import logging
from typing import Any

from django.conf import settings
from django.http import JsonResponse
from rest_framework import exceptions as drf_exceptions
from rest_framework.response import Response

from core.exceptions import BaseApplicationError, MissingResource, ServerError

logger = logging.getLogger(__name__)


def api_exception_handler(exc: Exception, context: dict[str, Any]) -> Response:
    """Map an exception raised inside a DRF view to an error response."""
    if isinstance(exc, BaseApplicationError):
        if exc.status_code >= 500:
            logger.error("Request failed: %s", exc, exc_info=exc)
        return Response(exc.to_dict(), status=exc.status_code)

    if isinstance(exc, drf_exceptions.APIException):
        body = {
            "error": str(exc.detail) if isinstance(exc.detail, str) else exc.default_detail,
            "error_code": str(exc.default_code).upper(),
        }
        return Response(body, status=exc.status_code)

    view = context.get("view")
    logger.exception(
        "Unhandled error in API view",
        extra={"view": view.__class__.__name__ if view else None},
    )
    error = ServerError(str(exc) if settings.DEBUG else None)
    return Response(error.to_dict(), status=error.status_code)


def not_found_handler(request, exception=None) -> JsonResponse:
    """handler404 for unknown routes."""
    error = MissingResource()
    return JsonResponse(error.to_dict(), status=error.status_code)


def server_error_handler(request) -> JsonResponse:
    """handler500 for errors raised outside DRF views."""
    error = ServerError()
    return JsonResponse(error.to_dict(), status=error.status_code)
