"""
Request logging middleware.

Writes one access line per request after the response is produced:

    INFO 203.0.113.7 accessed /api/v1/details/ with status code 200

Successful requests are logged at INFO, client errors at WARNING and
server errors at ERROR so the log level alone is enough to filter.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from core.helpers import get_client_ip

if TYPE_CHECKING:
    from collections.abc import Callable

    from django.http import HttpRequest, HttpResponse

logger = logging.getLogger("core.access")


class RequestLogMiddleware:
    """Log client IP, path and response status for every request."""

    def __init__(self, get_response: Callable[[HttpRequest], HttpResponse]):
        self.get_response = get_response

    def __call__(self, request: HttpRequest) -> HttpResponse:
        response = self.get_response(request)

        status_code = response.status_code
        if status_code >= 500:
            level = logging.ERROR
        elif status_code >= 400:
            level = logging.WARNING
        else:
            level = logging.INFO

        client_ip = get_client_ip(request)
        logger.log(
            level,
            f"{client_ip} accessed {request.get_full_path()} with status code {status_code}",
            extra={
                "client_ip": client_ip,
                "method": request.method,
                "path": request.path,
                "status_code": status_code,
            },
        )
        return response
