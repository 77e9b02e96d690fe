"""
Helper functions for common infrastructure operations.

These utilities are pure infrastructure - they have no knowledge
of domain concepts like contents, blobs, or quotas.

Usage:
    from core.helpers import get_client_ip

    ip = get_client_ip(request)
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from django.http import HttpRequest


def get_client_ip(request: HttpRequest) -> str:
    """
    Extract client IP from request, handling proxies.

    Checks the CF-Connecting-IP header set by Cloudflare first, then the
    X-Forwarded-For header for proxy chains.

    Args:
        request: Django HTTP request

    Returns:
        Client IP address string

    Example:
        ip = get_client_ip(request)
    """
    connecting_ip = request.META.get("HTTP_CF_CONNECTING_IP")
    if connecting_ip:
        return connecting_ip.strip()

    x_forwarded_for = request.META.get("HTTP_X_FORWARDED_FOR")
    if x_forwarded_for:
        # Take the first IP in the chain (original client)
        ip = x_forwarded_for.split(",")[0].strip()
    else:
        ip = request.META.get("REMOTE_ADDR", "")
    return ip
