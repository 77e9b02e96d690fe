"""
Core Application - Infrastructure & Base Classes

This app contains infrastructure code shared by the domain apps:

- Generic, reusable base classes (no domain-specific logic)
- Clear extension points for domain apps
- Infrastructure concerns separated from business logic

Services (import from core.services):
    - BaseService: Base class for service layer

Exceptions (import from core.exceptions):
    - BaseApplicationError: Base exception with error codes and HTTP status
    - ValidationError: Input validation failures
    - NotFoundError: Resource not found
    - MissingResource: Unknown route
    - PermissionDeniedError: Shared-secret mismatch
    - ServerError: Unclassified failures

Handlers (import from core.handlers):
    - api_exception_handler: DRF exception handler producing the error body
    - not_found_handler / server_error_handler: handler404 / handler500

Middleware (core.middleware):
    - RequestLogMiddleware: one access log line per request

Helpers (import from core.helpers):
    - get_client_ip: Client IP extraction from request

Usage:
    from core.services import BaseService
    from core.exceptions import ValidationError, NotFoundError
    from core.helpers import get_client_ip

Note:
    - Business logic should NOT go here. Extend core classes in your domain apps.
    - Handlers and middleware are NOT imported here because they pull in
      DRF and Django request machinery. Import them directly from their modules.
"""

# Services (no Django model dependencies)
from .services import BaseService

# Exceptions (no Django dependencies)
from .exceptions import (
    BaseApplicationError,
    MissingResource,
    NotFoundError,
    PermissionDeniedError,
    ServerError,
    ValidationError,
)

# Helpers (no Django model dependencies)
from .helpers import get_client_ip

__all__ = [
    # Services
    "BaseService",
    # Exceptions
    "BaseApplicationError",
    "ValidationError",
    "NotFoundError",
    "MissingResource",
    "PermissionDeniedError",
    "ServerError",
    # Helpers
    "get_client_ip",
]
