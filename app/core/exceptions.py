"""
Base exception classes for application-wide error handling.

This module provides a standardized exception hierarchy that enables:
- Consistent error responses across the application
- Machine-readable error codes for client handling
- A transport status code carried by each error kind

Exception Hierarchy:
    BaseApplicationError (base)
    ├── ValidationError - Input validation failures (400)
    ├── NotFoundError - Resource not found (404)
    │   └── MissingResource - Unknown route (404)
    ├── PermissionDeniedError - Shared-secret mismatch (401)
    └── ServerError - Unclassified failures (500)

Domain apps extend these classes with their own codes (see contents.exceptions).

Usage:
    from core.exceptions import NotFoundError

    # Raise with message only
    raise NotFoundError("Content not found")

    # Raise with error code for client handling
    raise NotFoundError("Content not found", error_code="MISSING_CONTENT")

    # Convert to dict for API response
    try:
        ...
    except BaseApplicationError as e:
        return Response(e.to_dict(), status=e.status_code)

Note:
    These exceptions are for domain/business logic errors.
    core.handlers.api_exception_handler turns them into API responses.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from typing import Any


class BaseApplicationError(Exception):
    """
    Base exception for all application-specific errors.

    Attributes:
        message: Human-readable error description
        error_code: Machine-readable code for client-side handling
        status_code: HTTP status used when the error reaches the API layer
        details: Additional error context (field errors, metadata, etc.)

    Subclasses normally only override the class-level defaults, so raising
    them without arguments yields the stable message for their code:

        raise MissingContent()
    """

    default_error_code: str = "APPLICATION_ERROR"
    default_message: str = "Application error."
    status_code: int = 500

    def __init__(
        self,
        message: str | None = None,
        error_code: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        """
        Initialize the exception.

        Args:
            message: Human-readable error description (defaults to class default)
            error_code: Machine-readable error code (defaults to class default)
            details: Additional error context
        """
        self.message = message or self.default_message
        self.error_code = error_code or self.default_error_code
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> dict[str, Any]:
        """
        Convert exception to dictionary for API response.

        Returns:
            Dict with error, error_code, and (when present) details keys

        Example:
            {
                "error": "Content not found.",
                "error_code": "MISSING_CONTENT",
                "details": {"uuid": "..."}
            }
        """
        result: dict[str, Any] = {
            "error": self.message,
            "error_code": self.error_code,
        }
        if self.details:
            result["details"] = self.details
        return result

    def __str__(self) -> str:
        """Return string representation with error code."""
        return f"[{self.error_code}] {self.message}"

    def __repr__(self) -> str:
        """Return detailed representation for debugging."""
        return (
            f"{self.__class__.__name__}("
            f"message={self.message!r}, "
            f"error_code={self.error_code!r}, "
            f"details={self.details!r})"
        )


class ValidationError(BaseApplicationError):
    """
    Raised when request input fails validation before reaching a service.

    Use for:
    - Malformed JSON payloads
    - Missing or wrongly typed fields
    - Missing file uploads

    Note:
        DRF serializers do the field checks; views translate the first
        failing field into the matching subclass.
    """

    default_error_code: str = "VALIDATION_ERROR"
    default_message: str = "Invalid request."
    status_code: int = 400


class NotFoundError(BaseApplicationError):
    """
    Raised when a requested resource is not found.

    Use for:
    - Database record not found
    - Stored file not found
    - Unknown routes
    """

    default_error_code: str = "NOT_FOUND"
    default_message: str = "Resource not found."
    status_code: int = 404


class PermissionDeniedError(BaseApplicationError):
    """
    Raised when the caller presents a shared secret that does not match.

    Example:
        if not hmac.compare_digest(token, settings.CONTENT_TOKEN):
            raise PermissionDeniedError()
    """

    default_error_code: str = "UNAUTHORIZED_TOKEN"
    default_message: str = "Access unauthorized."
    status_code: int = 401


class ServerError(BaseApplicationError):
    """
    Raised (or substituted by the API exception handler) for anything
    unclassified: I/O failures, database errors, programming errors.

    Note:
        Log the original error for debugging but don't expose
        internal details to clients in production.
    """

    default_error_code: str = "SERVER_ERROR"
    default_message: str = "Internal server error."
    status_code: int = 500


class MissingResource(NotFoundError):
    """Raised for requests that match no route."""

    default_error_code: str = "MISSING_RESOURCE"
    default_message: str = "Resource not found."
