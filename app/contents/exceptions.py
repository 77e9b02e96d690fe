"""
Content store errors.

Every error carries a stable machine-readable code and the HTTP status the
API answers with. The core (contents.services and the components it
composes) raises only:

    UnsupportedMime   - bytes are not an accepted image/video, or no preview
    LargeSource       - quota refusal (per-file or store-wide)
    MissingContent    - unknown content id
    MissingAsset      - blob or preview file absent for an existing content

The rest are raised by the HTTP boundary (contents.views) while validating
requests, before the core is called.
"""

from core.exceptions import (
    BaseApplicationError,
    NotFoundError,
    PermissionDeniedError,
    ValidationError,
)

# =============================================================================
# Core Errors
# =============================================================================


class UnsupportedMime(BaseApplicationError):
    """Raised when content is not an accepted media type or cannot be previewed."""

    default_error_code = "UNSUPPORTED_MIME"
    default_message = "Source file MIME type is not accepted."
    status_code = 415


class LargeSource(BaseApplicationError):
    """Raised when a write would exceed the per-file or store-wide limit."""

    default_error_code = "LARGE_SOURCE"
    default_message = "Source file exceeds limit."
    status_code = 413


class MissingContent(NotFoundError):
    """Raised when no catalog row exists for a content id."""

    default_error_code = "MISSING_CONTENT"
    default_message = "Content not found."


class MissingAsset(NotFoundError):
    """Raised when the blob or preview file of an existing content is absent."""

    default_error_code = "MISSING_ASSET"
    default_message = "Asset not found."


# =============================================================================
# Request Errors
# =============================================================================


class BadJson(ValidationError):
    default_error_code = "BAD_JSON"
    default_message = "JSON is structurally invalid or contains missing fields."


class BadFile(ValidationError):
    default_error_code = "BAD_FILE"
    default_message = "File is not a valid blob."


class InvalidField(ValidationError):
    """
    Base for single-field validation failures.

    Subclasses are looked up by field name through INVALID_FIELD_ERRORS.
    """

    field: str = ""


class InvalidToken(InvalidField):
    field = "token"
    default_error_code = "INVALID_TOKEN"
    default_message = "Invalid or missing 'token' field in JSON."


class InvalidData(InvalidField):
    field = "data"
    default_error_code = "INVALID_DATA"
    default_message = "Invalid or missing 'data' field in JSON."


class InvalidName(InvalidField):
    field = "name"
    default_error_code = "INVALID_NAME"
    default_message = "Invalid or missing 'name' field in JSON."


class InvalidTags(InvalidField):
    field = "tags"
    default_error_code = "INVALID_TAGS"
    default_message = "Invalid or missing 'tags' field in JSON."


class InvalidTime(InvalidField):
    field = "time"
    default_error_code = "INVALID_TIME"
    default_message = "Invalid or missing 'time' field in JSON."


class InvalidUuid(InvalidField):
    field = "uuid"
    default_error_code = "INVALID_UUID"
    default_message = "Invalid or missing 'uuid' field in JSON."


class Unauthorized(PermissionDeniedError):
    """Raised when the presented token does not match CONTENT_TOKEN."""


INVALID_FIELD_ERRORS: dict[str, type[InvalidField]] = {
    error.field: error
    for error in (
        InvalidToken,
        InvalidData,
        InvalidName,
        InvalidTags,
        InvalidTime,
        InvalidUuid,
    )
}
