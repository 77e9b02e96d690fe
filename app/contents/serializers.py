"""
Serializers for the content store API.

Request serializers validate the fields of the multipart "json" document
(add/update/remove) and the query string of list/search. JSON fields are
strictly typed: a number is not accepted where a string is expected and
vice versa, so clients get INVALID_<FIELD> rather than a silent coercion.

Query-string numbers are lenient instead: a value that is not a usable
number is treated as absent.

Response serializers describe the JSON returned to clients and are used
both for rendering and for the OpenAPI schema.
"""

from __future__ import annotations

import math
from typing import Any

from rest_framework import serializers

from contents.catalog import DEFAULT_COUNT, DEFAULT_PAGE
from contents.types import TAG_DELIMITER, SortKey, SortOrder, from_epoch_ms

# =============================================================================
# Strict JSON Fields
# =============================================================================


class StrictCharField(serializers.CharField):
    """CharField that refuses non-string JSON values instead of coercing them."""

    def __init__(self, **kwargs: Any) -> None:
        kwargs.setdefault("allow_blank", True)
        kwargs.setdefault("trim_whitespace", False)
        super().__init__(**kwargs)

    def to_internal_value(self, data: Any) -> str:
        if not isinstance(data, str):
            self.fail("invalid")
        return super().to_internal_value(data)


class StrictNumberField(serializers.Field):
    """A JSON number (int or float, not bool, not a numeric string)."""

    default_error_messages = {"invalid": "A valid number is required."}

    def to_internal_value(self, data: Any) -> float:
        if isinstance(data, bool) or not isinstance(data, (int, float)):
            self.fail("invalid")
        if not math.isfinite(data):
            self.fail("invalid")
        return data

    def to_representation(self, value: Any) -> Any:
        return value


def _validate_document(value: Any) -> Any:
    # The metadata document must be a JSON object or array
    if not isinstance(value, (dict, list)):
        raise serializers.ValidationError("Must be a JSON object or array.")
    return value


def _validate_tag_list(value: list[str]) -> list[str]:
    if any(TAG_DELIMITER in tag for tag in value):
        raise serializers.ValidationError(f"Tags may not contain {TAG_DELIMITER!r}.")
    return value


def _representable_time(value: float) -> bool:
    try:
        from_epoch_ms(value)
    except (OverflowError, ValueError):
        return False
    return True


def _validate_time(value: float) -> float:
    if not _representable_time(value):
        raise serializers.ValidationError("Time is out of range.")
    return value


# =============================================================================
# Request Serializers
# =============================================================================


class TokenSerializer(serializers.Serializer):
    """Shared secret carried in every write request."""

    token = StrictCharField(required=True)


class ContentAddSerializer(serializers.Serializer):
    """
    Fields of the "json" document sent to POST /add/.

    Fields are validated in declaration order; the view reports the first
    failing one.
    """

    data = serializers.JSONField(
        required=True,
        help_text="Arbitrary JSON object stored with the content",
    )
    name = StrictCharField(required=True, help_text="Display name")
    tags = serializers.ListField(
        child=StrictCharField(allow_blank=False),
        required=True,
        allow_empty=True,
        help_text="Non-empty tags (duplicates are dropped, ',' is not allowed)",
    )
    time = StrictNumberField(
        required=True,
        help_text="Timestamp in milliseconds since the Unix epoch",
    )

    def validate_data(self, value: Any) -> Any:
        return _validate_document(value)

    def validate_tags(self, value: list[str]) -> list[str]:
        return _validate_tag_list(value)

    def validate_time(self, value: float) -> float:
        return _validate_time(value)


class ContentUpdateSerializer(serializers.Serializer):
    """Fields of the "json" document sent to POST /update/; all but uuid optional."""

    data = serializers.JSONField(required=False)
    name = StrictCharField(required=False)
    tags = serializers.ListField(
        child=StrictCharField(allow_blank=False),
        required=False,
        allow_empty=True,
    )
    time = StrictNumberField(required=False)
    uuid = StrictCharField(required=True, allow_blank=False)

    def validate_data(self, value: Any) -> Any:
        return _validate_document(value)

    def validate_tags(self, value: list[str]) -> list[str]:
        return _validate_tag_list(value)

    def validate_time(self, value: float) -> float:
        return _validate_time(value)


class ContentRemoveSerializer(serializers.Serializer):
    """Fields of the "json" document sent to POST /remove/."""

    uuid = StrictCharField(required=True, allow_blank=False)


class ContentWriteFormSerializer(serializers.Serializer):
    """Multipart form of add/update/remove; used for the OpenAPI schema."""

    json = serializers.CharField(
        required=False,
        help_text="JSON document with token and content fields",
    )
    file = serializers.FileField(
        required=False,
        help_text="Media file (required for add, optional for update)",
    )


# =============================================================================
# Query String Serializers
# =============================================================================


def _lenient_number(value: str | None) -> float | None:
    """Parse a non-negative number; anything else is treated as absent."""
    if value is None or value.strip() == "":
        return None
    try:
        number = float(value)
    except ValueError:
        return None
    if math.isnan(number) or number < 0:
        return None
    return number


class ContentListQuerySerializer(serializers.Serializer):
    """
    Query parameters of GET /list/.

    count: Page size (default 25); 0 or Infinity returns everything
    page: Zero-based page index (default 0)
    query: "true" to return ids only
    """

    count = serializers.CharField(required=False, allow_blank=True)
    page = serializers.CharField(required=False, allow_blank=True)
    query = serializers.CharField(required=False, allow_blank=True)

    def validate_count(self, value: str) -> float | None:
        return _lenient_number(value)

    def validate_page(self, value: str) -> float | None:
        number = _lenient_number(value)
        if number is None or not math.isfinite(number):
            return None
        return number

    def validate_query(self, value: str) -> bool:
        return value == "true"

    def paging(self) -> tuple[float, int, bool]:
        """Return (count, page, ids_only) with defaults applied."""
        params = self.validated_data
        count = params.get("count")
        page = params.get("page")
        return (
            DEFAULT_COUNT if count is None else count,
            DEFAULT_PAGE if page is None else int(page),
            bool(params.get("query", False)),
        )


class ContentSearchQuerySerializer(ContentListQuerySerializer):
    """
    Query parameters of GET /search/ (plus those of /list/).

    begin/end are epoch milliseconds, minimum/maximum are bytes, tags is
    comma-separated. Unusable numbers and unknown sort/order values fall
    back to their defaults.
    """

    begin = serializers.CharField(required=False, allow_blank=True)
    end = serializers.CharField(required=False, allow_blank=True)
    minimum = serializers.CharField(required=False, allow_blank=True)
    maximum = serializers.CharField(required=False, allow_blank=True)
    name = serializers.CharField(required=False, allow_blank=True, trim_whitespace=False)
    extension = serializers.CharField(
        required=False, allow_blank=True, trim_whitespace=False
    )
    mime = serializers.CharField(required=False, allow_blank=True, trim_whitespace=False)
    tags = serializers.CharField(required=False, allow_blank=True, trim_whitespace=False)
    uuid = serializers.CharField(required=False, allow_blank=True, trim_whitespace=False)
    loose = serializers.CharField(required=False, allow_blank=True)
    sort = serializers.CharField(required=False, allow_blank=True)
    order = serializers.CharField(required=False, allow_blank=True)

    def validate_begin(self, value: str) -> float | None:
        return self._instant(value)

    def validate_end(self, value: str) -> float | None:
        return self._instant(value)

    def validate_minimum(self, value: str) -> float | None:
        return self._finite(value)

    def validate_maximum(self, value: str) -> float | None:
        return self._finite(value)

    def validate_tags(self, value: str) -> list[str]:
        return [tag for tag in value.split(TAG_DELIMITER) if tag]

    def validate_loose(self, value: str) -> bool:
        return value == "true"

    def validate_sort(self, value: str) -> SortKey:
        try:
            return SortKey(value)
        except ValueError:
            return SortKey.TIME

    def validate_order(self, value: str) -> SortOrder:
        try:
            return SortOrder(value)
        except ValueError:
            return SortOrder.DESCENDING

    @staticmethod
    def _finite(value: str) -> float | None:
        number = _lenient_number(value)
        if number is None or not math.isfinite(number):
            return None
        return number

    @classmethod
    def _instant(cls, value: str) -> float | None:
        number = cls._finite(value)
        if number is None or not _representable_time(number):
            return None
        return number


# =============================================================================
# Response Serializers
# =============================================================================


class SummarySerializer(serializers.Serializer):
    """Client-facing metadata of a content."""

    data = serializers.JSONField(read_only=True)
    extension = serializers.CharField(read_only=True)
    mime = serializers.CharField(read_only=True)
    name = serializers.CharField(read_only=True)
    size = serializers.IntegerField(read_only=True)
    tags = serializers.ListField(child=serializers.CharField(), read_only=True)
    time = serializers.IntegerField(
        read_only=True, help_text="Milliseconds since the Unix epoch"
    )
    uuid = serializers.CharField(read_only=True)


class DetailsSerializer(serializers.Serializer):
    """Store limits and usage returned by GET /details/."""

    fileLimit = serializers.IntegerField(read_only=True)
    protected = serializers.BooleanField(read_only=True)
    storeLength = serializers.IntegerField(read_only=True)
    storeLimit = serializers.IntegerField(read_only=True)
    storeSize = serializers.IntegerField(read_only=True)
