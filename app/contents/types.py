"""
Value types passed between the HTTP boundary and the content store.

All of these are plain dataclasses; none of them touch the database. Times are
timezone-aware UTC datetimes in Python and integer epoch milliseconds on disk
and on the wire.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Any

# Tags are stored joined by this character, so it may not appear inside a tag
TAG_DELIMITER = ","

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


class SortKey(str, Enum):
    NAME = "name"
    SIZE = "size"
    TIME = "time"
    UUID = "uuid"


class SortOrder(str, Enum):
    ASCENDING = "ascending"
    DESCENDING = "descending"


# =============================================================================
# Conversion Helpers
# =============================================================================


def to_epoch_ms(value: datetime) -> int:
    """Convert a datetime to integer milliseconds since the Unix epoch.

    Naive datetimes are taken to be UTC.
    """
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    delta = value - EPOCH
    return (delta.days * 86400 + delta.seconds) * 1000 + delta.microseconds // 1000


def from_epoch_ms(value: int) -> datetime:
    """Convert epoch milliseconds to an aware UTC datetime."""
    return EPOCH + timedelta(milliseconds=value)


def normalize_tags(tags) -> list[str]:
    """
    Remove duplicate tags, keeping the first occurrence of each.

    Raises:
        ValueError: If a tag is empty or contains the storage delimiter.
    """
    unique = list(dict.fromkeys(tags))
    for tag in unique:
        if not tag:
            raise ValueError("Tags may not be empty")
        if TAG_DELIMITER in tag:
            raise ValueError(f"Tag {tag!r} contains {TAG_DELIMITER!r}")
    return unique


def join_tags(tags) -> str:
    return TAG_DELIMITER.join(normalize_tags(tags))


def split_tags(value: str) -> list[str]:
    # An empty column is an empty tag set, not [""]
    if not value:
        return []
    return value.split(TAG_DELIMITER)


# =============================================================================
# Value Types
# =============================================================================


@dataclass
class Source:
    """Everything needed to create a content."""

    blob: bytes
    data: Any
    name: str
    tags: list[str]
    time: datetime


@dataclass
class PartialSource:
    """Fields to change on an existing content; None means leave unchanged."""

    blob: bytes | None = None
    data: Any = None
    name: str | None = None
    tags: list[str] | None = None
    time: datetime | None = None

    # JSON null is a legitimate document, so "data absent" needs its own flag
    has_data: bool = False

    def __post_init__(self) -> None:
        if self.data is not None:
            self.has_data = True

    def is_empty(self) -> bool:
        return (
            self.blob is None
            and not self.has_data
            and self.name is None
            and self.tags is None
            and self.time is None
        )


@dataclass
class Filter:
    """
    Search criteria. Every criterion is optional.

    Attributes:
        begin/end: Inclusive time range (either side may be open)
        minimum/maximum: Inclusive size range in bytes
        name/extension/mime: Case-sensitive substring matches
        tags: Contents carrying the tag (each requested tag is one criterion)
        uuid: Exact content id
        loose: Join criteria with OR instead of AND
        sort: Primary ordering key
        order: Direction applied to every ordering key
    """

    begin: datetime | None = None
    end: datetime | None = None
    minimum: int | None = None
    maximum: int | None = None
    name: str | None = None
    extension: str | None = None
    mime: str | None = None
    tags: list[str] = field(default_factory=list)
    uuid: str | None = None
    loose: bool = False
    sort: SortKey = SortKey.TIME
    order: SortOrder = SortOrder.DESCENDING


@dataclass
class Content:
    """A stored content: its catalog row plus the primary blob bytes."""

    uuid: str
    blob: bytes
    data: Any
    extension: str
    mime: str
    name: str
    size: int
    tags: list[str]
    time: datetime


@dataclass
class Summary:
    """Content metadata as returned to clients (no blob bytes)."""

    data: Any
    extension: str
    mime: str
    name: str
    size: int
    tags: list[str]
    time: int
    uuid: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "data": self.data,
            "extension": self.extension,
            "mime": self.mime,
            "name": self.name,
            "size": self.size,
            "tags": list(self.tags),
            "time": self.time,
            "uuid": self.uuid,
        }


@dataclass
class Status:
    """Catalog row count and aggregate stored-blob bytes."""

    length: int
    size: int
