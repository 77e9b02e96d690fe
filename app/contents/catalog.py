"""
Catalog access and the search query builder.

The catalog is the Contents table (contents.models.CatalogEntry). Search
criteria are turned into Predicate triples and compiled to ORM Q objects, so
caller values only ever reach the database as bound parameters.

Ordering is total: every sort key is followed by tie-breakers ending in the
unique content id, so paging through a fixed data set never repeats or
skips a row.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from django.db.models import F, Q, Value
from django.db.models.functions import Concat, StrIndex

from contents.models import CatalogEntry
from contents.types import TAG_DELIMITER, Filter, SortKey, SortOrder, to_epoch_ms

if TYPE_CHECKING:
    from django.db.models import QuerySet

logger = logging.getLogger(__name__)

# =============================================================================
# Constants
# =============================================================================

DEFAULT_COUNT = 25
DEFAULT_PAGE = 0

# Largest LIMIT/OFFSET the database accepts (signed 64-bit)
MAX_SQL_INTEGER = 2**63 - 1

# Sort key -> ordering columns, most significant first
ORDERINGS: dict[SortKey, tuple[str, ...]] = {
    SortKey.NAME: ("name", "time", "size", "uuid"),
    SortKey.SIZE: ("size", "time", "name", "uuid"),
    SortKey.TIME: ("time", "name", "size", "uuid"),
    SortKey.UUID: ("uuid",),
}

OPERATORS = ("between", "gte", "lte", "contains", "has_tag", "exact")


# =============================================================================
# Predicates
# =============================================================================


@dataclass(frozen=True)
class Predicate:
    """
    One search criterion.

    Attributes:
        column: Model field name
        operator: One of OPERATORS
        value: Bound value; a (low, high) tuple for "between"
    """

    column: str
    operator: str
    value: Any


def build_predicates(criteria: Filter) -> list[Predicate]:
    """Derive one predicate per present criterion, in a fixed order."""
    predicates: list[Predicate] = []

    begin = to_epoch_ms(criteria.begin) if criteria.begin is not None else None
    end = to_epoch_ms(criteria.end) if criteria.end is not None else None
    predicates.extend(_range("time", begin, end))
    predicates.extend(_range("size", criteria.minimum, criteria.maximum))

    for column in ("name", "extension", "mime"):
        value = getattr(criteria, column)
        if value is not None:
            predicates.append(Predicate(column, "contains", value))

    for tag in dict.fromkeys(criteria.tags):
        predicates.append(Predicate("tags", "has_tag", tag))

    if criteria.uuid is not None:
        predicates.append(Predicate("uuid", "exact", criteria.uuid))

    return predicates


def _range(column: str, low, high) -> list[Predicate]:
    if low is not None and high is not None:
        return [Predicate(column, "between", (low, high))]
    if low is not None:
        return [Predicate(column, "gte", low)]
    if high is not None:
        return [Predicate(column, "lte", high)]
    return []


def compile_predicates(
    predicates: list[Predicate], loose: bool
) -> tuple[dict[str, Any], Q]:
    """
    Compile predicates to queryset aliases and a single Q object.

    Substring and tag tests are position lookups (INSTR / STRPOS) rather than
    LIKE, so they are case-sensitive and treat %, _ and backslash literally.
    Their expressions are returned as aliases for the queryset to declare.

    Returns:
        (aliases, condition); an empty predicate list matches everything.
    """
    aliases: dict[str, Any] = {}
    condition = Q()

    for index, predicate in enumerate(predicates):
        column, operator, value = predicate.column, predicate.operator, predicate.value

        if operator == "between":
            low, high = value
            q = Q(**{f"{column}__gte": low, f"{column}__lte": high})
        elif operator == "gte":
            q = Q(**{f"{column}__gte": value})
        elif operator == "lte":
            q = Q(**{f"{column}__lte": value})
        elif operator == "exact":
            q = Q(**{column: value})
        elif operator == "contains":
            alias = f"match_{index}"
            aliases[alias] = StrIndex(F(column), Value(value))
            q = Q(**{f"{alias}__gt": 0})
        elif operator == "has_tag" and not value:
            # No entry carries an empty tag
            q = Q(pk__in=[])
        elif operator == "has_tag":
            alias = f"match_{index}"
            aliases[alias] = StrIndex(
                Concat(Value(TAG_DELIMITER), F(column), Value(TAG_DELIMITER)),
                Value(f"{TAG_DELIMITER}{value}{TAG_DELIMITER}"),
            )
            q = Q(**{f"{alias}__gt": 0})
        else:
            raise ValueError(f"Unknown operator: {operator!r}")

        if index == 0:
            condition = q
        elif loose:
            condition |= q
        else:
            condition &= q

    return aliases, condition


def ordering(sort: SortKey, order: SortOrder) -> list:
    columns = ORDERINGS[SortKey(sort)]
    if SortOrder(order) == SortOrder.ASCENDING:
        return [F(column).asc() for column in columns]
    return [F(column).desc() for column in columns]


def paginate(queryset: QuerySet, count: float | None, page: int | None) -> QuerySet:
    """
    Slice one page out of an ordered queryset.

    A count that is missing, non-positive, infinite or too large for an SQL
    integer returns every row. A fractional count is rounded up, so 0.5 asks
    for one row. A page that starts past the SQL integer range is empty.
    """
    if count is None or not math.isfinite(count) or count <= 0:
        return queryset
    if count > MAX_SQL_INTEGER:
        return queryset

    count = math.ceil(count)
    offset = count * max(int(page or 0), 0)
    if offset + count > MAX_SQL_INTEGER:
        return queryset.none()
    return queryset[offset : offset + count]


# =============================================================================
# Catalog
# =============================================================================


class Catalog:
    """
    Row-level access to the Contents table on one database alias.

    Example:
        catalog = Catalog()
        row = catalog.select_one(uuid)
        catalog.update_columns(uuid, {"name": "cat"})
    """

    def __init__(self, using: str = "default"):
        self.using = using

    @property
    def objects(self) -> QuerySet:
        return CatalogEntry.objects.using(self.using)

    def insert(self, row: CatalogEntry) -> CatalogEntry:
        row.save(using=self.using, force_insert=True)
        return row

    def select_one(self, uuid: str) -> CatalogEntry | None:
        return self.objects.filter(uuid=uuid).first()

    def exists(self, uuid: str) -> bool:
        return self.objects.filter(uuid=uuid).exists()

    def update_columns(self, uuid: str, columns: dict[str, Any]) -> int:
        """Apply all column changes in a single UPDATE. Returns rows matched."""
        if not columns:
            return 0
        return self.objects.filter(uuid=uuid).update(**columns)

    def delete(self, uuid: str) -> int:
        deleted, _ = self.objects.filter(uuid=uuid).delete()
        return deleted

    def count(self) -> int:
        return self.objects.count()

    def all_ids(self) -> set[str]:
        return set(self.objects.values_list("uuid", flat=True))

    def search(
        self,
        criteria: Filter,
        count: float | None = DEFAULT_COUNT,
        page: int | None = DEFAULT_PAGE,
    ) -> list[str]:
        """
        Return the ids of matching contents, ordered and paginated.

        Args:
            criteria: Filter to apply
            count: Page size; None, 0 or infinity for all rows
            page: Zero-based page index
        """
        predicates = build_predicates(criteria)
        aliases, condition = compile_predicates(predicates, criteria.loose)

        queryset = self.objects
        if aliases:
            queryset = queryset.alias(**aliases)
        queryset = queryset.filter(condition).order_by(
            *ordering(criteria.sort, criteria.order)
        )

        logger.debug(
            "Searching catalog",
            extra={
                "predicates": len(predicates),
                "loose": criteria.loose,
                "sort": SortKey(criteria.sort).value,
                "order": SortOrder(criteria.order).value,
                "count": count,
                "page": page,
            },
        )

        return list(paginate(queryset, count, page).values_list("uuid", flat=True))

    def list(
        self, count: float | None = DEFAULT_COUNT, page: int | None = DEFAULT_PAGE
    ) -> list[str]:
        """Return ids of all contents, newest time first."""
        return self.search(Filter(), count, page)
