"""
Tests for the catalog and its search query builder.

Tests cover:
- Predicate construction from a Filter
- Range, substring, tag and id criteria
- Strict (AND) vs loose (OR) joining
- Total ordering for every sort key and direction
- Pagination
"""

from datetime import datetime, timezone

import pytest

from contents.catalog import Catalog, Predicate, build_predicates, compile_predicates
from contents.models import CatalogEntry
from contents.tests.factories import CatalogEntryFactory
from contents.types import Filter, SortKey, SortOrder, from_epoch_ms


@pytest.fixture
def catalog():
    return Catalog()


class TestBuildPredicates:
    """Tests for Filter to Predicate conversion."""

    def test_empty_filter_has_no_predicates(self):
        assert build_predicates(Filter()) == []

    def test_two_sided_ranges_use_between(self):
        criteria = Filter(
            begin=datetime(2024, 1, 1, tzinfo=timezone.utc),
            end=datetime(2024, 1, 2, tzinfo=timezone.utc),
            minimum=10,
            maximum=20,
        )

        assert build_predicates(criteria) == [
            Predicate("time", "between", (1704067200000, 1704153600000)),
            Predicate("size", "between", (10, 20)),
        ]

    def test_one_sided_ranges(self):
        assert build_predicates(Filter(minimum=5)) == [Predicate("size", "gte", 5)]
        assert build_predicates(Filter(maximum=5)) == [Predicate("size", "lte", 5)]

    def test_one_predicate_per_distinct_tag(self):
        predicates = build_predicates(Filter(tags=["a", "b", "a"]))

        assert predicates == [
            Predicate("tags", "has_tag", "a"),
            Predicate("tags", "has_tag", "b"),
        ]

    def test_unknown_operator_is_rejected(self):
        with pytest.raises(ValueError):
            compile_predicates([Predicate("name", "like", "x")], loose=False)


@pytest.mark.django_db
class TestRowOperations:
    """Tests for insert/select/update/delete."""

    def test_insert_and_select(self, catalog):
        row = CatalogEntry(
            uuid="11111111-1111-1111-1111-111111111111",
            data='{"a": 1}',
            extension="png",
            mime="image/png",
            name="cat",
            size=3,
            tags="pet",
            time=1,
        )
        catalog.insert(row)

        selected = catalog.select_one(row.uuid)
        assert selected.name == "cat"
        assert catalog.count() == 1
        assert catalog.exists(row.uuid)

    def test_select_missing_returns_none(self, catalog):
        assert catalog.select_one("missing") is None

    def test_update_columns_in_one_call(self, catalog):
        entry = CatalogEntryFactory()

        matched = catalog.update_columns(entry.uuid, {"name": "renamed", "size": 9})

        entry.refresh_from_db()
        assert matched == 1
        assert (entry.name, entry.size) == ("renamed", 9)

    def test_update_without_columns_is_noop(self, catalog):
        entry = CatalogEntryFactory()

        assert catalog.update_columns(entry.uuid, {}) == 0

    def test_delete(self, catalog):
        entry = CatalogEntryFactory()

        assert catalog.delete(entry.uuid) == 1
        assert catalog.count() == 0

    def test_uses_fixed_table_layout(self):
        assert CatalogEntry._meta.db_table == "Contents"
        columns = [field.column for field in CatalogEntry._meta.fields]
        assert columns == [
            "ContentId",
            "Data",
            "Extension",
            "Mime",
            "Name",
            "Size",
            "Tags",
            "Time",
        ]


@pytest.mark.django_db
class TestSearchCriteria:
    """Tests for individual search criteria."""

    def test_no_criteria_matches_everything(self, catalog):
        entries = CatalogEntryFactory.create_batch(3)

        result = catalog.search(Filter(), count=None)

        assert sorted(result) == sorted(e.uuid for e in entries)

    def test_time_range_is_inclusive(self, catalog):
        early = CatalogEntryFactory(time=1000)
        middle = CatalogEntryFactory(time=2000)
        CatalogEntryFactory(time=3000)

        result = catalog.search(
            Filter(begin=from_epoch_ms(1000), end=from_epoch_ms(2000))
        )

        assert set(result) == {early.uuid, middle.uuid}

    def test_size_minimum(self, catalog):
        CatalogEntryFactory(size=10)
        large = CatalogEntryFactory(size=500)

        assert catalog.search(Filter(minimum=100)) == [large.uuid]

    def test_name_substring_is_case_sensitive(self, catalog):
        cat = CatalogEntryFactory(name="my cat photo")
        CatalogEntryFactory(name="My CAT photo")

        assert catalog.search(Filter(name="cat")) == [cat.uuid]

    def test_wildcard_characters_match_literally(self, catalog):
        literal = CatalogEntryFactory(name="100%_done")
        CatalogEntryFactory(name="100 percent done")

        assert catalog.search(Filter(name="%_")) == [literal.uuid]

    def test_mime_substring(self, catalog):
        video = CatalogEntryFactory(extension="mp4", mime="video/mp4")
        CatalogEntryFactory()

        assert catalog.search(Filter(mime="video/")) == [video.uuid]

    def test_tag_membership_matches_whole_tags(self, catalog):
        tagged = CatalogEntryFactory(tags="cat,pet")
        CatalogEntryFactory(tags="catalog")
        CatalogEntryFactory(tags="")

        assert catalog.search(Filter(tags=["cat"])) == [tagged.uuid]

    def test_empty_tag_matches_nothing(self, catalog):
        CatalogEntryFactory(tags="")
        CatalogEntryFactory(tags="pet")

        assert catalog.search(Filter(tags=[""])) == []
        assert catalog.search(Filter(tags=["", "pet"], loose=False)) == []

    def test_uuid_is_exact(self, catalog):
        entry = CatalogEntryFactory()
        CatalogEntryFactory()

        assert catalog.search(Filter(uuid=entry.uuid)) == [entry.uuid]
        assert catalog.search(Filter(uuid=entry.uuid[:8])) == []


@pytest.mark.django_db
class TestLooseAndStrict:
    """Tests for AND vs OR joining of criteria."""

    @pytest.fixture
    def tagged(self):
        return {
            "a": CatalogEntryFactory(tags="a"),
            "b": CatalogEntryFactory(tags="b"),
            "ab": CatalogEntryFactory(tags="a,b"),
            "none": CatalogEntryFactory(tags=""),
        }

    def test_strict_requires_every_tag(self, catalog, tagged):
        result = catalog.search(Filter(tags=["a", "b"], loose=False))

        assert result == [tagged["ab"].uuid]

    def test_loose_accepts_any_tag(self, catalog, tagged):
        result = catalog.search(Filter(tags=["a", "b"], loose=True))

        assert set(result) == {tagged["a"].uuid, tagged["b"].uuid, tagged["ab"].uuid}


@pytest.mark.django_db
class TestOrdering:
    """Tests for deterministic ordering."""

    def test_default_is_time_descending(self, catalog):
        older = CatalogEntryFactory(time=1000)
        newer = CatalogEntryFactory(time=2000)

        assert catalog.search(Filter()) == [newer.uuid, older.uuid]

    def test_name_ascending_breaks_ties_by_time_size_uuid(self, catalog):
        b = CatalogEntryFactory(name="b", time=1, size=1)
        a_late = CatalogEntryFactory(name="a", time=2, size=1)
        a_early_big = CatalogEntryFactory(name="a", time=1, size=2)
        a_early_small = CatalogEntryFactory(name="a", time=1, size=1)

        result = catalog.search(
            Filter(sort=SortKey.NAME, order=SortOrder.ASCENDING), count=None
        )

        assert result == [
            a_early_small.uuid,
            a_early_big.uuid,
            a_late.uuid,
            b.uuid,
        ]

    def test_identical_keys_fall_back_to_uuid(self, catalog):
        entries = [
            CatalogEntryFactory(name="same", time=5, size=5) for _ in range(4)
        ]

        ascending = catalog.search(
            Filter(sort=SortKey.NAME, order=SortOrder.ASCENDING)
        )
        descending = catalog.search(
            Filter(sort=SortKey.NAME, order=SortOrder.DESCENDING)
        )

        assert ascending == sorted(e.uuid for e in entries)
        assert descending == list(reversed(ascending))

    def test_size_descending(self, catalog):
        small = CatalogEntryFactory(size=1)
        large = CatalogEntryFactory(size=100)

        assert catalog.search(Filter(sort=SortKey.SIZE)) == [large.uuid, small.uuid]

    def test_uuid_ascending(self, catalog):
        entries = CatalogEntryFactory.create_batch(3)

        result = catalog.search(Filter(sort=SortKey.UUID, order=SortOrder.ASCENDING))

        assert result == sorted(e.uuid for e in entries)


@pytest.mark.django_db
class TestPagination:
    """Tests for count/page slicing."""

    @pytest.fixture
    def entries(self):
        # Newest first under the default ordering
        return [CatalogEntryFactory(time=t) for t in range(10, 0, -1)]

    def test_pages_partition_the_result(self, catalog, entries):
        pages = [catalog.search(Filter(), count=3, page=p) for p in range(4)]

        assert pages[0] == [e.uuid for e in entries[0:3]]
        assert pages[3] == [entries[9].uuid]
        flattened = [uuid for page in pages for uuid in page]
        assert flattened == [e.uuid for e in entries]

    def test_page_past_the_end_is_empty(self, catalog, entries):
        assert catalog.search(Filter(), count=5, page=2) == []

    @pytest.mark.parametrize("count", [None, 0, float("inf")])
    def test_non_positive_or_infinite_count_returns_all(self, catalog, entries, count):
        assert len(catalog.search(Filter(), count=count)) == 10

    def test_default_page_size_is_25(self, catalog):
        CatalogEntryFactory.create_batch(30)

        assert len(catalog.list()) == 25
        assert len(catalog.list(page=1)) == 5

    @pytest.mark.parametrize("count", [1e30, 2**63, float(2**63)])
    def test_count_beyond_sql_range_returns_all(self, catalog, entries, count):
        assert len(catalog.search(Filter(), count=count)) == 10

    @pytest.mark.parametrize("page", [int(1e30), 2**63 - 1])
    def test_page_beyond_sql_range_is_empty(self, catalog, entries, page):
        assert catalog.search(Filter(), count=3, page=page) == []

    def test_fractional_count_rounds_up(self, catalog, entries):
        assert catalog.search(Filter(), count=0.5) == [entries[0].uuid]
        assert catalog.search(Filter(), count=2.5, page=1) == [
            e.uuid for e in entries[3:6]
        ]
