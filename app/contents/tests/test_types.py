"""
Tests for content value types and conversion helpers.
"""

from datetime import datetime, timezone

import pytest

from contents.types import (
    PartialSource,
    from_epoch_ms,
    join_tags,
    normalize_tags,
    split_tags,
    to_epoch_ms,
)


class TestEpochMilliseconds:
    """Tests for to_epoch_ms / from_epoch_ms."""

    def test_converts_aware_datetime(self):
        value = datetime(2024, 1, 2, 3, 4, 5, 678000, tzinfo=timezone.utc)

        assert to_epoch_ms(value) == 1704164645678
        assert from_epoch_ms(1704164645678) == value

    def test_naive_datetime_is_utc(self):
        naive = datetime(2024, 1, 1)
        aware = datetime(2024, 1, 1, tzinfo=timezone.utc)

        assert to_epoch_ms(naive) == to_epoch_ms(aware)

    def test_from_epoch_ms_is_timezone_aware(self):
        assert from_epoch_ms(0).tzinfo is not None
        assert from_epoch_ms(0) == datetime(1970, 1, 1, tzinfo=timezone.utc)


class TestTags:
    """Tests for tag normalization and storage encoding."""

    def test_removes_duplicates_keeping_first_occurrence(self):
        assert normalize_tags(["b", "a", "b", "c", "a"]) == ["b", "a", "c"]

    def test_rejects_delimiter_inside_tag(self):
        with pytest.raises(ValueError):
            normalize_tags(["fine", "not,fine"])

    def test_rejects_empty_tag(self):
        # "" would be stored as an empty column and read back as no tags
        with pytest.raises(ValueError):
            normalize_tags(["pet", ""])
        with pytest.raises(ValueError):
            join_tags([""])

    def test_join_and_split(self):
        assert join_tags(["pet", "cute", "pet"]) == "pet,cute"
        assert split_tags("pet,cute") == ["pet", "cute"]

    def test_empty_tags(self):
        assert join_tags([]) == ""
        assert split_tags("") == []


class TestPartialSource:
    """Tests for PartialSource presence tracking."""

    def test_default_is_empty(self):
        assert PartialSource().is_empty()

    def test_any_field_makes_it_non_empty(self):
        assert not PartialSource(name="cat").is_empty()
        assert not PartialSource(tags=[]).is_empty()
        assert not PartialSource(blob=b"x").is_empty()

    def test_data_sets_presence_flag(self):
        assert PartialSource(data={"a": 1}).has_data

    def test_explicit_null_data_is_present(self):
        partial = PartialSource(has_data=True)

        assert partial.data is None
        assert not partial.is_empty()
