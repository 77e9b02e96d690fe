"""
Tests for contents Celery tasks.
"""

import os
import time

import pytest

from contents.services import get_content_store
from contents.tasks import reconcile_storage
from contents.tests.factories import CatalogEntryFactory

ORPHAN_ID = "0f6c1d2e-0000-4000-8000-000000000001"


def age(path, seconds: int) -> None:
    """Push a file's modification time into the past."""
    past = time.time() - seconds
    os.utime(path, (past, past))


@pytest.mark.django_db
class TestReconcileStorage:
    """Tests for the reconcile_storage task."""

    @pytest.fixture
    def store(self, api_settings):
        api_settings.CONTENT_ORPHAN_GRACE_MINUTES = 60
        return get_content_store()

    def test_removes_old_orphans(self, store):
        store.blobs.write(ORPHAN_ID, b"blob")
        store.previews.write(ORPHAN_ID, b"preview")
        age(store.blobs.path(ORPHAN_ID), 2 * 3600)
        age(store.previews.path(ORPHAN_ID), 2 * 3600)

        result = reconcile_storage()

        assert result["removed_blobs"] == 1
        assert result["removed_previews"] == 1
        assert result["errors"] == []
        assert not store.blobs.exists(ORPHAN_ID)
        assert not store.previews.exists(ORPHAN_ID)

    def test_keeps_recent_orphans(self, store):
        store.blobs.write(ORPHAN_ID, b"blob")

        result = reconcile_storage()

        assert result["removed_blobs"] == 0
        assert store.blobs.exists(ORPHAN_ID)

    def test_keeps_files_with_a_row(self, store):
        entry = CatalogEntryFactory()
        store.blobs.write(entry.uuid, b"blob")
        store.previews.write(entry.uuid, b"preview")
        age(store.blobs.path(entry.uuid), 2 * 3600)
        age(store.previews.path(entry.uuid), 2 * 3600)

        result = reconcile_storage()

        assert result["removed_blobs"] == 0
        assert result["removed_previews"] == 0
        assert store.blobs.exists(entry.uuid)

    def test_reports_rows_without_blob(self, store):
        with_blob = CatalogEntryFactory()
        store.blobs.write(with_blob.uuid, b"blob")
        without = sorted(e.uuid for e in CatalogEntryFactory.create_batch(2))

        result = reconcile_storage()

        assert result["missing_blobs"] == without
        # Rows are never deleted
        assert store.catalog.count() == 3

    def test_empty_store(self, store):
        assert reconcile_storage() == {
            "removed_blobs": 0,
            "removed_previews": 0,
            "missing_blobs": [],
            "errors": [],
        }
