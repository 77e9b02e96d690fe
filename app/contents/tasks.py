"""
Celery tasks for content storage maintenance.

Writes touch the blob directory, the preview directory and the catalog in
sequence. A crash between steps, or a failed compensation, can leave files
without a catalog row. reconcile_storage is the safety net that removes
them; it is scheduled through CELERY_BEAT_SCHEDULE.

Usage:
    from contents.tasks import reconcile_storage

    reconcile_storage.delay()
"""

from __future__ import annotations

import logging
from datetime import timedelta

from celery import shared_task
from django.conf import settings
from django.utils import timezone

from contents.services import get_content_store

logger = logging.getLogger(__name__)


@shared_task
def reconcile_storage() -> dict:
    """
    Remove orphaned blob and preview files and report rows without a blob.

    A file is orphaned when no catalog row has its id. Files modified within
    the last CONTENT_ORPHAN_GRACE_MINUTES are skipped because an add may
    still be in flight for them. Rows whose blob is missing are logged but
    never deleted.

    Returns:
        Dict with counts of removed files and missing blobs, and any errors.
    """
    store = get_content_store()
    grace = timedelta(minutes=settings.CONTENT_ORPHAN_GRACE_MINUTES)
    threshold = (timezone.now() - grace).timestamp()

    known_ids = store.catalog.all_ids()

    removed_blobs = 0
    removed_previews = 0
    errors: list[str] = []

    for kind, directory in (("blob", store.blobs), ("preview", store.previews)):
        for file_id in directory.ids():
            if file_id in known_ids:
                continue

            try:
                if directory.modified(file_id) > threshold:
                    # Too new, might belong to an add in progress
                    continue
                if directory.delete(file_id):
                    if kind == "blob":
                        removed_blobs += 1
                    else:
                        removed_previews += 1
                    logger.info(
                        "Removed orphaned file",
                        extra={
                            "event_type": "orphaned_file_cleanup",
                            "kind": kind,
                            "content_id": file_id,
                        },
                    )
            except OSError as e:
                errors.append(f"Failed to remove {kind} {file_id}: {e}")

    blob_ids = set(store.blobs.ids())
    missing_blobs = sorted(known_ids - blob_ids)
    for content_id in missing_blobs:
        logger.error(
            "Catalog row without blob",
            extra={"event_type": "missing_blob", "content_id": content_id},
        )

    logger.info(
        "Storage reconciliation complete",
        extra={
            "event_type": "storage_reconciliation_complete",
            "removed_blobs": removed_blobs,
            "removed_previews": removed_previews,
            "missing_blobs": len(missing_blobs),
            "error_count": len(errors),
        },
    )

    return {
        "removed_blobs": removed_blobs,
        "removed_previews": removed_previews,
        "missing_blobs": missing_blobs,
        "errors": errors,
    }
