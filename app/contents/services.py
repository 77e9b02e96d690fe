"""
Content store service.

ContentStore composes the catalog, the blob and preview directories, the
quota guard and the preview generator into the operations the API exposes:
add, update, remove, query, search, list, info and summarize.

A content exists in three places: a catalog row, a primary blob and a
preview. Writes touch them in a fixed order (blob, preview, row). When a
later step fails, the files written by earlier steps are removed (add) or
restored (update) before the error propagates. A compensation step that
itself fails is logged as an orphan and left to contents.tasks.reconcile_storage.

Usage:
    from contents.services import get_content_store

    store = get_content_store()
    content = store.add(Source(blob=data, data={}, name="cat", tags=[], time=now))
    store.remove(content.uuid)
"""

from __future__ import annotations

import functools
import json
import uuid as uuid_lib
from typing import TYPE_CHECKING

from django.conf import settings

from contents.catalog import DEFAULT_COUNT, DEFAULT_PAGE, Catalog
from contents.exceptions import MissingAsset, MissingContent, UnsupportedMime
from contents.models import CatalogEntry
from contents.previews import PreviewGenerator
from contents.quota import QuotaGuard
from contents.sniffer import SniffResult, sniff
from contents.storage import BlobStore
from contents.types import (
    Content,
    Filter,
    PartialSource,
    Source,
    Status,
    Summary,
    from_epoch_ms,
    join_tags,
    normalize_tags,
    split_tags,
    to_epoch_ms,
)
from core.services import BaseService

if TYPE_CHECKING:
    from collections.abc import Iterable


class ContentStore(BaseService):
    """
    Orchestrates every content operation.

    Collaborators are injected so tests can build isolated stores over
    temporary directories; the application uses get_content_store().

    Concurrency:
        - Quota admission and the blob write are serialized per process by
          QuotaGuard.reserve
        - Concurrent updates of the same content are not serialized; the
          last writer wins
    """

    def __init__(
        self,
        catalog: Catalog,
        blobs: BlobStore,
        previews: BlobStore,
        quota: QuotaGuard,
        preview_generator: PreviewGenerator,
    ):
        self.catalog = catalog
        self.blobs = blobs
        self.previews = previews
        self.quota = quota
        self.preview_generator = preview_generator
        self.using = catalog.using

    # =========================================================================
    # Writes
    # =========================================================================

    def add(self, source: Source) -> Content:
        """
        Store a new content.

        Raises:
            UnsupportedMime: If the bytes are not an image/video or cannot be previewed
            LargeSource: If the blob breaks the per-file or store-wide limit
            ValueError: If a tag is empty or contains ","
        """
        log = self.get_logger()
        tags = normalize_tags(source.tags)
        content_id = str(uuid_lib.uuid4())
        sniffed = sniff(source.blob)

        written: list[BlobStore] = []
        try:
            with self.quota.reserve(len(source.blob)):
                written.append(self.blobs)
                self.blobs.write(content_id, source.blob)

            preview = self.preview_generator.generate(
                self.blobs.path(content_id), source.blob, sniffed.mime
            )
            written.append(self.previews)
            self.previews.write(content_id, preview)

            row = CatalogEntry(
                uuid=content_id,
                data=json.dumps(source.data),
                extension=sniffed.extension,
                mime=sniffed.mime,
                name=source.name,
                size=len(source.blob),
                tags=join_tags(tags),
                time=to_epoch_ms(source.time),
            )
            with self.atomic():
                self.catalog.insert(row)
        except Exception:
            self._discard(content_id, written)
            raise

        log.info(
            "Added content",
            extra={
                "content_id": content_id,
                "mime": sniffed.mime,
                "size": len(source.blob),
            },
        )
        return self._build(row, source.blob, sniffed)

    def update(self, uuid: str, partial: PartialSource) -> Content:
        """
        Change any subset of a content's blob, data, name, tags and time.

        A replacement blob is re-sniffed, quota-checked against the space freed
        by the blob it replaces, and gets a new preview. All column changes are
        applied in one statement. An empty partial changes nothing.

        Raises:
            MissingContent: If no content has this id
            UnsupportedMime / LargeSource: For a rejected replacement blob
            ValueError: If a tag is empty or contains ","
        """
        log = self.get_logger()
        existing = self._select(uuid)

        if partial.is_empty():
            return self.query(uuid)

        columns: dict[str, object] = {}
        if partial.tags is not None:
            columns["tags"] = join_tags(partial.tags)

        backup: tuple[bytes | None, bytes | None] | None = None
        if partial.blob is not None:
            sniffed = sniff(partial.blob)
            backup = (
                self._read_if_exists(self.blobs, uuid),
                self._read_if_exists(self.previews, uuid),
            )

            try:
                with self.quota.reserve(
                    len(partial.blob), replacing_size=existing.size
                ):
                    self.blobs.write(uuid, partial.blob)

                preview = self.preview_generator.generate(
                    self.blobs.path(uuid), partial.blob, sniffed.mime
                )
                self.previews.write(uuid, preview)
            except Exception:
                self._restore(uuid, backup)
                raise

            columns.update(
                extension=sniffed.extension,
                mime=sniffed.mime,
                size=len(partial.blob),
            )

        if partial.has_data:
            columns["data"] = json.dumps(partial.data)
        if partial.name is not None:
            columns["name"] = partial.name
        if partial.time is not None:
            columns["time"] = to_epoch_ms(partial.time)

        try:
            with self.atomic():
                matched = self.catalog.update_columns(uuid, columns)
        except Exception:
            if backup is not None:
                self._restore(uuid, backup)
            raise

        if not matched:
            # Removed since _select; the files written above belong to nobody
            if backup is not None:
                self._discard(uuid, [self.blobs, self.previews])
            log.warning("Content vanished during update", extra={"content_id": uuid})
            raise MissingContent(details={"uuid": uuid})

        log.info(
            "Updated content",
            extra={"content_id": uuid, "columns": sorted(columns)},
        )
        return self.query(uuid)

    def remove(self, uuid: str) -> Content:
        """
        Delete a content's files and catalog row.

        Returns the content as it was before removal.

        Raises:
            MissingContent: If no content has this id (nothing is touched)
        """
        existing = self._select(uuid)
        blob = self._read_if_exists(self.blobs, uuid)
        snapshot = self._build(
            existing,
            blob if blob is not None else b"",
            SniffResult(extension=existing.extension, mime=existing.mime),
        )

        self.blobs.delete(uuid)
        self.previews.delete(uuid)
        with self.atomic():
            self.catalog.delete(uuid)

        self.get_logger().info(
            "Removed content",
            extra={"content_id": uuid, "size": existing.size},
        )
        return snapshot

    # =========================================================================
    # Reads
    # =========================================================================

    def query(self, uuid: str) -> Content:
        """
        Load a content with its blob bytes.

        Extension and MIME type are re-detected from the stored bytes.

        Raises:
            MissingContent: If no content has this id
            MissingAsset: If the row exists but its blob file does not
        """
        row = self._select(uuid)

        try:
            blob = self.blobs.read(uuid)
        except FileNotFoundError as e:
            self.get_logger().error(
                "Catalog row without blob",
                extra={"content_id": uuid, "path": str(self.blobs.path(uuid))},
            )
            raise MissingAsset(details={"uuid": uuid}) from e

        try:
            sniffed = sniff(blob)
        except UnsupportedMime:
            self.get_logger().warning(
                "Stored blob no longer sniffs, using catalog type",
                extra={"content_id": uuid, "mime": row.mime},
            )
            sniffed = SniffResult(extension=row.extension, mime=row.mime)

        return self._build(row, blob, sniffed)

    def read_preview(self, uuid: str) -> bytes:
        """
        Raises:
            MissingContent: If no content has this id
            MissingAsset: If the preview file is absent
        """
        if not self.catalog.exists(uuid):
            raise MissingContent(details={"uuid": uuid})
        try:
            return self.previews.read(uuid)
        except FileNotFoundError as e:
            raise MissingAsset(details={"uuid": uuid}) from e

    def search(
        self,
        criteria: Filter,
        count: float | None = DEFAULT_COUNT,
        page: int | None = DEFAULT_PAGE,
    ) -> list[str]:
        return self.catalog.search(criteria, count, page)

    def list(
        self, count: float | None = DEFAULT_COUNT, page: int | None = DEFAULT_PAGE
    ) -> list[str]:
        return self.catalog.list(count, page)

    def info(self) -> Status:
        return Status(length=self.catalog.count(), size=self.quota.current_total())

    def summarize(self, content: Content) -> Summary:
        """Project a content to its client-facing metadata."""
        return Summary(
            data=content.data,
            extension=content.extension,
            mime=content.mime,
            name=content.name,
            size=content.size,
            tags=list(content.tags),
            time=to_epoch_ms(content.time),
            uuid=content.uuid,
        )

    def summaries(self, uuids: Iterable[str]) -> list[Summary]:
        """
        Summaries for a list of ids, in the given order, from catalog rows only.

        Ids without a row (removed since they were listed) are skipped.
        """
        uuids = list(uuids)
        rows = self.catalog.objects.in_bulk(uuids)
        return [
            Summary(
                data=json.loads(rows[uuid].data),
                extension=rows[uuid].extension,
                mime=rows[uuid].mime,
                name=rows[uuid].name,
                size=rows[uuid].size,
                tags=split_tags(rows[uuid].tags),
                time=rows[uuid].time,
                uuid=uuid,
            )
            for uuid in uuids
            if uuid in rows
        ]

    # =========================================================================
    # Helpers
    # =========================================================================

    def _select(self, uuid: str) -> CatalogEntry:
        row = self.catalog.select_one(uuid)
        if row is None:
            raise MissingContent(details={"uuid": uuid})
        return row

    @staticmethod
    def _read_if_exists(store: BlobStore, uuid: str) -> bytes | None:
        try:
            return store.read(uuid)
        except FileNotFoundError:
            return None

    @staticmethod
    def _build(row: CatalogEntry, blob: bytes, sniffed: SniffResult) -> Content:
        return Content(
            uuid=row.uuid,
            blob=blob,
            data=json.loads(row.data),
            extension=sniffed.extension,
            mime=sniffed.mime,
            name=row.name,
            size=row.size,
            tags=split_tags(row.tags),
            time=from_epoch_ms(row.time),
        )

    def _discard(self, uuid: str, stores: list[BlobStore]) -> None:
        """Remove files written by a failed add."""
        for store in stores:
            try:
                store.delete(uuid)
            except OSError:
                self.get_logger().exception(
                    "Orphaned file left behind",
                    extra={"content_id": uuid, "path": str(store.path(uuid))},
                )

    def _restore(self, uuid: str, backup: tuple[bytes | None, bytes | None]) -> None:
        """Put back the blob and preview a failed update overwrote."""
        for store, data in zip((self.blobs, self.previews), backup):
            try:
                if data is None:
                    store.delete(uuid)
                else:
                    store.write(uuid, data)
            except OSError:
                self.get_logger().exception(
                    "Failed to restore file after update error",
                    extra={"content_id": uuid, "path": str(store.path(uuid))},
                )


@functools.lru_cache(maxsize=None)
def get_content_store() -> ContentStore:
    """
    Build the process-wide ContentStore from settings.

    One instance per process so that every request shares the same quota
    reservations. Tests that change storage settings call
    get_content_store.cache_clear().
    """
    blobs = BlobStore(settings.CONTENT_BLOBS_DIR)
    return ContentStore(
        catalog=Catalog(),
        blobs=blobs,
        previews=BlobStore(settings.CONTENT_PREVIEWS_DIR),
        quota=QuotaGuard(
            blobs,
            file_limit=settings.CONTENT_FILE_LIMIT,
            store_limit=settings.CONTENT_STORE_LIMIT,
        ),
        preview_generator=PreviewGenerator(
            ffmpeg_path=settings.FFMPEG_PATH,
            ffprobe_path=settings.FFPROBE_PATH,
            height=settings.PREVIEW_HEIGHT,
            timeout=settings.MEDIA_TOOL_TIMEOUT,
        ),
    )
