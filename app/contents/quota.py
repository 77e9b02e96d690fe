"""
Store-wide quota accounting.

Two limits apply to every write of a primary blob:

- file limit: the blob itself may not exceed it
- store limit: the sum of all primary blobs after the write may not exceed it

The current total is never cached; every check re-scans the blob directory.
Admission and the write that follows are made atomic within this process by
reserve(), which holds the admitted size as pending until the write lands.
"""

from __future__ import annotations

import logging
import threading
from contextlib import contextmanager
from typing import TYPE_CHECKING

from contents.exceptions import LargeSource

if TYPE_CHECKING:
    from collections.abc import Generator

    from contents.storage import BlobStore

logger = logging.getLogger(__name__)


class QuotaGuard:
    """
    Validates prospective writes against the per-file and store-wide limits.

    Example:
        quota = QuotaGuard(blobs, file_limit=100 * 1024**2, store_limit=10 * 1024**3)

        with quota.reserve(len(data)):
            blobs.write(uuid, data)

    Note:
        Reservations are tracked per QuotaGuard instance, so every writer in a
        process has to share one instance (see contents.services.get_content_store).
        Separate processes writing to the same directory can still overshoot.
    """

    def __init__(self, blobs: BlobStore, file_limit: int, store_limit: int):
        self.blobs = blobs
        self.file_limit = file_limit
        self.store_limit = store_limit
        self._lock = threading.Lock()
        self._pending = 0

    def current_total(self) -> int:
        """Aggregate size of every stored primary blob."""
        return self.blobs.total_size()

    @property
    def pending(self) -> int:
        """Bytes admitted by open reservations but not necessarily written yet."""
        return self._pending

    def admit(self, candidate_size: int, replacing_size: int = 0) -> bool:
        """
        Check whether a blob of candidate_size may be written.

        Args:
            candidate_size: Size of the blob about to be written
            replacing_size: Size of the blob it overwrites (0 for a new blob)
        """
        if candidate_size > self.file_limit:
            return False

        projected = (
            self.current_total() + self._pending - replacing_size + candidate_size
        )
        return projected <= self.store_limit

    @contextmanager
    def reserve(
        self, candidate_size: int, replacing_size: int = 0
    ) -> Generator[None, None, None]:
        """
        Admit a write and hold its size as pending until the block exits.

        While the blob is being written its bytes may be counted twice (by the
        directory scan and as pending). That only ever refuses more, never less.

        Raises:
            LargeSource: If the write would break either limit.
        """
        with self._lock:
            if not self.admit(candidate_size, replacing_size):
                logger.warning(
                    "Quota refused write",
                    extra={
                        "candidate_size": candidate_size,
                        "replacing_size": replacing_size,
                        "file_limit": self.file_limit,
                        "store_limit": self.store_limit,
                        "pending": self._pending,
                    },
                )
                raise LargeSource(
                    details={
                        "size": candidate_size,
                        "file_limit": self.file_limit,
                        "store_limit": self.store_limit,
                    }
                )
            self._pending += candidate_size

        try:
            yield
        finally:
            with self._lock:
                self._pending -= candidate_size
