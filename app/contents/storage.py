"""
Keyed binary storage on the local file system.

One file per content id, named by the id with no extension. The content
store uses two instances: one for primary blobs and one for previews.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path

logger = logging.getLogger(__name__)


class BlobStore:
    """
    Flat directory of blobs addressed by id.

    Ids must be plain file names. Anything containing a path separator or
    starting with a dot is refused with ValueError so callers cannot reach
    outside the managed directory.

    Example:
        blobs = BlobStore("/srv/content/blobs")
        blobs.write(uuid, data)
        assert blobs.read(uuid) == data
    """

    def __init__(self, directory: str | os.PathLike):
        self.directory = Path(directory)
        self.directory.mkdir(parents=True, exist_ok=True)

    def __repr__(self) -> str:
        return f"BlobStore({str(self.directory)!r})"

    def path(self, blob_id: str) -> Path:
        """Return the file path for an id."""
        if (
            not blob_id
            or blob_id.startswith(".")
            or "/" in blob_id
            or "\\" in blob_id
            or os.sep in blob_id
            or "\x00" in blob_id
        ):
            raise ValueError(f"Invalid blob id: {blob_id!r}")
        return self.directory / blob_id

    def write(self, blob_id: str, data: bytes) -> None:
        """Create or replace a blob."""
        self.path(blob_id).write_bytes(data)

    def read(self, blob_id: str) -> bytes:
        """
        Read a blob.

        Raises:
            FileNotFoundError: If no blob exists for the id.
        """
        return self.path(blob_id).read_bytes()

    def exists(self, blob_id: str) -> bool:
        return self.path(blob_id).is_file()

    def delete(self, blob_id: str) -> bool:
        """Delete a blob. Returns False if there was nothing to delete."""
        try:
            self.path(blob_id).unlink()
        except FileNotFoundError:
            return False
        return True

    def size(self, blob_id: str) -> int:
        return self.path(blob_id).stat().st_size

    def modified(self, blob_id: str) -> float:
        """Return the blob's modification time as a Unix timestamp."""
        return self.path(blob_id).stat().st_mtime

    def ids(self) -> list[str]:
        """List the ids of all stored blobs."""
        return [
            entry.name
            for entry in os.scandir(self.directory)
            if entry.is_file() and not entry.name.startswith(".")
        ]

    def total_size(self) -> int:
        """Sum the sizes of every file in the directory, scanning it afresh."""
        total = 0
        with os.scandir(self.directory) as entries:
            for entry in entries:
                try:
                    if entry.is_file():
                        total += entry.stat().st_size
                except FileNotFoundError:
                    # Removed between listing and stat
                    continue
        return total
