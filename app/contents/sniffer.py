"""
Content-based media type detection.

Uses python-magic (libmagic) to detect file types from the leading bytes
rather than trusting names or client-supplied labels. Only images and videos
are accepted.

Usage:
    from contents.sniffer import sniff

    result = sniff(blob)  # raises UnsupportedMime for anything else
    print(result.extension, result.mime)  # "png", "image/png"
"""

from __future__ import annotations

import logging
import mimetypes
import threading
from dataclasses import dataclass

import magic

from contents.exceptions import UnsupportedMime

logger = logging.getLogger(__name__)

# =============================================================================
# Configuration
# =============================================================================

# libmagic needs far less than this to identify any supported container
SNIFF_BYTES = 2048

ACCEPTED_PREFIXES = ("image/", "video/")

# Answers libmagic gives when it recognises nothing
UNKNOWN_MIME_TYPES = {
    "application/octet-stream",
    "application/x-empty",
    "inode/x-empty",
}

# Preferred extension per MIME type; mimetypes fills in the rest
MIME_TO_EXTENSION: dict[str, str] = {
    "image/jpeg": "jpg",
    "image/png": "png",
    "image/gif": "gif",
    "image/webp": "webp",
    "image/bmp": "bmp",
    "image/tiff": "tif",
    "image/heic": "heic",
    "image/heif": "heif",
    "image/avif": "avif",
    "image/svg+xml": "svg",
    "image/x-icon": "ico",
    "image/vnd.microsoft.icon": "ico",
    "video/mp4": "mp4",
    "video/quicktime": "mov",
    "video/x-msvideo": "avi",
    "video/webm": "webm",
    "video/x-matroska": "mkv",
    "video/mpeg": "mpg",
    "video/3gpp": "3gp",
    "video/x-flv": "flv",
}


@dataclass(frozen=True)
class SniffResult:
    """Detected type of a byte buffer."""

    extension: str
    mime: str


# A magic handle is not safe to share between threads
_magic = magic.Magic(mime=True)
_magic_lock = threading.Lock()


def _extension_for(mime: str) -> str:
    if mime in MIME_TO_EXTENSION:
        return MIME_TO_EXTENSION[mime]

    guessed = mimetypes.guess_extension(mime)
    if guessed:
        return guessed.lstrip(".")

    # e.g. "video/x-ms-asf" -> "x-ms-asf"
    return mime.split("/", 1)[-1].split("+", 1)[0]


def classify(data: bytes) -> SniffResult:
    """
    Detect the extension and MIME type of a byte buffer.

    Raises:
        UnsupportedMime: If the buffer is empty or libmagic cannot identify it.
    """
    if not data:
        raise UnsupportedMime()

    with _magic_lock:
        mime = _magic.from_buffer(data[:SNIFF_BYTES])

    if not mime or mime in UNKNOWN_MIME_TYPES:
        raise UnsupportedMime()

    return SniffResult(extension=_extension_for(mime), mime=mime)


def accept(mime: str) -> bool:
    """Return True for image and video MIME types."""
    return mime.startswith(ACCEPTED_PREFIXES)


def sniff(data: bytes) -> SniffResult:
    """
    Classify a buffer and enforce the image/video accept-list.

    Raises:
        UnsupportedMime: If the type is unknown or not an image or video.
    """
    result = classify(data)
    if not accept(result.mime):
        logger.warning(
            "Rejected unsupported media type",
            extra={"mime": result.mime, "size": len(data)},
        )
        raise UnsupportedMime(details={"mime": result.mime})
    return result
