"""
Test fixtures for contents app.

Provides fixtures for:
- Sample media (PNG, JPEG, GIF, MP4) and non-media bytes
- Isolated blob/preview directories under tmp_path
- ContentStore instances wired to those directories
- Settings pointing the API at the same directories
- A patched subprocess.run standing in for ffprobe/ffmpeg
"""

from __future__ import annotations

import io
import json
import subprocess
from unittest.mock import patch

import pytest
from PIL import Image
from rest_framework.test import APIClient

from contents.catalog import Catalog
from contents.previews import PreviewGenerator
from contents.quota import QuotaGuard
from contents.services import ContentStore, get_content_store
from contents.storage import BlobStore

# =============================================================================
# Sample Media
# =============================================================================


def make_image_bytes(
    size: tuple[int, int] = (400, 300),
    mode: str = "RGB",
    color=(255, 0, 0),
    image_format: str = "PNG",
) -> bytes:
    """Encode a solid-color image with Pillow."""
    image = Image.new(mode, size, color=color)
    buffer = io.BytesIO()
    image.save(buffer, format=image_format)
    return buffer.getvalue()


def make_mp4_bytes(padding: int = 2048) -> bytes:
    """
    Minimal MP4 container header.

    An ftyp box with the mp42 brand followed by a free box; enough for libmagic
    to report video/mp4 (no decodable frames).
    """
    ftyp = b"\x00\x00\x00\x18ftypmp42" + b"\x00\x00\x00\x00" + b"mp42isom"
    free = (8 + padding).to_bytes(4, "big") + b"free" + b"\x00" * padding
    return ftyp + free


@pytest.fixture
def sample_png() -> bytes:
    """A 400x300 red PNG."""
    return make_image_bytes()


@pytest.fixture
def sample_png_rgba() -> bytes:
    """A 400x300 half-transparent blue PNG."""
    return make_image_bytes(mode="RGBA", color=(0, 0, 255, 128))


@pytest.fixture
def sample_jpeg() -> bytes:
    """A 640x480 green JPEG."""
    return make_image_bytes(size=(640, 480), color=(0, 255, 0), image_format="JPEG")


@pytest.fixture
def sample_gif() -> bytes:
    """A 100x100 palette GIF."""
    return make_image_bytes(size=(100, 100), mode="P", color=1, image_format="GIF")


@pytest.fixture
def sample_mp4() -> bytes:
    return make_mp4_bytes()


@pytest.fixture
def sample_text() -> bytes:
    return b"This is plain text, not an image or a video.\n" * 10


@pytest.fixture
def sample_pdf() -> bytes:
    return (
        b"%PDF-1.4\n1 0 obj\n<< /Type /Catalog /Pages 2 0 R >>\nendobj\n"
        b"2 0 obj\n<< /Type /Pages /Kids [] /Count 0 >>\nendobj\n"
        b"trailer\n<< /Root 1 0 R >>\n%%EOF\n"
    )


# =============================================================================
# FFmpeg / FFprobe
# =============================================================================


def fake_media_tools(duration: str = "8.0", frame: bytes | None = None):
    """
    Build a subprocess.run side effect answering like ffprobe and ffmpeg.

    ffprobe reports the given duration; ffmpeg writes one PNG frame.
    """
    frame = frame if frame is not None else make_image_bytes(size=(640, 360))

    def run(cmd, *args, **kwargs):
        if "ffprobe" in cmd[0]:
            stdout = json.dumps({"format": {"duration": duration}})
            return subprocess.CompletedProcess(cmd, 0, stdout=stdout, stderr="")
        return subprocess.CompletedProcess(cmd, 0, stdout=frame, stderr=b"")

    return run


@pytest.fixture
def mock_media_tools():
    """Patch subprocess.run for the preview module with working ffprobe/ffmpeg."""
    with patch("contents.previews.subprocess.run", side_effect=fake_media_tools()) as run:
        yield run


# =============================================================================
# Stores
# =============================================================================


@pytest.fixture
def blobs_dir(tmp_path):
    return tmp_path / "blobs"


@pytest.fixture
def previews_dir(tmp_path):
    return tmp_path / "previews"


def build_store(
    blobs_dir,
    previews_dir,
    file_limit: int = 10 * 1024 * 1024,
    store_limit: int = 100 * 1024 * 1024,
) -> ContentStore:
    blobs = BlobStore(blobs_dir)
    return ContentStore(
        catalog=Catalog(),
        blobs=blobs,
        previews=BlobStore(previews_dir),
        quota=QuotaGuard(blobs, file_limit=file_limit, store_limit=store_limit),
        preview_generator=PreviewGenerator(),
    )


@pytest.fixture
def content_store(db, blobs_dir, previews_dir) -> ContentStore:
    """ContentStore over empty temporary directories (10MB file, 100MB store)."""
    return build_store(blobs_dir, previews_dir)


@pytest.fixture
def store_factory(db, blobs_dir, previews_dir):
    """Build a ContentStore with custom limits over the temporary directories."""

    def factory(**limits) -> ContentStore:
        return build_store(blobs_dir, previews_dir, **limits)

    return factory


# =============================================================================
# API
# =============================================================================


@pytest.fixture
def api_client() -> APIClient:
    """Return API client (there are no user accounts)."""
    return APIClient()


@pytest.fixture
def api_settings(settings, blobs_dir, previews_dir):
    """
    Point the process-wide store at temporary directories.

    Yields the pytest-django settings fixture so tests can adjust limits or
    the token; the cached store is rebuilt on first use and dropped afterwards.
    """
    settings.CONTENT_BLOBS_DIR = str(blobs_dir)
    settings.CONTENT_PREVIEWS_DIR = str(previews_dir)
    settings.CONTENT_FILE_LIMIT = 10 * 1024 * 1024
    settings.CONTENT_STORE_LIMIT = 100 * 1024 * 1024
    settings.CONTENT_TOKEN = ""
    get_content_store.cache_clear()
    yield settings
    get_content_store.cache_clear()
