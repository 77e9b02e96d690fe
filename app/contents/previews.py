"""
Preview generation for stored media.

Images are downscaled directly with Pillow. Videos are probed with FFprobe
for their duration, a single still frame is extracted with FFmpeg and that
frame is downscaled. Every preview is encoded as WebP at a fixed height.

FFmpeg/FFprobe run via subprocess with a timeout. Every failure (missing
tool, non-zero exit, timeout, empty output, undecodable image) surfaces as
UnsupportedMime: a content that cannot be previewed is not accepted.
"""

from __future__ import annotations

import json
import logging
import subprocess
from io import BytesIO

from PIL import Image, UnidentifiedImageError

from contents.exceptions import UnsupportedMime

logger = logging.getLogger(__name__)

# =============================================================================
# Constants
# =============================================================================

# Preview height in pixels; width follows the aspect ratio
PREVIEW_HEIGHT = 200

# WebP quality settings (0-100)
WEBP_QUALITY = 80

# Still frames are taken halfway through, but never later than this
MAX_CAPTURE_SECONDS = 10.0

# Seconds allowed for a single ffprobe/ffmpeg run
MEDIA_TOOL_TIMEOUT = 120


# =============================================================================
# Image Helpers
# =============================================================================


def _convert_to_rgb(img: Image.Image) -> Image.Image:
    """
    Convert image to RGB mode for WebP compatibility.

    Handles various color modes:
    - RGBA / LA: Composites onto white background
    - P (palette): Composites if it has transparency, else converts
    - Other (L, CMYK, I;16, ...): Converts directly to RGB
    """
    if img.mode == "RGB":
        return img

    if img.mode == "P" and "transparency" in img.info:
        img = img.convert("RGBA")

    if img.mode in ("RGBA", "LA"):
        if img.mode == "LA":
            img = img.convert("RGBA")
        background = Image.new("RGB", img.size, (255, 255, 255))
        # Paste with alpha channel as mask
        background.paste(img, mask=img.split()[-1])
        return background

    return img.convert("RGB")


def capture_instant(duration: float) -> float:
    """Timestamp (seconds) of the still frame used as a video preview."""
    return max(0.0, min(duration / 2, MAX_CAPTURE_SECONDS))


# =============================================================================
# Preview Generator
# =============================================================================


class PreviewGenerator:
    """
    Builds WebP previews from image bytes or video files.

    Example:
        generator = PreviewGenerator(ffmpeg_path="ffmpeg", ffprobe_path="ffprobe")
        preview = generator.generate(blob_path, blob_bytes, "video/mp4")
    """

    def __init__(
        self,
        ffmpeg_path: str = "ffmpeg",
        ffprobe_path: str = "ffprobe",
        height: int = PREVIEW_HEIGHT,
        timeout: int = MEDIA_TOOL_TIMEOUT,
    ):
        self.ffmpeg_path = ffmpeg_path
        self.ffprobe_path = ffprobe_path
        self.height = height
        self.timeout = timeout

    def _run(self, cmd: list[str], path, *, text: bool) -> subprocess.CompletedProcess:
        """Run a media tool, mapping every failure to UnsupportedMime."""
        tool = cmd[0]
        try:
            result = subprocess.run(
                cmd,
                capture_output=True,
                text=text,
                timeout=self.timeout,
            )
        except FileNotFoundError as e:
            logger.error(
                "Media tool not found",
                extra={"tool": tool, "path": str(path)},
            )
            raise UnsupportedMime(details={"reason": f"{tool} not found"}) from e
        except subprocess.TimeoutExpired as e:
            logger.warning(
                "Media tool timed out",
                extra={"tool": tool, "path": str(path), "timeout": self.timeout},
            )
            raise UnsupportedMime(details={"reason": f"{tool} timed out"}) from e

        if result.returncode != 0:
            stderr = result.stderr or ""
            if isinstance(stderr, bytes):
                stderr = stderr.decode("utf-8", errors="replace")
            logger.warning(
                "Media tool failed",
                extra={
                    "tool": tool,
                    "path": str(path),
                    "returncode": result.returncode,
                    "stderr": stderr.strip()[:500],
                },
            )
            raise UnsupportedMime(details={"reason": f"{tool} failed"})

        return result

    def probe_duration(self, path) -> float:
        """
        Read a video's duration in seconds with FFprobe.

        A missing or non-numeric duration (some streams do not report one)
        is treated as 0.0.

        Raises:
            UnsupportedMime: If FFprobe cannot read the file.
        """
        cmd = [
            self.ffprobe_path,
            "-v",
            "error",
            "-show_entries",
            "format=duration",
            "-of",
            "json",
            str(path),
        ]
        result = self._run(cmd, path, text=True)

        try:
            duration = json.loads(result.stdout or "{}").get("format", {}).get("duration")
            return float(duration)
        except (TypeError, ValueError, AttributeError):
            return 0.0

    def extract_frame(self, path, timestamp: float) -> bytes:
        """
        Extract one PNG frame at timestamp (seconds) with FFmpeg.

        Raises:
            UnsupportedMime: If FFmpeg fails or produces no frame.
        """
        cmd = [
            self.ffmpeg_path,
            "-v",
            "error",
            "-ss",
            f"{timestamp:.3f}",
            "-i",
            str(path),
            "-frames:v",
            "1",
            "-f",
            "image2pipe",
            "-vcodec",
            "png",
            "-",
        ]
        result = self._run(cmd, path, text=False)

        if not result.stdout:
            logger.warning(
                "FFmpeg produced no frame",
                extra={"path": str(path), "timestamp": timestamp},
            )
            raise UnsupportedMime(details={"reason": "no video frame"})

        return result.stdout

    def downscale(self, data: bytes) -> bytes:
        """
        Shrink an image to the preview height and encode it as WebP.

        Images already at or below the preview height keep their size.

        Raises:
            UnsupportedMime: If Pillow cannot decode the image.
        """
        try:
            with Image.open(BytesIO(data)) as img:
                # Force load to detect corrupt images early
                img.load()
                original_width, original_height = img.size

                img = _convert_to_rgb(img)

                # thumbnail() never enlarges; the width bound only follows the ratio
                target_width = max(
                    1, round(original_width * self.height / max(original_height, 1))
                )
                img.thumbnail((target_width, self.height), Image.Resampling.LANCZOS)

                buffer = BytesIO()
                img.save(buffer, format="WEBP", quality=WEBP_QUALITY)
        except Image.DecompressionBombError as e:
            logger.warning("Image exceeds size limit", extra={"error": str(e)})
            raise UnsupportedMime(details={"reason": "image too large"}) from e
        except (UnidentifiedImageError, OSError, ValueError) as e:
            logger.warning("Cannot decode image", extra={"error": str(e)})
            raise UnsupportedMime(details={"reason": "undecodable image"}) from e

        logger.debug(
            "Downscaled preview",
            extra={
                "original_size": f"{original_width}x{original_height}",
                "preview_size": f"{img.size[0]}x{img.size[1]}",
                "file_size": buffer.tell(),
            },
        )
        return buffer.getvalue()

    def generate(self, path, data: bytes, mime: str) -> bytes:
        """
        Build the preview for a content.

        Args:
            path: File path of the already written primary blob (used for video)
            data: Primary blob bytes (used for images)
            mime: Detected MIME type

        Raises:
            UnsupportedMime: If the type has no preview or generation fails.
        """
        if mime.startswith("image/"):
            return self.downscale(data)

        if mime.startswith("video/"):
            duration = self.probe_duration(path)
            frame = self.extract_frame(path, capture_instant(duration))
            return self.downscale(frame)

        raise UnsupportedMime(details={"mime": mime})
