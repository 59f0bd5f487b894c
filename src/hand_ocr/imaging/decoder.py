"""Orientation-aware image decoding.

Bitmaps are handed out through a context manager so the underlying Pillow
handles are closed as soon as the crop or resize using them is done, even
when that step fails.
"""

import io
import logging
from contextlib import contextmanager
from typing import Iterator

from PIL import Image, ImageOps, UnidentifiedImageError

from hand_ocr.core.errors import DecodeError
from hand_ocr.core.result import ImagePayload

log = logging.getLogger(__name__)

SUPPORTED_FORMATS = {"PNG", "JPEG", "WEBP", "GIF"}

FORMAT_MIME_TYPES = {
    "PNG": "image/png",
    "JPEG": "image/jpeg",
    "WEBP": "image/webp",
    "GIF": "image/gif",
}


def format_for_mime(mime_type: str) -> str | None:
    """Pillow format name for a media type, or None if unsupported."""
    base = mime_type.split(";", 1)[0].strip().lower()
    if base == "image/jpg":
        base = "image/jpeg"
    for fmt, mime in FORMAT_MIME_TYPES.items():
        if mime == base:
            return fmt
    return None


@contextmanager
def open_bitmap(payload: ImagePayload) -> Iterator[Image.Image]:
    """Decode a payload, applying EXIF orientation, and close it on exit.

    Raises:
        DecodeError: bytes are not a supported image or are truncated/corrupt.
    """
    try:
        raw = Image.open(io.BytesIO(payload.data))
    except (UnidentifiedImageError, OSError, Image.DecompressionBombError) as e:
        raise DecodeError(f"Could not read {payload.filename} as an image.", filename=payload.filename) from e

    oriented: Image.Image | None = None
    try:
        if raw.format not in SUPPORTED_FORMATS:
            raise DecodeError(
                f"Unsupported image format {raw.format or 'unknown'}; use PNG, JPEG, GIF or WEBP.",
                filename=payload.filename,
            )

        try:
            raw.load()
            oriented = ImageOps.exif_transpose(raw)
        except (OSError, SyntaxError, ValueError, Image.DecompressionBombError) as e:
            raise DecodeError(
                f"{payload.filename} is truncated or corrupt: {e}", filename=payload.filename
            ) from e

        log.debug(
            "Decoded %s: %s %dx%d (raw %dx%d)",
            payload.filename,
            raw.format,
            oriented.width,
            oriented.height,
            raw.width,
            raw.height,
        )
        yield oriented
    finally:
        if oriented is not None and oriented is not raw:
            oriented.close()
        raw.close()
