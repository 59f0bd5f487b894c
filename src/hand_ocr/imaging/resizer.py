"""Downscale images before upload to bound payload size and model latency."""

import logging

from PIL import Image

from hand_ocr.core.errors import DecodeError, InvalidInputError, RenderError
from hand_ocr.core.result import ImagePayload
from hand_ocr.imaging.decoder import format_for_mime, open_bitmap
from hand_ocr.imaging.encoding import encode_image, resample_ready

log = logging.getLogger(__name__)


def target_size(width: int, height: int, max_dimension: int) -> tuple[int, int]:
    """Size whose longest edge is max_dimension, or the input size if already within it."""
    if max_dimension <= 0:
        raise InvalidInputError(f"max_dimension must be positive, got {max_dimension}")

    if max(width, height) <= max_dimension:
        return width, height

    if width >= height:
        return max_dimension, max(1, round(height * max_dimension / width))
    return max(1, round(width * max_dimension / height)), max_dimension


def resize_payload(payload: ImagePayload, max_dimension: int) -> ImagePayload:
    """Bound the longest edge of an image, keeping its media type.

    Orientation metadata is applied while decoding, so the bound is measured
    on the image as it is seen. Images already within the bound come back
    unchanged.
    """
    payload.require_image()
    fmt = format_for_mime(payload.mime_type)
    if fmt is None:
        raise DecodeError(
            f"Cannot resize {payload.mime_type} images; use PNG, JPEG, GIF or WEBP.",
            filename=payload.filename,
        )

    with open_bitmap(payload) as bitmap:
        width, height = bitmap.size
        new_width, new_height = target_size(width, height, max_dimension)
        if (new_width, new_height) == (width, height):
            log.debug("%s is %dx%d, within %d; not resized", payload.filename, width, height, max_dimension)
            return payload

        source = resample_ready(bitmap)
        try:
            canvas = source.resize((new_width, new_height), Image.Resampling.LANCZOS)
        except (ValueError, MemoryError) as e:
            raise RenderError(f"Failed to resize image: {e}") from e
        finally:
            if source is not bitmap:
                source.close()

    try:
        resized = encode_image(canvas, fmt, payload.filename)
    finally:
        canvas.close()

    log.info(
        "Resized %s %dx%d -> %dx%d (%.1f KB -> %.1f KB)",
        payload.filename, width, height, new_width, new_height,
        payload.size_kb, resized.size_kb,
    )
    return resized
