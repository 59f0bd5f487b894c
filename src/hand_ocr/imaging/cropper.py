"""Crop a decoded bitmap to a confirmed selection."""

import logging
import math

from PIL import Image

from hand_ocr.core.errors import InvalidInputError, RenderError
from hand_ocr.core.result import CropRectangle, ImagePayload
from hand_ocr.imaging.decoder import open_bitmap
from hand_ocr.imaging.encoding import encode_image, resample_ready
from hand_ocr.imaging.geometry import map_to_source, output_size

log = logging.getLogger(__name__)

CROP_FORMAT = "PNG"


def crop_bitmap(bitmap: Image.Image, source_rect: CropRectangle, filename: str) -> ImagePayload:
    """Render a source-space rectangle onto a fresh canvas and encode it as PNG.

    The canvas is the floored rectangle size. Fractional offsets are resolved
    by the Lanczos filter; any part of the rectangle outside the bitmap stays
    transparent.
    """
    width, height = output_size(source_rect)
    if width <= 0 or height <= 0:
        raise RenderError(
            "Failed to get a canvas for the crop: selection is smaller than one pixel.",
            details={"canvas": (width, height)},
        )

    source = resample_ready(bitmap)
    try:
        canvas = _render(source, source_rect, width, height)
    except (ValueError, MemoryError) as e:
        raise RenderError(f"Failed to render crop: {e}") from e
    finally:
        if source is not bitmap:
            source.close()

    try:
        payload = encode_image(canvas, CROP_FORMAT, f"{_stem(filename)}.png")
    finally:
        canvas.close()

    log.debug("Cropped %s to %dx%d (%.1f KB)", filename, width, height, payload.size_kb)
    return payload


def _render(source: Image.Image, rect: CropRectangle, width: int, height: int) -> Image.Image:
    left, upper, right, lower = rect.box
    src_w, src_h = source.size

    # Mapping round-off can overshoot an edge by a hair; treat that as inside.
    eps = 1e-6
    if left >= -eps and upper >= -eps and right <= src_w + eps and lower <= src_h + eps:
        box = (max(0.0, left), max(0.0, upper), min(float(src_w), right), min(float(src_h), lower))
        return source.resize((width, height), Image.Resampling.LANCZOS, box=box)

    # Partly outside: draw the overlapping part at its scaled position.
    canvas = Image.new("RGBA", (width, height), (0, 0, 0, 0))
    ix0, iy0 = max(0.0, left), max(0.0, upper)
    ix1, iy1 = min(float(src_w), right), min(float(src_h), lower)
    if ix1 <= ix0 or iy1 <= iy0:
        return canvas

    scale_x = width / rect.width
    scale_y = height / rect.height
    dest_x = math.floor((ix0 - left) * scale_x)
    dest_y = math.floor((iy0 - upper) * scale_y)
    dest_w = min(width - dest_x, max(1, round((ix1 - ix0) * scale_x)))
    dest_h = min(height - dest_y, max(1, round((iy1 - iy0) * scale_y)))
    if dest_w <= 0 or dest_h <= 0:
        return canvas

    part = source.resize((dest_w, dest_h), Image.Resampling.LANCZOS, box=(ix0, iy0, ix1, iy1))
    rgba = part.convert("RGBA")
    try:
        canvas.paste(rgba, (dest_x, dest_y))
    finally:
        rgba.close()
        part.close()
    return canvas


def crop_payload(payload: ImagePayload, rect: CropRectangle) -> ImagePayload:
    """Decode, map the display-space selection to source pixels, and crop."""
    if rect.width <= 0 or rect.height <= 0:
        raise InvalidInputError("Crop selection must have a positive width and height.")

    with open_bitmap(payload) as bitmap:
        source_rect = map_to_source(rect, bitmap.width, bitmap.height)
        log.debug(
            "Crop (%g, %g, %g, %g) on %gx%g display -> (%g, %g, %g, %g) on %dx%d source",
            rect.x, rect.y, rect.width, rect.height,
            rect.display_width, rect.display_height,
            source_rect.x, source_rect.y, source_rect.width, source_rect.height,
            bitmap.width, bitmap.height,
        )
        return crop_bitmap(bitmap, source_rect, payload.filename)


def _stem(filename: str) -> str:
    return filename.rsplit(".", 1)[0] if "." in filename else filename
