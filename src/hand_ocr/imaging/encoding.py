"""Shared canvas preparation and re-encoding for crop and resize."""

import io

from PIL import Image

from hand_ocr.core.errors import RenderError
from hand_ocr.core.result import ImagePayload
from hand_ocr.imaging.decoder import FORMAT_MIME_TYPES

RESAMPLE_MODES = {"L", "LA", "RGB", "RGBA"}
JPEG_MODES = {"L", "RGB"}


def resample_ready(image: Image.Image) -> Image.Image:
    """Convert palette/bilevel/exotic modes so Lanczos resampling applies.

    Returns the image itself when no conversion is needed.
    """
    if image.mode in RESAMPLE_MODES:
        return image
    has_alpha = image.mode in ("PA", "RGBa", "La") or "transparency" in image.info
    return image.convert("RGBA" if has_alpha else "RGB")


def encode_image(image: Image.Image, fmt: str, filename: str) -> ImagePayload:
    """Encode a canvas into a payload of the given Pillow format.

    Raises:
        RenderError: the encoder failed or produced no bytes.
    """
    canvas = image
    if fmt == "JPEG" and canvas.mode not in JPEG_MODES:
        canvas = canvas.convert("RGB")

    buffer = io.BytesIO()
    save_kwargs = {"quality": 95} if fmt in ("JPEG", "WEBP") else {}
    try:
        canvas.save(buffer, format=fmt, **save_kwargs)
    except (OSError, ValueError, KeyError) as e:
        raise RenderError(f"Could not encode image as {fmt}: {e}") from e
    finally:
        if canvas is not image:
            canvas.close()

    data = buffer.getvalue()
    if not data:
        raise RenderError("Canvas is empty")

    return ImagePayload(data=data, mime_type=FORMAT_MIME_TYPES[fmt], filename=filename)
