import io
from typing import Callable

import pytest
from PIL import Image

from hand_ocr.core.result import ImagePayload

MIME_TYPES = {"PNG": "image/png", "JPEG": "image/jpeg", "WEBP": "image/webp", "GIF": "image/gif"}


def _make_payload(
    size: tuple[int, int],
    fmt: str = "PNG",
    color: str = "white",
    orientation: int | None = None,
    filename: str | None = None,
) -> ImagePayload:
    """Encode a solid test image, optionally tagged with an EXIF orientation."""
    image = Image.new("RGB", size, color=color)
    buffer = io.BytesIO()
    if orientation is not None:
        exif = Image.Exif()
        exif[0x0112] = orientation
        image.save(buffer, format=fmt, exif=exif.tobytes())
    else:
        image.save(buffer, format=fmt)
    name = filename or f"page.{fmt.lower()}"
    return ImagePayload(data=buffer.getvalue(), mime_type=MIME_TYPES[fmt], filename=name)


def _image_size(payload: ImagePayload) -> tuple[int, int]:
    with Image.open(io.BytesIO(payload.data)) as image:
        return image.size


@pytest.fixture
def make_payload() -> Callable[..., ImagePayload]:
    return _make_payload


@pytest.fixture
def image_size() -> Callable[[ImagePayload], tuple[int, int]]:
    return _image_size
