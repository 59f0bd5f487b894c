"""Map crop selections from display pixels to source-bitmap pixels."""

import math

from hand_ocr.core.errors import InvalidInputError
from hand_ocr.core.result import CropRectangle


def full_frame(width: float, height: float) -> CropRectangle:
    """Selection covering the whole displayed image (the initial crop)."""
    return CropRectangle(
        x=0,
        y=0,
        width=width,
        height=height,
        display_width=width,
        display_height=height,
    )


def map_to_source(rect: CropRectangle, source_width: int, source_height: int) -> CropRectangle:
    """Rescale a display-space crop into source-bitmap space.

    The two axes scale independently since the display may stretch the
    image. Offsets are left fractional; see output_size() for the canvas.
    """
    if rect.display_width <= 0 or rect.display_height <= 0:
        raise InvalidInputError(
            "Display size is unknown; wait for the image to finish laying out before cropping.",
            details={"display": (rect.display_width, rect.display_height)},
        )

    scale_x = source_width / rect.display_width
    scale_y = source_height / rect.display_height

    return CropRectangle(
        x=rect.x * scale_x,
        y=rect.y * scale_y,
        width=rect.width * scale_x,
        height=rect.height * scale_y,
        display_width=source_width,
        display_height=source_height,
    )


def output_size(rect: CropRectangle) -> tuple[int, int]:
    """Whole-pixel canvas size for a mapped crop (floored)."""
    return math.floor(rect.width), math.floor(rect.height)
