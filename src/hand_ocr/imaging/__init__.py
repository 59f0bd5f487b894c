"""Image decode, crop and resize stages."""

from hand_ocr.imaging.cropper import crop_bitmap, crop_payload
from hand_ocr.imaging.decoder import SUPPORTED_FORMATS, open_bitmap
from hand_ocr.imaging.geometry import full_frame, map_to_source, output_size
from hand_ocr.imaging.resizer import resize_payload, target_size

__all__ = [
    "SUPPORTED_FORMATS",
    "crop_bitmap",
    "crop_payload",
    "full_frame",
    "map_to_source",
    "open_bitmap",
    "output_size",
    "resize_payload",
    "target_size",
]
