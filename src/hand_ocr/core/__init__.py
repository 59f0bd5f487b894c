"""Core data models for hand-ocr."""

from hand_ocr.core.config import AppConfig
from hand_ocr.core.result import CropRectangle, ImagePayload, TableGrid, TranscriptionResult

__all__ = [
    "AppConfig",
    "CropRectangle",
    "ImagePayload",
    "TableGrid",
    "TranscriptionResult",
]
