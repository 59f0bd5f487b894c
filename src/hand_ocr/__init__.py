"""hand-ocr - Handwriting transcription with Gemini, with table export to CSV."""

__version__ = "0.1.0"

from hand_ocr.core.config import AppConfig
from hand_ocr.core.result import CropRectangle, ImagePayload, TranscriptionResult
from hand_ocr.pipeline.client import TranscriptionClient
from hand_ocr.pipeline.session import Session

__all__ = [
    "AppConfig",
    "CropRectangle",
    "ImagePayload",
    "Session",
    "TranscriptionClient",
    "TranscriptionResult",
]
