"""Transcription engine adapters."""

from hand_ocr.engines.base import BaseEngine, InlineImage
from hand_ocr.engines.gemini import GeminiEngine

__all__ = [
    "BaseEngine",
    "GeminiEngine",
    "InlineImage",
]
