"""Transcription request lifecycle, session flow and export."""

from hand_ocr.pipeline.client import TranscriptionClient, encode_payload, parse_response
from hand_ocr.pipeline.export import CSV_MIME_TYPE, default_filename, export_csv, to_csv
from hand_ocr.pipeline.session import Session

__all__ = [
    "CSV_MIME_TYPE",
    "Session",
    "TranscriptionClient",
    "default_filename",
    "encode_payload",
    "export_csv",
    "parse_response",
    "to_csv",
]
