"""Rich terminal UI components for hand-ocr."""

from hand_ocr.ui.console import AppConsole, setup_logging
from hand_ocr.ui.panels import ResultPanel

__all__ = ["AppConsole", "ResultPanel", "setup_logging"]
