"""Base engine adapter for the transcription model."""

from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass(frozen=True)
class InlineImage:
    """Image as sent over the wire: base64 text plus its media type."""

    data: str
    mime_type: str


class BaseEngine(ABC):
    """Abstract base class for transcription engines.

    An engine performs exactly one model call per generate() and returns the
    raw response text; parsing and validation happen in the client.
    """

    def __init__(self) -> None:
        self._initialized = False

    @property
    @abstractmethod
    def name(self) -> str:
        """Engine identifier."""
        ...

    @abstractmethod
    def initialize(self) -> bool:
        """Initialize the engine. Returns True if successful."""
        ...

    @abstractmethod
    async def generate(self, image: InlineImage, prompt: str) -> str:
        """Send one image and instruction, return the raw response text."""
        ...

    def is_available(self) -> bool:
        """Check if engine is available and ready to use."""
        try:
            return self.initialize()
        except Exception:
            return False
