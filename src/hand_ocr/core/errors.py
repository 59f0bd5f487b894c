"""Exceptions raised by the hand-ocr pipeline.

Every stage raises a subclass of HandOcrError and never retries on its own.
The session turns any of them into a single user-visible message.
"""

from typing import Any


class HandOcrError(Exception):
    """Base exception for all pipeline failures.

    Attributes:
        message: Human-readable error message
        details: Additional context for debugging
    """

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message


class ConfigurationError(HandOcrError):
    """Missing or invalid configuration, e.g. no API key in the environment."""

    def __init__(self, message: str, config_key: str | None = None) -> None:
        details = {"config_key": config_key} if config_key else None
        super().__init__(message, details=details)


class InvalidInputError(HandOcrError):
    """The user selected something that cannot be processed (non-image file, bad crop)."""


class DecodeError(HandOcrError):
    """Image bytes are not a supported format, or are truncated/corrupt."""

    def __init__(self, message: str, filename: str | None = None) -> None:
        details = {"filename": filename} if filename else None
        super().__init__(message, details=details)


class RenderError(HandOcrError):
    """Canvas could not be allocated or re-encoding produced no data."""


class RequestTimeoutError(HandOcrError, TimeoutError):
    """The transcription call did not settle within the configured bound."""

    def __init__(self, timeout: float) -> None:
        super().__init__(
            f"The AI model did not respond within {timeout:g} seconds. Please try again.",
            details={"timeout_seconds": timeout},
        )
        self.timeout = timeout


class BadResponseError(HandOcrError):
    """The collaborator answered, but not with a usable transcription."""

    def __init__(self, message: str, response_text: str | None = None) -> None:
        details = {}
        if response_text:
            details["response_preview"] = response_text[:500]
        super().__init__(message, details=details)


class EmptyResponseError(BadResponseError):
    """The model returned no text at all."""


class MalformedResponseError(BadResponseError):
    """The model returned text that is not valid JSON."""


class SchemaViolationError(BadResponseError):
    """The JSON parsed but does not match the transcription shape."""


class CollaboratorError(HandOcrError):
    """Non-timeout failure of the external model call (quota, network, API error)."""

    def __init__(self, message: str, engine: str | None = None) -> None:
        details = {"engine": engine} if engine else None
        super().__init__(message, details=details)
