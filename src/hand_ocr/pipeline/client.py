"""Transcription client: one bounded-time model call plus response validation."""

import asyncio
import base64
import json
import logging
import time
from typing import Any, Awaitable

from hand_ocr.core.errors import (
    CollaboratorError,
    EmptyResponseError,
    HandOcrError,
    MalformedResponseError,
    RequestTimeoutError,
)
from hand_ocr.core.result import ImagePayload, TranscriptionResult
from hand_ocr.engines.base import BaseEngine, InlineImage

log = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 90.0

TRANSCRIPTION_PROMPT = """Analyze the handwriting in this image with high precision.
1. Transcribe all text content exactly as it appears, **preserving the original layout, line breaks, spacing, and structure.** The transcription in the 'textContent' field should visually match the arrangement in the image as closely as possible.
2. After transcribing, analyze the content to determine if it contains a table or tabular data.
3. If a table is present, extract ONLY the table data into a structured array of arrays for the 'tableData' field, where each inner array represents a row of the table.
4. Return the result in the specified JSON format. 'textContent' must contain the full, formatted transcription. 'tableData' should contain only the table data, or be null if no table is found."""


def encode_payload(payload: ImagePayload) -> InlineImage:
    """Base64-encode payload bytes for the request body."""
    return InlineImage(data=base64.b64encode(payload.data).decode("ascii"), mime_type=payload.mime_type)


def parse_response(raw_text: str) -> TranscriptionResult:
    """Turn the model's raw text into a validated TranscriptionResult."""
    text = raw_text.strip() if raw_text else ""
    if not text:
        raise EmptyResponseError("The AI model returned an empty response. Try a clearer or tighter crop.")

    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise MalformedResponseError(
            f"Could not parse the AI model response as JSON ({e.msg}).", response_text=text
        ) from e

    return TranscriptionResult.from_dict(data)


class TranscriptionClient:
    """Sends one image to an engine and validates what comes back.

    The engine call races a timer: whichever settles first wins. A call that
    loses the race is abandoned (left running, never cancelled) and its
    eventual outcome is logged and dropped.
    """

    def __init__(
        self,
        engine: BaseEngine,
        timeout: float = DEFAULT_TIMEOUT,
        prompt: str = TRANSCRIPTION_PROMPT,
    ) -> None:
        self.engine = engine
        self.timeout = timeout
        self.prompt = prompt
        self._abandoned: set[asyncio.Task] = set()

    @property
    def pending_abandoned(self) -> int:
        """Number of timed-out calls still running in the background."""
        return len(self._abandoned)

    async def transcribe(self, payload: ImagePayload) -> TranscriptionResult:
        """Transcribe one image.

        Raises:
            InvalidInputError: payload is not an image (no call is made).
            RequestTimeoutError: no answer within self.timeout seconds.
            CollaboratorError: the engine call itself failed.
            EmptyResponseError, MalformedResponseError, SchemaViolationError:
                the answer was unusable.
        """
        payload.require_image()
        image = encode_payload(payload)

        start_time = time.monotonic()
        raw_text = await self._race(self.engine.generate(image, self.prompt))
        elapsed = time.monotonic() - start_time

        result = parse_response(raw_text)
        result.metadata.update({
            "engine": self.engine.name,
            "processing_time": elapsed,
            "source": payload.filename,
        })
        log.info(
            "Transcribed %s in %.1fs (%d words, table=%s)",
            payload.filename, elapsed, result.word_count, result.has_table,
        )
        return result

    async def _race(self, call: Awaitable[Any]) -> Any:
        request = asyncio.ensure_future(call)
        timer = asyncio.ensure_future(asyncio.sleep(self.timeout))
        try:
            done, _ = await asyncio.wait({request, timer}, return_when=asyncio.FIRST_COMPLETED)
        except asyncio.CancelledError:
            self._abandon(request, "caller was cancelled")
            raise
        finally:
            timer.cancel()

        if request not in done:
            self._abandon(request, f"exceeded {self.timeout:g}s")
            raise RequestTimeoutError(self.timeout)

        try:
            return request.result()
        except HandOcrError:
            raise
        except Exception as e:
            raise CollaboratorError(
                f"Could not get a valid response from the AI model: {e}", engine=self.engine.name
            ) from e

    def _abandon(self, request: asyncio.Task, reason: str) -> None:
        log.warning("%s call %s; abandoning it", self.engine.name, reason)
        self._abandoned.add(request)
        request.add_done_callback(self._discard_late)

    def _discard_late(self, request: asyncio.Task) -> None:
        self._abandoned.discard(request)
        if request.cancelled():
            return
        error = request.exception()
        if error is not None:
            log.debug("Late %s call failed after timeout: %s", self.engine.name, error)
        else:
            log.debug("Discarded late %s response that arrived after timeout", self.engine.name)
