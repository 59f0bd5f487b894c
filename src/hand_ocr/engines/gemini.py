"""Gemini engine adapter.

Gemini Flash is a cloud multimodal model; it is asked for JSON matching
RESPONSE_SCHEMA so the reply can be validated as a TranscriptionResult.
"""

import base64
import logging

from google import genai
from google.genai import errors, types

from hand_ocr.core.config import GeminiConfig
from hand_ocr.core.errors import CollaboratorError, ConfigurationError
from hand_ocr.engines.base import BaseEngine, InlineImage

log = logging.getLogger(__name__)


RESPONSE_SCHEMA = types.Schema(
    type=types.Type.OBJECT,
    properties={
        "isTable": types.Schema(
            type=types.Type.BOOLEAN,
            description="Is the content in the image structured as a table?",
        ),
        "textContent": types.Schema(
            type=types.Type.STRING,
            description="The full transcribed text from the image, preserving original layout and line breaks.",
        ),
        "tableData": types.Schema(
            type=types.Type.ARRAY,
            description="If it is a table, an array of arrays representing rows and cells. Otherwise, this can be null.",
            nullable=True,
            items=types.Schema(
                type=types.Type.ARRAY,
                items=types.Schema(type=types.Type.STRING),
            ),
        ),
    },
    required=["isTable", "textContent"],
)


class GeminiEngine(BaseEngine):
    """Adapter for the Google Gemini API.

    Pass a ready genai.Client to share one across engines or to substitute
    a test double; otherwise one is built from config.api_key.
    """

    def __init__(self, config: GeminiConfig | None = None, client: genai.Client | None = None) -> None:
        super().__init__()
        self.config = config or GeminiConfig()
        self._client = client
        self._initialized = client is not None

    @property
    def name(self) -> str:
        return "gemini"

    def initialize(self) -> bool:
        """Build the Gemini client from the configured API key."""
        if self._initialized:
            return True

        if not self.config.api_key:
            return False

        self._client = genai.Client(api_key=self.config.api_key)
        self._initialized = True
        return True

    def _to_part(self, image: InlineImage) -> types.Part:
        # The SDK takes raw bytes and applies its own base64 on the wire.
        return types.Part.from_bytes(data=base64.b64decode(image.data), mime_type=image.mime_type)

    async def generate(self, image: InlineImage, prompt: str) -> str:
        """Call Gemini with one image and the transcription prompt."""
        if not self._initialized and not self.initialize():
            raise ConfigurationError("Gemini API key is not configured", config_key="GEMINI_API_KEY")

        log.debug("Calling %s with %s image (%d base64 chars)", self.config.model, image.mime_type, len(image.data))

        try:
            response = await self._client.aio.models.generate_content(
                model=self.config.model,
                contents=[self._to_part(image), prompt],
                config=types.GenerateContentConfig(
                    temperature=self.config.temperature,
                    response_mime_type="application/json",
                    response_schema=RESPONSE_SCHEMA,
                ),
            )
        except errors.APIError as e:
            raise CollaboratorError(f"Gemini API error {e.code}: {e.message}", engine=self.name) from e

        return response.text or ""
