"""Single-user session: the flow controller tying the pipeline stages together.

Holds the uploaded image, the confirmed crop, the last result and the error
message shown to the user. Stage failures are turned into one message here;
the image and crop survive a failure so the user can retry.

Every conversion takes a new generation number. A conversion that finishes
after a newer one started (or after a reset) is dropped instead of
overwriting newer state.
"""

import logging
from datetime import date
from pathlib import Path

from hand_ocr.core.errors import HandOcrError
from hand_ocr.core.result import CropRectangle, ImagePayload, TableGrid, TranscriptionResult
from hand_ocr.imaging.cropper import crop_payload
from hand_ocr.imaging.decoder import format_for_mime
from hand_ocr.imaging.resizer import resize_payload
from hand_ocr.pipeline.client import TranscriptionClient
from hand_ocr.pipeline.export import default_filename, export_csv

log = logging.getLogger(__name__)

NO_IMAGE_MESSAGE = "Please select an image first."


class Session:
    """In-memory state for one image-to-text flow."""

    def __init__(
        self,
        client: TranscriptionClient,
        max_dimension: int = 2048,
        output_dir: Path | str = "output",
    ) -> None:
        self.client = client
        self.max_dimension = max_dimension
        self.output_dir = Path(output_dir)

        self.original: ImagePayload | None = None
        self.image: ImagePayload | None = None
        self.crop: CropRectangle | None = None
        self.result: TranscriptionResult | None = None
        self.error: str | None = None
        self.is_loading = False
        self._generation = 0

    @property
    def generation(self) -> int:
        return self._generation

    def select_image(self, payload: ImagePayload) -> None:
        """Start over with a newly uploaded image."""
        self._supersede()
        self.original = payload
        self.image = payload
        self.crop = None
        self.result = None
        self.error = None
        log.debug("Selected %s (%s, %.1f KB)", payload.filename, payload.mime_type, payload.size_kb)

    def confirm_crop(self, rect: CropRectangle) -> ImagePayload | None:
        """Crop the uploaded image; the crop replaces the image to convert."""
        if self.original is None:
            self.error = NO_IMAGE_MESSAGE
            return None

        try:
            rect.validate()
            cropped = crop_payload(self.original, rect)
        except HandOcrError as e:
            log.warning("Cropping failed: %s", e)
            self.error = f"Failed to crop image: {e.message}"
            return None

        self._supersede()
        self.image = cropped
        self.crop = rect
        self.result = None
        self.error = None
        return cropped

    def cancel_crop(self) -> None:
        """Drop the crop and go back to the uploaded image."""
        self._supersede()
        self.image = self.original
        self.crop = None

    async def convert(self) -> TranscriptionResult | None:
        """Downscale and transcribe the current image.

        Returns the result, or None when the conversion failed (see
        self.error) or was superseded.
        """
        if self.image is None:
            self.error = NO_IMAGE_MESSAGE
            return None

        self._generation += 1
        generation = self._generation
        self.is_loading = True
        self.error = None
        self.result = None

        try:
            prepared = self._prepare(self.image)
            result = await self.client.transcribe(prepared)
        except HandOcrError as e:
            log.debug("Conversion #%d failed", generation, exc_info=True)
            if generation == self._generation:
                self.error = f"Failed to process image: {e.message}"
            return None
        finally:
            if generation == self._generation:
                self.is_loading = False

        if generation != self._generation:
            log.info("Dropping result of conversion #%d; #%d is current", generation, self._generation)
            return None

        self.result = result
        return result

    def _prepare(self, payload: ImagePayload) -> ImagePayload:
        # Types the resizer cannot decode still go to the model as they are.
        if payload.is_image and format_for_mime(payload.mime_type) is None:
            log.info("Sending %s (%s) without resizing", payload.filename, payload.mime_type)
            return payload
        return resize_payload(payload, self.max_dimension)

    def _supersede(self) -> None:
        """Invalidate any conversion still running; its result will be dropped."""
        self._generation += 1
        self.is_loading = False

    def edit_text(self, text: str) -> None:
        if self.result is not None:
            self.result.text_content = text

    def edit_table(self, grid: TableGrid) -> None:
        if self.result is not None:
            self.result.table_data = grid

    def export_table(self, today: date | None = None) -> Path | None:
        """Save the current table as CSV; no-op unless a table exists."""
        if self.result is None or not self.result.has_table:
            return None

        try:
            return export_csv(self.result.table_data, default_filename(today), self.output_dir)
        except HandOcrError as e:
            self.error = f"Failed to export table: {e.message}"
            return None

    def dismiss_error(self) -> None:
        self.error = None

    def reset(self) -> None:
        """Clear everything; any conversion still running is superseded."""
        self._supersede()
        self.original = None
        self.image = None
        self.crop = None
        self.result = None
        self.error = None
