"""Data structures passed between pipeline stages."""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from hand_ocr.core.errors import InvalidInputError, SchemaViolationError

TableGrid = list[list[str]]


@dataclass(frozen=True)
class ImagePayload:
    """Encoded image bytes plus their declared media type."""

    data: bytes
    mime_type: str
    filename: str = "image"

    @property
    def size_kb(self) -> float:
        return len(self.data) / 1024

    @property
    def stem(self) -> str:
        return Path(self.filename).stem or "image"

    @property
    def is_image(self) -> bool:
        return self.mime_type.lower().startswith("image/")

    def require_image(self) -> None:
        """Reject anything whose declared media type is not an image."""
        if not self.is_image:
            raise InvalidInputError(
                "Invalid file type. Please upload an image.",
                details={"filename": self.filename, "mime_type": self.mime_type},
            )

    @classmethod
    def from_file(cls, path: Path | str, mime_type: str | None = None) -> "ImagePayload":
        """Load a file from disk, guessing the media type from its name."""
        import mimetypes

        path = Path(path)
        if mime_type is None:
            mime_type = mimetypes.guess_type(path.name)[0] or "application/octet-stream"
        return cls(data=path.read_bytes(), mime_type=mime_type, filename=path.name)


@dataclass(frozen=True)
class CropRectangle:
    """Crop selection, measured against a display of known size.

    After mapping, display_width/display_height hold the source bitmap size
    and the rectangle is in source pixels.
    """

    x: float
    y: float
    width: float
    height: float
    display_width: float
    display_height: float

    @property
    def box(self) -> tuple[float, float, float, float]:
        """Pillow-style (left, upper, right, lower) box."""
        return (self.x, self.y, self.x + self.width, self.y + self.height)

    def validate(self) -> None:
        """Check the selection may be confirmed."""
        if self.width <= 0 or self.height <= 0:
            raise InvalidInputError("Crop selection must have a positive width and height.")
        if self.x < 0 or self.y < 0:
            raise InvalidInputError("Crop selection cannot start outside the image.")
        if self.x + self.width > self.display_width or self.y + self.height > self.display_height:
            raise InvalidInputError(
                "Crop selection extends past the image edge.",
                details={
                    "crop": (self.x, self.y, self.width, self.height),
                    "display": (self.display_width, self.display_height),
                },
            )


@dataclass
class TranscriptionResult:
    """Structured transcription returned by the model."""

    is_table: bool
    text_content: str
    table_data: TableGrid | None = None
    metadata: dict[str, Any] = field(default_factory=dict)

    @property
    def has_table(self) -> bool:
        """True only when there is table data worth exporting."""
        return bool(self.is_table and self.table_data)

    @property
    def word_count(self) -> int:
        return len(self.text_content.split()) if self.text_content else 0

    @classmethod
    def from_dict(cls, data: Any) -> "TranscriptionResult":
        """Validate the wire shape ({isTable, textContent, tableData}).

        isTable and textContent are checked strictly; nothing is coerced.
        A missing or null tableData is kept as None.
        """
        if not isinstance(data, dict):
            raise SchemaViolationError(
                f"Expected a JSON object from the AI model, got {type(data).__name__}."
            )

        is_table = data.get("isTable")
        text_content = data.get("textContent")
        # bool check first: isinstance(True, int) would also pass an int test
        if not isinstance(is_table, bool):
            raise SchemaViolationError("Invalid JSON structure received from API: 'isTable' must be a boolean.")
        if not isinstance(text_content, str):
            raise SchemaViolationError("Invalid JSON structure received from API: 'textContent' must be a string.")

        return cls(
            is_table=is_table,
            text_content=text_content,
            table_data=_parse_table(data.get("tableData")),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "isTable": self.is_table,
            "textContent": self.text_content,
            "tableData": self.table_data,
        }


def _parse_table(raw: Any) -> TableGrid | None:
    if raw is None:
        return None
    if not isinstance(raw, list) or not all(isinstance(row, list) for row in raw):
        raise SchemaViolationError("Invalid JSON structure received from API: 'tableData' must be an array of rows.")

    grid: TableGrid = []
    for row in raw:
        grid.append(["" if cell is None else str(cell) for cell in row])
    return grid
