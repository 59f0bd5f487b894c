"""CSV export for transcribed tables."""

import logging
from datetime import date, datetime, timezone
from pathlib import Path
from typing import Sequence

from hand_ocr.core.errors import HandOcrError

log = logging.getLogger(__name__)

CSV_MIME_TYPE = "text/csv;charset=utf-8"
FILENAME_PREFIX = "handwriting_table_"

_NEEDS_QUOTING = (",", '"', "\n", "\r")


def default_filename(today: date | None = None) -> str:
    """handwriting_table_<YYYY-MM-DD>.csv, dated in UTC by default."""
    today = today or datetime.now(timezone.utc).date()
    return f"{FILENAME_PREFIX}{today.isoformat()}.csv"


def escape_cell(cell: str | None) -> str:
    """Quote a cell only if it holds a comma, a double quote or a line break."""
    text = "" if cell is None else str(cell)
    if any(ch in text for ch in _NEEDS_QUOTING):
        return '"' + text.replace('"', '""') + '"'
    return text


def to_csv(grid: Sequence[Sequence[str | None]]) -> str:
    """Serialize a grid: cells joined by commas, rows by single newlines."""
    return "\n".join(",".join(escape_cell(cell) for cell in row) for row in grid)


def export_csv(
    grid: Sequence[Sequence[str | None]] | None,
    filename: str | None = None,
    directory: Path | str = ".",
) -> Path | None:
    """Write a grid as a UTF-8 CSV file and return its path.

    An empty or missing grid is silently skipped and None is returned; callers
    only export when they believe a table exists.
    """
    if not grid:
        return None

    directory = Path(directory)
    path = directory / (filename or default_filename())
    try:
        directory.mkdir(parents=True, exist_ok=True)
        path.write_bytes(to_csv(grid).encode("utf-8"))
    except OSError as e:
        raise HandOcrError(f"Could not save {path}: {e}", details={"path": str(path)}) from e

    log.info("Exported %d rows to %s", len(grid), path)
    return path
