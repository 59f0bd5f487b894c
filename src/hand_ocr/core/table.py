"""Helpers for table grids returned by the model."""

import csv
import io
import math
import re
from dataclasses import dataclass, field

from hand_ocr.core.result import TableGrid


@dataclass
class Chartability:
    """Whether a grid can be plotted, and with which chart types."""

    is_chartable: bool = False
    suitable_charts: list[str] = field(default_factory=list)


# Leading decimal number; trailing units or notes are ignored ("12kg" reads as 12).
_LEADING_NUMBER = re.compile(r"\s*[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?")


def _is_number(value: str) -> bool:
    match = _LEADING_NUMBER.match(value or "")
    if match is None:
        return False
    return math.isfinite(float(match.group()))


def chartability(grid: TableGrid | None) -> Chartability:
    """Decide whether a grid looks like labelled numeric data.

    The first row is the header and the first column holds labels; the grid
    is chartable when the first data row has at least one numeric value.
    """
    if not grid or len(grid) < 2 or len(grid[0]) < 2:
        return Chartability()

    numeric_columns = sum(1 for cell in grid[1][1:] if _is_number(cell))
    if numeric_columns == 0:
        return Chartability()

    charts = ["ColumnChart", "BarChart"]
    if len(grid[0]) == 2:
        charts.append("PieChart")
    return Chartability(is_chartable=True, suitable_charts=charts)


def parse_csv(text: str) -> TableGrid:
    """Parse edited CSV text back into a grid, dropping blank trailing lines."""
    rows = list(csv.reader(io.StringIO(text)))
    while rows and not any(cell.strip() for cell in rows[-1]):
        rows.pop()
    return rows
