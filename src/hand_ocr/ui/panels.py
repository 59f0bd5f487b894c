"""Result display for hand-ocr."""

from rich.console import Group
from rich.table import Table
from rich.text import Text

from hand_ocr.core.result import TranscriptionResult
from hand_ocr.core.table import chartability

CHART_LABELS = {
    "ColumnChart": "column",
    "BarChart": "bar",
    "PieChart": "pie",
}


class ResultPanel:
    """Transcribed text, and for tables a grid plus chart suggestions."""

    def __init__(self, result: TranscriptionResult):
        self.result = result

    def _table(self) -> Table:
        grid = self.result.table_data or []
        header, rows = grid[0], grid[1:]
        width = max(len(row) for row in grid)

        table = Table(show_lines=False, header_style="table.header", border_style="dim")
        for i in range(width):
            table.add_column(Text(header[i]) if i < len(header) else Text())
        for row in rows:
            padded = row + [""] * (width - len(row))
            table.add_row(*(Text(cell) for cell in padded))
        return table

    def render(self) -> Group:
        """Render the result."""
        lines: list = []

        lines.append(Text("conversion result", style="header"))
        lines.append(Text())
        lines.append(Text(self.result.text_content or "(no text found)"))
        lines.append(Text())

        if self.result.has_table:
            lines.append(self._table())
            charts = chartability(self.result.table_data)
            if charts.is_chartable:
                labels = ", ".join(CHART_LABELS[c] for c in charts.suitable_charts)
                lines.append(Text(f"    chartable: {labels}", style="dim"))
        elif self.result.is_table:
            lines.append(Text("    table detected, but no cells were returned", style="warning"))

        elapsed = self.result.metadata.get("processing_time")
        if elapsed is not None:
            lines.append(Text(f"    {elapsed:.1f}s, {self.result.word_count} words", style="dim"))

        return Group(*lines)
