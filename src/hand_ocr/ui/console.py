"""Minimal console interface for hand-ocr."""

import logging

from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.text import Text

from hand_ocr import __version__
from hand_ocr.core.result import ImagePayload
from hand_ocr.ui.theme import APP_THEME, ENGINE_LABELS, STATUS_ICONS


def setup_logging(console: Console, verbose: bool = False) -> None:
    """Route library logging through rich; DEBUG when verbose, else warnings only."""
    handler = RichHandler(console=console, show_path=verbose, markup=False, rich_tracebacks=True)
    root = logging.getLogger("hand_ocr")
    root.handlers[:] = [handler]
    root.setLevel(logging.DEBUG if verbose else logging.WARNING)
    root.propagate = False


class AppConsole:
    """Minimal terminal interface for hand-ocr."""

    def __init__(self, verbose: bool = False, console: Console | None = None):
        self.console = console or Console(theme=APP_THEME)
        self.verbose = verbose

    def print_header(self) -> None:
        """Print minimal header."""
        self.console.print()
        self.console.print(f"[dim]hand-ocr v{__version__}[/dim]")
        self.console.print()

    def print_image_info(self, payload: ImagePayload, size: tuple[int, int] | None = None) -> None:
        """Print what was loaded."""
        self.console.print(f"[header]{escape(payload.filename)}[/header]")
        line = f"[dim]{payload.mime_type}, {payload.size_kb:.1f} KB"
        if size:
            line += f", {size[0]}x{size[1]} px"
        self.console.print(line + "[/dim]")

    def print_stage_result(self, status: str, item: str, message: str = "") -> None:
        """Print one stage outcome line."""
        icon = STATUS_ICONS.get(status, ".")
        line = Text("    ")
        line.append(f"[{icon}] ", style=status)
        line.append(item)
        if message:
            line.append(f" {message}", style="dim")
        self.console.print(line)

    def print_engine_active(self, engine: str, model: str = "") -> None:
        """Print which engine is active."""
        label = ENGINE_LABELS.get(engine, engine)
        line = f"    [{engine}]{label}[/{engine}]"
        if model:
            line += f" [dim]{model}[/dim]"
        self.console.print(line)

    def print_saved(self, path: str) -> None:
        self.console.print(f"[dim]->[/dim] {escape(path)}")

    def print_error(self, message: str) -> None:
        """Print an error message."""
        self.console.print(f"[error]\\[x] {escape(message)}[/error]")

    def print_warning(self, message: str) -> None:
        """Print a warning message."""
        self.console.print(f"[warning][!] {escape(message)}[/warning]")

    def print_info(self, message: str) -> None:
        """Print an info message."""
        if self.verbose:
            self.console.print(f"[dim]    {escape(message)}[/dim]")
