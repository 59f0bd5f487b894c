"""CLI for hand-ocr - handwriting to text and CSV."""

import asyncio
import json
from pathlib import Path

import click
from rich.console import Console

from hand_ocr import __version__
from hand_ocr.core.config import AppConfig
from hand_ocr.core.errors import HandOcrError
from hand_ocr.core.result import CropRectangle, ImagePayload
from hand_ocr.core.table import parse_csv
from hand_ocr.engines.gemini import GeminiEngine
from hand_ocr.imaging.cropper import crop_payload
from hand_ocr.imaging.decoder import open_bitmap
from hand_ocr.imaging.resizer import resize_payload
from hand_ocr.pipeline.client import TranscriptionClient
from hand_ocr.pipeline.export import to_csv
from hand_ocr.pipeline.session import Session
from hand_ocr.ui.console import AppConsole, setup_logging
from hand_ocr.ui.panels import ResultPanel
from hand_ocr.ui.theme import APP_THEME


console = Console(theme=APP_THEME)


def _parse_crop(ctx: click.Context, param: click.Parameter, value: str | None) -> tuple[float, ...] | None:
    if value is None:
        return None
    try:
        parts = tuple(float(p) for p in value.split(","))
    except ValueError:
        raise click.BadParameter("expected X,Y,WIDTH,HEIGHT numbers")
    if len(parts) != 4:
        raise click.BadParameter("expected X,Y,WIDTH,HEIGHT")
    return parts


def _parse_size(ctx: click.Context, param: click.Parameter, value: str | None) -> tuple[float, float] | None:
    if value is None:
        return None
    try:
        width, height = (float(p) for p in value.lower().split("x"))
    except ValueError:
        raise click.BadParameter("expected WIDTHxHEIGHT, e.g. 800x600")
    return width, height


def _load_config(config_path: Path | None) -> AppConfig:
    try:
        return AppConfig.from_file(config_path) if config_path else AppConfig()
    except HandOcrError as e:
        raise click.ClickException(e.message)


def _image_size(payload: ImagePayload) -> tuple[int, int]:
    with open_bitmap(payload) as bitmap:
        return bitmap.size


def _crop_rect(
    crop: tuple[float, ...],
    display: tuple[float, float] | None,
    payload: ImagePayload,
) -> CropRectangle:
    """Crop selection; without --display it is taken to be in image pixels."""
    if display is None:
        display = _image_size(payload)
    x, y, width, height = crop
    return CropRectangle(
        x=x,
        y=y,
        width=width,
        height=height,
        display_width=display[0],
        display_height=display[1],
    )


def _fail(ui: AppConsole, message: str) -> None:
    ui.print_error(message)
    raise click.ClickException(message)


crop_option = click.option(
    "--crop",
    callback=_parse_crop,
    metavar="X,Y,W,H",
    help="Crop selection, in display pixels (see --display)",
)
display_option = click.option(
    "--display",
    callback=_parse_size,
    metavar="WxH",
    help="Size the crop was measured on (default: the image's own size)",
)


@click.group()
@click.version_option(version=__version__, prog_name="hand-ocr")
def cli() -> None:
    """hand-ocr - Handwriting transcription with Gemini.

    Crop and downsize a photo of handwriting, transcribe it, and save
    any table it contains as CSV.
    """
    pass


@cli.command()
@click.argument("image_path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@crop_option
@display_option
@click.option("--max-dim", type=int, help="Longest edge sent to the model (default: 2048)")
@click.option("--timeout", type=float, help="Seconds to wait for the model (default: 90)")
@click.option("--model", help="Gemini model name")
@click.option(
    "-o", "--output-dir",
    type=click.Path(file_okay=False, path_type=Path),
    help="Where CSV tables are saved (default: output/)",
)
@click.option("--no-csv", is_flag=True, help="Do not save detected tables")
@click.option("--edit", is_flag=True, help="Edit the text and table in $EDITOR before saving")
@click.option("--json", "json_output", is_flag=True, help="Print the raw result as JSON")
@click.option("--config", "config_path", type=click.Path(exists=True, path_type=Path), help="YAML config file")
@click.option("-v", "--verbose", is_flag=True, help="Enable verbose output")
def transcribe(
    image_path: Path,
    crop: tuple[float, ...] | None,
    display: tuple[float, float] | None,
    max_dim: int | None,
    timeout: float | None,
    model: str | None,
    output_dir: Path | None,
    no_csv: bool,
    edit: bool,
    json_output: bool,
    config_path: Path | None,
    verbose: bool,
) -> None:
    """Transcribe the handwriting in an image.

    Example:
        hand-ocr transcribe notes.jpg --crop 200,150,1000,800 --display 800x600
    """
    config = _load_config(config_path)
    config.verbose = config.verbose or verbose
    if max_dim is not None:
        config.image.max_dimension = max_dim
    if timeout is not None:
        config.gemini.timeout = timeout
    if model:
        config.gemini.model = model
    if output_dir:
        config.export.output_dir = output_dir

    ui = AppConsole(verbose=config.verbose, console=console)
    setup_logging(console, config.verbose)

    try:
        config.require_api_key()
    except HandOcrError as e:
        _fail(ui, e.message)

    client = TranscriptionClient(GeminiEngine(config.gemini), timeout=config.gemini.timeout)
    session = Session(client, max_dimension=config.image.max_dimension, output_dir=config.export.output_dir)

    payload = ImagePayload.from_file(image_path)
    session.select_image(payload)

    if not json_output:
        ui.print_header()
        ui.print_image_info(payload)

    if crop:
        try:
            rect = _crop_rect(crop, display, payload)
        except HandOcrError as e:
            _fail(ui, e.message)
        if session.confirm_crop(rect) is None:
            _fail(ui, session.error or "Cropping failed")
        ui.print_info(f"cropped to {session.image.size_kb:.1f} KB")

    if not json_output:
        ui.print_engine_active("gemini", config.gemini.model)

    try:
        with console.status("[dim]analyzing your handwriting...[/dim]", spinner="dots"):
            result = asyncio.run(session.convert())
    except KeyboardInterrupt:
        ui.print_warning("cancelled")
        raise click.Abort()

    if result is None:
        _fail(ui, session.error or "Conversion failed")

    if edit:
        edited_text = click.edit(result.text_content)
        if edited_text is not None:
            session.edit_text(edited_text.rstrip("\n"))
        if result.has_table:
            edited_csv = click.edit(to_csv(result.table_data), extension=".csv")
            if edited_csv is not None:
                session.edit_table(parse_csv(edited_csv))

    if json_output:
        click.echo(json.dumps(result.to_dict(), indent=2, ensure_ascii=False))
    else:
        console.print()
        console.print(ResultPanel(result).render())

    if result.has_table and not no_csv:
        saved = session.export_table()
        if saved is None and session.error:
            _fail(ui, session.error)
        if saved is not None and not json_output:
            console.print()
            ui.print_saved(str(saved))


@cli.command()
@click.argument("image_path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@crop_option
@display_option
@click.option("-o", "--output", type=click.Path(dir_okay=False, path_type=Path), help="Output PNG path")
def crop(
    image_path: Path,
    crop: tuple[float, ...] | None,
    display: tuple[float, float] | None,
    output: Path | None,
) -> None:
    """Crop an image to a selection and save it as PNG.

    Example:
        hand-ocr crop notes.jpg --crop 200,150,1000,800 --display 800x600
    """
    ui = AppConsole(console=console)
    if crop is None:
        raise click.UsageError("--crop is required")

    payload = ImagePayload.from_file(image_path)
    try:
        rect = _crop_rect(crop, display, payload)
        rect.validate()
        cropped = crop_payload(payload, rect)
    except HandOcrError as e:
        _fail(ui, e.message)

    output = output or image_path.with_name(f"{payload.stem}_cropped.png")
    output.write_bytes(cropped.data)
    width, height = _image_size(cropped)
    ui.print_stage_result("success", f"{width}x{height}", f"{cropped.size_kb:.1f} KB")
    ui.print_saved(str(output))


@cli.command()
@click.argument("image_path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--max-dim", type=int, default=2048, show_default=True, help="Longest edge in pixels")
@click.option("-o", "--output", type=click.Path(dir_okay=False, path_type=Path), help="Output path")
def resize(image_path: Path, max_dim: int, output: Path | None) -> None:
    """Downscale an image so its longest edge fits --max-dim.

    Example:
        hand-ocr resize scan.png --max-dim 1024
    """
    ui = AppConsole(console=console)
    payload = ImagePayload.from_file(image_path)
    try:
        resized = resize_payload(payload, max_dim)
    except HandOcrError as e:
        _fail(ui, e.message)

    if resized is payload:
        ui.print_stage_result("skipped", payload.filename, f"already within {max_dim}px")
        return

    output = output or image_path.with_name(f"{payload.stem}_resized{image_path.suffix}")
    output.write_bytes(resized.data)
    width, height = _image_size(resized)
    ui.print_stage_result("success", f"{width}x{height}", f"{resized.size_kb:.1f} KB")
    ui.print_saved(str(output))


@cli.command()
@click.option("--config", "config_path", type=click.Path(exists=True, path_type=Path), help="YAML config file")
def check(config_path: Path | None) -> None:
    """Show whether the Gemini engine is configured."""
    config = _load_config(config_path)
    console.print("\n[header]engine[/header]\n")

    engine = GeminiEngine(config.gemini)
    available = engine.is_available()

    status = "+" if available else "x"
    style = "success" if available else "error"
    console.print(f"  [{style}]\\[{status}][/{style}] [gemini]gemini[/gemini] [dim]{config.gemini.model}[/dim]")

    if not available:
        console.print("\n  [warning]set GEMINI_API_KEY to enable transcription[/warning]")


def main() -> None:
    """Entry point."""
    cli()


if __name__ == "__main__":
    main()
