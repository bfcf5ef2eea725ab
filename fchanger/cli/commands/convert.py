"""Convert command: re-encode up to five images into one target format."""

import asyncio
from functools import partial
from pathlib import Path
from typing import Annotated

import anyio
import typer
from rich.console import Console
from rich.progress import BarColumn, Progress, SpinnerColumn, TaskProgressColumn, TextColumn
from rich.table import Table

from fchanger.config import FchangerSettings, get_settings
from fchanger.config.constants import ENRICHMENT_PROVIDERS
from fchanger.core.batch import ConversionBatch
from fchanger.core.intake import load_sources
from fchanger.core.models import ConversionOptions
from fchanger.core.state import ConversionItem, ItemStatus
from fchanger.enrichment import ImageMetadataAnalyzer, MetadataEnricher
from fchanger.exceptions import ConfigurationError, InvalidQualityError, UnsupportedFormatError
from fchanger.image.formats import SupportedFormat, is_encoder_available
from fchanger.llm import create_provider
from fchanger.utils.fs import save_artifact
from fchanger.utils.logging import get_logger, setup_task_logging

console = Console()
log = get_logger(__name__)

_STATUS_STYLE = {
    ItemStatus.IDLE: "[dim]Pending[/dim]",
    ItemStatus.CONVERTING: "[blue]Processing[/blue]",
    ItemStatus.SUCCESS: "[green]Converted[/green]",
    ItemStatus.ERROR: "[red]Failed[/red]",
}


def convert(
    files: Annotated[
        list[Path],
        typer.Argument(
            help="Image files to convert (at most five are processed).",
            exists=True,
            file_okay=True,
            dir_okay=False,
            readable=True,
            resolve_path=True,
        ),
    ],
    target_format: Annotated[
        str | None,
        typer.Option(
            "--format",
            "-f",
            help=f"Target format. Options: {', '.join(f.value for f in SupportedFormat)}",
        ),
    ] = None,
    quality: Annotated[
        float | None,
        typer.Option(
            "--quality",
            "-q",
            help="Quality between 0.0 and 1.0 (JPEG, WEBP and AVIF only).",
        ),
    ] = None,
    output: Annotated[
        Path | None,
        typer.Option(
            "--output",
            "-o",
            help="Output directory for converted files.",
            file_okay=False,
            dir_okay=True,
            resolve_path=True,
        ),
    ] = None,
    smart_name: Annotated[
        bool,
        typer.Option(
            "--smart-name",
            help="Ask the configured AI provider for SEO-friendly filenames.",
        ),
    ] = False,
    provider: Annotated[
        str | None,
        typer.Option(
            "--provider",
            help=f"AI provider for --smart-name. Options: {', '.join(ENRICHMENT_PROVIDERS)}",
        ),
    ] = None,
    model: Annotated[
        str | None,
        typer.Option(
            "--model",
            help="AI model name for --smart-name.",
        ),
    ] = None,
    on_conflict: Annotated[
        str | None,
        typer.Option(
            "--on-conflict",
            help="What to do when an output file exists: rename, overwrite or skip.",
        ),
    ] = None,
    verbose: Annotated[
        bool,
        typer.Option(
            "--verbose",
            "-v",
            help="Enable verbose output.",
        ),
    ] = False,
) -> None:
    """Convert images to another format.

    Examples:
        fchanger convert photo.png -f webp
        fchanger convert a.png b.gif -f jpg -q 0.85 -o ./out
        fchanger convert scan.bmp -f png --smart-name
    """
    settings = get_settings()
    task_id, log_path = setup_task_logging(
        log_dir=settings.log_dir,
        prefix="convert",
        verbose=verbose,
    )
    if verbose:
        log.info("Logs will be saved to", log_file=str(log_path))
    log.info("Task Configuration", task_id=task_id, config=settings.masked_dump())

    options = _build_options(settings, target_format, quality)
    policy = on_conflict or settings.output.on_conflict
    if policy not in ("rename", "overwrite", "skip"):
        raise typer.BadParameter(
            f"Invalid conflict policy '{policy}'. Options: rename, overwrite, skip",
            param_hint="--on-conflict",
        )

    if not is_encoder_available(options.format):
        console.print(
            f"[red]Error:[/red] This Pillow build cannot write {options.format.value.upper()}."
        )
        raise typer.Exit(1)

    batch, intake = ConversionBatch.accept(
        load_sources(files), max_items=settings.conversion.max_batch_size
    )
    for warning in intake.warnings:
        console.print(f"[yellow]Warning:[/yellow] {warning}")
    if not len(batch):
        raise typer.Exit(1)

    enricher = _build_enricher(settings, provider, model) if smart_name else None
    output_dir = output or settings.get_output_dir()

    try:
        asyncio.run(_execute(batch, options, enricher))
    except KeyboardInterrupt:
        console.print("\n[yellow]Interrupted. Exiting...[/yellow]")
        raise typer.Exit(130) from None

    written: dict[str, Path | None] = {}
    for item in batch:
        if item.status is ItemStatus.SUCCESS:
            written[item.id] = save_artifact(batch.download(item.id), output_dir, policy)

    _show_results(batch.items, written, options)

    if not written:
        raise typer.Exit(1)


def _build_options(
    settings: FchangerSettings, target_format: str | None, quality: float | None
) -> ConversionOptions:
    """Resolve CLI overrides against configured defaults."""
    try:
        fmt = SupportedFormat.parse(target_format or settings.conversion.default_format)
    except UnsupportedFormatError as e:
        raise typer.BadParameter(str(e), param_hint="--format") from e

    try:
        return ConversionOptions(
            format=fmt,
            quality=settings.conversion.default_quality if quality is None else quality,
        ).validate()
    except InvalidQualityError as e:
        raise typer.BadParameter(str(e), param_hint="--quality") from e


def _build_enricher(
    settings: FchangerSettings, provider: str | None, model: str | None
) -> MetadataEnricher:
    if provider is not None and provider not in ENRICHMENT_PROVIDERS:
        raise typer.BadParameter(
            f"Invalid provider '{provider}'. Options: {', '.join(ENRICHMENT_PROVIDERS)}",
            param_hint="--provider",
        )

    overrides: dict[str, str] = {}
    if provider:
        overrides["provider"] = provider
    if model:
        overrides["model"] = model
    config = settings.enrichment.model_copy(update=overrides)

    try:
        return ImageMetadataAnalyzer(
            create_provider(config), max_alt_text_length=config.max_alt_text_length
        )
    except ConfigurationError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1) from e


async def _execute(
    batch: ConversionBatch, options: ConversionOptions, enricher: MetadataEnricher | None
) -> None:
    """Run conversion and, if requested, enrichment side by side."""
    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        BarColumn(),
        TaskProgressColumn(),
        console=console,
        transient=True,
    ) as progress:
        task = progress.add_task(
            f"Converting to {options.format.value.upper()}...", total=len(batch)
        )

        def _advance(_item: ConversionItem) -> None:
            progress.advance(task)

        async with anyio.create_task_group() as tg:
            tg.start_soon(partial(batch.run, options, on_item_done=_advance))
            if enricher is not None:
                tg.start_soon(batch.analyze_all, enricher)


def _show_results(
    items: list[ConversionItem], written: dict[str, Path | None], options: ConversionOptions
) -> None:
    table = Table(show_header=True, header_style="bold")
    table.add_column("Source", style="cyan")
    table.add_column("Status")
    table.add_column("Output")
    table.add_column("Size", justify="right")

    for item in items:
        if item.id in written:
            path = written[item.id]
            target = str(path) if path is not None else "[dim]skipped (exists)[/dim]"
            size = _format_file_size(item.output.size) if item.output else ""
        else:
            target = item.error or ""
            size = ""
        table.add_row(item.source.name, _STATUS_STYLE[item.status], target, size)

    console.print(table)
    succeeded = sum(1 for item in items if item.status is ItemStatus.SUCCESS)
    console.print(
        f"[bold]{succeeded}/{len(items)}[/bold] converted to {options.format.value.upper()}"
    )


def _format_file_size(size: int) -> str:
    """Human-readable size, e.g. ``1.5 KB``."""
    if size == 0:
        return "0 Bytes"
    value = float(size)
    for unit in ("Bytes", "KB", "MB"):
        if value < 1024:
            return f"{value:.2f}".rstrip("0").rstrip(".") + f" {unit}"
        value /= 1024
    return f"{value:.2f}".rstrip("0").rstrip(".") + " GB"
