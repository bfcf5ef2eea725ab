"""Formats command: list supported target formats."""

from rich.console import Console
from rich.table import Table

from fchanger.image.formats import FORMAT_SPECS, is_encoder_available

console = Console()


def formats() -> None:
    """Show supported target formats and whether this install can write them."""
    table = Table(show_header=True, header_style="bold")
    table.add_column("Format", style="cyan")
    table.add_column("Extension")
    table.add_column("MIME Type")
    table.add_column("Alpha")
    table.add_column("Quality")
    table.add_column("Available")

    for fmt, spec in FORMAT_SPECS.items():
        table.add_row(
            fmt.value.upper(),
            f".{spec.extension}",
            spec.mime_type,
            "yes" if spec.supports_alpha else "no",
            "yes" if spec.has_quality_axis else "-",
            "[green]yes[/green]" if is_encoder_available(fmt) else "[red]no[/red]",
        )

    console.print(table)
