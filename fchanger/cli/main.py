"""Main CLI application using Typer."""

from typing import Annotated

import typer
from dotenv import load_dotenv
from rich.console import Console

from fchanger import __version__
from fchanger.cli.commands.config import config_app
from fchanger.cli.commands.convert import convert
from fchanger.cli.commands.formats import formats

# Load environment variables from .env file
load_dotenv()

app = typer.Typer(
    name="fchanger",
    help="Batch image format converter with optional AI renaming.",
    add_completion=False,
    no_args_is_help=True,
    rich_markup_mode="rich",
    context_settings={"help_option_names": ["-h", "--help"]},
)

console = Console()

app.command(name="convert", help="Convert up to five images to another format.")(convert)
app.command(name="formats", help="List supported target formats.")(formats)
app.add_typer(config_app, name="config")


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        console.print(f"[bold blue]Fchanger[/bold blue] version [green]{__version__}[/green]")
        raise typer.Exit()


@app.callback()
def main(
    version: Annotated[
        bool | None,
        typer.Option(
            "--version",
            "-V",
            help="Show version and exit.",
            callback=version_callback,
            is_eager=True,
        ),
    ] = None,
) -> None:
    """Fchanger - convert images between PNG, JPEG, WEBP, BMP, AVIF and GIF."""
    pass


if __name__ == "__main__":
    app()
