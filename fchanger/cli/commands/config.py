"""Config command for configuration management."""

import json

import typer
from rich.console import Console

from fchanger.config import get_settings
from fchanger.config.constants import CONFIG_LOCATIONS

config_app = typer.Typer(help="Configuration management.")
console = Console()


@config_app.command("show")
def show() -> None:
    """Show the effective configuration as JSON (API keys masked)."""
    settings = get_settings()
    console.print_json(json.dumps(settings.masked_dump()))


@config_app.command("path")
def path() -> None:
    """Show where configuration files are looked up."""
    for location in CONFIG_LOCATIONS:
        marker = "[green]found[/green]" if location.exists() else "[dim]missing[/dim]"
        console.print(f"{location}  {marker}")
