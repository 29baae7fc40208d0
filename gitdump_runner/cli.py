"""Thin CLI wrapper for gitdump_runner.

This module provides the command-line interface using Typer.
All business logic is delegated to core modules.
"""

import logging
from typing import Annotated

import typer
from rich.console import Console
from rich.markup import escape

from gitdump_runner import __version__
from gitdump_runner.config import get_settings, print_settings_json
from gitdump_runner.errors import GitDumpError

app = typer.Typer(
    name="gitdump",
    help="Dump an exposed .git directory using git-dumper in a container",
    add_completion=False,
)
console = Console()
err_console = Console(stderr=True)

LOG_FORMAT = "%(levelname)s %(name)s: %(message)s"


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        console.print(f"git-dump-runner version {__version__}")
        raise typer.Exit()


def show_config_callback(value: bool) -> None:
    """Print effective configuration as JSON and exit."""
    if value:
        console.print(print_settings_json(), highlight=False)
        raise typer.Exit()


def configure_logging(level: str) -> None:
    """Configure root logging for the CLI."""
    logging.basicConfig(format=LOG_FORMAT, level=level)


@app.command()
def main(
    url: Annotated[
        str | None,
        typer.Option("-u", "--url", help="Source .git URL"),
    ] = None,
    output: Annotated[
        str | None,
        typer.Option("-o", "--output", help="Output directory"),
    ] = None,
    version: Annotated[
        bool | None,
        typer.Option(
            "--version",
            "-V",
            help="Show version and exit",
            callback=version_callback,
            is_eager=True,
        ),
    ] = None,
    show_config: Annotated[
        bool | None,
        typer.Option(
            "--show-config",
            help="Show effective configuration as JSON and exit",
            callback=show_config_callback,
            is_eager=True,
        ),
    ] = None,
) -> None:
    """Build the git-dumper image, run it against URL, and save into OUTPUT."""
    from gitdump_runner.service import dump_repository

    settings = get_settings()
    configure_logging(settings.log_level)

    try:
        result = dump_repository(url, output, settings=settings, console=console)
    except GitDumpError as e:
        err_console.print(f"[red]Error: {escape(str(e))}[/red]", highlight=False)
        raise typer.Exit(code=1) from None

    console.print(
        f"[green]Done:[/green] {escape(result.request.url)} -> "
        f"{escape(str(result.request.output_dir))}",
        highlight=False,
    )
