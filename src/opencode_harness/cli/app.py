"""
Main Typer application for the harness CLI.

This module defines the root CLI application and registers all command groups.
"""

import logging
from typing import Annotated

import typer

from opencode_harness import __version__
from opencode_harness.cli.commands import memory, status
from opencode_harness.cli.output import print_info

app = typer.Typer(
    name="harness",
    help="Context tracking and project memory for OpenCode agents.",
    no_args_is_help=True,
    rich_markup_mode="rich",
    pretty_exceptions_enable=True,
    pretty_exceptions_show_locals=False,
)


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        print_info(f"harness version [green]{__version__}[/green]")
        raise typer.Exit()


# noinspection PyUnusedLocal
@app.callback()
def main_callback(
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
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Enable debug logging."),
    ] = False,
) -> None:
    """
    [bold blue]harness[/bold blue] - OpenCode context and memory tools
    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


app.add_typer(memory.app, name="memory")
app.command("status")(status.status)
