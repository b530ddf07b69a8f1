"""
Output formatting utilities for the CLI.

Provides consistent output formatting across all CLI commands.
"""

from pathlib import Path

from rich.console import Console

from opencode_harness.storage.paths import expand_path, find_project_root

# Global console instance
console = Console()


def print_success(message: str) -> None:
    """Print a success message."""
    console.print(f"[green]✓[/green] {message}")


def print_error(message: str) -> None:
    """Print an error message."""
    console.print(f"[red]✗[/red] {message}")


def print_warning(message: str) -> None:
    """Print a warning message."""
    console.print(f"[yellow]![/yellow] {message}")


def print_info(message: str) -> None:
    """Print an info message."""
    console.print(f"[blue]i[/blue] {message}")


def resolve_project(project: str | None) -> Path:
    """Resolve the --project option, searching upwards from cwd if omitted."""
    if project:
        return expand_path(project)
    return find_project_root() or Path.cwd()
