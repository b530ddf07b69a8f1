"""
harness status - Show configuration and memory file status.
"""

from collections import Counter
from typing import Annotated

import typer
from rich.table import Table

from opencode_harness.cli.output import console, print_error, resolve_project
from opencode_harness.config import ConfigurationError, load_config
from opencode_harness.memory import MemoryStorage


def status(
    project: Annotated[
        str | None,
        typer.Option("--project", "-P", help="Project root."),
    ] = None,
) -> None:
    """Show configuration and memory status for a project."""
    project_path = resolve_project(project)

    try:
        config = load_config(project_path)
    except ConfigurationError as e:
        print_error(str(e))
        raise typer.Exit(1)

    storage = MemoryStorage(project_path)
    store = storage.load()

    table = Table(title="Harness Status", show_header=False)
    table.add_column("Setting", style="cyan")
    table.add_column("Value")

    table.add_row("Project", str(project_path))
    table.add_row("Project ID", store.project_id)
    table.add_row("Context budget", f"{config.context.max_tokens:,} tokens")
    table.add_row("Compaction at", f"{config.context.compaction_threshold:.0%}")
    table.add_row("Auto compact", "yes" if config.context.auto_compact else "no")
    table.add_row("Memory", "enabled" if config.memory.enabled else "disabled")
    table.add_row("Memory file", str(storage.path) if storage.exists() else "(none)")
    table.add_row("Entries", f"{len(store.entries)} / {config.memory.max_entries}")

    if store.entries:
        table.add_row("Last updated", store.last_updated.strftime("%Y-%m-%d %H:%M"))
        counts = Counter(str(e.memory_type) for e in store.entries)
        table.add_row("By type", ", ".join(f"{k}: {v}" for k, v in sorted(counts.items())))

    console.print(table)
