"""
harness memory - Inspect and maintain the project memory file.

Usage:
    harness memory list
    harness memory search "sqlite"
    harness memory context
    harness memory prune --days 14
    harness memory compress <session-id>
"""

from typing import Annotated

import typer
from rich.markup import escape
from rich.table import Table

from opencode_harness.cli.output import (
    console,
    print_error,
    print_info,
    print_success,
    print_warning,
    resolve_project,
)
from opencode_harness.memory import (
    MemoryStorage,
    MemoryType,
    compress_session,
    format_memories_for_context,
    get_recent_memories,
    prune_old_memories,
    search_memories,
    select_context_memories,
)

app = typer.Typer(
    name="memory",
    help="Project memory management.",
)

ProjectOption = Annotated[
    str | None,
    typer.Option(
        "--project",
        "-P",
        help="Project root. Defaults to the nearest directory with .opencode/.",
    ),
]


def _storage(project: str | None) -> MemoryStorage:
    return MemoryStorage(resolve_project(project))


@app.command("list")
def list_memory(
    project: ProjectOption = None,
    memory_type: Annotated[
        str | None,
        typer.Option(
            "--type",
            "-t",
            help="Filter by type: decision, finding, error, preference, context, summary.",
        ),
    ] = None,
    session: Annotated[
        str | None,
        typer.Option("--session", "-s", help="Only entries from this session."),
    ] = None,
    limit: Annotated[
        int,
        typer.Option("--limit", "-n", help="Maximum entries to show."),
    ] = 20,
) -> None:
    """List memories, newest first."""
    mem_type = None
    if memory_type:
        try:
            mem_type = MemoryType(memory_type)
        except ValueError:
            print_error(f"Invalid type: {memory_type}")
            console.print(f"[dim]Valid types: {', '.join(t.value for t in MemoryType)}[/dim]")
            raise typer.Exit(1)

    store = _storage(project).load()
    entries = get_recent_memories(store, len(store.entries))
    if mem_type is not None:
        entries = [e for e in entries if e.memory_type == mem_type]
    if session:
        entries = [e for e in entries if e.session_id == session]

    if not entries:
        print_warning("No memories found.")
        return

    table = Table(title=f"Memories for {store.project_id}")
    table.add_column("Created", style="dim")
    table.add_column("Type", style="cyan")
    table.add_column("Importance", justify="right")
    table.add_column("Session", style="dim")
    table.add_column("Content")

    for entry in entries[:limit]:
        table.add_row(
            entry.timestamp.strftime("%Y-%m-%d %H:%M"),
            entry.memory_type,
            f"{entry.importance:.2f}",
            entry.session_id[:8],
            escape(entry.content[:60] + "..." if len(entry.content) > 60 else entry.content),
        )

    console.print(table)
    console.print(f"\n[dim]Showing {min(limit, len(entries))} of {len(entries)} entries[/dim]")


@app.command()
def search(
    query: Annotated[str, typer.Argument(help="Text to look for.")],
    project: ProjectOption = None,
) -> None:
    """Search memories by content."""
    results = search_memories(_storage(project).load(), query)

    if not results:
        print_warning(f'No memories found for: "{query}"')
        return

    for entry in results:
        console.print(f"[cyan]{escape(f'[{entry.memory_type}]')}[/cyan] {escape(entry.content)}")
    console.print(f"\n[dim]{len(results)} results[/dim]")


@app.command()
def context(
    project: ProjectOption = None,
    max_tokens: Annotated[
        int,
        typer.Option("--max-tokens", "-m", help="Token budget for the block."),
    ] = 2000,
) -> None:
    """Print the memory block the agent would receive."""
    store = _storage(project).load()
    console.print(
        format_memories_for_context(select_context_memories(store), max_tokens),
        markup=False,
    )


@app.command()
def prune(
    project: ProjectOption = None,
    days: Annotated[
        float,
        typer.Option("--days", "-d", help="Retention period in days."),
    ] = 30,
) -> None:
    """Remove old memories. Entries above 0.8 importance are kept."""
    storage = _storage(project)
    store = storage.load()
    pruned = prune_old_memories(store, days)
    removed = len(store.entries) - len(pruned.entries)

    if removed == 0:
        print_info("Nothing to prune.")
        return

    if not storage.save(pruned):
        print_error(f"Could not write {storage.path}")
        raise typer.Exit(1)
    print_success(f"Removed {removed} memories older than {days:g} days")


@app.command()
def compress(
    session_id: Annotated[str, typer.Argument(help="Session to summarize.")],
    project: ProjectOption = None,
) -> None:
    """Replace a session's memories with one summary entry."""
    storage = _storage(project)
    store = storage.load()
    compressed = compress_session(store, session_id)

    if compressed is store:
        print_info(f"Session {session_id} has too few memories to compress.")
        return

    if not storage.save(compressed):
        print_error(f"Could not write {storage.path}")
        raise typer.Exit(1)
    print_success(f"Compressed session {session_id}")


@app.command()
def clear(
    project: ProjectOption = None,
    yes: Annotated[
        bool,
        typer.Option("--yes", "-y", help="Skip confirmation."),
    ] = False,
) -> None:
    """Delete the project's memory file."""
    storage = _storage(project)

    if not storage.exists():
        print_info("No memory file to delete.")
        return

    if not yes and not typer.confirm(f"Delete {storage.path}?"):
        raise typer.Exit(1)

    storage.delete()
    print_success("Memory cleared")
