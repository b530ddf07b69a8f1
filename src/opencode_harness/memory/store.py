"""
Memory store operations for OpenCode Harness.

Every function here is pure: stores passed in are never modified, mutations
return a new ``MemoryStore`` with ``last_updated`` refreshed.
"""

import re
from collections.abc import Iterable
from datetime import datetime, timedelta
from typing import Any

from opencode_harness.memory.models import (
    MemoryEntry,
    MemoryStore,
    MemoryType,
    utcnow,
)
from opencode_harness.memory.tokens import estimate_tokens

# Entries above this importance survive age-based pruning
RETENTION_EXEMPT_IMPORTANCE = 0.8

# Sessions with fewer non-summary entries are not worth compressing
MIN_ENTRIES_TO_COMPRESS = 10
SUMMARY_IMPORTANCE = 0.9

CONTEXT_HEADER = "## Relevant Memories"
CONTEXT_HEADER_TOKENS = 10


def project_id_from_path(project_path: str) -> str:
    """Derive a stable project id from a filesystem path.

    Separators and colons become ``-``, leading and trailing dashes are
    trimmed and the result is lower-cased.

    Examples:
        >>> project_id_from_path("/home/me/Code/App")
        'home-me-code-app'
        >>> project_id_from_path("C:\\\\Work\\\\api")
        'c--work-api'
    """
    return re.sub(r"[\\/:]", "-", str(project_path)).strip("-").lower()


def create_store(project_id: str) -> MemoryStore:
    """Create an empty memory store."""
    return MemoryStore(project_id=project_id, last_updated=utcnow())


def create_entry(
    session_id: str,
    memory_type: MemoryType | str,
    content: str,
    importance: float = 0.5,
    metadata: dict[str, Any] | None = None,
) -> MemoryEntry:
    """Create a new memory entry with a fresh id and timestamp.

    Importance is clamped to [0, 1].
    """
    return MemoryEntry(
        session_id=session_id,
        memory_type=memory_type,
        content=content,
        importance=importance,
        metadata=metadata,
    )


def _replace_entries(store: MemoryStore, entries: list[MemoryEntry]) -> MemoryStore:
    return store.model_copy(update={"entries": entries, "last_updated": utcnow()})


def add_entry(store: MemoryStore, entry: MemoryEntry) -> MemoryStore:
    """Return a new store with ``entry`` appended."""
    return _replace_entries(store, [*store.entries, entry])


def get_recent_memories(store: MemoryStore, limit: int = 50) -> list[MemoryEntry]:
    """Get entries newest first."""
    return sorted(store.entries, key=lambda e: e.timestamp, reverse=True)[:limit]


def get_important_memories(store: MemoryStore, threshold: float = 0.7) -> list[MemoryEntry]:
    """Get entries with importance >= threshold, most important first."""
    important = [e for e in store.entries if e.importance >= threshold]
    return sorted(important, key=lambda e: e.importance, reverse=True)


def prune_old_memories(
    store: MemoryStore,
    max_age_days: float = 30,
    now: datetime | None = None,
) -> MemoryStore:
    """Drop entries older than the retention period.

    Entries with importance above 0.8 are kept regardless of age.
    """
    cutoff = (now or utcnow()) - timedelta(days=max_age_days)
    entries = [
        e
        for e in store.entries
        if e.timestamp > cutoff or e.importance > RETENTION_EXEMPT_IMPORTANCE
    ]
    return _replace_entries(store, entries)


def limit_entries(store: MemoryStore, max_entries: int) -> MemoryStore:
    """Keep at most ``max_entries`` entries, dropping the oldest first.

    Entries with equal timestamps are dropped in insertion order. Surviving
    entries keep their insertion order.
    """
    entries = store.entries
    if len(entries) <= max_entries:
        return store

    by_age = sorted(range(len(entries)), key=lambda i: (entries[i].timestamp, i))
    keep = set(by_age[len(entries) - max(0, max_entries) :])
    return _replace_entries(store, [e for i, e in enumerate(entries) if i in keep])


def compress_session(store: MemoryStore, session_id: str) -> MemoryStore:
    """Replace a session's entries with a single summary entry.

    Only decisions and findings make it into the summary; every other entry
    of the session is dropped. Sessions with fewer than 10 non-summary
    entries are left alone.
    """
    session_entries = [
        e
        for e in store.entries
        if e.session_id == session_id and e.memory_type != MemoryType.SUMMARY
    ]

    if len(session_entries) < MIN_ENTRIES_TO_COMPRESS:
        return store

    decisions = [e.content for e in session_entries if e.memory_type == MemoryType.DECISION]
    findings = [e.content for e in session_entries if e.memory_type == MemoryType.FINDING]

    sections = []
    if decisions:
        sections.append(f"Decisions: {'; '.join(decisions)}")
    if findings:
        sections.append(f"Findings: {'; '.join(findings)}")

    summary = create_entry(
        session_id,
        MemoryType.SUMMARY,
        "\n".join(sections),
        SUMMARY_IMPORTANCE,
    )

    others = [e for e in store.entries if e.session_id != session_id]
    return _replace_entries(store, [*others, summary])


def search_memories(store: MemoryStore, query: str) -> list[MemoryEntry]:
    """Case-insensitive substring search over entry content."""
    needle = query.lower()
    return [e for e in store.entries if needle in e.content.lower()]


def select_context_memories(
    store: MemoryStore,
    threshold: float = 0.7,
    recent_limit: int = 20,
) -> list[MemoryEntry]:
    """Important entries followed by recent ones, deduplicated by id."""
    seen: set[str] = set()
    selected = []
    for entry in [
        *get_important_memories(store, threshold),
        *get_recent_memories(store, recent_limit),
    ]:
        if entry.id in seen:
            continue
        seen.add(entry.id)
        selected.append(entry)
    return selected


def format_memories_for_context(
    entries: Iterable[MemoryEntry],
    max_tokens: int = 2000,
) -> str:
    """Render entries as a bullet list that fits a token budget.

    Entries are rendered in the order given. Rendering stops at the first
    entry that would push the running estimate past ``max_tokens``.
    """
    lines = [CONTEXT_HEADER]
    used = CONTEXT_HEADER_TOKENS

    for entry in entries:
        line = f"- [{entry.memory_type}] {entry.content}"
        cost = estimate_tokens(line)
        if used + cost > max_tokens:
            break
        lines.append(line)
        used += cost

    return "\n".join(lines)
