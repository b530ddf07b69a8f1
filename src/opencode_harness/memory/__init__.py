"""
OpenCode Harness Memory System.

Provides context tracking, session memory, and memory persistence.

Usage:
    from opencode_harness.memory import ContextTracker, SessionMemory

    tracker = ContextTracker()
    tracker.track_file("src/app.py", 1200)

    if tracker.get_state().needs_compaction:
        removed = tracker.prune()

    memory = SessionMemory("/path/to/project", session_id="abc123")
    memory.initialize()
    memory.add_decision("Use SQLite for the cache")
    print(memory.get_context_string())
    memory.persist()
"""

# Models
from opencode_harness.memory.models import (
    ContextItem,
    ContextItemType,
    ContextState,
    MemoryEntry,
    MemoryStore,
    MemoryType,
)

# Token estimation
from opencode_harness.memory.tokens import TokenCounter, estimate_tokens

# Context tracking
from opencode_harness.memory.context import ContextTracker, ContextTrackerConfig

# Store operations
from opencode_harness.memory.store import (
    add_entry,
    compress_session,
    create_entry,
    create_store,
    format_memories_for_context,
    get_important_memories,
    get_recent_memories,
    limit_entries,
    project_id_from_path,
    prune_old_memories,
    search_memories,
    select_context_memories,
)

# Storage
from opencode_harness.memory.storage import MemoryStorage

# Session memory
from opencode_harness.memory.manager import SessionMemory

__all__ = [
    # Models
    "ContextItem",
    "ContextItemType",
    "ContextState",
    "MemoryEntry",
    "MemoryStore",
    "MemoryType",
    # Tokens
    "TokenCounter",
    "estimate_tokens",
    # Context
    "ContextTracker",
    "ContextTrackerConfig",
    # Store
    "add_entry",
    "compress_session",
    "create_entry",
    "create_store",
    "format_memories_for_context",
    "get_important_memories",
    "get_recent_memories",
    "limit_entries",
    "project_id_from_path",
    "prune_old_memories",
    "search_memories",
    "select_context_memories",
    # Storage
    "MemoryStorage",
    # Session memory
    "SessionMemory",
]
