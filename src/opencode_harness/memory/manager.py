"""
Session memory for OpenCode Harness.

Owns the project's memory store for the duration of one session and decides
when it needs to be written back.
"""

import logging
from pathlib import Path
from typing import Any

from opencode_harness.memory.models import MemoryEntry, MemoryStore, MemoryType
from opencode_harness.memory.storage import MemoryStorage
from opencode_harness.memory.store import (
    add_entry,
    compress_session,
    create_entry,
    create_store,
    format_memories_for_context,
    limit_entries,
    prune_old_memories,
    search_memories,
    select_context_memories,
)

logger = logging.getLogger(__name__)


class SessionMemory:
    """Session-bound owner of a project's memory store.

    Provides:
    - Loading with age pruning and an entry cap
    - Typed entry helpers with sensible default importance
    - Retrieval formatted for the agent's context
    - Dirty-flagged persistence
    """

    def __init__(
        self,
        project_path: Path | str,
        session_id: str,
        prune_after_days: float = 30,
        max_entries: int = 1000,
        storage: MemoryStorage | None = None,
    ):
        """Initialize session memory.

        Args:
            project_path: Project root the memory belongs to.
            session_id: Id stamped on every entry added in this session.
            prune_after_days: Retention period applied on load.
            max_entries: Cap on stored entries.
            storage: Storage backend. Defaults to the project's memory file.
        """
        self.session_id = session_id
        self.prune_after_days = prune_after_days
        self.max_entries = max_entries
        self.storage = storage or MemoryStorage(project_path)

        self._store: MemoryStore | None = None
        self._dirty = False

    @property
    def initialized(self) -> bool:
        """Whether a store has been loaded."""
        return self._store is not None

    @property
    def dirty(self) -> bool:
        """Whether there are changes not yet persisted."""
        return self._dirty

    @property
    def store(self) -> MemoryStore:
        """Get the current store snapshot, loading it if needed."""
        if self._store is None:
            self.initialize()
        return self._store  # type: ignore[return-value]

    def initialize(self) -> MemoryStore:
        """Load the store from disk and apply retention.

        Only the first call reads the file; later calls keep the in-memory
        store and any entries added since.

        Returns:
            The current store.
        """
        if self._store is not None:
            return self._store

        store = self.storage.load()
        store = prune_old_memories(store, self.prune_after_days)
        store = limit_entries(store, self.max_entries)

        self._store = store
        self._dirty = True
        logger.info(f"Loaded {len(store.entries)} memories for {store.project_id}")
        return store

    def persist(self) -> bool:
        """Write the store if anything changed since the last write.

        Returns:
            True if the store is clean afterwards.
        """
        if self._store is None or not self._dirty:
            return True

        if self.storage.save(self._store):
            self._dirty = False
            return True
        return False

    def reset(self) -> None:
        """Replace the store with an empty one."""
        self._store = create_store(self.storage.project_id)
        self._dirty = True

    # =========================================================================
    # Adding Memories
    # =========================================================================

    def add(
        self,
        memory_type: MemoryType | str,
        content: str,
        importance: float = 0.5,
        metadata: dict[str, Any] | None = None,
    ) -> MemoryEntry:
        """Add an entry for this session.

        Args:
            memory_type: Entry kind.
            content: Free text.
            importance: Score in [0, 1]; clamped.
            metadata: Optional extra data.

        Returns:
            The created entry.
        """
        entry = create_entry(self.session_id, memory_type, content, importance, metadata)
        self._store = limit_entries(add_entry(self.store, entry), self.max_entries)
        self._dirty = True
        return entry

    def add_decision(self, content: str, importance: float = 0.8) -> MemoryEntry:
        """Add a decision memory."""
        return self.add(MemoryType.DECISION, content, importance)

    def add_finding(self, content: str, importance: float = 0.6) -> MemoryEntry:
        """Add a finding memory."""
        return self.add(MemoryType.FINDING, content, importance)

    def add_error(self, content: str, importance: float = 0.9) -> MemoryEntry:
        """Add an error memory."""
        return self.add(MemoryType.ERROR, content, importance)

    def add_preference(self, content: str, importance: float = 0.7) -> MemoryEntry:
        """Add a preference memory."""
        return self.add(MemoryType.PREFERENCE, content, importance)

    def add_context(self, content: str, importance: float = 0.5) -> MemoryEntry:
        """Add a context memory."""
        return self.add(MemoryType.CONTEXT, content, importance)

    # =========================================================================
    # Retrieval
    # =========================================================================

    def get_context_string(self, max_tokens: int = 2000) -> str:
        """Get important and recent memories formatted for the agent."""
        return format_memories_for_context(select_context_memories(self.store), max_tokens)

    def get_session_memories(self) -> list[MemoryEntry]:
        """Get every entry recorded by this session."""
        return [e for e in self.store.entries if e.session_id == self.session_id]

    def search_memories(self, query: str) -> list[MemoryEntry]:
        """Search all memories by content."""
        return search_memories(self.store, query)

    def compress(self) -> bool:
        """Compress this session's entries into a summary.

        Returns:
            True if the session was compressed.
        """
        compressed = compress_session(self.store, self.session_id)
        if compressed is self._store:
            return False

        self._store = compressed
        self._dirty = True
        logger.info(f"Compressed memories of session {self.session_id}")
        return True
