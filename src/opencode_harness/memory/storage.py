"""
Memory storage for OpenCode Harness.

Persists a project's ``MemoryStore`` as a single JSON document. Loading and
saving never raise: failures are logged and the caller carries on with an
in-memory store.
"""

import json
import logging
from pathlib import Path

from opencode_harness.memory.models import MemoryStore
from opencode_harness.memory.store import create_store, project_id_from_path
from opencode_harness.storage.paths import get_memory_path

logger = logging.getLogger(__name__)


class MemoryStorage:
    """File-based storage for one project's memory.

    Concurrent writers are not coordinated; the last write wins.
    """

    def __init__(self, project_path: Path | str, memory_path: Path | str | None = None):
        """Initialize the memory storage.

        Args:
            project_path: Project root the memory belongs to.
            memory_path: Override for the memory file location.
        """
        self.project_path = str(project_path)
        self.project_id = project_id_from_path(self.project_path)
        self.path = Path(memory_path) if memory_path else get_memory_path(project_path)

    def exists(self) -> bool:
        """Check whether a memory file has been written."""
        return self.path.is_file()

    def load(self) -> MemoryStore:
        """Load the store, falling back to an empty one.

        Returns:
            The persisted store, or a fresh store if the file is missing,
            unreadable, corrupt, or written with an unknown version.
        """
        if not self.exists():
            return create_store(self.project_id)

        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
            return MemoryStore.model_validate(data)
        # ValueError covers JSONDecodeError, UnicodeDecodeError and ValidationError
        except (OSError, ValueError, RecursionError) as e:
            logger.warning(f"Error loading memory from {self.path}, starting fresh: {e}")
            return create_store(self.project_id)

    def save(self, store: MemoryStore) -> bool:
        """Write the store to disk.

        Args:
            store: Store to persist.

        Returns:
            True if written, False if the write failed.
        """
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_text(
                json.dumps(store.to_json_dict(), indent=2), encoding="utf-8"
            )
        except (OSError, TypeError, ValueError) as e:
            logger.error(f"Error saving memory to {self.path}: {e}")
            return False

        logger.debug(f"Saved {len(store.entries)} memories to {self.path}")
        return True

    def delete(self) -> bool:
        """Delete the memory file.

        Returns:
            True if deleted, False if not found.
        """
        if self.exists():
            self.path.unlink()
            return True
        return False
