"""
Memory models for OpenCode Harness.

Defines data structures for tracked context items and persisted memory entries.
"""

import uuid
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

MEMORY_STORE_VERSION = 1


def utcnow() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


def clamp_importance(value: float) -> float:
    """Clamp an importance score into [0, 1]."""
    return max(0.0, min(1.0, float(value)))


def _as_aware(value: datetime) -> datetime:
    # Naive datetimes are treated as local time
    if value.tzinfo is None:
        return value.astimezone(timezone.utc)
    return value


# =============================================================================
# Context Tracking
# =============================================================================


class ContextItemType(str, Enum):
    """Kinds of things the agent can look at."""

    FILE = "file"
    FUNCTION = "function"
    CLASS = "class"
    SEARCH = "search"
    COMMAND = "command"


class ContextItem(BaseModel):
    """One observed unit of work context.

    ``path`` is the identifying key: a file path, ``<file>#<symbol>``,
    ``search:<query>`` or ``cmd:<command prefix>``.
    """

    model_config = ConfigDict(use_enum_values=True)

    path: str
    kind: ContextItemType
    viewed_at: datetime = Field(default_factory=utcnow)
    importance: float = 0.5
    summary: str | None = None

    @field_validator("importance")
    @classmethod
    def _clamp(cls, value: float) -> float:
        return clamp_importance(value)


class ContextState(BaseModel):
    """Aggregate view of everything tracked in a session."""

    items: list[ContextItem] = Field(default_factory=list)
    total_tokens_estimate: int = 0
    needs_compaction: bool = False
    last_compaction_at: datetime | None = None


# =============================================================================
# Persisted Memory
# =============================================================================


class MemoryType(str, Enum):
    """Types of memory entries."""

    DECISION = "decision"  # User/agent decision made
    FINDING = "finding"  # Code discovery or insight
    ERROR = "error"  # Error encountered and its resolution
    PREFERENCE = "preference"  # User preference learned
    CONTEXT = "context"  # Context worth carrying across sessions
    SUMMARY = "summary"  # Compressed older memories


class MemoryEntry(BaseModel):
    """A single piece of learned information.

    Field aliases match the on-disk JSON layout (``sessionId``, ``type``).
    """

    model_config = ConfigDict(populate_by_name=True, use_enum_values=True)

    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    timestamp: datetime = Field(default_factory=utcnow)
    session_id: str = Field(alias="sessionId")
    memory_type: MemoryType = Field(alias="type")
    content: str
    importance: float = 0.5
    metadata: dict[str, Any] | None = None

    @field_validator("importance")
    @classmethod
    def _clamp(cls, value: float) -> float:
        return clamp_importance(value)

    @field_validator("timestamp")
    @classmethod
    def _aware(cls, value: datetime) -> datetime:
        return _as_aware(value)


class MemoryStore(BaseModel):
    """Durable memory collection for one project.

    Treated as an immutable snapshot: the functions in
    ``opencode_harness.memory.store`` return new instances.
    """

    model_config = ConfigDict(populate_by_name=True)

    version: Literal[1] = MEMORY_STORE_VERSION
    project_id: str = Field(alias="projectId")
    last_updated: datetime = Field(default_factory=utcnow, alias="lastUpdated")
    entries: list[MemoryEntry] = Field(default_factory=list)

    @field_validator("last_updated")
    @classmethod
    def _aware(cls, value: datetime) -> datetime:
        return _as_aware(value)

    def to_json_dict(self) -> dict[str, Any]:
        """Serialize using the on-disk key names."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)
