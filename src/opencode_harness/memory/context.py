"""
Context tracking for OpenCode Harness.

Tracks which files, symbols, searches and commands the agent has looked at,
keeps a running token estimate, and signals when compaction is warranted.
"""

import logging
from collections.abc import Callable
from datetime import datetime

from pydantic import BaseModel, Field

from opencode_harness.memory.models import (
    ContextItem,
    ContextItemType,
    ContextState,
    utcnow,
)

logger = logging.getLogger(__name__)

# Base importance by kind
BASE_IMPORTANCE: dict[ContextItemType, float] = {
    ContextItemType.FILE: 0.7,
    ContextItemType.FUNCTION: 0.8,
    ContextItemType.CLASS: 0.8,
    ContextItemType.SEARCH: 0.5,
    ContextItemType.COMMAND: 0.6,
}

# Rough token cost by kind, used when no cost is supplied and when pruning
DEFAULT_TOKEN_ESTIMATES: dict[ContextItemType, int] = {
    ContextItemType.FILE: 500,
    ContextItemType.FUNCTION: 200,
    ContextItemType.CLASS: 400,
    ContextItemType.SEARCH: 100,
    ContextItemType.COMMAND: 150,
}

REPEAT_VIEW_BOOST = 0.1
COMMAND_KEY_LENGTH = 50


class ContextTrackerConfig(BaseModel):
    """Limits and decay settings for a tracker."""

    max_tokens: int = Field(default=100000, gt=0)
    compaction_threshold: float = Field(default=0.8, ge=0.0, le=1.0)
    importance_decay_rate: float = Field(default=0.95, ge=0.0, le=1.0)


def default_token_estimate(kind: ContextItemType | str) -> int:
    """Get the default token cost for an item kind."""
    return DEFAULT_TOKEN_ESTIMATES[ContextItemType(kind)]


class ContextTracker:
    """Tracks what the agent has seen during one session.

    Every item is keyed by its ``path``. Seeing the same key again refreshes
    it and raises its importance but costs no extra tokens. The tracker is
    process-local and never persisted.
    """

    def __init__(
        self,
        config: ContextTrackerConfig | None = None,
        clock: Callable[[], datetime] = utcnow,
    ):
        """Initialize the context tracker.

        Args:
            config: Token budget and decay settings.
            clock: Source of timestamps for viewed/compaction times.
        """
        self.config = config or ContextTrackerConfig()
        self._clock = clock
        self._state = ContextState()
        self._index: dict[str, int] = {}

    # =========================================================================
    # Tracking
    # =========================================================================

    def track_file(
        self, path: str, token_cost: int | None = None, summary: str | None = None
    ) -> ContextItem:
        """Record that a file was viewed.

        Args:
            path: File path.
            token_cost: Tokens the file content costs. Defaults to a per-kind estimate.
            summary: Optional short description.

        Returns:
            The tracked item.
        """
        return self._add(path, ContextItemType.FILE, token_cost, summary)

    def track_symbol(
        self,
        path: str,
        symbol_name: str,
        token_cost: int | None = None,
        kind: ContextItemType = ContextItemType.FUNCTION,
    ) -> ContextItem:
        """Record that a function or class was viewed.

        Args:
            path: File containing the symbol.
            symbol_name: Function or class name.
            token_cost: Tokens the symbol costs.
            kind: FUNCTION or CLASS.

        Returns:
            The tracked item.
        """
        return self._add(f"{path}#{symbol_name}", kind, token_cost)

    def track_search(self, query: str, result_count: int) -> ContextItem:
        """Record a search query."""
        return self._add(
            f"search:{query}",
            ContextItemType.SEARCH,
            None,
            f"{result_count} results",
        )

    def track_command(self, command: str, token_cost: int | None = None) -> ContextItem:
        """Record a command execution."""
        return self._add(
            f"cmd:{command[:COMMAND_KEY_LENGTH]}", ContextItemType.COMMAND, token_cost
        )

    def _add(
        self,
        path: str,
        kind: ContextItemType,
        token_cost: int | None,
        summary: str | None = None,
    ) -> ContextItem:
        kind = ContextItemType(kind)
        now = self._clock()
        position = self._index.get(path)

        if position is not None:
            existing = self._state.items[position]
            existing.viewed_at = now
            existing.importance = min(1.0, existing.importance + REPEAT_VIEW_BOOST)
            if summary:
                existing.summary = summary
            item = existing
        else:
            item = ContextItem(
                path=path,
                kind=kind,
                viewed_at=now,
                importance=BASE_IMPORTANCE[kind],
                summary=summary,
            )
            self._index[path] = len(self._state.items)
            self._state.items.append(item)
            if token_cost is None:
                token_cost = default_token_estimate(kind)
            self._state.total_tokens_estimate += max(0, token_cost)

        self._check_compaction_needed()
        return item.model_copy()

    # =========================================================================
    # Queries
    # =========================================================================

    def get_state(self) -> ContextState:
        """Get a snapshot of the current state."""
        return self._state.model_copy(deep=True)

    def has_seen(self, path: str) -> bool:
        """Check whether an exact key has been tracked."""
        return path in self._index

    def get_recent(self, limit: int = 10) -> list[ContextItem]:
        """Get items by most recent view, newest first."""
        items = sorted(self._state.items, key=lambda i: i.viewed_at, reverse=True)
        return [item.model_copy() for item in items[:limit]]

    def get_by_importance(self) -> list[ContextItem]:
        """Get items by importance, highest first. Ties keep tracking order."""
        items = sorted(self._state.items, key=lambda i: i.importance, reverse=True)
        return [item.model_copy() for item in items]

    def get_important(self) -> list[ContextItem]:
        """Alias of :meth:`get_by_importance`."""
        return self.get_by_importance()

    # =========================================================================
    # Maintenance
    # =========================================================================

    def apply_decay(self) -> None:
        """Scale every item's importance by the decay rate."""
        rate = self.config.importance_decay_rate
        for item in self._state.items:
            item.importance = item.importance * rate
        self._check_compaction_needed()

    def prune(self, importance_threshold: float = 0.1) -> list[ContextItem]:
        """Remove items whose importance is below the threshold.

        The token total is rebuilt from the per-kind default estimates of the
        remaining items, not from the costs originally supplied.

        Args:
            importance_threshold: Items strictly below this are dropped.

        Returns:
            The removed items.
        """
        kept = [i for i in self._state.items if i.importance >= importance_threshold]
        removed = [i for i in self._state.items if i.importance < importance_threshold]

        self._state.items = kept
        self._index = {item.path: position for position, item in enumerate(kept)}
        self._state.total_tokens_estimate = sum(
            default_token_estimate(item.kind) for item in kept
        )
        self._check_compaction_needed()

        if removed:
            logger.debug(f"Pruned {len(removed)} context items below {importance_threshold}")
        return removed

    def mark_compacted(self) -> None:
        """Acknowledge that an external compaction happened."""
        self._state.needs_compaction = False
        self._state.last_compaction_at = self._clock()

    def reset(self) -> None:
        """Forget everything tracked so far."""
        self._state = ContextState()
        self._index = {}

    @property
    def usage_percent(self) -> float:
        """Token estimate as a fraction of ``max_tokens``."""
        return self._state.total_tokens_estimate / self.config.max_tokens

    def _check_compaction_needed(self) -> None:
        self._state.needs_compaction = self.usage_percent >= self.config.compaction_threshold

    # =========================================================================
    # Formatting
    # =========================================================================

    def format_for_prompt(self) -> str:
        """Render recent and important items for the agent's prompt."""
        lines = [
            "## Context Navigator",
            "",
            "**Recently Viewed:**",
            *(f"- {item.kind}: {item.path}" for item in self.get_recent(5)),
            "",
            "**High Importance:**",
            *(
                f"- [{item.importance * 100:.0f}%] {item.path}"
                for item in self.get_by_importance()[:5]
            ),
        ]

        if self._state.needs_compaction:
            lines.extend(["", "⚠️ **Context approaching limit - consider compacting**"])

        return "\n".join(lines)
