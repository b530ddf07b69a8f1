"""
Harness session for OpenCode Harness.

One ``HarnessSession`` owns the context tracker and the session memory for a
single agent session. Hosts running several sessions create one per session;
nothing is shared between them except the memory file on disk.
"""

import logging
import uuid
from pathlib import Path
from typing import Any

from opencode_harness.config.loader import load_config
from opencode_harness.config.schema import HarnessConfig
from opencode_harness.memory.context import ContextTracker
from opencode_harness.memory.manager import SessionMemory
from opencode_harness.memory.models import ContextItem
from opencode_harness.memory.tokens import TokenCounter, estimate_tokens
from opencode_harness.plugin.events import (
    Command,
    FileRead,
    Search,
    SessionEvent,
    SessionEventType,
    ToolEvent,
    decode_session_event,
    decode_tool_event,
)
from opencode_harness.plugin.navigator import ContextNavTool
from opencode_harness.tools.base import Tool

logger = logging.getLogger(__name__)


class HarnessSession:
    """Session-scoped state handed to every plugin handler.

    Provides:
    - Translation of tool executions into context tracking
    - Importance decay and optional auto-pruning per tool event
    - Memory load on session start, flush on idle and end
    - The combined context block for the agent's prompt
    """

    def __init__(
        self,
        project_path: Path | str,
        session_id: str | None = None,
        config: HarnessConfig | None = None,
    ):
        """Initialize the session.

        Args:
            project_path: Project root the agent works in.
            session_id: Session id. A random one is generated if omitted.
            config: Harness configuration. Defaults to built-in values.
        """
        self.project_path = Path(project_path)
        self.session_id = session_id or uuid.uuid4().hex
        self.config = config or HarnessConfig()

        self.tracker = ContextTracker(self.config.context.tracker_config())
        self.memory: SessionMemory | None = None
        if self.config.memory.enabled:
            self.memory = SessionMemory(
                self.project_path,
                self.session_id,
                prune_after_days=self.config.memory.prune_after_days,
                max_entries=self.config.memory.max_entries,
            )

        self._counter: TokenCounter | None = None
        if self.config.context.token_counting == "tiktoken":
            self._counter = TokenCounter()

    @classmethod
    def from_project(
        cls, project_path: Path | str, session_id: str | None = None
    ) -> "HarnessSession":
        """Create a session using the project's configuration file.

        Raises:
            ConfigurationError: If the project configuration is invalid.
        """
        return cls(project_path, session_id, load_config(project_path))

    def count_tokens(self, text: str) -> int:
        """Count tokens using the configured method."""
        if self._counter is not None:
            return self._counter.count(text)
        return estimate_tokens(text)

    # =========================================================================
    # Session Events
    # =========================================================================

    async def on_event(self, payload: dict[str, Any]) -> SessionEvent | None:
        """Handle a raw session event payload.

        Returns:
            The decoded event, or None if it was not a handled type.
        """
        event = decode_session_event(payload)
        if event is not None:
            await self.handle_event(event)
        return event

    async def handle_event(self, event: SessionEvent) -> None:
        """React to a session lifecycle event."""
        if self.memory is None:
            return

        if event.type == SessionEventType.START:
            self.memory.initialize()
        elif event.type == SessionEventType.IDLE:
            self.flush()
        elif event.type == SessionEventType.END:
            if self.config.memory.compress_on_end:
                self.memory.compress()
            self.flush()

    def flush(self) -> bool:
        """Persist memory if it changed.

        Returns:
            True if memory is clean afterwards (or disabled).
        """
        if self.memory is None:
            return True

        if not self.memory.persist():
            logger.warning(f"Memory for session {self.session_id} not saved, will retry")
            return False
        return True

    # =========================================================================
    # Tool Events
    # =========================================================================

    async def on_tool_executed(
        self, tool_name: str, args: dict[str, Any] | None, result: str | None
    ) -> ContextItem | None:
        """Handle a raw post-execution tool record.

        Returns:
            The tracked item, or None if the tool is not tracked.
        """
        event = decode_tool_event(tool_name, args, result)
        if event is None:
            return None
        return self.handle_tool_event(event)

    def handle_tool_event(self, event: ToolEvent) -> ContextItem:
        """Track a decoded tool event.

        Existing items decay before the new observation is recorded, so the
        item just seen keeps its full importance.

        Returns:
            The tracked item.
        """
        self.tracker.apply_decay()

        if isinstance(event, FileRead):
            item = self.tracker.track_file(event.path, self.count_tokens(event.result))
        elif isinstance(event, Search):
            item = self.tracker.track_search(event.query, event.result_count)
        elif isinstance(event, Command):
            item = self.tracker.track_command(event.command, self.count_tokens(event.result))
        else:
            raise TypeError(f"Unsupported tool event: {event!r}")

        if self.config.context.auto_compact:
            self.auto_compact()

        return item

    def auto_compact(self) -> bool:
        """Prune low-importance items when the tracker asks for compaction.

        Nothing happens unless compaction is needed and at least one item is
        below ``context.prune_threshold``; the compaction signal stays raised
        for the agent otherwise.

        Returns:
            True if items were pruned.
        """
        state = self.tracker.get_state()
        threshold = self.config.context.prune_threshold
        if not state.needs_compaction:
            return False
        if all(item.importance >= threshold for item in state.items):
            logger.debug(f"Compaction needed but no item is below {threshold}")
            return False

        usage = self.tracker.usage_percent
        removed = self.tracker.prune(threshold)
        self.tracker.mark_compacted()
        logger.info(
            f"Context at {usage:.0%} of budget, pruned {len(removed)} low-importance items"
        )
        return True

    # =========================================================================
    # Agent Surface
    # =========================================================================

    def get_prompt_context(self) -> str:
        """Build the situational context block for the agent."""
        sections = [self.tracker.format_for_prompt()]
        if self.memory is not None:
            sections.append(
                self.memory.get_context_string(self.config.memory.context_max_tokens)
            )
        return "\n\n".join(sections)

    def get_tools(self) -> list[Tool]:
        """Get the tools this session exposes to the agent."""
        return [ContextNavTool(self)]
